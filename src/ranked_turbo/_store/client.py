# Area: Store
"""
ranked_turbo._store.client — Remote rating store client
=======================================================

Async GET/PUT of one rating number per player identity against an
HTTP key-value store laid out as ``{base}/mmr/{identity}.json``.

Every GET carries no-cache headers and a unique ``cb`` query token so
that no intermediary can answer with a stale value. Store failures never
surface as exceptions: reads degrade to "not found" and writes to a
logged ``False``. Nothing is retried.
"""

from __future__ import annotations

import json
import logging
import uuid
from typing import Optional

import httpx

from .._config import BOT_IDENTITY
from ..errors import MalformedRatingError, StoreUnavailableError

logger = logging.getLogger("ranked_turbo.store")

NO_CACHE_HEADERS = {
    "Accept": "application/json",
    "Cache-Control": "no-cache, no-store, max-age=0, must-revalidate",
    "Pragma": "no-cache",
    "If-Modified-Since": "Mon, 01 Jan 1990 00:00:00 GMT",
}


def parse_rating(identity: str, body: str) -> Optional[int]:
    """
    Parse a store response body.

    Returns None for a JSON ``null`` (no record yet).

    Raises:
        MalformedRatingError: If the body is present but not a number
    """
    try:
        value = json.loads(body)
    except ValueError:
        raise MalformedRatingError(identity, body)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise MalformedRatingError(identity, body)
    if isinstance(value, float):
        if value != value or value in (float("inf"), float("-inf")):
            raise MalformedRatingError(identity, body)
        return int(round(value))
    return value


class RatingStoreClient:
    """
    HTTP client for the remote rating store.

    Args:
        base_url: Store root, e.g. "https://example.firebaseio.com"
        baseline: Rating assigned to identities with no record
        timeout: Per-request timeout in seconds
        transport: Optional httpx transport (tests use MockTransport)
    """

    def __init__(
        self,
        base_url: str,
        baseline: int = 500,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.baseline = baseline
        self._client = httpx.AsyncClient(
            headers=NO_CACHE_HEADERS,
            timeout=timeout,
            transport=transport,
        )
        self._reported_working = False

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "RatingStoreClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    def record_url(self, identity: str) -> str:
        return f"{self.base_url}/mmr/{identity}.json"

    @staticmethod
    def cache_bust_token() -> str:
        """Unique per-call query token."""
        return uuid.uuid4().hex

    # ──────────────────────────────────────────────────────────────
    # Public contract
    # ──────────────────────────────────────────────────────────────
    async def read(self, identity: str) -> Optional[int]:
        """
        Read the stored rating for ``identity``.

        Returns None when the record is absent, malformed, or the store
        could not be reached. The bot identity returns the baseline
        without a request.
        """
        if identity == BOT_IDENTITY:
            return self.baseline

        try:
            response = await self._send(
                "GET", self.record_url(identity),
                params={"cb": self.cache_bust_token()},
            )
        except StoreUnavailableError as e:
            logger.debug(f"Read {identity} failed: {e}")
            return None

        try:
            return parse_rating(identity, response.text)
        except MalformedRatingError as e:
            logger.warning(str(e), extra={"identity": identity})
            return None

    async def write(self, identity: str, value: int) -> bool:
        """
        PUT ``value`` as the rating for ``identity``.

        Returns True on any 2xx. Failures are logged and return False.
        The bot identity is never written.
        """
        if identity == BOT_IDENTITY:
            logger.debug("Skipping write for bot identity")
            return False

        try:
            await self._send(
                "PUT", self.record_url(identity),
                content=json.dumps(int(value)),
                headers={"Content-Type": "application/json"},
            )
        except StoreUnavailableError as e:
            logger.warning(
                f"Write {identity}={value} dropped: {e}",
                extra={"identity": identity},
            )
            return False
        return True

    async def get_or_init(self, identity: str) -> int:
        """
        Return the stored rating, initializing it to the baseline first
        if the store has no usable value.
        """
        if identity == BOT_IDENTITY:
            return self.baseline

        value = await self.read(identity)
        if value is not None:
            return value

        logger.info(
            f"No rating for {identity}, initializing to {self.baseline}",
            extra={"identity": identity},
        )
        await self.write(identity, self.baseline)
        return self.baseline

    # ──────────────────────────────────────────────────────────────
    # Transport
    # ──────────────────────────────────────────────────────────────
    async def _send(self, method: str, url: str, **kwargs) -> httpx.Response:
        """Send one request; any transport error or non-2xx raises."""
        try:
            response = await self._client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            self._report(False)
            raise StoreUnavailableError(method, url, reason=str(e) or e.__class__.__name__)

        if not response.is_success:
            self._report(False)
            raise StoreUnavailableError(method, url, status_code=response.status_code)

        self._report(True)
        return response

    def _report(self, ok: bool) -> None:
        if ok and not self._reported_working:
            logger.info("[STORE] Rating store working")
            self._reported_working = True
        if not ok:
            logger.warning("[STORE] Rating store not working")
