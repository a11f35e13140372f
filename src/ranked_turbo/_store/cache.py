# Area: Store
"""
ranked_turbo._store.cache — Local rating cache
==============================================

In-memory identity -> last-known rating. Filled lazily from the store
client and overwritten optimistically by settlement, so that reads
during a match never wait on the network.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Dict, Iterable, Optional, Set

from .._config import BOT_IDENTITY
from .client import RatingStoreClient

logger = logging.getLogger("ranked_turbo.cache")


class RatingCache:
    """Identity-keyed rating cache backed by a ``RatingStoreClient``."""

    def __init__(self, store: RatingStoreClient):
        self._store = store
        self._values: Dict[str, int] = {}
        self._in_flight: Set[str] = set()

    def get(self, identity: str) -> Optional[int]:
        return self._values.get(identity)

    def set(self, identity: str, value: int) -> None:
        self._values[identity] = value

    def snapshot(self) -> Dict[str, int]:
        """Copy of every cached rating."""
        return dict(self._values)

    def __contains__(self, identity: str) -> bool:
        return identity in self._values

    def __len__(self) -> int:
        return len(self._values)

    async def warm(self, identities: Iterable[str]) -> None:
        """
        Fetch (or initialize) every identity not yet cached.

        Identities already cached or already being fetched are skipped,
        so repeated calls are cheap. Fetches run concurrently.
        """
        todo = []
        for identity in identities:
            if identity == BOT_IDENTITY or identity in self._values:
                continue
            if identity in self._in_flight or identity in todo:
                continue
            todo.append(identity)

        if not todo:
            return

        logger.info(f"Warming cache for {len(todo)} identities")
        self._in_flight.update(todo)
        try:
            await asyncio.gather(*(self._fill(identity) for identity in todo))
        finally:
            self._in_flight.difference_update(todo)

    async def fetch(self, identity: str) -> int:
        """Return the cached rating, filling it from the store if absent."""
        cached = self._values.get(identity)
        if cached is not None:
            return cached
        return await self._fill(identity)

    async def _fill(self, identity: str) -> int:
        value = await self._store.get_or_init(identity)
        # A settlement may have written while the fetch was in flight.
        if identity not in self._values:
            self._values[identity] = value
        return self._values[identity]
