# Area: Host Integration
"""
ranked_turbo.runner — Match runner
==================================

Composition root the game host talks to. The host forwards every
engine event it receives to ``dispatch``; the runner validates it,
follows game state transitions and hands match signals to the current
``MatchSession``.

State handling:
    CUSTOM_GAME_SETUP  new session, warm the rating cache
    PRE_GAME           new session if the current one already has a
                       winner; reset opt-ins, warm, schedule match start
    match start        after ``push_delay_seconds`` push ``mmr_current``
    POST_GAME          logged; the session stays alive so deferred
                       settlement and verification can finish
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from ._config import build_config, validate_config
from ._match.enums import HostGameState
from ._match.session import MatchSession
from ._shared.logging_config import log_structured_error, setup_logging
from ._store.client import RatingStoreClient
from .errors import InvalidSignalError
from .host import MatchHost, Scheduler
from .signals import KNOWN_EVENTS, StateChanged, parse_signal

logger = logging.getLogger("ranked_turbo.runner")


def game_state_name(state: int) -> str:
    """Readable label for a raw engine game state (for logs only)."""
    try:
        return HostGameState(state).name
    except ValueError:
        return f"UNKNOWN({state})"


class MatchRunner:
    """
    Receives engine events and drives one ``MatchSession`` per match.

    Args:
        config: Pipeline config; missing tunables take their defaults
        host: Engine and presentation access
        scheduler: The host's event loop
        store: Optional pre-built store client (built from config if None)
    """

    def __init__(
        self,
        config: Dict[str, Any],
        host: MatchHost,
        scheduler: Scheduler,
        store: Optional[RatingStoreClient] = None,
    ):
        self.config = build_config(config)

        setup_logging(
            log_file_path=self.config.get("log_file"),
            level=self.config.get("log_level", logging.INFO),
        )
        validate_config(self.config)

        self.host = host
        self.scheduler = scheduler
        self.store = store or RatingStoreClient(
            base_url=self.config["store_base_url"],
            baseline=self.config["baseline"],
            timeout=self.config["http_timeout_seconds"],
        )
        self.session: Optional[MatchSession] = None
        self._matches_started = 0

    # ──────────────────────────────────────────────────────────────
    # Inbound
    # ──────────────────────────────────────────────────────────────
    def dispatch(self, event: str, payload: Optional[Dict[str, Any]] = None) -> Optional[Any]:
        """
        Validate and route one engine event.

        Never raises: invalid payloads and handler failures are logged
        so that a bad event cannot stop the match.
        """
        if event not in KNOWN_EVENTS:
            logger.debug(f"Skipped (unknown event '{event}')")
            return None

        try:
            signal = parse_signal(event, payload)
        except InvalidSignalError as e:
            log_structured_error(e)
            return None

        try:
            if isinstance(signal, StateChanged):
                return self.on_state_change(signal.state)
            return self.current_session().handle(signal)
        except Exception as e:
            logger.error(f"Router error on {event}: {e}", exc_info=True)
            return None

    def on_state_change(self, state: int) -> None:
        logger.info(f"[STATE] -> {game_state_name(state)} ({state})")

        if state == HostGameState.CUSTOM_GAME_SETUP:
            session = self.start_session()
            session.warm_cache()

        elif state == HostGameState.PRE_GAME:
            session = self.current_session()
            if session.detector.state_machine.is_decided:
                # No setup since the previous match was decided.
                session = self.start_session()
            session.opt_in.reset()
            session.warm_cache()
            self.scheduler.call_later(self.config["start_delay_seconds"], self.start_game, session)

        elif state == HostGameState.POST_GAME:
            session = self.session
            if session is not None:
                logger.info(
                    f"Match {session.match_number} over, detector={session.detector.state.value}"
                )

    # ──────────────────────────────────────────────────────────────
    # Session lifecycle
    # ──────────────────────────────────────────────────────────────
    def start_session(self) -> MatchSession:
        """Replace the current session with a fresh one."""
        if self.session is not None:
            self.session.close()
        self._matches_started += 1
        self.session = MatchSession(
            config=self.config,
            host=self.host,
            scheduler=self.scheduler,
            store=self.store,
            match_number=self._matches_started,
        )
        logger.info(f"Match {self._matches_started} session started")
        return self.session

    def current_session(self) -> MatchSession:
        """The active session; one is started if the host skipped setup."""
        if self.session is None or self.session.closed:
            return self.start_session()
        return self.session

    def start_game(self, session: MatchSession) -> None:
        if session.closed:
            return
        logger.info("[ANNOUNCEMENT] Game starting!")
        self.scheduler.call_later(
            self.config["push_delay_seconds"], session.push_current_ratings,
        )

    async def aclose(self) -> None:
        """Close the current session and the store connection."""
        if self.session is not None:
            self.session.close()
        await self.store.aclose()
        logger.info("Match runner stopped.")
