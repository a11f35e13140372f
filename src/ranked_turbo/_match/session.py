# Area: Match
"""Match session — per-match wiring of cache, opt-ins, detector and settlement."""

import logging
from typing import Any, Dict, List, Optional

from .._store.cache import RatingCache
from .._store.client import RatingStoreClient
from ..host import MatchHost, Scheduler
from ..signals import Signal
from .detector import WinDecisionDetector
from .opt_in import OptInTracker
from .publisher import CURRENT_RATING_EVENT, ResultPublisher
from .settlement import SettlementEngine
from .signal_router import SignalRouter
from .snapshot import SettlementSnapshot

logger = logging.getLogger("ranked_turbo.session")


class MatchSession:
    """
    Everything one match owns: its cache, opt-ins, detector and settlement.

    Args:
        config: Pipeline config
        host: Engine access for the match
        scheduler: Host loop for timers and background work
        store: Shared rating store client
        match_number: Position of this match in the runner's lifetime
    """

    def __init__(
        self,
        config: Dict[str, Any],
        host: MatchHost,
        scheduler: Scheduler,
        store: RatingStoreClient,
        match_number: int = 1,
    ):
        self.config = config
        self.host = host
        self.scheduler = scheduler
        self.match_number = match_number
        self.cache = RatingCache(store)
        self.opt_in = OptInTracker(host)
        self.publisher = ResultPublisher(host)
        self.settlement = SettlementEngine(
            config, host, scheduler, store, self.cache, self.opt_in, self.publisher)
        self.detector = WinDecisionDetector(config, host, scheduler, self._on_result)
        self.router = SignalRouter()
        self.opt_in.register(self.router)
        self.detector.register(self.router)
        self.results: List[SettlementSnapshot] = []
        self.closed = False

    def handle(self, signal: Signal) -> Optional[Any]:
        if self.closed:
            logger.debug(f"Session {self.match_number} closed, dropping {signal.event}")
            return None
        return self.router.route(signal)

    def _on_result(self, winning_team: int) -> None:
        self.results = self.settlement.finalize(winning_team)

    def current_identities(self) -> List[str]:
        seen: List[str] = []
        for _, identity in self.settlement.participants():
            if identity not in seen:
                seen.append(identity)
        return seen

    def warm_cache(self) -> None:
        """Fire a background warm-up for every connected player."""
        identities = self.current_identities()
        if identities:
            self.scheduler.spawn(self.cache.warm(identities), name=f"warm-{self.match_number}")

    def push_current_ratings(self) -> None:
        """Send each connected player their current rating."""
        for slot, identity in self.settlement.participants():
            cached = self.cache.get(identity)
            if cached is not None:
                self.publisher.notify(slot, CURRENT_RATING_EVENT, {"mmr": cached})
            else:
                self.scheduler.spawn(self._fetch_and_push(slot, identity), name=f"push-{identity}")

    async def _fetch_and_push(self, slot: int, identity: str) -> None:
        mmr = await self.cache.fetch(identity)
        if self.host.is_valid_slot(slot):
            self.publisher.notify(slot, CURRENT_RATING_EVENT, {"mmr": mmr})

    def close(self) -> None:
        self.closed = True
        logger.info(f"Session {self.match_number} closed")
