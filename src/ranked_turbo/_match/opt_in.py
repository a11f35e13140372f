# Area: Match
"""
ranked_turbo._match.opt_in — Double down tracking
=================================================

Per-match record of which slots opted in to double stakes. Fed by
the ``double_down_clicked`` UI event; cleared at every pre-game.
"""

import logging
from typing import Dict

from ..host import MatchHost
from ..signals import OPT_IN_EVENT, OptInClicked
from .signal_router import SignalRouter

logger = logging.getLogger("ranked_turbo.opt_in")


class OptInTracker:
    """Slot -> doubled flag for the current match."""

    def __init__(self, host: MatchHost):
        self._host = host
        self._opted_in: Dict[int, bool] = {}

    def register(self, router: SignalRouter) -> None:
        router.register_handler(OPT_IN_EVENT, self)

    def reset(self) -> None:
        """Forget every selection; called once per match at pre-game."""
        self._opted_in = {}

    def is_opted_in(self, slot: int) -> bool:
        return self._opted_in.get(slot, False)

    def handle(self, signal: OptInClicked) -> bool:
        """
        Record an opt-in for the clicking slot.

        Returns True only when the slot was newly opted in. Invalid
        slots and repeat clicks are ignored.
        """
        slot = signal.slot
        if not self._host.is_valid_slot(slot):
            logger.debug(f"Ignoring opt-in from invalid slot {slot}")
            return False
        if self._opted_in.get(slot):
            return False

        self._opted_in[slot] = True

        logger.info(f"[DOUBLE DOWN] slot={slot} opted in", extra={"slot": slot})
        name = self._host.name_of(slot)
        self._host.send_chat(f"{name}: I doubled down!")
        return True
