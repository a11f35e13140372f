# Area: Match
"""
ranked_turbo._match.detector — Win decision detector
====================================================

Decides the winning team from the first qualifying signal of a match:

- a core structure (building named like ``fort`` or ``ancient``) dies:
  the owner's opponent wins and the win is declared to the engine;
- a real hero dies: the attacker's team wins if the attacker is on the
  other side, otherwise the victim's opponent; the win is declared;
- the engine declares a winner itself: that team wins, nothing is
  re-declared.

Either way settlement runs once, ``settle_delay_seconds`` later. Every
signal after the first decision is ignored.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional, Union

from .._shared.logging_config import log_structured_error
from ..errors import SettlementError
from ..host import MatchHost, Scheduler, UnitInfo
from ..signals import ENTITY_KILLED_EVENT, TEAM_WIN_EVENT, EntityKilled, TeamWin
from .enums import DecisionSource, DetectorEvent, DetectorState, Team
from .signal_router import SignalRouter
from .state_machine import DetectorStateMachine

logger = logging.getLogger("ranked_turbo.detector")

CORE_NAME_MARKERS = ("fort", "ancient")


@dataclass(frozen=True)
class WinDecision:
    """The one winner decided for a match."""

    winning_team: Team
    source: DecisionSource


def _as_team(value: int) -> Optional[Team]:
    """Map an engine team number to a playing side; None for others."""
    try:
        return Team(value)
    except ValueError:
        return None


def is_core_structure(unit: UnitInfo) -> bool:
    """True for the building whose death ends the match."""
    name = unit.unit_name.lower()
    return unit.is_building and any(marker in name for marker in CORE_NAME_MARKERS)


class WinDecisionDetector:
    """
    One-shot winner detection for a match.

    Args:
        config: Pipeline config (uses ``settle_delay_seconds``)
        host: Engine access (entity lookup, win declaration)
        scheduler: Host loop for the deferred settlement
        on_result: Settlement callback, called with the winning team
    """

    def __init__(
        self,
        config: dict,
        host: MatchHost,
        scheduler: Scheduler,
        on_result: Callable[[Team], object],
    ):
        self._host = host
        self._scheduler = scheduler
        self._on_result = on_result
        self.settle_delay = config["settle_delay_seconds"]
        self.state_machine = DetectorStateMachine()
        self.decision: Optional[WinDecision] = None

    @property
    def state(self) -> DetectorState:
        return self.state_machine.current_state

    @property
    def winning_team(self) -> Optional[Team]:
        return self.decision.winning_team if self.decision else None

    def register(self, router: SignalRouter) -> None:
        router.register_handler(ENTITY_KILLED_EVENT, self)
        router.register_handler(TEAM_WIN_EVENT, self)

    def reset(self) -> None:
        self.state_machine.reset()
        self.decision = None

    def handle(self, signal: Union[EntityKilled, TeamWin]) -> Optional[WinDecision]:
        """Route a kill or engine win signal; returns a new decision or None."""
        if self.state_machine.is_decided:
            logger.debug(f"Ignoring {signal.event}: winner already decided")
            return None
        if isinstance(signal, TeamWin):
            return self._on_team_win(signal)
        return self._on_entity_killed(signal)

    # ──────────────────────────────────────────────────────────────
    # Signal handlers
    # ──────────────────────────────────────────────────────────────
    def _on_entity_killed(self, signal: EntityKilled) -> Optional[WinDecision]:
        killed = self._host.resolve_entity(signal.entindex_killed)
        if killed is None:
            return None

        victim_team = _as_team(killed.team)
        if victim_team is None:
            return None

        if is_core_structure(killed):
            winner = victim_team.opposing()
            logger.info(f"[WIN] Ancient down. Declaring winner {int(winner)}")
            return self._decide(winner, DecisionSource.CORE_DESTROYED, declare=True)

        if not killed.is_real_hero:
            return None

        attacker = None
        if signal.entindex_attacker is not None:
            attacker = self._host.resolve_entity(signal.entindex_attacker)

        attacker_team = _as_team(attacker.team) if attacker is not None else None
        if attacker_team is not None and attacker_team != victim_team:
            winner = attacker_team
        else:
            winner = victim_team.opposing()
        logger.info(f"[WIN] First hero death. Declaring winner {int(winner)}")
        return self._decide(winner, DecisionSource.HERO_KILLED, declare=True)

    def _on_team_win(self, signal: TeamWin) -> WinDecision:
        logger.info(f"[WIN] Engine declared team={int(signal.winning_team)}. Finalizing after delay.")
        return self._decide(signal.winning_team, DecisionSource.ENGINE_DECLARED, declare=False)

    def _decide(self, winner: Team, source: DecisionSource, declare: bool) -> WinDecision:
        self.state_machine.transition(DetectorEvent.WINNER_DECIDED)
        self.decision = WinDecision(winning_team=winner, source=source)

        if declare:
            try:
                self._host.declare_winner(int(winner))
            except Exception as e:
                logger.error(f"[WIN] Declaring winner {int(winner)} failed: {e}")

        self._scheduler.call_later(self.settle_delay, self._run_settlement, winner)
        self.state_machine.transition(DetectorEvent.SETTLEMENT_SCHEDULED)
        return self.decision

    def _run_settlement(self, winner: Team) -> None:
        try:
            self._on_result(winner)
        except Exception as e:
            log_structured_error(SettlementError(int(winner), e))
            logger.debug("Settlement traceback", exc_info=True)
