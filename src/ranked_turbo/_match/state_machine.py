# Area: Match
"""
ranked_turbo._match.state_machine — Win Decision State Machine
==============================================================

Tracks the one-shot lifecycle of a match result: nothing decided,
winner decided, settlement scheduled. The terminal state has no
outgoing transitions, which is what makes settlement at-most-once.
"""

import logging

from .enums import DetectorState, DetectorEvent

logger = logging.getLogger("ranked_turbo.detector.state_machine")


# Valid state transitions: {current_state: {event: next_state}}
TRANSITIONS = {
    DetectorState.IDLE: {
        DetectorEvent.WINNER_DECIDED: DetectorState.DECIDED,
    },
    DetectorState.DECIDED: {
        DetectorEvent.SETTLEMENT_SCHEDULED: DetectorState.SETTLEMENT_SCHEDULED,
    },
    DetectorState.SETTLEMENT_SCHEDULED: {},
}


class DetectorStateMachine:
    """Where one match stands between no result and a scheduled settlement."""

    def __init__(self):
        self.current_state = DetectorState.IDLE

    @property
    def is_decided(self) -> bool:
        """True once a winner has been decided for this match."""
        return self.current_state is not DetectorState.IDLE

    def can_transition(self, event: DetectorEvent) -> bool:
        """True if ``event`` is allowed in the current state."""
        return event in TRANSITIONS.get(self.current_state, {})

    def transition(self, event: DetectorEvent) -> DetectorState:
        """
        Apply ``event`` and return the new state.

        Raises:
            ValueError: If ``event`` is not allowed in the current state
        """
        if not self.can_transition(event):
            raise ValueError(
                f"Invalid transition: {event.value} from {self.current_state.value}"
            )

        self.current_state = TRANSITIONS[self.current_state][event]
        logger.debug(f"Detector -> {self.current_state.value}")
        return self.current_state

    def reset(self) -> None:
        """Reset state machine to IDLE for the next match."""
        self.current_state = DetectorState.IDLE
