# Area: Match
"""
ranked_turbo._match.enums — Match enums
=======================================

Teams and engine game states as the host reports them, plus the
states and events of the win decision state machine.
"""

from enum import Enum, IntEnum


class Team(IntEnum):
    """Engine team numbers for the two playing sides."""
    GOODGUYS = 2
    BADGUYS = 3

    def opposing(self) -> "Team":
        """Return the other playing side."""
        return Team.BADGUYS if self is Team.GOODGUYS else Team.GOODGUYS


class HostGameState(IntEnum):
    """Game rules states delivered by ``game_rules_state_change``."""
    INIT = 0
    WAIT_FOR_PLAYERS_TO_LOAD = 1
    CUSTOM_GAME_SETUP = 2
    HERO_SELECTION = 3
    STRATEGY_TIME = 4
    WAIT_FOR_MAP_TO_LOAD = 5
    PRE_GAME = 8
    GAME_IN_PROGRESS = 9
    POST_GAME = 10
    DISCONNECT = 11


class DetectorState(Enum):
    """
    States of the win decision state machine.

    State transitions:
    IDLE -> DECIDED (on WINNER_DECIDED)
    DECIDED -> SETTLEMENT_SCHEDULED (on SETTLEMENT_SCHEDULED)
    Any state -> IDLE (on reset)
    """
    IDLE = "IDLE"
    DECIDED = "DECIDED"
    SETTLEMENT_SCHEDULED = "SETTLEMENT_SCHEDULED"


class DetectorEvent(Enum):
    """Events that drive the win decision state machine."""
    WINNER_DECIDED = "WINNER_DECIDED"
    SETTLEMENT_SCHEDULED = "SETTLEMENT_SCHEDULED"


class DecisionSource(Enum):
    """Which signal produced the win decision."""
    CORE_DESTROYED = "core_destroyed"
    HERO_KILLED = "hero_killed"
    ENGINE_DECLARED = "engine_declared"
