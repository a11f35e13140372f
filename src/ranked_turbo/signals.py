# Area: Host Integration
"""
ranked_turbo.signals — Inbound engine signals
=============================================

One pydantic model per engine event the pipeline consumes, joined in a
tagged union on the ``event`` field. Raw engine payloads are validated
here, at the boundary, before anything in the core sees them.

    >>> parse_signal("dota_team_win", {"winner": 3})
    TeamWin(event='dota_team_win', winning_team=<Team.BADGUYS: 3>)
"""

from __future__ import annotations

from typing import Annotated, Any, Dict, Literal, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from ._match.enums import Team
from .errors import InvalidSignalError

OPT_IN_EVENT = "double_down_clicked"
ENTITY_KILLED_EVENT = "entity_killed"
TEAM_WIN_EVENT = "dota_team_win"
STATE_CHANGE_EVENT = "game_rules_state_change"


class _SignalModel(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")


class OptInClicked(_SignalModel):
    """UI click on the double down button."""
    event: Literal["double_down_clicked"] = OPT_IN_EVENT
    slot: int = Field(ge=0, validation_alias=AliasChoices("PlayerID", "slot"))


class EntityKilled(_SignalModel):
    """An entity died; the attacker may be unknown."""
    event: Literal["entity_killed"] = ENTITY_KILLED_EVENT
    entindex_killed: int
    entindex_attacker: Optional[int] = None


class TeamWin(_SignalModel):
    """The engine itself declared the match winner."""
    event: Literal["dota_team_win"] = TEAM_WIN_EVENT
    winning_team: Team = Field(
        validation_alias=AliasChoices("winner", "team", "winningteam", "winning_team"),
    )


class StateChanged(_SignalModel):
    """Game rules state transition; ``state`` is the raw engine value."""
    event: Literal["game_rules_state_change"] = STATE_CHANGE_EVENT
    state: int


Signal = Annotated[
    Union[OptInClicked, EntityKilled, TeamWin, StateChanged],
    Field(discriminator="event"),
]

_SIGNAL_ADAPTER: TypeAdapter = TypeAdapter(Signal)

KNOWN_EVENTS = frozenset({
    OPT_IN_EVENT, ENTITY_KILLED_EVENT, TEAM_WIN_EVENT, STATE_CHANGE_EVENT,
})


def parse_signal(event: str, payload: Optional[Dict[str, Any]] = None) -> Signal:
    """
    Validate a raw engine event into its signal model.

    Args:
        event: Engine event name
        payload: Raw event payload (engine keys, may carry extras)

    Raises:
        InvalidSignalError: If the event is unknown or the payload invalid
    """
    payload = dict(payload or {})
    if event not in KNOWN_EVENTS:
        raise InvalidSignalError(event, payload, [f"unknown event '{event}'"])

    try:
        return _SIGNAL_ADAPTER.validate_python({**payload, "event": event})
    except ValidationError as e:
        errors = [
            f"{'.'.join(str(part) for part in err['loc']) or 'payload'}: {err['msg']}"
            for err in e.errors()
        ]
        raise InvalidSignalError(event, payload, errors)
