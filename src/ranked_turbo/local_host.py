# Area: Host Integration
"""
ranked_turbo.local_host — In-memory match host
==============================================

A ready-to-use ``MatchHost`` that keeps the lobby, the entities and
everything sent to presentation in plain Python structures. Used by
``ranked-turbo simulate`` to replay a scripted match without a game
engine, and handy for exercising the pipeline in tests.

Usage:
    host = LocalHost()
    host.add_player(0, identity="76561198", team=Team.GOODGUYS, name="a1")
    host.add_unit(412, UnitInfo(team=Team.BADGUYS, unit_name="npc_dota_badguys_fort",
                                is_building=True))
"""

from typing import Any, Dict, List, Optional, Tuple

from ._config import BOT_IDENTITY
from .host import MatchHost, UnitInfo


class LocalHost(MatchHost):
    """Lobby and presentation channel held in memory."""

    def __init__(self):
        self.players: Dict[int, Dict[str, Any]] = {}
        self.units: Dict[int, UnitInfo] = {}
        self.winners: List[int] = []
        self.chat: List[str] = []
        self.notifications: List[Tuple[int, str, Dict[str, Any]]] = []
        self.tables: Dict[str, Dict[str, Dict[str, Any]]] = {}

    # ──────────────────────────────────────────────────────────────
    # Lobby setup
    # ──────────────────────────────────────────────────────────────
    def add_player(self, slot: int, identity: str, team: int,
                   name: str = "", connected: bool = True) -> None:
        self.players[slot] = {
            "identity": str(identity),
            "team": int(team),
            "name": name or f"Player {slot}",
            "connected": connected,
        }

    def add_bot(self, slot: int, team: int, name: str = "") -> None:
        self.add_player(slot, BOT_IDENTITY, team, name or f"Bot {slot}")

    def disconnect(self, slot: int) -> None:
        """Remove a player mid-match; the slot becomes invalid."""
        self.players.pop(slot, None)

    def set_connected(self, slot: int, connected: bool) -> None:
        """A player with no client keeps a valid slot but gets no messages."""
        self.players[slot]["connected"] = connected

    def add_unit(self, entity_index: int, unit: UnitInfo) -> None:
        self.units[entity_index] = unit

    # ──────────────────────────────────────────────────────────────
    # MatchHost
    # ──────────────────────────────────────────────────────────────
    def is_valid_slot(self, slot: int) -> bool:
        return slot in self.players

    def identity_of(self, slot: int) -> str:
        return self.players[slot]["identity"]

    def team_of(self, slot: int) -> int:
        return self.players[slot]["team"]

    def name_of(self, slot: int) -> str:
        return self.players[slot]["name"]

    def resolve_entity(self, entity_index: int) -> Optional[UnitInfo]:
        return self.units.get(entity_index)

    def declare_winner(self, team: int) -> None:
        self.winners.append(int(team))

    def send_chat(self, message: str) -> None:
        self.chat.append(message)

    def send_to_player(self, slot: int, event: str, payload: Dict[str, Any]) -> bool:
        player = self.players.get(slot)
        if player is None or not player["connected"]:
            return False
        self.notifications.append((slot, event, dict(payload)))
        return True

    def set_table_value(self, table: str, key: str, value: Dict[str, Any]) -> None:
        self.tables.setdefault(table, {})[key] = dict(value)

    # ──────────────────────────────────────────────────────────────
    # Inspection helpers
    # ──────────────────────────────────────────────────────────────
    def table(self, name: str) -> Dict[str, Dict[str, Any]]:
        return self.tables.get(name, {})

    def notifications_for(self, slot: int, event: Optional[str] = None) -> List[Dict[str, Any]]:
        return [
            payload for s, e, payload in self.notifications
            if s == slot and (event is None or e == event)
        ]
