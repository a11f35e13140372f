"""
main.py — Embed ranked-turbo in a game host
============================================

This is the smallest possible host. Subclass ``MatchHost`` with your
engine's accessors, hand the runner your asyncio loop, and forward
every engine event to ``runner.dispatch``.

    python main.py

Here the "engine" is a handful of hard-coded events so you can watch
a full settlement happen against your rating store.

Set RANKED_TURBO_STORE_URL (or put it in .env) before running.
"""

import asyncio
from typing import Any, Dict, Optional

from ranked_turbo import AsyncioScheduler, MatchHost, MatchRunner, UnitInfo, load_config


class MyHost(MatchHost):
    """Two players, one ancient, and print() as the presentation layer."""

    PLAYERS = {
        0: {"identity": "76561198000000001", "team": 2, "name": "Radiant Carry"},
        5: {"identity": "76561198000000002", "team": 3, "name": "Dire Support"},
    }
    UNITS = {
        412: UnitInfo(team=3, unit_name="npc_dota_badguys_fort", is_building=True),
    }

    def is_valid_slot(self, slot: int) -> bool:
        return slot in self.PLAYERS

    def identity_of(self, slot: int) -> str:
        return self.PLAYERS[slot]["identity"]

    def team_of(self, slot: int) -> int:
        return self.PLAYERS[slot]["team"]

    def name_of(self, slot: int) -> str:
        return self.PLAYERS[slot]["name"]

    def resolve_entity(self, entity_index: int) -> Optional[UnitInfo]:
        return self.UNITS.get(entity_index)

    def declare_winner(self, team: int) -> None:
        print(f"[engine] team {team} wins")

    def send_chat(self, message: str) -> None:
        print(f"[chat] {message}")

    def send_to_player(self, slot: int, event: str, payload: Dict[str, Any]) -> bool:
        print(f"[to slot {slot}] {event} {payload}")
        return True

    def set_table_value(self, table: str, key: str, value: Dict[str, Any]) -> None:
        print(f"[{table}] {key} = {value}")


async def main():
    # ── Configuration (config.json is optional; env vars win) ──
    config = load_config("config.json")
    runner = MatchRunner(config, host=MyHost(), scheduler=AsyncioScheduler())

    # ── A very short match ──
    runner.dispatch("game_rules_state_change", {"state": 2})   # CUSTOM_GAME_SETUP
    await asyncio.sleep(1)
    runner.dispatch("game_rules_state_change", {"state": 8})   # PRE_GAME
    runner.dispatch("double_down_clicked", {"PlayerID": 5})
    await asyncio.sleep(1)
    runner.dispatch("entity_killed", {"entindex_killed": 412})

    # Settlement runs after settle_delay_seconds, verification shortly after
    await asyncio.sleep(config["settle_delay_seconds"] + config["verify_delay_seconds"] + 2)
    await runner.aclose()


if __name__ == "__main__":
    asyncio.run(main())
