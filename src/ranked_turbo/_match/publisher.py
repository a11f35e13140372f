# Area: Match
"""
ranked_turbo._match.publisher — Result publisher
================================================

Writes settlement snapshots to the ``postgame`` broadcast table and
sends point-to-point rating notifications. Each write overwrites the
identity's previous value; presentation always renders the latest.
Channel failures are logged and never reach the settlement path.
"""

import logging
from typing import Any, Dict, Optional

from ..host import MatchHost
from .snapshot import SettlementSnapshot

logger = logging.getLogger("ranked_turbo.publisher")

POSTGAME_TABLE = "postgame"
CURRENT_RATING_EVENT = "mmr_current"
FINAL_RATING_EVENT = "mmr_final"


class ResultPublisher:
    """Last-write-wins publisher keyed by player identity."""

    def __init__(self, host: MatchHost, table: str = POSTGAME_TABLE):
        self._host = host
        self._table = table
        self._latest: Dict[str, SettlementSnapshot] = {}

    def publish(self, snapshot: SettlementSnapshot) -> bool:
        """
        Overwrite the identity's broadcast slot with ``snapshot``.

        Returns False if the channel write failed.
        """
        try:
            self._host.set_table_value(self._table, snapshot.identity, snapshot.to_payload())
        except Exception as e:
            logger.error(
                f"[POSTGAME][ERR] id={snapshot.identity} {e}",
                extra={"identity": snapshot.identity},
            )
            return False

        self._latest[snapshot.identity] = snapshot
        logger.info(
            f"[POSTGAME] wrote id={snapshot.identity} old={snapshot.old} "
            f"new={snapshot.new} team={int(snapshot.team)} "
            f"dd={1 if snapshot.doubled else 0} verified={1 if snapshot.verified else 0}"
        )
        return True

    def latest(self, identity: str) -> Optional[SettlementSnapshot]:
        """Most recent snapshot successfully published for ``identity``."""
        return self._latest.get(identity)

    def notify(self, slot: int, event: str, payload: Dict[str, Any]) -> bool:
        """Send a point-to-point event; False if it could not be delivered."""
        try:
            delivered = self._host.send_to_player(slot, event, payload)
        except Exception as e:
            logger.error(f"Notify {event} to slot {slot} failed: {e}", extra={"slot": slot})
            return False

        if not delivered:
            logger.debug(f"Slot {slot} has no client for {event}")
        return bool(delivered)
