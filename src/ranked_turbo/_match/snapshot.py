# Area: Match
"""
ranked_turbo._match.snapshot — Settlement snapshots
===================================================

Immutable per-identity record of one settlement, as published to the
presentation layer. Verification produces a new snapshot rather than
changing the provisional one.
"""

from dataclasses import dataclass, replace
from typing import Any, Dict


@dataclass(frozen=True)
class SettlementSnapshot:
    """
    One identity's rating change for a finished match.

    Attributes:
        identity: Player identity the rating belongs to
        old: Rating before settlement
        new: Rating after settlement
        name: Display name at settlement time
        team: Team number the player was on
        doubled: True if the player opted in to double stakes
        verified: True once the value was re-read from the store
    """

    identity: str
    old: int
    new: int
    name: str
    team: int
    doubled: bool
    verified: bool = False

    @property
    def delta(self) -> int:
        return self.new - self.old

    def with_verified(self, value: int) -> "SettlementSnapshot":
        """Return a verified copy carrying the store's value."""
        return replace(self, new=value, verified=True)

    def to_payload(self) -> Dict[str, Any]:
        """Broadcast table value read by the post-game screen."""
        return {
            "old": self.old,
            "new": self.new,
            "name": self.name,
            "team": int(self.team),
            "doubled": self.doubled,
        }
