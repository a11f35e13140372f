# Area: Match
"""
ranked_turbo._match.settlement — Rating settlement
==================================================

Applies the end-of-match rating change to every distinct participant.

For each identity: ``old`` comes from the cache (never the network),
the stake is ``doubled_stake`` for opted-in slots and ``normal_stake``
otherwise, winners gain it and losers lose it. Ratings are not clamped
and may go negative.

The write is fired without waiting and the cache updated at once, so
the provisional snapshot reaches presentation immediately. After
``verify_delay_seconds`` every written identity is re-read from the store
and a verified snapshot and ``mmr_final`` notification follow.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterator, List, Tuple

from .._config import BOT_IDENTITY
from .._store.cache import RatingCache
from .._store.client import RatingStoreClient
from ..host import MatchHost, Scheduler
from .opt_in import OptInTracker
from .publisher import FINAL_RATING_EVENT, ResultPublisher
from .snapshot import SettlementSnapshot

logger = logging.getLogger("ranked_turbo.settlement")


def rating_delta(team: int, winning_team: int, doubled: bool,
                 normal_stake: int = 25, doubled_stake: int = 50) -> int:
    """Signed rating change for one player."""
    stake = doubled_stake if doubled else normal_stake
    return stake if team == winning_team else -stake


class SettlementEngine:
    """Computes, persists and publishes rating changes for one match."""

    def __init__(
        self,
        config: dict,
        host: MatchHost,
        scheduler: Scheduler,
        store: RatingStoreClient,
        cache: RatingCache,
        opt_in: OptInTracker,
        publisher: ResultPublisher,
    ):
        self._host = host
        self._scheduler = scheduler
        self._store = store
        self._cache = cache
        self._opt_in = opt_in
        self._publisher = publisher
        self.baseline = config["baseline"]
        self.normal_stake = config["normal_stake"]
        self.doubled_stake = config["doubled_stake"]
        self.verify_delay = config["verify_delay_seconds"]
        self.max_slots = config["max_player_slots"]

    def participants(self) -> Iterator[Tuple[int, str]]:
        """Yield ``(slot, identity)`` for every valid, non-bot slot."""
        for slot in range(self.max_slots):
            if not self._host.is_valid_slot(slot):
                continue
            identity = str(self._host.identity_of(slot))
            if identity == BOT_IDENTITY:
                continue
            yield slot, identity

    def finalize(self, winning_team: int) -> List[SettlementSnapshot]:
        """
        Settle the match for ``winning_team``.

        Returns the provisional snapshots, one per distinct identity,
        in slot order.
        """
        logger.info(f"[MMR] Finalizing, winner={int(winning_team)}",
                    extra={"winning_team": int(winning_team)})
        provisional: Dict[str, SettlementSnapshot] = {}

        for slot, identity in self.participants():
            if identity in provisional:
                continue

            cached = self._cache.get(identity)
            old = cached if cached is not None else self.baseline
            team = self._host.team_of(slot)
            doubled = self._opt_in.is_opted_in(slot)
            new = old + rating_delta(
                team, winning_team, doubled,
                self.normal_stake, self.doubled_stake,
            )

            self._scheduler.spawn(self._store.write(identity, new), name=f"write-{identity}")
            self._cache.set(identity, new)

            snapshot = SettlementSnapshot(
                identity=identity,
                old=old,
                new=new,
                name=self._host.name_of(slot) or "Player",
                team=team,
                doubled=doubled,
            )
            provisional[identity] = snapshot
            self._publisher.publish(snapshot)

        if provisional:
            self._scheduler.call_later(self.verify_delay, self._start_verification, provisional)
        return list(provisional.values())

    def _start_verification(self, provisional: Dict[str, SettlementSnapshot]) -> None:
        for identity, snapshot in provisional.items():
            self._scheduler.spawn(self.verify(snapshot), name=f"verify-{identity}")

    async def verify(self, snapshot: SettlementSnapshot) -> SettlementSnapshot:
        """
        Re-read one identity and publish the result.

        A failed read keeps the optimistic value, unverified; it does not
        re-initialize the record. The cache keeps the value settlement
        set; a write still in flight reads back the old one.
        """
        identity = snapshot.identity
        stored = await self._store.read(identity)
        if stored is None:
            logger.warning(
                f"[MMR] Verify read failed for {identity}, {snapshot.new} stays unverified",
                extra={"identity": identity},
            )
            result = snapshot
        else:
            if stored != snapshot.new:
                logger.warning(
                    f"[MMR] Store diverged for {identity}: wrote {snapshot.new}, read {stored}",
                    extra={"identity": identity},
                )
            result = snapshot.with_verified(stored)
        logger.info(
            f"[MMR] id={identity} mmr={result.new} verified={1 if result.verified else 0}",
            extra={"identity": identity},
        )

        for slot, slot_identity in self.participants():
            if slot_identity != identity:
                continue
            self._publisher.notify(slot, FINAL_RATING_EVENT, {"old": result.old, "new": result.new})
            self._publisher.publish(result)
        return result
