"""
ranked_turbo — Ranked match rating settlement
=============================================

Decides when a match ends, settles every participant's rating against a
remote store, keeps a local cache in step with it and publishes the
result for the post-game screen.

Embedding in a game host:
    from ranked_turbo import MatchHost, AsyncioScheduler, MatchRunner

    class MyHost(MatchHost): ...   # Engine and presentation accessors
    runner = MatchRunner(config, host=MyHost(), scheduler=AsyncioScheduler(loop))
    runner.dispatch("game_rules_state_change", {"state": 2})
    runner.dispatch("double_down_clicked", {"PlayerID": 3})
    runner.dispatch("entity_killed", {"entindex_killed": 412, "entindex_attacker": 77})

Store access only:
    from ranked_turbo import RatingStoreClient
    async with RatingStoreClient("https://example.firebaseio.com") as store:
        mmr = await store.get_or_init("76561198")
"""

from .host import MatchHost, Scheduler, AsyncioScheduler, UnitInfo
from .local_host import LocalHost
from .runner import MatchRunner
from .signals import (
    OptInClicked,
    EntityKilled,
    TeamWin,
    StateChanged,
    parse_signal,
)
from .errors import (
    RankedTurboError,
    StoreUnavailableError,
    MalformedRatingError,
    InvalidSignalError,
    SettlementError,
)
from ._config import DEFAULT_CONFIG, load_config, validate_config
from ._match.enums import Team, HostGameState
from ._match.session import MatchSession
from ._match.snapshot import SettlementSnapshot
from ._store.client import RatingStoreClient
from ._store.cache import RatingCache

__all__ = [
    # Host integration
    "MatchHost",
    "Scheduler",
    "AsyncioScheduler",
    "UnitInfo",
    "LocalHost",
    "MatchRunner",
    "MatchSession",
    # Signals
    "OptInClicked",
    "EntityKilled",
    "TeamWin",
    "StateChanged",
    "parse_signal",
    # Errors
    "RankedTurboError",
    "StoreUnavailableError",
    "MalformedRatingError",
    "InvalidSignalError",
    "SettlementError",
    # Config
    "DEFAULT_CONFIG",
    "load_config",
    "validate_config",
    # Data
    "Team",
    "HostGameState",
    "SettlementSnapshot",
    "RatingStoreClient",
    "RatingCache",
]
__version__ = "1.0.0"
