# Area: Host Integration
"""
ranked_turbo.host — What the game host must provide
===================================================

The settlement pipeline never talks to the game engine directly. The
host embedding it subclasses ``MatchHost`` (engine and presentation
access) and supplies a ``Scheduler`` (deferred callbacks and background
coroutines on the host's single event loop).

Usage:
    from ranked_turbo import MatchHost, AsyncioScheduler, MatchRunner

    class MyHost(MatchHost): ...      # Implement the engine accessors
    runner = MatchRunner(config, host=MyHost(),
                         scheduler=AsyncioScheduler(loop))
    runner.dispatch("entity_killed", {"entindex_killed": 412})
"""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Optional, Set

logger = logging.getLogger("ranked_turbo.host")


@dataclass(frozen=True)
class UnitInfo:
    """
    The engine's view of one entity at the moment it was killed.

    Attributes:
        team: Team number that owns the entity
        unit_name: Engine unit name, e.g. "npc_dota_goodguys_fort"
        is_building: True for structures
        is_real_hero: True for a player hero (not an illusion or clone)
    """

    team: int
    unit_name: str = ""
    is_building: bool = False
    is_real_hero: bool = False


class MatchHost(ABC):
    """
    Abstract base class for the game engine and presentation channel.

    Slot accessors are only called for slots where ``is_valid_slot``
    returned True in the same callback.
    """

    # ──────────────────────────────────────────────────────────────
    # Participants
    # ──────────────────────────────────────────────────────────────
    @abstractmethod
    def is_valid_slot(self, slot: int) -> bool:
        """True while ``slot`` refers to a connected participant."""
        ...

    @abstractmethod
    def identity_of(self, slot: int) -> str:
        """Stable platform identity for ``slot``; bots report ``"0"``."""
        ...

    @abstractmethod
    def team_of(self, slot: int) -> int:
        """Team number of ``slot``."""
        ...

    @abstractmethod
    def name_of(self, slot: int) -> str:
        """Display name of ``slot``."""
        ...

    @abstractmethod
    def resolve_entity(self, entity_index: int) -> Optional[UnitInfo]:
        """Look up an entity by index; None if it no longer exists."""
        ...

    # ──────────────────────────────────────────────────────────────
    # Outbound
    # ──────────────────────────────────────────────────────────────
    @abstractmethod
    def declare_winner(self, team: int) -> None:
        """Tell the engine the match is over and ``team`` won."""
        ...

    @abstractmethod
    def send_chat(self, message: str) -> None:
        """Broadcast a chat-style message to every player."""
        ...

    @abstractmethod
    def send_to_player(self, slot: int, event: str, payload: Dict[str, Any]) -> bool:
        """
        Send a point-to-point event to the player in ``slot``.

        Returns False if the player has no connected client.
        """
        ...

    @abstractmethod
    def set_table_value(self, table: str, key: str, value: Dict[str, Any]) -> None:
        """Overwrite ``key`` in the broadcast table ``table``."""
        ...


class Scheduler(ABC):
    """The host event loop: timers and fire-and-forget coroutines."""

    @abstractmethod
    def call_later(self, delay: float, callback: Callable[..., Any], *args: Any) -> None:
        """Run ``callback(*args)`` on the loop after ``delay`` seconds."""
        ...

    @abstractmethod
    def spawn(self, coro: Awaitable[Any], name: str = "") -> None:
        """Start ``coro`` on the loop without waiting for it."""
        ...


class AsyncioScheduler(Scheduler):
    """
    Scheduler backed by an asyncio event loop.

    Spawned tasks are kept referenced until they finish; an exception
    escaping a task is logged, never re-raised into the loop.
    """

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self._loop = loop
        self._tasks: Set[asyncio.Task] = set()

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def call_later(self, delay: float, callback: Callable[..., Any], *args: Any) -> None:
        self.loop.call_later(delay, callback, *args)

    def spawn(self, coro: Awaitable[Any], name: str = "") -> None:
        task = self.loop.create_task(coro, name=name or None)
        self._tasks.add(task)
        task.add_done_callback(self._on_task_done)

    def pending(self) -> int:
        """Number of spawned coroutines still running."""
        return len(self._tasks)

    def _on_task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error(
                f"Background task {task.get_name()} failed: {exc}",
                exc_info=(type(exc), exc, exc.__traceback__),
            )
