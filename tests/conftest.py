# Area: Test Support
"""Shared fixtures: zero-delay config, in-memory host, fake store, manual loop."""

import asyncio
import json
import logging
from typing import Any, Callable, Dict, List, Optional, Tuple

import httpx
import pytest

from ranked_turbo._config import build_config
from ranked_turbo.host import Scheduler
from ranked_turbo.local_host import LocalHost


class ManualScheduler(Scheduler):
    """
    Scheduler that only runs things when a test asks it to.

    Timers and spawned coroutines are queued; ``fire_timers`` runs the
    queued callbacks and ``run_all`` alternates coroutines and timers
    until nothing is left.
    """

    def __init__(self):
        self.timers: List[Tuple[float, Callable[..., Any], tuple]] = []
        self.coros: List[Tuple[str, Any]] = []
        self.timer_history: List[float] = []

    def call_later(self, delay, callback, *args):
        self.timers.append((delay, callback, args))
        self.timer_history.append(delay)

    def spawn(self, coro, name=""):
        self.coros.append((name, coro))

    def fire_timers(self) -> int:
        timers, self.timers = self.timers, []
        for _, callback, args in timers:
            callback(*args)
        return len(timers)

    async def drain(self) -> None:
        while self.coros:
            coros, self.coros = self.coros, []
            for _, coro in coros:
                await coro

    async def _run_all(self) -> None:
        while self.timers or self.coros:
            await self.drain()
            self.fire_timers()

    def run_all(self) -> None:
        asyncio.run(self._run_all())

    def run_coros(self) -> None:
        asyncio.run(self.drain())

    def close(self) -> None:
        for _, coro in self.coros:
            coro.close()
        self.coros = []


class FakeStore:
    """In-memory stand-in for ``RatingStoreClient`` with call recording."""

    def __init__(self, baseline: int = 500, values: Optional[Dict[str, int]] = None):
        self.baseline = baseline
        self.values: Dict[str, int] = dict(values or {})
        self.reads: List[str] = []
        self.writes: List[Tuple[str, int]] = []
        self.fail_reads = False
        self.fail_writes = False
        self.read_overrides: Dict[str, int] = {}

    async def read(self, identity: str) -> Optional[int]:
        if identity == "0":
            return self.baseline
        self.reads.append(identity)
        if self.fail_reads:
            return None
        if identity in self.read_overrides:
            return self.read_overrides[identity]
        return self.values.get(identity)

    async def write(self, identity: str, value: int) -> bool:
        if identity == "0":
            return False
        self.writes.append((identity, value))
        if self.fail_writes:
            return False
        self.values[identity] = value
        return True

    async def get_or_init(self, identity: str) -> int:
        if identity == "0":
            return self.baseline
        value = await self.read(identity)
        if value is not None:
            return value
        await self.write(identity, self.baseline)
        return self.baseline

    async def aclose(self) -> None:
        pass


class RecordingStore:
    """MockTransport handler backed by a dict, recording every request."""

    def __init__(self, values=None, status=None, raw_bodies=None):
        self.values = dict(values or {})
        self.status = status
        self.raw_bodies = dict(raw_bodies or {})
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.status is not None:
            return httpx.Response(self.status)
        identity = request.url.path.rsplit("/", 1)[-1][:-len(".json")]
        if request.method == "PUT":
            self.values[identity] = json.loads(request.content)
            return httpx.Response(200, content=request.content)
        if identity in self.raw_bodies:
            return httpx.Response(200, content=self.raw_bodies[identity])
        return httpx.Response(200, content=json.dumps(self.values.get(identity)).encode())

    def methods(self):
        return [r.method for r in self.requests]


@pytest.fixture(autouse=True)
def reset_package_logger():
    """Drop handlers bound to captured streams once a test finishes."""
    yield
    logging.getLogger("ranked_turbo").handlers.clear()


@pytest.fixture
def config() -> Dict[str, Any]:
    return build_config({
        "store_base_url": "https://store.test",
        "settle_delay_seconds": 0,
        "verify_delay_seconds": 0,
        "start_delay_seconds": 0,
        "push_delay_seconds": 0,
        "log_file": None,
    })


@pytest.fixture
def host() -> LocalHost:
    return LocalHost()


@pytest.fixture
def store() -> FakeStore:
    return FakeStore()


@pytest.fixture
def scheduler():
    sched = ManualScheduler()
    yield sched
    sched.close()
