"""
Pytest configuration and fixtures for GateWatch backend tests.

Provides an in-memory async Redis test double so unit and integration
tests run without a Redis server.
"""

import os

# Settings are read at import time by gatewatch.main
os.environ.setdefault("GATEWATCH_JWT_SECRET", "test-jwt-secret-for-gatewatch-unit-tests-0123456789")  # pragma: allowlist secret

import fnmatch
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional, Set, Tuple

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import ResponseError

from gatewatch.repositories import IncidentRepository
from gatewatch.services.incidents import IncidentLifecycleService, IncidentStatisticsService

START_TIME = datetime(2026, 3, 10, 12, 0, 0, tzinfo=timezone.utc)


class FrozenClock:
    """Deterministic clock; advance() moves it forward."""

    def __init__(self, start: datetime = START_TIME):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


class FakePipeline:
    """Buffers commands and replays them against the owning FakeRedis."""

    def __init__(self, redis: "FakeRedis", transaction: bool):
        self.redis = redis
        self.transaction = transaction
        self.commands: List[Tuple[str, tuple, dict]] = []

    async def __aenter__(self) -> "FakePipeline":
        return self

    async def __aexit__(self, *exc_info) -> None:
        self.commands = []

    def __getattr__(self, name: str):
        if name.startswith("_") or not hasattr(FakeRedis, name):
            raise AttributeError(name)

        def queue(*args, **kwargs):
            self.commands.append((name, args, kwargs))
            return self

        return queue

    async def execute(self, raise_on_error: bool = True) -> List[Any]:
        if "execute" in self.redis.fail_commands:
            raise RedisConnectionError("pipeline execute failed")

        results: List[Any] = []
        for name, args, kwargs in self.commands:
            try:
                results.append(await getattr(self.redis, name)(*args, **kwargs))
            except Exception as e:
                if raise_on_error:
                    raise
                results.append(e)
        self.commands = []
        self.redis.pipelines_executed.append(self.transaction)
        return results


class FakeRedis:
    """
    In-memory stand-in for redis.asyncio.Redis with decode_responses=True.

    Only the commands GateWatch uses are implemented. Failures can be
    injected per command name (fail_commands) or per key on GET (fail_keys).
    """

    def __init__(self):
        self.strings: Dict[str, str] = {}
        self.ttls: Dict[str, int] = {}
        self.zsets: Dict[str, Dict[str, float]] = {}
        self.sets: Dict[str, Set[str]] = {}
        self.fail_commands: Set[str] = set()
        self.fail_keys: Set[str] = set()
        self.pipelines_executed: List[bool] = []

    def _check(self, command: str) -> None:
        if command in self.fail_commands:
            raise RedisConnectionError(f"{command} failed")

    def pipeline(self, transaction: bool = True) -> FakePipeline:
        return FakePipeline(self, transaction)

    async def ping(self) -> bool:
        self._check("ping")
        return True

    async def aclose(self) -> None:
        return None

    # Strings

    async def get(self, key: str) -> Optional[str]:
        self._check("get")
        if key in self.fail_keys:
            raise ResponseError(f"WRONGTYPE {key}")
        return self.strings.get(key)

    async def set(self, key: str, value: Any) -> bool:
        self._check("set")
        self.strings[key] = str(value)
        self.ttls.pop(key, None)
        return True

    async def setex(self, key: str, seconds: int, value: Any) -> bool:
        self._check("setex")
        self.strings[key] = str(value)
        self.ttls[key] = int(seconds)
        return True

    async def mget(self, keys: List[str]) -> List[Optional[str]]:
        self._check("mget")
        return [self.strings.get(k) for k in keys]

    async def delete(self, *keys: str) -> int:
        self._check("delete")
        removed = 0
        for key in keys:
            for store in (self.strings, self.zsets, self.sets):
                if key in store:
                    del store[key]
                    removed += 1
            self.ttls.pop(key, None)
        return removed

    async def exists(self, *keys: str) -> int:
        self._check("exists")
        return sum(1 for k in keys if k in self.strings or k in self.zsets or k in self.sets)

    async def ttl(self, key: str) -> int:
        return self.ttls.get(key, -1)

    async def scan_iter(self, match: Optional[str] = None, count: Optional[int] = None):
        self._check("scan_iter")
        keys = list(self.strings) + list(self.zsets) + list(self.sets)
        for key in keys:
            if match is None or fnmatch.fnmatchcase(key, match):
                yield key

    # Sorted sets

    async def zadd(self, key: str, mapping: Dict[str, float]) -> int:
        self._check("zadd")
        zset = self.zsets.setdefault(key, {})
        added = sum(1 for m in mapping if m not in zset)
        zset.update({m: float(s) for m, s in mapping.items()})
        return added

    async def zrevrange(self, key: str, start: int, end: int, withscores: bool = False) -> List[Any]:
        self._check("zrevrange")
        items = sorted(self.zsets.get(key, {}).items(), key=lambda kv: (kv[1], kv[0]), reverse=True)
        stop = end + 1 if end >= 0 else len(items) + end + 1
        window = items[start:stop]
        if withscores:
            return [(m, s) for m, s in window]
        return [m for m, _ in window]

    @staticmethod
    def _bound(value: Any) -> Tuple[float, bool]:
        text = str(value)
        exclusive = text.startswith("(")
        if exclusive:
            text = text[1:]
        return float(text), exclusive

    async def zremrangebyscore(self, key: str, min: Any, max: Any) -> int:
        self._check("zremrangebyscore")
        lo, lo_excl = self._bound(min)
        hi, hi_excl = self._bound(max)
        zset = self.zsets.get(key, {})
        doomed = [
            m
            for m, s in zset.items()
            if (s > lo if lo_excl else s >= lo) and (s < hi if hi_excl else s <= hi)
        ]
        for m in doomed:
            del zset[m]
        return len(doomed)

    async def zcard(self, key: str) -> int:
        return len(self.zsets.get(key, {}))

    # Sets

    async def sadd(self, key: str, *members: str) -> int:
        self._check("sadd")
        s = self.sets.setdefault(key, set())
        added = len(set(members) - s)
        s.update(members)
        return added

    async def scard(self, key: str) -> int:
        self._check("scard")
        return len(self.sets.get(key, set()))

    async def smembers(self, key: str) -> Set[str]:
        return set(self.sets.get(key, set()))


class SequentialIds:
    """Predictable incident ids: inc-0001, inc-0002, ..."""

    def __init__(self):
        self.counter = 0

    def __call__(self) -> str:
        self.counter += 1
        return f"inc-{self.counter:04d}"


@pytest.fixture
def fake_redis() -> FakeRedis:
    """Provide an empty in-memory Redis."""
    return FakeRedis()


@pytest.fixture
def clock() -> FrozenClock:
    """Provide a frozen clock starting at START_TIME."""
    return FrozenClock()


@pytest.fixture
def repository(fake_redis: FakeRedis) -> IncidentRepository:
    return IncidentRepository(fake_redis)


@pytest.fixture
def lifecycle(repository: IncidentRepository, clock: FrozenClock) -> IncidentLifecycleService:
    return IncidentLifecycleService(repository, clock=clock, id_factory=SequentialIds())


@pytest.fixture
def statistics_service(repository: IncidentRepository, clock: FrozenClock) -> IncidentStatisticsService:
    return IncidentStatisticsService(repository, clock=clock)
