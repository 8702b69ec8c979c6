# Copyright (c) 2026 TempoOS Contributors. All Rights Reserved.

"""
Shared test fixtures for all tempo_notify tests.
"""

import asyncio
import time

import pytest

from tempo_notify.core.config import NotifySettings
from tempo_notify.core.metrics import Metrics
from tempo_notify.kernel.broadcaster import Broadcaster
from tempo_notify.kernel.registry import ConnectionHandle, ConnectionRegistry


class FakeClock:
    """Time source whose reading is set by the test."""

    def __init__(self, value: str = "00:00") -> None:
        self.value = value
        self.reads = 0

    def time_of_day(self) -> str:
        self.reads += 1
        return self.value


class FakeSocket:
    """Stands in for a starlette WebSocket on the send side."""

    def __init__(self, fail: bool = False, hang: bool = False) -> None:
        self.sent: list[str] = []
        self.closed = False
        self.close_code = None
        self.fail = fail
        self.hang = hang

    async def send_text(self, data: str) -> None:
        if self.hang:
            await asyncio.sleep(3600)
        if self.fail or self.closed:
            raise RuntimeError("socket is closed")
        self.sent.append(data)

    async def close(self, code: int = 1000, reason=None) -> None:
        self.closed = True
        self.close_code = code


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock("08:59")


@pytest.fixture
def make_handle():
    """Factory: make_handle(fail=False, hang=False) -> ConnectionHandle over a FakeSocket."""

    def _make(fail: bool = False, hang: bool = False) -> ConnectionHandle:
        return ConnectionHandle(FakeSocket(fail=fail, hang=hang))

    return _make


@pytest.fixture
def fast_settings() -> NotifySettings:
    """Settings with short intervals so matcher tests run in milliseconds."""
    return NotifySettings(
        _env_file=None,
        TIMEZONE="UTC",
        POLL_INTERVAL=0.01,
        MATCH_MAX_WAIT=0,
        SEND_TIMEOUT=0.2,
    )


@pytest.fixture
def metrics() -> Metrics:
    return Metrics()


@pytest.fixture
def registry(metrics) -> ConnectionRegistry:
    return ConnectionRegistry(metrics=metrics)


@pytest.fixture
def broadcaster(registry, metrics) -> Broadcaster:
    return Broadcaster(registry, send_timeout=0.2, metrics=metrics)


@pytest.fixture
def wait_until():
    """Async poll helper: await wait_until(lambda: cond, timeout=2.0)."""

    async def _wait(predicate, timeout: float = 2.0, interval: float = 0.005) -> None:
        deadline = time.monotonic() + timeout
        while not predicate():
            if time.monotonic() > deadline:
                raise AssertionError("condition not met before timeout")
            await asyncio.sleep(interval)

    return _wait


@pytest.fixture
def wait_until_sync():
    """Blocking poll helper for TestClient-based tests."""

    def _wait(predicate, timeout: float = 2.0, interval: float = 0.005) -> None:
        deadline = time.monotonic() + timeout
        while not predicate():
            if time.monotonic() > deadline:
                raise AssertionError("condition not met before timeout")
            time.sleep(interval)

    return _wait
