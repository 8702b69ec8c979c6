# Copyright (c) 2026 TempoOS Contributors. All Rights Reserved.
"""Unit tests for Broadcaster fan-out and self-healing."""

import asyncio
import random

import pytest

from tempo_notify.kernel.broadcaster import Broadcaster, BroadcastResult


class TestBroadcaster:
    @pytest.mark.asyncio
    async def test_delivers_to_every_client(self, registry, broadcaster, make_handle):
        handles = [make_handle() for _ in range(3)]
        for h in handles:
            await registry.register(h)

        result = await broadcaster.broadcast("ping")

        assert result == BroadcastResult(delivered=3, failed=0)
        assert all(h.socket.sent == ["ping"] for h in handles)

    @pytest.mark.asyncio
    async def test_empty_registry(self, broadcaster, metrics):
        result = await broadcaster.broadcast("ping")
        assert result.attempted == 0
        assert metrics.get_counter("broadcasts") == 1

    @pytest.mark.asyncio
    async def test_failed_client_is_closed_and_removed(self, registry, broadcaster, make_handle):
        good, bad = make_handle(), make_handle(fail=True)
        await registry.register(good)
        await registry.register(bad)

        result = await broadcaster.broadcast("ping")

        assert result == BroadcastResult(delivered=1, failed=1)
        assert good.socket.sent == ["ping"]
        assert bad not in registry
        assert bad.socket.closed
        assert good in registry

    @pytest.mark.asyncio
    async def test_slow_client_times_out(self, registry, metrics, make_handle):
        broadcaster = Broadcaster(registry, send_timeout=0.05, metrics=metrics)
        fast, slow = make_handle(), make_handle(hang=True)
        await registry.register(fast)
        await registry.register(slow)

        result = await broadcaster.broadcast("ping")

        assert result.delivered == 1
        assert result.failed == 1
        assert slow not in registry
        assert fast.socket.sent == ["ping"]

    @pytest.mark.asyncio
    async def test_metrics_recorded(self, registry, broadcaster, metrics, make_handle):
        await registry.register(make_handle())
        await registry.register(make_handle(fail=True))
        await broadcaster.broadcast("ping")

        assert metrics.get_counter("broadcast_delivered") == 1
        assert metrics.get_counter("broadcast_failed") == 1
        assert metrics.snapshot()["histogram_broadcast_latency_ms"]["count"] == 1

    @pytest.mark.asyncio
    async def test_no_failed_handle_survives_concurrent_mutation(
        self, registry, broadcaster, make_handle
    ):
        rng = random.Random(7)
        handles = [make_handle(fail=rng.random() < 0.3) for _ in range(40)]
        for h in handles[:20]:
            await registry.register(h)

        async def churn():
            for h in handles[20:]:
                await registry.register(h)
                await asyncio.sleep(0)
            for h in handles[:10]:
                await registry.unregister(h)
                await asyncio.sleep(0)

        await asyncio.gather(churn(), broadcaster.broadcast("a"), broadcaster.broadcast("b"))
        await broadcaster.broadcast("c")

        remaining = await registry.snapshot()
        assert not any(h.socket.fail for h in remaining)
        for h in remaining:
            assert h.socket.sent[-1] == "c"
