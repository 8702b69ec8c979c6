# Copyright (c) 2026 TempoOS Contributors. All Rights Reserved.
"""Unit tests for Observability API."""

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from tempo_notify.core.context import NotifyContext
from tempo_notify.main import create_app


@pytest_asyncio.fixture
async def client(fast_settings, fake_clock):
    ctx = NotifyContext(fast_settings, clock=fake_clock)
    await ctx.start()
    app = create_app(settings=fast_settings)
    app.state.notify = ctx
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
    await ctx.shutdown()


class TestObservabilityAPI:
    @pytest.mark.asyncio
    async def test_health(self, client):
        resp = await client.get("/health")
        assert resp.status_code == 200
        data = resp.json()
        assert data["status"] == "ok"
        assert data["matcher"] == "idle"
        assert data["connections"] == 0
        assert "metrics" in data

    @pytest.mark.asyncio
    async def test_metrics_count_schedules(self, client):
        await client.post("/schedule", json={"time": "09:00"})
        resp = await client.get("/api/metrics")
        assert resp.status_code == 200
        data = resp.json()
        assert "uptime_seconds" in data
        assert data["counters"]["schedule_armed"] == 1
