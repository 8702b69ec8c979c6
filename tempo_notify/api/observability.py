# Copyright (c) 2026 TempoOS Contributors. All Rights Reserved.

"""
Observability API — Health check and metrics.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from tempo_notify.api.deps import get_notify_context
from tempo_notify.core.context import NotifyContext

router = APIRouter(tags=["observability"])


@router.get("/health")
async def health_check(ctx: NotifyContext = Depends(get_notify_context)):
    """Liveness plus matcher and connection status."""
    return {
        "status": "ok" if ctx.matcher.running else "degraded",
        "version": "0.1.0",
        "matcher": ctx.matcher.status()["state"],
        "connections": len(ctx.registry),
        "metrics": ctx.metrics.snapshot(),
    }


@router.get("/api/metrics")
async def get_metrics(ctx: NotifyContext = Depends(get_notify_context)):
    """Return current service metrics."""
    return ctx.metrics.snapshot()
