# Copyright (c) 2026 TempoOS Contributors. All Rights Reserved.

"""
API Dependencies — FastAPI dependency injection.
"""

from __future__ import annotations

from starlette.requests import HTTPConnection

from tempo_notify.core.context import NotifyContext


def get_notify_context(conn: HTTPConnection) -> NotifyContext:
    """
    Resolve the NotifyContext created by the application lifespan.

    Works for both HTTP requests and WebSocket connections.
    """
    ctx = getattr(conn.app.state, "notify", None)
    if ctx is None:
        raise RuntimeError("NotifyContext not initialized; is the lifespan running?")
    return ctx
