# Copyright (c) 2026 TempoOS Contributors. All Rights Reserved.

"""
tempo_notify Application Entry Point.

Entry point: uvicorn tempo_notify.main:app --host 0.0.0.0 --port 8082
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from tempo_notify.api.errors import APIError, api_error_handler
from tempo_notify.api.home import router as home_router
from tempo_notify.api.middleware import TraceMiddleware
from tempo_notify.api.observability import router as observability_router
from tempo_notify.api.schedule import router as schedule_router
from tempo_notify.api.ws import router as ws_router
from tempo_notify.core.config import NotifySettings, settings as default_settings
from tempo_notify.core.context import NotifyContext
from tempo_notify.core.logging import setup_logging
from tempo_notify.kernel.matcher import TimeSource

logger = logging.getLogger("tempo.notify.main")


def create_app(
    settings: Optional[NotifySettings] = None,
    clock: Optional[TimeSource] = None,
) -> FastAPI:
    """
    Build the FastAPI app.

    Args:
        settings: Defaults to settings loaded from the environment.
        clock: Time source for the matcher; defaults to a WallClock in
            ``settings.TIMEZONE``.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        cfg = settings or default_settings
        setup_logging(cfg.LOG_LEVEL)
        ctx = NotifyContext(cfg, clock=clock)
        app.state.notify = ctx
        await ctx.start()
        logger.info("[tempo_notify] Service ready on %s:%d", cfg.HOST, cfg.PORT)
        yield
        await ctx.shutdown()
        app.state.notify = None
        logger.info("[tempo_notify] Shutdown complete")

    app = FastAPI(
        title="tempo_notify",
        description="Time-of-day notification broadcast service",
        version="0.1.0",
        lifespan=lifespan,
    )

    # ── Middleware ───────────────────────────────────────────────
    app.add_middleware(TraceMiddleware)

    # ── Error Handlers ──────────────────────────────────────────
    app.add_exception_handler(APIError, api_error_handler)

    # ── Routes ──────────────────────────────────────────────────
    app.include_router(home_router)
    app.include_router(schedule_router)
    app.include_router(ws_router)
    app.include_router(observability_router)
    return app


app = create_app()


def run() -> None:
    """Console entry point: serve on the configured host and port."""
    import uvicorn

    cfg = default_settings
    uvicorn.run(
        "tempo_notify.main:app",
        host=cfg.HOST,
        port=cfg.PORT,
        log_level=cfg.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    run()
