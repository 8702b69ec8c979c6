# Copyright (c) 2026 TempoOS Contributors. All Rights Reserved.

"""
Notify Context — Holds the registry, broadcaster and matcher for one service.

Created once in the application lifespan, injected into API routes via
FastAPI Depends, and torn down on shutdown.
"""

from __future__ import annotations

import logging
from typing import Optional

from tempo_notify.core.config import NotifySettings
from tempo_notify.core.metrics import Metrics
from tempo_notify.kernel.broadcaster import Broadcaster
from tempo_notify.kernel.clock import WallClock, parse_timezone
from tempo_notify.kernel.matcher import ClockMatcher, TimeSource
from tempo_notify.kernel.registry import ConnectionRegistry

logger = logging.getLogger("tempo.notify.context")


class NotifyContext:
    """
    Owns all mutable service state.
    Nothing here is process-global; a fresh context is a fresh service.
    """

    def __init__(self, settings: NotifySettings, clock: Optional[TimeSource] = None) -> None:
        self.settings = settings
        self.metrics = Metrics()
        self.clock = clock or WallClock(parse_timezone(settings.TIMEZONE))
        self.registry = ConnectionRegistry(metrics=self.metrics)
        self.broadcaster = Broadcaster(
            self.registry,
            send_timeout=settings.SEND_TIMEOUT,
            metrics=self.metrics,
        )
        self.matcher = ClockMatcher(
            self.clock,
            self.broadcaster,
            poll_interval=settings.POLL_INTERVAL,
            max_wait=settings.MATCH_MAX_WAIT,
            metrics=self.metrics,
        )

    async def start(self) -> None:
        await self.matcher.start()
        logger.info("NotifyContext started (timezone=%s)", self.settings.TIMEZONE)

    async def shutdown(self) -> None:
        """Stop the matcher and close every client connection."""
        await self.matcher.stop()
        closed = await self.registry.close_all()
        logger.info("NotifyContext shut down (%d clients closed)", closed)

