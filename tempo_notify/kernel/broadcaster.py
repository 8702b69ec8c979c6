# Copyright (c) 2026 TempoOS Contributors. All Rights Reserved.

"""
Broadcaster — Best-effort fan-out of one message to every registered client.

Handles whose send fails (or exceeds the send timeout) are closed and
removed from the registry. Failures never propagate to the caller.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Optional

from tempo_notify.core.logging import log_context
from tempo_notify.core.metrics import Metrics
from tempo_notify.kernel.registry import ConnectionHandle, ConnectionRegistry

logger = logging.getLogger("tempo.notify.broadcaster")


@dataclass(frozen=True)
class BroadcastResult:
    delivered: int = 0
    failed: int = 0

    @property
    def attempted(self) -> int:
        return self.delivered + self.failed


class Broadcaster:
    """Delivers a message to a snapshot of the ConnectionRegistry."""

    def __init__(
        self,
        registry: ConnectionRegistry,
        send_timeout: Optional[float] = 5.0,
        metrics: Optional[Metrics] = None,
    ) -> None:
        self._registry = registry
        self._send_timeout = send_timeout
        self._metrics = metrics or Metrics()

    async def broadcast(self, message: str) -> BroadcastResult:
        targets = await self._registry.snapshot()
        self._metrics.inc("broadcasts")
        if not targets:
            logger.info("Broadcast skipped: no connected clients")
            return BroadcastResult()

        start = time.monotonic()
        outcomes = await asyncio.gather(
            *(self._deliver(handle, message) for handle in targets)
        )
        elapsed = (time.monotonic() - start) * 1000

        delivered = sum(1 for ok in outcomes if ok)
        result = BroadcastResult(delivered=delivered, failed=len(outcomes) - delivered)
        self._metrics.inc("broadcast_delivered", result.delivered)
        self._metrics.inc("broadcast_failed", result.failed)
        self._metrics.observe("broadcast_latency_ms", elapsed)
        logger.info(
            "Broadcast done: delivered=%d failed=%d (%.0fms)",
            result.delivered, result.failed, elapsed,
        )
        return result

    async def _deliver(self, handle: ConnectionHandle, message: str) -> bool:
        try:
            await handle.send(message, timeout=self._send_timeout)
            return True
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            logger.warning(
                "Send to %s failed, dropping client: %r", handle.connection_id, exc,
                extra=log_context(connection_id=handle.connection_id),
            )
            await handle.close(code=1011)
            await self._registry.unregister(handle)
            return False
