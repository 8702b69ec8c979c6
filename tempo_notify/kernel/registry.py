# Copyright (c) 2026 TempoOS Contributors. All Rights Reserved.

"""
Connection Registry — The set of clients eligible to receive broadcasts.

Mutated from two independent paths: the WebSocket lifecycle (connect /
disconnect) and the Broadcaster (prunes handles whose send failed).
All mutation happens under one asyncio.Lock; broadcast iterates a copy.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Awaitable, List, Optional, Protocol, Set

from tempo_notify.core.logging import log_context
from tempo_notify.core.metrics import Metrics

logger = logging.getLogger("tempo.notify.registry")


class PushSocket(Protocol):
    """The subset of starlette.websockets.WebSocket a handle relies on."""

    def send_text(self, data: str) -> Awaitable[None]: ...

    def close(self, code: int = 1000, reason: Optional[str] = None) -> Awaitable[None]: ...


class ConnectionHandle:
    """
    One live push-capable client connection.

    Hashes by identity: every accepted socket gets its own handle.
    """

    def __init__(self, socket: PushSocket, connection_id: Optional[str] = None) -> None:
        self.socket = socket
        self.connection_id = connection_id or uuid.uuid4().hex[:12]
        self.connected_at = datetime.now(timezone.utc)

    async def send(self, message: str, timeout: Optional[float] = None) -> None:
        """Send one text frame. Raises on failure or timeout."""
        if timeout is None:
            await self.socket.send_text(message)
        else:
            await asyncio.wait_for(self.socket.send_text(message), timeout)

    async def close(self, code: int = 1000) -> None:
        """Best-effort close; never raises."""
        try:
            await self.socket.close(code=code)
        except Exception as exc:
            logger.debug(
                "Close on %s failed: %s", self.connection_id, exc,
                extra=log_context(connection_id=self.connection_id),
            )

    def __repr__(self) -> str:
        return f"ConnectionHandle(id={self.connection_id!r})"


class ConnectionRegistry:
    """Lock-guarded set of ConnectionHandles."""

    def __init__(self, metrics: Optional[Metrics] = None) -> None:
        self._handles: Set[ConnectionHandle] = set()
        self._lock = asyncio.Lock()
        self._metrics = metrics or Metrics()

    async def register(self, handle: ConnectionHandle) -> None:
        async with self._lock:
            self._handles.add(handle)
            count = len(self._handles)
        self._metrics.inc("ws_connected")
        self._metrics.set_gauge("connections", count)
        logger.info(
            "Client registered (%d connected)", count,
            extra=log_context(connection_id=handle.connection_id),
        )

    async def unregister(self, handle: ConnectionHandle) -> bool:
        """
        Remove a handle. Idempotent.

        Returns:
            True if the handle was present, False if it was already gone.
        """
        async with self._lock:
            if handle not in self._handles:
                return False
            self._handles.discard(handle)
            count = len(self._handles)
        self._metrics.inc("ws_disconnected")
        self._metrics.set_gauge("connections", count)
        logger.info(
            "Client unregistered (%d connected)", count,
            extra=log_context(connection_id=handle.connection_id),
        )
        return True

    async def snapshot(self) -> List[ConnectionHandle]:
        """Copy of the current handles, taken under the lock."""
        async with self._lock:
            return list(self._handles)

    async def close_all(self, code: int = 1001) -> int:
        """Close and remove every handle. Returns how many were closed."""
        async with self._lock:
            handles = list(self._handles)
            self._handles.clear()
        for handle in handles:
            await handle.close(code=code)
        self._metrics.set_gauge("connections", 0)
        if handles:
            logger.info("Closed %d client connections", len(handles))
        return len(handles)

    def __contains__(self, handle: Any) -> bool:
        return handle in self._handles

    def __len__(self) -> int:
        return len(self._handles)
