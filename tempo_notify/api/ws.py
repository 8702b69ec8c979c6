# Copyright (c) 2026 TempoOS Contributors. All Rights Reserved.

"""
WebSocket Notification Push — one registered handle per connected client.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, WebSocket

from tempo_notify.api.deps import get_notify_context
from tempo_notify.core.context import NotifyContext
from tempo_notify.core.logging import log_context
from tempo_notify.kernel.registry import ConnectionHandle

router = APIRouter()
logger = logging.getLogger("tempo.notify.ws")


@router.websocket("/ws")
async def notifications(
    websocket: WebSocket,
    ctx: NotifyContext = Depends(get_notify_context),
):
    """
    Push channel for schedule notifications.

    - Registers the connection after the handshake
    - Reads and discards anything the client sends, text or binary
    - Unregisters on disconnect or read error
    """
    try:
        await websocket.accept()
    except Exception as exc:
        logger.warning("WebSocket upgrade failed: %s", exc)
        return

    handle = ConnectionHandle(websocket)
    extra = log_context(connection_id=handle.connection_id)
    await ctx.registry.register(handle)

    try:
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                logger.info(
                    "WebSocket client disconnected (code=%s)", message.get("code"), extra=extra,
                )
                break
    except Exception as exc:
        logger.warning("WebSocket read failed: %s", exc, extra=extra)
    finally:
        await ctx.registry.unregister(handle)
