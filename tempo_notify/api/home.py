# Copyright (c) 2026 TempoOS Contributors. All Rights Reserved.

"""
Home page — the static scheduling UI.
"""

from __future__ import annotations

from pathlib import Path

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import FileResponse

from tempo_notify.api.deps import get_notify_context
from tempo_notify.core.context import NotifyContext

router = APIRouter(tags=["static"])


@router.get("/", include_in_schema=False)
async def home(ctx: NotifyContext = Depends(get_notify_context)):
    index = Path(ctx.settings.STATIC_INDEX)
    if not index.is_file():
        raise HTTPException(status_code=404, detail="Home page not found")
    return FileResponse(index, media_type="text/html")
