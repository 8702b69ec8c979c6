# Copyright (c) 2026 TempoOS Contributors. All Rights Reserved.

"""
Schedule API — Arm, inspect and cancel the clock matcher.

POST /schedule is fire-and-forget: it arms the matcher and returns at once.
Every other method on /schedule gets 405 from the router.
"""

from __future__ import annotations

import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, PlainTextResponse
from pydantic import BaseModel, StrictStr, ValidationError

from tempo_notify.api.deps import get_notify_context
from tempo_notify.api.errors import NoActiveScheduleError
from tempo_notify.core.context import NotifyContext
from tempo_notify.core.logging import log_context

router = APIRouter(tags=["schedule"])
logger = logging.getLogger("tempo.notify.api.schedule")

SCHEDULED_MESSAGE = "Time scheduled successfully"


class ScheduleRequest(BaseModel):
    # "HH:MM", 24-hour; not range-checked. Absent decodes to "", which never matches
    time: StrictStr = ""


@router.post("/schedule")
async def schedule_time(
    request: Request,
    ctx: NotifyContext = Depends(get_notify_context),
):
    """Arm the matcher with a new target, superseding any pending one."""
    body = await request.body()
    try:
        payload = ScheduleRequest.model_validate_json(body)
    except ValidationError as exc:
        logger.info(
            "Rejected schedule body: %d errors", exc.error_count(),
            extra=log_context(trace_id=getattr(request.state, "trace_id", None)),
        )
        return PlainTextResponse("Invalid JSON", status_code=400)

    ctx.matcher.arm(payload.time)
    return JSONResponse({"message": SCHEDULED_MESSAGE})


@router.get("/api/schedule")
async def get_schedule(ctx: NotifyContext = Depends(get_notify_context)) -> Dict[str, Any]:
    """Current matcher state and the outcome of the last target."""
    return ctx.matcher.status()


@router.delete("/api/schedule")
async def cancel_schedule(
    request: Request,
    ctx: NotifyContext = Depends(get_notify_context),
) -> Dict[str, Any]:
    """Disarm the pending target."""
    target = ctx.matcher.disarm()
    if target is None:
        raise NoActiveScheduleError(trace_id=getattr(request.state, "trace_id", None))
    return {"message": "Schedule cancelled", "target": target.to_dict()}
