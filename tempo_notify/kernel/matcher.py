# Copyright (c) 2026 TempoOS Contributors. All Rights Reserved.

"""
ClockMatcher — Polls the wall clock until it reads the armed time of day.

A single long-lived asyncio task owns the current ScheduleTarget. Callers
never touch the target directly: ``arm()`` and ``disarm()`` enqueue
commands, and the owning task applies them between polls. Arming while a
target is pending supersedes it, so at most one target is ever compared
against the clock and a superseded target can never fire.

Loop, per armed target:
  - read ``clock.time_of_day()`` and compare with the target ("HH:MM")
  - on match: broadcast once, then go idle (one-shot)
  - otherwise: wait up to ``poll_interval`` for the next command
  - after ``max_wait`` seconds without a match: expire and go idle
"""

from __future__ import annotations

import asyncio
import logging
import time
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Protocol

from tempo_notify.core.logging import log_context
from tempo_notify.core.metrics import Metrics
from tempo_notify.kernel.broadcaster import Broadcaster
from tempo_notify.kernel.schedule import (
    ArmCommand,
    DisarmCommand,
    MatcherCommand,
    ScheduleTarget,
    notification_message,
)

logger = logging.getLogger("tempo.notify.matcher")


class TimeSource(Protocol):
    def time_of_day(self) -> str: ...


class ClockMatcher:
    """Single-owner polling loop matching the clock against one target."""

    def __init__(
        self,
        clock: TimeSource,
        broadcaster: Broadcaster,
        poll_interval: float = 30.0,
        max_wait: Optional[float] = None,
        metrics: Optional[Metrics] = None,
    ) -> None:
        """
        Args:
            clock: Anything with ``time_of_day() -> "HH:MM"``.
            broadcaster: Receives the notification on match.
            poll_interval: Seconds between clock checks.
            max_wait: Seconds after arming before an unmatched target
                expires. ``None`` or ``<= 0`` waits forever.
        """
        self._clock = clock
        self._broadcaster = broadcaster
        self._poll_interval = poll_interval
        self._max_wait = max_wait if max_wait and max_wait > 0 else None
        self._metrics = metrics or Metrics()
        self._commands: asyncio.Queue[MatcherCommand] = asyncio.Queue()
        self._task: Optional[asyncio.Task] = None
        # Most recent request; what the owning task is (or is about to be) watching
        self._requested: Optional[ScheduleTarget] = None
        self._polls: int = 0
        self._last_outcome: Optional[Dict[str, Any]] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def pending(self) -> Optional[ScheduleTarget]:
        return self._requested

    # ── Lifecycle ───────────────────────────────────────────────

    async def start(self) -> None:
        """Start the owning task."""
        if self.running:
            return
        self._task = asyncio.create_task(self._run(), name="clock-matcher")
        logger.info(
            "ClockMatcher started (poll=%.2fs max_wait=%s)",
            self._poll_interval, self._max_wait,
        )

    async def stop(self) -> None:
        """Cancel the owning task and any pending target."""
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        if self._requested is not None:
            self._record(self._requested, "cancelled")
        logger.info("ClockMatcher stopped")

    # ── Commands ────────────────────────────────────────────────

    def arm(self, time_of_day: str) -> ScheduleTarget:
        """Arm a new target, superseding any pending one. Returns immediately."""
        target = ScheduleTarget(time=time_of_day)
        self._requested = target
        self._commands.put_nowait(ArmCommand(target))
        self._metrics.inc("schedule_armed")
        logger.info(
            "Schedule armed for %s", target.time,
            extra=log_context(target_id=target.target_id),
        )
        return target

    def disarm(self) -> Optional[ScheduleTarget]:
        """Drop the pending target, if any. Returns the dropped target."""
        previous = self._requested
        self._requested = None
        self._commands.put_nowait(DisarmCommand())
        return previous

    def status(self) -> Dict[str, Any]:
        target = self._requested
        return {
            "state": "armed" if target is not None else "idle",
            "running": self.running,
            "target": target.to_dict() if target is not None else None,
            "polls": self._polls,
            "poll_interval": self._poll_interval,
            "max_wait": self._max_wait,
            "last_outcome": self._last_outcome,
        }

    # ── Owning task ─────────────────────────────────────────────

    async def _run(self) -> None:
        target: Optional[ScheduleTarget] = None
        deadline: Optional[float] = None

        while True:
            if target is None:
                command: Optional[MatcherCommand] = await self._commands.get()
            else:
                if self._poll(target):
                    await self._fire(target)
                    target, deadline = None, None
                    continue
                if deadline is not None and time.monotonic() >= deadline:
                    self._expire(target)
                    target, deadline = None, None
                    continue
                command = await self._next_command(self._poll_interval)
                if command is None:
                    continue

            target, deadline = self._apply(command, target, deadline)
            # Apply anything queued behind it before the next poll
            while not self._commands.empty():
                target, deadline = self._apply(self._commands.get_nowait(), target, deadline)

    async def _next_command(self, timeout: float) -> Optional[MatcherCommand]:
        try:
            return await asyncio.wait_for(self._commands.get(), timeout)
        except asyncio.TimeoutError:
            return None

    def _apply(
        self,
        command: MatcherCommand,
        current: Optional[ScheduleTarget],
        deadline: Optional[float],
    ) -> tuple[Optional[ScheduleTarget], Optional[float]]:
        if isinstance(command, ArmCommand):
            if current is not None:
                self._metrics.inc("schedule_superseded")
                self._record(current, "superseded")
                logger.info(
                    "Schedule %s superseded by %s", current.time, command.target.time,
                    extra=log_context(target_id=current.target_id),
                )
            self._polls = 0
            new_deadline = (
                time.monotonic() + self._max_wait if self._max_wait is not None else None
            )
            return command.target, new_deadline

        if isinstance(command, DisarmCommand):
            if current is not None:
                self._metrics.inc("schedule_disarmed")
                self._record(current, "disarmed")
                logger.info(
                    "Schedule %s disarmed", current.time,
                    extra=log_context(target_id=current.target_id),
                )
            return None, None

        logger.error("Unknown matcher command: %r", command)
        return current, deadline

    def _poll(self, target: ScheduleTarget) -> bool:
        self._polls += 1
        try:
            now = self._clock.time_of_day()
        except Exception as exc:
            logger.error("Clock read failed on poll #%d: %s", self._polls, exc)
            return False
        logger.debug(
            "Poll #%d: now=%s target=%s", self._polls, now, target.time,
            extra=log_context(target_id=target.target_id),
        )
        return target.matches(now)

    async def _fire(self, target: ScheduleTarget) -> None:
        message = notification_message(target.time)
        logger.info(
            "Schedule matched at %s", target.time,
            extra=log_context(target_id=target.target_id),
        )
        self._metrics.inc("schedule_matched")
        try:
            await self._broadcaster.broadcast(message)
        except Exception as exc:
            logger.error(
                "Broadcast for %s failed: %s", target.time, exc, exc_info=True,
                extra=log_context(target_id=target.target_id),
            )
        self._record(target, "matched")

    def _expire(self, target: ScheduleTarget) -> None:
        self._metrics.inc("schedule_expired")
        self._record(target, "expired")
        logger.warning(
            "Schedule %s expired after %d polls without a match",
            target.time, self._polls,
            extra=log_context(target_id=target.target_id),
        )

    def _record(self, target: ScheduleTarget, outcome: str) -> None:
        self._last_outcome = {
            "outcome": outcome,
            "time": target.time,
            "target_id": target.target_id,
            "at": datetime.now(timezone.utc).isoformat(),
        }
        if self._requested is target:
            self._requested = None
