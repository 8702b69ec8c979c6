# Copyright (c) 2026 TempoOS Contributors. All Rights Reserved.

"""
WallClock — Time-of-day readings in one configured timezone.

The timezone is applied exactly once: ``now()`` converts the UTC instant
into the configured zone. No additional fixed offset is layered on top.
"""

from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone, tzinfo
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

TIME_OF_DAY_FORMAT = "%H:%M"

_OFFSET_RE = re.compile(r"^([+-])(\d{1,2}):?(\d{2})$")


def parse_timezone(value: str) -> tzinfo:
    """
    Resolve a timezone setting.

    Accepts a fixed UTC offset ("+05:30", "-0800", "Z", "UTC") or an
    IANA zone name ("Asia/Kolkata").

    Raises:
        ValueError: if the value is neither.
    """
    raw = (value or "").strip()
    if raw.upper() in ("Z", "UTC"):
        return timezone.utc

    m = _OFFSET_RE.match(raw)
    if m:
        sign, hours, minutes = m.groups()
        if int(hours) > 23 or int(minutes) > 59:
            raise ValueError(f"Offset out of range: {value!r}")
        delta = timedelta(hours=int(hours), minutes=int(minutes))
        return timezone(-delta if sign == "-" else delta)

    try:
        return ZoneInfo(raw)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ValueError(f"Unknown timezone: {value!r}") from exc


class WallClock:
    """Reads the current wall-clock time in a single timezone."""

    def __init__(self, tz: tzinfo = timezone.utc) -> None:
        self._tz = tz

    @property
    def tz(self) -> tzinfo:
        return self._tz

    def now(self) -> datetime:
        return datetime.now(timezone.utc).astimezone(self._tz)

    def time_of_day(self) -> str:
        """Current time of day as "HH:MM" (24-hour)."""
        return self.now().strftime(TIME_OF_DAY_FORMAT)
