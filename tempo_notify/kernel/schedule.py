# Copyright (c) 2026 TempoOS Contributors. All Rights Reserved.

"""
Schedule primitives — the armed target and the matcher's command messages.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Union

NOTIFY_TEMPLATE = "Notify the user: It's {time}"


def notification_message(time_of_day: str) -> str:
    """Build the text pushed to clients when a target matches."""
    return NOTIFY_TEMPLATE.format(time=time_of_day)


@dataclass(frozen=True)
class ScheduleTarget:
    """
    A time of day ("HH:MM", 24-hour) the matcher is watching for.

    The value is not range-checked; a malformed time never equals a
    formatted clock reading and so never matches.
    """

    time: str
    target_id: str = field(default_factory=lambda: uuid.uuid4().hex[:12])
    armed_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def matches(self, time_of_day: str) -> bool:
        return self.time == time_of_day

    def to_dict(self) -> Dict[str, Any]:
        return {
            "time": self.time,
            "target_id": self.target_id,
            "armed_at": self.armed_at.isoformat(),
        }


@dataclass(frozen=True)
class ArmCommand:
    target: ScheduleTarget


@dataclass(frozen=True)
class DisarmCommand:
    pass


MatcherCommand = Union[ArmCommand, DisarmCommand]
