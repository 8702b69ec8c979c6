# Copyright (c) 2026 TempoOS Contributors. All Rights Reserved.

"""
Metrics — In-memory counters for scheduling and broadcast observability.

One instance lives on the NotifyContext; there is no process-wide global.
"""

from __future__ import annotations

import time
from collections import defaultdict, deque
from typing import Any, Deque, Dict

MAX_OBSERVATIONS = 500


class Metrics:
    """Counters, gauges and bounded latency windows."""

    def __init__(self) -> None:
        self._counters: Dict[str, int] = defaultdict(int)
        self._gauges: Dict[str, float] = {}
        self._windows: Dict[str, Deque[float]] = defaultdict(
            lambda: deque(maxlen=MAX_OBSERVATIONS)
        )
        self._start_time = time.monotonic()

    def inc(self, name: str, amount: int = 1) -> None:
        self._counters[name] += amount

    def get_counter(self, name: str) -> int:
        return self._counters.get(name, 0)

    def set_gauge(self, name: str, value: float) -> None:
        self._gauges[name] = value

    def get_gauge(self, name: str) -> float:
        return self._gauges.get(name, 0.0)

    def observe(self, name: str, value: float) -> None:
        """Record one observation (e.g. broadcast latency in ms)."""
        self._windows[name].append(value)

    def snapshot(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            "uptime_seconds": round(time.monotonic() - self._start_time, 1),
            "counters": dict(self._counters),
            "gauges": dict(self._gauges),
        }
        for name, values in self._windows.items():
            if values:
                result[f"histogram_{name}"] = {
                    "count": len(values),
                    "avg": round(sum(values) / len(values), 2),
                    "max": round(max(values), 2),
                    "min": round(min(values), 2),
                }
        return result
