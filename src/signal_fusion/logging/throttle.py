"""Keyed rate limiting for log lines emitted from periodic event handlers."""

from __future__ import annotations

from datetime import datetime


class LogThrottle:
    """Allows one log line per key per *interval_s* of event time.

    Event time is passed in explicitly so throttling follows the event
    stream rather than the wall clock.
    """

    def __init__(self, interval_s: float) -> None:
        self.interval_s = interval_s
        self._last: dict[str, datetime] = {}

    def should_log(self, key: str, now: datetime) -> bool:
        last = self._last.get(key)
        if last is not None and (now - last).total_seconds() < self.interval_s:
            return False
        self._last[key] = now
        return True

    def reset(self, key: str | None = None) -> None:
        if key is None:
            self._last.clear()
        else:
            self._last.pop(key, None)
