"""Time sources for restart trigger timestamps."""

from __future__ import annotations

import threading
from datetime import UTC, datetime, timedelta
from typing import Protocol

RFC3339_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


class Clock(Protocol):
    """Source of the current time as a timezone-aware datetime."""

    def now(self) -> datetime: ...


class SystemClock:
    """Wall-clock time in UTC."""

    def now(self) -> datetime:
        return datetime.now(UTC)


class MonotonicClock:
    """Clock whose readings strictly increase at one-second resolution.

    The restart annotation is second-granular, so two restarts of the same
    workload inside one second would otherwise write an identical value and
    the second one would not roll anything. When the source has not moved
    past the previous reading, the previous reading plus one second is
    returned instead.
    """

    def __init__(self, source: Clock | None = None) -> None:
        self._source = source or SystemClock()
        self._last: datetime | None = None
        self._lock = threading.Lock()

    def now(self) -> datetime:
        current = self._source.now().astimezone(UTC).replace(microsecond=0)
        with self._lock:
            if self._last is not None and current <= self._last:
                current = self._last + timedelta(seconds=1)
            self._last = current
        return current


def format_restart_timestamp(moment: datetime) -> str:
    """Format a datetime as RFC 3339 in UTC, e.g. ``2024-05-01T12:00:00Z``."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=UTC)
    return moment.astimezone(UTC).strftime(RFC3339_FORMAT)
