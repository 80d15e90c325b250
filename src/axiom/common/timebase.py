#!/usr/bin/env python3
"""
Pluggable clocks.

The engine reads two clocks: a wall clock for the ``fired_at`` and event
timestamps in the audit trail, and a monotonic clock for step and firing
durations. Tests substitute a DictatedClock for both.
"""

from abc import ABC, abstractmethod
from datetime import datetime, timezone
from time import monotonic


class Timebase(ABC):
    @abstractmethod
    def now(self) -> float:
        """Seconds, in whatever epoch the clock uses."""

    def isoformat(self) -> str:
        """Current time as an ISO-8601 UTC string."""
        return datetime.fromtimestamp(self.now(), timezone.utc).isoformat()


class UTCClock(Timebase):
    def now(self) -> float:
        return datetime.now(timezone.utc).timestamp()


class MonotonicClock(Timebase):
    def now(self) -> float:
        return monotonic()


class DictatedClock(Timebase):
    """Clock that only moves when told to."""

    def __init__(self, initial: float):
        self.value = initial
        self._initial = initial

    def now(self) -> float:
        return self.value

    def set(self, val: float) -> None:
        self.value = val

    def advance(self, seconds: float) -> None:
        self.value += seconds

    def reset(self) -> None:
        self.value = self._initial
