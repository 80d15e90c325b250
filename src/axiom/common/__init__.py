"""
Shared utilities for AXIOM.
"""

from axiom.common.timebase import (
    Timebase,
    UTCClock,
    MonotonicClock,
    DictatedClock,
)

__all__ = [
    "Timebase",
    "UTCClock",
    "MonotonicClock",
    "DictatedClock",
]
