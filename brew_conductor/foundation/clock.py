"""Millisecond wall clock.

Sensor timestamps and activation stamps are integer milliseconds since the
epoch.  This module is the single source of "now" so tests can monkey-patch
it trivially.
"""

from __future__ import annotations

import time


def now_ms() -> int:
    """Return the current wall-clock time in integer milliseconds."""
    return time.time_ns() // 1_000_000
