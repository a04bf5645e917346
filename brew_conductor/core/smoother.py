"""SignalSmoother — exponential smoothing of an irregular temperature stream.

Design principles:
    1. One instance per sensor stream; state lives only inside it.
    2. Samples may arrive at any spacing; dt is taken from their timestamps.
    3. Out-of-order or duplicate timestamps never mutate state.

Formulas (dt in seconds between consecutive accepted samples):
    smoothed'  = alpha_temp * raw + (1 - alpha_temp) * smoothed
    raw_rate   = (raw - previous_raw) / dt
    rate'      = alpha_rate * raw_rate + (1 - alpha_rate) * rate
    per_minute = rate' * 60

The rate is derived from consecutive *raw* samples, not from consecutive
smoothed values.  Differencing the smoothed series would damp the rate a
second time and lag behind real heating and cooling.
"""

from __future__ import annotations

import logging

from brew_conductor.domain.readings import SmoothedReading

logger = logging.getLogger(__name__)


class SignalSmoother:
    """Turns raw samples into a smoothed temperature and a rate estimate.

    Args:
        alpha_temp: Smoothing factor for the temperature, in (0, 1].
        alpha_rate: Smoothing factor for the rate of change, in (0, 1].
    """

    def __init__(self, alpha_temp: float = 0.2, alpha_rate: float = 0.3) -> None:
        for name, alpha in (("alpha_temp", alpha_temp), ("alpha_rate", alpha_rate)):
            if not 0.0 < alpha <= 1.0:
                raise ValueError(f"{name} must be in (0, 1], got {alpha}")

        self._alpha_temp = alpha_temp
        self._alpha_rate = alpha_rate
        self._smoothed: float | None = None
        self._rate: float = 0.0
        self._last_raw: float | None = None
        self._last_timestamp_ms: int | None = None
        self._last: SmoothedReading | None = None

    # ── Public API ───────────────────────────────────────────────────────

    def push(self, raw_value: float, timestamp_ms: int) -> SmoothedReading:
        """Fold one sample into the filter and return the current output."""
        if self._smoothed is None or self._last_timestamp_ms is None:
            self._smoothed = raw_value
            self._rate = 0.0
            self._last_raw = raw_value
            self._last_timestamp_ms = timestamp_ms
            self._last = SmoothedReading(
                raw=raw_value,
                smoothed=raw_value,
                rate_per_second=0.0,
                rate_per_minute=0.0,
                timestamp_ms=timestamp_ms,
            )
            return self._last

        dt = (timestamp_ms - self._last_timestamp_ms) / 1000.0
        if dt <= 0:
            logger.debug(
                "Ignoring sample at %d (last accepted %d)",
                timestamp_ms,
                self._last_timestamp_ms,
            )
            assert self._last is not None
            return self._last

        smoothed = self._alpha_temp * raw_value + (1.0 - self._alpha_temp) * self._smoothed
        raw_rate = (raw_value - self._last_raw) / dt
        rate = self._alpha_rate * raw_rate + (1.0 - self._alpha_rate) * self._rate

        self._smoothed = smoothed
        self._rate = rate
        self._last_raw = raw_value
        self._last_timestamp_ms = timestamp_ms
        self._last = SmoothedReading(
            raw=raw_value,
            smoothed=smoothed,
            rate_per_second=rate,
            rate_per_minute=rate * 60.0,
            timestamp_ms=timestamp_ms,
        )
        return self._last

    def reset(self) -> None:
        """Forget all history; the next sample re-initialises the filter."""
        self._smoothed = None
        self._rate = 0.0
        self._last_raw = None
        self._last_timestamp_ms = None
        self._last = None

    @property
    def last(self) -> SmoothedReading | None:
        """The most recent output, or None before the first sample."""
        return self._last
