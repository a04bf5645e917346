"""Temperature readings — what the sensor sends and what the smoother returns."""

from __future__ import annotations

from pydantic import BaseModel, Field

from brew_conductor.foundation.clock import now_ms


class SensorSample(BaseModel):
    """One raw sample from the temperature sensor.

    Validated at the ingestion boundary.  Sensors that do not stamp their
    samples get the server clock.
    """

    value: float = Field(..., ge=-100.0, le=250.0, description="Raw temperature in °C")
    timestamp_ms: int = Field(default_factory=now_ms, ge=0, description="Epoch milliseconds")

    model_config = {"frozen": True}


class SmoothedReading(BaseModel):
    """Immutable output of the signal smoother for one accepted sample."""

    raw: float = Field(..., description="Raw sample the reading was derived from")
    smoothed: float = Field(..., description="Exponentially smoothed temperature (°C)")
    rate_per_second: float = Field(..., description="Smoothed rate of change (°C/s)")
    rate_per_minute: float = Field(..., description="Smoothed rate of change (°C/min)")
    timestamp_ms: int = Field(..., description="Timestamp of the accepted sample")

    model_config = {"frozen": True}
