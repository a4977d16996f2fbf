"""Severity boundaries for every probe type — immutable, injected into the Classifier."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, model_validator


class Bounds(BaseModel):
    """A ``(normal, warning)`` pair in milliseconds.

    ``value <= normal`` is ok, ``normal < value <= warning`` is high,
    anything above ``warning`` is very high.
    """

    model_config = ConfigDict(frozen=True)

    normal: float
    warning: float

    @model_validator(mode="after")
    def _check_order(self) -> Bounds:
        if self.normal > self.warning:
            raise ValueError(f"normal bound {self.normal} exceeds warning bound {self.warning}")
        return self


class TtlBounds(BaseModel):
    """A ``(low, high)`` DNS TTL pair in seconds, both ends inclusive to ok."""

    model_config = ConfigDict(frozen=True)

    low: float
    high: float

    @model_validator(mode="after")
    def _check_order(self) -> TtlBounds:
        if self.low > self.high:
            raise ValueError(f"low bound {self.low} exceeds high bound {self.high}")
        return self


class HttpThresholds(BaseModel):
    """Per-phase bounds for HTTP timings."""

    model_config = ConfigDict(frozen=True)

    total: Bounds = Bounds(normal=1000, warning=3000)
    dns: Bounds = Bounds(normal=100, warning=300)
    tcp: Bounds = Bounds(normal=100, warning=300)
    tls: Bounds = Bounds(normal=200, warning=500)
    first_byte: Bounds = Bounds(normal=200, warning=500)
    download: Bounds = Bounds(normal=500, warning=1500)


class ThresholdTable(BaseModel):
    """All boundary values the Classifier compares against."""

    model_config = ConfigDict(frozen=True)

    rtt: Bounds = Bounds(normal=100, warning=300)
    jitter: Bounds = Bounds(normal=30, warning=100)
    ttl: TtlBounds = TtlBounds(low=32, high=255)
    http: HttpThresholds = HttpThresholds()
