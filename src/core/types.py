"""Domain types — probe definitions and Globalping measurement results.

Measurement payloads are parsed into a tagged union keyed by the
measurement ``type``, so each probe type carries its own result shape.
"""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum
from typing import Annotated, Any, Generic, Literal, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter
from pydantic.alias_generators import to_camel


class ProbeType(StrEnum):
    """Measurement type understood by the Globalping API."""

    PING = "ping"
    TRACEROUTE = "traceroute"
    DNS = "dns"
    MTR = "mtr"
    HTTP = "http"


class ResultStatus(StrEnum):
    """Status of a measurement or of one probe's result."""

    IN_PROGRESS = "in-progress"
    FINISHED = "finished"
    FAILED = "failed"
    OFFLINE = "offline"


# Result statuses that short-circuit classification with a critical alert.
UNFINISHED_STATUSES: frozenset[str] = frozenset({
    ResultStatus.IN_PROGRESS,
    ResultStatus.FAILED,
    ResultStatus.OFFLINE,
})


# ── Probe definitions ────────────────────────────────────────────


class ProbeDefinition(BaseModel):
    """One configured monitor: a target, a probe type, and a cron schedule.

    Any further Globalping request options (``locations``, ``limit``,
    ``measurementOptions``, ...) are kept as extra fields and passed
    through untouched.
    """

    model_config = ConfigDict(frozen=True, extra="allow", populate_by_name=True)

    target: str
    type: ProbeType
    cron_expression: str = Field(alias="cronExpression")

    @property
    def label(self) -> str:
        return f"{self.target}-{self.type.value}"

    def to_request(self) -> dict[str, Any]:
        """API request body — everything except the schedule expression."""
        return self.model_dump(
            mode="json",
            by_alias=True,
            exclude={"cron_expression"},
        )


class MeasurementHandle(BaseModel):
    """Identifier of a submitted measurement job."""

    id: str
    probes_count: int = 0


# ── Measurement results ──────────────────────────────────────────


class _ApiModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="ignore",
    )


class ProbeLocation(_ApiModel):
    """Where the measurement was run from."""

    continent: str | None = None
    region: str | None = None
    country: str | None = None
    state: str | None = None
    city: str | None = None
    asn: int | None = None
    network: str | None = None


class _TestResult(_ApiModel):
    status: str
    raw_output: str | None = None


class PingStats(_ApiModel):
    min: float | None = None
    avg: float | None = None
    max: float | None = None
    total: int = 0
    rcv: int = 0
    drop: int = 0
    loss: float = 0.0


class PingTiming(_ApiModel):
    rtt: float
    ttl: int | None = None


class PingTestResult(_TestResult):
    resolved_address: str | None = None
    resolved_hostname: str | None = None
    timings: list[PingTiming] = Field(default_factory=list)
    stats: PingStats | None = None


class RttTiming(_ApiModel):
    rtt: float


class TracerouteHop(_ApiModel):
    resolved_address: str | None = None
    resolved_hostname: str | None = None
    timings: list[RttTiming] = Field(default_factory=list)


class TracerouteTestResult(_TestResult):
    resolved_address: str | None = None
    resolved_hostname: str | None = None
    hops: list[TracerouteHop] = Field(default_factory=list)


class DnsAnswer(_ApiModel):
    name: str | None = None
    type: str | None = None
    ttl: float
    value: str | None = None


class DnsTraceHop(_ApiModel):
    resolver: str | None = None
    answers: list[DnsAnswer] = Field(default_factory=list)


class DnsTestResult(_TestResult):
    """Simple lookups carry ``answers``; trace lookups carry ``hops``."""

    resolver: str | None = None
    answers: list[DnsAnswer] | None = None
    hops: list[DnsTraceHop] | None = None

    @property
    def is_trace(self) -> bool:
        return self.answers is None


class MtrStats(_ApiModel):
    min: float = 0.0
    avg: float = 0.0
    max: float = 0.0
    st_dev: float = 0.0
    j_min: float = 0.0
    j_avg: float = 0.0
    j_max: float = 0.0
    total: int = 0
    rcv: int = 0
    drop: int = 0
    loss: float = 0.0


class MtrHop(_ApiModel):
    resolved_address: str | None = None
    resolved_hostname: str | None = None
    stats: MtrStats = MtrStats()
    timings: list[RttTiming] = Field(default_factory=list)


class MtrTestResult(_TestResult):
    resolved_address: str | None = None
    resolved_hostname: str | None = None
    hops: list[MtrHop] = Field(default_factory=list)


class HttpTimings(_ApiModel):
    total: float | None = None
    dns: float | None = None
    tcp: float | None = None
    tls: float | None = None
    first_byte: float | None = None
    download: float | None = None


class TlsCertificate(_ApiModel):
    authorized: bool
    error: str | None = None
    created_at: datetime | None = None
    expires_at: datetime
    protocol: str | None = None


class HttpTestResult(_TestResult):
    resolved_address: str | None = None
    status_code: int | None = None
    timings: HttpTimings = HttpTimings()
    tls: TlsCertificate | None = None


ResultT = TypeVar("ResultT", bound=_TestResult)


class ProbeResult(_ApiModel, Generic[ResultT]):
    """One probe's contribution to a measurement."""

    probe: ProbeLocation = ProbeLocation()
    result: ResultT


class _BaseMeasurement(_ApiModel):
    id: str
    target: str
    status: str
    created_at: str | None = None
    updated_at: str | None = None
    probes_count: int = 0
    raw: dict[str, Any] = Field(default_factory=dict, exclude=True)


class PingMeasurement(_BaseMeasurement):
    type: Literal["ping"]
    results: list[ProbeResult[PingTestResult]] = Field(default_factory=list)


class TracerouteMeasurement(_BaseMeasurement):
    type: Literal["traceroute"]
    results: list[ProbeResult[TracerouteTestResult]] = Field(default_factory=list)


class DnsMeasurement(_BaseMeasurement):
    type: Literal["dns"]
    results: list[ProbeResult[DnsTestResult]] = Field(default_factory=list)


class MtrMeasurement(_BaseMeasurement):
    type: Literal["mtr"]
    results: list[ProbeResult[MtrTestResult]] = Field(default_factory=list)


class HttpMeasurement(_BaseMeasurement):
    type: Literal["http"]
    results: list[ProbeResult[HttpTestResult]] = Field(default_factory=list)


Measurement = Annotated[
    Union[
        PingMeasurement,
        TracerouteMeasurement,
        DnsMeasurement,
        MtrMeasurement,
        HttpMeasurement,
    ],
    Field(discriminator="type"),
]

AnyTestResult = Union[
    PingTestResult,
    TracerouteTestResult,
    DnsTestResult,
    MtrTestResult,
    HttpTestResult,
]

_MEASUREMENT_ADAPTER: TypeAdapter[Measurement] = TypeAdapter(Measurement)


def parse_measurement(payload: dict[str, Any]) -> Measurement:
    """Validate a raw measurement payload into its typed variant.

    The unparsed payload is kept on ``raw`` for persistence.

    Raises:
        pydantic.ValidationError: unknown ``type`` or malformed body.
    """
    return _MEASUREMENT_ADAPTER.validate_python({**payload, "raw": payload})
