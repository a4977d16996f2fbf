"""Classifier — turns finished measurement results into severity-graded alerts.

Every branch evaluates its fields in a fixed order and emits exactly one
bucket alert per present value (or one "null" alert per missing value).
Bucket edges are inclusive at the lower end of each bucket:

    value <= normal            -> INFO     ("ok")
    normal < value <= warning  -> WARNING  ("high")
    value > warning            -> CRITICAL ("very high")
"""

from __future__ import annotations

import datetime
from collections.abc import Callable, Iterable
from statistics import fmean

from src.core.thresholds import Bounds, ThresholdTable
from src.core.types import (
    UNFINISHED_STATUSES,
    AnyTestResult,
    DnsTestResult,
    HttpTestResult,
    Measurement,
    MtrHop,
    MtrTestResult,
    PingTestResult,
    ProbeType,
    TlsCertificate,
    TracerouteTestResult,
)
from src.monitor.types import Alert, Severity
from src.probes.durations import format_duration_ms

Clock = Callable[[], datetime.datetime]

_BUCKET_WORDS: dict[Severity, str] = {
    Severity.INFO: "ok",
    Severity.WARNING: "high",
    Severity.CRITICAL: "very high",
}

_WEEK = datetime.timedelta(days=7)
_MONTH = datetime.timedelta(days=30)
_ONE_MS = datetime.timedelta(milliseconds=1)


def _utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.UTC)


def _fmt(value: float) -> str:
    """Exact number rendering, ``50`` not ``50.0``; never rounded past its bucket."""
    number = float(value)
    return str(int(number)) if number.is_integer() else repr(number)


def _mean(values: Iterable[float]) -> float:
    collected = list(values)
    return fmean(collected) if collected else 0.0


def bucket(value: float, bounds: Bounds) -> Severity:
    """Severity bucket of *value* against a ``(normal, warning)`` pair."""
    if value <= bounds.normal:
        return Severity.INFO
    if value <= bounds.warning:
        return Severity.WARNING
    return Severity.CRITICAL


def _bucket_alert(subject: str, value: float | None, bounds: Bounds) -> Alert:
    if value is None:
        return Alert(text=f"{subject} is null", severity=Severity.CRITICAL)
    severity = bucket(value, bounds)
    return Alert(text=f"{subject} is {_BUCKET_WORDS[severity]} {_fmt(value)} ms", severity=severity)


def _drop_alert(drop: int, loss: float, prefix: str = "") -> Alert:
    return Alert(
        text=f"{prefix}has dropped packets {drop}({_fmt(loss)}%)",
        severity=Severity.CRITICAL,
    )


class Classifier:
    """Pure per-probe-type classification against an injected ThresholdTable.

    The only outside input is *clock*, used for certificate expiry.
    """

    def __init__(
        self,
        thresholds: ThresholdTable | None = None,
        clock: Clock | None = None,
    ) -> None:
        self._thresholds = thresholds or ThresholdTable()
        self._clock = clock or _utcnow
        self._handlers: dict[ProbeType, Callable[..., list[Alert]]] = {
            ProbeType.PING: self._classify_ping,
            ProbeType.TRACEROUTE: self._classify_traceroute,
            ProbeType.DNS: self._classify_dns,
            ProbeType.MTR: self._classify_mtr,
            ProbeType.HTTP: self._classify_http,
        }
        missing = set(ProbeType) - set(self._handlers)
        if missing:
            raise RuntimeError(f"no classifier for probe types: {sorted(missing)}")

    @property
    def thresholds(self) -> ThresholdTable:
        return self._thresholds

    def classify(self, measurement: Measurement) -> list[Alert]:
        """Alerts for every probe result of *measurement*, in result order."""
        probe_type = ProbeType(measurement.type)
        alerts: list[Alert] = []
        for item in measurement.results:
            alerts.extend(self.classify_result(probe_type, item.result))
        return alerts

    def classify_result(self, probe_type: ProbeType, result: AnyTestResult) -> list[Alert]:
        """Alerts for a single probe result.

        An unfinished status (in-progress, failed, offline) yields one
        critical alert and nothing else.
        """
        if result.status in UNFINISHED_STATUSES:
            return [Alert(text=f"result status - {result.status}", severity=Severity.CRITICAL)]
        return self._handlers[ProbeType(probe_type)](result)

    # ── ping ─────────────────────────────────────────────────────

    def _classify_ping(self, result: PingTestResult) -> list[Alert]:
        alerts: list[Alert] = []
        stats = result.stats

        if stats is not None and stats.drop > 0:
            alerts.append(_drop_alert(stats.drop, stats.loss))

        avg = stats.avg if stats is not None else None
        alerts.append(_bucket_alert("average rtt", avg, self._thresholds.rtt))
        return alerts

    # ── traceroute ───────────────────────────────────────────────

    def _classify_traceroute(self, result: TracerouteTestResult) -> list[Alert]:
        avg = _mean(timing.rtt for hop in result.hops for timing in hop.timings)
        return [_bucket_alert("average rtt", avg, self._thresholds.rtt)]

    # ── dns ──────────────────────────────────────────────────────

    def _classify_dns(self, result: DnsTestResult) -> list[Alert]:
        if result.is_trace:
            label = "trace dns test"
            avg = _mean(answer.ttl for hop in result.hops or [] for answer in hop.answers)
        else:
            label = "simple dns test"
            avg = _mean(answer.ttl for answer in result.answers or [])

        ttl = self._thresholds.ttl
        if avg < ttl.low:
            return [Alert(text=f"{label} :: average ttl is too low {_fmt(avg)} s", severity=Severity.CRITICAL)]
        if avg > ttl.high:
            return [Alert(text=f"{label} :: average ttl is too high {_fmt(avg)} s", severity=Severity.WARNING)]
        return [Alert(text=f"{label} :: average ttl is ok {_fmt(avg)} s", severity=Severity.INFO)]

    # ── mtr ──────────────────────────────────────────────────────

    def _classify_mtr(self, result: MtrTestResult) -> list[Alert]:
        alerts: list[Alert] = []
        for index, hop in enumerate(result.hops, start=1):
            alerts.extend(self._classify_mtr_hop(index, hop))
        return alerts

    def _classify_mtr_hop(self, index: int, hop: MtrHop) -> list[Alert]:
        host = hop.resolved_hostname or hop.resolved_address
        prefix = f"hop {index} ({host}) :: " if host else f"hop {index} :: "
        stats = hop.stats

        alerts: list[Alert] = []
        if stats.drop > 0:
            alerts.append(_drop_alert(stats.drop, stats.loss, prefix))
        alerts.append(_bucket_alert(f"{prefix}the average rtt", stats.avg, self._thresholds.rtt))
        alerts.append(_bucket_alert(f"{prefix}the average jitter", stats.j_avg, self._thresholds.jitter))
        return alerts

    # ── http ─────────────────────────────────────────────────────

    def _classify_http(self, result: HttpTestResult) -> list[Alert]:
        timings = result.timings
        http = self._thresholds.http
        # TODO: confirm whether download should be bucketed with http.download;
        # it has always used the first-byte pair.
        phases: list[tuple[str, float | None, Bounds]] = [
            ("the total HTTP request time", timings.total, http.total),
            ("the time required to perform the DNS lookup", timings.dns, http.dns),
            (
                "the time from performing the DNS lookup to establishing the TCP connection",
                timings.tcp,
                http.tcp,
            ),
            (
                "the time from establishing the TCP connection to establishing the TLS session",
                timings.tls,
                http.tls,
            ),
            (
                "the time from establishing the TCP/TLS connection to the first response byte",
                timings.first_byte,
                http.first_byte,
            ),
            (
                "the time from the first response byte to downloading the entire response",
                timings.download,
                http.first_byte,
            ),
        ]

        alerts = [_bucket_alert(subject, value, bounds) for subject, value, bounds in phases]
        alerts.extend(self._classify_certificate(result.tls))
        return alerts

    def _classify_certificate(self, tls: TlsCertificate | None) -> list[Alert]:
        if tls is None:
            return [Alert(text="no TLS certificate is available", severity=Severity.INFO)]

        alerts: list[Alert] = []
        if not tls.authorized:
            alerts.append(Alert(
                text=f"the certificate is not authorized({tls.error})",
                severity=Severity.CRITICAL,
            ))

        expires_at = tls.expires_at
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=datetime.UTC)
        remaining = expires_at - self._clock()

        if remaining < datetime.timedelta(0):
            alerts.append(Alert(
                text=f"the certificate is expired(expiration date - {expires_at.isoformat()})",
                severity=Severity.CRITICAL,
            ))
        elif remaining <= _MONTH:
            severity = Severity.CRITICAL if remaining <= _WEEK else Severity.WARNING
            alerts.append(Alert(
                text=f"the certificate will expire in {format_duration_ms(remaining // _ONE_MS)}",
                severity=severity,
            ))
        return alerts
