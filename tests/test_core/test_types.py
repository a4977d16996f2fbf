"""Tests for src/core/types.py — probe definitions and measurement parsing."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from src.core.types import (
    DnsMeasurement,
    HttpMeasurement,
    MtrMeasurement,
    PingMeasurement,
    ProbeDefinition,
    ProbeType,
    TracerouteMeasurement,
    parse_measurement,
)


class TestProbeDefinition:
    def test_from_json_keys(self) -> None:
        d = ProbeDefinition.model_validate(
            {"target": "example.com", "type": "dns", "cronExpression": "0 * * * *"}
        )
        assert d.type is ProbeType.DNS
        assert d.cron_expression == "0 * * * *"
        assert d.label == "example.com-dns"

    def test_extra_options_passed_through(self) -> None:
        d = ProbeDefinition.model_validate({
            "target": "example.com",
            "type": "http",
            "cronExpression": "*/10 * * * * *",
            "measurementOptions": {"protocol": "HTTPS", "request": {"path": "/health"}},
        })
        request = d.to_request()
        assert "cronExpression" not in request
        assert "cron_expression" not in request
        assert request["type"] == "http"
        assert request["measurementOptions"]["request"]["path"] == "/health"

    def test_unknown_type_rejected(self) -> None:
        with pytest.raises(ValidationError):
            ProbeDefinition.model_validate(
                {"target": "example.com", "type": "smtp", "cronExpression": "* * * * *"}
            )

    def test_missing_cron_rejected(self) -> None:
        with pytest.raises(ValidationError):
            ProbeDefinition.model_validate({"target": "example.com", "type": "ping"})


class TestParseMeasurement:
    @pytest.mark.parametrize(
        ("probe_type", "cls"),
        [
            ("ping", PingMeasurement),
            ("traceroute", TracerouteMeasurement),
            ("dns", DnsMeasurement),
            ("mtr", MtrMeasurement),
            ("http", HttpMeasurement),
        ],
    )
    def test_dispatches_on_type(self, probe_type: str, cls: type) -> None:
        m = parse_measurement(
            {"id": "m-1", "type": probe_type, "target": "example.com", "status": "finished", "results": []}
        )
        assert isinstance(m, cls)

    def test_raw_payload_kept(self) -> None:
        payload = {
            "id": "m-1",
            "type": "ping",
            "target": "example.com",
            "status": "finished",
            "createdAt": "2024-06-01T12:00:00.000Z",
            "results": [],
            "unknownField": 1,
        }
        m = parse_measurement(payload)
        assert m.raw == payload
        assert m.created_at == "2024-06-01T12:00:00.000Z"
        assert "raw" not in m.model_dump()

    def test_unknown_type_rejected(self) -> None:
        with pytest.raises(ValidationError):
            parse_measurement({"id": "m-1", "type": "whois", "target": "x", "status": "finished"})

    def test_dns_simple_versus_trace(self) -> None:
        m = parse_measurement({
            "id": "m-1",
            "type": "dns",
            "target": "example.com",
            "status": "finished",
            "results": [
                {"result": {"status": "finished", "answers": [{"ttl": 60}]}},
                {"result": {"status": "finished", "hops": [{"answers": [{"ttl": 60}]}]}},
            ],
        })
        assert isinstance(m, DnsMeasurement)
        assert m.results[0].result.is_trace is False
        assert m.results[1].result.is_trace is True

    def test_http_timings_camel_case(self) -> None:
        m = parse_measurement({
            "id": "m-1",
            "type": "http",
            "target": "example.com",
            "status": "finished",
            "results": [{
                "result": {
                    "status": "finished",
                    "statusCode": 200,
                    "timings": {"total": 120, "firstByte": 40},
                    "tls": {"authorized": True, "expiresAt": "2030-01-01T00:00:00Z"},
                },
            }],
        })
        assert isinstance(m, HttpMeasurement)
        result = m.results[0].result
        assert result.status_code == 200
        assert result.timings.first_byte == 40
        assert result.timings.dns is None
        assert result.tls is not None
        assert result.tls.expires_at.year == 2030
