"""Tests for MeasurementRunner — submit, bounded polling, failure-to-None mapping."""

from __future__ import annotations

from typing import Any
from unittest.mock import AsyncMock

import pytest

from src.core.types import MeasurementHandle, PingMeasurement, ProbeDefinition
from src.globalping.exceptions import GlobalpingApiError, GlobalpingConnectionError
from src.probes.runner import MeasurementRunner


# ── Helpers ─────────────────────────────────────────────────────


def _definition(**kw: object) -> ProbeDefinition:
    defaults: dict[str, object] = {
        "target": "example.com",
        "type": "ping",
        "cronExpression": "*/5 * * * *",
        "locations": [{"magic": "Europe"}],
        "limit": 2,
    }
    defaults.update(kw)
    return ProbeDefinition.model_validate(defaults)


def _payload(status: str = "finished") -> dict[str, Any]:
    return {
        "id": "m-1",
        "type": "ping",
        "target": "example.com",
        "status": status,
        "probesCount": 1,
        "results": [
            {
                "probe": {"country": "DE"},
                "result": {"status": "finished", "timings": [], "stats": {"avg": 12.5}},
            }
        ],
    }


def _api(*payloads: dict[str, Any]) -> AsyncMock:
    api = AsyncMock()
    api.submit = AsyncMock(return_value=MeasurementHandle(id="m-1", probes_count=1))
    api.get_measurement = AsyncMock(side_effect=list(payloads))
    return api


def _runner(api: AsyncMock, attempts: int = 120) -> tuple[MeasurementRunner, AsyncMock]:
    sleep = AsyncMock()
    return MeasurementRunner(api, attempts=attempts, interval_secs=0.5, sleep=sleep), sleep


# ── Success ─────────────────────────────────────────────────────


class TestExecute:
    async def test_finished_first_poll(self) -> None:
        api = _api(_payload())
        runner, sleep = _runner(api)

        measurement = await runner.execute(_definition())

        assert isinstance(measurement, PingMeasurement)
        assert measurement.id == "m-1"
        assert measurement.results[0].result.stats is not None
        assert measurement.results[0].result.stats.avg == 12.5
        assert measurement.raw["probesCount"] == 1
        sleep.assert_not_awaited()

    async def test_polls_until_finished(self) -> None:
        api = _api(_payload("in-progress"), _payload("in-progress"), _payload())
        runner, sleep = _runner(api)

        measurement = await runner.execute(_definition())

        assert measurement is not None
        assert api.get_measurement.await_count == 3
        assert sleep.await_count == 2
        sleep.assert_awaited_with(0.5)

    async def test_request_excludes_cron_expression(self) -> None:
        api = _api(_payload())
        runner, _ = _runner(api)

        await runner.execute(_definition())

        request = api.submit.await_args.args[0]
        assert request == {
            "target": "example.com",
            "type": "ping",
            "locations": [{"magic": "Europe"}],
            "limit": 2,
        }

    @pytest.mark.parametrize("status", ["failed", "offline"])
    async def test_terminal_non_finished_status_returned(self, status: str) -> None:
        api = _api(_payload(status))
        runner, _ = _runner(api)

        measurement = await runner.execute(_definition())

        assert measurement is not None
        assert measurement.status == status


# ── Failures ────────────────────────────────────────────────────


class TestFailures:
    async def test_submit_error_returns_none(self) -> None:
        api = _api()
        api.submit.side_effect = GlobalpingApiError("bad request", status_code=400)
        runner, _ = _runner(api)

        assert await runner.execute(_definition()) is None
        api.get_measurement.assert_not_awaited()

    async def test_poll_error_returns_none(self) -> None:
        api = _api()
        api.get_measurement.side_effect = GlobalpingConnectionError("reset")
        runner, _ = _runner(api)

        assert await runner.execute(_definition()) is None

    async def test_timeout_after_attempt_budget(self) -> None:
        api = _api(*[_payload("in-progress")] * 120)
        runner, sleep = _runner(api)

        assert await runner.execute(_definition()) is None
        assert api.get_measurement.await_count == 120
        assert sleep.await_count == 120

    async def test_small_attempt_budget(self) -> None:
        api = _api(_payload("in-progress"), _payload("in-progress"), _payload())
        runner, _ = _runner(api, attempts=2)

        assert await runner.execute(_definition()) is None
        assert api.get_measurement.await_count == 2

    async def test_unparseable_payload_returns_none(self) -> None:
        api = _api({"id": "m-1", "type": "carrier-pigeon", "target": "x", "status": "finished"})
        runner, _ = _runner(api)

        assert await runner.execute(_definition()) is None

    def test_attempts_must_be_positive(self) -> None:
        with pytest.raises(ValueError):
            MeasurementRunner(AsyncMock(), attempts=0)
