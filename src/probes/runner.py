"""Measurement runner — submit a probe job and poll it to a terminal state."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from enum import StrEnum
from typing import Any, Protocol

import structlog
from pydantic import ValidationError

from src.core.types import (
    Measurement,
    MeasurementHandle,
    ProbeDefinition,
    ResultStatus,
    parse_measurement,
)
from src.globalping.exceptions import GlobalpingError

logger = structlog.stdlib.get_logger()

SleepFn = Callable[[float], Awaitable[Any]]

DEFAULT_ATTEMPTS = 120
DEFAULT_INTERVAL_SECS = 0.5


class MeasurementApi(Protocol):
    """The two calls the runner needs from a measurement API client."""

    async def submit(self, request: dict[str, Any]) -> MeasurementHandle: ...

    async def get_measurement(self, measurement_id: str) -> dict[str, Any]: ...


class RunnerState(StrEnum):
    """Poll loop states."""

    POLLING = "POLLING"
    DONE = "DONE"


class MeasurementRunner:
    """Turns the asynchronous submit/poll API into a single awaited result.

    ``execute()`` never raises for API trouble. It returns ``None`` when:

    - the submission is rejected or the transport fails,
    - a poll request fails,
    - the attempt budget runs out while the job is still in progress.

    Any other status ends the loop and the parsed measurement is returned
    as-is; interpreting it is the Classifier's job.

    Usage::

        runner = MeasurementRunner(client)
        measurement = await runner.execute(definition)
    """

    def __init__(
        self,
        api: MeasurementApi,
        attempts: int = DEFAULT_ATTEMPTS,
        interval_secs: float = DEFAULT_INTERVAL_SECS,
        sleep: SleepFn = asyncio.sleep,
    ) -> None:
        if attempts < 1:
            raise ValueError(f"attempts must be at least 1, got {attempts}")
        self._api = api
        self._attempts = attempts
        self._interval_secs = interval_secs
        self._sleep = sleep

    @property
    def attempts(self) -> int:
        return self._attempts

    async def execute(self, definition: ProbeDefinition) -> Measurement | None:
        """Run one measurement for *definition*; ``None`` means no result this cycle."""
        log = logger.bind(target=definition.target, probe_type=definition.type.value)
        log.info("measurement_started")

        try:
            handle = await self._api.submit(definition.to_request())
        except GlobalpingError as exc:
            log.error("measurement_submit_failed", error=str(exc))
            return None

        log = log.bind(measurement_id=handle.id)
        log.debug("measurement_submitted", probes=handle.probes_count)

        payload = await self._poll(handle, log)
        if payload is None:
            return None

        try:
            measurement = parse_measurement(payload)
        except ValidationError as exc:
            log.error("measurement_parse_failed", error=str(exc))
            return None

        log.info("measurement_finished", status=measurement.status, results=len(measurement.results))
        return measurement

    async def _poll(
        self,
        handle: MeasurementHandle,
        log: structlog.stdlib.BoundLogger,
    ) -> dict[str, Any] | None:
        """Bounded POLLING → DONE loop; returns the terminal payload or None."""
        state = RunnerState.POLLING
        attempt = 0
        payload: dict[str, Any] | None = None

        while state is RunnerState.POLLING and attempt < self._attempts:
            attempt += 1
            log.debug("measurement_poll", attempt=attempt, attempts=self._attempts)

            try:
                payload = await self._api.get_measurement(handle.id)
            except GlobalpingError as exc:
                log.error("measurement_poll_failed", attempt=attempt, error=str(exc))
                return None

            if payload.get("status") == ResultStatus.IN_PROGRESS:
                await self._sleep(self._interval_secs)
                continue

            state = RunnerState.DONE

        if state is RunnerState.POLLING:
            log.warning("measurement_timed_out", attempts=attempt)
            return None
        return payload
