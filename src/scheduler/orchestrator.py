"""Probe orchestrator — one cron schedule per definition, run → persist → classify → notify."""

from __future__ import annotations

import datetime
import sys
from zoneinfo import ZoneInfo

import structlog
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from src.core.types import ProbeDefinition
from src.monitor.exceptions import NotificationError
from src.monitor.notifier import Notifier
from src.monitor.types import Alert, Severity
from src.probes.classifier import Classifier
from src.probes.runner import MeasurementRunner
from src.scheduler.exceptions import ConfigurationError
from src.scheduler.sink import ResultSink

logger = structlog.get_logger(__name__)

# Effectively no cap on concurrent runs of the same definition.
_UNLIMITED_INSTANCES = sys.maxsize


# Crontab weekday numbers: 0 and 7 are both Sunday.
_WEEKDAY_NAMES = ("sun", "mon", "tue", "wed", "thu", "fri", "sat")


def crontab_day_of_week(field: str) -> str:
    """Translate a crontab day-of-week field into APScheduler weekday names.

    APScheduler counts weekdays from Monday, crontab from Sunday, so numeric
    values, ranges and steps are expanded to an explicit list of names.
    Named entries (``mon-fri``) pass through unchanged.

    Raises:
        ValueError: a numeric entry is out of range or malformed.
    """
    if field == "*":
        return field

    names: list[str] = []
    for part in field.split(","):
        span, _, step_text = part.partition("/")
        if span != "*" and not span.replace("-", "").isdigit():
            names.append(part)
            continue

        if span == "*":
            first, last = 0, 6
        elif "-" in span:
            low, high = span.split("-", 1)
            first, last = int(low), int(high)
        else:
            first = last = int(span)
            if step_text:
                last = 6

        step = int(step_text) if step_text else 1
        if step < 1 or first > last or last > 7:
            raise ValueError(f"invalid day-of-week entry {part!r}")

        for day in range(first, last + 1, step):
            name = _WEEKDAY_NAMES[day % 7]
            if name not in names:
                names.append(name)
    return ",".join(names)


def build_trigger(expression: str, timezone: ZoneInfo) -> CronTrigger:
    """Cron trigger from a 5-field crontab or a 6-field one with leading seconds.

    Day-of-week values use crontab numbering (0 or 7 is Sunday).

    Raises:
        ValueError: wrong field count or an invalid field.
    """
    fields = expression.split()
    if len(fields) == 5:
        fields = ["0", *fields]
    if len(fields) != 6:
        raise ValueError(f"expected 5 or 6 cron fields, got {len(fields)}: {expression!r}")

    second, minute, hour, day, month, day_of_week = fields
    return CronTrigger(
        second=second,
        minute=minute,
        hour=hour,
        day=day,
        month=month,
        day_of_week=crontab_day_of_week(day_of_week),
        timezone=timezone,
    )


class ProbeOrchestrator:
    """Schedules every ProbeDefinition and runs one cycle per firing.

    A firing never raises: runner, persistence, classification and
    notification failures are logged and contained to that firing.

    Usage::

        orchestrator = ProbeOrchestrator(definitions, runner, classifier, notifier, sink)
        await orchestrator.start()
        # ...
        await orchestrator.stop()
    """

    def __init__(
        self,
        definitions: list[ProbeDefinition],
        runner: MeasurementRunner,
        classifier: Classifier,
        notifier: Notifier,
        sink: ResultSink | None = None,
        scheduler: AsyncIOScheduler | None = None,
        timezone: ZoneInfo | None = None,
        run_on_start: bool = True,
        allow_overlap: bool = True,
    ) -> None:
        self._definitions = list(definitions)
        self._runner = runner
        self._classifier = classifier
        self._notifier = notifier
        self._sink = sink
        self._timezone = timezone or ZoneInfo("UTC")
        self._scheduler = scheduler or AsyncIOScheduler(timezone=self._timezone)
        self._run_on_start = run_on_start
        self._allow_overlap = allow_overlap
        self._job_ids: list[str] = []
        self._running = False

    @property
    def definitions(self) -> list[ProbeDefinition]:
        return list(self._definitions)

    @property
    def job_ids(self) -> list[str]:
        return list(self._job_ids)

    @property
    def running(self) -> bool:
        return self._running

    async def start(self) -> int:
        """Register one job per definition and start the scheduler.

        All cron expressions are validated before anything is registered.

        Returns:
            Number of registered schedules.

        Raises:
            ConfigurationError: a cron expression is invalid.
        """
        if self._running:
            return len(self._job_ids)

        triggers: list[CronTrigger] = []
        for definition in self._definitions:
            try:
                triggers.append(build_trigger(definition.cron_expression, self._timezone))
            except ValueError as exc:
                raise ConfigurationError(
                    f"invalid cron expression for {definition.label}: {exc}"
                ) from exc

        for index, (definition, trigger) in enumerate(zip(self._definitions, triggers)):
            job_id = f"{index}:{definition.label}"
            options: dict[str, object] = {}
            if self._run_on_start:
                options["next_run_time"] = datetime.datetime.now(self._timezone)
            self._scheduler.add_job(
                self.fire,
                trigger=trigger,
                args=[definition],
                id=job_id,
                name=definition.label,
                max_instances=_UNLIMITED_INSTANCES if self._allow_overlap else 1,
                coalesce=True,
                misfire_grace_time=None,
                **options,
            )
            self._job_ids.append(job_id)
            logger.info(
                "probe_scheduled",
                job_id=job_id,
                cron=definition.cron_expression,
            )

        self._scheduler.start()
        self._running = True
        logger.info("orchestrator_started", schedules=len(self._job_ids))
        return len(self._job_ids)

    async def stop(self) -> None:
        if not self._running:
            return
        self._scheduler.shutdown(wait=False)
        self._running = False
        logger.info("orchestrator_stopped")

    async def fire(self, definition: ProbeDefinition) -> list[Alert]:
        """Run one measurement cycle for *definition*.

        Returns:
            The tagged alerts handed to the notifier, in dispatch order.
        """
        log = logger.bind(target=definition.target, probe_type=definition.type.value)

        try:
            measurement = await self._runner.execute(definition)
        except Exception:
            log.exception("probe_run_error")
            return []

        if measurement is None:
            log.info("probe_no_result")
            return []

        if self._sink is not None:
            try:
                await self._sink.write(measurement)
            except OSError:
                log.exception("measurement_persist_failed")

        try:
            alerts = self._classifier.classify(measurement)
        except Exception as exc:
            log.exception("classification_failed")
            alerts = [Alert(text=f"classification error: {exc}", severity=Severity.CRITICAL)]

        tagged = [alert.tagged(definition.target, definition.type.value) for alert in alerts]
        for alert in tagged:
            try:
                await self._notifier.dispatch(alert)
            except NotificationError as exc:
                log.error("notification_failed", error=str(exc), severity=alert.severity.name)
            except Exception:
                log.exception("notification_error", severity=alert.severity.name)

        log.info("probe_cycle_complete", alerts=len(tagged))
        return tagged
