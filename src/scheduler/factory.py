"""Wires settings into a ready-to-start agent."""

from __future__ import annotations

from dataclasses import dataclass
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import structlog

from src.core.config import Settings
from src.core.types import ProbeDefinition
from src.globalping.client import GlobalpingClient
from src.monitor.channels import NotificationChannel
from src.monitor.factory import create_notifier
from src.monitor.notifier import Notifier
from src.probes.classifier import Classifier
from src.probes.runner import MeasurementRunner
from src.scheduler.exceptions import ConfigurationError
from src.scheduler.loader import load_definitions
from src.scheduler.orchestrator import ProbeOrchestrator
from src.scheduler.sink import ResultSink

logger = structlog.get_logger(__name__)


@dataclass
class AgentStack:
    """Everything ``create_agent`` builds, with a single shutdown path."""

    orchestrator: ProbeOrchestrator
    client: GlobalpingClient
    notifier: Notifier

    async def close(self) -> None:
        await self.orchestrator.stop()
        await self.notifier.close()
        await self.client.close()


def _zone(name: str) -> ZoneInfo:
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ConfigurationError(f"unknown timezone {name!r}") from exc


def create_agent(
    settings: Settings,
    definitions: list[ProbeDefinition] | None = None,
    client: GlobalpingClient | None = None,
    channel: NotificationChannel | None = None,
) -> AgentStack:
    """Build the orchestrator and its collaborators from *settings*.

    Args:
        definitions: Use these instead of reading ``schedule.definitions_dir``.
        client: Use this Globalping client instead of building one.
        channel: Use this channel instead of Telegram.

    Raises:
        ConfigurationError: missing bot token, bad timezone, or bad definitions.
    """
    if channel is None and not settings.alerts.telegram.bot_token.get_secret_value():
        raise ConfigurationError("set TELEGRAM_TOKEN (alerts.telegram.bot_token), it is empty")

    timezone = _zone(settings.schedule.timezone)

    if definitions is None:
        definitions = load_definitions(settings.schedule.definitions_dir)

    client = client or GlobalpingClient(settings.globalping)
    runner = MeasurementRunner(
        client,
        attempts=settings.globalping.poll_attempts,
        interval_secs=settings.globalping.poll_interval_ms / 1000.0,
    )
    notifier = create_notifier(settings.alerts, app_name=settings.app_name, channel=channel)

    if not notifier.recipients:
        logger.warning("no_notification_recipients")

    orchestrator = ProbeOrchestrator(
        definitions=definitions,
        runner=runner,
        classifier=Classifier(settings.thresholds),
        notifier=notifier,
        sink=ResultSink(settings.schedule.results_dir, timezone),
        timezone=timezone,
        run_on_start=settings.schedule.run_on_start,
        allow_overlap=settings.schedule.allow_overlap,
    )
    return AgentStack(orchestrator=orchestrator, client=client, notifier=notifier)
