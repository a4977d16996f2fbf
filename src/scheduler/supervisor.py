"""Supervisor — runs the agent and reports how it ended as a RunOutcome."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass

import structlog

from src.core.config import Settings
from src.core.types import ProbeDefinition
from src.globalping.client import GlobalpingClient
from src.monitor.channels import NotificationChannel
from src.scheduler.exceptions import ConfigurationError
from src.scheduler.factory import AgentStack, create_agent

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class RunOutcome:
    """How a supervised run ended. ``exit_code`` 0 is a clean shutdown."""

    exit_code: int
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.exit_code == 0


async def supervise(
    settings: Settings,
    stop_event: asyncio.Event,
    definitions: list[ProbeDefinition] | None = None,
    client: GlobalpingClient | None = None,
    channel: NotificationChannel | None = None,
) -> RunOutcome:
    """Build and start the agent, then run until *stop_event* is set.

    Startup configuration errors are returned as a failed outcome before
    any schedule exists; they are never raised.
    """
    try:
        stack = create_agent(settings, definitions=definitions, client=client, channel=channel)
    except ConfigurationError as exc:
        logger.error("agent_startup_failed", error=str(exc))
        return RunOutcome(exit_code=1, error=str(exc))

    outcome = await _run(stack, stop_event)
    if not outcome.ok:
        logger.error("agent_exited_abnormally", exit_code=outcome.exit_code, error=outcome.error)
    return outcome


async def _run(stack: AgentStack, stop_event: asyncio.Event) -> RunOutcome:
    try:
        await stack.client.connect()
        schedules = await stack.orchestrator.start()
    except ConfigurationError as exc:
        await stack.close()
        return RunOutcome(exit_code=1, error=str(exc))

    logger.info("agent_running", schedules=schedules)
    try:
        await stop_event.wait()
    finally:
        await stack.close()

    logger.info("agent_stopped")
    return RunOutcome(exit_code=0)
