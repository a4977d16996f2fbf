"""Scheduling, persistence and supervision of probe runs."""

from src.scheduler.exceptions import ConfigurationError, DefinitionLoadError
from src.scheduler.factory import AgentStack, create_agent
from src.scheduler.loader import load_definitions
from src.scheduler.orchestrator import ProbeOrchestrator, build_trigger, crontab_day_of_week
from src.scheduler.sink import ResultSink, result_filename, slugify
from src.scheduler.supervisor import RunOutcome, supervise

__all__ = [
    "AgentStack",
    "ConfigurationError",
    "DefinitionLoadError",
    "ProbeOrchestrator",
    "ResultSink",
    "RunOutcome",
    "build_trigger",
    "create_agent",
    "crontab_day_of_week",
    "load_definitions",
    "result_filename",
    "slugify",
    "supervise",
]
