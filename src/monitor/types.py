"""Domain types for the alerting subsystem."""

from __future__ import annotations

from enum import IntEnum

from pydantic import BaseModel, ConfigDict


class Severity(IntEnum):
    """Alert severity — ordered so comparisons work naturally."""

    INFO = 1
    WARNING = 2
    CRITICAL = 3


class Alert(BaseModel):
    """One classified finding.

    ``target`` and ``probe_type`` are empty when the Classifier produces the
    alert and are filled in by the Orchestrator before dispatch.
    """

    model_config = ConfigDict(frozen=True)

    text: str
    severity: Severity
    target: str = ""
    probe_type: str = ""

    def tagged(self, target: str, probe_type: str) -> Alert:
        """Return a copy tagged with its originating target and probe type."""
        return self.model_copy(update={"target": target, "probe_type": probe_type})
