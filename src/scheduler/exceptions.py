"""Exception hierarchy for agent startup."""

from __future__ import annotations


class ConfigurationError(Exception):
    """Fatal configuration problem — only raised before any schedule is registered."""


class DefinitionLoadError(ConfigurationError):
    """A probe definition file is missing, unreadable, or invalid."""
