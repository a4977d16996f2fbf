"""Probe definition loading — one JSON document per monitor."""

from __future__ import annotations

import json
from pathlib import Path

import structlog

from src.core.types import ProbeDefinition
from src.scheduler.exceptions import DefinitionLoadError

logger = structlog.get_logger(__name__)


def load_definitions(directory: str | Path) -> list[ProbeDefinition]:
    """Read every ``*.json`` file in *directory* as a ProbeDefinition.

    Files are read in name order. An empty directory is a valid, no-op
    configuration.

    Raises:
        DefinitionLoadError: the directory is missing or a file is invalid.
    """
    path = Path(directory)
    if not path.is_dir():
        raise DefinitionLoadError(f"probe definitions directory not found: {path}")

    files = sorted(p for p in path.iterdir() if p.is_file() and p.suffix == ".json")
    if not files:
        logger.warning("no_probe_definitions", directory=str(path))
        return []

    definitions: list[ProbeDefinition] = []
    for file in files:
        try:
            data = json.loads(file.read_text(encoding="utf-8"))
            definitions.append(ProbeDefinition.model_validate(data))
        except (OSError, ValueError) as exc:
            raise DefinitionLoadError(f"invalid probe definition {file.name}: {exc}") from exc

    logger.info("probe_definitions_loaded", directory=str(path), count=len(definitions))
    return definitions
