"""Raw result persistence — one JSON file per completed run."""

from __future__ import annotations

import asyncio
import datetime
import json
import re
from pathlib import Path
from zoneinfo import ZoneInfo

import structlog

from src.core.types import Measurement

logger = structlog.get_logger(__name__)

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def slugify(text: str) -> str:
    """Lower-case *text* and collapse every non-alphanumeric run into a hyphen."""
    return _NON_ALNUM.sub("-", text.lower()).strip("-")


def result_filename(measurement: Measurement, when: datetime.datetime) -> str:
    """``<timestamp>_<target>-<type>_<id>`` normalised, with a ``.json`` suffix.

    The measurement id keeps runs of identical definitions in the same second apart.
    """
    stamp = when.strftime("%Y-%m-%d_%H-%M-%S")
    name = f"{stamp}_{measurement.target}-{measurement.type}_{measurement.id}"
    return f"{slugify(name)}.json"


class ResultSink:
    """Writes raw measurement payloads under *directory*."""

    def __init__(self, directory: str | Path, timezone: ZoneInfo | None = None) -> None:
        self._directory = Path(directory)
        self._timezone = timezone or ZoneInfo("UTC")

    @property
    def directory(self) -> Path:
        return self._directory

    async def write(self, measurement: Measurement) -> Path:
        """Persist *measurement* and return the file path."""
        now = datetime.datetime.now(self._timezone)
        path = self._directory / result_filename(measurement, now)
        payload = measurement.raw or measurement.model_dump(mode="json", by_alias=True)
        text = json.dumps(payload, indent=4)
        await asyncio.to_thread(self._write_file, path, text)
        logger.debug("measurement_persisted", path=str(path))
        return path

    @staticmethod
    def _write_file(path: Path, text: str) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
