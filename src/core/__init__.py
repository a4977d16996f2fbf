"""Core module — config, thresholds, types, logging."""

from src.core.config import Settings, get_settings, load_settings, reset_settings
from src.core.logging import setup_logging
from src.core.thresholds import Bounds, HttpThresholds, ThresholdTable, TtlBounds
from src.core.types import (
    Measurement,
    MeasurementHandle,
    ProbeDefinition,
    ProbeType,
    ResultStatus,
    parse_measurement,
)

__all__ = [
    "Bounds",
    "HttpThresholds",
    "Measurement",
    "MeasurementHandle",
    "ProbeDefinition",
    "ProbeType",
    "ResultStatus",
    "Settings",
    "ThresholdTable",
    "TtlBounds",
    "get_settings",
    "load_settings",
    "parse_measurement",
    "reset_settings",
    "setup_logging",
]
