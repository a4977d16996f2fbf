"""Measurement execution and classification engine."""

from src.probes.classifier import Classifier, bucket
from src.probes.durations import format_duration_ms
from src.probes.runner import MeasurementApi, MeasurementRunner, RunnerState

__all__ = [
    "Classifier",
    "MeasurementApi",
    "MeasurementRunner",
    "RunnerState",
    "bucket",
    "format_duration_ms",
]
