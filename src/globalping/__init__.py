"""Globalping measurement API client."""

from src.globalping.client import GlobalpingClient
from src.globalping.exceptions import (
    GlobalpingApiError,
    GlobalpingConnectionError,
    GlobalpingError,
    GlobalpingParseError,
    GlobalpingRateLimitError,
)

__all__ = [
    "GlobalpingApiError",
    "GlobalpingClient",
    "GlobalpingConnectionError",
    "GlobalpingError",
    "GlobalpingParseError",
    "GlobalpingRateLimitError",
]
