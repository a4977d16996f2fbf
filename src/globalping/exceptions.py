"""Exception hierarchy for the Globalping API client."""

from __future__ import annotations


class GlobalpingError(Exception):
    """Base exception for all Globalping client errors."""


class GlobalpingConnectionError(GlobalpingError):
    """Transport failure talking to the API (DNS, TCP, timeout)."""


class GlobalpingApiError(GlobalpingError):
    """The API answered with an error response."""

    def __init__(
        self,
        message: str,
        status_code: int = 0,
        error_type: str = "",
    ) -> None:
        self.status_code = status_code
        self.error_type = error_type
        super().__init__(message)


class GlobalpingRateLimitError(GlobalpingApiError):
    """Rate limited by the API (HTTP 429)."""


class GlobalpingParseError(GlobalpingError):
    """The API returned a body that could not be understood."""
