"""Async client for the Globalping measurement API."""

from __future__ import annotations

from collections import OrderedDict
from types import TracebackType
from typing import Any

import httpx
import structlog

from src.core.config import GlobalpingConfig, get_settings
from src.core.types import MeasurementHandle, ResultStatus
from src.globalping.exceptions import (
    GlobalpingApiError,
    GlobalpingConnectionError,
    GlobalpingParseError,
    GlobalpingRateLimitError,
)

logger = structlog.stdlib.get_logger()

_USER_AGENT = "wachter/0.1"


def _error_from_response(response: httpx.Response) -> GlobalpingApiError:
    """Build the exception for a non-success response.

    Globalping error bodies look like::

        {"error": {"type": "validation_error", "message": "Parameter validation failed."}}
    """
    error_type = ""
    message = f"Globalping API returned {response.status_code}"
    try:
        body = response.json()
    except ValueError:
        body = None

    if isinstance(body, dict) and isinstance(body.get("error"), dict):
        error = body["error"]
        error_type = str(error.get("type", ""))
        if error.get("message"):
            message = f"{message}: {error['message']}"
        if error.get("params"):
            message = f"{message} {error['params']}"

    exc_cls = GlobalpingRateLimitError if response.status_code == 429 else GlobalpingApiError
    return exc_cls(message, status_code=response.status_code, error_type=error_type)


class GlobalpingClient:
    """Thin async wrapper around ``POST /measurements`` and ``GET /measurements/{id}``.

    Polling uses conditional requests: the last ETag and body of each
    in-flight measurement are cached (bounded, least recently used evicted)
    and a ``304 Not Modified`` answer is served from the cache.

    Usage::

        async with GlobalpingClient() as client:
            handle = await client.submit({"type": "ping", "target": "example.com"})
            payload = await client.get_measurement(handle.id)
    """

    def __init__(
        self,
        config: GlobalpingConfig | None = None,
        http: httpx.AsyncClient | None = None,
    ) -> None:
        self._config = config or get_settings().globalping
        self._http = http
        self._owns_http = http is None
        self._etags: OrderedDict[str, tuple[str, dict[str, Any]]] = OrderedDict()

    @property
    def connected(self) -> bool:
        return self._http is not None and not self._http.is_closed

    async def connect(self) -> None:
        """Create the httpx async client."""
        if self.connected:
            return
        headers = {"User-Agent": _USER_AGENT, "Accept": "application/json"}
        token = self._config.token.get_secret_value()
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self._http = httpx.AsyncClient(
            base_url=self._config.base_url,
            headers=headers,
            timeout=httpx.Timeout(self._config.timeout_secs),
        )
        self._owns_http = True
        logger.info("globalping_client_connected", base_url=self._config.base_url)

    async def close(self) -> None:
        """Close the httpx async client if this instance created it."""
        if self._http is not None and self._owns_http:
            await self._http.aclose()
        self._http = None
        self._etags.clear()

    async def __aenter__(self) -> GlobalpingClient:
        await self.connect()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.close()

    # ── Measurements ─────────────────────────────────────────────

    async def submit(self, request: dict[str, Any]) -> MeasurementHandle:
        """Create a measurement job and return its handle."""
        response = await self._send("POST", "/measurements", json=request)
        if response.status_code not in (200, 201, 202):
            raise _error_from_response(response)

        body = self._json(response)
        measurement_id = body.get("id")
        if not measurement_id:
            raise GlobalpingParseError("measurement creation response has no id")

        handle = MeasurementHandle(
            id=str(measurement_id),
            probes_count=int(body.get("probesCount") or 0),
        )
        logger.debug("globalping_measurement_created", id=handle.id, probes=handle.probes_count)
        return handle

    async def get_measurement(self, measurement_id: str) -> dict[str, Any]:
        """Fetch the current state of a measurement as a raw payload."""
        headers: dict[str, str] = {}
        cached = self._etags.get(measurement_id)
        if cached is not None:
            headers["If-None-Match"] = cached[0]

        response = await self._send("GET", f"/measurements/{measurement_id}", headers=headers)

        if response.status_code == 304 and cached is not None:
            self._etags.move_to_end(measurement_id)
            return cached[1]
        if response.status_code != 200:
            raise _error_from_response(response)

        body = self._json(response)
        if body.get("status") == ResultStatus.IN_PROGRESS:
            self._remember(measurement_id, response.headers.get("ETag"), body)
        else:
            self._etags.pop(measurement_id, None)
        return body

    # ── Internals ────────────────────────────────────────────────

    async def _send(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        if self._http is None:
            raise GlobalpingConnectionError("HTTP client not connected")
        try:
            return await self._http.request(method, url, **kwargs)
        except httpx.HTTPError as exc:
            raise GlobalpingConnectionError(f"Globalping request failed: {exc}") from exc

    @staticmethod
    def _json(response: httpx.Response) -> dict[str, Any]:
        try:
            body = response.json()
        except ValueError as exc:
            raise GlobalpingParseError("Globalping API returned invalid JSON") from exc
        if not isinstance(body, dict):
            raise GlobalpingParseError("Globalping API returned a non-object body")
        return body

    def _remember(self, measurement_id: str, etag: str | None, body: dict[str, Any]) -> None:
        if not etag or self._config.etag_cache_size <= 0:
            return
        self._etags[measurement_id] = (etag, body)
        self._etags.move_to_end(measurement_id)
        while len(self._etags) > self._config.etag_cache_size:
            self._etags.popitem(last=False)
