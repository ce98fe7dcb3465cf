"""HTTP transport for netctrl-server.

Every call made by the resource clients goes through :class:`ApiClient`,
which owns a single ``httpx.AsyncClient`` rooted at the API prefix and turns
every failed exchange into a :class:`TransportError` carrying the HTTP status
and a message suitable for showing to the user.
"""

from __future__ import annotations

import logging
from types import TracebackType
from typing import Any

import httpx

from netctrl_console.config import ConsoleConfig, get_config
from netctrl_console.utils.errors import DecodeError, TransportError

logger = logging.getLogger(__name__)

DEFAULT_HEADERS = {
    "Content-Type": "application/json",
    "Accept": "application/json",
}


class ApiClient:
    """Async JSON client for the netctrl-server REST API.

    Usage:
        async with ApiClient(config) as api:
            data = await api.request("GET", "/v1/clusters")
    """

    def __init__(
        self,
        config: ConsoleConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._config = config or get_config()
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    def config(self) -> ConsoleConfig:
        """Get client configuration."""
        return self._config

    @property
    def is_open(self) -> bool:
        """Whether the underlying HTTP client is open."""
        return self._client is not None and not self._client.is_closed

    def _ensure_client(self) -> httpx.AsyncClient:
        """Create the underlying HTTP client on first use."""
        if self._client is None or self._client.is_closed:
            kwargs: dict[str, Any] = {
                "base_url": self._config.api_url,
                "headers": DEFAULT_HEADERS,
            }
            if self._config.timeout is not None:
                kwargs["timeout"] = self._config.timeout
            if self._transport is not None:
                kwargs["transport"] = self._transport
            self._client = httpx.AsyncClient(**kwargs)
        return self._client

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
        self._client = None

    async def __aenter__(self) -> ApiClient:
        self._ensure_client()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.close()

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: Any = None,
    ) -> Any:
        """Send a request and return the decoded JSON body.

        Args:
            method: HTTP method.
            path: Path relative to the API prefix (e.g. "/v1/clusters").
            params: Query parameters. Entries whose value is None are dropped.
            json: Request body, serialized as JSON.

        Returns:
            The decoded JSON body, or None when the response has no body.

        Raises:
            TransportError: On a non-2xx response or a connection failure.
            DecodeError: When a 2xx response body is not valid JSON.
        """
        client = self._ensure_client()
        if params:
            params = {k: v for k, v in params.items() if v is not None}

        logger.debug(f"{method} {self._config.api_prefix}{path} params={params}")
        try:
            response = await client.request(method, path, params=params or None, json=json)
        except httpx.TransportError as e:
            logger.warning(f"{method} {path} failed: {e}")
            raise TransportError(0, f"Request failed: {e}") from e

        if not response.is_success:
            error = TransportError(response.status_code, _error_message(response))
            logger.warning(f"{method} {path} returned {error}")
            raise error

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise DecodeError(
                f"{method} {path} returned a non-JSON body: {response.text[:200]!r}"
            ) from e

    async def get(self, path: str, params: dict[str, Any] | None = None) -> Any:
        """GET a path."""
        return await self.request("GET", path, params=params)

    async def post(self, path: str, json: Any = None) -> Any:
        """POST a JSON body."""
        return await self.request("POST", path, json=json)

    async def patch(self, path: str, json: Any = None) -> Any:
        """PATCH a JSON body."""
        return await self.request("PATCH", path, json=json)

    async def delete(self, path: str) -> Any:
        """DELETE a path."""
        return await self.request("DELETE", path)

    async def health_check(self) -> bool:
        """Probe the server's liveness endpoint.

        Returns:
            True if the server answered 2xx, False otherwise.
        """
        try:
            await self.request("GET", self._config.health_path)
        except TransportError as e:
            logger.info(f"Health check failed: {e}")
            return False
        except DecodeError:
            # Any 2xx counts as alive, whatever the body
            pass
        return True


def _error_message(response: httpx.Response) -> str:
    """Pick the most useful message out of an error response."""
    try:
        body = response.json()
    except ValueError:
        body = None

    if isinstance(body, dict):
        for field in ("message", "error"):
            value = body.get(field)
            if isinstance(value, str) and value:
                return value

    return f"HTTP {response.status_code}: {response.reason_phrase or 'An error occurred'}"
