"""Keepalive transport protocol and the httpx implementation.

This module defines the KeepaliveTransport protocol the scheduler talks to,
the ProbeResult union returned by ping and health probes, and an httpx-based
transport for the whiteboard backend's ``/api/ping`` and ``/api/health``.
"""

from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

import httpx

from keepwarm.exceptions import (
    HealthCheckFailedError,
    KeepaliveError,
    KeepaliveTransportError,
    MalformedResponseError,
    PingFailedError,
)
from keepwarm.logging import get_logger

LOG = get_logger(__name__)

JSON_HEADERS = {"Content-Type": "application/json"}


@dataclass(frozen=True)
class ProbeResult:
    """Outcome of a ping or health probe.

    On success ``payload`` holds the parsed JSON body and ``error`` is None.
    On failure ``error`` holds the KeepaliveError and ``payload`` is None.
    """

    payload: Any = None
    error: KeepaliveError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, payload: Any) -> "ProbeResult":
        return cls(payload=payload)

    @classmethod
    def failure(cls, error: KeepaliveError) -> "ProbeResult":
        return cls(error=error)


@runtime_checkable
class KeepaliveTransport(Protocol):
    """Protocol for the calls a scheduler makes against the remote service.

    Implementations return the parsed JSON body on success and raise a
    KeepaliveError subclass on any failure.

    Example:
        >>> class StaticTransport:
        ...     async def post_ping(self, url):
        ...         return {"message": "pong"}
        ...
        ...     async def get_health(self, url):
        ...         return {"status": "ok"}
        ...
        ...     async def aclose(self):
        ...         pass
    """

    async def post_ping(self, url: str) -> Any:
        """POST to the ping endpoint.

        Args:
            url: Full ping endpoint URL.

        Returns:
            Parsed JSON body.

        Raises:
            PingFailedError: Non-success HTTP status.
            MalformedResponseError: Body is not JSON.
            KeepaliveTransportError: The request never completed.
        """
        ...

    async def get_health(self, url: str) -> Any:
        """GET the health endpoint.

        Args:
            url: Full health endpoint URL.

        Returns:
            Parsed JSON body.

        Raises:
            HealthCheckFailedError: Non-success HTTP status.
            MalformedResponseError: Body is not JSON.
            KeepaliveTransportError: The request never completed.
        """
        ...

    async def aclose(self) -> None:
        """Release transport resources."""
        ...


class HTTPKeepaliveClient:
    """httpx-backed keepalive transport.

    Example:
        >>> client = HTTPKeepaliveClient(timeout=10)
        >>> await client.post_ping("https://board.example.com/api/ping")
        {'message': 'Server is awake', 'nextPing': 1760000000000}
    """

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        timeout: float = 30.0,
    ) -> None:
        """Initialize the transport.

        Args:
            client: Existing AsyncClient to use. The caller keeps ownership
                and must close it.
            timeout: Transport timeout in seconds for a client created here.
        """
        self._owns_client = client is None
        self._client = client if client is not None else httpx.AsyncClient(timeout=timeout)

    async def post_ping(self, url: str) -> Any:
        response = await self._send("POST", url)
        if not response.is_success:
            raise PingFailedError(response.status_code, url)
        return _parse_json(response, url)

    async def get_health(self, url: str) -> Any:
        response = await self._send("GET", url)
        if not response.is_success:
            raise HealthCheckFailedError(response.status_code, url)
        return _parse_json(response, url)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def _send(self, method: str, url: str) -> httpx.Response:
        if self._client.is_closed:
            raise KeepaliveTransportError(f"{method} {url} failed: client is closed")
        try:
            response = await self._client.request(method, url, headers=JSON_HEADERS)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise KeepaliveTransportError(f"{method} {url} failed: {exc}") from exc
        LOG.debug(
            "keepalive_request_complete",
            method=method,
            url=url,
            status_code=response.status_code,
        )
        return response


def _parse_json(response: httpx.Response, url: str) -> Any:
    try:
        return response.json()
    except ValueError as exc:
        raise MalformedResponseError(f"Response from {url} is not valid JSON") from exc
