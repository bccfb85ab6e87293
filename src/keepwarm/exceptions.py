"""Custom exceptions for keepwarm package."""


class KeepwarmError(Exception):
    """Base exception class for all keepwarm errors."""


class KeepaliveError(KeepwarmError):
    """Raised when a keepalive operation fails."""


class KeepaliveTransportError(KeepaliveError):
    """Raised when the remote service cannot be reached.

    Wraps DNS failures, refused connections and transport timeouts.
    """


class ProtocolError(KeepaliveError):
    """The remote service answered with a non-success HTTP status.

    Attributes:
        status_code: HTTP status code returned by the server.
        url: Endpoint that was called.
    """

    def __init__(self, message: str, status_code: int, url: str | None = None) -> None:
        """Initialize ProtocolError.

        Args:
            message: Human-readable error message.
            status_code: HTTP status code returned by the server.
            url: Endpoint that was called (optional).
        """
        super().__init__(message)
        self.status_code = status_code
        self.url = url


class PingFailedError(ProtocolError):
    """Raised when the ping endpoint returns a non-success status."""

    def __init__(self, status_code: int, url: str | None = None) -> None:
        super().__init__(f"Ping failed with status: {status_code}", status_code, url)


class HealthCheckFailedError(ProtocolError):
    """Raised when the health endpoint returns a non-success status."""

    def __init__(self, status_code: int, url: str | None = None) -> None:
        super().__init__(f"Health check failed with status: {status_code}", status_code, url)


class MalformedResponseError(KeepaliveError):
    """Raised when a response body cannot be parsed as JSON."""
