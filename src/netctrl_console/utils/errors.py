"""Error types for the netctrl console."""

from http import HTTPStatus


class ConsoleError(Exception):
    """Base exception for netctrl console errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class TransportError(ConsoleError):
    """An HTTP request to netctrl-server failed.

    ``status`` is the HTTP status code of the response, or 0 when no
    response was received at all (connection refused, DNS failure, ...).
    """

    def __init__(self, status: int, message: str) -> None:
        self.status = status
        super().__init__(message)

    @property
    def is_not_found(self) -> bool:
        """Whether the server answered 404."""
        return self.status == HTTPStatus.NOT_FOUND

    def __str__(self) -> str:
        if self.status:
            return f"[{self.status}] {self.message}"
        return self.message


class DecodeError(ConsoleError):
    """The server answered 2xx but the body did not have the expected shape."""


class ValidationError(ConsoleError):
    """Client-side validation failed before a request was issued."""

    def __init__(self, field: str, message: str) -> None:
        self.field = field
        super().__init__(message)


class ConfigurationError(ConsoleError):
    """Invalid console configuration."""


class QueryCancelledError(ConsoleError):
    """The reader of a cached query cancelled before the result arrived."""

    def __init__(self, key: tuple[str, ...]) -> None:
        self.key = key
        super().__init__(f"Query {key!r} was cancelled")
