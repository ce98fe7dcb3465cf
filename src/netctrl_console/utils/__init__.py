"""Utility functions and helpers for the netctrl console."""

from netctrl_console.utils.cache import (
    QueryCache,
    QueryHandle,
    QueryKey,
    QueryState,
)
from netctrl_console.utils.errors import (
    ConfigurationError,
    ConsoleError,
    DecodeError,
    QueryCancelledError,
    TransportError,
    ValidationError,
)

__all__ = [
    # Errors
    "ConsoleError",
    "TransportError",
    "DecodeError",
    "ValidationError",
    "ConfigurationError",
    "QueryCancelledError",
    # Caching
    "QueryCache",
    "QueryHandle",
    "QueryKey",
    "QueryState",
]
