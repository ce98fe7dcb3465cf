"""HTTP clients for netctrl-server."""

from netctrl_console.clients.base import ApiClient

__all__ = ["ApiClient"]
