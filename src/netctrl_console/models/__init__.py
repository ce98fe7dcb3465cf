"""Shared wire models."""

from netctrl_console.models.common import SERVER_OWNED_FIELDS, WireModel, decode

__all__ = ["SERVER_OWNED_FIELDS", "WireModel", "decode"]
