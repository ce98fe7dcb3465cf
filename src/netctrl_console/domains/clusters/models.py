"""Pydantic models for clusters."""

from typing import Any

from pydantic import Field, field_validator

from netctrl_console.models.common import WireModel


def _require_name(value: str | None) -> str:
    if not value or not value.strip():
        raise ValueError("Name is required")
    return value


class Cluster(WireModel):
    """Cluster as returned by netctrl-server."""

    id: str | None = Field(None, description="Server-assigned cluster ID")
    name: str = Field(..., description="Cluster name")
    description: str | None = Field(None, description="Free-form description")
    created_at: str | None = Field(None, description="ISO 8601 creation timestamp")
    updated_at: str | None = Field(None, description="ISO 8601 last update timestamp")


class ClusterCreate(WireModel):
    """Request body for creating a cluster."""

    name: str = Field(..., description="Cluster name")
    description: str | None = Field(None, description="Free-form description")

    @field_validator("name")
    @classmethod
    def check_name(cls, value: str) -> str:
        return _require_name(value)


class ClusterUpdate(WireModel):
    """Request body for a partial cluster update.

    Only fields that were explicitly set are sent, so the server leaves the
    others untouched.
    """

    name: str | None = Field(None, description="New cluster name")
    description: str | None = Field(None, description="New description")

    @field_validator("name")
    @classmethod
    def check_name(cls, value: str | None) -> str:
        # Only runs when a name was given, so None here is an explicit null
        return _require_name(value)

    def to_wire(self, exclude_unset: bool = True) -> dict[str, Any]:
        """Serialize only the fields the caller supplied."""
        return super().to_wire(exclude_unset=exclude_unset)


class ClusterResponse(WireModel):
    """Single-cluster envelope: ``{"cluster": {...}}``."""

    cluster: Cluster


class ClusterListResponse(WireModel):
    """Cluster list envelope: ``{"clusters": [...]}``."""

    clusters: list[Cluster] | None = None
