"""Clusters domain - named groups of agents, the only editable resource."""

from netctrl_console.domains.clusters.client import ClusterClient
from netctrl_console.domains.clusters.models import (
    Cluster,
    ClusterCreate,
    ClusterListResponse,
    ClusterResponse,
    ClusterUpdate,
)

__all__ = [
    "ClusterClient",
    "Cluster",
    "ClusterCreate",
    "ClusterUpdate",
    "ClusterResponse",
    "ClusterListResponse",
]
