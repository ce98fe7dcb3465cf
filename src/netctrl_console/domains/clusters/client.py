"""Cluster client operations."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from netctrl_console.domains.clusters.models import (
    Cluster,
    ClusterCreate,
    ClusterListResponse,
    ClusterResponse,
    ClusterUpdate,
)
from netctrl_console.models.common import decode
from netctrl_console.utils.errors import TransportError

if TYPE_CHECKING:
    from netctrl_console.clients.base import ApiClient

logger = logging.getLogger(__name__)

CLUSTERS_PATH = "/v1/clusters"


class ClusterClient:
    """Client for Cluster operations."""

    def __init__(self, api: ApiClient) -> None:
        self._api = api

    async def list(self) -> list[Cluster]:
        """List all clusters.

        A 404 from the collection endpoint means no cluster has been created
        yet on this deployment, and is returned as an empty list.

        Raises:
            TransportError: For any failure other than 404.
            DecodeError: If the response body is malformed.
        """
        try:
            data = await self._api.get(CLUSTERS_PATH)
        except TransportError as e:
            if e.is_not_found:
                logger.debug("Cluster collection returned 404, treating as empty")
                return []
            raise

        response = decode(ClusterListResponse, data or {}, "cluster list")
        return response.clusters or []

    async def get(self, cluster_id: str) -> Cluster:
        """Get a cluster by ID.

        Raises:
            TransportError: If the request fails, including 404 for an
                unknown cluster.
            DecodeError: If the response body is malformed.
        """
        data = await self._api.get(f"{CLUSTERS_PATH}/{cluster_id}")
        return decode(ClusterResponse, data, "cluster").cluster

    async def create(self, request: ClusterCreate) -> Cluster:
        """Create a cluster and return it with its server-assigned fields."""
        data = await self._api.post(CLUSTERS_PATH, json=request.to_wire())
        cluster = decode(ClusterResponse, data, "cluster").cluster
        logger.info(f"Created cluster {cluster.name!r} ({cluster.id})")
        return cluster

    async def update(self, cluster_id: str, request: ClusterUpdate) -> Cluster:
        """Apply a partial update to a cluster.

        Only fields set on ``request`` are sent; the server keeps the rest.
        """
        data = await self._api.patch(f"{CLUSTERS_PATH}/{cluster_id}", json=request.to_wire())
        cluster = decode(ClusterResponse, data, "cluster").cluster
        logger.info(f"Updated cluster {cluster_id}")
        return cluster

    async def delete(self, cluster_id: str) -> None:
        """Delete a cluster."""
        await self._api.delete(f"{CLUSTERS_PATH}/{cluster_id}")
        logger.info(f"Deleted cluster {cluster_id}")
