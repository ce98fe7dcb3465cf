"""Agent client operations."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from netctrl_console.domains.agents.models import Agent, AgentListResponse, AgentResponse
from netctrl_console.models.common import decode
from netctrl_console.utils.errors import TransportError

if TYPE_CHECKING:
    from netctrl_console.clients.base import ApiClient

logger = logging.getLogger(__name__)

AGENTS_PATH = "/v1/agents"


class AgentClient:
    """Client for Agent operations.

    Agents are registered by the hosts themselves; the console can only
    read them or unregister them.
    """

    def __init__(self, api: ApiClient) -> None:
        self._api = api

    async def list(self, cluster_id: str | None = None) -> list[Agent]:
        """List agents, optionally only those of one cluster.

        A 404 is returned as an empty list.
        """
        params = {"cluster_id": cluster_id} if cluster_id else None
        try:
            data = await self._api.get(AGENTS_PATH, params=params)
        except TransportError as e:
            if e.is_not_found:
                logger.debug(f"Agent collection returned 404 (cluster_id={cluster_id})")
                return []
            raise

        response = decode(AgentListResponse, data or {}, "agent list")
        return response.agents or []

    async def get(self, agent_id: str) -> Agent:
        """Get an agent by ID."""
        data = await self._api.get(f"{AGENTS_PATH}/{agent_id}")
        return decode(AgentResponse, data, "agent").agent

    async def unregister(self, agent_id: str) -> None:
        """Remove an agent's registration."""
        await self._api.delete(f"{AGENTS_PATH}/{agent_id}")
        logger.info(f"Unregistered agent {agent_id}")
