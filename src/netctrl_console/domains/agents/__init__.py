"""Agents domain - registered hosts and their NIC inventory (read-only)."""

from netctrl_console.domains.agents.client import AgentClient
from netctrl_console.domains.agents.models import (
    Agent,
    AgentListResponse,
    AgentResponse,
    AgentStatus,
    NetworkInterface,
    Port,
    PortState,
)

__all__ = [
    "AgentClient",
    "Agent",
    "AgentStatus",
    "NetworkInterface",
    "Port",
    "PortState",
    "AgentResponse",
    "AgentListResponse",
]
