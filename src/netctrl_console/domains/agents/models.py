"""Pydantic models for agents and their network inventory.

Agents register themselves with netctrl-server and report the Mellanox
NICs found on their host. The console only observes these records, so every
field is optional: the server decides what is present.
"""

from enum import Enum

from pydantic import Field

from netctrl_console.models.common import WireModel


class AgentStatus(str, Enum):
    """Agent liveness as reported by the server."""

    UNSPECIFIED = "AGENT_STATUS_UNSPECIFIED"
    ACTIVE = "AGENT_STATUS_ACTIVE"
    INACTIVE = "AGENT_STATUS_INACTIVE"

    @classmethod
    def _missing_(cls, value: object) -> "AgentStatus":
        return cls.UNSPECIFIED


class PortState(str, Enum):
    """Link state of a NIC port."""

    UNSPECIFIED = "PORT_STATE_UNSPECIFIED"
    DOWN = "PORT_STATE_DOWN"
    UP = "PORT_STATE_UP"
    TESTING = "PORT_STATE_TESTING"

    @classmethod
    def _missing_(cls, value: object) -> "PortState":
        return cls.UNSPECIFIED


class Port(WireModel):
    """A physical port on a network interface."""

    number: int | None = Field(None, description="Port number on the NIC")
    state: PortState | None = Field(None, description="Link state")
    speed: int | None = Field(None, description="Link speed")
    mac_address: str | None = Field(None, description="MAC address")
    mtu: int | None = Field(None, description="MTU in bytes")
    guid: str | None = Field(None, description="InfiniBand GUID")
    pci_address: str | None = Field(None, description="PCI address of the port function")
    interface_name: str | None = Field(None, description="OS interface name (e.g. ens1f0)")


class NetworkInterface(WireModel):
    """A NIC discovered on an agent's host."""

    device_name: str | None = Field(None, description="Device name (e.g. mlx5_0)")
    pci_address: str | None = Field(None, description="PCI address")
    part_number: str | None = Field(None, description="Vendor part number")
    serial_number: str | None = Field(None, description="Board serial number")
    firmware_version: str | None = Field(None, description="Firmware version")
    port_count: int | None = Field(None, description="Number of ports")
    psid: str | None = Field(None, description="Parameter-set ID")
    ports: list[Port] = Field(default_factory=list, description="Ports, in server order")


class Agent(WireModel):
    """A registered agent host."""

    id: str | None = Field(None, description="Agent ID")
    cluster_id: str | None = Field(None, description="Owning cluster ID")
    hostname: str | None = Field(None, description="Host name")
    ip_address: str | None = Field(None, description="Primary IP address")
    version: str | None = Field(None, description="Agent software version")
    status: AgentStatus | None = Field(None, description="Agent status")
    last_seen: str | None = Field(None, description="ISO 8601 time of last heartbeat")
    created_at: str | None = Field(None, description="ISO 8601 registration timestamp")
    updated_at: str | None = Field(None, description="ISO 8601 last update timestamp")
    hardware_collected: bool | None = Field(
        None, description="Whether the NIC inventory has been collected"
    )
    network_interfaces: list[NetworkInterface] = Field(
        default_factory=list, description="NICs, in server order"
    )

    @property
    def is_active(self) -> bool:
        """Check if the agent reports as active."""
        return self.status == AgentStatus.ACTIVE

    @property
    def total_ports(self) -> int:
        """Total ports reported across all interfaces."""
        return sum(len(nic.ports) for nic in self.network_interfaces)


class AgentResponse(WireModel):
    """Single-agent envelope: ``{"agent": {...}}``."""

    agent: Agent


class AgentListResponse(WireModel):
    """Agent list envelope: ``{"agents": [...]}``."""

    agents: list[Agent] | None = None
