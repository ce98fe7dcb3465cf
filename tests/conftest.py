"""Pytest fixtures shared across netctrl console tests."""

import itertools
import json
import re
from collections.abc import AsyncGenerator
from typing import Any

import httpx
import pytest

from netctrl_console.clients.base import ApiClient
from netctrl_console.config import ConsoleConfig
from netctrl_console.console import Console

BASE_URL = "http://netctrl.test"


class FakeNetctrlServer:
    """In-memory stand-in for netctrl-server's REST API.

    Collections answer 404 when they are empty, like a fresh deployment does.
    Every request is recorded in ``requests``.
    """

    CLUSTER_ITEM = re.compile(r"^/api/v1/clusters/([^/]+)$")
    AGENT_ITEM = re.compile(r"^/api/v1/agents/([^/]+)$")

    def __init__(self) -> None:
        self.clusters: dict[str, dict[str, Any]] = {}
        self.agents: dict[str, dict[str, Any]] = {}
        self.requests: list[httpx.Request] = []
        self.empty_list_status = 404
        self.failures: dict[tuple[str, str], tuple[int, Any]] = {}
        self._ids = itertools.count(1)
        self._ticks = itertools.count(0)

    def _now(self) -> str:
        return f"2025-01-01T00:00:{next(self._ticks):02d}Z"

    def add_agent(self, agent: dict[str, Any]) -> None:
        self.agents[agent["id"]] = agent

    def fail(self, method: str, path: str, status: int, body: Any = None) -> None:
        """Make every matching request fail with the given status."""
        self.failures[(method, path)] = (status, body)

    def count(self, method: str, path: str) -> int:
        return sum(1 for r in self.requests if r.method == method and r.url.path == path)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        method, path = request.method, request.url.path

        failure = self.failures.get((method, path))
        if failure is not None:
            status, body = failure
            return httpx.Response(status, json=body)

        if path == "/api/health":
            return httpx.Response(200, json={"status": "SERVING"})

        if path == "/api/v1/clusters":
            if method == "GET":
                return self._list("clusters", list(self.clusters.values()))
            if method == "POST":
                return self._create_cluster(json.loads(request.content))

        match = self.CLUSTER_ITEM.match(path)
        if match:
            return self._cluster_item(method, match.group(1), request)

        if path == "/api/v1/agents" and method == "GET":
            cluster_id = request.url.params.get("cluster_id")
            agents = [
                a for a in self.agents.values() if not cluster_id or a.get("clusterId") == cluster_id
            ]
            return self._list("agents", agents)

        match = self.AGENT_ITEM.match(path)
        if match:
            agent = self.agents.get(match.group(1))
            if agent is None:
                return httpx.Response(404, json={"message": "agent not found"})
            if method == "GET":
                return httpx.Response(200, json={"agent": agent})
            if method == "DELETE":
                del self.agents[match.group(1)]
                return httpx.Response(204)

        return httpx.Response(405, json={"message": f"{method} {path} not allowed"})

    def _list(self, field: str, items: list[dict[str, Any]]) -> httpx.Response:
        if not items and self.empty_list_status != 200:
            return httpx.Response(self.empty_list_status, json={"message": "Not Found"})
        return httpx.Response(200, json={field: items})

    def _create_cluster(self, body: dict[str, Any]) -> httpx.Response:
        if not body.get("name"):
            return httpx.Response(400, json={"message": "name is required"})
        now = self._now()
        cluster = {
            "id": f"cluster-{next(self._ids)}",
            "name": body["name"],
            "createdAt": now,
            "updatedAt": now,
        }
        if body.get("description") is not None:
            cluster["description"] = body["description"]
        self.clusters[cluster["id"]] = cluster
        return httpx.Response(200, json={"cluster": cluster})

    def _cluster_item(
        self, method: str, cluster_id: str, request: httpx.Request
    ) -> httpx.Response:
        cluster = self.clusters.get(cluster_id)
        if cluster is None:
            return httpx.Response(404, json={"message": f"cluster {cluster_id} not found"})
        if method == "GET":
            return httpx.Response(200, json={"cluster": cluster})
        if method == "PATCH":
            body = json.loads(request.content)
            for field in ("name", "description"):
                if field in body:
                    cluster[field] = body[field]
            cluster["updatedAt"] = self._now()
            return httpx.Response(200, json={"cluster": cluster})
        if method == "DELETE":
            del self.clusters[cluster_id]
            return httpx.Response(204)
        return httpx.Response(405, json={"message": "method not allowed"})


@pytest.fixture
def sample_agent() -> dict[str, Any]:
    """Sample agent payload as sent by netctrl-server (camelCase)."""
    return {
        "id": "agent-1",
        "clusterId": "cluster-1",
        "hostname": "gpu-node-01",
        "ipAddress": "10.0.0.11",
        "version": "1.4.2",
        "status": "AGENT_STATUS_ACTIVE",
        "lastSeen": "2025-01-01T12:00:00Z",
        "createdAt": "2025-01-01T00:00:00Z",
        "updatedAt": "2025-01-01T12:00:00Z",
        "hardwareCollected": True,
        "networkInterfaces": [
            {
                "deviceName": "mlx5_0",
                "pciAddress": "0000:3b:00.0",
                "partNumber": "MCX653106A-HDAT",
                "serialNumber": "MT2105X12345",
                "firmwareVersion": "20.31.1014",
                "portCount": 2,
                "psid": "MT_0000000223",
                "ports": [
                    {
                        "number": 1,
                        "state": "PORT_STATE_UP",
                        "speed": 200000,
                        "macAddress": "b8:ce:f6:00:00:01",
                        "mtu": 4096,
                        "guid": "b8cef60300000001",
                        "pciAddress": "0000:3b:00.0",
                        "interfaceName": "ibp59s0f0",
                    },
                    {
                        "number": 2,
                        "state": "PORT_STATE_DOWN",
                        "interfaceName": "ibp59s0f1",
                    },
                ],
            }
        ],
    }


@pytest.fixture
def fake_server() -> FakeNetctrlServer:
    """Empty fake netctrl-server."""
    return FakeNetctrlServer()


@pytest.fixture
def transport(fake_server: FakeNetctrlServer) -> httpx.MockTransport:
    """httpx transport routed to the fake server."""
    return httpx.MockTransport(fake_server.handler)


@pytest.fixture
def config() -> ConsoleConfig:
    """Console configuration pointing at the fake server."""
    return ConsoleConfig(base_url=BASE_URL)


@pytest.fixture
async def api(
    config: ConsoleConfig, transport: httpx.MockTransport
) -> AsyncGenerator[ApiClient, None]:
    """Open ApiClient talking to the fake server."""
    async with ApiClient(config, transport=transport) as client:
        yield client


@pytest.fixture
async def console(
    config: ConsoleConfig, transport: httpx.MockTransport
) -> AsyncGenerator[Console, None]:
    """Open Console talking to the fake server."""
    async with Console(config, transport=transport) as c:
        yield c
