"""Console facade wiring configuration, transport, cache and resource clients.

Presentation code talks to netctrl-server only through :class:`Console`:
reads are served from the shared :class:`QueryCache`, and writes invalidate
the cached views they affect once the server has accepted them.
"""

from __future__ import annotations

from functools import partial
from types import TracebackType

import httpx

from netctrl_console.clients.base import ApiClient
from netctrl_console.config import ConsoleConfig, get_config
from netctrl_console.domains.agents.client import AgentClient
from netctrl_console.domains.agents.models import Agent
from netctrl_console.domains.clusters.client import ClusterClient
from netctrl_console.domains.clusters.models import Cluster, ClusterCreate, ClusterUpdate
from netctrl_console.utils.cache import QueryCache, QueryHandle, QueryKey


class QueryKeys:
    """Cache keys for every view over netctrl resources."""

    CLUSTERS: QueryKey = ("clusters",)
    AGENTS: QueryKey = ("agents",)

    @staticmethod
    def cluster_list() -> QueryKey:
        return ("clusters", "list")

    @staticmethod
    def cluster(cluster_id: str) -> QueryKey:
        return ("clusters", "detail", cluster_id)

    @staticmethod
    def agent_list(cluster_id: str | None = None) -> QueryKey:
        if cluster_id:
            return ("agents", "cluster", cluster_id)
        return ("agents", "all")

    @staticmethod
    def agent(agent_id: str) -> QueryKey:
        return ("agents", "detail", agent_id)


class Console:
    """Entry point for the console's data layer.

    Usage:
        async with Console(config) as console:
            clusters = await console.list_clusters()
            cluster = await console.create_cluster(ClusterCreate(name="prod-east"))
    """

    def __init__(
        self,
        config: ConsoleConfig | None = None,
        cache: QueryCache | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._config = config or get_config()
        self._cache = (
            cache if cache is not None else QueryCache(stale_time=self._config.cache_stale_time)
        )
        self._api = ApiClient(self._config, transport=transport)
        self._clusters = ClusterClient(self._api)
        self._agents = AgentClient(self._api)

    @property
    def config(self) -> ConsoleConfig:
        """Get console configuration."""
        return self._config

    @property
    def cache(self) -> QueryCache:
        """Get the query cache shared by all views."""
        return self._cache

    async def close(self) -> None:
        """Let in-flight fetches settle, then close the HTTP client."""
        await self._cache.wait_idle()
        await self._api.close()

    async def __aenter__(self) -> Console:
        await self._api.__aenter__()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.close()

    async def health_check(self) -> bool:
        """Check whether netctrl-server is reachable."""
        return await self._api.health_check()

    # Clusters

    async def list_clusters(self, refresh: bool = False) -> list[Cluster]:
        """List clusters through the cache.

        Args:
            refresh: Fetch again even if a result (or error) is cached.
        """
        key = QueryKeys.cluster_list()
        if refresh:
            return await self._cache.retry(key, self._clusters.list)
        return await self._cache.fetch(key, self._clusters.list)

    async def get_cluster(self, cluster_id: str, refresh: bool = False) -> Cluster:
        """Get one cluster through the cache."""
        key = QueryKeys.cluster(cluster_id)
        fetcher = partial(self._clusters.get, cluster_id)
        if refresh:
            return await self._cache.retry(key, fetcher)
        return await self._cache.fetch(key, fetcher)

    def watch_cluster(self, cluster_id: str) -> QueryHandle[Cluster]:
        """Start loading a cluster for a view that may be left before it resolves."""
        return self._cache.subscribe(
            QueryKeys.cluster(cluster_id), partial(self._clusters.get, cluster_id)
        )

    async def create_cluster(self, request: ClusterCreate) -> Cluster:
        """Create a cluster, then invalidate cluster views."""
        return await self._cache.mutate(
            partial(self._clusters.create, request),
            invalidates=[QueryKeys.CLUSTERS],
        )

    async def update_cluster(self, cluster_id: str, request: ClusterUpdate) -> Cluster:
        """Partially update a cluster, then invalidate cluster views."""
        return await self._cache.mutate(
            partial(self._clusters.update, cluster_id, request),
            invalidates=[QueryKeys.CLUSTERS],
        )

    async def delete_cluster(self, cluster_id: str) -> None:
        """Delete a cluster, then invalidate cluster views."""
        await self._cache.mutate(
            partial(self._clusters.delete, cluster_id),
            invalidates=[QueryKeys.CLUSTERS],
        )

    # Agents

    async def list_agents(
        self, cluster_id: str | None = None, refresh: bool = False
    ) -> list[Agent]:
        """List agents, all or those of one cluster, through the cache."""
        key = QueryKeys.agent_list(cluster_id)
        fetcher = partial(self._agents.list, cluster_id)
        if refresh:
            return await self._cache.retry(key, fetcher)
        return await self._cache.fetch(key, fetcher)

    def watch_agents(self, cluster_id: str | None = None) -> QueryHandle[list[Agent]]:
        """Start loading an agent list for a view that may be left early."""
        return self._cache.subscribe(
            QueryKeys.agent_list(cluster_id), partial(self._agents.list, cluster_id)
        )

    async def get_agent(self, agent_id: str, refresh: bool = False) -> Agent:
        """Get one agent through the cache."""
        key = QueryKeys.agent(agent_id)
        fetcher = partial(self._agents.get, agent_id)
        if refresh:
            return await self._cache.retry(key, fetcher)
        return await self._cache.fetch(key, fetcher)

    async def unregister_agent(self, agent_id: str) -> None:
        """Unregister an agent, then invalidate every agent view."""
        await self._cache.mutate(
            partial(self._agents.unregister, agent_id),
            invalidates=[QueryKeys.AGENTS],
        )
