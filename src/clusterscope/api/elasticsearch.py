"""
Elasticsearch API handler.

Owns one ElasticsearchClient per configured cluster and turns a typed
ElasticsearchRequest into the matching ElasticsearchResponse. Errors from
the client (httpx, pydantic) propagate unchanged so the dispatcher can
classify them; an unknown cluster name raises ApiHandleError.
"""

import logging

from clusterscope.api.types import (
    AliasesResponse,
    ClusterHealthResponse,
    ElasticsearchRequest,
    ElasticsearchResponse,
    FetchAliases,
    FetchCluster,
    FetchIndex,
    FetchIndices,
    IndexResponse,
    IndicesResponse,
)
from clusterscope.client.elasticsearch import DEFAULT_TIMEOUT, ElasticsearchClient
from clusterscope.config import ElasticsearchConfig

logger = logging.getLogger(__name__)


class ApiHandleError(Exception):
    """
    Raised when a request cannot be routed to a backend client.

    Attributes:
        cluster_name: Cluster the request named
    """

    def __init__(self, cluster_name: str, reason: str) -> None:
        self.cluster_name = cluster_name
        super().__init__(f"{reason}: {cluster_name}")


class ElasticsearchApiHandler:
    """
    Routes Elasticsearch requests to the per-cluster client.

    Instances are shared read-only by every dispatch task; nothing is copied
    per request.

    Example:
        handler = ElasticsearchApiHandler.from_configs(config.elasticsearch)
        response = await handler.handle(FetchIndices(cluster_name="prod"))
    """

    def __init__(self, clients: list[ElasticsearchClient]) -> None:
        """
        Args:
            clients: One client per cluster; names must be unique
        """
        self._clients = {client.name: client for client in clients}

    @classmethod
    def from_configs(
        cls,
        configs: list[ElasticsearchConfig],
        timeout: float = DEFAULT_TIMEOUT,
    ) -> "ElasticsearchApiHandler":
        """
        Build a client for every cluster config.

        Raises:
            ValueError: If a cluster endpoint cannot be resolved
        """
        return cls([ElasticsearchClient.from_config(c, timeout) for c in configs])

    @property
    def cluster_names(self) -> list[str]:
        return list(self._clients)

    async def handle(self, request: ElasticsearchRequest) -> ElasticsearchResponse:
        """
        Execute one request against its cluster.

        Args:
            request: Any ElasticsearchRequest variant

        Returns:
            The response variant matching the request

        Raises:
            ApiHandleError: Unknown cluster or unsupported request
            httpx.HTTPError: Transport or status errors from the client
            pydantic.ValidationError: Malformed payload
        """
        client = self._lookup_cluster(request.cluster_name)

        if isinstance(request, FetchCluster):
            logger.info(f"Fetch cluster health for {request.cluster_name}")
            health = await client.get_cluster_health()
            return ClusterHealthResponse(request.cluster_name, health)

        if isinstance(request, FetchIndices):
            logger.info(f"Fetch indices for {request.cluster_name}")
            indices = await client.cat_indices()
            return IndicesResponse(request.cluster_name, indices)

        if isinstance(request, FetchAliases):
            logger.info(f"Fetch aliases for {request.cluster_name}")
            aliases = await client.cat_aliases()
            return AliasesResponse(request.cluster_name, aliases)

        if isinstance(request, FetchIndex):
            logger.info(f"Fetch index {request.index} for {request.cluster_name}")
            index = await client.get_index(request.index)
            return IndexResponse(request.cluster_name, request.index, index)

        raise ApiHandleError(request.cluster_name, f"unsupported request {request!r}")

    async def aclose(self) -> None:
        """Close every cluster client."""
        for client in self._clients.values():
            await client.aclose()

    def _lookup_cluster(self, name: str) -> ElasticsearchClient:
        try:
            return self._clients[name]
        except KeyError:
            raise ApiHandleError(name, "client not found by name") from None
