"""
Elasticsearch HTTP API client.

This module provides the ElasticsearchClient class for reading cluster
state: health, the index and alias catalogs and per-index detail.

ElasticsearchClient receives an injected httpx.AsyncClient with base_url set
to the cluster endpoint. All methods are async and fail loudly: HTTP errors
raise httpx.HTTPStatusError, malformed payloads raise
pydantic.ValidationError. Turning those into display data is the caller's
job (see clusterscope.api.dispatcher).

API documentation:
- https://www.elastic.co/guide/en/elasticsearch/reference/current/cluster-health.html
- https://www.elastic.co/guide/en/elasticsearch/reference/current/cat-indices.html
- https://www.elastic.co/guide/en/elasticsearch/reference/current/indices-get-index.html
"""

from dataclasses import dataclass
from urllib.parse import quote

import httpx
from pydantic import TypeAdapter

from clusterscope.client.types import (
    CatAlias,
    CatAliases,
    CatIndex,
    CatIndices,
    ClusterHealth,
    Index,
)
from clusterscope.config import ElasticsearchConfig

DEFAULT_TIMEOUT = 20.0

_CAT_INDICES = TypeAdapter(list[CatIndex])
_CAT_ALIASES = TypeAdapter(list[CatAlias])


@dataclass
class ElasticsearchClient:
    """
    Elasticsearch API client with injected httpx client.

    Attributes:
        name: Cluster name from the config file
        http: Pre-configured httpx.AsyncClient with base_url and auth set

    Example:
        async with httpx.AsyncClient(base_url="https://es:9200") as http:
            client = ElasticsearchClient(name="prod", http=http)
            health = await client.get_cluster_health()
            print(health.status)
    """

    name: str
    http: httpx.AsyncClient

    @classmethod
    def from_config(
        cls, config: ElasticsearchConfig, timeout: float = DEFAULT_TIMEOUT
    ) -> "ElasticsearchClient":
        """
        Build a client with its own httpx.AsyncClient.

        Args:
            config: Cluster config (endpoint or cloud id, basic auth)
            timeout: Per-request timeout in seconds

        Returns:
            ElasticsearchClient owning a new httpx.AsyncClient

        Raises:
            ValueError: If the endpoint cannot be resolved from the config
        """
        http = httpx.AsyncClient(
            base_url=config.resolve_endpoint(),
            auth=(config.credential.username, config.credential.password),
            timeout=timeout,
            headers={"Accept": "application/json"},
        )
        return cls(name=config.name, http=http)

    async def get_cluster_health(self) -> ClusterHealth:
        """
        Get cluster level health.

        Calls GET /_cluster/health?level=cluster&local=false.

        Returns:
            ClusterHealth snapshot

        Raises:
            httpx.HTTPStatusError: On HTTP errors (4xx, 5xx responses).
            pydantic.ValidationError: On malformed response data.
        """
        response = await self.http.get(
            "/_cluster/health", params={"level": "cluster", "local": "false"}
        )
        response.raise_for_status()
        return ClusterHealth.model_validate(response.json())

    async def cat_indices(self) -> CatIndices:
        """
        List every index with its size and document counts.

        Calls GET /_cat/indices with format=json and bytes=b so sizes are
        plain byte counts.

        Returns:
            One CatIndex per index, in server order
        """
        response = await self.http.get(
            "/_cat/indices",
            params={
                "format": "json",
                "bytes": "b",
                "include_unloaded_segments": "false",
            },
        )
        response.raise_for_status()
        return _CAT_INDICES.validate_python(response.json())

    async def cat_aliases(self) -> CatAliases:
        """
        List every alias to index binding.

        Calls GET /_cat/aliases?format=json.
        """
        response = await self.http.get("/_cat/aliases", params={"format": "json"})
        response.raise_for_status()
        return _CAT_ALIASES.validate_python(response.json())

    async def get_index(self, index: str) -> Index:
        """
        Get aliases, mappings and settings of one index.

        Calls GET /{index}. The response is keyed by the concrete index name;
        when the name given was an alias the single entry is used instead.

        Args:
            index: Index name

        Returns:
            Index detail

        Raises:
            httpx.HTTPStatusError: 404 when the index does not exist
            pydantic.ValidationError: On malformed response data
        """
        response = await self.http.get(f"/{quote(index, safe='')}")
        response.raise_for_status()
        data = response.json()
        if isinstance(data, dict) and index in data:
            return Index.model_validate(data[index])
        if isinstance(data, dict) and len(data) == 1:
            return Index.model_validate(next(iter(data.values())))
        return Index.model_validate(data)

    async def aclose(self) -> None:
        """Close the underlying httpx client."""
        await self.http.aclose()
