"""Elasticsearch HTTP client and its response types."""

from clusterscope.client.elasticsearch import ElasticsearchClient
from clusterscope.client.types import (
    CatAlias,
    CatAliases,
    CatIndex,
    CatIndices,
    ClusterHealth,
    Index,
)

__all__ = [
    "CatAlias",
    "CatAliases",
    "CatIndex",
    "CatIndices",
    "ClusterHealth",
    "ElasticsearchClient",
    "Index",
]
