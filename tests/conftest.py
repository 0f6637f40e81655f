"""Shared fixtures and builders for clusterscope tests."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from clusterscope.api.elasticsearch import ElasticsearchApiHandler
from clusterscope.client.types import CatAlias, CatIndex, ClusterHealth
from clusterscope.config import Config, ElasticsearchConfig, ElasticsearchCredential


def make_config(*names: str) -> Config:
    """Config with one cluster per name, endpoints on localhost."""
    return Config(
        elasticsearch=[
            ElasticsearchConfig(
                name=name,
                endpoint=f"http://{name}.localhost:9200",
                credential=ElasticsearchCredential(username="elastic", password="secret"),
            )
            for name in names
        ]
    )


def make_health(cluster_name: str = "a", status: str = "green") -> ClusterHealth:
    return ClusterHealth(
        cluster_name=cluster_name,
        status=status,
        number_of_nodes=3,
        number_of_data_nodes=3,
        active_primary_shards=5,
        active_shards=10,
    )


def make_index(name: str, health: str = "green") -> CatIndex:
    return CatIndex.model_validate(
        {
            "index": name,
            "health": health,
            "status": "open",
            "uuid": f"uuid-{name}",
            "pri": "1",
            "rep": "1",
            "docs.count": "100",
            "docs.deleted": "0",
            "store.size": "2048",
            "pri.store.size": "1024",
        }
    )


def make_alias(alias: str, index: str) -> CatAlias:
    return CatAlias(alias=alias, index=index)


@pytest.fixture
def config():
    """Three clusters: a, b, c."""
    return make_config("a", "b", "c")


@pytest.fixture
def mock_handler():
    """ElasticsearchApiHandler whose handle() is an AsyncMock."""
    handler = MagicMock(spec=ElasticsearchApiHandler)
    handler.handle = AsyncMock()
    handler.aclose = AsyncMock()
    return handler
