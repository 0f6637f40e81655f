"""
Elasticsearch Pydantic response types.

This module provides Pydantic models for parsing responses from the
Elasticsearch HTTP API:
- GET /_cluster/health
- GET /_cat/indices?format=json
- GET /_cat/aliases?format=json
- GET /{index}

Notes:
- _cat APIs return every value as a string, including counts and sizes
  (sizes are in bytes because the client asks for bytes=b)
- _cat keys contain dots ("docs.count"), mapped with aliases
- Closed indices report null counts and sizes
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ClusterHealth(BaseModel):
    """
    Response from GET /_cluster/health.

    Based on:
    https://www.elastic.co/guide/en/elasticsearch/reference/current/cluster-health.html
    """

    cluster_name: str
    status: str  # "green", "yellow", "red"
    timed_out: bool = False
    number_of_nodes: int
    number_of_data_nodes: int
    active_primary_shards: int
    active_shards: int
    relocating_shards: int = 0
    initializing_shards: int = 0
    unassigned_shards: int = 0
    delayed_unassigned_shards: int = 0
    number_of_pending_tasks: int = 0
    number_of_in_flight_fetch: int = 0
    task_max_waiting_in_queue_millis: int = 0
    active_shards_percent_as_number: float = 0.0


class CatIndex(BaseModel):
    """
    Single row from GET /_cat/indices?format=json&bytes=b.

    Example row:
    {
        "health": "green", "status": "open", "index": "logs-2024.01",
        "uuid": "Hk2...", "pri": "1", "rep": "1",
        "docs.count": "1200", "docs.deleted": "0",
        "store.size": "81920", "pri.store.size": "40960"
    }
    """

    model_config = ConfigDict(populate_by_name=True)

    index: str
    health: str | None = None
    status: str = ""
    uuid: str = ""
    pri: str | None = None
    rep: str | None = None
    docs_count: str | None = Field(default=None, alias="docs.count")
    docs_deleted: str | None = Field(default=None, alias="docs.deleted")
    store_size: str | None = Field(default=None, alias="store.size")
    pri_store_size: str | None = Field(default=None, alias="pri.store.size")
    creation_date: str | None = Field(default=None, alias="creation.date")


CatIndices = list[CatIndex]


class CatAlias(BaseModel):
    """
    Single row from GET /_cat/aliases?format=json.

    Filter and routing columns are "-" when unset.
    """

    model_config = ConfigDict(populate_by_name=True)

    alias: str
    index: str
    filter: str = "-"
    routing_index: str = Field(default="-", alias="routing.index")
    routing_search: str = Field(default="-", alias="routing.search")
    is_write_index: str = "-"


CatAliases = list[CatAlias]


class Index(BaseModel):
    """
    Detail of one index from GET /{index}.

    The API answers {"<index name>": {"aliases": ..., "mappings": ...,
    "settings": ...}}; this model is the inner object.
    """

    aliases: dict[str, Any] = Field(default_factory=dict)
    mappings: dict[str, Any] = Field(default_factory=dict)
    settings: dict[str, Any] = Field(default_factory=dict)

    def index_settings(self) -> dict[str, Any]:
        """Return settings["index"], the part worth displaying."""
        return self.settings.get("index", {})
