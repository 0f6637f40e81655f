"""
Per-cluster cache of the latest successful Elasticsearch responses.

Each (cluster, response kind) slot holds one snapshot and a new response of
that kind replaces it whole; per-index details are keyed by index name.
Nothing is invalidated: failed requests never reach the cache, so the last
good snapshot stays visible.

Filtering (hiding system indices) happens when reading, so switching a
filter never loses cached rows.
"""

from dataclasses import dataclass, field
from enum import Enum

from clusterscope.client.types import (
    CatAlias,
    CatAliases,
    CatIndex,
    CatIndices,
    ClusterHealth,
    Index,
)


class TableFilter(Enum):
    """Read-time row filters."""

    HIDE_SYSTEM = "hide_system"

    def apply(self, name: str) -> bool:
        """Return True if a row with this name stays visible."""
        if self is TableFilter.HIDE_SYSTEM:
            return not name.startswith(".")
        return True


@dataclass
class ClusterData:
    health: ClusterHealth | None = None
    indices: CatIndices | None = None
    aliases: CatAliases | None = None
    index: dict[str, Index] = field(default_factory=dict)


class ElasticsearchData:
    """
    Cache of Elasticsearch responses keyed by cluster name.

    Example:
        data = ElasticsearchData()
        data.update_indices("prod", indices)
        rows = data.get_visible_indices("prod", TableFilter.HIDE_SYSTEM)
    """

    def __init__(self) -> None:
        self._clusters: dict[str, ClusterData] = {}

    def update_cluster_health(self, cluster_name: str, health: ClusterHealth) -> None:
        self._cluster_data(cluster_name).health = health

    def get_cluster_health(self, cluster_name: str) -> ClusterHealth | None:
        cluster = self._clusters.get(cluster_name)
        return cluster.health if cluster else None

    def update_indices(self, cluster_name: str, indices: CatIndices) -> None:
        """Replace the index catalog, stored sorted by index name."""
        self._cluster_data(cluster_name).indices = sorted(indices, key=lambda i: i.index)

    def get_indices(self, cluster_name: str) -> CatIndices | None:
        cluster = self._clusters.get(cluster_name)
        return cluster.indices if cluster else None

    def get_visible_indices(
        self, cluster_name: str, table_filter: TableFilter | None = None
    ) -> list[CatIndex] | None:
        """
        Index rows to display.

        Returns:
            Filtered rows, or None if no catalog has been received yet
        """
        indices = self.get_indices(cluster_name)
        if indices is None:
            return None
        return [i for i in indices if table_filter is None or table_filter.apply(i.index)]

    def update_aliases(self, cluster_name: str, aliases: CatAliases) -> None:
        """Replace the alias catalog, stored sorted by alias name."""
        self._cluster_data(cluster_name).aliases = sorted(aliases, key=lambda a: a.alias)

    def get_aliases(self, cluster_name: str) -> CatAliases | None:
        cluster = self._clusters.get(cluster_name)
        return cluster.aliases if cluster else None

    def get_visible_aliases(
        self, cluster_name: str, table_filter: TableFilter | None = None
    ) -> list[CatAlias] | None:
        aliases = self.get_aliases(cluster_name)
        if aliases is None:
            return None
        return [a for a in aliases if table_filter is None or table_filter.apply(a.alias)]

    def update_index(self, cluster_name: str, name: str, index: Index) -> None:
        self._cluster_data(cluster_name).index[name] = index

    def get_index(self, cluster_name: str, name: str) -> Index | None:
        cluster = self._clusters.get(cluster_name)
        return cluster.index.get(name) if cluster else None

    def cluster_names(self) -> list[str]:
        """Clusters with at least one cached response."""
        return list(self._clusters)

    def _cluster_data(self, cluster_name: str) -> ClusterData:
        return self._clusters.setdefault(cluster_name, ClusterData())
