"""
Navigation state shared by the view, the input decoder and the renderer.

ViewState is mutated only by View in response to commands (plus the last
input key, recorded by the input decoder). Every render pass reads it.
"""

from dataclasses import dataclass
from enum import Enum


class ResourceKind(Enum):
    """Top-level resource tabs. Only Elasticsearch has a backend today."""

    ELASTICSEARCH = "elasticsearch"
    MONGO = "mongo"
    RABBITMQ = "rabbitmq"

    @property
    def title(self) -> str:
        return self.value.capitalize()


class ElasticsearchResourceKind(Enum):
    """Entries of the Elasticsearch resource list."""

    CLUSTER = "cluster"
    INDEX = "index"
    ALIAS = "alias"

    @property
    def title(self) -> str:
        return self.value.capitalize()


class ComponentKind(Enum):
    """Components that can take input focus."""

    RESOURCE_TAB = "resource_tab"
    CLUSTER_LIST = "cluster_list"
    RESOURCE_LIST = "resource_list"
    INDEX_TABLE = "index_table"
    ALIAS_TABLE = "alias_table"

    @property
    def resource(self) -> ResourceKind | None:
        """Top-level resource owning this component, None for global ones."""
        if self is ComponentKind.RESOURCE_TAB:
            return None
        return ResourceKind.ELASTICSEARCH

    @property
    def supports_drill_down(self) -> bool:
        """True if Enter on a row opens a detail view."""
        return self is ComponentKind.INDEX_TABLE


@dataclass
class ViewState:
    """
    Navigation state of the dashboard.

    Invariants:
    - at most one component is focused and at most one is entered
    - entered_component supports drill-down and belongs to selected_resource

    Attributes:
        focused_component: Component receiving navigation keys
        entered_component: Component showing a drill-down detail view
        selected_resource: Top-level resource tab currently shown
        last_input_key: Raw key last read, for help highlighting
    """

    focused_component: ComponentKind | None = None
    entered_component: ComponentKind | None = None
    selected_resource: ResourceKind = ResourceKind.ELASTICSEARCH
    last_input_key: str | None = None
