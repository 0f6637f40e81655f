"""
Elasticsearch component: cluster list, resource list and content views.

The component owns the cursors of its four collections (clusters, resource
kinds, index rows, alias rows), the drill-down key of the index table and
the response cache. Its fetch_plan() is a pure function of that state and
decides which requests describe what is on screen:

- Cluster selected       -> FetchCluster
- Index selected         -> FetchIndices, or FetchIndex once an index is entered
- Alias selected         -> FetchAliases

Moving a table cursor never changes the plan; moving the cluster or resource
cursor does, and the caller sends the new plan.
"""

import logging
from typing import Any

from rich.console import Group, RenderableType
from rich.markup import escape
from rich.table import Table
from rich.text import Text

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
from clusterscope.client.types import CatAlias, CatIndex, Index
from clusterscope.config import ElasticsearchConfig
from clusterscope.view.data import ElasticsearchData, TableFilter
from clusterscope.view.format import (
    format_cluster_health,
    format_timestamp,
    health_color,
    humanize_bytes,
)
from clusterscope.view.layout import make_panel, navigatable_title
from clusterscope.view.navigation import ListCursor, Navigate
from clusterscope.view.state import ComponentKind, ElasticsearchResourceKind

logger = logging.getLogger(__name__)

RESOURCES = [
    ElasticsearchResourceKind.CLUSTER,
    ElasticsearchResourceKind.INDEX,
    ElasticsearchResourceKind.ALIAS,
]


class ElasticsearchComponent:
    """
    Navigation, cache and rendering for the Elasticsearch resource.

    Example:
        component = ElasticsearchComponent(config.elasticsearch)
        requests = component.fetch_plan()   # [FetchCluster("a")]
        component.navigate(ComponentKind.RESOURCE_LIST, Navigate.DOWN)
        requests = component.fetch_plan()   # [FetchIndices("a")]
    """

    def __init__(
        self,
        configs: list[ElasticsearchConfig],
        table_filter: TableFilter | None = TableFilter.HIDE_SYSTEM,
    ) -> None:
        """
        Args:
            configs: Configured clusters, in display order
            table_filter: Read-time filter for index and alias rows
        """
        self.cluster_names: list[str] = [c.name for c in configs]
        self.resources = RESOURCES
        self.table_filter = table_filter
        self.data = ElasticsearchData()

        self.focused: ComponentKind | None = None
        self.cluster_cursor = ListCursor(selected=0 if self.cluster_names else None)
        self.resource_cursor = ListCursor(selected=0)
        self.index_cursor = ListCursor()
        self.alias_cursor = ListCursor()
        self.entered_index: str | None = None

    # -------------------------------------------------------------------------
    # Selection
    # -------------------------------------------------------------------------

    def selected_cluster_name(self) -> str | None:
        idx = self.cluster_cursor.get(len(self.cluster_names))
        return None if idx is None else self.cluster_names[idx]

    def selected_resource(self) -> ElasticsearchResourceKind | None:
        idx = self.resource_cursor.get(len(self.resources))
        return None if idx is None else self.resources[idx]

    def visible_indices(self) -> list[CatIndex]:
        cluster = self.selected_cluster_name()
        if cluster is None:
            return []
        return self.data.get_visible_indices(cluster, self.table_filter) or []

    def visible_aliases(self) -> list[CatAlias]:
        cluster = self.selected_cluster_name()
        if cluster is None:
            return []
        return self.data.get_visible_aliases(cluster, self.table_filter) or []

    def selected_index_name(self) -> str | None:
        """Name of the index row under the cursor, if any."""
        rows = self.visible_indices()
        idx = self.index_cursor.get(len(rows))
        return None if idx is None else rows[idx].index

    # -------------------------------------------------------------------------
    # Refresh policy
    # -------------------------------------------------------------------------

    def fetch_plan(self) -> list[ElasticsearchRequest]:
        """
        Requests needed for what is currently selected.

        Pure: calling it twice without a state change gives equal lists.
        """
        cluster = self.selected_cluster_name()
        if cluster is None:
            return []

        resource = self.selected_resource()
        if resource == ElasticsearchResourceKind.CLUSTER:
            return [FetchCluster(cluster_name=cluster)]
        if resource == ElasticsearchResourceKind.INDEX:
            if self.entered_index is not None:
                return [FetchIndex(cluster_name=cluster, index=self.entered_index)]
            return [FetchIndices(cluster_name=cluster)]
        if resource == ElasticsearchResourceKind.ALIAS:
            return [FetchAliases(cluster_name=cluster)]
        return []

    def update_api_response(self, response: ElasticsearchResponse) -> None:
        """Store a successful response in the cache, replacing that slot."""
        if isinstance(response, ClusterHealthResponse):
            self.data.update_cluster_health(response.cluster_name, response.response)
        elif isinstance(response, IndicesResponse):
            self.data.update_indices(response.cluster_name, response.response)
        elif isinstance(response, AliasesResponse):
            self.data.update_aliases(response.cluster_name, response.response)
        elif isinstance(response, IndexResponse):
            self.data.update_index(response.cluster_name, response.index, response.response)
        else:
            logger.warning(f"Ignored unexpected response {response!r}")

    # -------------------------------------------------------------------------
    # Navigation
    # -------------------------------------------------------------------------

    def focus(self, component: ComponentKind) -> None:
        self.focused = component

    def unfocus(self) -> None:
        self.focused = None

    def navigate(
        self, component: ComponentKind, navigate: Navigate
    ) -> list[ElasticsearchRequest]:
        """
        Move the cursor of one collection.

        Returns:
            The new fetch plan if the move changed the cluster or resource
            selection, otherwise an empty list
        """
        if component == ComponentKind.CLUSTER_LIST:
            if self.cluster_cursor.apply(navigate, len(self.cluster_names)):
                self.reset_view_state()
                return self.fetch_plan()
        elif component == ComponentKind.RESOURCE_LIST:
            if self.resource_cursor.apply(navigate, len(self.resources)):
                self.reset_view_state()
                return self.fetch_plan()
        elif component == ComponentKind.INDEX_TABLE:
            self.index_cursor.apply(navigate, len(self.visible_indices()))
        elif component == ComponentKind.ALIAS_TABLE:
            self.alias_cursor.apply(navigate, len(self.visible_aliases()))
        return []

    def enter(self, component: ComponentKind) -> list[ElasticsearchRequest]:
        """
        Open the detail view of the row under the cursor.

        Returns:
            The narrowed plan, or an empty list if there is no row to enter
        """
        if component != ComponentKind.INDEX_TABLE:
            return []
        name = self.selected_index_name()
        if name is None:
            return []
        self.entered_index = name
        return self.fetch_plan()

    def leave(self) -> list[ElasticsearchRequest]:
        """Close the detail view and return the list plan."""
        self.entered_index = None
        return self.fetch_plan()

    def reset_view_state(self) -> None:
        """Drop state tied to the rows of the previous selection."""
        self.entered_index = None
        self.index_cursor.reset()
        self.alias_cursor.reset()

    # -------------------------------------------------------------------------
    # Rendering
    # -------------------------------------------------------------------------

    def render_cluster_list(self):
        selected = self.cluster_cursor.get(len(self.cluster_names))
        lines = Text()
        for idx, name in enumerate(self.cluster_names):
            if idx:
                lines.append("\n")
            if idx == selected:
                focused = self.focused == ComponentKind.CLUSTER_LIST
                lines.append(f"> {name}", style="bold reverse" if focused else "bold")
            else:
                lines.append(f"  {name}")
        if not self.cluster_names:
            lines.append("no clusters configured", style="dim")
        return make_panel(
            lines,
            navigatable_title("Cluster"),
            self.focused == ComponentKind.CLUSTER_LIST,
        )

    def render_resource_list(self):
        selected = self.selected_resource()
        lines = Text()
        for idx, resource in enumerate(self.resources):
            if idx:
                lines.append("\n")
            if resource == selected:
                focused = self.focused == ComponentKind.RESOURCE_LIST
                lines.append(
                    f"> {resource.title}", style="bold reverse" if focused else "bold"
                )
            else:
                lines.append(f"  {resource.title}")
        # "e" is the hotkey for this list
        return make_panel(
            lines,
            "[bold][u]E[/u]lasticsearch[/bold]",
            self.focused == ComponentKind.RESOURCE_LIST,
        )

    def render_content(self) -> RenderableType:
        cluster = self.selected_cluster_name()
        if cluster is None:
            return make_panel("[dim]no cluster selected[/dim]", "Elasticsearch")

        resource = self.selected_resource()
        if resource == ElasticsearchResourceKind.CLUSTER:
            return self._render_cluster(cluster)
        if resource == ElasticsearchResourceKind.INDEX:
            if self.entered_index is not None:
                return self._render_index_detail(cluster, self.entered_index)
            return self._render_indices(cluster)
        if resource == ElasticsearchResourceKind.ALIAS:
            return self._render_aliases(cluster)
        return make_panel("", "Elasticsearch")

    def _render_cluster(self, cluster: str) -> RenderableType:
        health = self.data.get_cluster_health(cluster)
        if health is None:
            return make_panel("[dim]Loading...[/dim]", "Cluster Health")
        color = health_color(health.status)
        return make_panel(
            format_cluster_health(health),
            f"[bold]Cluster Health[/bold] [{color}]●[/{color}]",
        )

    def _render_indices(self, cluster: str) -> RenderableType:
        focused = self.focused == ComponentKind.INDEX_TABLE
        title = navigatable_title("Indices")
        if self.data.get_indices(cluster) is None:
            return make_panel("[dim]Loading...[/dim]", title, focused)

        rows = self.visible_indices()
        selected = self.index_cursor.get(len(rows))

        table = Table(expand=True, box=None, header_style="bold dim", pad_edge=False)
        for header, justify in [
            ("Index", "left"),
            ("Health", "left"),
            ("Status", "left"),
            ("Pri", "right"),
            ("Rep", "right"),
            ("DocsCount", "right"),
            ("DocsDeleted", "right"),
            ("StoreSize", "right"),
            ("PriStoreSize", "right"),
            ("Uuid", "left"),
        ]:
            table.add_column(header, justify=justify, no_wrap=True)

        for idx, index in enumerate(rows):
            color = health_color(index.health)
            table.add_row(
                Text(("> " if idx == selected else "  ") + index.index, style="bold"),
                Text(index.health or "-", style=color),
                Text(index.status),
                Text(index.pri or "-"),
                Text(index.rep or "-"),
                Text(index.docs_count or "-", style="cyan"),
                Text(index.docs_deleted or "-"),
                humanize_bytes(index.store_size),
                humanize_bytes(index.pri_store_size),
                Text(index.uuid, style="dim"),
                style="reverse" if idx == selected and focused else None,
            )

        return make_panel(table, f"{title} [dim]({len(rows)})[/dim]", focused)

    def _render_index_detail(self, cluster: str, name: str) -> RenderableType:
        title = f"[bold]Index[/bold] {escape(name)}"
        index = self.data.get_index(cluster, name)
        if index is None:
            return make_panel("[dim]Loading...[/dim]", title, True)

        row = next((i for i in self.visible_indices() if i.index == name), None)
        return make_panel(Group(*self._index_detail_sections(index, row)), title, True)

    def _index_detail_sections(self, index: Index, row: CatIndex | None) -> list:
        settings = index.index_settings()
        summary = Table.grid(padding=(0, 2))
        summary.add_column(style="dim")
        summary.add_column()
        summary.add_row("uuid", Text(str(settings.get("uuid", row.uuid if row else "-"))))
        summary.add_row("shards", Text(str(settings.get("number_of_shards", "-"))))
        summary.add_row("replicas", Text(str(settings.get("number_of_replicas", "-"))))
        summary.add_row("created", format_timestamp(settings.get("creation_date")))
        if row is not None:
            summary.add_row("health", Text(row.health or "-", style=health_color(row.health)))
            summary.add_row("docs", Text(row.docs_count or "-"))
            summary.add_row("size", humanize_bytes(row.store_size))

        aliases = ", ".join(sorted(index.aliases)) or "-"
        fields = _mapping_fields(index.mappings)
        mapping = Table(box=None, header_style="bold dim", pad_edge=False)
        mapping.add_column("Field")
        mapping.add_column("Type")
        for field_name, field_type in fields:
            mapping.add_row(Text(field_name), Text(field_type))

        return [
            summary,
            Text(""),
            Text.assemble(("aliases  ", "dim"), aliases),
            Text(""),
            Text(f"mappings ({len(fields)} fields)", style="dim"),
            mapping,
        ]

    def _render_aliases(self, cluster: str) -> RenderableType:
        focused = self.focused == ComponentKind.ALIAS_TABLE
        title = navigatable_title("Aliases")
        if self.data.get_aliases(cluster) is None:
            return make_panel("[dim]Loading...[/dim]", title, focused)

        rows = self.visible_aliases()
        selected = self.alias_cursor.get(len(rows))

        table = Table(expand=True, box=None, header_style="bold dim", pad_edge=False)
        for header in ["Alias", "Index", "Filter", "RoutingIndex", "RoutingSearch", "IsWriteIndex"]:
            table.add_column(header, no_wrap=True)
        for idx, alias in enumerate(rows):
            table.add_row(
                Text(("> " if idx == selected else "  ") + alias.alias, style="bold"),
                Text(alias.index),
                Text(alias.filter),
                Text(alias.routing_index),
                Text(alias.routing_search),
                Text(alias.is_write_index),
                style="reverse" if idx == selected and focused else None,
            )
        return make_panel(table, f"{title} [dim]({len(rows)})[/dim]", focused)


def _mapping_fields(mappings: dict[str, Any], prefix: str = "") -> list[tuple[str, str]]:
    """Flatten mappings["properties"] into (dotted field name, type) pairs."""
    fields = []
    for name, field_def in sorted(mappings.get("properties", {}).items()):
        if not isinstance(field_def, dict):
            continue
        path = f"{prefix}{name}"
        if "properties" in field_def:
            fields.extend(_mapping_fields(field_def, f"{path}."))
        else:
            fields.append((path, str(field_def.get("type", "object"))))
    return fields
