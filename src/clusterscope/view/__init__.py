"""
View: the navigation state machine and the render entry point.

View owns the components and the ViewState and applies commands to them.
Every transition that can change what must be fetched returns the new
fetch plan (a list of requests) for the event loop to send; transitions
that only move a table cursor return an empty list.

Transitions:
- focus(c): unfocus whatever is focused, then focus c
- unfocus(): clear component-local focus, then the focused component
- navigate_component(c, nav): move a cursor; re-plan if the resource,
  cluster or Elasticsearch resource kind changed
- enter(c): drill into the row under the cursor of a drill-down component
- leave(c): close the drill-down, always clearing the entered key

Rendering never mutates the state, the cache or the transport stats.
"""

import logging

from rich.layout import Layout

from clusterscope.api.types import ELASTICSEARCH_RESPONSES, RequestEvent, ResponseEnvelope
from clusterscope.config import Config
from clusterscope.transport import TransportStats
from clusterscope.view.components.elasticsearch import ElasticsearchComponent
from clusterscope.view.components.help import HelpComponent
from clusterscope.view.components.resource_tab import ResourceTab
from clusterscope.view.layout import create_layout, make_panel
from clusterscope.view.navigation import ListCursor, Navigate
from clusterscope.view.state import (
    ComponentKind,
    ElasticsearchResourceKind,
    ResourceKind,
    ViewState,
)

logger = logging.getLogger(__name__)

__all__ = [
    "ComponentKind",
    "ElasticsearchResourceKind",
    "ListCursor",
    "Navigate",
    "ResourceKind",
    "View",
    "ViewState",
]


class View:
    """
    Navigation state machine for the dashboard.

    Example:
        view = View(config).with_transport_stats(transport.stats())
        await transport.send_requests(view.pre_render_loop())
        view.focus(ComponentKind.INDEX_TABLE)
        await transport.send_requests(view.enter(ComponentKind.INDEX_TABLE))
    """

    def __init__(self, config: Config) -> None:
        self.resource_tab = ResourceTab()
        self.elasticsearch = ElasticsearchComponent(config.elasticsearch)
        self.help = HelpComponent()
        self.state = ViewState(selected_resource=self.resource_tab.selected_resource())
        self._stats: TransportStats | None = None

    def with_transport_stats(self, stats: TransportStats) -> "View":
        self._stats = stats
        return self

    def pre_render_loop(self) -> list[RequestEvent]:
        """Requests to send before the first render."""
        return self.fetch_plan()

    def fetch_plan(self) -> list[RequestEvent]:
        """Requests describing the current screen; pure."""
        if self.state.selected_resource == ResourceKind.ELASTICSEARCH:
            return self.elasticsearch.fetch_plan()
        return []

    # -------------------------------------------------------------------------
    # Transitions
    # -------------------------------------------------------------------------

    def unfocus(self) -> None:
        focused = self.state.focused_component
        if focused == ComponentKind.RESOURCE_TAB:
            self.resource_tab.toggle_focus(False)
        elif focused is not None:
            self.elasticsearch.unfocus()
        self.state.focused_component = None

    def focus(self, component: ComponentKind) -> None:
        self.unfocus()

        if component == ComponentKind.RESOURCE_TAB:
            self.resource_tab.toggle_focus(True)
        else:
            self.elasticsearch.focus(component)

        self.state.focused_component = component

    def navigate_component(
        self, component: ComponentKind, navigate: Navigate
    ) -> list[RequestEvent]:
        """
        Move the cursor of a component.

        Returns:
            The new fetch plan when the move changed the query parameters,
            otherwise an empty list
        """
        if component == ComponentKind.RESOURCE_TAB:
            previous = self.state.selected_resource
            if not self.resource_tab.navigate(navigate):
                return []
            selected = self.resource_tab.selected_resource()
            if selected == previous:
                return []
            # The drill-down belongs to the previous resource
            self._clear_entered()
            if previous == ResourceKind.ELASTICSEARCH:
                self.elasticsearch.reset_view_state()
            self.state.selected_resource = selected
            return self.fetch_plan()

        if component.resource != self.state.selected_resource:
            return []

        requests = self.elasticsearch.navigate(component, navigate)
        if self.elasticsearch.entered_index is None:
            # A cluster or resource change drops the drill-down
            self.state.entered_component = None
        return requests

    def enter(self, component: ComponentKind) -> list[RequestEvent]:
        """
        Drill into the row under the cursor.

        Ignored for components without drill-down, for components of
        another resource and for empty tables.

        Returns:
            The narrowed fetch plan, or an empty list if nothing was entered
        """
        if not component.supports_drill_down:
            logger.debug(f"{component} does not support drill-down")
            return []
        if component.resource != self.state.selected_resource:
            return []

        requests = self.elasticsearch.enter(component)
        if self.elasticsearch.entered_index is None:
            return []
        self.state.entered_component = component
        return requests

    def leave(self, component: ComponentKind) -> list[RequestEvent]:
        """
        Close the drill-down and return the list plan.

        Always clears the entered component and key, even when nothing was
        entered.
        """
        if self.state.entered_component not in (None, component):
            logger.debug(
                f"Leave {component} while {self.state.entered_component} is entered"
            )
        self._clear_entered()
        return self.fetch_plan()

    def update_api_response(self, envelope: ResponseEnvelope) -> None:
        """
        Apply a correlated response to the cache.

        Failures leave the cache untouched; they are visible through the
        transport stats.
        """
        if not envelope.ok:
            return
        if isinstance(envelope.result, ELASTICSEARCH_RESPONSES):
            self.elasticsearch.update_api_response(envelope.result)
        else:
            logger.warning(f"No component for response #{envelope.request_id}")

    def _clear_entered(self) -> None:
        self.elasticsearch.leave()
        self.state.entered_component = None

    # -------------------------------------------------------------------------
    # Rendering
    # -------------------------------------------------------------------------

    def render(self) -> Layout:
        """Build the frame for the current state."""
        layout = create_layout()
        layout["tab"].update(self.resource_tab.render())

        if self.state.selected_resource == ResourceKind.ELASTICSEARCH:
            layout["body"]["side"]["clusters"].update(
                self.elasticsearch.render_cluster_list()
            )
            layout["body"]["side"]["resources"].update(
                self.elasticsearch.render_resource_list()
            )
            layout["body"]["content"].update(self.elasticsearch.render_content())
        else:
            placeholder = make_panel(
                f"[dim]{self.state.selected_resource.title} is not supported yet[/dim]",
                self.state.selected_resource.title,
            )
            layout["body"].unsplit()
            layout["body"].update(placeholder)

        snapshot = self._stats.snapshot() if self._stats is not None else None
        layout["help"].update(self.help.render(self.state, snapshot))
        return layout
