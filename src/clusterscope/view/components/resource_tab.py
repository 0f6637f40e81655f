"""Top-level resource tab bar."""

from rich.text import Text

from clusterscope.view.layout import make_panel, navigatable_title
from clusterscope.view.navigation import ListCursor, Navigate
from clusterscope.view.state import ResourceKind


class ResourceTab:
    """
    Tab bar selecting the top-level resource (Elasticsearch, Mongo, ...).

    Moves with LEFT/RIGHT and wraps around.
    """

    def __init__(self) -> None:
        self.resources: list[ResourceKind] = list(ResourceKind)
        self.is_focused = False
        self._cursor = ListCursor(selected=0, horizontal=True)

    def toggle_focus(self, focused: bool) -> None:
        self.is_focused = focused

    def navigate(self, navigate: Navigate) -> bool:
        """Move the tab selection; returns True if the resource changed."""
        return self._cursor.apply(navigate, len(self.resources))

    def selected_resource(self) -> ResourceKind:
        return self.resources[self._cursor.get(len(self.resources)) or 0]

    def render(self):
        selected = self.selected_resource()
        tabs = Text()
        for idx, resource in enumerate(self.resources):
            if idx:
                tabs.append(" | ", style="dim")
            style = "bold underline" if resource is selected else "bold dim"
            tabs.append(resource.title, style=style)
        return make_panel(tabs, navigatable_title("Resource"), self.is_focused)
