"""
Help bar: key hints and transport status.

The key matching the last input is drawn bold so the operator sees which
key was just handled. The status line shows requests in flight and the most
recent transport outcome (failures in red).
"""

from rich.console import Group
from rich.text import Text

from clusterscope.event.keys import DOWN, ENTER, ESC, LEFT, RIGHT, UP
from clusterscope.transport import StatsSnapshot
from clusterscope.view.layout import make_panel
from clusterscope.view.state import ResourceKind, ViewState

COMMON_KEYS: list[tuple[tuple[str, ...], str]] = [
    (("q",), "q: Quit"),
    ((ESC,), "esc: Back"),
    (("r",), "r: Resource"),
    (("j", DOWN), "j: ↓"),
    (("k", UP), "k: ↑"),
    (("h", LEFT), "h: ←"),
    (("l", RIGHT), "l: →"),
]

ELASTICSEARCH_KEYS: list[tuple[tuple[str, ...], str]] = [
    (("c",), "c: Cluster"),
    (("e",), "e: Elasticsearch"),
    (("i",), "i: Indices"),
    (("a",), "a: Aliases"),
    (ENTER, "enter: Open index"),
]


class HelpComponent:
    """Renders key hints for the selected resource and the transport status."""

    def highlight_keys(
        self, keys: list[tuple[tuple[str, ...], str]], last_key: str | None
    ) -> Text:
        line = Text()
        for idx, (codes, label) in enumerate(keys):
            if idx:
                line.append("  ")
            line.append(label, style="bold" if last_key in codes else "dim")
        return line

    def status_line(self, stats: StatsSnapshot | None) -> Text:
        if stats is None:
            return Text("")
        line = Text.from_markup(
            f"[dim]in flight:[/dim] {stats.in_flight}  "
            f"[dim]failed:[/dim] {stats.failed}"
        )
        latest = stats.latest
        if latest is not None:
            style = "green" if latest.ok else "red"
            line.append("  last: ", style="dim")
            line.append(latest.summary(), style=style)
        return line

    def render(self, state: ViewState, stats: StatsSnapshot | None):
        lines = [self.highlight_keys(COMMON_KEYS, state.last_input_key)]
        if state.selected_resource == ResourceKind.ELASTICSEARCH:
            lines.append(self.highlight_keys(ELASTICSEARCH_KEYS, state.last_input_key))
        lines.append(self.status_line(stats))
        return make_panel(Group(*lines), "Help")
