"""
Layout factory for the dashboard.

Layout structure:
+--------------------------------------------------------------+
|  Resource tab (3 rows fixed)                                 |
+--------------------+-----------------------------------------+
|  Cluster list      |                                         |
+--------------------+  Content (health / indices / aliases /  |
|  Resource list     |  index detail)                          |
+--------------------+                                         |
|                    |                                         |
+--------------------+-----------------------------------------+
|  Help / transport status (5 rows fixed)                      |
+--------------------------------------------------------------+
"""

from rich.console import RenderableType
from rich.layout import Layout
from rich.panel import Panel

FOCUSED_BORDER = "bold cyan"
DEFAULT_BORDER = "blue"


def create_layout() -> Layout:
    """
    Create the dashboard layout.

    Named regions:
    - layout["tab"]
    - layout["body"]["side"]["clusters"], layout["body"]["side"]["resources"]
    - layout["body"]["content"]
    - layout["help"]

    Returns:
        Layout with every region empty
    """
    layout = Layout(name="root")
    layout.split_column(
        Layout(name="tab", size=3),
        Layout(name="body"),
        Layout(name="help", size=5),
    )
    layout["body"].split_row(
        Layout(name="side", size=24),
        Layout(name="content"),
    )
    layout["body"]["side"].split_column(
        Layout(name="clusters", ratio=1),
        Layout(name="resources", size=5),
        Layout(name="spacer", ratio=1),
    )
    return layout


def navigatable_title(title: str) -> str:
    """Title with its hotkey (first letter) underlined and the rest bold."""
    if not title:
        return title
    return f"[bold][u]{title[0]}[/u]{title[1:]}[/bold]"


def make_panel(
    content: RenderableType, title: str, focused: bool = False
) -> Panel:
    """
    Create a bordered panel.

    Args:
        content: Renderable or Rich markup string
        title: Panel title (Rich markup allowed)
        focused: True if the component has input focus (highlighted border)

    Returns:
        Panel with focus-aware border style
    """
    return Panel(
        content,
        title=title,
        title_align="left",
        border_style=FOCUSED_BORDER if focused else DEFAULT_BORDER,
        padding=(0, 1),
    )
