"""
Command set and key decoding.

InputHandler turns raw keys into the abstract commands the view
understands. Decoding depends on the current ViewState:

1. Quit keys (q, Ctrl-C, Ctrl-D) always win.
2. With nothing focused, r focuses the resource tab, and with
   Elasticsearch selected c/e/i/a focus the cluster list/resource list/
   index table/alias table.
3. With a component focused: h/j/k/l and arrows navigate it; Enter on a
   drill-down component enters the row under the cursor.
4. Esc leaves the entered component if there is one, otherwise unfocuses.

Keys that decode to nothing are skipped.
"""

import asyncio
import logging
from dataclasses import dataclass

from clusterscope.event.keys import CTRL_C, CTRL_D, DOWN, ENTER, ESC, LEFT, RIGHT, UP
from clusterscope.view.navigation import Navigate
from clusterscope.view.state import ComponentKind, ResourceKind, ViewState

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class QuitApp:
    pass


@dataclass(frozen=True)
class UnfocusComponent:
    pass


@dataclass(frozen=True)
class FocusComponent:
    component: ComponentKind


@dataclass(frozen=True)
class NavigateComponent:
    component: ComponentKind
    navigate: Navigate


@dataclass(frozen=True)
class Enter:
    component: ComponentKind


@dataclass(frozen=True)
class Leave:
    component: ComponentKind


Command = QuitApp | UnfocusComponent | FocusComponent | NavigateComponent | Enter | Leave

QUIT_KEYS = ("q", CTRL_C, CTRL_D)

NAVIGATE_KEYS = {
    "h": Navigate.LEFT,
    LEFT: Navigate.LEFT,
    "l": Navigate.RIGHT,
    RIGHT: Navigate.RIGHT,
    "k": Navigate.UP,
    UP: Navigate.UP,
    "j": Navigate.DOWN,
    DOWN: Navigate.DOWN,
}

ELASTICSEARCH_FOCUS_KEYS = {
    "c": ComponentKind.CLUSTER_LIST,
    "e": ComponentKind.RESOURCE_LIST,
    "i": ComponentKind.INDEX_TABLE,
    "a": ComponentKind.ALIAS_TABLE,
}


def should_quit(key: str) -> bool:
    return key in QUIT_KEYS


def decode(key: str, state: ViewState) -> Command | None:
    """
    Decode one raw key against the current navigation state.

    Args:
        key: Raw key string from the keyboard reader
        state: Current view state

    Returns:
        The command for this key, or None if the key means nothing here
    """
    if should_quit(key):
        return QuitApp()

    focused = state.focused_component
    if focused is None:
        if key == "r":
            return FocusComponent(ComponentKind.RESOURCE_TAB)
        if (
            state.selected_resource == ResourceKind.ELASTICSEARCH
            and key in ELASTICSEARCH_FOCUS_KEYS
        ):
            return FocusComponent(ELASTICSEARCH_FOCUS_KEYS[key])
    else:
        if key in NAVIGATE_KEYS:
            return NavigateComponent(focused, NAVIGATE_KEYS[key])
        if key in ENTER and focused.supports_drill_down:
            return Enter(focused)

    if key == ESC:
        if state.entered_component is not None:
            return Leave(state.entered_component)
        return UnfocusComponent()

    return None


class InputHandler:
    """
    Reads raw keys and decodes them into commands.

    The key queue is the lazy, non-restartable input sequence; it is fed by
    KeyboardReader (or by tests).

    Example:
        handler = InputHandler(keys)
        command = await handler.read(view.state)
    """

    def __init__(self, keys: "asyncio.Queue[str]") -> None:
        self._keys = keys

    async def read(self, state: ViewState) -> Command:
        """
        Wait until a key decodes to a command.

        Every key is recorded as state.last_input_key for help highlighting,
        including keys that decode to nothing.
        """
        while True:
            key = await self._keys.get()
            state.last_input_key = key

            command = decode(key, state)
            if command is not None:
                logger.debug(f"Handle {command!r}")
                return command
