"""
KeyboardReader for async keyboard input.

Reads single keypresses from stdin without blocking the event loop and
pushes them onto an asyncio.Queue, which the InputHandler consumes as a
lazy, never-ending key sequence.

- Blocking reads run in the default executor, never on the event loop
- select() with a timeout lets the executor thread return quickly, so
  stop() takes effect within one poll interval
- cbreak mode is set once at startup and restored on exit, including when
  the task is cancelled
"""

import asyncio
import logging
import select
import sys
import termios
import tty

from clusterscope.event.keys import ESC

logger = logging.getLogger(__name__)

POLL_INTERVAL = 0.3
ESCAPE_SEQUENCE_WAIT = 0.05


def _readkey_with_timeout(timeout: float) -> str | None:
    """
    Read a keypress with timeout.

    Uses select() to check if input is available, then reads from stdin.
    Arrow keys arrive as escape sequences ("\\x1b[A"); a lone ESC is
    returned when no sequence follows within ESCAPE_SEQUENCE_WAIT.
    Does NOT change terminal modes - caller must ensure cbreak mode is set.

    Args:
        timeout: Maximum seconds to wait for input

    Returns:
        Key pressed, or None if timeout
    """
    if not select.select([sys.stdin], [], [], timeout)[0]:
        return None

    char = sys.stdin.read(1)
    if char == ESC:
        if select.select([sys.stdin], [], [], ESCAPE_SEQUENCE_WAIT)[0]:
            char += sys.stdin.read(1)
            if char == ESC + "[" and select.select(
                [sys.stdin], [], [], ESCAPE_SEQUENCE_WAIT
            )[0]:
                char += sys.stdin.read(1)
    return char


class KeyboardReader:
    """
    Async keyboard reader feeding a key queue.

    Example:
        keys: asyncio.Queue[str] = asyncio.Queue()
        reader = KeyboardReader(keys)
        task = asyncio.create_task(reader.run())
        # Later:
        reader.stop()
    """

    def __init__(self, keys: "asyncio.Queue[str]") -> None:
        """
        Args:
            keys: Queue receiving every key read
        """
        self._keys = keys
        self._shutdown = asyncio.Event()

    async def run(self) -> None:
        """
        Read keys until stop() is called or the task is cancelled.

        Raises:
            termios.error: If stdin is not a terminal
        """
        loop = asyncio.get_running_loop()

        fd = sys.stdin.fileno()
        old_settings = termios.tcgetattr(fd)
        try:
            tty.setcbreak(fd)

            while not self._shutdown.is_set():
                key = await loop.run_in_executor(
                    None,
                    lambda: _readkey_with_timeout(POLL_INTERVAL),
                )
                if key is not None:
                    logger.debug(f"Read key {key!r}")
                    self._keys.put_nowait(key)
        finally:
            termios.tcsetattr(fd, termios.TCSADRAIN, old_settings)

    def stop(self) -> None:
        """Signal the reader to stop."""
        self._shutdown.set()
