"""
App: dashboard lifecycle and the event loop.

Startup order:
1. Register signal handlers before anything touches the terminal
2. Build the transport (starts the API dispatcher) and the view
3. Send the initial fetch plan
4. Start the keyboard reader, then enter the Live context
5. Run the event loop until quit, signal or a terminal error
6. Stop the keyboard reader (restores the terminal) and close the transport

The event loop waits on the next command and the next response at the same
time. Exactly one item is consumed per iteration, followed by exactly one
re-render. When a command and a response are both ready the command wins;
the response stays ready and is consumed on the next iteration.
"""

import asyncio
import functools
import logging
import signal
from collections.abc import Callable, Iterable

from rich.console import Console
from rich.live import Live

from clusterscope.config import Config, Settings
from clusterscope.event.input import (
    Command,
    Enter,
    FocusComponent,
    InputHandler,
    Leave,
    NavigateComponent,
    QuitApp,
    UnfocusComponent,
)
from clusterscope.event.keyboard import KeyboardReader
from clusterscope.transport import TransportController
from clusterscope.view import View

logger = logging.getLogger(__name__)


class App:
    """
    Runs the dashboard until the operator quits.

    Example:
        app = App(config, settings)
        await app.run()  # Runs until q / Ctrl-C
    """

    def __init__(
        self, config: Config, settings: Settings, console: Console | None = None
    ) -> None:
        """
        Args:
            config: Validated cluster file
            settings: Process settings (timeouts, transport sizes)
            console: Rich Console to draw on (creates default if None)
        """
        self.config = config
        self.settings = settings
        self.console = console if console is not None else Console()
        self._shutdown = asyncio.Event()
        self._keyboard: KeyboardReader | None = None

    async def run(self) -> None:
        """
        Run the dashboard.

        Raises:
            termios.error: If stdin is not a terminal
        """
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(sig, functools.partial(self._handle_signal, sig))

        keys: asyncio.Queue[str] = asyncio.Queue()
        self._keyboard = KeyboardReader(keys)
        input_handler = InputHandler(keys)

        transport: TransportController | None = None
        keyboard_task: asyncio.Task | None = None
        try:
            transport = TransportController.init(self.config, self.settings)
            view = View(self.config).with_transport_stats(transport.stats())
            await transport.send_requests(view.pre_render_loop())
            keyboard_task = asyncio.create_task(self._keyboard.run(), name="keyboard")

            with Live(
                view.render(),
                console=self.console,
                screen=True,
                auto_refresh=False,
            ) as live:
                await self.event_loop(
                    view,
                    input_handler,
                    transport,
                    draw=lambda: live.update(view.render(), refresh=True),
                    watch=[keyboard_task],
                )
        finally:
            self._keyboard.stop()
            if keyboard_task is not None and not keyboard_task.done():
                keyboard_task.cancel()
                try:
                    await keyboard_task
                except asyncio.CancelledError:
                    pass
            if transport is not None:
                await transport.close()
            for sig in (signal.SIGINT, signal.SIGTERM):
                loop.remove_signal_handler(sig)

        logger.info("Dashboard stopped")

    async def event_loop(
        self,
        view: View,
        input_handler: InputHandler,
        transport: TransportController,
        draw: Callable[[], None],
        watch: Iterable[asyncio.Task] = (),
    ) -> None:
        """
        Consume commands and responses until quit.

        Args:
            view: View receiving commands and responses
            input_handler: Source of commands
            transport: Source of responses and sink of fetch plans
            draw: Re-render callback, called once per consumed item
            watch: Background tasks whose failure must end the loop; their
                exceptions propagate
        """
        watched = list(watch)
        shutdown_task = asyncio.create_task(self._shutdown.wait(), name="shutdown")
        input_task: asyncio.Task | None = None
        recv_task: asyncio.Task | None = None
        try:
            draw()
            while True:
                if input_task is None:
                    input_task = asyncio.create_task(
                        input_handler.read(view.state), name="input"
                    )
                if recv_task is None:
                    recv_task = asyncio.create_task(transport.recv(), name="recv")

                done, _ = await asyncio.wait(
                    {input_task, recv_task, shutdown_task, *watched},
                    return_when=asyncio.FIRST_COMPLETED,
                )

                for task in watched:
                    if task in done:
                        # Re-raises terminal errors from the reader
                        task.result()
                        logger.info(f"{task.get_name()} stopped; exiting")
                        return
                if shutdown_task in done:
                    return

                if input_task in done:
                    command = input_task.result()
                    input_task = None
                    if isinstance(command, QuitApp):
                        logger.info("Quit requested")
                        return
                    await self._apply(view, transport, command)
                else:
                    envelope = recv_task.result()
                    recv_task = None
                    view.update_api_response(envelope)

                draw()
        finally:
            for task in (input_task, recv_task, shutdown_task):
                if task is not None and not task.done():
                    task.cancel()

    async def _apply(
        self, view: View, transport: TransportController, command: Command
    ) -> None:
        requests = []
        if isinstance(command, FocusComponent):
            view.focus(command.component)
        elif isinstance(command, UnfocusComponent):
            view.unfocus()
        elif isinstance(command, NavigateComponent):
            requests = view.navigate_component(command.component, command.navigate)
        elif isinstance(command, Enter):
            requests = view.enter(command.component)
        elif isinstance(command, Leave):
            requests = view.leave(command.component)
        else:
            raise TypeError(f"Unknown command: {command!r}")

        if requests:
            await transport.send_requests(requests)

    def _handle_signal(self, sig: signal.Signals) -> None:
        """
        Stop the event loop and the keyboard reader.

        Args:
            sig: Signal received (SIGINT or SIGTERM)
        """
        logger.info(f"Received {sig.name}; shutting down")
        self._shutdown.set()
        if self._keyboard is not None:
            self._keyboard.stop()
