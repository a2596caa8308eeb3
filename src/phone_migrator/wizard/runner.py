"""
Event loop driver for the wizard.

WizardRunner feeds events into WizardMachine from three producers:
- the input source, asked for input only while the machine accepts it
  and no operation is outstanding
- the single outstanding operation task, whose result is its completion event
- SIGINT, translated into Terminate where the loop supports signal handlers

All events go through one asyncio.Queue and are dispatched in arrival
order, so session state is only touched from the loop.
"""

import asyncio
import contextlib
import logging
import signal
from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol

from .machine import (
    Command,
    InputEvent,
    Quit,
    SessionState,
    Terminate,
    WizardEvent,
    WizardMachine,
)
from .operations import WizardOperations

logger = logging.getLogger(__name__)

RenderCallback = Callable[[WizardMachine], None]


class InputSource(Protocol):
    """Produces input events for the current session state."""

    async def read_events(self, session: SessionState) -> list[InputEvent]:
        ...


@dataclass(frozen=True)
class _TaskCrashed:
    """Internal event carrying an unexpected exception out of a task."""
    error: BaseException


@dataclass(frozen=True)
class _InputIgnored:
    """Internal event: a read produced nothing, so ask again."""


class WizardRunner:
    """
    Runs a WizardMachine to completion.

    Example:
        runner = WizardRunner(WizardMachine(), WizardOperations(), ConsoleInput(console))
        session = asyncio.run(runner.run())
    """

    def __init__(
        self,
        machine: WizardMachine,
        operations: WizardOperations,
        input_source: InputSource,
        on_render: RenderCallback | None = None,
        handle_interrupt: bool = True,
    ):
        """
        Initialize the runner.

        Args:
            machine: State machine to drive
            operations: Performs the commands the machine issues
            input_source: Supplies user input events
            on_render: Called with the machine before each wait for an event
            handle_interrupt: Translate SIGINT into Terminate while running
        """
        self.machine = machine
        self.operations = operations
        self.input_source = input_source
        self.on_render = on_render
        self.handle_interrupt = handle_interrupt

        self._events: asyncio.Queue[WizardEvent | _TaskCrashed | _InputIgnored] | None = None
        self._in_flight: asyncio.Task | None = None
        self._reading: asyncio.Task | None = None

    @property
    def busy(self) -> bool:
        """True while an operation is outstanding."""
        return self._in_flight is not None

    async def run(self) -> SessionState:
        """
        Drive the machine until it stops.

        Returns:
            The final session state

        Raises:
            Exception: Any unexpected error raised by an operation or input source
        """
        self._events = asyncio.Queue()
        loop = asyncio.get_running_loop()
        interrupt_installed = self._install_interrupt_handler(loop)

        try:
            while not self.machine.finished:
                if self.on_render is not None:
                    self.on_render(self.machine)

                if self._should_read():
                    self._reading = self._spawn(self._read_input())

                event = await self._events.get()
                if isinstance(event, _TaskCrashed):
                    raise event.error
                if isinstance(event, _InputIgnored):
                    continue

                command = self.machine.dispatch(event)
                if command is not None and not isinstance(command, Quit):
                    self._issue(command)
        finally:
            if interrupt_installed:
                loop.remove_signal_handler(signal.SIGINT)
            await self._abandon()

        return self.machine.session

    def _should_read(self) -> bool:
        assert self._events is not None
        return (
            self._in_flight is None
            and self._reading is None
            and self._events.empty()
            and self.machine.accepts_input
        )

    def _issue(self, command: Command) -> None:
        if self._in_flight is not None:
            raise RuntimeError("an operation is already outstanding")
        logger.debug(f"Issuing {type(command).__name__}")
        self._in_flight = self._spawn(self._perform(command))

    async def _perform(self, command: Command) -> None:
        event = await self.operations.perform(command)
        self._in_flight = None
        self._post(event)

    async def _read_input(self) -> None:
        events = await self.input_source.read_events(self.machine.session)
        self._reading = None
        if not events:
            logger.debug(f"Ignoring input with no meaning in {self.machine.state.value}")
            self._post(_InputIgnored())
        for event in events:
            self._post(event)

    def _post(self, event: WizardEvent | _TaskCrashed | _InputIgnored) -> None:
        assert self._events is not None
        self._events.put_nowait(event)

    def _spawn(self, coro) -> asyncio.Task:
        task = asyncio.create_task(coro)
        task.add_done_callback(self._check_task)
        return task

    def _check_task(self, task: asyncio.Task) -> None:
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            self._post(_TaskCrashed(error))

    def _install_interrupt_handler(self, loop: asyncio.AbstractEventLoop) -> bool:
        if not self.handle_interrupt:
            return False
        try:
            loop.add_signal_handler(signal.SIGINT, self._post, Terminate())
        except (NotImplementedError, RuntimeError, ValueError):
            # No loop signal support here (Windows, non-main thread);
            # Ctrl+C falls back to KeyboardInterrupt.
            return False
        return True

    async def _abandon(self) -> None:
        """Cancel whatever is still running; its result is discarded."""
        if self._in_flight is not None and not self._in_flight.done():
            logger.info("Abandoning the in-flight operation")
        for task in (self._in_flight, self._reading):
            if task is not None and not task.done():
                task.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await task
        self._in_flight = None
        self._reading = None
