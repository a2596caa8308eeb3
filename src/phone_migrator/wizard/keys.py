"""
Terminal input for the wizard.

The terminal is line based: each line the user types is translated into
the input events the state machine understands. "q" on its own quits from
any state; menus take j/k (or up/down), a row number, or an empty line to
select.
"""

import asyncio
import threading
from typing import TYPE_CHECKING

from .machine import (
    Approve,
    AnyKey,
    CursorDown,
    CursorUp,
    Decline,
    EditText,
    InputEvent,
    Select,
    SessionState,
    Submit,
    Terminate,
    WizardState,
)

if TYPE_CHECKING:
    from rich.console import Console

QUIT_KEYS = {"q", "quit", "ctrl+c"}
UP_KEYS = {"k", "up"}
DOWN_KEYS = {"j", "down"}
SELECT_KEYS = {"", "enter", "space"}
APPROVE_KEYS = {"", "y", "yes", "enter"}
DECLINE_KEYS = {"n", "no"}

TEXT_STATES = {WizardState.ENTERING_SOURCE, WizardState.ENTERING_TARGET}

# Menu state -> session attribute holding its cursor
MENU_CURSORS = {
    WizardState.SELECTING_SOURCE_FORMAT: "source_cursor",
    WizardState.SELECTING_TARGET_FORMAT: "target_cursor",
    WizardState.ASKING_PLAN_PREFERENCE: "plan_cursor",
}


def _jump_to(cursor: int, row: int) -> list[InputEvent]:
    """Cursor moves from cursor to row, followed by Select."""
    delta = row - cursor
    moves: list[InputEvent] = [CursorDown() if delta > 0 else CursorUp() for _ in range(abs(delta))]
    return moves + [Select()]


def translate_line(session: SessionState, line: str, menu_size: int = 0) -> list[InputEvent]:
    """
    Translate one typed line into input events for the current state.

    Args:
        session: Current session (state and cursors)
        line: Text the user typed, without the newline
        menu_size: Number of rows in the current menu, for numeric choices

    Returns:
        Events to dispatch in order; empty if the line means nothing here
    """
    state = session.state
    key = line.strip().lower()

    if key in QUIT_KEYS:
        return [Terminate()]

    if state in TEXT_STATES:
        return [EditText(line), Submit()]

    if state in MENU_CURSORS:
        if key in UP_KEYS:
            return [CursorUp()]
        if key in DOWN_KEYS:
            return [CursorDown()]
        if key in SELECT_KEYS:
            return [Select()]
        if key.isdigit() and 1 <= int(key) <= menu_size:
            return _jump_to(getattr(session, MENU_CURSORS[state]), int(key) - 1)
        return []

    if state == WizardState.CONFIRMING_PLAN:
        if key in APPROVE_KEYS:
            return [Approve()]
        if key in DECLINE_KEYS:
            return [Decline()]
        return []

    if state == WizardState.COMPLETED:
        return [AnyKey()]

    return []


def prompt_for(session: SessionState) -> str:
    """Prompt text shown when asking for a line in the current state."""
    if session.state in TEXT_STATES:
        return f"{session.prompt} "
    if session.state in MENU_CURSORS:
        return "Choice (j/k to move, number or Enter to select, q to quit): "
    if session.state == WizardState.CONFIRMING_PLAN:
        return "Do you want to proceed with this plan? (Y/n): "
    return "Press Enter to exit: "


class ConsoleInput:
    """
    Reads lines from a rich Console.

    Each read happens on a daemon thread so that a pending read never
    blocks the event loop or process exit.
    """

    def __init__(self, console: "Console", menu_sizes: dict[WizardState, int] | None = None):
        """
        Initialize the input source.

        Args:
            console: Console to read from
            menu_sizes: Row count of each menu state, for numeric choices
        """
        self.console = console
        self.menu_sizes = menu_sizes or {}

    async def read_events(self, session: SessionState) -> list[InputEvent]:
        line = await self._read_line(prompt_for(session))
        if line is None:
            return [Terminate()]
        return translate_line(session, line, self.menu_sizes.get(session.state, 0))

    async def _read_line(self, prompt: str) -> str | None:
        """Read one line; None on end of input."""
        loop = asyncio.get_running_loop()
        future: asyncio.Future = loop.create_future()

        def deliver(value: str | None, error: BaseException | None) -> None:
            if future.done():
                return
            if error is not None:
                future.set_exception(error)
            else:
                future.set_result(value)

        def worker() -> None:
            value, error = None, None
            try:
                value = self.console.input(prompt)
            except EOFError:
                value = None
            except Exception as e:
                error = e
            if not loop.is_closed():
                loop.call_soon_threadsafe(deliver, value, error)

        threading.Thread(target=worker, name="wizard-input", daemon=True).start()
        return await future
