"""
phone-migrator wizard module

The interactive migration workflow:
- machine: states, events, commands and the transition table
- operations: the asynchronous work the machine asks for
- runner: the asyncio event loop tying input, operations and machine together
- keys: line-based terminal input
"""

from .keys import ConsoleInput, translate_line
from .machine import (
    SessionState,
    WizardMachine,
    WizardState,
    move_cursor,
    normalize_filename,
)
from .operations import WizardOperations
from .runner import WizardRunner

__all__ = [
    "ConsoleInput",
    "translate_line",
    "SessionState",
    "WizardMachine",
    "WizardState",
    "move_cursor",
    "normalize_filename",
    "WizardOperations",
    "WizardRunner",
]
