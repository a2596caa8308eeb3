"""Tests for translating terminal lines into wizard events."""

from unittest.mock import MagicMock

import pytest

from phone_migrator.wizard.keys import ConsoleInput, prompt_for, translate_line
from phone_migrator.wizard.machine import (
    AnyKey,
    Approve,
    CursorDown,
    CursorUp,
    Decline,
    EditText,
    Select,
    SessionState,
    Submit,
    Terminate,
    WizardState,
)


def _session(state, **kwargs):
    return SessionState(state=state, **kwargs)


class TestTranslateLine:
    """Tests for translate_line."""

    def test_text_state(self):
        events = translate_line(_session(WizardState.ENTERING_SOURCE), "export")

        assert events == [EditText("export"), Submit()]

    def test_empty_text_still_submits(self):
        """Test an empty line reaches the machine so it can show the notice."""
        events = translate_line(_session(WizardState.ENTERING_TARGET), "")

        assert events == [EditText(""), Submit()]

    @pytest.mark.parametrize("state", list(WizardState))
    def test_q_quits_everywhere(self, state):
        assert translate_line(_session(state), " Q ") == [Terminate()]

    def test_menu_keys(self):
        session = _session(WizardState.SELECTING_SOURCE_FORMAT)

        assert translate_line(session, "j") == [CursorDown()]
        assert translate_line(session, "up") == [CursorUp()]
        assert translate_line(session, "") == [Select()]

    def test_menu_number_jumps_and_selects(self):
        session = _session(WizardState.ASKING_PLAN_PREFERENCE, plan_cursor=0)

        assert translate_line(session, "2", menu_size=2) == [CursorDown(), Select()]

    def test_menu_number_moving_up(self):
        session = _session(WizardState.SELECTING_TARGET_FORMAT, target_cursor=1)

        assert translate_line(session, "1", menu_size=2) == [CursorUp(), Select()]

    def test_menu_number_out_of_range(self):
        session = _session(WizardState.SELECTING_TARGET_FORMAT)

        assert translate_line(session, "3", menu_size=2) == []

    def test_confirmation(self):
        session = _session(WizardState.CONFIRMING_PLAN)

        assert translate_line(session, "") == [Approve()]
        assert translate_line(session, "Y") == [Approve()]
        assert translate_line(session, "no") == [Decline()]
        assert translate_line(session, "maybe") == []

    def test_completed_any_line(self):
        assert translate_line(_session(WizardState.COMPLETED), "whatever") == [AnyKey()]

    def test_busy_states_ignore_input(self):
        assert translate_line(_session(WizardState.EXECUTING), "y") == []


class TestPromptFor:
    """Tests for prompt_for."""

    def test_text_prompt(self):
        assert prompt_for(_session(WizardState.ENTERING_SOURCE)).startswith("Enter source JSON filename")

    def test_confirm_prompt(self):
        assert "(Y/n)" in prompt_for(_session(WizardState.CONFIRMING_PLAN))


class TestConsoleInput:
    """Tests for reading from the console."""

    @pytest.mark.asyncio
    async def test_reads_line(self):
        console = MagicMock()
        console.input.return_value = "2"
        source = ConsoleInput(console, {WizardState.SELECTING_SOURCE_FORMAT: 2})

        events = await source.read_events(_session(WizardState.SELECTING_SOURCE_FORMAT))

        assert events == [CursorDown(), Select()]
        console.input.assert_called_once()

    @pytest.mark.asyncio
    async def test_end_of_input_terminates(self):
        console = MagicMock()
        console.input.side_effect = EOFError

        events = await ConsoleInput(console).read_events(_session(WizardState.ENTERING_SOURCE))

        assert events == [Terminate()]

    @pytest.mark.asyncio
    async def test_read_errors_propagate(self):
        console = MagicMock()
        console.input.side_effect = OSError("terminal gone")

        with pytest.raises(OSError):
            await ConsoleInput(console).read_events(_session(WizardState.ENTERING_SOURCE))
