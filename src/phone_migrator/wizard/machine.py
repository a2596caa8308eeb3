"""
Wizard state machine for phone-migrator.

The machine owns the session state and is driven by events: user input
from the terminal and completion results of asynchronous operations.
dispatch() applies one event and returns the next operation to run, if any.
It never blocks and never performs I/O itself.
"""

import logging
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Union

from ..core.errors import UserCancelledError
from ..core.plan_models import ExecutionStep, MigrationConfig, Plan, initialize_steps
from ..core.records import SchemaFormat

logger = logging.getLogger(__name__)

DEFAULT_EXTENSION = ".json"
SOURCE_PROMPT = "Enter source JSON filename..."
TARGET_PROMPT = "Enter target filename..."
PLAN_OPTIONS = ["Yes - Use Engine Room AI", "No - Standard migration"]


class WizardState(Enum):
    """UI states, in the order the wizard walks through them."""
    ENTERING_SOURCE = "entering_source"
    SELECTING_SOURCE_FORMAT = "selecting_source_format"
    ENTERING_TARGET = "entering_target"
    SELECTING_TARGET_FORMAT = "selecting_target_format"
    ASKING_PLAN_PREFERENCE = "asking_plan_preference"
    GENERATING_PLAN = "generating_plan"
    CONFIRMING_PLAN = "confirming_plan"
    EXECUTING = "executing"
    COMPLETED = "completed"


# ==================== Events ====================

@dataclass(frozen=True)
class Terminate:
    """End the process immediately."""


@dataclass(frozen=True)
class EditText:
    """Replace the input buffer."""
    text: str


@dataclass(frozen=True)
class Submit:
    """Submit the input buffer."""


@dataclass(frozen=True)
class CursorUp:
    """Move the menu cursor up one row."""


@dataclass(frozen=True)
class CursorDown:
    """Move the menu cursor down one row."""


@dataclass(frozen=True)
class Select:
    """Choose the highlighted menu row."""


@dataclass(frozen=True)
class Approve:
    """Accept the proposed plan."""


@dataclass(frozen=True)
class Decline:
    """Reject the proposed plan."""


@dataclass(frozen=True)
class AnyKey:
    """Input with no specific meaning (e.g. to dismiss the final screen)."""


@dataclass(frozen=True)
class PlanGenerated:
    """Completion of a GeneratePlan operation."""
    plan: Plan | None = None
    error: Exception | None = None


@dataclass(frozen=True)
class StepCompleted:
    """Completion of an ExecuteStep operation."""
    step_index: int
    detail: str = ""
    error: Exception | None = None


@dataclass(frozen=True)
class MigrationCompleted:
    """Completion of a whole migration (direct path, or a plan past its end)."""
    error: Exception | None = None


InputEvent = Union[
    Terminate, EditText, Submit, CursorUp, CursorDown, Select, Approve, Decline, AnyKey
]
CompletionEvent = Union[PlanGenerated, StepCompleted, MigrationCompleted]
WizardEvent = Union[InputEvent, CompletionEvent]

_INPUT_EVENTS = (EditText, Submit, CursorUp, CursorDown, Select, Approve, Decline, AnyKey)


# ==================== Commands ====================

@dataclass(frozen=True)
class GeneratePlan:
    """Ask the plan service for a plan over the source file."""
    config: MigrationConfig


@dataclass(frozen=True)
class ExecuteStep:
    """Run one step of the approved plan."""
    config: MigrationConfig
    plan: Plan
    step_index: int


@dataclass(frozen=True)
class RunDirectMigration:
    """Convert and write the target file in one go, without a plan."""
    config: MigrationConfig


@dataclass(frozen=True)
class Quit:
    """Stop the process."""


Command = Union[GeneratePlan, ExecuteStep, RunDirectMigration, Quit]


# ==================== Session ====================

@dataclass
class SessionState:
    """
    The wizard's single mutable aggregate.

    Only WizardMachine.dispatch() modifies it.
    """
    state: WizardState = WizardState.ENTERING_SOURCE
    config: MigrationConfig = field(default_factory=MigrationConfig)
    input_buffer: str = ""
    prompt: str = SOURCE_PROMPT
    notice: str = ""
    source_cursor: int = 0
    target_cursor: int = 0
    plan_cursor: int = 0
    plan: Plan | None = None
    steps: list[ExecutionStep] = field(default_factory=list)
    current_step: int = 0
    error: Exception | None = None
    user_approved: bool = False
    migration_done: bool = False
    terminated: bool = False

    @property
    def succeeded(self) -> bool:
        """True once the wizard completed without an error."""
        return self.state == WizardState.COMPLETED and self.error is None


def normalize_filename(name: str, extension: str = DEFAULT_EXTENSION) -> str:
    """Strip surrounding whitespace and append the extension if missing."""
    name = name.strip()
    if not name.endswith(extension):
        name += extension
    return name


def move_cursor(index: int, delta: int, size: int) -> int:
    """Move a menu cursor by delta, clamped to [0, size - 1]."""
    if size <= 0:
        return 0
    return max(0, min(size - 1, index + delta))


class WizardMachine:
    """
    Strict transition table over WizardState.

    Terminate is accepted everywhere. Any other event the current state
    does not handle is ignored.

    Example:
        machine = WizardMachine()
        machine.dispatch(EditText("export"))
        machine.dispatch(Submit())
        assert machine.session.config.source_file == "export.json"
    """

    # States in which the terminal is asked for input
    INPUT_STATES = frozenset({
        WizardState.ENTERING_SOURCE,
        WizardState.SELECTING_SOURCE_FORMAT,
        WizardState.ENTERING_TARGET,
        WizardState.SELECTING_TARGET_FORMAT,
        WizardState.ASKING_PLAN_PREFERENCE,
        WizardState.CONFIRMING_PLAN,
        WizardState.COMPLETED,
    })

    def __init__(
        self,
        session: SessionState | None = None,
        formats: list[SchemaFormat] | None = None,
        extension: str = DEFAULT_EXTENSION,
    ):
        """
        Initialize the state machine.

        Args:
            session: Starting session (a fresh one if not provided)
            formats: Menu entries for both format selections
            extension: Extension appended to filenames that lack it
        """
        self.session = session or SessionState()
        self.formats = formats or [SchemaFormat.TWILIO, SchemaFormat.RINGCENTRAL]
        self.plan_options = list(PLAN_OPTIONS)
        self.extension = extension

        self._handlers = {
            WizardState.ENTERING_SOURCE: self._on_entering_source,
            WizardState.SELECTING_SOURCE_FORMAT: self._on_selecting_source_format,
            WizardState.ENTERING_TARGET: self._on_entering_target,
            WizardState.SELECTING_TARGET_FORMAT: self._on_selecting_target_format,
            WizardState.ASKING_PLAN_PREFERENCE: self._on_asking_plan_preference,
            WizardState.GENERATING_PLAN: self._on_generating_plan,
            WizardState.CONFIRMING_PLAN: self._on_confirming_plan,
            WizardState.EXECUTING: self._on_executing,
            WizardState.COMPLETED: self._on_completed,
        }

    @property
    def state(self) -> WizardState:
        return self.session.state

    @property
    def finished(self) -> bool:
        """True once the process should stop."""
        return self.session.terminated

    @property
    def accepts_input(self) -> bool:
        """True when the current state reads from the terminal."""
        return not self.session.terminated and self.session.state in self.INPUT_STATES

    def dispatch(self, event: WizardEvent) -> Command | None:
        """
        Apply one event to the session.

        Args:
            event: Input or completion event

        Returns:
            The operation to issue next, Quit, or None
        """
        if self.session.terminated:
            return None

        if isinstance(event, Terminate):
            logger.debug(f"Terminated in state {self.session.state.value}")
            self.session.terminated = True
            return Quit()

        before = self.session.state
        command = self._handlers[before](event)
        if self.session.state != before:
            logger.debug(f"{before.value} -> {self.session.state.value}")
        return command

    def _goto(self, state: WizardState) -> None:
        self.session.state = state
        self.session.notice = ""

    def _finish(self, error: Exception | None = None, done: bool = False) -> None:
        self.session.error = error
        self.session.migration_done = done
        self._goto(WizardState.COMPLETED)

    # ==================== Input states ====================

    def _submit_filename(self, event: WizardEvent) -> str | None:
        """Handle text editing; return the normalized name on a valid submit."""
        if isinstance(event, EditText):
            self.session.input_buffer = event.text
            self.session.notice = ""
        elif isinstance(event, Submit):
            if not self.session.input_buffer.strip():
                self.session.notice = "Filename cannot be empty"
                return None
            return normalize_filename(self.session.input_buffer, self.extension)
        return None

    def _select_from_menu(self, event: WizardEvent, cursor_attr: str, size: int) -> bool:
        """Handle cursor movement; return True when the row is selected."""
        if isinstance(event, CursorUp):
            setattr(self.session, cursor_attr, move_cursor(getattr(self.session, cursor_attr), -1, size))
        elif isinstance(event, CursorDown):
            setattr(self.session, cursor_attr, move_cursor(getattr(self.session, cursor_attr), 1, size))
        elif isinstance(event, Select):
            return True
        return False

    def _on_entering_source(self, event: WizardEvent) -> Command | None:
        name = self._submit_filename(event)
        if name is not None:
            self.session.config = replace(self.session.config, source_file=name)
            self._goto(WizardState.SELECTING_SOURCE_FORMAT)
        return None

    def _on_selecting_source_format(self, event: WizardEvent) -> Command | None:
        if self._select_from_menu(event, "source_cursor", len(self.formats)):
            fmt = self.formats[self.session.source_cursor]
            self.session.config = replace(self.session.config, source_format=fmt)
            self.session.input_buffer = ""
            self.session.prompt = TARGET_PROMPT
            self._goto(WizardState.ENTERING_TARGET)
        return None

    def _on_entering_target(self, event: WizardEvent) -> Command | None:
        name = self._submit_filename(event)
        if name is not None:
            self.session.config = replace(self.session.config, target_file=name)
            self._goto(WizardState.SELECTING_TARGET_FORMAT)
        return None

    def _on_selecting_target_format(self, event: WizardEvent) -> Command | None:
        if self._select_from_menu(event, "target_cursor", len(self.formats)):
            fmt = self.formats[self.session.target_cursor]
            self.session.config = replace(self.session.config, target_format=fmt)
            self._goto(WizardState.ASKING_PLAN_PREFERENCE)
        return None

    def _on_asking_plan_preference(self, event: WizardEvent) -> Command | None:
        if not self._select_from_menu(event, "plan_cursor", len(self.plan_options)):
            return None

        use_plan = self.session.plan_cursor == 0
        self.session.config = replace(self.session.config, use_plan_service=use_plan)
        if use_plan:
            self._goto(WizardState.GENERATING_PLAN)
            return GeneratePlan(config=self.session.config)

        self._goto(WizardState.EXECUTING)
        return RunDirectMigration(config=self.session.config)

    def _on_confirming_plan(self, event: WizardEvent) -> Command | None:
        if isinstance(event, Decline):
            self._finish(error=UserCancelledError())
            return None
        if not isinstance(event, (Approve, Select)) or self.session.plan is None:
            return None

        self.session.user_approved = True
        self.session.steps = initialize_steps(self.session.plan)
        self.session.current_step = 0
        self._goto(WizardState.EXECUTING)
        return ExecuteStep(config=self.session.config, plan=self.session.plan, step_index=0)

    def _on_completed(self, event: WizardEvent) -> Command | None:
        if isinstance(event, _INPUT_EVENTS):
            self.session.terminated = True
            return Quit()
        return None

    # ==================== Busy states ====================

    def _on_generating_plan(self, event: WizardEvent) -> Command | None:
        if not isinstance(event, PlanGenerated):
            return None
        if event.error is not None or event.plan is None:
            self._finish(error=event.error or ValueError("plan service returned no plan"))
        else:
            self.session.plan = event.plan
            self._goto(WizardState.CONFIRMING_PLAN)
        return None

    def _on_executing(self, event: WizardEvent) -> Command | None:
        session = self.session

        if isinstance(event, MigrationCompleted):
            self._finish(error=event.error, done=event.error is None)
            return None

        if not isinstance(event, StepCompleted) or event.step_index != session.current_step:
            return None
        if session.current_step >= len(session.steps):
            return None

        step = session.steps[session.current_step]
        if event.error is not None:
            step.mark_failed(event.error)
            self._finish(error=event.error)
            return None

        step.mark_completed(event.detail)
        session.current_step += 1

        if session.current_step >= len(session.steps):
            self._finish(done=True)
            return None

        if session.plan is None:
            return None
        session.steps[session.current_step].mark_running()
        return ExecuteStep(config=session.config, plan=session.plan, step_index=session.current_step)
