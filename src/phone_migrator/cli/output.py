"""
Rich Terminal Output for phone-migrator

Renders the wizard screens, migration plans and execution progress.
Uses the Rich library for all formatting.
"""

from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

from rich.console import Console, Group
from rich.markup import escape
from rich.panel import Panel
from rich.status import Status
from rich.table import Table
from rich.text import Text

from ..core.plan_models import ExecutionStep, Plan, RiskLevel, StepStatus
from ..wizard.machine import WizardState

if TYPE_CHECKING:
    from ..settings.models import Settings
    from ..settings.validation import ValidationResult
    from ..wizard.machine import SessionState, WizardMachine

APP_TITLE = "Engine Room AI Migration Tool"


class OutputManager:
    """
    Manages rich terminal output for the phone-migrator CLI.

    Styling is table driven: STEP_STYLES and RISK_ICONS map a status tag to
    its icon, label and style.
    """

    # Color scheme
    COLORS = {
        "primary": "blue",
        "accent": "#FFB86C",
        "success": "green",
        "warning": "yellow",
        "error": "red",
        "muted": "dim",
    }

    # Step status -> (icon, label, style)
    STEP_STYLES = {
        StepStatus.PENDING: ("o", "Pending", "#6272A4"),
        StepStatus.RUNNING: (">", "Running", "bold #FFB86C"),
        StepStatus.COMPLETED: ("v", "Completed", "#50FA7B"),
        StepStatus.FAILED: ("x", "Failed", "bold #FF5F87"),
    }

    RISK_ICONS = {
        RiskLevel.LOW: "[green]o[/green]",
        RiskLevel.MEDIUM: "[yellow]o[/yellow]",
        RiskLevel.HIGH: "[red]o[/red]",
    }

    BUSY_MESSAGES = {
        WizardState.GENERATING_PLAN: "Engine Room AI is examining your phone system data...",
        WizardState.EXECUTING: "Migrating...",
    }

    def __init__(self, console: Console | None = None, clear_screen: bool = True):
        """
        Initialize the output manager.

        Args:
            console: Rich Console instance (creates one if not provided)
            clear_screen: Clear the terminal before each wizard screen
        """
        self.console = console or Console()
        self.clear_screen = clear_screen
        self._status: Status | None = None

    # ==================== Basic Output ====================

    def print(self, message: Any = "", style: str | None = None) -> None:
        """Print a message with optional styling."""
        self.console.print(message, style=style)

    def print_header(self, title: str, subtitle: str | None = None) -> None:
        """Print a styled header."""
        self.console.print()
        self.console.print(f"[bold blue]{title}[/bold blue]")
        if subtitle:
            self.console.print(f"[dim]{subtitle}[/dim]")
        self.console.print()

    def print_success(self, message: str) -> None:
        """Print a success message."""
        self.console.print(f"[green]v[/green] {message}")

    def print_error(self, message: str) -> None:
        """Print an error message."""
        self.console.print(f"[red]x[/red] {escape(message)}")

    def print_warning(self, message: str) -> None:
        """Print a warning message."""
        self.console.print(f"[yellow]![/yellow] {escape(message)}")

    def panel(self, content: Any, title: str | None = None, border_style: str = "blue") -> None:
        """Display content in a panel."""
        self.console.print(Panel(content, title=title, border_style=border_style))

    @contextmanager
    def spinner(self, message: str = "Working..."):
        """
        Display a spinner during an operation.

        Yields:
            Status object
        """
        with self.console.status(message) as status:
            yield status

    # ==================== Plans and Steps ====================

    def plan_renderable(self, plan: Plan) -> Group:
        """Build the full plan view: estimate, strategy, risks, to-do list, user order."""
        todo = Table(show_header=False, box=None, padding=(0, 1))
        todo.add_column("Step", style="bold")
        todo.add_column("Risk")
        todo.add_column("Work")
        for item in plan.todo_list:
            todo.add_row(
                f"{item.step}.",
                self.RISK_ICONS[item.risk],
                f"{escape(item.description)}\n[dim]Action: {escape(item.action)}[/dim]",
            )

        order = Table(show_header=True, box=None, padding=(0, 1))
        order.add_column("#", style="cyan")
        order.add_column("User")
        order.add_column("Email", style="dim")
        order.add_column("Reason")
        for i, entry in enumerate(plan.recommended_order, start=1):
            order.add_row(
                str(i),
                escape(entry.account.friendly_name),
                escape(entry.account.email),
                escape(entry.reason),
            )

        return Group(
            Text(f"Estimated Time: {plan.estimated_time}"),
            Text(""),
            Text("Migration Strategy:", style="bold #7D56F4"),
            Text(plan.reasoning),
            Text(""),
            Text("Risk Assessment:", style="bold #7D56F4"),
            Text(plan.risk_assessment),
            Text(""),
            Panel(todo, title="Migration To-Do List", border_style=self.COLORS["accent"]),
            Text("User Migration Order:", style="bold #7D56F4"),
            order,
        )

    def show_plan(self, plan: Plan) -> None:
        """Print a migration plan."""
        self.console.print(self.plan_renderable(plan))

    def step_line(self, step: ExecutionStep) -> Text:
        """Render one execution step with its status styling."""
        icon, label, style = self.STEP_STYLES[step.status]
        text = Text(f"{icon} Step {step.step_number}: {step.description} [{label}]", style=style)
        if step.detail:
            text.append(f"\n   {step.detail}", style="default")
        if step.error is not None:
            text.append(f"\n   Error: {step.error}", style=self.STEP_STYLES[StepStatus.FAILED][2])
        return text

    # ==================== Wizard ====================

    def render(self, machine: "WizardMachine") -> None:
        """
        Draw the screen for the machine's current state.

        Busy states keep a spinner running until the next render.
        """
        self._stop_status()
        session = machine.session
        if self.clear_screen:
            self.console.clear()

        self.console.print(Panel(Text(APP_TITLE, style="bold"), style="#FAFAFA on #7D56F4", expand=False))
        self.console.print()
        self.console.print(self.screen(machine))

        message = self.BUSY_MESSAGES.get(session.state)
        if message is not None:
            self._status = self.console.status(message)
            self._status.start()

    def close(self) -> None:
        """Stop any running spinner."""
        self._stop_status()

    def _stop_status(self) -> None:
        if self._status is not None:
            self._status.stop()
            self._status = None

    def screen(self, machine: "WizardMachine") -> Group:
        """Build the body of the screen for the current state."""
        session = machine.session
        config = session.config
        state = session.state
        parts: list[Any] = []

        if state == WizardState.ENTERING_SOURCE:
            parts += [
                Text("Step 1: Enter source JSON filename", style="bold #7D56F4"),
                Text(""),
                Text("Type filename and press Enter, quit with q", style="dim"),
            ]
        elif state == WizardState.SELECTING_SOURCE_FORMAT:
            parts += [
                Text("Step 2: Select source format", style="bold #7D56F4"),
                Text(f"Source file: {config.source_file}"),
                Text(""),
                self._menu([f.label for f in machine.formats], session.source_cursor),
            ]
        elif state == WizardState.ENTERING_TARGET:
            parts += [
                Text("Step 3: Enter target filename", style="bold #7D56F4"),
                Text(f"Source: {config.source_file} ({self._label(config.source_format)})"),
                Text(""),
                Text("Type filename and press Enter", style="dim"),
            ]
        elif state == WizardState.SELECTING_TARGET_FORMAT:
            parts += [
                Text("Step 4: Select target format", style="bold #7D56F4"),
                Text(f"Source: {config.source_file} ({self._label(config.source_format)})"),
                Text(f"Target: {config.target_file}"),
                Text(""),
                self._menu([f.label for f in machine.formats], session.target_cursor),
            ]
        elif state == WizardState.ASKING_PLAN_PREFERENCE:
            parts += [
                Text("Step 5: Use Engine Room AI for smart migration?", style="bold #FFB86C"),
                Text("Engine Room AI can analyze your data and create a detailed migration plan."),
                Text(""),
                self._menu(machine.plan_options, session.plan_cursor),
            ]
        elif state == WizardState.GENERATING_PLAN:
            parts.append(Text(
                "Engine Room AI is analyzing your data and creating a migration plan...",
                style="bold #FFB86C",
            ))
        elif state == WizardState.CONFIRMING_PLAN and session.plan is not None:
            parts += [
                Text("Engine Room AI's Migration Plan", style="bold #FFB86C"),
                Text(""),
                self.plan_renderable(session.plan),
            ]
        elif state == WizardState.EXECUTING:
            if session.steps:
                parts.append(Text("Executing Migration Plan", style="bold #FFB86C"))
                parts += [self.step_line(step) for step in session.steps]
            else:
                parts.append(Text(
                    f"Migrating {config.source_file} to {config.target_file}...",
                    style="bold #FFB86C",
                ))
        elif state == WizardState.COMPLETED:
            parts += self._completed(session)

        if session.notice:
            parts.append(Text(session.notice, style="bold #FF5F87"))

        return Group(*parts)

    def _completed(self, session: "SessionState") -> list[Any]:
        config = session.config
        parts: list[Any] = []
        if session.steps:
            parts += [self.step_line(step) for step in session.steps]
            parts.append(Text(""))

        if session.error is not None:
            parts += [
                Text("Migration failed", style="bold #FF5F87"),
                Text(f"Error: {session.error}"),
            ]
        else:
            parts.append(Text("Migration completed successfully!", style="bold #50FA7B"))
            if config.use_plan_service:
                parts.append(Text("Enhanced with Engine Room AI analysis", style="bold #FFB86C"))
            parts.append(Text(
                f"Data migrated from {config.source_file} ({self._label(config.source_format)}) "
                f"to {config.target_file} ({self._label(config.target_format)})"
            ))
        return parts

    @staticmethod
    def _menu(options: list[str], cursor: int) -> Text:
        text = Text()
        for i, option in enumerate(options):
            marker = ">" if i == cursor else " "
            style = "bold cyan" if i == cursor else ""
            text.append(f"{marker} {i + 1}. {option}\n", style=style)
        return text

    @staticmethod
    def _label(fmt: Any) -> str:
        return fmt.label if fmt is not None else "?"

    # ==================== Settings ====================

    def settings_table(self, settings: "Settings", source: str) -> None:
        """Display the active settings."""
        table = Table(show_header=False, box=None)
        table.add_column("Setting", style="cyan")
        table.add_column("Value", style="white")

        table.add_row("Config file", source)
        table.add_row("Provider", settings.provider)
        table.add_row("Model", settings.model or "(default)")
        table.add_row("Max tokens", str(settings.max_tokens))
        table.add_row("Timeout", f"{settings.timeout_seconds}s")
        table.add_row("API key variable", settings.api_key_env)
        table.add_row("Step delay", f"{settings.step_delay_seconds}s")
        table.add_row("Default extension", settings.default_extension)

        self.console.print(table)

    def validation_result(self, result: "ValidationResult") -> None:
        """Display validation errors and warnings."""
        if result.errors:
            self.console.print("\n[red]Errors:[/red]")
            for error in result.errors:
                self.console.print(f"  [red]- {escape(error)}[/red]")

        if result.warnings:
            self.console.print("\n[yellow]Warnings:[/yellow]")
            for warning in result.warnings:
                self.console.print(f"  [yellow]- {escape(warning)}[/yellow]")
