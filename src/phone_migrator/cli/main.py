#!/usr/bin/env python3
"""
phone-migrator CLI

Command-line interface for migrating phone system exports between
Twilio and RingCentral schemas.

Commands:
- phone-migrator wizard: Interactive migration wizard
- phone-migrator convert: Direct conversion, no plan service
- phone-migrator plan: Generate a migration plan for a Twilio export
- phone-migrator analyze: Data-quality commentary for a Twilio export
- phone-migrator config: Configuration management
"""

import asyncio
import logging
from pathlib import Path

import typer
import yaml
from rich.console import Console
from rich.logging import RichHandler

from .. import __version__
from ..core.converter import dump_document, load_twilio_system, migrate, write_target
from ..core.errors import MigrationError
from ..core.plan_models import MigrationConfig
from ..core.plan_service import PlanService
from ..core.records import SchemaFormat
from ..llm.base import LLMError
from ..llm.factory import LLMFactory
from ..settings.models import Settings
from ..settings.storage import SettingsStorage
from ..settings.validation import ConfigValidator
from ..wizard.keys import ConsoleInput
from ..wizard.machine import WizardMachine, WizardState
from ..wizard.operations import WizardOperations
from ..wizard.runner import WizardRunner
from .output import OutputManager

app = typer.Typer(
    name="phone-migrator",
    help="Engine Room AI - migrate phone system data between Twilio and RingCentral",
    add_completion=False,
    no_args_is_help=True,
)
console = Console()
output = OutputManager(console)


def configure_logging(verbose: bool = False) -> None:
    """Send log records to stderr through rich; DEBUG when verbose."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(name)s: %(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )
    # Silence noisy third-party loggers
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("anthropic").setLevel(logging.WARNING)


def _load_settings(config_dir: Path | None) -> tuple[Settings, SettingsStorage]:
    storage = SettingsStorage(config_dir)
    try:
        return storage.load(), storage
    except (ValueError, yaml.YAMLError) as e:
        output.print_error(f"Cannot read {storage.config_file}: {e}")
        raise typer.Exit(code=1)


def _require_valid(settings: Settings) -> None:
    result = ConfigValidator().validate(settings)
    if not result.valid:
        output.validation_result(result)
        raise typer.Exit(code=1)


def _parse_format(value: str) -> SchemaFormat:
    try:
        return SchemaFormat.from_label(value)
    except ValueError as e:
        raise typer.BadParameter(str(e))


def _plan_service(settings: Settings) -> PlanService:
    llm = LLMFactory.create_from_settings(settings)
    return PlanService(llm, max_tokens=settings.max_tokens)


ConfigDirOption = typer.Option(None, "--config-dir", help="Configuration directory")
VerboseOption = typer.Option(False, "--verbose", "-v", help="Verbose logging")


@app.command()
def wizard(
    step_delay: float | None = typer.Option(
        None, "--step-delay", help="Seconds to pause before each plan step reports"
    ),
    verbose: bool = VerboseOption,
    config_dir: Path | None = ConfigDirOption,
):
    """
    Run the interactive migration wizard.

    Walks through source file, source format, target file, target format and
    whether to ask Engine Room AI for a migration plan.
    Type q on any prompt to quit.
    """
    configure_logging(verbose)
    settings, _ = _load_settings(config_dir)
    if step_delay is not None:
        settings.step_delay_seconds = step_delay

    _require_valid(settings)

    machine = WizardMachine(extension=settings.default_extension)
    menu_sizes = {
        WizardState.SELECTING_SOURCE_FORMAT: len(machine.formats),
        WizardState.SELECTING_TARGET_FORMAT: len(machine.formats),
        WizardState.ASKING_PLAN_PREFERENCE: len(machine.plan_options),
    }
    runner = WizardRunner(
        machine,
        WizardOperations(settings),
        ConsoleInput(console, menu_sizes),
        on_render=output.render,
    )

    try:
        session = asyncio.run(runner.run())
    except KeyboardInterrupt:
        output.print_warning("Interrupted")
        raise typer.Exit(code=130)
    finally:
        output.close()

    if session.state == WizardState.COMPLETED and session.error is not None:
        raise typer.Exit(code=1)


@app.command()
def convert(
    source: Path = typer.Argument(..., help="Source JSON file"),
    target: Path = typer.Argument(..., help="Target JSON file"),
    source_format: str = typer.Option("twilio", "--from", help="Source format (twilio, ringcentral)"),
    target_format: str = typer.Option("ringcentral", "--to", help="Target format (twilio, ringcentral)"),
    verbose: bool = VerboseOption,
):
    """
    Convert a file directly, without the plan service.

    Examples:
        phone-migrator convert twilio.json ringcentral.json
        phone-migrator convert rc.json twilio.json --from ringcentral --to twilio
    """
    configure_logging(verbose)
    config = MigrationConfig(
        source_file=str(source),
        source_format=_parse_format(source_format),
        target_file=str(target),
        target_format=_parse_format(target_format),
    )

    try:
        migrate(config)
    except MigrationError as e:
        output.print_error(str(e))
        raise typer.Exit(code=1)

    output.print_success(
        f"Data migrated from {source} ({config.source_format.label}) "
        f"to {target} ({config.target_format.label})"
    )


@app.command()
def plan(
    source: Path = typer.Argument(..., help="Twilio JSON export"),
    output_file: Path | None = typer.Option(None, "--output", "-o", help="Save the plan as JSON"),
    verbose: bool = VerboseOption,
    config_dir: Path | None = ConfigDirOption,
):
    """
    Ask Engine Room AI for a migration plan and print it.
    """
    configure_logging(verbose)
    settings, _ = _load_settings(config_dir)
    _require_valid(settings)

    try:
        service = _plan_service(settings)
        system = load_twilio_system(source)
        with output.spinner("Engine Room AI is analyzing your data and creating a migration plan..."):
            result = asyncio.run(service.plan_migration_order(system.users))
        if output_file is not None:
            write_target(output_file, dump_document(result.to_dict()))
    except (MigrationError, LLMError) as e:
        output.print_error(str(e))
        raise typer.Exit(code=1)

    output.print_header("Engine Room AI's Migration Plan", f"Source: {source}")
    output.show_plan(result)
    if output_file is not None:
        output.print_success(f"Plan saved to {output_file}")


@app.command()
def analyze(
    source: Path = typer.Argument(..., help="Twilio JSON export"),
    verbose: bool = VerboseOption,
    config_dir: Path | None = ConfigDirOption,
):
    """
    Ask Engine Room AI to review the data quality of an export.
    """
    configure_logging(verbose)
    settings, _ = _load_settings(config_dir)
    _require_valid(settings)

    try:
        service = _plan_service(settings)
        system = load_twilio_system(source)
        with output.spinner("Engine Room AI is examining your phone system data..."):
            analysis = asyncio.run(service.analyze_data_quality(system.users))
    except (MigrationError, LLMError) as e:
        output.print_error(str(e))
        raise typer.Exit(code=1)

    output.panel(analysis, title="Data Quality Analysis", border_style=OutputManager.COLORS["accent"])


@app.command()
def config(
    show: bool = typer.Option(False, "--show", help="Show and validate the current configuration"),
    init: bool = typer.Option(False, "--init", help="Write a default configuration file"),
    force: bool = typer.Option(False, "--force", help="Overwrite an existing file with --init"),
    config_dir: Path | None = ConfigDirOption,
):
    """
    Configuration management.

    Examples:
        phone-migrator config --show
        phone-migrator config --init
    """
    if init:
        storage = SettingsStorage(config_dir)
        if storage.exists() and not force:
            output.print_warning(f"{storage.config_file} already exists (use --force to overwrite)")
            raise typer.Exit(code=1)
        storage.save(Settings())
        output.print_success(f"Wrote default configuration to {storage.config_file}")
        return

    if show:
        settings, storage = _load_settings(config_dir)
        source = str(storage.config_file) if storage.exists() else "(defaults)"
        output.settings_table(settings, source)

        validator = ConfigValidator()
        result = validator.validate(settings)
        result.merge(validator.validate_credentials(settings))
        output.validation_result(result)
        if not result.valid:
            raise typer.Exit(code=1)
        return

    output.print("Use --show to view configuration or --init to create one")


@app.command()
def version():
    """Show version information."""
    output.print(f"phone-migrator v{__version__}")
    output.print("[dim]Twilio and RingCentral migration with Engine Room AI[/dim]")


def main():
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
