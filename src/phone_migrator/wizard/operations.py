"""
Asynchronous operations issued by the wizard state machine.

Each operation runs to completion and returns exactly one completion event.
Migration and LLM failures become the event's error value; anything else is
a bug and propagates.
"""

import asyncio
import logging
from collections.abc import Callable

from ..core.converter import load_twilio_system, migrate
from ..core.errors import MigrationError
from ..core.plan_models import MigrationConfig
from ..core.plan_service import PlanService
from ..core.step_executor import StepExecutor
from ..llm.base import LLMError
from ..llm.factory import LLMFactory
from ..settings.models import Settings
from .machine import (
    Command,
    CompletionEvent,
    ExecuteStep,
    GeneratePlan,
    MigrationCompleted,
    PlanGenerated,
    RunDirectMigration,
    StepCompleted,
)

logger = logging.getLogger(__name__)

PlanServiceFactory = Callable[[], PlanService]


class WizardOperations:
    """
    Performs the commands returned by WizardMachine.dispatch().

    Attributes:
        settings: Active settings (LLM and step timing)
        executor: Step executor for approved plans
    """

    def __init__(
        self,
        settings: Settings | None = None,
        executor: StepExecutor | None = None,
        plan_service_factory: PlanServiceFactory | None = None,
    ):
        """
        Initialize the operations.

        Args:
            settings: Settings instance (defaults if not provided)
            executor: StepExecutor (built from settings if not provided)
            plan_service_factory: Builds the PlanService for a plan request;
                called once per request so a missing credential is reported
                before any file or network access
        """
        self.settings = settings or Settings()
        self.executor = executor or StepExecutor(step_delay=self.settings.step_delay_seconds)
        self._plan_service_factory = plan_service_factory or self._default_plan_service

    def _default_plan_service(self) -> PlanService:
        llm = LLMFactory.create_from_settings(self.settings)
        return PlanService(llm, max_tokens=self.settings.max_tokens)

    async def perform(self, command: Command) -> CompletionEvent:
        """
        Run one command and return its completion event.

        Raises:
            TypeError: If the command is not an asynchronous operation
        """
        if isinstance(command, GeneratePlan):
            return await self.generate_plan(command.config)
        if isinstance(command, ExecuteStep):
            return await self.execute_step(command)
        if isinstance(command, RunDirectMigration):
            return await self.run_direct_migration(command.config)
        raise TypeError(f"Not an operation: {command!r}")

    async def generate_plan(self, config: MigrationConfig) -> PlanGenerated:
        """Check the credential, read the source users and request a plan."""
        try:
            service = self._plan_service_factory()
            system = await asyncio.to_thread(load_twilio_system, config.source_file)
            plan = await service.plan_migration_order(system.users)
        except (MigrationError, LLMError) as e:
            logger.error(f"Plan generation failed: {e}")
            return PlanGenerated(error=e)
        return PlanGenerated(plan=plan)

    async def execute_step(self, command: ExecuteStep) -> StepCompleted | MigrationCompleted:
        """Run one plan step."""
        outcome = await self.executor.execute(command.config, command.plan, command.step_index)
        if outcome.finished:
            return MigrationCompleted()
        return StepCompleted(
            step_index=outcome.step_index,
            detail=outcome.detail,
            error=outcome.error,
        )

    async def run_direct_migration(self, config: MigrationConfig) -> MigrationCompleted:
        """Convert and write the target file without a plan."""
        try:
            await asyncio.to_thread(migrate, config)
        except MigrationError as e:
            logger.error(f"Direct migration failed: {e}")
            return MigrationCompleted(error=e)
        logger.info(f"Migrated {config.source_file} to {config.target_file}")
        return MigrationCompleted()
