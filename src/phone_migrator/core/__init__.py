"""
phone-migrator core module

Contains the migration domain:
- records: Twilio and RingCentral document models
- converter: schema conversion and direct migration
- plan_models: migration config, plan and execution step models
- plan_service: LLM-backed plan generation
- step_executor: one-step-at-a-time plan execution
"""

from .converter import migrate, ringcentral_to_twilio, twilio_to_ringcentral
from .errors import (
    MigrationError,
    OutputWriteError,
    PlanParseError,
    SourceParseError,
    SourceReadError,
    UnsupportedPathError,
    UserCancelledError,
)
from .plan_models import (
    ExecutionStep,
    MigrationConfig,
    Plan,
    PrioritizedEntry,
    RiskLevel,
    StepKind,
    StepStatus,
    TodoItem,
    initialize_steps,
)
from .plan_service import PlanService
from .records import SchemaFormat
from .step_executor import StepExecutor, StepOutcome

__all__ = [
    "migrate",
    "twilio_to_ringcentral",
    "ringcentral_to_twilio",
    "MigrationError",
    "SourceReadError",
    "SourceParseError",
    "UnsupportedPathError",
    "OutputWriteError",
    "PlanParseError",
    "UserCancelledError",
    "MigrationConfig",
    "Plan",
    "PrioritizedEntry",
    "TodoItem",
    "RiskLevel",
    "ExecutionStep",
    "StepStatus",
    "StepKind",
    "initialize_steps",
    "PlanService",
    "SchemaFormat",
    "StepExecutor",
    "StepOutcome",
]
