"""
Data models for migration plans and their execution.

- MigrationConfig: what to migrate and where, collected by the wizard
- Plan: the structured recommendation returned by the plan service
- ExecutionStep: runtime tracking for one to-do item of an approved plan
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .records import SchemaFormat, TwilioUser, text_field

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MigrationConfig:
    """
    Migration configuration.

    Built up one field at a time by the early wizard states using
    dataclasses.replace, and never changed once execution starts.
    """
    source_file: str = ""
    source_format: SchemaFormat | None = None
    target_file: str = ""
    target_format: SchemaFormat | None = None
    use_plan_service: bool = False

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "source_file": self.source_file,
            "source_format": self.source_format.value if self.source_format else None,
            "target_file": self.target_file,
            "target_format": self.target_format.value if self.target_format else None,
            "use_plan_service": self.use_plan_service,
        }


class RiskLevel(Enum):
    """Risk tier attached to plan entries and to-do items."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @classmethod
    def parse(cls, value: Any) -> "RiskLevel":
        """Parse a risk tier, treating unknown values as medium."""
        if value is None:
            return cls.MEDIUM
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            logger.warning(f"Unknown risk tier {value!r}, treating it as medium")
            return cls.MEDIUM


@dataclass
class PrioritizedEntry:
    """One source user wrapped with its migration priority."""
    account: TwilioUser
    priority: int = 0
    reason: str = ""
    risk_level: RiskLevel = RiskLevel.MEDIUM

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "account": self.account.to_dict(),
            "priority": self.priority,
            "reason": self.reason,
            "risk_level": self.risk_level.value,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PrioritizedEntry":
        """Create from dictionary."""
        if not isinstance(data, dict):
            raise ValueError("recommended_order entries must be objects")
        return cls(
            account=TwilioUser.from_dict(data.get("account") or {}),
            priority=int(data.get("priority") or 0),
            reason=text_field(data, "reason"),
            risk_level=RiskLevel.parse(data.get("risk_level")),
        )


@dataclass
class TodoItem:
    """A single planned unit of migration work."""
    step: int
    description: str
    action: str = ""
    risk: RiskLevel = RiskLevel.MEDIUM
    completed: bool = False

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "step": self.step,
            "description": self.description,
            "action": self.action,
            "risk": self.risk.value,
            "completed": self.completed,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TodoItem":
        """Create from dictionary."""
        if not isinstance(data, dict):
            raise ValueError("todo_list entries must be objects")
        return cls(
            step=int(data["step"]),
            description=text_field(data, "description"),
            action=text_field(data, "action"),
            risk=RiskLevel.parse(data.get("risk")),
            completed=bool(data.get("completed")),
        )


@dataclass
class Plan:
    """
    Migration plan produced by the plan service.

    Attributes:
        recommended_order: Users in suggested migration order
        reasoning: Overall strategy explanation
        risk_assessment: Risks and mitigations
        todo_list: Ordered, 1-indexed work items
        estimated_time: Free-text duration estimate
    """
    recommended_order: list[PrioritizedEntry] = field(default_factory=list)
    reasoning: str = ""
    risk_assessment: str = ""
    todo_list: list[TodoItem] = field(default_factory=list)
    estimated_time: str = ""

    def validate(self) -> None:
        """
        Check the to-do list invariant.

        Raises:
            ValueError: If the list is empty or not numbered 1..N
        """
        if not self.todo_list:
            raise ValueError("plan has no to-do items")
        steps = [item.step for item in self.todo_list]
        expected = list(range(1, len(steps) + 1))
        if steps != expected:
            raise ValueError(
                f"to-do steps must be numbered 1..{len(steps)} in order, got {steps}"
            )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "recommended_order": [e.to_dict() for e in self.recommended_order],
            "reasoning": self.reasoning,
            "risk_assessment": self.risk_assessment,
            "todo_list": [t.to_dict() for t in self.todo_list],
            "estimated_time": self.estimated_time,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Plan":
        """
        Create from dictionary.

        Raises:
            ValueError: If the data does not have the plan shape
        """
        if not isinstance(data, dict):
            raise ValueError("plan must be a JSON object")
        order = data.get("recommended_order") or []
        todos = data.get("todo_list") or []
        if not isinstance(order, list) or not isinstance(todos, list):
            raise ValueError("recommended_order and todo_list must be arrays")

        return cls(
            recommended_order=[PrioritizedEntry.from_dict(e) for e in order],
            reasoning=text_field(data, "reasoning"),
            risk_assessment=text_field(data, "risk_assessment"),
            todo_list=[TodoItem.from_dict(t) for t in todos],
            estimated_time=text_field(data, "estimated_time"),
        )


class StepStatus(Enum):
    """Status of an execution step."""
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


class StepKind(Enum):
    """Whether a step does real work or only acknowledges its to-do item."""
    PLACEHOLDER = "placeholder"
    REAL = "real"


@dataclass
class ExecutionStep:
    """Runtime tracking record for one to-do item."""
    step_number: int
    description: str
    status: StepStatus = StepStatus.PENDING
    kind: StepKind = StepKind.PLACEHOLDER
    detail: str = ""
    error: Exception | None = None

    @property
    def is_finished(self) -> bool:
        return self.status in (StepStatus.COMPLETED, StepStatus.FAILED)

    def mark_running(self) -> None:
        if self.status != StepStatus.PENDING:
            raise ValueError(f"step {self.step_number} is {self.status.value}, not pending")
        self.status = StepStatus.RUNNING

    def mark_completed(self, detail: str) -> None:
        if self.status != StepStatus.RUNNING:
            raise ValueError(f"step {self.step_number} is {self.status.value}, not running")
        self.status = StepStatus.COMPLETED
        self.detail = detail

    def mark_failed(self, error: Exception) -> None:
        if self.status != StepStatus.RUNNING:
            raise ValueError(f"step {self.step_number} is {self.status.value}, not running")
        self.status = StepStatus.FAILED
        self.error = error

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "step_number": self.step_number,
            "description": self.description,
            "status": self.status.value,
            "kind": self.kind.value,
            "detail": self.detail,
            "error": str(self.error) if self.error else None,
        }


def step_kind_for(plan: Plan, index: int) -> StepKind:
    """The last to-do item is the real step; all others are placeholders."""
    if index == len(plan.todo_list) - 1:
        return StepKind.REAL
    return StepKind.PLACEHOLDER


def initialize_steps(plan: Plan) -> list[ExecutionStep]:
    """
    Build execution steps for a plan's to-do list.

    Every step starts pending except the first, which starts running.
    """
    steps = [
        ExecutionStep(
            step_number=item.step,
            description=item.description,
            kind=step_kind_for(plan, i),
        )
        for i, item in enumerate(plan.todo_list)
    ]
    if steps:
        steps[0].mark_running()
    return steps
