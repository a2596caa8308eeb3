"""Tests for plan and execution step models."""

import pytest

from phone_migrator.core.plan_models import (
    ExecutionStep,
    MigrationConfig,
    Plan,
    RiskLevel,
    StepKind,
    StepStatus,
    TodoItem,
    initialize_steps,
    step_kind_for,
)
from phone_migrator.core.records import SchemaFormat


class TestMigrationConfig:
    """Tests for MigrationConfig."""

    def test_defaults(self):
        """Test an empty config has no formats selected."""
        config = MigrationConfig()

        assert config.source_format is None
        assert config.use_plan_service is False

    def test_to_dict(self):
        """Test formats serialize by value."""
        config = MigrationConfig(
            source_file="a.json",
            source_format=SchemaFormat.TWILIO,
            target_file="b.json",
            target_format=SchemaFormat.RINGCENTRAL,
        )

        data = config.to_dict()
        assert data["source_format"] == "twilio"
        assert data["target_format"] == "ringcentral"

    def test_frozen(self):
        """Test the config cannot be changed in place."""
        config = MigrationConfig()

        with pytest.raises(AttributeError):
            config.source_file = "x.json"


class TestRiskLevel:
    """Tests for risk tier parsing."""

    def test_known_values(self):
        assert RiskLevel.parse("LOW") is RiskLevel.LOW
        assert RiskLevel.parse(" high ") is RiskLevel.HIGH

    def test_unknown_is_medium(self):
        """Test unrecognized tiers fall back to medium."""
        assert RiskLevel.parse("extreme") is RiskLevel.MEDIUM
        assert RiskLevel.parse(None) is RiskLevel.MEDIUM

    def test_unknown_tier_logged(self, caplog):
        with caplog.at_level("WARNING", logger="phone_migrator.core.plan_models"):
            RiskLevel.parse("critical")

        assert "Unknown risk tier 'critical'" in caplog.text

    def test_missing_tier_not_logged(self, caplog):
        with caplog.at_level("WARNING", logger="phone_migrator.core.plan_models"):
            RiskLevel.parse(None)

        assert caplog.text == ""


class TestPlan:
    """Tests for Plan parsing and validation."""

    def test_from_dict(self, plan_dict):
        """Test a full plan document parses."""
        plan = Plan.from_dict(plan_dict)

        assert plan.reasoning == "Low-impact accounts first"
        assert [e.account.account_sid for e in plan.recommended_order] == ["AC2", "AC1"]
        assert plan.recommended_order[0].risk_level is RiskLevel.LOW
        assert [t.step for t in plan.todo_list] == [1, 2, 3]
        assert plan.todo_list[2].risk is RiskLevel.HIGH

    def test_to_dict_round_trip(self, sample_plan):
        """Test serializing and reparsing keeps the plan."""
        assert Plan.from_dict(sample_plan.to_dict()) == sample_plan

    def test_validate_accepts_contiguous_steps(self, sample_plan):
        sample_plan.validate()

    def test_validate_rejects_empty_todo_list(self):
        """Test a plan without work items is invalid."""
        with pytest.raises(ValueError):
            Plan().validate()

    def test_validate_rejects_gaps(self):
        """Test step numbers must run 1..N without gaps."""
        plan = Plan(todo_list=[TodoItem(step=1, description="a"), TodoItem(step=3, description="b")])

        with pytest.raises(ValueError):
            plan.validate()

    def test_todo_item_requires_step(self):
        """Test a to-do item without a step number is rejected."""
        with pytest.raises(KeyError):
            TodoItem.from_dict({"description": "no step"})

    def test_non_object_rejected(self):
        with pytest.raises(ValueError):
            Plan.from_dict(["not", "a", "plan"])


class TestExecutionStep:
    """Tests for step status transitions."""

    def test_pending_to_running_to_completed(self):
        step = ExecutionStep(step_number=1, description="Backup")

        step.mark_running()
        step.mark_completed("done")

        assert step.status is StepStatus.COMPLETED
        assert step.detail == "done"
        assert step.is_finished

    def test_running_to_failed(self):
        """Test a failed step keeps its error."""
        step = ExecutionStep(step_number=1, description="Backup")
        error = RuntimeError("disk full")

        step.mark_running()
        step.mark_failed(error)

        assert step.status is StepStatus.FAILED
        assert step.error is error
        assert step.to_dict()["error"] == "disk full"

    def test_cannot_complete_pending_step(self):
        """Test a step must be running before it completes."""
        step = ExecutionStep(step_number=1, description="Backup")

        with pytest.raises(ValueError):
            step.mark_completed("done")

    def test_cannot_restart_completed_step(self):
        step = ExecutionStep(step_number=1, description="Backup")
        step.mark_running()
        step.mark_completed("done")

        with pytest.raises(ValueError):
            step.mark_running()


class TestInitializeSteps:
    """Tests for building execution steps from a plan."""

    def test_one_step_per_todo_item(self, sample_plan):
        steps = initialize_steps(sample_plan)

        assert [s.step_number for s in steps] == [1, 2, 3]
        assert [s.description for s in steps] == [t.description for t in sample_plan.todo_list]

    def test_first_running_rest_pending(self, sample_plan):
        """Test only the first step starts running."""
        steps = initialize_steps(sample_plan)

        assert steps[0].status is StepStatus.RUNNING
        assert all(s.status is StepStatus.PENDING for s in steps[1:])

    def test_last_step_is_real(self, sample_plan):
        """Test only the terminal step does real work."""
        steps = initialize_steps(sample_plan)

        assert [s.kind for s in steps] == [StepKind.PLACEHOLDER, StepKind.PLACEHOLDER, StepKind.REAL]

    def test_single_step_plan_is_real(self):
        plan = Plan(todo_list=[TodoItem(step=1, description="Everything")])

        assert step_kind_for(plan, 0) is StepKind.REAL

    def test_empty_plan(self):
        assert initialize_steps(Plan()) == []
