"""Tests for one-step-at-a-time plan execution."""

import json
from dataclasses import replace
from datetime import datetime
from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest

from phone_migrator.core.errors import SourceReadError, UnsupportedPathError
from phone_migrator.core.plan_models import MigrationConfig, Plan, TodoItem
from phone_migrator.core.records import SchemaFormat, TwilioPhoneSystem
from phone_migrator.core.step_executor import (
    PLACEHOLDER_DETAILS,
    StepExecutor,
    build_enhanced_output,
    perform_enhanced_migration,
    reorder_users,
)

FIXED_TIME = datetime(2024, 3, 1, 9, 30, 0)


@pytest.fixture
def config(twilio_file, tmp_path):
    """Twilio to RingCentral config over the sample export."""
    return MigrationConfig(
        source_file=str(twilio_file),
        source_format=SchemaFormat.TWILIO,
        target_file=str(tmp_path / "out.json"),
        target_format=SchemaFormat.RINGCENTRAL,
        use_plan_service=True,
    )


@pytest.fixture
def executor():
    """Executor with no delay and a fixed clock."""
    return StepExecutor(step_delay=0, clock=lambda: FIXED_TIME)


def _plan_with_steps(count: int) -> Plan:
    return Plan(todo_list=[TodoItem(step=i + 1, description=f"Task {i + 1}") for i in range(count)])


class TestReorderUsers:
    """Tests for applying the recommended order to source users."""

    def test_follows_plan_order(self, sample_twilio, sample_plan):
        system = TwilioPhoneSystem.from_dict(sample_twilio)

        ordered = reorder_users(system, sample_plan)

        assert [u.account_sid for u in ordered] == ["AC2", "AC1"]

    def test_uses_source_records(self, sample_twilio, sample_plan):
        """Test user details come from the source file, not the plan."""
        system = TwilioPhoneSystem.from_dict(sample_twilio)

        ordered = reorder_users(system, sample_plan)

        assert ordered[1].email == "jane@example.com"
        assert ordered[1].phone_number == "+15550001"

    def test_unknown_and_repeated_entries_dropped(self, sample_twilio, plan_dict):
        plan_dict["recommended_order"].append(plan_dict["recommended_order"][0])
        plan_dict["recommended_order"].append(
            {"account": {"account_sid": "AC404"}, "priority": 3}
        )
        system = TwilioPhoneSystem.from_dict(sample_twilio)

        ordered = reorder_users(system, Plan.from_dict(plan_dict))

        assert [u.account_sid for u in ordered] == ["AC2", "AC1"]


class TestBuildEnhancedOutput:
    """Tests for the enhanced output document."""

    def test_metadata(self, config, sample_plan):
        output = build_enhanced_output(config, sample_plan, {"accounts": []}, FIXED_TIME)

        assert output["migration_metadata"] == {
            "enhanced_by": "Engine Room AI",
            "migration_time": "2024-03-01 09:30:00",
            "source_format": "Twilio",
            "target_format": "RingCentral",
            "execution_mode": "step-by-step",
        }
        assert output["migration_plan"] == sample_plan.to_dict()
        assert output["converted_data"] == {"accounts": []}


class TestPerformEnhancedMigration:
    """Tests for the real migration step."""

    def test_writes_reordered_document(self, config, sample_plan):
        perform_enhanced_migration(config, sample_plan, FIXED_TIME)

        with open(config.target_file) as f:
            written = json.load(f)
        assert [a["id"] for a in written["converted_data"]["accounts"]] == ["AC2", "AC1"]
        assert written["converted_data"]["numbers"][0]["features"] == ["mms", "voice"]
        assert written["migration_metadata"]["migration_time"] == "2024-03-01 09:30:00"

    def test_other_pairs_unsupported(self, config, sample_plan):
        """Test only Twilio to RingCentral is supported with a plan."""
        config = replace(config, target_format=SchemaFormat.TWILIO)

        with pytest.raises(UnsupportedPathError):
            perform_enhanced_migration(config, sample_plan, FIXED_TIME)


class TestStepExecutor:
    """Tests for StepExecutor.execute."""

    @pytest.mark.asyncio
    async def test_placeholder_steps_do_not_write(self, executor, config, sample_plan):
        """Test non-final steps only acknowledge their to-do item."""
        outcome = await executor.execute(config, sample_plan, 0)

        assert outcome.success
        assert outcome.detail == PLACEHOLDER_DETAILS[0]
        assert not outcome.finished
        assert not Path(config.target_file).exists()

    @pytest.mark.asyncio
    async def test_user_count_detail(self, executor, config):
        """Test the fourth acknowledgement reports the ordered user count."""
        plan = _plan_with_steps(6)

        outcome = await executor.execute(config, plan, 3)

        assert outcome.detail == "Migrated 0 users according to the recommended order"

    @pytest.mark.asyncio
    async def test_placeholder_beyond_canned_details(self, executor, config):
        plan = _plan_with_steps(8)

        outcome = await executor.execute(config, plan, 6)

        assert outcome.detail == "Task 7 completed"

    @pytest.mark.asyncio
    async def test_final_step_writes_target(self, executor, config, sample_plan):
        outcome = await executor.execute(config, sample_plan, 2)

        assert outcome.success
        assert outcome.detail == "Migration file generated successfully"
        with open(config.target_file) as f:
            assert json.load(f)["migration_metadata"]["enhanced_by"] == "Engine Room AI"

    @pytest.mark.asyncio
    async def test_final_step_failure_is_captured(self, executor, config, sample_plan, tmp_path):
        """Test migration errors come back on the outcome."""
        config = replace(config, source_file=str(tmp_path / "gone.json"))

        outcome = await executor.execute(config, sample_plan, 2)

        assert not outcome.success
        assert isinstance(outcome.error, SourceReadError)
        assert outcome.detail == ""

    @pytest.mark.asyncio
    async def test_index_past_end_is_finished(self, executor, config, sample_plan):
        outcome = await executor.execute(config, sample_plan, 3)

        assert outcome.finished
        assert outcome.success

    @pytest.mark.asyncio
    async def test_negative_index_is_finished(self, executor, config, sample_plan):
        outcome = await executor.execute(config, sample_plan, -1)

        assert outcome.finished

    @pytest.mark.asyncio
    async def test_delay_before_work(self, config, sample_plan):
        """Test the configured delay is awaited before each step."""
        executor = StepExecutor(step_delay=2.0)

        with patch("phone_migrator.core.step_executor.asyncio.sleep", new_callable=AsyncMock) as sleep:
            await executor.execute(config, sample_plan, 0)

        sleep.assert_called_once_with(2.0)
