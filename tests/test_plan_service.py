"""Tests for the LLM-backed plan service."""

import json

import pytest

from phone_migrator.core.errors import PlanParseError
from phone_migrator.core.plan_service import PlanService, extract_json_document
from phone_migrator.core.records import TwilioUser
from phone_migrator.llm.base import LLMError, LLMResponse, TokenUsage

USERS = [
    TwilioUser(account_sid="AC1", friendly_name="Jane Doe", email="jane@example.com"),
    TwilioUser(account_sid="AC2", friendly_name="John Roe", email="john@example.com"),
]


class TestExtractJsonDocument:
    """Tests for pulling the JSON object out of a model reply."""

    def test_surrounding_prose_is_dropped(self):
        content = 'Here is your plan:\n{"a": 1}\nGood luck!'

        assert extract_json_document(content) == '{"a": 1}'

    def test_spans_first_to_last_brace(self):
        """Test nested objects are kept whole."""
        content = 'x {"a": {"b": 2}} y'

        assert extract_json_document(content) == '{"a": {"b": 2}}'

    def test_no_braces(self):
        with pytest.raises(PlanParseError) as exc_info:
            extract_json_document("I cannot help with that.")

        assert "no valid JSON found" in str(exc_info.value)

    def test_closing_before_opening(self):
        with pytest.raises(PlanParseError):
            extract_json_document("} oops {")


class TestPlanPrompt:
    """Tests for the plan request prompt."""

    def test_prompt_embeds_users(self, scripted_llm):
        service = PlanService(scripted_llm())

        prompt = service.build_plan_prompt(USERS)

        assert '"account_sid": "AC1"' in prompt
        assert '"friendly_name": "John Roe"' in prompt

    def test_prompt_describes_reply_format(self, scripted_llm):
        """Test the literal JSON example survives formatting."""
        prompt = PlanService(scripted_llm()).build_plan_prompt(USERS)

        assert '"recommended_order": [' in prompt
        assert '"todo_list": [' in prompt
        assert "{{" not in prompt


class TestPlanMigrationOrder:
    """Tests for plan_migration_order."""

    @pytest.mark.asyncio
    async def test_valid_reply(self, scripted_llm, plan_dict):
        """Test a reply with prose around the JSON parses into a Plan."""
        llm = scripted_llm(f"Sure! Here it is:\n{json.dumps(plan_dict)}\nLet me know.")
        service = PlanService(llm, max_tokens=4000)

        plan = await service.plan_migration_order(USERS)

        assert len(plan.todo_list) == 3
        assert plan.recommended_order[0].account.account_sid == "AC2"
        assert llm.requests[0]["max_tokens"] == 4000
        assert llm.requests[0]["messages"][0]["role"] == "user"

    @pytest.mark.asyncio
    async def test_null_fields_in_reply(self, scripted_llm, plan_dict):
        """Test null strings in a reply load as empty strings."""
        plan_dict["recommended_order"][0]["account"]["friendly_name"] = None
        plan_dict["recommended_order"][0]["reason"] = None
        plan_dict["todo_list"][0]["action"] = None
        plan_dict["estimated_time"] = None
        service = PlanService(scripted_llm(json.dumps(plan_dict)))

        plan = await service.plan_migration_order(USERS)

        assert plan.recommended_order[0].account.friendly_name == ""
        assert plan.recommended_order[0].reason == ""
        assert plan.todo_list[0].action == ""
        assert plan.estimated_time == ""

    @pytest.mark.asyncio
    async def test_non_string_field_in_reply(self, scripted_llm, plan_dict):
        plan_dict["todo_list"][0]["description"] = {"text": "Backup"}
        service = PlanService(scripted_llm(json.dumps(plan_dict)))

        with pytest.raises(PlanParseError):
            await service.plan_migration_order(USERS)

    @pytest.mark.asyncio
    async def test_reply_without_json(self, scripted_llm):
        service = PlanService(scripted_llm("No plan today."))

        with pytest.raises(PlanParseError):
            await service.plan_migration_order(USERS)

    @pytest.mark.asyncio
    async def test_malformed_json(self, scripted_llm):
        """Test a brace-delimited but invalid document is a parse error."""
        service = PlanService(scripted_llm('{"todo_list": [1, 2,}'))

        with pytest.raises(PlanParseError) as exc_info:
            await service.plan_migration_order(USERS)

        assert "failed to parse plan service response" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_invalid_plan_shape(self, scripted_llm, plan_dict):
        """Test gaps in step numbering are rejected."""
        plan_dict["todo_list"][1]["step"] = 5
        service = PlanService(scripted_llm(json.dumps(plan_dict)))

        with pytest.raises(PlanParseError):
            await service.plan_migration_order(USERS)

    @pytest.mark.asyncio
    async def test_empty_todo_list(self, scripted_llm, plan_dict):
        plan_dict["todo_list"] = []
        service = PlanService(scripted_llm(json.dumps(plan_dict)))

        with pytest.raises(PlanParseError):
            await service.plan_migration_order(USERS)

    @pytest.mark.asyncio
    async def test_provider_errors_propagate(self, scripted_llm):
        """Test provider failures are raised unchanged."""
        llm = scripted_llm()

        async def fail(messages, max_tokens=None, **kwargs):
            raise LLMError("boom", provider="scripted")

        llm.complete = fail

        with pytest.raises(LLMError):
            await PlanService(llm).plan_migration_order(USERS)


class TestReplyLogging:
    """Tests for per-request usage logging."""

    @pytest.mark.asyncio
    async def test_usage_logged(self, scripted_llm, caplog):
        llm = scripted_llm()

        async def reply(messages, max_tokens=None, **kwargs):
            return LLMResponse(
                content="Looks fine.",
                usage=TokenUsage(input_tokens=120, output_tokens=8),
                model="claude-3-haiku-20240307",
            )

        llm.complete = reply

        with caplog.at_level("INFO", logger="phone_migrator.core.plan_service"):
            await PlanService(llm).analyze_data_quality(USERS)

        assert "claude-3-haiku-20240307: 120 input, 8 output tokens" in caplog.text

    @pytest.mark.asyncio
    async def test_truncated_reply_warns(self, scripted_llm, caplog):
        """Test a reply stopped by the token limit is reported before parsing fails."""
        llm = scripted_llm()

        async def reply(messages, max_tokens=None, **kwargs):
            return LLMResponse(content='{"todo_list": [', stop_reason="max_tokens")

        llm.complete = reply

        with caplog.at_level("WARNING", logger="phone_migrator.core.plan_service"):
            with pytest.raises(PlanParseError):
                await PlanService(llm, max_tokens=50).plan_migration_order(USERS)

        assert "Plan reply hit the token limit" in caplog.text


class TestAnalyzeDataQuality:
    """Tests for analyze_data_quality."""

    @pytest.mark.asyncio
    async def test_returns_reply_text(self, scripted_llm):
        llm = scripted_llm("John Roe is missing a phone number.")

        analysis = await PlanService(llm).analyze_data_quality(USERS)

        assert analysis == "John Roe is missing a phone number."
        prompt = llm.requests[0]["messages"][0]["content"]
        assert "migration readiness" in prompt
        assert '"account_sid": "AC2"' in prompt
