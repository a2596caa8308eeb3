"""Pytest configuration and fixtures for phone-migrator tests."""

import json
import os

import pytest

# Wide terminal so rich does not wrap long tmp paths in CLI output under test.
os.environ["COLUMNS"] = "200"

from phone_migrator.core.plan_models import Plan
from phone_migrator.llm.base import LLMProvider, LLMResponse


@pytest.fixture
def sample_twilio():
    """A small Twilio export with one active and one suspended user."""
    return {
        "users": [
            {
                "account_sid": "AC1",
                "friendly_name": "Jane Doe",
                "email": "jane@example.com",
                "phone_number": "+15550001",
                "status": "active",
            },
            {
                "account_sid": "AC2",
                "friendly_name": "John Roe",
                "email": "john@example.com",
                "phone_number": "+15550002",
                "status": "suspended",
            },
        ],
        "phone_numbers": [
            {
                "sid": "PN1",
                "phone_number": "+15550001",
                "capabilities": {"voice": True, "sms": False, "mms": True},
                "address_sid": "AD1",
            },
        ],
    }


@pytest.fixture
def sample_ringcentral():
    """A RingCentral export with one inactive account."""
    return {
        "accounts": [
            {
                "id": "RC9",
                "name": "Ann Lee",
                "contact": "ann@example.com",
                "main_number": "+15550009",
                "active": False,
            },
        ],
        "numbers": [
            {
                "id": "N9",
                "phone_number": "+15550009",
                "features": ["voice", "fax"],
                "region": "US-West",
            },
        ],
    }


@pytest.fixture
def twilio_file(tmp_path, sample_twilio):
    """Write the Twilio export to a temp file."""
    path = tmp_path / "twilio.json"
    path.write_text(json.dumps(sample_twilio), encoding="utf-8")
    return path


@pytest.fixture
def ringcentral_file(tmp_path, sample_ringcentral):
    """Write the RingCentral export to a temp file."""
    path = tmp_path / "ringcentral.json"
    path.write_text(json.dumps(sample_ringcentral), encoding="utf-8")
    return path


@pytest.fixture
def plan_dict():
    """A plan reply that orders AC2 before AC1 over three steps."""
    return {
        "recommended_order": [
            {
                "account": {"account_sid": "AC2", "friendly_name": "John Roe"},
                "priority": 1,
                "reason": "Suspended account, lowest impact",
                "risk_level": "low",
            },
            {
                "account": {"account_sid": "AC1", "friendly_name": "Jane Doe"},
                "priority": 2,
                "reason": "Active user",
                "risk_level": "medium",
            },
        ],
        "reasoning": "Low-impact accounts first",
        "risk_assessment": "Minimal risk",
        "todo_list": [
            {"step": 1, "description": "Backup current system data", "action": "Export", "risk": "low"},
            {"step": 2, "description": "Validate data integrity", "action": "Check", "risk": "medium"},
            {"step": 3, "description": "Migrate users", "action": "Convert", "risk": "high"},
        ],
        "estimated_time": "10 minutes",
    }


@pytest.fixture
def sample_plan(plan_dict):
    """The plan reply parsed into a Plan."""
    return Plan.from_dict(plan_dict)


class ScriptedLLM(LLMProvider):
    """LLM provider returning canned replies and recording every request."""

    def __init__(self, *replies: str):
        super().__init__(api_key="test-key")
        self.replies = list(replies)
        self.requests: list[dict] = []

    async def complete(self, messages, max_tokens=None, **kwargs):
        self.requests.append({"messages": messages, "max_tokens": max_tokens})
        return LLMResponse(content=self.replies.pop(0), model="test-model")

    def get_name(self) -> str:
        return "scripted"

    def get_default_model(self) -> str:
        return "test-model"


@pytest.fixture
def scripted_llm():
    """Factory for ScriptedLLM instances."""
    return ScriptedLLM
