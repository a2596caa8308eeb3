"""
Plan Service for phone-migrator

Asks the LLM for a migration plan over a set of Twilio users and parses
the structured reply into a Plan. Also provides the free-text data-quality
review of the same users.
"""

import json
import logging
from typing import TYPE_CHECKING

from .errors import PlanParseError
from .plan_models import Plan
from .records import TwilioUser

if TYPE_CHECKING:
    from ..llm.base import LLMProvider

logger = logging.getLogger(__name__)


def extract_json_document(content: str) -> str:
    """
    Isolate the JSON object embedded in a model reply.

    Takes everything from the first opening brace to the last closing brace.

    Raises:
        PlanParseError: If no such brace pair exists
    """
    start = content.find("{")
    end = content.rfind("}")
    if start == -1 or end == -1 or end < start:
        raise PlanParseError("no valid JSON found in plan service response")
    return content[start:end + 1]


class PlanService:
    """
    Generates migration plans through an LLM provider.

    A single request is made per call; failures are raised to the caller.
    """

    PLAN_PROMPT = """You are a phone system migration expert. Create a comprehensive migration plan with a detailed to-do list.

User Accounts to Migrate:
{users}

Please provide a detailed migration plan with:
1. Analysis of the accounts and optimal order
2. A step-by-step to-do list for the migration process
3. Risk assessment and mitigation strategies
4. Estimated time for completion

Respond with a JSON object in this exact format:
{{
  "recommended_order": [
    {{
      "account": {{
        "account_sid": "AC123",
        "friendly_name": "John Doe",
        "email": "john@example.com",
        "phone_number": "+1234567890",
        "status": "active"
      }},
      "priority": 1,
      "reason": "Admin user - needs to be migrated first to maintain system management",
      "risk_level": "low"
    }}
  ],
  "reasoning": "Overall strategy explanation focusing on minimizing business disruption",
  "risk_assessment": "Detailed risk analysis and mitigation strategies",
  "todo_list": [
    {{
      "step": 1,
      "description": "Backup current system data",
      "action": "Create full backup of Twilio configuration and user data",
      "risk": "low"
    }},
    {{
      "step": 2,
      "description": "Validate data integrity",
      "action": "Check for missing fields, invalid phone numbers, duplicate accounts",
      "risk": "medium"
    }},
    {{
      "step": 3,
      "description": "Begin user migration in priority order",
      "action": "Migrate users according to recommended order with validation",
      "risk": "high"
    }}
  ],
  "estimated_time": "15-20 minutes including validation steps"
}}

Create a comprehensive to-do list with 5-8 steps that covers the entire migration process from preparation to completion. Number the steps from 1 without gaps."""

    QUALITY_PROMPT = """Analyze this phone system data for migration readiness:

{users}

Please check for:
- Missing or invalid phone numbers
- Incomplete user information (missing emails, names)
- Data inconsistencies
- Potential duplicate accounts
- Format issues that could cause migration problems

Provide a concise analysis with specific recommendations for data cleanup before migration."""

    def __init__(self, llm: "LLMProvider", max_tokens: int | None = None):
        """
        Initialize the plan service.

        Args:
            llm: Provider used for every request
            max_tokens: Output limit per request (provider default if None)
        """
        self.llm = llm
        self.max_tokens = max_tokens

    @staticmethod
    def _users_json(users: list[TwilioUser]) -> str:
        return json.dumps([u.to_dict() for u in users], indent=2, ensure_ascii=False)

    def build_plan_prompt(self, users: list[TwilioUser]) -> str:
        """Render the plan request for the given users."""
        return self.PLAN_PROMPT.format(users=self._users_json(users))

    async def plan_migration_order(self, users: list[TwilioUser]) -> Plan:
        """
        Request a migration plan for the given users.

        Args:
            users: Source user records

        Returns:
            Parsed and validated Plan

        Raises:
            LLMError: If the provider call fails
            PlanParseError: If the reply holds no usable plan document
        """
        prompt = self.build_plan_prompt(users)
        logger.info(f"Requesting migration plan for {len(users)} users")

        content = await self._request(prompt, "plan")
        plan = self._parse_plan(content)

        logger.info(
            f"Received plan with {len(plan.todo_list)} steps and "
            f"{len(plan.recommended_order)} ordered users"
        )
        return plan

    async def _request(self, prompt: str, purpose: str) -> str:
        """Send one prompt and return the reply text."""
        response = await self.llm.complete(
            [{"role": "user", "content": prompt}],
            max_tokens=self.max_tokens,
        )
        if response.usage is not None:
            logger.info(
                f"{purpose.capitalize()} reply from {response.model or self.llm.get_name()}: "
                f"{response.usage.input_tokens} input, {response.usage.output_tokens} output tokens"
            )
        if response.truncated:
            logger.warning(f"{purpose.capitalize()} reply hit the token limit and was cut off")
        return response.content

    def _parse_plan(self, content: str) -> Plan:
        """
        Parse a model reply into a Plan.

        Raises:
            PlanParseError: If extraction, JSON decoding or validation fails
        """
        document = extract_json_document(content)

        try:
            data = json.loads(document)
        except json.JSONDecodeError as e:
            raise PlanParseError(f"failed to parse plan service response: {e}") from e

        try:
            plan = Plan.from_dict(data)
            plan.validate()
        except (KeyError, TypeError, ValueError) as e:
            raise PlanParseError(f"plan service response is not a valid plan: {e}") from e

        return plan

    async def analyze_data_quality(self, users: list[TwilioUser]) -> str:
        """
        Ask for a data-quality review of the given users.

        Returns:
            The model's free-text analysis

        Raises:
            LLMError: If the provider call fails
        """
        prompt = self.QUALITY_PROMPT.format(users=self._users_json(users))
        return await self._request(prompt, "data-quality analysis")
