"""
Settings data model for phone-migrator.

Settings controls how the plan service is reached and how the wizard
executes plans. Values come from the YAML config file, falling back to
the defaults below.
"""

from dataclasses import dataclass


@dataclass
class Settings:
    """
    Global settings for phone-migrator.

    Attributes:
        provider: LLM provider name used by the plan service.
        model: Model identifier (empty string for provider default).
        max_tokens: Maximum output tokens per plan service request.
        timeout_seconds: Timeout for each plan service request.
        api_key_env: Environment variable holding the API key.
        step_delay_seconds: Pause before each plan step produces its result.
        default_extension: Extension appended to filenames that lack it.
    """

    # Plan service
    provider: str = "claude"
    model: str = "claude-3-sonnet-20240229"
    max_tokens: int = 4000
    timeout_seconds: int = 30
    api_key_env: str = "ANTHROPIC_API_KEY"

    # Wizard execution
    step_delay_seconds: float = 2.0
    default_extension: str = ".json"
