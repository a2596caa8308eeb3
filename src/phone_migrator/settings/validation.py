"""
Configuration validation for phone-migrator.

This module provides validation of Settings objects:
- Plan service configuration (provider, limits)
- Credentials presence in the environment
- Wizard execution options
"""

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import List

from ..llm.factory import LLMFactory
from .models import Settings


@dataclass
class ValidationResult:
    """
    Result of a configuration validation.

    Attributes:
        valid: Whether the configuration passed all validation checks.
        errors: List of error messages (validation failures).
        warnings: List of warning messages (non-critical issues).
    """

    valid: bool = True
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    def add_error(self, message: str) -> None:
        """Add an error message and mark validation as failed."""
        self.errors.append(message)
        self.valid = False

    def add_warning(self, message: str) -> None:
        """Add a warning message (does not affect validity)."""
        self.warnings.append(message)

    def merge(self, other: "ValidationResult") -> None:
        """Merge another ValidationResult into this one."""
        if not other.valid:
            self.valid = False
        self.errors.extend(other.errors)
        self.warnings.extend(other.warnings)


class ConfigValidator:
    """
    Configuration validator for phone-migrator settings.
    """

    def validate(self, settings: Settings) -> ValidationResult:
        """
        Validate the complete settings configuration.

        Note: Does NOT validate credentials (use validate_credentials for that).

        Args:
            settings: Settings object to validate.

        Returns:
            ValidationResult with any errors or warnings.
        """
        result = ValidationResult()

        if settings.provider.lower() not in LLMFactory.get_supported_providers():
            result.add_error(
                f"Unknown provider '{settings.provider}'. "
                f"Supported: {', '.join(LLMFactory.get_supported_providers())}"
            )

        if settings.max_tokens <= 0:
            result.add_error("max_tokens must be positive")

        if settings.timeout_seconds <= 0:
            result.add_error("timeout_seconds must be positive")
        elif settings.timeout_seconds > 300:
            result.add_warning(
                f"timeout_seconds is {settings.timeout_seconds}; plan requests may hang for a long time"
            )

        if settings.step_delay_seconds < 0:
            result.add_error("step_delay_seconds cannot be negative")

        if not settings.default_extension.startswith("."):
            result.add_error("default_extension must start with '.'")

        if not settings.api_key_env:
            result.add_error("api_key_env must name an environment variable")

        return result

    def validate_credentials(
        self,
        settings: Settings,
        environ: Mapping[str, str] | None = None,
    ) -> ValidationResult:
        """
        Check that the plan service credential is available.

        A missing key is only a warning: the wizard works without the plan
        service.

        Args:
            settings: Settings naming the credential variable.
            environ: Environment to check (defaults to os.environ).

        Returns:
            ValidationResult with a warning if the key is missing.
        """
        result = ValidationResult()
        env = os.environ if environ is None else environ

        if settings.api_key_env and not env.get(settings.api_key_env):
            result.add_warning(
                f"{settings.api_key_env} is not set; plan-assisted migration will fail"
            )

        return result
