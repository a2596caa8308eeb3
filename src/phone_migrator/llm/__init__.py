"""
phone-migrator LLM Module

Provides the LLM provider abstraction used by the plan service.

Key Components:
- LLMProvider: Abstract base class for LLM providers
- LLMResponse: Standardized response type
- LLMFactory: Provider instantiation factory
- LLMError and subclasses: provider failures
"""

from .base import (
    AuthenticationError,
    CredentialMissingError,
    LLMError,
    LLMProvider,
    LLMResponse,
    ModelNotFoundError,
    RateLimitError,
    TokenUsage,
)
from .factory import LLMFactory

__all__ = [
    "LLMProvider",
    "LLMResponse",
    "TokenUsage",
    "LLMFactory",
    "LLMError",
    "CredentialMissingError",
    "AuthenticationError",
    "RateLimitError",
    "ModelNotFoundError",
]
