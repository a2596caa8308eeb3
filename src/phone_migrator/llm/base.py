"""
LLM provider interface.

The plan service talks to Engine Room AI through LLMProvider. A provider
turns a list of chat messages into one LLMResponse, or raises LLMError.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any


@dataclass
class TokenUsage:
    """Tokens billed for one request."""
    input_tokens: int = 0
    output_tokens: int = 0

    @property
    def total_tokens(self) -> int:
        return self.input_tokens + self.output_tokens


@dataclass
class LLMResponse:
    """
    One completion reply.

    Attributes:
        content: First text block of the reply
        stop_reason: Why generation stopped ("end_turn", "max_tokens", ...)
        usage: Token counts, when the provider reports them
        model: Model that produced the reply
    """
    content: str
    stop_reason: str = "end_turn"
    usage: TokenUsage | None = None
    model: str = ""

    @property
    def truncated(self) -> bool:
        """True when the reply was cut off by the token limit."""
        return self.stop_reason == "max_tokens"


class LLMProvider(ABC):
    """
    Base class for completion providers.

    Subclasses implement complete(), get_name() and get_default_model(),
    and override validate_config() when they need credentials.
    """

    def __init__(self, api_key: str | None = None, model: str | None = None, **kwargs: Any):
        self.api_key = api_key
        self._model = model
        self.config = kwargs

    @property
    def model(self) -> str:
        """Configured model, or the provider default."""
        return self._model or self.get_default_model()

    @abstractmethod
    async def complete(
        self,
        messages: list[dict[str, Any]],
        max_tokens: int | None = None,
        **kwargs: Any
    ) -> LLMResponse:
        """
        Send one completion request.

        Args:
            messages: Chat messages with 'role' and 'content' keys
            max_tokens: Output limit (provider default if None)
            **kwargs: Provider-specific request parameters

        Raises:
            LLMError: If the request fails
        """

    @abstractmethod
    def get_name(self) -> str:
        """Registry name of this provider, e.g. "claude"."""

    @abstractmethod
    def get_default_model(self) -> str:
        """Model used when none is configured."""

    def validate_config(self) -> bool:
        """
        Check the provider can make requests.

        Raises:
            LLMError: If configuration is invalid
        """
        return True


class LLMError(Exception):
    """A provider request or setup failed."""

    def __init__(self, message: str, provider: str | None = None, status_code: int | None = None):
        super().__init__(message)
        self.provider = provider
        self.status_code = status_code


class CredentialMissingError(LLMError):
    """Raised before any request when no API credential is configured."""
    pass


class RateLimitError(LLMError):
    pass


class AuthenticationError(LLMError):
    pass


class ModelNotFoundError(LLMError):
    pass
