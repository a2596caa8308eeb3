"""
Claude LLM Provider

Implementation of LLMProvider for Anthropic's Claude models.
Uses the anthropic SDK for API communication.
"""

import logging
import os
from typing import Any

import anthropic

from ..base import (
    AuthenticationError,
    CredentialMissingError,
    LLMError,
    LLMProvider,
    LLMResponse,
    ModelNotFoundError,
    RateLimitError,
    TokenUsage,
)

logger = logging.getLogger(__name__)


class ClaudeProvider(LLMProvider):
    """
    LLM provider for Anthropic's Claude models.

    Each completion is a single attempt: SDK retries are disabled and the
    request is bounded by a fixed timeout.

    Example:
        provider = ClaudeProvider()  # reads ANTHROPIC_API_KEY
        response = await provider.complete([
            {"role": "user", "content": "Hello!"}
        ])
    """

    DEFAULT_MODEL = "claude-3-sonnet-20240229"
    DEFAULT_MAX_TOKENS = 4000
    DEFAULT_API_KEY_ENV = "ANTHROPIC_API_KEY"

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        max_tokens: int = DEFAULT_MAX_TOKENS,
        timeout: float = 30.0,
        api_key_env: str = DEFAULT_API_KEY_ENV,
        **kwargs: Any
    ):
        """
        Initialize the Claude provider.

        Args:
            api_key: Anthropic API key (read from api_key_env if not provided)
            model: Model identifier (uses DEFAULT_MODEL if not provided)
            max_tokens: Default maximum output tokens
            timeout: Request timeout in seconds
            api_key_env: Environment variable holding the API key
            **kwargs: Additional configuration
        """
        api_key = api_key or os.environ.get(api_key_env) or None
        super().__init__(api_key=api_key, model=model, **kwargs)

        self.api_key_env = api_key_env
        self.max_tokens = max_tokens
        self.timeout = timeout
        self._client: anthropic.AsyncAnthropic | None = None

    def _get_client(self) -> anthropic.AsyncAnthropic:
        """Get or create the Anthropic client."""
        if self._client is None:
            self._client = anthropic.AsyncAnthropic(
                api_key=self.api_key,
                timeout=self.timeout,
                max_retries=0,
            )

        return self._client

    async def complete(
        self,
        messages: list[dict[str, Any]],
        max_tokens: int | None = None,
        **kwargs: Any
    ) -> LLMResponse:
        """
        Send a completion request to Claude.

        Args:
            messages: List of message dictionaries
            max_tokens: Maximum tokens to generate
            **kwargs: Additional parameters passed to messages.create

        Returns:
            LLMResponse with the model's response

        Raises:
            CredentialMissingError: If no API key is configured
            LLMError: If the request fails or the reply has no text
        """
        self.validate_config()
        client = self._get_client()

        params: dict[str, Any] = {
            "model": self.model,
            "max_tokens": max_tokens or self.max_tokens,
            "messages": [
                {"role": m.get("role", "user"), "content": m.get("content", "")}
                for m in messages
                if m.get("role") != "system"
            ],
        }

        system_messages = [m for m in messages if m.get("role") == "system"]
        if system_messages:
            params["system"] = system_messages[0].get("content", "")
        params.update(kwargs)

        logger.debug(f"Sending request to {self.model} ({len(params['messages'])} messages)")

        try:
            response = await client.messages.create(**params)
        except anthropic.AuthenticationError as e:
            raise AuthenticationError(
                f"Claude authentication failed: {e}",
                provider="claude",
                status_code=401
            ) from e
        except anthropic.RateLimitError as e:
            raise RateLimitError(
                f"Claude rate limit exceeded: {e}",
                provider="claude",
                status_code=429
            ) from e
        except anthropic.NotFoundError as e:
            raise ModelNotFoundError(
                f"Model not found: {self.model}",
                provider="claude",
                status_code=404
            ) from e
        except anthropic.APIStatusError as e:
            raise LLMError(
                f"Claude API error: {e.message}",
                provider="claude",
                status_code=e.status_code
            ) from e
        except anthropic.APIConnectionError as e:
            raise LLMError(f"Claude API unreachable: {e}", provider="claude") from e

        return self._parse_response(response)

    def _parse_response(self, response: Any) -> LLMResponse:
        """Parse the Claude API response."""
        texts = [block.text for block in response.content if block.type == "text"]
        if not texts:
            raise LLMError("no content in Claude response", provider="claude")

        usage = None
        if getattr(response, "usage", None) is not None:
            usage = TokenUsage(
                input_tokens=response.usage.input_tokens,
                output_tokens=response.usage.output_tokens,
            )

        return LLMResponse(
            content=texts[0],
            stop_reason=response.stop_reason or "end_turn",
            usage=usage,
            model=response.model,
        )

    def get_name(self) -> str:
        """Get the provider name."""
        return "claude"

    def get_default_model(self) -> str:
        """Get the default model."""
        return self.DEFAULT_MODEL

    def validate_config(self) -> bool:
        """Validate the provider configuration."""
        if not self.api_key:
            raise CredentialMissingError(
                f"{self.api_key_env} environment variable not set",
                provider="claude"
            )
        return True
