"""
LLM Factory

Factory pattern for creating LLM provider instances based on configuration.
Supports registration of custom providers and configuration validation.
"""

from typing import TYPE_CHECKING, Any

from .base import LLMError, LLMProvider

if TYPE_CHECKING:
    from ..settings.models import Settings

# Type alias for provider classes
ProviderClass = type[LLMProvider]


class LLMFactory:
    """
    Factory for creating LLM provider instances.

    Example:
        # Create a Claude provider
        llm = LLMFactory.create("claude", api_key="sk-...")

        # Register a custom provider
        LLMFactory.register("custom", CustomProvider)
    """

    # Registry of provider classes
    _providers: dict[str, ProviderClass] = {}

    # Default configuration for providers
    _default_configs: dict[str, dict[str, Any]] = {
        "claude": {
            "model": "claude-3-sonnet-20240229",
            "max_tokens": 4000,
            "timeout": 30.0,
        },
    }

    @classmethod
    def register(cls, name: str, provider_class: ProviderClass) -> None:
        """
        Register a provider class.

        Args:
            name: Provider name (e.g., "claude")
            provider_class: Provider class to register
        """
        cls._providers[name.lower()] = provider_class

    @classmethod
    def unregister(cls, name: str) -> None:
        """
        Unregister a provider.

        Args:
            name: Provider name to unregister
        """
        cls._providers.pop(name.lower(), None)

    @classmethod
    def create(
        cls,
        provider: str,
        api_key: str | None = None,
        model: str | None = None,
        **kwargs: Any
    ) -> LLMProvider:
        """
        Create an LLM provider instance.

        Args:
            provider: Provider name
            api_key: API key for authentication
            model: Model identifier (uses provider default if not specified)
            **kwargs: Additional provider-specific configuration

        Returns:
            LLMProvider instance

        Raises:
            LLMError: If the provider is not supported, or creation or validation fails
        """
        provider_name = provider.lower()

        # Apply default configuration
        config = cls._default_configs.get(provider_name, {}).copy()
        config.update(kwargs)

        if model:
            config["model"] = model

        try:
            provider_class = cls._get_provider_class(provider_name)
            instance = provider_class(api_key=api_key, **config)
            instance.validate_config()
            return instance
        except LLMError:
            raise
        except Exception as e:
            raise LLMError(
                f"Failed to create {provider_name} provider: {e}",
                provider=provider_name
            ) from e

    @classmethod
    def _get_provider_class(cls, provider_name: str) -> ProviderClass:
        """
        Get the provider class for a provider name.

        Raises:
            ValueError: If provider is not supported
        """
        if provider_name in cls._providers:
            return cls._providers[provider_name]

        # Lazy import built-in providers
        if provider_name == "claude":
            from .providers.claude import ClaudeProvider
            cls._providers["claude"] = ClaudeProvider
            return ClaudeProvider

        raise ValueError(
            f"Unknown provider: {provider_name}. "
            f"Supported: {cls.get_supported_providers()}"
        )

    @classmethod
    def get_supported_providers(cls) -> list[str]:
        """Get list of supported provider names."""
        return sorted(set(["claude"] + list(cls._providers.keys())))

    @classmethod
    def create_from_settings(cls, settings: "Settings") -> LLMProvider:
        """
        Create a provider from a Settings object.

        Args:
            settings: Settings with provider, model and request limits

        Returns:
            LLMProvider instance
        """
        return cls.create(
            provider=settings.provider,
            model=settings.model or None,
            max_tokens=settings.max_tokens,
            timeout=float(settings.timeout_seconds),
            api_key_env=settings.api_key_env,
        )
