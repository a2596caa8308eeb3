"""
LLM Provider Implementations

Concrete implementations of LLMProvider:
- ClaudeProvider: Anthropic's Claude models via API
"""

from .claude import ClaudeProvider

__all__ = [
    "ClaudeProvider",
]
