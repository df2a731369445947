"""
Adapter lookup by provider name.

Factories import their provider SDK lazily, so only the SDK for the
configured provider has to be installed.

Example:
    from umlstudio.adapters.registry import create_adapter

    adapter = create_adapter(StudioConfig(provider="anthropic"))
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING

from umlstudio.logging import get_logger

if TYPE_CHECKING:
    from umlstudio.adapters.base import LLMAdapter
    from umlstudio.config import StudioConfig

logger = get_logger("adapters.registry")

# Type for adapter factory functions: (config) -> LLMAdapter
AdapterFactory = Callable[["StudioConfig"], "LLMAdapter"]


def _create_openai(config: StudioConfig) -> LLMAdapter:
    from umlstudio.adapters.openai import OpenAIAdapter

    return OpenAIAdapter(
        model=config.resolved_model,
        temperature=config.temperature,
        max_tokens=config.max_tokens,
        timeout=config.request_timeout_seconds,
    )


def _create_anthropic(config: StudioConfig) -> LLMAdapter:
    from umlstudio.adapters.anthropic import AnthropicAdapter

    return AnthropicAdapter(
        model=config.resolved_model,
        temperature=config.temperature,
        max_tokens=config.max_tokens,
        timeout=config.request_timeout_seconds,
    )


_FACTORIES: dict[str, AdapterFactory] = {
    "openai": _create_openai,
    "anthropic": _create_anthropic,
}


def available_providers() -> list[str]:
    """Names of all registered providers."""
    return sorted(_FACTORIES)


def create_adapter(config: StudioConfig) -> LLMAdapter:
    """
    Create the adapter for ``config.provider``.

    Raises:
        ValueError: If no factory is registered for the provider
    """
    factory = _FACTORIES.get(config.provider)
    if factory is None:
        raise ValueError(
            f"Unknown provider: {config.provider!r} "
            f"(available: {', '.join(available_providers())})"
        )
    logger.debug("Creating %s adapter (model=%s)", config.provider, config.resolved_model)
    return factory(config)
