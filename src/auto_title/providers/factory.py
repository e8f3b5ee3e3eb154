"""
Provider factory: selects the concrete backend from configuration.
"""

from __future__ import annotations

import httpx

from ..config import ProviderConfig, ProviderType
from ..errors import ConfigValidationError
from .anthropic import AnthropicProvider
from .base import BaseProvider
from .custom import CustomProvider
from .ollama import OllamaProvider
from .openai import OpenAIProvider

PROVIDERS: dict[ProviderType, type[BaseProvider]] = {
    ProviderType.OPENAI: OpenAIProvider,
    ProviderType.ANTHROPIC: AnthropicProvider,
    ProviderType.OLLAMA: OllamaProvider,
    ProviderType.CUSTOM: CustomProvider,
}


def create_provider(
    config: ProviderConfig, transport: httpx.AsyncBaseTransport | None = None
) -> BaseProvider:
    """
    Build the provider selected in config.

    Raises:
        ConfigValidationError: Unknown provider type
    """
    try:
        provider_cls = PROVIDERS[ProviderType(config.selected)]
    except ValueError as e:
        raise ConfigValidationError(f"Unknown provider: {config.selected}") from e
    return provider_cls(config, transport=transport)
