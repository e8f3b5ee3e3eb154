"""
Title generation on top of the configured provider.
"""

from __future__ import annotations

import logging

import httpx

from ..config import Config, ProviderConfig
from ..errors import GenerationError, ProviderNotConfiguredError
from ..providers import BaseProvider, GenerationRequest, create_provider

logger = logging.getLogger(__name__)


class TitleGenerator:
    """
    Holds the current provider and turns responses into suggestions.

    update_provider() swaps in a new provider built from a new snapshot;
    a generation already running keeps the provider it started with.
    """

    def __init__(self, config: Config, transport: httpx.AsyncBaseTransport | None = None):
        self.config = config
        self._transport = transport
        self.provider: BaseProvider = create_provider(config.provider, transport)

    @property
    def provider_name(self) -> str:
        return self.provider.name

    def update_provider(self, provider_config: ProviderConfig) -> None:
        """Replace the provider after a settings change."""
        self.provider = create_provider(provider_config, self._transport)
        logger.info("Provider set to %s", self.provider.name)

    async def generate_titles(self, content: str) -> list[str]:
        """
        Generate title suggestions for content.

        Raises:
            ProviderNotConfiguredError: Missing key/endpoint (no request made)
            GenerationError: Backend error field or no usable suggestions
            AuthenticationError, TransientServiceError: From the executor
        """
        provider = self.provider
        if not provider.is_configured():
            raise ProviderNotConfiguredError(
                f"{provider.name} is not configured. Please add your API key in settings."
            )

        generation = self.config.generation
        request = GenerationRequest(
            content=content,
            style=generation.style,
            max_length=generation.max_title_length,
            suggestion_count=generation.suggestion_count,
        )
        response = await provider.generate_titles(request)

        if response.error:
            raise GenerationError(response.error)
        if not response.suggestions:
            raise GenerationError("No title suggestions generated. Try adding more content.")

        logger.debug(
            "%s returned %d suggestion(s), tokens=%s",
            provider.name,
            len(response.suggestions),
            response.tokens_used,
        )
        return response.suggestions

    async def test_connection(self) -> bool:
        """Check that the current provider configuration works."""
        return await self.provider.test_connection()
