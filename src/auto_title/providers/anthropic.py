"""
Anthropic messages API provider.
"""

from __future__ import annotations

from typing import Any

from .base import BaseProvider, nested_error_message
from .types import GenerationRequest, GenerationResponse

ANTHROPIC_MESSAGES_URL = "https://api.anthropic.com/v1/messages"
ANTHROPIC_VERSION = "2023-06-01"


class AnthropicProvider(BaseProvider):
    """Anthropic (api.anthropic.com) backend."""

    @property
    def name(self) -> str:
        return "Anthropic"

    def is_configured(self) -> bool:
        return len(self.config.anthropic_api_key) > 0

    async def generate_titles(self, request: GenerationRequest) -> GenerationResponse:
        result = await self._post(
            ANTHROPIC_MESSAGES_URL,
            headers={
                "Content-Type": "application/json",
                "x-api-key": self.config.anthropic_api_key,
                "anthropic-version": ANTHROPIC_VERSION,
            },
            body={
                "model": self.config.anthropic_model,
                "max_tokens": 200,
                "messages": [{"role": "user", "content": self.build_prompt(request)}],
            },
        )

        error = nested_error_message(result.payload)
        if result.status_code != 200 or error:
            return self._error_response(error)

        return GenerationResponse(
            suggestions=self.parse_title_response(
                _first_text_block(result.payload), request.suggestion_count
            ),
            tokens_used=_token_total(result.payload),
        )


def _first_text_block(payload: Any) -> str:
    try:
        return payload["content"][0].get("text") or ""
    except (KeyError, IndexError, TypeError, AttributeError):
        return ""


def _token_total(payload: Any) -> int | None:
    if not isinstance(payload, dict):
        return None
    usage = payload.get("usage") or {}
    return (usage.get("input_tokens") or 0) + (usage.get("output_tokens") or 0)
