"""
OpenAI chat completions provider.
"""

from __future__ import annotations

from typing import Any

from .base import BaseProvider, nested_error_message
from .types import GenerationRequest, GenerationResponse

OPENAI_CHAT_URL = "https://api.openai.com/v1/chat/completions"


def chat_completion_body(model: str, system_prompt: str, user_message: str) -> dict[str, Any]:
    """Request body for OpenAI-compatible chat completion endpoints."""
    return {
        "model": model,
        "messages": [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_message},
        ],
        "max_tokens": 200,
        "temperature": 0.7,
    }


def chat_completion_text(payload: Any) -> str:
    """Text of the first choice, or "" if the shape is unexpected."""
    try:
        return payload["choices"][0]["message"]["content"] or ""
    except (KeyError, IndexError, TypeError):
        return ""


def chat_completion_tokens(payload: Any) -> int | None:
    if not isinstance(payload, dict):
        return None
    return (payload.get("usage") or {}).get("total_tokens")


class OpenAIProvider(BaseProvider):
    """OpenAI (api.openai.com) backend."""

    @property
    def name(self) -> str:
        return "OpenAI"

    def is_configured(self) -> bool:
        return len(self.config.openai_api_key) > 0

    async def generate_titles(self, request: GenerationRequest) -> GenerationResponse:
        result = await self._post(
            OPENAI_CHAT_URL,
            headers={
                "Content-Type": "application/json",
                "Authorization": f"Bearer {self.config.openai_api_key}",
            },
            body=chat_completion_body(
                self.config.openai_model, self.prompt.system_prompt, self.build_prompt(request)
            ),
        )

        error = nested_error_message(result.payload)
        if result.status_code != 200 or error:
            return self._error_response(error)

        return GenerationResponse(
            suggestions=self.parse_title_response(
                chat_completion_text(result.payload), request.suggestion_count
            ),
            tokens_used=chat_completion_tokens(result.payload),
        )
