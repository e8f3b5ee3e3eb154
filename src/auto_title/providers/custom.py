"""
Custom OpenAI-compatible endpoint provider (LM Studio, vLLM, proxies, ...).
"""

from __future__ import annotations

from .base import BaseProvider, nested_error_message
from .openai import chat_completion_body, chat_completion_text, chat_completion_tokens
from .types import GenerationRequest, GenerationResponse


class CustomProvider(BaseProvider):
    """Any endpoint speaking the chat completions format.

    The API key is optional; the Authorization header is only sent when
    one is configured.
    """

    @property
    def name(self) -> str:
        return "Custom"

    def is_configured(self) -> bool:
        return len(self.config.custom_endpoint.strip()) > 0

    async def generate_titles(self, request: GenerationRequest) -> GenerationResponse:
        headers = {"Content-Type": "application/json"}
        if self.config.custom_api_key:
            headers["Authorization"] = f"Bearer {self.config.custom_api_key}"

        result = await self._post(
            self.config.custom_endpoint,
            headers=headers,
            body=chat_completion_body(
                self.config.custom_model, self.prompt.system_prompt, self.build_prompt(request)
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
