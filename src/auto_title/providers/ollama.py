"""
Ollama provider (local, LAN, or remote server).
"""

from __future__ import annotations

from .base import BaseProvider
from .types import GenerationRequest, GenerationResponse


class OllamaProvider(BaseProvider):
    """Ollama /api/generate backend (non-streaming)."""

    @property
    def name(self) -> str:
        return "Ollama"

    def is_configured(self) -> bool:
        return len(self.config.ollama_endpoint) > 0 and len(self.config.ollama_model) > 0

    async def generate_titles(self, request: GenerationRequest) -> GenerationResponse:
        base_url = self.config.ollama_endpoint.rstrip("/")

        result = await self._post(
            f"{base_url}/api/generate",
            headers={"Content-Type": "application/json"},
            body={
                "model": self.config.ollama_model,
                "prompt": self.build_prompt(request),
                "stream": False,
            },
        )

        payload = result.payload if isinstance(result.payload, dict) else {}
        error = payload.get("error")
        if result.status_code != 200 or error:
            return self._error_response(str(error) if error else None)

        return GenerationResponse(
            suggestions=self.parse_title_response(
                payload.get("response") or "", request.suggestion_count
            ),
        )
