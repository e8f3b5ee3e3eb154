"""
Base provider interface and shared request/response handling.
"""

from __future__ import annotations

import logging
import re
from abc import ABC, abstractmethod
from typing import Any

import httpx

from ..config import ProviderConfig, TitleStyle
from .executor import ExecutionResult, RetryingExecutor
from .prompts import TitlePrompt
from .types import GenerationRequest, GenerationResponse

logger = logging.getLogger(__name__)

MAX_SUGGESTION_CHARS = 100

# "1. Title", "2) Title", "- Title", "* Title", "• Title"
LEADING_MARKER_RE = re.compile(r"^\s*(?:\d+[.)]|[-*•])\s*")
WRAPPING_QUOTES_RE = re.compile(r"^[\"']|[\"']$")

CONNECTION_TEST_REQUEST = GenerationRequest(
    content="This is a test note about testing connections to AI services.",
    style=TitleStyle.CONCISE,
    max_length=50,
    suggestion_count=1,
)


class BaseProvider(ABC):
    """
    Base class for all generation backends.

    Each provider implements:
    - is_configured: local check of required fields (no I/O)
    - generate_titles: backend-specific envelope, normalized response

    Providers are built from one frozen ProviderConfig and never observe
    later configuration changes.
    """

    def __init__(
        self,
        config: ProviderConfig,
        transport: httpx.AsyncBaseTransport | None = None,
        executor: RetryingExecutor | None = None,
    ):
        """
        Initialize provider.

        Args:
            config: Provider configuration snapshot
            transport: Optional httpx transport (mock transport in tests)
            executor: Retry policy; built from config when omitted
        """
        self.config = config
        self._transport = transport
        self.executor = executor or RetryingExecutor(
            max_attempts=config.max_attempts,
            base_delay=config.backoff_base_seconds,
        )
        self.prompt = TitlePrompt()

    @property
    @abstractmethod
    def name(self) -> str:
        """Provider name for logging and user messages."""
        pass

    @abstractmethod
    def is_configured(self) -> bool:
        """Check required fields locally. Never performs network I/O."""
        pass

    @abstractmethod
    async def generate_titles(self, request: GenerationRequest) -> GenerationResponse:
        """Request title suggestions for the given content."""
        pass

    async def test_connection(self) -> bool:
        """
        Issue one minimal real request.

        Returns:
            True if the backend produced a suggestion, False on any failure
        """
        try:
            result = await self.generate_titles(CONNECTION_TEST_REQUEST)
            return result.ok
        except Exception as e:
            logger.warning("%s connection test failed: %s", self.name, e)
            return False

    def build_prompt(self, request: GenerationRequest) -> str:
        return self.prompt.format_user_message(request)

    def parse_title_response(self, text: str, expected_count: int) -> list[str]:
        """
        Turn raw model output into clean suggestions.

        Strips numbering/bullets and wrapping quotes, drops empty and
        oversize lines, keeps at most expected_count.
        """
        titles = []
        for line in text.split("\n"):
            line = LEADING_MARKER_RE.sub("", line).strip()
            line = WRAPPING_QUOTES_RE.sub("", line).strip()
            if 0 < len(line) <= MAX_SUGGESTION_CHARS:
                titles.append(line)
        return titles[:expected_count]

    async def _post(self, url: str, headers: dict[str, str], body: dict[str, Any]) -> ExecutionResult:
        """POST JSON through the retrying executor."""
        async with httpx.AsyncClient(
            timeout=httpx.Timeout(self.config.timeout_seconds, connect=10.0),
            transport=self._transport,
        ) as client:

            async def call() -> httpx.Response:
                return await client.post(url, headers=headers, json=body)

            logger.debug("%s: POST %s", self.name, url)
            return await self.executor.execute(call)

    @staticmethod
    def _error_response(message: str | None) -> GenerationResponse:
        return GenerationResponse(suggestions=[], error=message or "Unknown error")


def nested_error_message(payload: Any) -> str | None:
    """Extract {"error": {"message": ...}} (or a bare string) from a payload."""
    if not isinstance(payload, dict):
        return None
    error = payload.get("error")
    if isinstance(error, dict):
        return error.get("message") or "Unknown error"
    if error:
        return str(error)
    return None
