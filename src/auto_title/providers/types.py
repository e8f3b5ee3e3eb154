"""
Normalized request/response contract shared by all providers.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from ..config import TitleStyle


@dataclass(frozen=True)
class GenerationRequest:
    """One title generation attempt. Built fresh per attempt."""

    content: str
    style: TitleStyle = TitleStyle.CONCISE
    max_length: int = 60
    suggestion_count: int = 3


@dataclass
class GenerationResponse:
    """Normalized backend answer.

    Either suggestions or error is the meaningful outcome. An empty
    suggestion list without an error is a soft failure for the caller.
    """

    suggestions: list[str] = field(default_factory=list)
    tokens_used: int | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and len(self.suggestions) > 0

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "suggestions": self.suggestions,
            "tokens_used": self.tokens_used,
            "error": self.error,
        }
