"""Prompt template for title generation.

Shared by every provider; only the request envelope differs per backend.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from ..config import TitleStyle
from .types import GenerationRequest

# v1.0: numbered plain-text list, file-name-safe characters
PROMPT_VERSION = "v1.0"

# Content beyond this many characters is not sent
MAX_PROMPT_CONTENT_CHARS = 4000

STYLE_INSTRUCTIONS = {
    TitleStyle.CONCISE: "Create short, punchy titles (3-6 words)",
    TitleStyle.DESCRIPTIVE: "Create detailed titles that summarize the main topic",
    TitleStyle.QUESTION: "Create titles as questions that the content answers",
    TitleStyle.ACTION: "Create action-oriented titles starting with verbs",
}


@dataclass
class TitlePrompt:
    """Prompt template for title suggestions.

    Attributes:
        version: Prompt version.
        system_prompt: System message for chat-style backends.
        user_template: Template for the user message.
    """

    version: str = PROMPT_VERSION

    system_prompt: str = (
        "You are a helpful assistant that generates concise, descriptive note titles."
    )

    user_template: str = """Generate {count} title suggestions for the following note content.

Requirements:
- {style_instruction}
- Maximum {max_length} characters each
- Return ONLY the titles, one per line, numbered 1-{count}
- No markdown formatting, no quotes around titles
- Titles should be suitable as file names (avoid special characters like : / \\ ? * " < > |)

Content:
{content}"""

    style_instructions: dict = field(default_factory=lambda: dict(STYLE_INSTRUCTIONS))

    def format_user_message(self, request: GenerationRequest) -> str:
        """Format the user message for a request.

        Args:
            request: Generation request (content is truncated).

        Returns:
            Formatted prompt text.
        """
        return self.user_template.format(
            count=request.suggestion_count,
            style_instruction=self.style_instructions[TitleStyle(request.style)],
            max_length=request.max_length,
            content=request.content[:MAX_PROMPT_CONTENT_CHARS],
        )
