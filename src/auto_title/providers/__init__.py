"""
Generation backends.

Provides:
- One provider per backend family (OpenAI, Anthropic, Ollama, custom)
- Shared prompt template and response parsing
- Retrying executor (429/5xx backoff, 401 short-circuit)
- Factory selecting the provider from configuration
"""

from .base import BaseProvider
from .executor import ExecutionResult, RetryingExecutor
from .factory import create_provider
from .types import GenerationRequest, GenerationResponse

__all__ = [
    "BaseProvider",
    "ExecutionResult",
    "GenerationRequest",
    "GenerationResponse",
    "RetryingExecutor",
    "create_provider",
]
