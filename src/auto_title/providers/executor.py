"""
Retrying executor for outbound backend calls.

Classification per attempt:
- 429: exponential backoff, retry
- 401: AuthenticationError, never retried
- 5xx: exponential backoff, retry
- anything else: returned to the caller as-is
- transport errors: recorded, backoff, retry
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

import httpx

from ..errors import AuthenticationError, ProviderConnectionError, RetriesExhaustedError

logger = logging.getLogger(__name__)

RETRYABLE_STATUS = 429
AUTH_FAILED_STATUS = 401
SERVER_ERROR_MIN = 500


@dataclass
class ExecutionResult:
    """Payload and status of the final attempt."""

    payload: Any
    status_code: int


class RetryingExecutor:
    """
    Wraps a single outbound HTTP call with bounded exponential backoff.

    The delay before attempt n+1 is 2**n * base_delay. There is no delay
    after the final attempt.
    """

    DEFAULT_MAX_ATTEMPTS = 3

    def __init__(
        self,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        base_delay: float = 1.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """
        Initialize executor.

        Args:
            max_attempts: Total attempts, including the first one
            base_delay: Backoff base in seconds
            sleep: Awaitable sleep function (injectable for tests)
        """
        self.max_attempts = max(1, max_attempts)
        self.base_delay = base_delay
        self._sleep = sleep

    def backoff_delay(self, attempt: int) -> float:
        return (2**attempt) * self.base_delay

    async def execute(self, call: Callable[[], Awaitable[httpx.Response]]) -> ExecutionResult:
        """
        Run call until it yields a non-retryable answer.

        Raises:
            AuthenticationError: Backend answered 401
            RetriesExhaustedError: Every attempt was rate limited or a 5xx
            ProviderConnectionError: Every attempt failed on transport
        """
        last_error: Exception | None = None
        last_status: int | None = None

        for attempt in range(self.max_attempts):
            try:
                response = await call()
            except AuthenticationError:
                raise
            except (httpx.HTTPError, OSError) as e:
                last_error = e
                logger.warning(
                    "Request failed (attempt %d/%d): %s", attempt + 1, self.max_attempts, e
                )
            else:
                status = response.status_code

                if status == AUTH_FAILED_STATUS:
                    raise AuthenticationError("Invalid API key. Please check your credentials.")

                if status == RETRYABLE_STATUS or status >= SERVER_ERROR_MIN:
                    last_error = None
                    last_status = status
                    logger.warning(
                        "Backend returned %d (attempt %d/%d)", status, attempt + 1, self.max_attempts
                    )
                else:
                    return ExecutionResult(payload=_json_or_empty(response), status_code=status)

            if attempt < self.max_attempts - 1:
                delay = self.backoff_delay(attempt)
                logger.debug("Retrying in %.1fs", delay)
                await self._sleep(delay)

        if last_error is not None:
            raise ProviderConnectionError(
                f"Could not reach backend after {self.max_attempts} attempts: {last_error}"
            ) from last_error
        if last_status is not None:
            raise RetriesExhaustedError(
                f"Backend still failing after {self.max_attempts} attempts (HTTP {last_status})",
                status_code=last_status,
            )
        raise RetriesExhaustedError()


def _json_or_empty(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return {}
