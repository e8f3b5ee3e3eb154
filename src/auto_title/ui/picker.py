"""
Suggestion picker.

The "wait for the user" step is an explicit request/response object
(PickRequest) with three outcomes: PENDING, SELECTED, CANCELLED.
"""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum

logger = logging.getLogger(__name__)


class PickStatus(str, Enum):
    PENDING = "PENDING"
    SELECTED = "SELECTED"
    CANCELLED = "CANCELLED"


@dataclass
class PickResult:
    """Outcome of a pick request."""

    status: PickStatus
    title: str | None = None


@dataclass
class Choice:
    """One row in the picker."""

    title: str
    index: int  # -1 for free text typed by the user
    is_custom: bool = False


def rank_choices(suggestions: list[str], query: str = "") -> list[Choice]:
    """
    Order picker rows for a query.

    Typed free text comes first, followed by the suggestions containing
    the query (case-insensitive), in their original order.
    """
    query = query.strip()
    choices: list[Choice] = []

    if query:
        choices.append(Choice(title=query, index=-1, is_custom=True))

    for index, title in enumerate(suggestions):
        if not query or query.lower() in title.lower():
            choices.append(Choice(title=title, index=index))

    return choices


class PickRequest:
    """A pending question to the user. Resolves exactly once."""

    def __init__(self, suggestions: list[str]):
        self.suggestions = list(suggestions)
        self._future: asyncio.Future[PickResult] = asyncio.get_running_loop().create_future()

    @property
    def status(self) -> PickStatus:
        if not self._future.done():
            return PickStatus.PENDING
        return self._future.result().status

    def select(self, title: str) -> bool:
        """Resolve with a title. Returns False if already resolved."""
        if self._future.done():
            return False
        self._future.set_result(PickResult(PickStatus.SELECTED, title))
        return True

    def cancel(self) -> bool:
        """Resolve without a choice. Returns False if already resolved."""
        if self._future.done():
            return False
        self._future.set_result(PickResult(PickStatus.CANCELLED))
        return True

    async def wait(self, timeout: float | None = None) -> PickResult:
        """
        Wait for the user.

        Returns a PENDING result if timeout elapses first; the request
        stays open and can still be resolved later.
        """
        if timeout is None:
            return await self._future
        try:
            return await asyncio.wait_for(asyncio.shield(self._future), timeout)
        except asyncio.TimeoutError:
            return PickResult(PickStatus.PENDING)


class TitlePicker(ABC):
    """UI surface presenting suggestions."""

    @abstractmethod
    def present(self, suggestions: list[str]) -> PickRequest:
        """Show suggestions; must tolerate zero, one, or many."""
        pass

    def notify(self, message: str) -> None:
        """Show a short message to the user."""
        logger.info(message)


class ConsolePicker(TitlePicker):
    """
    Numbered list on stdout, answer on stdin.

    Prompts are asked one at a time in presentation order; a request
    presented while another is open waits for it to resolve.
    """

    PROMPT = "Pick a number, type your own title, or press Enter to skip: "

    def __init__(self) -> None:
        self._tasks: set[asyncio.Task] = set()
        self._last: asyncio.Task | None = None

    def present(self, suggestions: list[str]) -> PickRequest:
        request = PickRequest(suggestions)
        task = asyncio.get_running_loop().create_task(self._ask_after(self._last, request))
        self._last = task
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return request

    def notify(self, message: str) -> None:
        print(message)

    async def _ask_after(self, previous: asyncio.Task | None, request: PickRequest) -> None:
        if previous is not None and not previous.done():
            await asyncio.wait([previous])
        try:
            await self._ask(request)
        finally:
            # No-op if answered; never leave the caller waiting
            request.cancel()

    async def _ask(self, request: PickRequest) -> None:
        print("\nTitle suggestions:")
        for choice in rank_choices(request.suggestions):
            print(f"  {choice.index + 1}. {choice.title}")

        while True:
            try:
                answer = await asyncio.to_thread(input, self.PROMPT)
            except (EOFError, KeyboardInterrupt):
                request.cancel()
                return

            answer = answer.strip()
            if not answer:
                request.cancel()
                return

            if answer.isdigit():
                number = int(answer)
                if 1 <= number <= len(request.suggestions):
                    request.select(request.suggestions[number - 1])
                    return
                print(f"No suggestion {number}; pick 1-{len(request.suggestions)}.")
                continue

            request.select(rank_choices(request.suggestions, answer)[0].title)
            return
