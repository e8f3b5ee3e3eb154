"""
Per-document tracking state.

One TrackingEntry per document identifier, owned by a TrackingRegistry that
lives exactly as long as one monitoring session.
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterator
from dataclasses import dataclass
from enum import Enum


class TrackingState(str, Enum):
    """Lifecycle of one document within a monitoring session.

    PROCESSED and ERRORED are terminal until an explicit clear.
    """

    IDLE = "IDLE"
    DEBOUNCING = "DEBOUNCING"
    EVALUATING = "EVALUATING"
    GENERATION_IN_FLIGHT = "GENERATION_IN_FLIGHT"
    PROCESSED = "PROCESSED"
    ERRORED = "ERRORED"


# States in which change events are ignored
BLOCKING_STATES = frozenset(
    {
        TrackingState.EVALUATING,
        TrackingState.GENERATION_IN_FLIGHT,
        TrackingState.PROCESSED,
        TrackingState.ERRORED,
    }
)

# States holding the single-flight lock
BUSY_STATES = frozenset({TrackingState.EVALUATING, TrackingState.GENERATION_IN_FLIGHT})


@dataclass
class TrackingEntry:
    """Tracking state for one document."""

    state: TrackingState = TrackingState.IDLE
    pending_timer: asyncio.TimerHandle | None = None
    last_scheduled_at: float | None = None

    def cancel_timer(self) -> None:
        if self.pending_timer is not None:
            self.pending_timer.cancel()
            self.pending_timer = None


class TrackingRegistry:
    """
    Arena of tracking entries keyed by document identifier.

    Guarantees at most one entry per identifier. Missing identifiers read
    as IDLE.
    """

    def __init__(self) -> None:
        self._entries: dict[str, TrackingEntry] = {}

    def get(self, identifier: str) -> TrackingEntry | None:
        return self._entries.get(identifier)

    def get_or_create(self, identifier: str) -> TrackingEntry:
        entry = self._entries.get(identifier)
        if entry is None:
            entry = TrackingEntry()
            self._entries[identifier] = entry
        return entry

    def state_of(self, identifier: str) -> TrackingState:
        entry = self._entries.get(identifier)
        return entry.state if entry else TrackingState.IDLE

    def discard(self, identifier: str) -> None:
        """Drop an entry (back to IDLE), cancelling its timer."""
        entry = self._entries.pop(identifier, None)
        if entry is not None:
            entry.cancel_timer()

    def reset(self) -> None:
        """Cancel every pending timer and forget all entries."""
        for entry in self._entries.values():
            entry.cancel_timer()
        self._entries.clear()

    def items(self) -> Iterator[tuple[str, TrackingEntry]]:
        return iter(list(self._entries.items()))

    def __contains__(self, identifier: object) -> bool:
        return identifier in self._entries

    def __len__(self) -> int:
        return len(self._entries)
