"""
Debounced activity tracking for notes.

Turns a noisy stream of modification events into at most one evaluation per
quiet period per note, and enforces single-flight generation per note.

Flow per identifier:
    on_change -> DEBOUNCING (timer re-armed on every event)
    timer fires -> EVALUATING (re-read note, re-check eligibility/threshold)
    threshold met -> GENERATION_IN_FLIGHT -> on_ready(identifier, body)
    orchestrator reports -> PROCESSED | ERRORED | cleared (IDLE)

Runs on a single asyncio event loop; no locks are needed.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from pathlib import PurePosixPath

from ..config import MonitorConfig
from ..detection import EligibilityClassifier, count_words, strip_front_matter
from ..errors import DocumentNotFoundError
from ..vault.store import DocumentStore
from .registry import BLOCKING_STATES, BUSY_STATES, TrackingRegistry, TrackingState

logger = logging.getLogger(__name__)

OnReady = Callable[[str, str], Awaitable[None]]


class ActivityTracker:
    """
    Per-note debounce timers and state machine.

    The tracker owns no global state: all entries live in the registry
    passed in (or created) for this monitoring session.
    """

    def __init__(
        self,
        store: DocumentStore,
        classifier: EligibilityClassifier,
        settings: MonitorConfig,
        on_ready: OnReady | None = None,
        registry: TrackingRegistry | None = None,
    ):
        """
        Initialize the tracker.

        Args:
            store: Document store used to re-read notes at fire time
            classifier: Untitled-name classifier
            settings: Monitor configuration (debounce, thresholds)
            on_ready: Coroutine called once a note is ready for generation
            registry: Tracking registry for this session
        """
        self.store = store
        self.classifier = classifier
        self.settings = settings
        self.on_ready = on_ready
        self.registry = registry if registry is not None else TrackingRegistry()
        self.enabled = settings.enabled

        self._loop: asyncio.AbstractEventLoop | None = None
        self._running = False
        self._closed = False
        self._tasks: set[asyncio.Task] = set()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        """Start accepting change events. Must run on the event loop."""
        self._loop = loop or asyncio.get_running_loop()
        self._running = True
        self._closed = False
        logger.info(
            "Monitoring started (debounce=%.1fs, threshold=%d words)",
            self.settings.debounce_seconds,
            self.settings.content_threshold_words,
        )

    def stop(self) -> None:
        """
        Cancel all pending timers and forget tracking state.

        Generations already in flight run to completion; their completion
        callbacks become no-ops.
        """
        self._running = False
        self._closed = True
        self.registry.reset()
        logger.info("Monitoring stopped")

    def set_enabled(self, enabled: bool) -> None:
        self.enabled = enabled

    def update_patterns(self, patterns: list[str]) -> None:
        """Swap in a freshly compiled classifier."""
        self.classifier = EligibilityClassifier(patterns)

    async def wait_idle(self) -> None:
        """Wait for evaluation tasks started so far."""
        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    def on_change(self, identifier: str) -> None:
        """Handle one modification event for a note."""
        if not self._running or not self.enabled:
            return

        if self.registry.state_of(identifier) in BLOCKING_STATES:
            return

        if not self.classifier.is_eligible(PurePosixPath(identifier).name):
            return

        entry = self.registry.get_or_create(identifier)
        entry.cancel_timer()
        entry.pending_timer = self._loop.call_later(
            self.settings.debounce_seconds, self._fire, identifier
        )
        entry.state = TrackingState.DEBOUNCING
        entry.last_scheduled_at = self._loop.time()
        logger.debug("Debouncing %s", identifier)

    def _fire(self, identifier: str) -> None:
        entry = self.registry.get(identifier)
        if entry is None or entry.state != TrackingState.DEBOUNCING:
            return

        entry.pending_timer = None
        entry.state = TrackingState.EVALUATING
        task = self._loop.create_task(self._evaluate(identifier))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _evaluate(self, identifier: str) -> None:
        try:
            body = await self._check_threshold(identifier)
        except Exception:
            logger.exception("Error checking threshold for %s", identifier)
            self.registry.discard(identifier)
            return

        if body is None:
            return

        entry = self.registry.get(identifier)
        if entry is None or entry.state != TrackingState.EVALUATING:
            # Stopped or cleared while reading
            return

        entry.state = TrackingState.GENERATION_IN_FLIGHT
        logger.info("Threshold reached for %s", identifier)

        if self.on_ready is None:
            self.clear(identifier)
            return

        try:
            await self.on_ready(identifier, body)
        except Exception:
            logger.exception("Title generation failed for %s", identifier)
            self.clear(identifier)

    async def _check_threshold(self, identifier: str) -> str | None:
        """
        Re-verify a note at fire time.

        Returns:
            Body without front matter if generation should start, else None
        """
        try:
            document = await self.store.read(identifier)
        except DocumentNotFoundError:
            logger.debug("%s vanished before evaluation", identifier)
            self.registry.discard(identifier)
            return None

        if self.registry.state_of(identifier) != TrackingState.EVALUATING:
            return None

        if not self.classifier.is_eligible(document.name):
            self.registry.discard(identifier)
            return None

        if self.classifier.has_declared_title(document.content):
            self.mark_processed(identifier)
            return None

        body = strip_front_matter(document.content)
        if count_words(body) < self.settings.content_threshold_words:
            self.registry.discard(identifier)
            return None

        return body

    # ------------------------------------------------------------------
    # Completion reporting and manual claims
    # ------------------------------------------------------------------

    def mark_processed(self, identifier: str) -> None:
        """Mark a note as handled. Idempotent."""
        if self._closed:
            logger.debug("Ignoring mark_processed(%s) after stop", identifier)
            return
        entry = self.registry.get_or_create(identifier)
        entry.cancel_timer()
        entry.state = TrackingState.PROCESSED

    def mark_errored(self, identifier: str) -> None:
        """Block automatic attempts until cleared (e.g. rejected credentials)."""
        if self._closed:
            return
        entry = self.registry.get_or_create(identifier)
        entry.cancel_timer()
        entry.state = TrackingState.ERRORED

    def clear(self, identifier: str) -> None:
        """Release a note back to IDLE so a future burst can retry."""
        if self._closed:
            logger.debug("Ignoring clear(%s) after stop", identifier)
            return
        self.registry.discard(identifier)

    def clear_errored(self) -> int:
        """Release every ERRORED note. Returns how many were released."""
        errored = [i for i, e in self.registry.items() if e.state == TrackingState.ERRORED]
        for identifier in errored:
            self.registry.discard(identifier)
        return len(errored)

    def mark_in_progress(self, identifier: str) -> bool:
        """
        Claim the single-flight lock for a manual generation.

        Returns:
            False if an evaluation or generation is already running
        """
        if self._closed or self.is_in_progress(identifier):
            return False
        entry = self.registry.get_or_create(identifier)
        entry.cancel_timer()
        entry.state = TrackingState.GENERATION_IN_FLIGHT
        return True

    def is_in_progress(self, identifier: str) -> bool:
        return self.registry.state_of(identifier) in BUSY_STATES

    def state_of(self, identifier: str) -> TrackingState:
        return self.registry.state_of(identifier)
