"""
End-to-end title generation for one note.

Runs only while the note holds the single-flight lock in the tracker:
    content floor -> generate -> mark processed -> picker -> apply

Failure handling:
- Not enough content, domain/transient errors: lock released (clear)
- Rejected credentials: note marked ERRORED until reconfiguration
- Apply failures: processed mark rolled back (clear) so the user can retry
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

from ..config import Config
from ..detection import strip_front_matter
from ..errors import AuthenticationError, AutoTitleError, NamingError, StoreError
from ..tracking import ActivityTracker, TrackingState
from ..ui import PickStatus, TitlePicker
from ..vault.store import DocumentStore
from .generator import TitleGenerator
from .naming import TitleApplier

logger = logging.getLogger(__name__)


class Outcome(str, Enum):
    """How one orchestration attempt ended."""

    APPLIED = "APPLIED"
    CANCELLED = "CANCELLED"
    NOT_ENOUGH_CONTENT = "NOT_ENOUGH_CONTENT"
    FAILED = "FAILED"
    APPLY_FAILED = "APPLY_FAILED"
    SKIPPED = "SKIPPED"


@dataclass
class OrchestrationResult:
    """Result of one attempt."""

    outcome: Outcome
    identifier: str
    title: str | None = None
    error: str | None = None

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "outcome": self.outcome.value,
            "identifier": self.identifier,
            "title": self.title,
            "error": self.error,
        }


class TitleOrchestrator:
    """
    Composes tracker, generator, picker and store.

    handle_ready() is the tracker's on_ready callback (lock already held);
    generate_for_document() is the manual path and claims the lock itself.
    """

    def __init__(
        self,
        tracker: ActivityTracker,
        generator: TitleGenerator,
        store: DocumentStore,
        picker: TitlePicker,
        config: Config,
        applier: TitleApplier | None = None,
    ):
        self.tracker = tracker
        self.generator = generator
        self.store = store
        self.picker = picker
        self.config = config
        self.applier = applier or TitleApplier(store)

    def update_config(self, config: Config) -> None:
        """
        Apply new settings.

        The provider is replaced (never mutated), patterns recompiled, and
        notes blocked by a credentials error are released.
        """
        self.config = config
        self.generator.config = config
        self.generator.update_provider(config.provider)
        self.tracker.update_patterns(config.monitor.untitled_patterns)
        self.tracker.set_enabled(config.monitor.enabled)
        released = self.tracker.clear_errored()
        if released:
            logger.info("Released %d note(s) after reconfiguration", released)

    async def handle_ready(self, identifier: str, body: str) -> None:
        await self._run_locked(identifier, body)

    async def generate_for_document(self, identifier: str, force: bool = False) -> OrchestrationResult:
        """
        Manually generate a title for one note.

        Args:
            identifier: Note identifier
            force: Regenerate even if the note was already processed
        """
        if force and self.tracker.state_of(identifier) in (
            TrackingState.PROCESSED,
            TrackingState.ERRORED,
        ):
            self.tracker.clear(identifier)

        if not self.tracker.mark_in_progress(identifier):
            logger.debug("Generation already running for %s", identifier)
            return OrchestrationResult(Outcome.SKIPPED, identifier)

        try:
            document = await self.store.read(identifier)
        except StoreError as e:
            self.tracker.clear(identifier)
            self._notify(f"Auto Title Error: {e}")
            return OrchestrationResult(Outcome.FAILED, identifier, error=str(e))

        return await self._run_locked(identifier, strip_front_matter(document.content))

    async def _run_locked(self, identifier: str, body: str) -> OrchestrationResult:
        if len(body) < self.config.monitor.min_content_chars:
            self._notify("Not enough content to generate a title. Add more text first.")
            self.tracker.clear(identifier)
            return OrchestrationResult(Outcome.NOT_ENOUGH_CONTENT, identifier)

        try:
            suggestions = await self.generator.generate_titles(body)
        except AuthenticationError as e:
            logger.error("Credentials rejected while generating for %s: %s", identifier, e)
            self._notify(f"Auto Title Error: {e}")
            self.tracker.mark_errored(identifier)
            return OrchestrationResult(Outcome.FAILED, identifier, error=str(e))
        except AutoTitleError as e:
            logger.warning("Title generation failed for %s (%s): %s", identifier, e.category, e)
            self._notify(f"Auto Title Error: {e}")
            self.tracker.clear(identifier)
            return OrchestrationResult(Outcome.FAILED, identifier, error=str(e))
        except Exception:
            self.tracker.clear(identifier)
            raise

        # Before the picker: dismissing it must not re-trigger on the next edit
        self.tracker.mark_processed(identifier)

        request = self.picker.present(suggestions)
        result = await request.wait()

        if result.status != PickStatus.SELECTED or result.title is None:
            logger.info("No title chosen for %s", identifier)
            return OrchestrationResult(Outcome.CANCELLED, identifier)

        return await self.apply_title(identifier, result.title)

    async def apply_title(self, identifier: str, title: str) -> OrchestrationResult:
        """Rename and/or set front matter per configuration."""
        title = title.strip()
        files = self.config.files
        new_identifier = identifier

        try:
            if not title:
                raise NamingError("Title is empty")

            if files.rename_file:
                new_identifier = await self.applier.rename_with_title(
                    identifier, title, files.update_front_matter_title
                )
                if new_identifier != identifier:
                    self.tracker.clear(identifier)
                    self.tracker.mark_processed(new_identifier)
                self._notify(f"Renamed to: {title}")
            elif files.update_front_matter_title:
                await self.applier.update_front_matter_only(identifier, title)
                self._notify(f"Title set to: {title}")
        except (NamingError, StoreError) as e:
            logger.error("Failed to apply title to %s: %s", identifier, e)
            self._notify(f"Failed to apply title: {e}")
            self.tracker.clear(identifier)
            return OrchestrationResult(Outcome.APPLY_FAILED, identifier, title=title, error=str(e))

        return OrchestrationResult(Outcome.APPLIED, new_identifier, title=title)

    def _notify(self, message: str) -> None:
        if self.config.show_notifications:
            self.picker.notify(message)
