"""
Tests for the title orchestrator.

Uses the in-memory store, a picker that answers immediately and a stub
generator, so each test exercises one path through
content check -> generate -> mark processed -> pick -> apply.
"""

import asyncio
from dataclasses import replace

import pytest

from auto_title.config import Config, FileHandlingConfig
from auto_title.detection import EligibilityClassifier
from auto_title.errors import (
    AuthenticationError,
    GenerationError,
    ProviderConnectionError,
    StoreError,
)
from auto_title.services import Outcome, TitleOrchestrator
from auto_title.tracking import ActivityTracker, TrackingState
from auto_title.vault import FilesystemDocumentStore

from conftest import SAMPLE_NOTE, FakePicker, InMemoryDocumentStore, StubGenerator

ID = "Notes/Untitled.md"
RENAMED = "Notes/Billing Migration Plan.md"


class RenameFailingStore(FilesystemDocumentStore):
    async def rename(self, identifier: str, new_path: str) -> str:
        raise StoreError("disk is read-only")


def make_orchestrator(store, generator, picker, config) -> TitleOrchestrator:
    tracker = ActivityTracker(
        store,
        EligibilityClassifier(config.monitor.untitled_patterns),
        config.monitor,
    )
    orchestrator = TitleOrchestrator(tracker, generator, store, picker, config)
    tracker.on_ready = orchestrator.handle_ready
    return orchestrator


@pytest.fixture
def orchestrator(store, generator, picker, config) -> TitleOrchestrator:
    return make_orchestrator(store, generator, picker, config)


class TestHappyPath:
    """Tests for a successful generate-and-apply."""

    def test_selection_renames_and_marks_processed(self, orchestrator, store, picker, generator):
        result = asyncio.run(orchestrator.generate_for_document(ID))

        assert result.outcome == Outcome.APPLIED
        assert result.identifier == RENAMED
        assert result.title == "Billing Migration Plan"
        assert RENAMED in store.notes
        assert ID not in store.notes
        assert store.patches == [(RENAMED, "title", "Billing Migration Plan")]

        tracker = orchestrator.tracker
        assert tracker.state_of(RENAMED) == TrackingState.PROCESSED
        assert tracker.state_of(ID) == TrackingState.IDLE

        assert generator.calls == [SAMPLE_NOTE.strip()]
        assert picker.presented == [["Billing Migration Plan"]]
        assert picker.messages == ["Renamed to: Billing Migration Plan"]

    def test_result_serializes(self, orchestrator):
        result = asyncio.run(orchestrator.generate_for_document(ID))
        assert result.to_dict() == {
            "outcome": "APPLIED",
            "identifier": RENAMED,
            "title": "Billing Migration Plan",
            "error": None,
        }

    def test_name_collision_gets_suffix(self, generator, picker, config):
        store = InMemoryDocumentStore({ID: SAMPLE_NOTE, RENAMED: "existing"})
        orchestrator = make_orchestrator(store, generator, picker, config)

        result = asyncio.run(orchestrator.generate_for_document(ID))

        assert result.identifier == "Notes/Billing Migration Plan 1.md"
        assert store.notes[RENAMED] == "existing"

    def test_front_matter_only(self, store, generator, picker, config):
        config = replace(config, files=FileHandlingConfig(rename_file=False))
        orchestrator = make_orchestrator(store, generator, picker, config)

        result = asyncio.run(orchestrator.generate_for_document(ID))

        assert result.outcome == Outcome.APPLIED
        assert result.identifier == ID
        assert ID in store.notes
        assert store.patches == [(ID, "title", "Billing Migration Plan")]
        assert picker.messages == ["Title set to: Billing Migration Plan"]
        assert orchestrator.tracker.state_of(ID) == TrackingState.PROCESSED

    def test_rename_without_front_matter(self, store, generator, picker, config):
        config = replace(config, files=FileHandlingConfig(update_front_matter_title=False))
        orchestrator = make_orchestrator(store, generator, picker, config)

        asyncio.run(orchestrator.generate_for_document(ID))

        assert store.patches == []
        assert RENAMED in store.notes

    def test_notifications_disabled(self, store, generator, picker, config):
        config = replace(config, show_notifications=False)
        orchestrator = make_orchestrator(store, generator, picker, config)

        asyncio.run(orchestrator.generate_for_document(ID))

        assert picker.messages == []

    def test_automatic_path(self, orchestrator, store):
        """Debounced change flows through handle_ready to a rename."""

        async def scenario():
            tracker = orchestrator.tracker
            tracker.start()
            tracker.on_change(ID)
            await asyncio.sleep(0.15)
            await tracker.wait_idle()

        asyncio.run(scenario())

        assert RENAMED in store.notes
        assert orchestrator.tracker.state_of(RENAMED) == TrackingState.PROCESSED


class TestPickerOutcomes:
    """Tests for user responses."""

    def test_cancel_leaves_note_processed(self, store, generator, config):
        picker = FakePicker(choice=None)
        orchestrator = make_orchestrator(store, generator, picker, config)

        result = asyncio.run(orchestrator.generate_for_document(ID))

        assert result.outcome == Outcome.CANCELLED
        assert ID in store.notes
        assert orchestrator.tracker.state_of(ID) == TrackingState.PROCESSED

    def test_processed_before_picker_shown(self, orchestrator, picker):
        seen = []
        picker.on_present = lambda: seen.append(orchestrator.tracker.state_of(ID))

        asyncio.run(orchestrator.generate_for_document(ID))

        assert seen == [TrackingState.PROCESSED]

    def test_custom_title(self, store, generator, config):
        picker = FakePicker(choice="  Queue cutover: phase 1 ")
        orchestrator = make_orchestrator(store, generator, picker, config)

        result = asyncio.run(orchestrator.generate_for_document(ID))

        assert result.title == "Queue cutover: phase 1"
        assert result.identifier == "Notes/Queue cutover phase 1.md"


class TestFailures:
    """Tests for error handling and lock release."""

    def test_not_enough_content(self, generator, picker, config):
        store = InMemoryDocumentStore({ID: "---\ntags: [a]\n---\nToo short."})
        orchestrator = make_orchestrator(store, generator, picker, config)

        result = asyncio.run(orchestrator.generate_for_document(ID))

        assert result.outcome == Outcome.NOT_ENOUGH_CONTENT
        assert generator.calls == []
        assert orchestrator.tracker.state_of(ID) == TrackingState.IDLE
        assert picker.messages == ["Not enough content to generate a title. Add more text first."]

    def test_generation_error_releases_note(self, store, picker, config):
        generator = StubGenerator(error=GenerationError("No title suggestions generated."))
        orchestrator = make_orchestrator(store, generator, picker, config)

        result = asyncio.run(orchestrator.generate_for_document(ID))

        assert result.outcome == Outcome.FAILED
        assert result.error == "No title suggestions generated."
        assert picker.presented == []
        assert orchestrator.tracker.state_of(ID) == TrackingState.IDLE
        assert picker.messages == ["Auto Title Error: No title suggestions generated."]

    def test_transient_error_releases_note(self, store, picker, config):
        generator = StubGenerator(error=ProviderConnectionError("Connection refused"))
        orchestrator = make_orchestrator(store, generator, picker, config)

        result = asyncio.run(orchestrator.generate_for_document(ID))

        assert result.outcome == Outcome.FAILED
        assert orchestrator.tracker.state_of(ID) == TrackingState.IDLE

    def test_authentication_error_marks_errored(self, store, picker, config):
        generator = StubGenerator(error=AuthenticationError("Invalid API key."))
        orchestrator = make_orchestrator(store, generator, picker, config)

        result = asyncio.run(orchestrator.generate_for_document(ID))

        assert result.outcome == Outcome.FAILED
        assert orchestrator.tracker.state_of(ID) == TrackingState.ERRORED

        orchestrator.update_config(Config(monitor=config.monitor))

        assert orchestrator.tracker.state_of(ID) == TrackingState.IDLE
        assert len(generator.updated) == 1

    def test_unexpected_error_releases_and_propagates(self, store, picker, config):
        generator = StubGenerator(error=RuntimeError("boom"))
        orchestrator = make_orchestrator(store, generator, picker, config)

        with pytest.raises(RuntimeError):
            asyncio.run(orchestrator.generate_for_document(ID))

        assert orchestrator.tracker.state_of(ID) == TrackingState.IDLE

    def test_rename_failure_rolls_back(self, orchestrator, store, picker):
        store.fail_rename = True

        result = asyncio.run(orchestrator.generate_for_document(ID))

        assert result.outcome == Outcome.APPLY_FAILED
        assert result.error == "store unavailable"
        assert orchestrator.tracker.state_of(ID) == TrackingState.IDLE
        assert picker.messages == ["Failed to apply title: store unavailable"]

    def test_failed_rename_leaves_note_retryable(self, tmp_path, generator, picker, config):
        """After a failed rename the next burst generates again."""
        (tmp_path / "Notes").mkdir()
        (tmp_path / "Notes" / "Untitled.md").write_text(SAMPLE_NOTE, encoding="utf-8")
        store = RenameFailingStore(tmp_path)
        orchestrator = make_orchestrator(store, generator, picker, config)

        async def scenario():
            result = await orchestrator.generate_for_document(ID)
            tracker = orchestrator.tracker
            tracker.start()
            tracker.on_change(ID)
            await asyncio.sleep(0.15)
            await tracker.wait_idle()
            return result

        result = asyncio.run(scenario())

        assert result.outcome == Outcome.APPLY_FAILED
        assert (tmp_path / "Notes" / "Untitled.md").read_text(encoding="utf-8") == SAMPLE_NOTE
        assert len(generator.calls) == 2

    def test_unusable_title(self, store, generator, config):
        picker = FakePicker(choice="///")
        orchestrator = make_orchestrator(store, generator, picker, config)

        result = asyncio.run(orchestrator.generate_for_document(ID))

        assert result.outcome == Outcome.APPLY_FAILED
        assert store.patches == []
        assert ID in store.notes
        assert orchestrator.tracker.state_of(ID) == TrackingState.IDLE

    def test_missing_note(self, orchestrator):
        result = asyncio.run(orchestrator.generate_for_document("Notes/Gone.md"))

        assert result.outcome == Outcome.FAILED
        assert orchestrator.tracker.state_of("Notes/Gone.md") == TrackingState.IDLE


class TestManualPath:
    """Tests for manual generation and regeneration."""

    def test_skipped_while_in_flight(self, orchestrator, generator):
        orchestrator.tracker.mark_in_progress(ID)

        result = asyncio.run(orchestrator.generate_for_document(ID))

        assert result.outcome == Outcome.SKIPPED
        assert generator.calls == []

    def test_force_on_processed_note(self, orchestrator, generator):
        orchestrator.tracker.mark_processed(ID)

        result = asyncio.run(orchestrator.generate_for_document(ID, force=True))

        assert result.outcome == Outcome.APPLIED
        assert len(generator.calls) == 1

    def test_force_on_errored_note(self, orchestrator, generator):
        orchestrator.tracker.mark_errored(ID)

        result = asyncio.run(orchestrator.generate_for_document(ID, force=True))

        assert result.outcome == Outcome.APPLIED

    def test_force_never_breaks_single_flight(self, orchestrator, generator):
        orchestrator.tracker.mark_in_progress(ID)

        result = asyncio.run(orchestrator.generate_for_document(ID, force=True))

        assert result.outcome == Outcome.SKIPPED
        assert orchestrator.tracker.is_in_progress(ID)

    def test_update_config_swaps_patterns_and_enabled(self, orchestrator, config):
        new_monitor = replace(config.monitor, enabled=False, untitled_patterns=["Draft"])

        orchestrator.update_config(replace(config, monitor=new_monitor))

        assert orchestrator.tracker.enabled is False
        assert orchestrator.tracker.classifier.is_eligible("Draft")
        assert not orchestrator.tracker.classifier.is_eligible("Untitled")
