"""Test fixtures and utilities."""

from pathlib import PurePosixPath
from typing import Any

import pytest

from auto_title.config import Config, MonitorConfig
from auto_title.errors import DocumentNotFoundError, StoreError
from auto_title.ui import PickRequest, TitlePicker
from auto_title.vault.store import Document, DocumentStore

SAMPLE_NOTE = """Met with the platform team today to walk through the migration plan
for the billing service. We agreed to move the nightly invoice job onto the
new queue first, then cut over the webhook consumers once the retry policy is
in place. Open questions: who owns the dead letter queue, and do we need a
feature flag for the partial rollout?
"""

SAMPLE_NOTE_WITH_FRONT_MATTER = """---
tags: [meeting]
---
""" + SAMPLE_NOTE

SAMPLE_NOTE_WITH_TITLE = """---
title: Billing migration plan
tags: [meeting]
---
""" + SAMPLE_NOTE


class InMemoryDocumentStore(DocumentStore):
    """Dict-backed store: identifier -> content."""

    def __init__(self, notes: dict[str, str] | None = None):
        self.notes = dict(notes or {})
        self.patches: list[tuple[str, str, Any]] = []
        self.reads: list[str] = []
        self.fail_rename = False

    async def read(self, identifier: str) -> Document:
        self.reads.append(identifier)
        if identifier not in self.notes:
            raise DocumentNotFoundError(identifier)
        return Document(
            identifier=identifier,
            name=PurePosixPath(identifier).stem,
            content=self.notes[identifier],
            modified_at=0.0,
        )

    async def rename(self, identifier: str, new_path: str) -> str:
        if self.fail_rename:
            raise StoreError("store unavailable")
        self.notes[new_path] = self.notes.pop(identifier)
        return new_path

    async def patch_metadata(self, identifier: str, field: str, value: Any) -> None:
        self.patches.append((identifier, field, value))

    async def exists(self, path: str) -> bool:
        return path in self.notes


class FakePicker(TitlePicker):
    """Resolves immediately with choice (None = cancel)."""

    def __init__(self, choice: str | None = None):
        self.choice = choice
        self.presented: list[list[str]] = []
        self.messages: list[str] = []
        self.on_present = None

    def present(self, suggestions: list[str]) -> PickRequest:
        self.presented.append(list(suggestions))
        if self.on_present:
            self.on_present()
        request = PickRequest(suggestions)
        if self.choice is None:
            request.cancel()
        else:
            request.select(self.choice)
        return request

    def notify(self, message: str) -> None:
        self.messages.append(message)


class StubGenerator:
    """Stands in for TitleGenerator."""

    def __init__(self, suggestions: list[str] | None = None, error: Exception | None = None):
        self.suggestions = suggestions if suggestions is not None else ["Billing Migration Plan"]
        self.error = error
        self.calls: list[str] = []
        self.updated = []
        self.config = None

    async def generate_titles(self, content: str) -> list[str]:
        self.calls.append(content)
        if self.error:
            raise self.error
        return list(self.suggestions)

    def update_provider(self, provider_config) -> None:
        self.updated.append(provider_config)


@pytest.fixture
def store() -> InMemoryDocumentStore:
    """Store holding one untitled note."""
    return InMemoryDocumentStore({"Notes/Untitled.md": SAMPLE_NOTE})


@pytest.fixture
def picker() -> FakePicker:
    return FakePicker(choice="Billing Migration Plan")


@pytest.fixture
def generator() -> StubGenerator:
    return StubGenerator()


@pytest.fixture
def monitor_config() -> MonitorConfig:
    """Fast debounce, low threshold."""
    return MonitorConfig(debounce_seconds=0.05, content_threshold_words=10)


@pytest.fixture
def config(monitor_config: MonitorConfig) -> Config:
    return Config(monitor=monitor_config)
