"""Tests for the filesystem document store."""

import asyncio

import pytest
import yaml

from auto_title.errors import DocumentNotFoundError, StoreError
from auto_title.vault import FilesystemDocumentStore

from conftest import SAMPLE_NOTE, SAMPLE_NOTE_WITH_FRONT_MATTER


@pytest.fixture
def vault(tmp_path):
    notes = tmp_path / "Notes"
    notes.mkdir()
    (notes / "Untitled.md").write_text(SAMPLE_NOTE, encoding="utf-8")
    (notes / "Untitled 2.md").write_text(SAMPLE_NOTE_WITH_FRONT_MATTER, encoding="utf-8")
    return tmp_path


@pytest.fixture
def fs_store(vault) -> FilesystemDocumentStore:
    return FilesystemDocumentStore(vault)


class TestRead:
    """Tests for reading notes."""

    def test_read(self, fs_store):
        document = asyncio.run(fs_store.read("Notes/Untitled.md"))
        assert document.identifier == "Notes/Untitled.md"
        assert document.name == "Untitled"
        assert document.content == SAMPLE_NOTE
        assert document.modified_at > 0

    def test_missing(self, fs_store):
        with pytest.raises(DocumentNotFoundError):
            asyncio.run(fs_store.read("Notes/Nope.md"))

    def test_escape_rejected(self, fs_store):
        with pytest.raises(StoreError, match="escapes vault"):
            asyncio.run(fs_store.read("../outside.md"))

    def test_identifier_for(self, fs_store, vault):
        assert fs_store.identifier_for(vault / "Notes" / "Untitled.md") == "Notes/Untitled.md"
        assert fs_store.identifier_for("Notes/Untitled.md") == "Notes/Untitled.md"

    def test_identifier_outside_vault(self, fs_store, tmp_path_factory):
        elsewhere = tmp_path_factory.mktemp("elsewhere") / "x.md"
        with pytest.raises(ValueError):
            fs_store.identifier_for(elsewhere)


class TestRename:
    """Tests for renaming notes."""

    def test_rename(self, fs_store, vault):
        new_id = asyncio.run(fs_store.rename("Notes/Untitled.md", "Notes/Billing plan.md"))

        assert new_id == "Notes/Billing plan.md"
        assert (vault / "Notes" / "Billing plan.md").read_text(encoding="utf-8") == SAMPLE_NOTE
        assert not (vault / "Notes" / "Untitled.md").exists()

    def test_rename_refuses_overwrite(self, fs_store, vault):
        with pytest.raises(StoreError, match="already exists"):
            asyncio.run(fs_store.rename("Notes/Untitled.md", "Notes/Untitled 2.md"))
        assert (vault / "Notes" / "Untitled.md").exists()

    def test_rename_missing(self, fs_store):
        with pytest.raises(DocumentNotFoundError):
            asyncio.run(fs_store.rename("Notes/Nope.md", "Notes/Other.md"))

    def test_exists(self, fs_store):
        assert asyncio.run(fs_store.exists("Notes/Untitled.md"))
        assert not asyncio.run(fs_store.exists("Notes/Nope.md"))


class TestPatchMetadata:
    """Tests for front matter updates."""

    def read_front_matter(self, path):
        content = path.read_text(encoding="utf-8")
        _, block, body = content.split("---\n", 2)
        return yaml.safe_load(block), body

    def test_creates_block(self, fs_store, vault):
        asyncio.run(fs_store.patch_metadata("Notes/Untitled.md", "title", "Billing: plan"))

        front_matter, body = self.read_front_matter(vault / "Notes" / "Untitled.md")
        assert front_matter == {"title": "Billing: plan"}
        assert body == SAMPLE_NOTE

    def test_preserves_existing_fields(self, fs_store, vault):
        asyncio.run(fs_store.patch_metadata("Notes/Untitled 2.md", "title", "Billing plan"))

        front_matter, body = self.read_front_matter(vault / "Notes" / "Untitled 2.md")
        assert front_matter == {"tags": ["meeting"], "title": "Billing plan"}
        assert body == SAMPLE_NOTE

    def test_overwrites_title(self, fs_store, vault):
        asyncio.run(fs_store.patch_metadata("Notes/Untitled 2.md", "title", "First"))
        asyncio.run(fs_store.patch_metadata("Notes/Untitled 2.md", "title", "Second"))

        front_matter, _ = self.read_front_matter(vault / "Notes" / "Untitled 2.md")
        assert front_matter["title"] == "Second"

    def test_invalid_front_matter(self, fs_store, vault):
        (vault / "Bad.md").write_text("---\n- a\n- b\n---\nbody\n", encoding="utf-8")
        with pytest.raises(StoreError, match="not a mapping"):
            asyncio.run(fs_store.patch_metadata("Bad.md", "title", "x"))

    def test_empty_block_replaced_in_place(self, fs_store, vault):
        (vault / "Empty.md").write_text("---\n---\nBody text\n", encoding="utf-8")

        asyncio.run(fs_store.patch_metadata("Empty.md", "title", "X"))

        assert (vault / "Empty.md").read_text(encoding="utf-8") == "---\ntitle: X\n---\nBody text\n"

    def test_horizontal_rule_in_body_untouched(self, fs_store, vault):
        (vault / "Rule.md").write_text("---\n---\nIntro\n---\nMore\n", encoding="utf-8")

        asyncio.run(fs_store.patch_metadata("Rule.md", "title", "X"))

        assert (vault / "Rule.md").read_text(encoding="utf-8") == "---\ntitle: X\n---\nIntro\n---\nMore\n"
