"""
Document store interface and filesystem implementation.

Identifiers are POSIX-style paths relative to the vault root
(e.g. "Notes/Untitled 3.md").
"""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import Any

import yaml

from ..detection.classifier import FRONT_MATTER_RE
from ..errors import DocumentNotFoundError, StoreError

logger = logging.getLogger(__name__)

NOTE_SUFFIX = ".md"


@dataclass
class Document:
    """A note as read from the store."""

    identifier: str
    name: str
    content: str
    modified_at: float


class DocumentStore(ABC):
    """
    Base class for document stores.

    All operations are coroutines; implementations may hit disk or network.
    """

    @abstractmethod
    async def read(self, identifier: str) -> Document:
        """
        Read a document.

        Raises:
            DocumentNotFoundError: If the document does not exist
        """
        pass

    @abstractmethod
    async def rename(self, identifier: str, new_path: str) -> str:
        """Move a document, returning its new identifier."""
        pass

    @abstractmethod
    async def patch_metadata(self, identifier: str, field: str, value: Any) -> None:
        """Set one front matter field, creating the block if needed."""
        pass

    @abstractmethod
    async def exists(self, path: str) -> bool:
        """Check whether a document occupies path."""
        pass


class FilesystemDocumentStore(DocumentStore):
    """Markdown notes in a directory tree."""

    def __init__(self, root: Path):
        self.root = Path(root).resolve()

    def identifier_for(self, path: Path | str) -> str:
        """Vault-relative identifier for an absolute or relative path."""
        path = Path(path)
        if path.is_absolute():
            path = path.resolve().relative_to(self.root)
        return PurePosixPath(path).as_posix()

    def _resolve(self, identifier: str) -> Path:
        path = (self.root / PurePosixPath(identifier)).resolve()
        if path != self.root and self.root not in path.parents:
            raise StoreError(f"Path escapes vault: {identifier}")
        return path

    async def read(self, identifier: str) -> Document:
        path = self._resolve(identifier)
        try:
            content = await asyncio.to_thread(path.read_text, encoding="utf-8")
            modified_at = path.stat().st_mtime
        except (FileNotFoundError, IsADirectoryError, NotADirectoryError) as e:
            raise DocumentNotFoundError(identifier) from e
        except OSError as e:
            raise StoreError(f"Failed to read {identifier}: {e}") from e

        return Document(
            identifier=identifier,
            name=path.stem,
            content=content,
            modified_at=modified_at,
        )

    async def exists(self, path: str) -> bool:
        return self._resolve(path).exists()

    async def rename(self, identifier: str, new_path: str) -> str:
        source = self._resolve(identifier)
        target = self._resolve(new_path)

        if not source.exists():
            raise DocumentNotFoundError(identifier)
        if target.exists():
            raise StoreError(f"Target already exists: {new_path}")

        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            source.rename(target)
        except OSError as e:
            raise StoreError(f"Failed to rename {identifier} -> {new_path}: {e}") from e

        new_identifier = self.identifier_for(target)
        logger.info("Renamed %s -> %s", identifier, new_identifier)
        return new_identifier

    async def patch_metadata(self, identifier: str, field: str, value: Any) -> None:
        document = await self.read(identifier)
        content = document.content

        match = FRONT_MATTER_RE.match(content)
        if match:
            block = match.group(1) or ""
            body = content[match.end():]
            try:
                front_matter = yaml.safe_load(block) or {}
            except yaml.YAMLError as e:
                raise StoreError(f"Invalid front matter in {identifier}: {e}") from e
            if not isinstance(front_matter, dict):
                raise StoreError(f"Front matter in {identifier} is not a mapping")
        else:
            front_matter = {}
            body = content

        front_matter[field] = value
        dumped = yaml.safe_dump(front_matter, sort_keys=False, allow_unicode=True)
        new_content = f"---\n{dumped}---\n{body}"

        path = self._resolve(identifier)
        try:
            await asyncio.to_thread(path.write_text, new_content, encoding="utf-8")
        except OSError as e:
            raise StoreError(f"Failed to update front matter of {identifier}: {e}") from e
        logger.debug("Set front matter %s on %s", field, identifier)
