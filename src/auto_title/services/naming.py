"""
Turning free-text titles into file names.

- sanitize_filename: file-system-safe name from a title
- resolve_unique_path: deterministic " 1", " 2", ... suffix on collision
- TitleApplier: rename and/or front matter patch through the store
"""

from __future__ import annotations

import logging
import re
from collections.abc import Awaitable, Callable
from pathlib import PurePosixPath

from ..errors import NamingError
from ..vault.store import NOTE_SUFFIX, DocumentStore

logger = logging.getLogger(__name__)

# Characters invalid in file names on at least one common platform
FORBIDDEN_CHARS_RE = re.compile(r'[\\/:*?"<>|]')
# Any run of whitespace and dashes; a lone "-" inside a word survives
SEPARATOR_RUN_RE = re.compile(r"[\s-]+")
EDGE_RE = re.compile(r"^[.\s-]+|[.\s-]+$")

MAX_FILENAME_LENGTH = 200


def sanitize_filename(title: str, max_length: int = MAX_FILENAME_LENGTH) -> str:
    """
    Make a title safe to use as a file name.

    Forbidden characters become spaces. Every run of whitespace and dashes
    collapses to one space, except a single "-" between two characters
    ("Self-hosted"). Leading/trailing dots, dashes and whitespace are
    removed and the length is capped. May return "" (title made only of
    forbidden characters).
    """
    name = FORBIDDEN_CHARS_RE.sub(" ", title)
    name = SEPARATOR_RUN_RE.sub(_collapse_separator, name)
    name = EDGE_RE.sub("", name)
    return EDGE_RE.sub("", name[:max_length])


def _collapse_separator(match: re.Match) -> str:
    return "-" if match.group(0) == "-" else " "


async def resolve_unique_path(path: str, exists: Callable[[str], Awaitable[bool]]) -> str:
    """
    Return path if free, else the first free "<stem> <n>.md" for n = 1, 2, ...

    Terminates because the store holds finitely many documents.
    """
    if not await exists(path):
        return path

    base = path[: -len(NOTE_SUFFIX)] if path.lower().endswith(NOTE_SUFFIX) else path
    counter = 1
    while True:
        candidate = f"{base} {counter}{NOTE_SUFFIX}"
        if not await exists(candidate):
            return candidate
        counter += 1


class TitleApplier:
    """Applies a chosen title to a note."""

    def __init__(self, store: DocumentStore, max_filename_length: int = MAX_FILENAME_LENGTH):
        self.store = store
        self.max_filename_length = max_filename_length

    async def rename_with_title(
        self, identifier: str, title: str, update_front_matter: bool
    ) -> str:
        """
        Rename a note after its title, then optionally set front matter.

        The rename comes first: a failed rename leaves the note untouched,
        so it still reads as untitled and can be retried.

        Returns:
            New identifier (unchanged if the note already has that name)

        Raises:
            NamingError: Title yields an empty file name
            StoreError: Store rejected the rename or patch
        """
        name = sanitize_filename(title, self.max_filename_length)
        if not name:
            raise NamingError(f"Title {title!r} has no characters usable in a file name")

        folder = PurePosixPath(identifier).parent
        new_path = (folder / f"{name}{NOTE_SUFFIX}").as_posix()
        new_identifier = identifier
        if new_path != identifier:
            new_path = await resolve_unique_path(new_path, self.store.exists)
            new_identifier = await self.store.rename(identifier, new_path)

        if update_front_matter:
            await self.store.patch_metadata(new_identifier, "title", title)
        return new_identifier

    async def update_front_matter_only(self, identifier: str, title: str) -> None:
        """Set the front matter title without renaming."""
        await self.store.patch_metadata(identifier, "title", title)
