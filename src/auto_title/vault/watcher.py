"""
Filesystem change stream for a vault, built on watchdog.

The observer runs in its own thread; events are handed to the asyncio loop
with call_soon_threadsafe so tracking state is only touched on the loop.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from pathlib import Path
from typing import Any

from watchdog.events import FileSystemEventHandler
from watchdog.observers import Observer

from .store import NOTE_SUFFIX, FilesystemDocumentStore

logger = logging.getLogger(__name__)


class NoteEventHandler(FileSystemEventHandler):
    """Forwards created/modified events for Markdown notes to the loop."""

    def __init__(
        self,
        store: FilesystemDocumentStore,
        on_change: Callable[[str], None],
        loop: asyncio.AbstractEventLoop,
    ):
        self.store = store
        self.on_change = on_change
        self.loop = loop

    def on_modified(self, event: Any) -> None:
        self._forward(event)

    def on_created(self, event: Any) -> None:
        self._forward(event)

    def _forward(self, event: Any) -> None:
        if event.is_directory:
            return
        path = Path(event.src_path)
        if path.suffix.lower() != NOTE_SUFFIX:
            return
        try:
            identifier = self.store.identifier_for(path)
        except ValueError:
            # Outside the vault (symlink target)
            return
        if self.loop.is_closed():
            return
        self.loop.call_soon_threadsafe(self.on_change, identifier)


class ConfigFileHandler(FileSystemEventHandler):
    """Forwards writes to a single config file to the loop."""

    def __init__(
        self,
        path: Path,
        on_change: Callable[[], None],
        loop: asyncio.AbstractEventLoop,
    ):
        self.path = Path(path).resolve()
        self.on_change = on_change
        self.loop = loop

    def on_modified(self, event: Any) -> None:
        self._forward(event, event.src_path)

    def on_created(self, event: Any) -> None:
        self._forward(event, event.src_path)

    def on_moved(self, event: Any) -> None:
        # Editors that save through a temp file end with a move onto the target
        self._forward(event, event.dest_path)

    def _forward(self, event: Any, path: str) -> None:
        if event.is_directory or Path(path).resolve() != self.path:
            return
        if self.loop.is_closed():
            return
        self.loop.call_soon_threadsafe(self.on_change)


class VaultWatcher:
    """Recursive watch over the vault root."""

    def __init__(
        self,
        store: FilesystemDocumentStore,
        on_change: Callable[[str], None],
        loop: asyncio.AbstractEventLoop,
    ):
        self.store = store
        self.loop = loop
        self.handler = NoteEventHandler(store, on_change, loop)
        self._observer: Observer | None = None

    def start(self) -> None:
        self._observer = Observer()
        self._observer.schedule(self.handler, str(self.store.root), recursive=True)
        self._observer.start()
        logger.info("Watching %s", self.store.root)

    def watch_config(self, path: Path, on_change: Callable[[], None]) -> None:
        """Also report writes to the config file, on the running observer."""
        if self._observer is None:
            raise RuntimeError("watch_config() needs a started watcher")
        handler = ConfigFileHandler(path, on_change, self.loop)
        # Non-recursive watch on the parent: the file itself may be replaced
        self._observer.schedule(handler, str(handler.path.parent), recursive=False)
        logger.info("Reloading settings when %s changes", handler.path)

    def stop(self) -> None:
        if self._observer is None:
            return
        self._observer.stop()
        self._observer.join(timeout=5)
        self._observer = None
