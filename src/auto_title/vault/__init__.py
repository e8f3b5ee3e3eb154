"""
Vault access.

Provides:
- DocumentStore interface (read, rename, patch front matter, exists)
- Filesystem implementation for Markdown notes
- watchdog-based change stream
"""

from .store import Document, DocumentStore, FilesystemDocumentStore
from .watcher import VaultWatcher

__all__ = [
    "Document",
    "DocumentStore",
    "FilesystemDocumentStore",
    "VaultWatcher",
]
