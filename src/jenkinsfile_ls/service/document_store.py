"""In-memory store of open documents, keyed by URI."""

from __future__ import annotations

import threading
from dataclasses import dataclass


class DocumentNotFoundError(KeyError):
    """Raised when a URI is not open in the store."""


@dataclass(frozen=True)
class DocumentSnapshot:
    """Immutable view of a document's text at the moment it was read."""

    uri: str
    content: str
    version: int  # store-local, bumped on every put
    editor_version: int | None = None  # LSP version as sent by the client


class DocumentStore:
    """URI → current text.  Thread-safe via ``threading.Lock``.

    Versions are assigned by the store and increase on every :meth:`put`,
    so they survive editors that omit or reuse LSP version numbers.
    Versions keep increasing across close/reopen of the same URI.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._documents: dict[str, DocumentSnapshot] = {}
        self._next_version = 0

    def put(self, uri: str, content: str, editor_version: int | None = None) -> None:
        """Insert or overwrite the text for *uri*."""
        with self._lock:
            self._next_version += 1
            self._documents[uri] = DocumentSnapshot(
                uri=uri,
                content=content,
                version=self._next_version,
                editor_version=editor_version,
            )

    def get(self, uri: str) -> DocumentSnapshot:
        """Return a snapshot of *uri*.

        Raises :class:`DocumentNotFoundError` if the document is not open.
        """
        with self._lock:
            snapshot = self._documents.get(uri)
        if snapshot is None:
            raise DocumentNotFoundError(f"Document '{uri}' is not open")
        return snapshot

    def remove(self, uri: str) -> None:
        """Forget *uri*; a no-op if it is not open."""
        with self._lock:
            self._documents.pop(uri, None)

    def current_version(self, uri: str) -> int | None:
        with self._lock:
            snapshot = self._documents.get(uri)
        return snapshot.version if snapshot is not None else None

    def __contains__(self, uri: object) -> bool:
        with self._lock:
            return uri in self._documents
