"""Document storage collaborators.

The block model never interprets document ids; it loads the current text
at the start of an edit and stores the new text at the end. Two stores
are provided:

- InMemoryDocumentStore: dict-backed, for tests and embedding
- DirectoryDocumentStore: one UTF-8 file per document

Ids may be strings or integers. Both stores key documents by ``str(id)``,
so ``7`` and ``"7"`` name the same document.

Concurrency:
    Each load/store call is atomic, but an edit is a read-modify-write
    across two calls with no version token. Two concurrent edits of the
    same document race and the last store wins.

"""

from __future__ import annotations

import os
import tempfile
import threading
from collections.abc import Mapping
from pathlib import Path
from typing import Protocol

from blockdoc.errors import DocumentNotFoundError, StorageError
from blockdoc.utils.logger import get_logger

logger = get_logger(__name__)

DocumentId = str | int


class DocumentStore(Protocol):
    """Protocol for document text storage."""

    def load(self, document_id: DocumentId) -> str:
        """Return the stored text.

        Raises:
            DocumentNotFoundError: The id does not resolve
            StorageError: The backend failed
        """
        ...

    def store(self, document_id: DocumentId, text: str) -> None:
        """Persist new text for an existing or new document.

        Raises:
            StorageError: The backend failed
        """
        ...


class InMemoryDocumentStore:
    """Dict-backed document store.

    Individual calls are serialized by a lock; read-modify-write cycles
    across calls are last-write-wins.
    """

    __slots__ = ("_documents", "_lock")

    def __init__(self, documents: Mapping[DocumentId, str] | None = None) -> None:
        self._documents: dict[str, str] = {
            str(key): text for key, text in (documents or {}).items()
        }
        self._lock = threading.Lock()

    def __contains__(self, document_id: object) -> bool:
        with self._lock:
            return str(document_id) in self._documents

    def load(self, document_id: DocumentId) -> str:
        with self._lock:
            try:
                return self._documents[str(document_id)]
            except KeyError:
                raise DocumentNotFoundError(document_id) from None

    def store(self, document_id: DocumentId, text: str) -> None:
        with self._lock:
            self._documents[str(document_id)] = text


class DirectoryDocumentStore:
    """File-per-document store rooted at a directory.

    Document ``abc`` lives at ``<root>/abc.html``. Writes go through a
    temporary file and ``os.replace`` so readers never see partial text.
    """

    __slots__ = ("_root", "_suffix")

    def __init__(self, root: str | os.PathLike[str], *, suffix: str = ".html") -> None:
        self._root = Path(root)
        self._suffix = suffix

    @property
    def root(self) -> Path:
        return self._root

    def _path(self, document_id: DocumentId) -> Path:
        name = str(document_id)
        # Ids are plain names; anything that could leave the root is unknown
        if not name or name in {".", ".."} or any(sep in name for sep in ("/", "\\", "\0")):
            raise DocumentNotFoundError(document_id)
        return self._root / f"{name}{self._suffix}"

    def load(self, document_id: DocumentId) -> str:
        path = self._path(document_id)
        try:
            return path.read_bytes().decode("utf-8")
        except FileNotFoundError:
            raise DocumentNotFoundError(document_id) from None
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Failed to load %s: %s", path, e)
            raise StorageError(document_id, f"load failed: {e}") from e

    def store(self, document_id: DocumentId, text: str) -> None:
        path = self._path(document_id)
        try:
            # Encoded before any temp file exists
            data = text.encode("utf-8")
        except UnicodeEncodeError as e:
            logger.warning("Cannot store %s as UTF-8: %s", path, e)
            raise StorageError(document_id, f"store failed: {e}") from e
        try:
            self._root.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self._root, prefix=".", suffix=".tmp")
            try:
                with os.fdopen(fd, "wb") as f:
                    f.write(data)
                os.replace(tmp_name, path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            logger.warning("Failed to store %s: %s", path, e)
            raise StorageError(document_id, f"store failed: {e}") from e
        logger.debug("Stored %d characters to %s", len(text), path)


__all__ = [
    "DirectoryDocumentStore",
    "DocumentId",
    "DocumentStore",
    "InMemoryDocumentStore",
]
