"""Exception classes for blockdoc.

Every failure reported to a caller is a BlockDocError subclass carrying a
short machine-readable ``code`` alongside the human message. Parsing and
serialization never raise; only structural edit parameters and the storage
collaborator produce errors.
"""

from __future__ import annotations


class BlockDocError(Exception):
    """Base exception for all blockdoc errors.

    Subclass this for specific error categories.
    """

    code = "blockdoc_error"

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)

    def to_dict(self) -> dict[str, str]:
        """Structured form of the error for caller-facing responses."""
        return {"code": self.code, "message": self.message}


class DocumentNotFoundError(BlockDocError):
    """The document id does not resolve to a stored document."""

    code = "not_found"

    def __init__(self, document_id: object) -> None:
        self.document_id = document_id
        super().__init__(f"Document {document_id!r} not found.")


class MissingFieldError(BlockDocError):
    """A payload field required by the requested operation is absent.

    The code follows the field name (``missing_content``, ``missing_index``).
    """

    def __init__(self, field: str, operation: str | None = None) -> None:
        """Initialize missing field error.

        Args:
            field: Name of the absent field ("content", "index", ...)
            operation: Operation that required it (optional)
        """
        self.field = field
        self.operation = operation
        self.code = f"missing_{field}"

        suffix = f" for {operation}" if operation else ""
        super().__init__(f"The {field} field is required{suffix}.")


class InvalidFieldError(BlockDocError):
    """A payload field is present but has an unusable value."""

    code = "invalid_field"

    def __init__(self, field: str, message: str) -> None:
        self.field = field
        super().__init__(f"Invalid {field}: {message}")


class IndexOutOfRangeError(BlockDocError):
    """Remove/replace index does not address an existing top-level block."""

    code = "invalid_index"

    def __init__(self, index: int, length: int) -> None:
        self.index = index
        self.length = length
        super().__init__(
            f"Block index out of range: {index} (document has {length} blocks)."
        )


class StorageError(BlockDocError):
    """The storage collaborator failed to load or persist a document.

    The underlying exception, if any, is chained as ``__cause__``.
    """

    code = "storage_error"

    def __init__(self, document_id: object, message: str) -> None:
        self.document_id = document_id
        super().__init__(f"Document {document_id!r}: {message}")
