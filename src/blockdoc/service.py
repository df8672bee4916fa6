"""Caller-facing block operations over a document store.

Two operations are exposed to an agent-facing dispatch layer:

- read:  ``{"documentId"}`` -> ``{"documentId", "blocks"}``
- edit:  ``{"documentId", "operation", "content"?, "index"?}`` -> same shape

Each call is a complete read-modify-write cycle with no carried state:
load the text, apply the edit, store it, then load again and clean, so
the returned indices always reflect what is actually stored.

Registration, permission checks and transport belong to the dispatch
layer. ``ABILITIES`` describes the two operations for it.

Example:
    >>> store = InMemoryDocumentStore({"42": "<!-- core/separator /-->"})
    >>> service = BlockDocumentService(store)
    >>> service.handle_edit({"id": "42", "operation": "remove", "index": 0}).blocks
    ()

"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from blockdoc.cleaning import read_blocks
from blockdoc.editor import EditOperation, edit_document
from blockdoc.errors import BlockDocError, InvalidFieldError, MissingFieldError, StorageError
from blockdoc.nodes import CleanedBlock
from blockdoc.serialization import to_dict
from blockdoc.storage import DocumentId
from blockdoc.utils.logger import get_logger

if TYPE_CHECKING:
    from blockdoc.cache import ParseCache
    from blockdoc.storage import DocumentStore

logger = get_logger(__name__)

_DOCUMENT_ID_PROPERTY: dict[str, Any] = {
    "type": ["string", "integer"],
    "description": "Opaque id of the document.",
}

READ_INPUT_SCHEMA: dict[str, Any] = {
    "type": "object",
    "required": ["documentId"],
    "properties": {
        "documentId": _DOCUMENT_ID_PROPERTY,
    },
    "additionalProperties": False,
}

EDIT_INPUT_SCHEMA: dict[str, Any] = {
    "type": "object",
    "required": ["documentId", "operation"],
    "properties": {
        "documentId": _DOCUMENT_ID_PROPERTY,
        "operation": {
            "type": "string",
            "enum": [op.value for op in EditOperation],
            "description": "The block operation to perform.",
        },
        "content": {
            "type": "string",
            "description": "Block markup content. Required for replace_all, insert, and replace.",
        },
        "index": {
            "type": "integer",
            "minimum": 0,
            "description": "Top-level block index. Required for insert, remove, and replace.",
        },
    },
    "additionalProperties": False,
}

# Legacy request key accepted in place of documentId
_ID_ALIAS = "id"


@dataclass(frozen=True, slots=True)
class Ability:
    """Descriptor of an operation for the external dispatch layer."""

    name: str
    label: str
    description: str
    input_schema: dict[str, Any]
    readonly: bool
    destructive: bool
    idempotent: bool

    @property
    def annotations(self) -> dict[str, bool]:
        return {
            "readonly": self.readonly,
            "destructive": self.destructive,
            "idempotent": self.idempotent,
        }


ABILITIES: tuple[Ability, ...] = (
    Ability(
        name="content/get-post-blocks",
        label="Get Post Blocks",
        description=(
            "Parse post content into structured block JSON. Returns each block "
            "with index, blockName, attrs, innerHTML, and innerBlocks."
        ),
        input_schema=READ_INPUT_SCHEMA,
        readonly=True,
        destructive=False,
        idempotent=True,
    ),
    Ability(
        name="content/update-post-blocks",
        label="Update Post Blocks",
        description=(
            "Perform block-level operations on a post: replace_all (replace entire "
            "content), insert (add block at index), remove (delete block at index), "
            "or replace (swap block at index). Use get-post-blocks first to see "
            "current layout and indices."
        ),
        input_schema=EDIT_INPUT_SCHEMA,
        readonly=False,
        destructive=False,
        idempotent=False,
    ),
)


@dataclass(frozen=True, slots=True)
class BlocksResponse:
    """Cleaned block list of one document."""

    document_id: DocumentId
    blocks: tuple[CleanedBlock, ...]

    def to_dict(self) -> dict[str, Any]:
        return {
            "documentId": self.document_id,
            "blocks": [to_dict(block) for block in self.blocks],
        }


_JSON_TYPES: dict[str, tuple[type, ...]] = {
    "string": (str,),
    "integer": (int,),
    "boolean": (bool,),
}


def _matches_type(value: object, expected: str | list[str]) -> bool:
    names = [expected] if isinstance(expected, str) else expected
    for name in names:
        if name == "integer" and isinstance(value, bool):
            continue
        if isinstance(value, _JSON_TYPES[name]):
            return True
    return False


def validate_request(payload: object, schema: Mapping[str, Any]) -> dict[str, Any]:
    """Check a request mapping against one of the input schemas.

    ``id`` is accepted as an alias of ``documentId``. Fields whose value is
    None count as absent.

    Returns:
        A normalized copy of the request without None values.

    Raises:
        InvalidFieldError: Not a mapping, unknown field, wrong type, value
            outside its enum, or below its minimum
        MissingFieldError: A required field is absent

    """
    if not isinstance(payload, Mapping):
        raise InvalidFieldError("request", f"expected an object, got {type(payload).__name__}")

    request = {key: value for key, value in payload.items() if value is not None}
    if _ID_ALIAS in request:
        if "documentId" in request:
            raise InvalidFieldError(_ID_ALIAS, "use either id or documentId, not both")
        request["documentId"] = request.pop(_ID_ALIAS)

    properties: Mapping[str, Any] = schema["properties"]
    if not schema.get("additionalProperties", True):
        unknown = sorted(str(key) for key in request if key not in properties)
        if unknown:
            raise InvalidFieldError(unknown[0], "unknown field")

    for name in schema.get("required", ()):
        if name not in request:
            raise MissingFieldError(name)

    for name, value in request.items():
        rules = properties.get(name)
        if rules is None:
            continue
        if "type" in rules and not _matches_type(value, rules["type"]):
            raise InvalidFieldError(name, f"expected {rules['type']}, got {type(value).__name__}")
        if "enum" in rules and value not in rules["enum"]:
            raise InvalidFieldError(name, f"{value!r} is not one of {', '.join(rules['enum'])}")
        if "minimum" in rules and value < rules["minimum"]:
            raise InvalidFieldError(name, f"must be >= {rules['minimum']}, got {value}")

    return request


class BlockDocumentService:
    """Read and edit block documents held by a DocumentStore.

    Errors from the store pass through when they are BlockDocErrors;
    anything else the store raises is reported as StorageError. Nothing
    is retried.
    """

    __slots__ = ("_store", "_cache")

    def __init__(self, store: DocumentStore, *, cache: ParseCache | None = None) -> None:
        self._store = store
        self._cache = cache

    def _load(self, document_id: DocumentId) -> str:
        try:
            return self._store.load(document_id)
        except BlockDocError:
            raise
        except Exception as e:
            logger.warning("Loading document %r failed: %s", document_id, e)
            raise StorageError(document_id, f"load failed: {e}") from e

    def _store_text(self, document_id: DocumentId, text: str) -> None:
        try:
            self._store.store(document_id, text)
        except BlockDocError:
            raise
        except Exception as e:
            logger.warning("Storing document %r failed: %s", document_id, e)
            raise StorageError(document_id, f"store failed: {e}") from e

    def get_blocks(self, document_id: DocumentId) -> BlocksResponse:
        """Parse and clean a document without modifying it."""
        text = self._load(document_id)
        return BlocksResponse(document_id, read_blocks(text, cache=self._cache))

    def update_blocks(
        self,
        document_id: DocumentId,
        operation: str | EditOperation,
        *,
        content: str | None = None,
        index: int | None = None,
    ) -> BlocksResponse:
        """Apply one structural edit, persist it, and return the stored result.

        Raises:
            DocumentNotFoundError: Unknown document id
            MissingFieldError: content/index absent for the operation
            InvalidFieldError: Unknown operation or mistyped field
            IndexOutOfRangeError: remove/replace past the last block
            StorageError: The store failed to load or persist

        """
        current = self._load(document_id)
        new_text = edit_document(
            current, operation, content=content, index=index, cache=self._cache
        )
        self._store_text(document_id, new_text)
        logger.debug("Document %r updated by %s", document_id, operation)
        return self.get_blocks(document_id)

    def handle_read(self, payload: Mapping[str, Any]) -> BlocksResponse:
        """Validate a read request mapping and run it."""
        request = validate_request(payload, READ_INPUT_SCHEMA)
        return self.get_blocks(request["documentId"])

    def handle_edit(self, payload: Mapping[str, Any]) -> BlocksResponse:
        """Validate an edit request mapping and run it."""
        request = validate_request(payload, EDIT_INPUT_SCHEMA)
        return self.update_blocks(
            request["documentId"],
            request["operation"],
            content=request.get("content"),
            index=request.get("index"),
        )


__all__ = [
    "ABILITIES",
    "EDIT_INPUT_SCHEMA",
    "READ_INPUT_SCHEMA",
    "Ability",
    "BlockDocumentService",
    "BlocksResponse",
    "DocumentId",
    "validate_request",
]
