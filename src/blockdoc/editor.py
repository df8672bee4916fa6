"""Index-addressed structural edits on block documents.

A caller edits a document incrementally by naming a top-level position
instead of re-sending the whole content:

1. Parse the current text and drop filler at the top level.
2. Splice the parsed ``content`` in at ``index`` (or drop the block there).
3. Serialize the resulting sequence as the new document text.

``replace_all`` skips all three steps and stores ``content`` verbatim.

Index Policy:
    ``insert`` clamps an index past the end to the end (append).
    ``remove`` and ``replace`` never clamp: an index at or past the end
    raises IndexOutOfRangeError.

Indices are positions, not identifiers. Any insert/remove/replace shifts
the numbering, so callers chaining edits must use the block list returned
by the previous edit.

Thread Safety:
    All functions are pure and safe to call from any thread. Persisting the
    result is the caller's read-modify-write; see blockdoc.service.

"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING

from blockdoc.cleaning import read_blocks
from blockdoc.errors import IndexOutOfRangeError, InvalidFieldError, MissingFieldError
from blockdoc.nodes import BlockNode, CleanedBlock
from blockdoc.parser import filter_filler, parse_blocks
from blockdoc.serializer import serialize_blocks
from blockdoc.utils.logger import get_logger

if TYPE_CHECKING:
    from blockdoc.cache import ParseCache

logger = get_logger(__name__)


class EditOperation(StrEnum):
    """Structural edit applied to a document's top-level blocks."""

    REPLACE_ALL = "replace_all"
    INSERT = "insert"
    REMOVE = "remove"
    REPLACE = "replace"

    @property
    def requires_content(self) -> bool:
        return self is not EditOperation.REMOVE


@dataclass(frozen=True, slots=True)
class EditResult:
    """New document text plus its freshly re-derived block list."""

    text: str
    blocks: tuple[CleanedBlock, ...]


def coerce_operation(operation: str | EditOperation) -> EditOperation:
    """Resolve an operation name, rejecting anything outside the four edits."""
    try:
        return EditOperation(operation)
    except ValueError:
        choices = ", ".join(op.value for op in EditOperation)
        raise InvalidFieldError(
            "operation", f"{operation!r} is not one of {choices}"
        ) from None


def _require_content(content: object, operation: EditOperation) -> str:
    if content is None:
        raise MissingFieldError("content", operation.value)
    if not isinstance(content, str):
        raise InvalidFieldError("content", f"expected a string, got {type(content).__name__}")
    return content


def _require_index(index: object, operation: EditOperation) -> int:
    if index is None:
        raise MissingFieldError("index", operation.value)
    # bool is an int subclass but never a position
    if isinstance(index, bool) or not isinstance(index, int):
        raise InvalidFieldError("index", f"expected an integer, got {type(index).__name__}")
    if index < 0:
        raise InvalidFieldError("index", f"must be >= 0, got {index}")
    return index


def splice_blocks(
    blocks: tuple[BlockNode, ...],
    operation: EditOperation,
    index: int,
    new_blocks: tuple[BlockNode, ...] = (),
) -> tuple[BlockNode, ...]:
    """Apply one index-addressed splice to a filtered top-level sequence.

    Args:
        blocks: Current filtered top-level blocks
        operation: INSERT, REMOVE or REPLACE
        index: Position to operate on (>= 0)
        new_blocks: Filtered blocks to insert (ignored by REMOVE)

    Returns:
        The new sequence. The input is not modified.

    Raises:
        IndexOutOfRangeError: REMOVE/REPLACE with ``index >= len(blocks)``
        ValueError: ``operation`` is REPLACE_ALL, which has no splice form

    """
    length = len(blocks)
    if operation is EditOperation.INSERT:
        index = min(index, length)
        return (*blocks[:index], *new_blocks, *blocks[index:])

    if operation is EditOperation.REPLACE_ALL:
        raise ValueError("replace_all replaces the document text; it has no splice form")

    if index >= length:
        raise IndexOutOfRangeError(index, length)
    if operation is EditOperation.REMOVE:
        return (*blocks[:index], *blocks[index + 1 :])
    return (*blocks[:index], *new_blocks, *blocks[index + 1 :])


def edit_document(
    document_text: str,
    operation: str | EditOperation,
    *,
    content: str | None = None,
    index: int | None = None,
    cache: ParseCache | None = None,
) -> str:
    """Compute the new document text for one structural edit.

    Args:
        document_text: Current stored text
        operation: One of replace_all, insert, remove, replace
        content: Block markup (replace_all, insert, replace)
        index: Top-level position (insert, remove, replace)
        cache: Optional parse cache for the current document text

    Returns:
        The text to persist.

    Raises:
        MissingFieldError: A field the operation needs is absent
        InvalidFieldError: Unknown operation, or a field of the wrong type
        IndexOutOfRangeError: remove/replace past the last block

    """
    op = coerce_operation(operation)

    if op is EditOperation.REPLACE_ALL:
        return _require_content(content, op)

    position = _require_index(index, op)
    new_blocks: tuple[BlockNode, ...] = ()
    if op.requires_content:
        new_blocks = filter_filler(parse_blocks(_require_content(content, op)))

    blocks = filter_filler(parse_blocks(document_text, cache=cache))
    result = splice_blocks(blocks, op, position, new_blocks)
    logger.debug(
        "%s at index %d: %d -> %d top-level blocks",
        op.value,
        position,
        len(blocks),
        len(result),
    )
    return serialize_blocks(result)


def apply_operation(
    document_text: str,
    operation: str | EditOperation,
    *,
    content: str | None = None,
    index: int | None = None,
    cache: ParseCache | None = None,
) -> EditResult:
    """Apply an edit and return the new text with its cleaned block list.

    The block list is always re-derived from the new text, so its indices
    reflect the post-edit numbering.

    Example:
        >>> doc = '<!-- core/paragraph {"id":1} -->Hello<!-- /core/paragraph -->'
        >>> result = apply_operation(
        ...     doc, "insert", content="<!-- core/heading -->Hi<!-- /core/heading -->", index=0
        ... )
        >>> [(b.index, b.block_name) for b in result.blocks]
        [(0, 'core/heading'), (1, 'core/paragraph')]

    """
    new_text = edit_document(
        document_text, operation, content=content, index=index, cache=cache
    )
    return EditResult(text=new_text, blocks=read_blocks(new_text, cache=cache))


__all__ = [
    "EditOperation",
    "EditResult",
    "apply_operation",
    "coerce_operation",
    "edit_document",
    "splice_blocks",
]
