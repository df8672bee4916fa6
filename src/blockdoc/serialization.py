"""JSON round-trip for cleaned block lists.

Converts CleanedBlock trees to/from the caller-facing JSON shape:

    {"index": 0, "blockName": "core/paragraph", "attrs": {"id": 1},
     "innerHTML": "Hello", "innerBlocks": []}

``attrs`` is always an object, ``{}`` when a block declares no attributes,
so consumers branching on object-vs-array typing never see a list.

Thread Safety:
    All functions are pure and safe to call from any thread.

"""

import json
from collections.abc import Iterable
from typing import Any

from blockdoc.nodes import CleanedBlock

_FIELDS = ("index", "blockName", "attrs", "innerHTML", "innerBlocks")


def to_dict(block: CleanedBlock) -> dict[str, Any]:
    """Convert a cleaned block (recursively) to its JSON-compatible dict."""
    return {
        "index": block.index,
        "blockName": block.block_name,
        "attrs": dict(block.attrs),
        "innerHTML": block.inner_html,
        "innerBlocks": [to_dict(child) for child in block.inner_blocks],
    }


def from_dict(data: dict[str, Any]) -> CleanedBlock:
    """Reconstruct a cleaned block from a dict produced by ``to_dict``.

    Raises:
        ValueError: If a field is missing or ``attrs`` is not an object.

    """
    missing = [name for name in _FIELDS if name not in data]
    if missing:
        msg = f"Missing field(s) in serialized block: {', '.join(missing)}"
        raise ValueError(msg)

    attrs = data["attrs"]
    # Some encoders emit an empty list for an empty object
    if attrs == []:
        attrs = {}
    if not isinstance(attrs, dict):
        msg = f"Expected attrs object, got {type(attrs).__name__}"
        raise ValueError(msg)

    return CleanedBlock(
        index=data["index"],
        block_name=data["blockName"],
        attrs=attrs,
        inner_html=data["innerHTML"],
        inner_blocks=tuple(from_dict(child) for child in data["innerBlocks"]),
    )


def to_json(blocks: Iterable[CleanedBlock], *, indent: int | None = None) -> str:
    """Serialize a cleaned block list to a JSON array string."""
    return json.dumps([to_dict(block) for block in blocks], ensure_ascii=False, indent=indent)


def from_json(data: str) -> tuple[CleanedBlock, ...]:
    """Deserialize a cleaned block list from a JSON array string.

    Raises:
        ValueError: If the JSON is not an array of block objects.

    """
    raw = json.loads(data)
    if not isinstance(raw, list):
        msg = f"Expected a JSON array of blocks, got {type(raw).__name__}"
        raise ValueError(msg)
    return tuple(from_dict(item) for item in raw)


__all__ = [
    "from_dict",
    "from_json",
    "to_dict",
    "to_json",
]
