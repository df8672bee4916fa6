"""Typed block-tree nodes for blockdoc.

All nodes are frozen dataclasses with slots:
- Immutability: parsed sequences can be cached and shared across threads
- Pattern matching: ``match`` statements work naturally
- Memory efficiency: __slots__ reduces per-node footprint

Node Kinds:
BlockNode
├── named block   (name = "core/paragraph", ...)
└── filler        (name = None, raw HTML between blocks)
CleanedBlock      (external form: indexed, filler-free)

``inner_content`` keeps the block's own HTML chunks interleaved with ``None``
placeholders, one per child, so a block can be serialized back exactly in
document order. ``inner_html`` is the concatenation of the string chunks.

Attribute mappings are plain dicts and must be treated as read-only once a
node is built.

"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

# Open JSON value for block attributes; no per-block schema is enforced.
JSONValue = str | int | float | bool | None | list[Any] | dict[str, Any]


@dataclass(frozen=True, slots=True)
class BlockNode:
    """A node of a parsed document.

    Attributes:
        name: Namespaced block type (``core/paragraph``), or None for filler
        attributes: Block attributes decoded from the delimiter's JSON payload
        inner_html: The block's own HTML, excluding nested blocks
        inner_content: HTML chunks with a None placeholder per child
        children: Nested blocks in document order

    """

    name: str | None
    attributes: dict[str, JSONValue] = field(default_factory=dict)
    inner_html: str = ""
    inner_content: tuple[str | None, ...] = ()
    children: tuple[BlockNode, ...] = ()

    @property
    def is_filler(self) -> bool:
        """True for free-form HTML that belongs to no block."""
        return self.name is None

    @classmethod
    def filler(cls, html: str) -> BlockNode:
        """Create a filler node holding raw HTML."""
        return cls(name=None, inner_html=html, inner_content=(html,))


@dataclass(frozen=True, slots=True)
class CleanedBlock:
    """Externally visible form of a named block.

    ``index`` is the zero-based position among filtered siblings. It is
    recomputed on every parse and is not a stable identifier.

    """

    index: int
    block_name: str | None
    attrs: dict[str, JSONValue]
    inner_html: str
    inner_blocks: tuple[CleanedBlock, ...] = ()


__all__ = [
    "BlockNode",
    "CleanedBlock",
    "JSONValue",
]
