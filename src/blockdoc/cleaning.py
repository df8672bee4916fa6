"""Reduce parsed block trees to their external form.

``clean_block`` is the single funnel for caller-facing output: both the
read path and the edit path pass their final block sequence through it.
Filler is dropped at every depth and sibling indices are renumbered from
zero after filtering.

Thread Safety:
    All functions are pure and safe to call from any thread.

"""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING

from blockdoc.nodes import BlockNode, CleanedBlock
from blockdoc.parser import filter_filler, parse_blocks

if TYPE_CHECKING:
    from blockdoc.cache import ParseCache


def clean_block(node: BlockNode, index: int) -> CleanedBlock:
    """Build the cleaned form of ``node`` at sibling position ``index``.

    Children are filtered and cleaned recursively with their own
    zero-based indices. ``attrs`` is always a mapping, empty when the
    block declared none.
    """
    return CleanedBlock(
        index=index,
        block_name=node.name,
        attrs=dict(node.attributes) if node.attributes else {},
        inner_html=node.inner_html,
        inner_blocks=clean_blocks(node.children),
    )


def clean_blocks(nodes: Iterable[BlockNode]) -> tuple[CleanedBlock, ...]:
    """Filter one sibling level and clean each survivor with its position."""
    return tuple(clean_block(node, i) for i, node in enumerate(filter_filler(nodes)))


def read_blocks(
    document_text: str,
    *,
    cache: ParseCache | None = None,
) -> tuple[CleanedBlock, ...]:
    """Parse document text into its cleaned, indexed block list.

    Example:
        >>> read_blocks('<!-- core/paragraph {"id":1} -->Hello<!-- /core/paragraph -->')
        (CleanedBlock(index=0, block_name='core/paragraph', attrs={'id': 1}, inner_html='Hello', inner_blocks=()),)

    """
    return clean_blocks(parse_blocks(document_text, cache=cache))


__all__ = [
    "clean_block",
    "clean_blocks",
    "read_blocks",
]
