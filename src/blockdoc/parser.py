"""Block delimiter parser producing typed block trees.

Scans document text for comment-style block delimiters and builds
immutable BlockNode trees:

    <!-- core/separator /-->                        self-closing
    <!-- core/paragraph {"id":1} -->Hi<!-- /core/paragraph -->
    <!-- wp:paragraph -->Hi<!-- /wp:paragraph -->   legacy dialect

Text outside any block becomes filler nodes (``name is None``).

Architecture:
The parser is a single forward scan with an explicit stack of open
blocks, so nesting depth never touches the Python call stack. Each open
block records where its unconsumed HTML starts; when a child or the
closer arrives, the HTML in between is appended as a chunk and the
child leaves a ``None`` placeholder in ``inner_content``.

Degradation:
Parsing never raises. Unrecognized or malformed delimiters, closers with
nothing open, and delimiters nested beyond ``max_nesting_depth`` stay in
the text as literal HTML. Blocks still open at end of input are closed
there.

Thread Safety:
    BlockParser instances are single-use and not thread-safe. Create one per
    parse. Configuration is read from ContextVar (thread-local). The
    resulting nodes are immutable and safe to share.

"""

from __future__ import annotations

import json
import math
import re
from collections.abc import Iterable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal

from blockdoc.cache import hash_config, hash_content
from blockdoc.config import get_block_config
from blockdoc.nodes import BlockNode, JSONValue
from blockdoc.utils.logger import get_logger

if TYPE_CHECKING:
    from blockdoc.cache import ParseCache

logger = get_logger(__name__)

_DELIMITER = re.compile(
    r"<!--\s+"
    r"(?P<closer>/)?"
    r"(?P<prefix>wp:)?"
    r"(?P<namespace>[a-z][a-z0-9_-]*/)?"
    r"(?P<name>[a-z][a-z0-9_-]*)\s+"
    r"(?P<attrs>\{(?:(?:[^}]+|\}+(?=\})|(?!\}\s+/?-->).)*+)?\}\s+)?"
    r"(?P<void>/)?-->",
    re.DOTALL,
)

# Length of "<!--"; a rejected match resumes scanning just past it.
_OPEN_LEN = 4


@dataclass(frozen=True, slots=True)
class _Token:
    kind: Literal["opener", "closer", "void"]
    name: str
    attributes: dict[str, JSONValue]
    start: int
    end: int


class _Frame:
    """Mutable accumulator for a block whose closer has not been seen yet."""

    __slots__ = ("name", "attributes", "token_start", "prev_offset", "chunks", "children")

    def __init__(self, token: _Token) -> None:
        self.name = token.name
        self.attributes = token.attributes
        self.token_start = token.start
        self.prev_offset = token.end
        self.chunks: list[str | None] = []
        self.children: list[BlockNode] = []

    def append_html(self, html: str) -> None:
        if html:
            self.chunks.append(html)

    def append_child(self, block: BlockNode) -> None:
        self.children.append(block)
        self.chunks.append(None)

    def build(self) -> BlockNode:
        return BlockNode(
            name=self.name,
            attributes=self.attributes,
            inner_html="".join(c for c in self.chunks if c is not None),
            inner_content=tuple(self.chunks),
            children=tuple(self.children),
        )


class BlockParser:
    """Forward-scanning parser for block-delimited documents.

    Usage:
        >>> parser = BlockParser('<!-- core/paragraph {"id":1} -->Hi<!-- /core/paragraph -->')
        >>> parser.parse()[0].attributes
        {'id': 1}

    """

    __slots__ = (
        "_source",
        "_cursor",
        "_offset",
        "_stack",
        "_output",
        "_overflow",
        "_max_depth",
        "_default_namespace",
    )

    def __init__(self, source: str) -> None:
        config = get_block_config()
        self._source = source
        # Where the next delimiter search starts
        self._cursor = 0
        # End of text already emitted at top level
        self._offset = 0
        self._stack: list[_Frame] = []
        self._output: list[BlockNode] = []
        # Open delimiters swallowed as literal HTML because of the depth limit
        self._overflow = 0
        self._max_depth = config.max_nesting_depth
        self._default_namespace = config.default_namespace

    def parse(self) -> tuple[BlockNode, ...]:
        """Parse the whole source into top-level nodes, filler included."""
        while self._proceed():
            pass
        return tuple(self._output)

    def _proceed(self) -> bool:
        token = self._next_token()
        if token is None:
            self._finish()
            return False

        if token.kind == "closer":
            if self._overflow:
                self._overflow -= 1
            elif self._stack:
                self._close(token)
            else:
                logger.debug("Closer for %s at offset %d has no open block", token.name, token.start)
            return True

        if len(self._stack) >= self._max_depth:
            if token.kind == "opener":
                self._overflow += 1
            logger.debug(
                "Block %s at offset %d exceeds nesting depth %d; kept as HTML",
                token.name,
                token.start,
                self._max_depth,
            )
            return True

        if token.kind == "void":
            block = BlockNode(name=token.name, attributes=token.attributes)
            if self._stack:
                self._add_inner_block(block, token.start, token.end)
            else:
                self._flush_freeform(token.start)
                self._output.append(block)
                self._offset = token.end
            return True

        if not self._stack:
            self._flush_freeform(token.start)
            self._offset = token.end
        self._stack.append(_Frame(token))
        return True

    def _next_token(self) -> _Token | None:
        source = self._source
        while True:
            match = _DELIMITER.search(source, self._cursor)
            if match is None:
                return None
            token = self._classify(match)
            if token is None:
                self._cursor = match.start() + _OPEN_LEN
                continue
            self._cursor = match.end()
            return token

    def _classify(self, match: re.Match[str]) -> _Token | None:
        namespace = match["namespace"]
        if namespace is None:
            # Bare names are plain HTML comments unless written in the wp: dialect
            if match["prefix"] is None:
                return None
            namespace = f"{self._default_namespace}/"

        attributes: dict[str, JSONValue] = {}
        if match["attrs"] is not None:
            decoded = _decode_attributes(match["attrs"])
            if decoded is None:
                return None
            attributes = decoded

        if match["closer"]:
            kind: Literal["opener", "closer", "void"] = "closer"
        elif match["void"]:
            kind = "void"
        else:
            kind = "opener"

        return _Token(
            kind=kind,
            name=namespace + match["name"],
            attributes=attributes,
            start=match.start(),
            end=match.end(),
        )

    def _close(self, token: _Token) -> None:
        frame = self._stack.pop()
        frame.append_html(self._source[frame.prev_offset : token.start])
        block = frame.build()
        if self._stack:
            self._add_inner_block(block, frame.token_start, token.end)
        else:
            self._output.append(block)
            self._offset = token.end

    def _add_inner_block(self, block: BlockNode, start: int, end: int) -> None:
        parent = self._stack[-1]
        parent.append_html(self._source[parent.prev_offset : start])
        parent.append_child(block)
        parent.prev_offset = end

    def _flush_freeform(self, end: int) -> None:
        if end > self._offset:
            self._output.append(BlockNode.filler(self._source[self._offset : end]))
            self._offset = end

    def _finish(self) -> None:
        end = len(self._source)
        if self._stack:
            logger.debug("Closing %d unterminated block(s) at end of input", len(self._stack))
        while self._stack:
            frame = self._stack.pop()
            frame.append_html(self._source[frame.prev_offset :])
            block = frame.build()
            if self._stack:
                self._add_inner_block(block, frame.token_start, end)
            else:
                self._output.append(block)
                self._offset = end
        self._flush_freeform(end)


def _reject_constant(name: str) -> None:
    msg = f"Non-finite number {name} in block attributes"
    raise ValueError(msg)


def _finite_float(literal: str) -> float:
    # Literals such as 1e400 overflow to inf, which JSON cannot write back
    value = float(literal)
    if not math.isfinite(value):
        msg = f"Number {literal} overflows a double in block attributes"
        raise ValueError(msg)
    return value


def _decode_attributes(raw: str) -> dict[str, JSONValue] | None:
    """Decode a delimiter's JSON payload, or None when it is not an object.

    Non-finite numbers, whether spelled NaN/Infinity or overflowing a
    double, reject the payload.
    """
    try:
        value = json.loads(raw, parse_constant=_reject_constant, parse_float=_finite_float)
    except (ValueError, RecursionError):
        return None
    return value if isinstance(value, dict) else None


def parse_blocks(
    source: str,
    *,
    cache: ParseCache | None = None,
) -> tuple[BlockNode, ...]:
    """Parse document text into top-level block nodes.

    Filler nodes are included; pass the result through ``filter_filler``
    for the named blocks only.

    Args:
        source: Document text
        cache: Optional content-addressed parse cache

    Returns:
        Top-level nodes in document order

    Example:
        >>> blocks = parse_blocks("<!-- core/heading -->Hi<!-- /core/heading -->")
        >>> blocks[0].name, blocks[0].inner_html
        ('core/heading', 'Hi')

    """
    if cache is None:
        return BlockParser(source).parse()

    config_hash = hash_config(get_block_config())
    content_hash = hash_content(source)
    cached = cache.get(content_hash, config_hash)
    if cached is not None:
        return cached

    blocks = BlockParser(source).parse()
    cache.put(content_hash, config_hash, blocks)
    return blocks


def filter_filler(nodes: Iterable[BlockNode]) -> tuple[BlockNode, ...]:
    """Drop filler nodes at this level only, keeping the rest in order."""
    return tuple(node for node in nodes if node.name is not None)


__all__ = [
    "BlockParser",
    "filter_filler",
    "parse_blocks",
]
