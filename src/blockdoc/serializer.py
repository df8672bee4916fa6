"""Render block nodes back to delimited document text.

Inverse of the parser for filtered sequences: re-parsing the output and
dropping filler yields blocks with the same names, attributes, HTML and
child structure. Whitespace between top-level blocks is not preserved.

The delimiter dialect follows ``BlockConfig.delimiter_prefix``:

    ""     -> <!-- core/paragraph {"id":1} -->Hi<!-- /core/paragraph -->
    "wp:"  -> <!-- wp:paragraph {"id":1} -->Hi<!-- /wp:paragraph -->

Thread Safety:
    All functions are pure and safe to call from any thread.

"""

import json
import re
from collections.abc import Iterable, Mapping

from blockdoc.config import get_block_config
from blockdoc.nodes import BlockNode, JSONValue

# Characters that could end the surrounding comment or confuse an HTML
# scanner, replaced by their JSON unicode escapes after encoding.
_UNSAFE_ATTRIBUTE_SEQUENCES = (
    ("--", "\\u002d\\u002d"),
    ("<", "\\u003c"),
    (">", "\\u003e"),
    ("&", "\\u0026"),
)

# An escaped quote: the backslash before it is not itself escaped.
_ESCAPED_QUOTE = re.compile(r'(?<!\\)((?:\\\\)*)\\"')


def serialize_attributes(attributes: Mapping[str, JSONValue]) -> str:
    """Encode block attributes as a comment-safe JSON object literal.

    Example:
        >>> serialize_attributes({"content": "a -- <b>"})
        '{"content":"a \\\\u002d\\\\u002d \\\\u003cb\\\\u003e"}'

    """
    encoded = json.dumps(dict(attributes), ensure_ascii=False, separators=(",", ":"))
    if not encoded.isascii():
        try:
            encoded.encode("utf-8")
        except UnicodeEncodeError:
            # Lone surrogates have no UTF-8 form, so fall back to ASCII escapes
            encoded = json.dumps(dict(attributes), separators=(",", ":"))
    encoded = _ESCAPED_QUOTE.sub(lambda m: f"{m.group(1)}\\u0022", encoded)
    for sequence, escape in _UNSAFE_ATTRIBUTE_SEQUENCES:
        encoded = encoded.replace(sequence, escape)
    return encoded


def strip_default_namespace(name: str, namespace: str | None = None) -> str:
    """Drop the default namespace from a block name (``core/image`` -> ``image``)."""
    prefix = f"{namespace or get_block_config().default_namespace}/"
    return name[len(prefix) :] if name.startswith(prefix) else name


def _delimiter_name(name: str) -> str:
    config = get_block_config()
    if config.delimiter_prefix == "wp:":
        return f"wp:{strip_default_namespace(name, config.default_namespace)}"
    return name


def serialize_block(block: BlockNode) -> str:
    """Serialize one node, recursing into its children.

    Filler nodes render as their raw HTML.
    """
    children = iter(block.children)
    content = "".join(
        chunk if chunk is not None else serialize_block(next(children))
        for chunk in block.inner_content
    )
    if block.name is None:
        return content

    name = _delimiter_name(block.name)
    attributes = f"{serialize_attributes(block.attributes)} " if block.attributes else ""
    if not content:
        return f"<!-- {name} {attributes}/-->"
    return f"<!-- {name} {attributes}-->{content}<!-- /{name} -->"


def serialize_blocks(blocks: Iterable[BlockNode]) -> str:
    """Serialize a node sequence, concatenated in order."""
    return "".join(serialize_block(block) for block in blocks)


__all__ = [
    "serialize_attributes",
    "serialize_block",
    "serialize_blocks",
    "strip_default_namespace",
]
