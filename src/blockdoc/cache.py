"""Content-addressed parse cache for blockdoc.

Provides (content_hash, config_hash) -> parsed block sequence caching, so
repeated reads of an unchanged document skip the parser. Parsed nodes are
frozen, so a cached sequence can be handed to any number of callers.

Thread Safety:
    DictParseCache is not thread-safe. For parallel parsing, use a cache
    implementation with internal locking (e.g. threading.Lock around get/put).

Example:
    >>> from blockdoc import parse_blocks, DictParseCache
    >>> cache = DictParseCache()
    >>> first = parse_blocks("<!-- core/separator /-->", cache=cache)
    >>> second = parse_blocks("<!-- core/separator /-->", cache=cache)  # hit
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

from blockdoc.utils.hashing import hash_str

if TYPE_CHECKING:
    from blockdoc.config import BlockConfig
    from blockdoc.nodes import BlockNode


class ParseCache(Protocol):
    """Protocol for content-addressed parse caches."""

    def get(self, content_hash: str, config_hash: str) -> tuple[BlockNode, ...] | None:
        """Return the cached sequence if present, else None."""
        ...

    def put(self, content_hash: str, config_hash: str, blocks: tuple[BlockNode, ...]) -> None:
        """Store a parsed sequence."""
        ...


class DictParseCache:
    """In-memory parse cache using a dict.

    Not thread-safe. For parallel parsing, wrap with a lock or use a
    thread-safe implementation.
    """

    __slots__ = ("_data",)

    def __init__(self) -> None:
        self._data: dict[tuple[str, str], tuple[BlockNode, ...]] = {}

    def __len__(self) -> int:
        return len(self._data)

    def get(self, content_hash: str, config_hash: str) -> tuple[BlockNode, ...] | None:
        """Return the cached sequence if present, else None."""
        return self._data.get((content_hash, config_hash))

    def put(self, content_hash: str, config_hash: str, blocks: tuple[BlockNode, ...]) -> None:
        """Store a parsed sequence."""
        self._data[(content_hash, config_hash)] = blocks

    def clear(self) -> None:
        self._data.clear()


def hash_content(source: str) -> str:
    """Compute SHA256 hash of document text for the cache key."""
    return hash_str(source)


def hash_config(config: BlockConfig) -> str:
    """Compute hash of the parse-relevant BlockConfig fields.

    ``delimiter_prefix`` only affects serialization, so it is not part of
    the key.
    """
    parts = (
        str(config.max_nesting_depth),
        config.default_namespace,
    )
    return hash_str("|".join(parts))


__all__ = [
    "DictParseCache",
    "ParseCache",
    "hash_config",
    "hash_content",
]
