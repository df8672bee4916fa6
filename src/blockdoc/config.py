"""ContextVar-based configuration for blockdoc.

Provides thread-local configuration using Python's ContextVars (PEP 567).
The parser, serializer and editor read the active config instead of taking
it as a parameter, so a service can set it once per request.

Thread Safety:
    ContextVars are thread-local by design. Each thread has independent storage,
    so no locks are needed.

Usage:
    from blockdoc.config import BlockConfig, block_config_context

    with block_config_context(BlockConfig(delimiter_prefix="wp:")):
        text = serialize_blocks(blocks)

"""

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass

_VALID_PREFIXES = ("", "wp:")


@dataclass(frozen=True, slots=True)
class BlockConfig:
    """Immutable block model configuration.

    Attributes:
        max_nesting_depth: Deepest block nesting the parser retains. Delimiters
            beyond it stay literal HTML of the deepest retained block.
        default_namespace: Namespace given to ``wp:``-prefixed names that
            carry none (``wp:paragraph`` -> ``core/paragraph``).
        delimiter_prefix: Prefix written before block names on serialization.
            ``""`` writes ``core/paragraph``; ``"wp:"`` writes ``wp:paragraph``
            with the default namespace stripped.

    """

    max_nesting_depth: int = 64
    default_namespace: str = "core"
    delimiter_prefix: str = ""

    def __post_init__(self) -> None:
        if self.max_nesting_depth < 1:
            msg = f"max_nesting_depth must be >= 1, got {self.max_nesting_depth}"
            raise ValueError(msg)
        if not self.default_namespace:
            raise ValueError("default_namespace must not be empty")
        if self.delimiter_prefix not in _VALID_PREFIXES:
            msg = f"delimiter_prefix must be one of {_VALID_PREFIXES!r}, got {self.delimiter_prefix!r}"
            raise ValueError(msg)

    @classmethod
    def from_dict(cls, config_dict: dict) -> "BlockConfig":
        """Create BlockConfig from dictionary.

        Only includes keys that are valid BlockConfig fields; unknown keys
        are silently ignored.

        Example:
            >>> config = BlockConfig.from_dict({"max_nesting_depth": 8, "x": 1})
            >>> config.max_nesting_depth
            8

        """
        valid_fields = {f.name for f in cls.__dataclass_fields__.values()}
        filtered = {k: v for k, v in config_dict.items() if k in valid_fields}
        return cls(**filtered)


# Module-level default config (reused, never recreated)
_DEFAULT_CONFIG: BlockConfig = BlockConfig()

_block_config: ContextVar[BlockConfig] = ContextVar(
    "block_config",
    default=_DEFAULT_CONFIG,
)


def get_block_config() -> BlockConfig:
    """Get current block configuration (thread-local)."""
    return _block_config.get()


def set_block_config(config: BlockConfig) -> None:
    """Set block configuration for current context.

    Only affects the current thread's context. Other threads are unaffected.
    """
    _block_config.set(config)


def reset_block_config() -> None:
    """Reset to default configuration."""
    _block_config.set(_DEFAULT_CONFIG)


@contextmanager
def block_config_context(config: BlockConfig) -> Iterator[None]:
    """Context manager for temporary config changes.

    Properly restores the previous config even if an exception is raised.

    Example:
        >>> with block_config_context(BlockConfig(max_nesting_depth=2)):
        ...     blocks = parse_blocks(text)

    """
    previous = _block_config.get()
    _block_config.set(config)
    try:
        yield
    finally:
        _block_config.set(previous)


__all__ = [
    "BlockConfig",
    "block_config_context",
    "get_block_config",
    "reset_block_config",
    "set_block_config",
]
