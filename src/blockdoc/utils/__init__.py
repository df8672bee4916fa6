"""Internal helpers: cache-key hashing and logger lookup."""

from blockdoc.utils.hashing import hash_str
from blockdoc.utils.logger import get_logger

__all__ = [
    "get_logger",
    "hash_str",
]
