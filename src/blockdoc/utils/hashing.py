"""SHA-256 fingerprints used as parse-cache keys."""

import hashlib


def hash_str(content: str) -> str:
    """Hex SHA-256 digest of ``content`` encoded as UTF-8.

    Lone surrogates are encoded with ``surrogatepass`` so any Python string,
    including text decoded from escaped JSON, has a stable key.
    """
    return hashlib.sha256(content.encode("utf-8", "surrogatepass")).hexdigest()
