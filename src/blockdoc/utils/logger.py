"""Logger lookup for blockdoc modules.

Library code only creates loggers; handlers and levels belong to the
application. Records emitted:

- blockdoc.parser: orphan closers, depth truncation, unterminated blocks (DEBUG)
- blockdoc.editor: one summary per splice (DEBUG)
- blockdoc.storage, blockdoc.service: load and store failures (WARNING)
"""

from __future__ import annotations

import logging

_ROOT = "blockdoc"


def get_logger(name: str) -> logging.Logger:
    """Return the stdlib logger for ``name`` inside the ``blockdoc`` hierarchy."""
    if name != _ROOT and not name.startswith(f"{_ROOT}."):
        name = f"{_ROOT}.{name}"
    return logging.getLogger(name)
