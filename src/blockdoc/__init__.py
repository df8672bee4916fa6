"""
blockdoc: Block document model for CMS content

Parses comment-delimited block markup into typed block trees, reduces them
to a clean indexed JSON form, and edits documents by top-level index
(insert / remove / replace / replace_all) without re-sending the whole
content.

Quick Start:
    >>> from blockdoc import read_blocks, apply_operation
    >>> doc = '<!-- core/paragraph {"id":1} -->Hello<!-- /core/paragraph -->'
    >>> read_blocks(doc)[0].attrs
    {'id': 1}

    >>> result = apply_operation(
    ...     doc, "insert", content="<!-- core/heading -->Hi<!-- /core/heading -->", index=0
    ... )
    >>> [b.block_name for b in result.blocks]
    ['core/heading', 'core/paragraph']

Serving an agent:
    >>> from blockdoc import BlockDocumentService, InMemoryDocumentStore
    >>> service = BlockDocumentService(InMemoryDocumentStore({"1": doc}))
    >>> service.handle_read({"documentId": "1"}).to_dict()["blocks"][0]["blockName"]
    'core/paragraph'

Installation:
    pip install blockdoc              # zero runtime dependencies
"""

from blockdoc.cache import DictParseCache, ParseCache, hash_config, hash_content
from blockdoc.cleaning import clean_block, clean_blocks, read_blocks
from blockdoc.config import (
    BlockConfig,
    block_config_context,
    get_block_config,
    reset_block_config,
    set_block_config,
)
from blockdoc.editor import (
    EditOperation,
    EditResult,
    apply_operation,
    edit_document,
    splice_blocks,
)
from blockdoc.errors import (
    BlockDocError,
    DocumentNotFoundError,
    IndexOutOfRangeError,
    InvalidFieldError,
    MissingFieldError,
    StorageError,
)
from blockdoc.nodes import BlockNode, CleanedBlock, JSONValue
from blockdoc.parser import BlockParser, filter_filler, parse_blocks
from blockdoc.serialization import from_dict, from_json, to_dict, to_json
from blockdoc.serializer import (
    serialize_attributes,
    serialize_block,
    serialize_blocks,
    strip_default_namespace,
)
from blockdoc.service import (
    ABILITIES,
    EDIT_INPUT_SCHEMA,
    READ_INPUT_SCHEMA,
    Ability,
    BlockDocumentService,
    BlocksResponse,
    validate_request,
)
from blockdoc.storage import (
    DirectoryDocumentStore,
    DocumentId,
    DocumentStore,
    InMemoryDocumentStore,
)

__version__ = "0.1.0"


__all__ = [  # noqa: RUF022 - grouped by category for maintainability
    # Version
    "__version__",
    # Nodes
    "BlockNode",
    "CleanedBlock",
    "JSONValue",
    # Parse / serialize
    "BlockParser",
    "filter_filler",
    "parse_blocks",
    "serialize_attributes",
    "serialize_block",
    "serialize_blocks",
    "strip_default_namespace",
    # Cleaning
    "clean_block",
    "clean_blocks",
    "read_blocks",
    # Editing
    "EditOperation",
    "EditResult",
    "apply_operation",
    "edit_document",
    "splice_blocks",
    # JSON shape
    "to_dict",
    "from_dict",
    "to_json",
    "from_json",
    # Parse cache
    "DictParseCache",
    "ParseCache",
    "hash_config",
    "hash_content",
    # Storage
    "DirectoryDocumentStore",
    "DocumentId",
    "DocumentStore",
    "InMemoryDocumentStore",
    # Service
    "ABILITIES",
    "Ability",
    "BlockDocumentService",
    "BlocksResponse",
    "EDIT_INPUT_SCHEMA",
    "READ_INPUT_SCHEMA",
    "validate_request",
    # Errors
    "BlockDocError",
    "DocumentNotFoundError",
    "IndexOutOfRangeError",
    "InvalidFieldError",
    "MissingFieldError",
    "StorageError",
    # Configuration (ContextVar-based)
    "BlockConfig",
    "block_config_context",
    "get_block_config",
    "reset_block_config",
    "set_block_config",
]
