"""
Document state machine.

This module provides:
- DocumentState / DocumentMetadata: immutable document values
- ModelDefinition: model inputs supplied by the Context
- SchemaValidator: cached JSON schema validation
- Unique value, immutable field and relation checks
- DocumentReducer: folds one commit into document state
- Canonical: deterministic serialization and size limits
"""

from .canonical import (
    MAX_DOCUMENT_SIZE,
    assert_valid_content_length,
    canonical_json_bytes,
    canonical_json_str,
    canonicalize,
    content_size,
)
from .model import AccountRelation, AccountRelationKind, ModelDefinition, RelationDefinition, RelationKind
from .state import DocumentMetadata, DocumentState
from .schema import SchemaValidator
from .context import Context, MemoryContext
from .unique import (
    assert_no_immutable_field_change,
    assert_valid_init_header,
    assert_valid_unique_value,
    encode_unique_fields_value,
    get_unique_fields_value,
)
from .relations import validate_relations_content
from .reducer import DocumentReducer

__all__ = [
    "MAX_DOCUMENT_SIZE",
    "assert_valid_content_length",
    "canonical_json_bytes",
    "canonical_json_str",
    "canonicalize",
    "content_size",
    "AccountRelation",
    "AccountRelationKind",
    "ModelDefinition",
    "RelationDefinition",
    "RelationKind",
    "DocumentMetadata",
    "DocumentState",
    "SchemaValidator",
    "Context",
    "MemoryContext",
    "assert_no_immutable_field_change",
    "assert_valid_init_header",
    "assert_valid_unique_value",
    "encode_unique_fields_value",
    "get_unique_fields_value",
    "validate_relations_content",
    "DocumentReducer",
]
