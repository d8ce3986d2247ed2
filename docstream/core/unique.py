"""
Unique value derivation and document constraint checks.

For SET models the init header's unique value is derived from the values of
the set-semantics fields. Re-deriving it after every data commit is what keeps
those fields immutable.
"""

import json
from typing import Any, Dict, Iterable, List, Optional

from ..errors import AccountRelationError, ImmutableFieldError, UniqueConstraintError
from ..events.payloads import InitEventHeader
from ..patch import PatchOperation, top_level_field
from .model import AccountRelationKind, ModelDefinition
from .state import DocumentMetadata, DocumentState

UNIQUE_SEPARATOR = "|"

_MISSING = object()
JS_EXPONENT_LIMIT = 10**21


def stringify_field_value(value: Any) -> str:
    """
    String form of a field value used in unique values.

    Missing fields render as "undefined", null as "null", booleans lowercase,
    numbers the way JavaScript prints them and containers as compact JSON.
    """
    if value is _MISSING:
        return "undefined"
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)):
        return format_number(value)
    return json.dumps(value, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def format_number(value: Any) -> str:
    """
    Number rendering of JavaScript's String(): integral values below 1e21 in
    plain digits, the shortest round-trip digits otherwise, and exponent form
    only outside [1e-6, 1e21) written as `1e-7` or `1.5e+21`.
    """
    if isinstance(value, int):
        if abs(value) < JS_EXPONENT_LIMIT:
            return str(value)
        value = float(value)
    if value.is_integer() and abs(value) < JS_EXPONENT_LIMIT:
        return str(int(value))

    text = repr(value)
    if "e" not in text:
        return text
    mantissa, exponent = text.split("e")
    power = int(exponent)
    if -7 < power < 0:
        sign = "-" if mantissa.startswith("-") else ""
        digits = mantissa.lstrip("-").replace(".", "")
        return f"{sign}0.{'0' * (-power - 1)}{digits}"
    return f"{mantissa}e{'+' if power > 0 else '-'}{abs(power)}"


def encode_unique_fields_value(values: Iterable[str]) -> bytes:
    return UNIQUE_SEPARATOR.join(values).encode("utf-8")


def get_unique_fields_value(fields: List[str], content: Dict[str, Any]) -> bytes:
    """Unique value for content, taking fields in the model's declared order."""
    return encode_unique_fields_value(
        stringify_field_value(content.get(name, _MISSING)) for name in fields
    )


def assert_valid_init_header(definition: ModelDefinition, header: InitEventHeader) -> None:
    """
    Validate an init header against the model's account relation.

    Raises:
        AccountRelationError: If the header does not fit the relation kind
    """
    kind = definition.kind
    has_unique = header.unique is not None

    if kind == AccountRelationKind.SINGLE:
        if has_unique:
            raise AccountRelationError(
                "ModelInstanceDocuments for models with SINGLE accountRelations must be created deterministically",
                model_name=definition.name,
                kind=kind.value,
            )
    elif kind == AccountRelationKind.SET:
        if not has_unique:
            raise AccountRelationError(
                "ModelInstanceDocuments for models with SET accountRelations must be created with a "
                "unique field containing data from the fields providing the set semantics",
                model_name=definition.name,
                kind=kind.value,
            )
    elif kind == AccountRelationKind.LIST:
        if not has_unique:
            raise AccountRelationError(
                "ModelInstanceDocuments for models with LIST accountRelations must be created with a unique field",
                model_name=definition.name,
                kind=kind.value,
            )
    elif kind == AccountRelationKind.NONE:
        raise AccountRelationError(
            "ModelInstanceDocument Streams cannot be created on interface Models. Use a different "
            f"model than {definition.name} to create the ModelInstanceDocument.",
            model_name=definition.name,
            kind=kind.value,
        )
    else:
        raise AccountRelationError(
            f"Unsupported account relation {kind} found in Model {definition.name}",
            model_name=definition.name,
            kind=str(kind),
        )


def assert_valid_unique_value(
    definition: ModelDefinition,
    metadata: DocumentMetadata,
    content: Optional[Dict[str, Any]],
) -> None:
    """
    Check that the SET unique value still matches the content.

    No-op for other account relations.

    Raises:
        UniqueConstraintError: On missing metadata/content or mismatch
    """
    if definition.kind != AccountRelationKind.SET:
        return
    if metadata.unique is None:
        raise UniqueConstraintError("Missing unique metadata value")
    if content is None:
        raise UniqueConstraintError("Missing content")

    unique = get_unique_fields_value(definition.unique_fields, content)
    if unique != metadata.unique:
        raise UniqueConstraintError(expected=metadata.unique, actual=unique)


def get_immutable_fields_to_check(definition: ModelDefinition, state: DocumentState) -> Optional[List[str]]:
    """
    Fields a data commit must not touch.

    Returns None while the document has no content yet: the first data commit
    on a deterministic document sets those fields. SET fields are covered by
    assert_valid_unique_value and are not repeated here.
    """
    if state.content is None:
        return None
    return list(definition.immutable_fields) or None


def assert_no_immutable_field_change(operations: List[PatchOperation], immutable_fields: List[str]) -> None:
    """
    Reject any operation touching an immutable top-level field.

    `move` also counts its source, and a root pointer touches every field.

    Raises:
        ImmutableFieldError: Naming the first field touched
    """
    if not immutable_fields:
        return
    fields = set(immutable_fields)
    for op in operations:
        pointers = [op.get("path", "")]
        if op.get("op") == "move":
            pointers.append(op.get("from", ""))
        for pointer in pointers:
            name = top_level_field(pointer)
            if name is None:
                raise ImmutableFieldError(immutable_fields[0])
            if name in fields:
                raise ImmutableFieldError(name)
