"""
Relation integrity checks.

A document relation field holds the StreamID of another document; that
document must belong to the model named by the relation, or to a model that
implements it when the relation targets an interface.
"""

from typing import Any, Dict

from ..errors import ContextLookupError, EncodingError, RelationIntegrityError
from ..identifiers import StreamID
from .context import Context, load_document_model, load_model_definition
from .model import AccountRelationKind, ModelDefinition, RelationKind


def _implements(context: Context, expected_model: str, actual_model: str) -> bool:
    try:
        expected = load_model_definition(context, expected_model)
    except ContextLookupError:
        # An unresolvable target can't be shown to be an interface
        return False
    if not (expected.interface or expected.kind == AccountRelationKind.NONE):
        return False
    actual = load_model_definition(context, actual_model)
    return expected_model in actual.implements


def validate_relations_content(context: Context, definition: ModelDefinition, content: Dict[str, Any]) -> None:
    """
    Validate every document relation present in content.

    Account relations and relations without a target model are not checked.

    Raises:
        RelationIntegrityError: If a relation points at the wrong model
        ContextLookupError: If the Context cannot resolve a stream or model
    """
    for field_name, relation in definition.relations.items():
        if relation.type != RelationKind.DOCUMENT or relation.model is None:
            continue
        value = content.get(field_name)
        if value is None:
            continue

        try:
            stream_id = str(StreamID.from_string(value)) if isinstance(value, str) else None
        except EncodingError:
            stream_id = None
        if stream_id is None:
            raise RelationIntegrityError(
                field=field_name,
                stream_id=str(value),
                actual_model=None,
                expected_model=relation.model,
                model_name=definition.name,
                message=f"Relation on field {field_name} must be a StreamID, got {value!r}",
            )

        actual_model = load_document_model(context, stream_id)
        if actual_model == relation.model:
            continue
        if _implements(context, relation.model, actual_model):
            continue
        raise RelationIntegrityError(
            field=field_name,
            stream_id=value,
            actual_model=actual_model,
            expected_model=relation.model,
            model_name=definition.name,
        )
