"""
Tests for relation integrity checks.
"""

import pytest

from docstream.core import MemoryContext, ModelDefinition, validate_relations_content
from docstream.errors import ContextLookupError, RelationIntegrityError
from docstream.identifiers import random_stream_id


def model_with_relation(target, name="Comment"):
    return ModelDefinition.from_dict(
        {
            "name": name,
            "schema": {"type": "object"},
            "accountRelation": {"type": "list"},
            "relations": {
                "post": {"type": "document", "model": str(target)},
                "owner": {"type": "account"},
            },
        }
    )


def test_relation_to_expected_model_passes():
    post_model = random_stream_id("model")
    post = random_stream_id()
    context = MemoryContext()
    context.set_document_model(post, post_model)

    validate_relations_content(context, model_with_relation(post_model), {"post": str(post)})


def test_absent_relation_is_not_checked():
    context = MemoryContext()

    validate_relations_content(context, model_with_relation(random_stream_id("model")), {"text": "hi"})
    validate_relations_content(context, model_with_relation(random_stream_id("model")), {"post": None})


def test_account_relation_is_not_checked():
    context = MemoryContext()
    definition = model_with_relation(random_stream_id("model"))

    validate_relations_content(context, definition, {"owner": "did:key:z6Mkabc"})


def test_relation_to_wrong_model_rejected():
    expected = random_stream_id("model")
    actual = random_stream_id("model")
    post = random_stream_id()
    context = MemoryContext()
    context.set_document_model(post, actual)
    context.add_model(expected, {"name": "Post", "schema": {}, "accountRelation": {"type": "list"}})

    with pytest.raises(RelationIntegrityError) as exc:
        validate_relations_content(context, model_with_relation(expected), {"post": str(post)})

    assert str(exc.value) == (
        f"Relation on field post points to Stream {post}, which belongs to Model {actual}, "
        f"but this Stream's Model (Comment) specifies that this relation must be to a Stream "
        f"in the Model {expected}"
    )
    assert exc.value.field == "post"
    assert exc.value.actual_model == str(actual)
    assert exc.value.expected_model == str(expected)


def test_relation_to_implementing_model_passes():
    interface = random_stream_id("model")
    implementation = random_stream_id("model")
    post = random_stream_id()
    context = MemoryContext()
    context.add_model(
        interface,
        {"name": "Content", "schema": {}, "accountRelation": {"type": "none"}, "interface": True},
    )
    context.add_model(
        implementation,
        {
            "name": "Post",
            "schema": {},
            "accountRelation": {"type": "list"},
            "implements": [str(interface)],
        },
    )
    context.set_document_model(post, implementation)

    validate_relations_content(context, model_with_relation(interface), {"post": str(post)})


def test_implements_requires_interface_target():
    target = random_stream_id("model")
    other = random_stream_id("model")
    post = random_stream_id()
    context = MemoryContext()
    # Not an interface, so "implements" does not apply
    context.add_model(target, {"name": "Post", "schema": {}, "accountRelation": {"type": "list"}})
    context.add_model(
        other,
        {"name": "Other", "schema": {}, "accountRelation": {"type": "list"}, "implements": [str(target)]},
    )
    context.set_document_model(post, other)

    with pytest.raises(RelationIntegrityError):
        validate_relations_content(context, model_with_relation(target), {"post": str(post)})


def test_unknown_target_model_is_not_an_interface():
    post = random_stream_id()
    context = MemoryContext()
    context.set_document_model(post, random_stream_id("model"))

    with pytest.raises(RelationIntegrityError):
        validate_relations_content(context, model_with_relation(random_stream_id("model")), {"post": str(post)})


def test_relation_value_must_be_stream_id():
    context = MemoryContext()
    definition = model_with_relation(random_stream_id("model"))

    with pytest.raises(RelationIntegrityError, match="must be a StreamID"):
        validate_relations_content(context, definition, {"post": "not-a-stream"})
    with pytest.raises(RelationIntegrityError, match="must be a StreamID"):
        validate_relations_content(context, definition, {"post": 42})


def test_unknown_document_surfaces_lookup_error():
    context = MemoryContext()
    definition = model_with_relation(random_stream_id("model"))

    with pytest.raises(ContextLookupError) as exc:
        validate_relations_content(context, definition, {"post": str(random_stream_id())})
    assert isinstance(exc.value, LookupError)


def test_context_failures_are_wrapped():
    class BrokenContext(MemoryContext):
        def get_document_model(self, stream_id):
            raise OSError("connection reset")

    definition = model_with_relation(random_stream_id("model"))

    with pytest.raises(ContextLookupError, match="connection reset"):
        validate_relations_content(BrokenContext(), definition, {"post": str(random_stream_id())})
