"""
Tests for unique values, account relations and immutable fields.
"""

import pytest

from docstream.core import ModelDefinition
from docstream.core.state import DocumentMetadata, DocumentState
from docstream.core.unique import (
    assert_no_immutable_field_change,
    assert_valid_init_header,
    assert_valid_unique_value,
    encode_unique_fields_value,
    get_immutable_fields_to_check,
    get_unique_fields_value,
    stringify_field_value,
)
from docstream.errors import UNIQUE_MISMATCH_MESSAGE, AccountRelationError, ImmutableFieldError, UniqueConstraintError
from docstream.events import InitEventHeader
from docstream.identifiers import random_stream_id


def definition(kind, fields=None, immutable=None, name="TestModel"):
    relation = {"type": kind}
    if fields is not None:
        relation["fields"] = fields
    return ModelDefinition.from_dict(
        {
            "name": name,
            "schema": {"type": "object"},
            "accountRelation": relation,
            "immutableFields": immutable or [],
        }
    )


def header(unique=None):
    return InitEventHeader(controllers=["did:key:z6Mkabc"], model=random_stream_id("model"), unique=unique)


def test_encode_unique_fields_value():
    assert encode_unique_fields_value(["a", "b", "c"]) == b"a|b|c"
    assert encode_unique_fields_value([]) == b""
    assert encode_unique_fields_value(["é"]) == "é".encode("utf-8")


def test_stringify_rules():
    assert stringify_field_value("text") == "text"
    assert stringify_field_value(None) == "null"
    assert stringify_field_value(True) == "true"
    assert stringify_field_value(False) == "false"
    assert stringify_field_value(3) == "3"
    assert stringify_field_value(3.0) == "3"
    assert stringify_field_value(2.5) == "2.5"


@pytest.mark.parametrize(
    "value,expected",
    [
        (1e-7, "1e-7"),
        (-2.5e-8, "-2.5e-8"),
        (1e-6, "0.000001"),
        (1.5e-5, "0.000015"),
        (0.0001, "0.0001"),
        (1e16, "10000000000000000"),
        (10**21, "1e+21"),
        (1.5e21, "1.5e+21"),
        (-0.0, "0"),
    ],
)
def test_stringify_numbers_like_javascript(value, expected):
    assert stringify_field_value(value) == expected


def test_unique_value_follows_field_order():
    content = {"kind": "like", "target": "post-1"}

    assert get_unique_fields_value(["target", "kind"], content) == b"post-1|like"
    assert get_unique_fields_value(["kind", "target"], content) == b"like|post-1"
    assert get_unique_fields_value(["target", "missing"], content) == b"post-1|undefined"


@pytest.mark.parametrize(
    "kind,unique,message",
    [
        ("single", b"", "SINGLE accountRelations must be created deterministically"),
        ("set", None, "SET accountRelations must be created with a unique field"),
        ("list", None, "LIST accountRelations must be created with a unique field"),
        ("none", None, "cannot be created on interface Models"),
        ("none", b"x", "cannot be created on interface Models"),
        ("bogus", b"x", "Unsupported account relation bogus found in Model TestModel"),
    ],
)
def test_invalid_init_headers(kind, unique, message):
    with pytest.raises(AccountRelationError, match=message) as exc:
        assert_valid_init_header(definition(kind, fields=["a"]), header(unique))
    assert exc.value.model_name == "TestModel"


@pytest.mark.parametrize(
    "kind,unique",
    [
        ("single", None),
        ("list", b"random"),
        ("set", b"a"),
    ],
)
def test_valid_init_headers(kind, unique):
    assert_valid_init_header(definition(kind, fields=["a"]), header(unique))


def test_interface_model_error_names_model():
    with pytest.raises(AccountRelationError) as exc:
        assert_valid_init_header(definition("none", name="Shape"), header())

    assert str(exc.value) == (
        "ModelInstanceDocument Streams cannot be created on interface Models. "
        "Use a different model than Shape to create the ModelInstanceDocument."
    )


def test_unique_value_checked_for_set_only():
    metadata = DocumentMetadata(controller="did:key:z6Mkabc", model=random_stream_id("model"), unique=b"x|y")

    assert_valid_unique_value(definition("list"), metadata, {"a": "other"})
    assert_valid_unique_value(definition("set", fields=["a", "b"]), metadata, {"a": "x", "b": "y"})


def test_unique_value_mismatch():
    metadata = DocumentMetadata(controller="did:key:z6Mkabc", model=random_stream_id("model"), unique=b"x|y")

    with pytest.raises(UniqueConstraintError) as exc:
        assert_valid_unique_value(definition("set", fields=["a", "b"]), metadata, {"a": "x", "b": "z"})

    assert str(exc.value) == UNIQUE_MISMATCH_MESSAGE
    assert exc.value.expected == b"x|y"
    assert exc.value.actual == b"x|z"


def test_unique_value_requires_metadata_and_content():
    set_model = definition("set", fields=["a"])
    model = random_stream_id("model")

    with pytest.raises(UniqueConstraintError, match="Missing unique metadata value"):
        assert_valid_unique_value(set_model, DocumentMetadata(controller="did:x", model=model), {"a": 1})
    with pytest.raises(UniqueConstraintError, match="Missing content"):
        assert_valid_unique_value(set_model, DocumentMetadata(controller="did:x", model=model, unique=b"1"), None)


def test_immutable_fields_skipped_without_prior_content():
    model = definition("single", immutable=["title"])
    metadata = DocumentMetadata(controller="did:x", model=random_stream_id("model"))

    assert get_immutable_fields_to_check(model, DocumentState(content=None, metadata=metadata)) is None
    assert get_immutable_fields_to_check(model, DocumentState(content={}, metadata=metadata)) == ["title"]
    assert get_immutable_fields_to_check(definition("single"), DocumentState(content={}, metadata=metadata)) is None


def test_immutable_field_change_rejected():
    with pytest.raises(ImmutableFieldError, match='Immutable field "title" cannot be updated'):
        assert_no_immutable_field_change([{"op": "replace", "path": "/title", "value": "x"}], ["title"])
    with pytest.raises(ImmutableFieldError) as exc:
        assert_no_immutable_field_change([{"op": "remove", "path": "/meta/created"}], ["title", "meta"])
    assert exc.value.field == "meta"


def test_immutable_move_source_counts():
    with pytest.raises(ImmutableFieldError):
        assert_no_immutable_field_change([{"op": "move", "from": "/title", "path": "/other"}], ["title"])


def test_root_patch_touches_every_field():
    with pytest.raises(ImmutableFieldError):
        assert_no_immutable_field_change([{"op": "replace", "path": "", "value": {}}], ["title"])


def test_mutable_fields_pass():
    ops = [
        {"op": "replace", "path": "/body", "value": "x"},
        {"op": "copy", "from": "/title", "path": "/subtitle"},
        {"op": "test", "path": "/body", "value": "x"},
    ]

    assert_no_immutable_field_change(ops, ["title"])
    assert_no_immutable_field_change(ops, [])
