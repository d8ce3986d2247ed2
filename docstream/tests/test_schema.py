"""
Tests for schema validation and the validator cache.
"""

import pytest

from docstream.core import SchemaValidator
from docstream.errors import SchemaValidationError

SCHEMA = {
    "type": "object",
    "properties": {
        "hello": {"type": "string"},
        "count": {"type": "integer", "minimum": 0},
        "email": {"type": "string", "format": "email"},
    },
    "required": ["hello"],
    "additionalProperties": False,
}


def test_valid_content_passes():
    validator = SchemaValidator()

    validator.validate("model-1", SCHEMA, {"hello": "world", "count": 2})


def test_missing_required_property():
    validator = SchemaValidator()

    with pytest.raises(SchemaValidationError) as exc:
        validator.validate("model-1", SCHEMA, {"count": 1})

    message = str(exc.value)
    assert message.startswith("Validation Error: ")
    assert "[required]" in message
    assert "'hello'" in message
    assert exc.value.model_id == "model-1"
    assert len(exc.value.errors) == 1


def test_all_violations_reported_with_pointers():
    validator = SchemaValidator()

    with pytest.raises(SchemaValidationError) as exc:
        validator.validate("model-1", SCHEMA, {"hello": 1, "count": -1})

    errors = exc.value.errors
    assert len(errors) == 2
    assert errors[0].startswith("data/count [minimum]")
    assert errors[1].startswith("data/hello [type]")
    assert str(exc.value) == "Validation Error: " + ", ".join(errors)


def test_format_is_checked():
    validator = SchemaValidator()

    with pytest.raises(SchemaValidationError, match=r"\[format\]"):
        validator.validate("model-1", SCHEMA, {"hello": "x", "email": "not-an-email"})


def test_validators_are_cached_per_model():
    validator = SchemaValidator()
    compiled = validator.compile("model-1", SCHEMA)

    validator.validate("model-1", SCHEMA, {"hello": "world"})
    validator.validate("model-2", {"type": "object"}, {})

    assert validator.compile("model-1", SCHEMA) is compiled
    assert len(validator) == 2
    assert "model-1" in validator
    assert "model-3" not in validator


def test_cache_is_per_instance():
    a = SchemaValidator()
    b = SchemaValidator()
    a.compile("model-1", SCHEMA)

    assert "model-1" in a
    assert "model-1" not in b


def test_invalid_schema_names_model():
    validator = SchemaValidator()

    with pytest.raises(SchemaValidationError, match="Invalid schema for Model model-9"):
        validator.validate("model-9", {"type": "not-a-type"}, {})
    assert "model-9" not in validator
