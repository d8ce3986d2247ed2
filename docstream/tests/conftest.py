"""
Shared fixtures: signers, models and an in-memory Context.
"""

import logging

import pytest

from docstream.core import DocumentReducer, MemoryContext
from docstream.events import KeyDIDSigner, KeyDIDVerifier
from docstream.identifiers import random_stream_id

POST_SCHEMA = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "type": "object",
    "properties": {
        "title": {"type": "string", "maxLength": 100},
        "body": {"type": "string"},
        "tags": {"type": "array", "items": {"type": "string"}},
        "author": {"type": "string"},
    },
    "required": ["title"],
    "additionalProperties": False,
}

PROFILE_SCHEMA = {
    "type": "object",
    "properties": {
        "name": {"type": "string"},
        "age": {"type": "integer"},
    },
    "additionalProperties": False,
}

FAVORITE_SCHEMA = {
    "type": "object",
    "properties": {
        "target": {"type": "string"},
        "kind": {"type": "string"},
        "note": {"type": "string"},
    },
    "required": ["target", "kind"],
}


def model_definition(name, schema, relation, fields=None, **extra):
    data = {
        "name": name,
        "version": "2.0",
        "schema": schema,
        "accountRelation": {"type": relation},
    }
    if fields is not None:
        data["accountRelation"]["fields"] = fields
    data.update(extra)
    return data


@pytest.fixture
def signer():
    return KeyDIDSigner.from_seed(bytes(range(32)))


@pytest.fixture
def other_signer():
    return KeyDIDSigner.from_seed(bytes(range(1, 33)))


@pytest.fixture
def post_model():
    return random_stream_id("model")


@pytest.fixture
def profile_model():
    return random_stream_id("model")


@pytest.fixture
def favorite_model():
    return random_stream_id("model")


@pytest.fixture
def context(post_model, profile_model, favorite_model):
    ctx = MemoryContext(verifier=KeyDIDVerifier())
    ctx.add_model(post_model, model_definition("Post", POST_SCHEMA, "list"))
    ctx.add_model(profile_model, model_definition("Profile", PROFILE_SCHEMA, "single"))
    ctx.add_model(
        favorite_model,
        model_definition("Favorite", FAVORITE_SCHEMA, "set", fields=["target", "kind"]),
    )
    return ctx


@pytest.fixture
def reducer():
    return DocumentReducer()


@pytest.fixture
def restore_logging():
    """Put back root logger handlers replaced by setup_logging()."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
