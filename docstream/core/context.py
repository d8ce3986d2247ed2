"""
Context collaborator consumed by the reducer.

The Context resolves model definitions, prior document states and document
models. Implementations usually perform I/O; failures surface to callers as
ContextLookupError without retries.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, Union

from ..errors import ContextLookupError
from ..events.signer import Verifier
from .model import ModelDefinition
from .state import DocumentState


class Context(ABC):
    """
    Abstract Context interface.

    Fields:
        verifier: Signature verification capability for signed commits
    """

    verifier: Optional[Verifier] = None

    @abstractmethod
    def get_model_definition(self, model_id: str) -> Union[ModelDefinition, Dict[str, Any]]:
        ...

    @abstractmethod
    def get_document_state(self, stream_id: str) -> DocumentState:
        ...

    @abstractmethod
    def get_document_model(self, stream_id: str) -> str:
        ...


class MemoryContext(Context):
    """
    In-memory Context.

    Usage:
        context = MemoryContext(verifier=KeyDIDVerifier())
        context.add_model(model_id, definition)
        context.set_document_state(stream_id, state)
    """

    def __init__(self, verifier: Optional[Verifier] = None) -> None:
        self.verifier = verifier
        self.models: Dict[str, ModelDefinition] = {}
        self.states: Dict[str, DocumentState] = {}
        self.document_models: Dict[str, str] = {}

    def add_model(self, model_id: Any, definition: Union[ModelDefinition, Dict[str, Any]]) -> None:
        self.models[str(model_id)] = ModelDefinition.coerce(definition)

    def set_document_state(self, stream_id: Any, state: DocumentState) -> None:
        self.states[str(stream_id)] = state
        self.document_models[str(stream_id)] = str(state.metadata.model)

    def set_document_model(self, stream_id: Any, model_id: Any) -> None:
        self.document_models[str(stream_id)] = str(model_id)

    def get_model_definition(self, model_id: str) -> ModelDefinition:
        try:
            return self.models[model_id]
        except KeyError:
            raise ContextLookupError(f"Model {model_id} not found") from None

    def get_document_state(self, stream_id: str) -> DocumentState:
        try:
            return self.states[stream_id]
        except KeyError:
            raise ContextLookupError(f"Document state for {stream_id} not found") from None

    def get_document_model(self, stream_id: str) -> str:
        try:
            return self.document_models[stream_id]
        except KeyError:
            raise ContextLookupError(f"Model of document {stream_id} not found") from None


def _wrap_lookup(what: str, key: str, fn, *args):
    try:
        return fn(*args)
    except ContextLookupError:
        raise
    except (LookupError, OSError) as e:
        raise ContextLookupError(f"Cannot resolve {what} {key}: {e}") from e


def load_model_definition(context: Context, model_id: str) -> ModelDefinition:
    value = _wrap_lookup("model", model_id, context.get_model_definition, model_id)
    return ModelDefinition.coerce(value)


def load_document_state(context: Context, stream_id: str) -> DocumentState:
    return _wrap_lookup("document state", stream_id, context.get_document_state, stream_id)


def load_document_model(context: Context, stream_id: str) -> str:
    return str(_wrap_lookup("document model", stream_id, context.get_document_model, stream_id))
