"""
Document state reducer.

Folds one verified commit into document state. The reducer must be:
- Pure apart from Context lookups (no other I/O, no retries)
- Deterministic (same commit + same Context state -> same DocumentState)
- All-or-nothing (a rejected commit leaves no partial state behind)

Callers serialize reductions per stream: data and time commits read the state
produced by the immediately preceding commit.
"""

from typing import Callable, Dict, Optional

from ..errors import DocumentProtocolError, EncodingError, MetadataMutationError, PatchError
from ..events import (
    CommitKind,
    DataEventPayload,
    Event,
    EventContainer,
    InitEventPayload,
    TimeEventPayload,
    event_to_container,
)
from ..identifiers import get_stream_id
from ..logging_config import get_logger
from .. import patch
from .canonical import assert_valid_content_length, canonical_json_str
from .context import Context, load_document_state, load_model_definition
from .relations import validate_relations_content
from .schema import SchemaValidator
from .state import DocumentState
from .unique import (
    assert_no_immutable_field_change,
    assert_valid_init_header,
    assert_valid_unique_value,
    get_immutable_fields_to_check,
)

# Handler signature: (payload, context) -> new document state
Handler = Callable[..., DocumentState]

SHOULD_INDEX = "shouldIndex"


class DocumentReducer:
    """
    Registry of commit handlers, one per CommitKind.

    Usage:
        reducer = DocumentReducer()
        state = reducer.handle_event(event, context)

    The schema cache is owned by this instance; pass a SchemaValidator to share
    one between reducers.
    """

    def __init__(self, schema_validator: Optional[SchemaValidator] = None) -> None:
        self.schema_validator = schema_validator or SchemaValidator()
        self._handlers: Dict[CommitKind, Handler] = {}
        self.register(CommitKind.DETERMINISTIC_INIT, self.handle_deterministic_init)
        self.register(CommitKind.SIGNED_INIT, self.handle_signed_init)
        self.register(CommitKind.DATA, self.handle_data)
        self.register(CommitKind.TIME, self.handle_time)

    def register(self, kind: CommitKind, handler: Handler) -> None:
        self._handlers[kind] = handler

    def handle_event(self, event: Event, context: Context) -> DocumentState:
        """Verify, classify and reduce one commit."""
        container = event_to_container(context.verifier, event)
        return self.reduce(container, context)

    def reduce(self, container: EventContainer, context: Context) -> DocumentState:
        """
        Apply one verified commit.

        Raises:
            DocumentProtocolError: Any validation failure; the commit is discarded
        """
        handler = self._handlers.get(container.kind)
        if handler is None:
            raise EncodingError(f"No handler for commit kind: {container.kind}")

        logger = get_logger(__name__, trace_id=_trace_id(container))
        try:
            state = handler(container.payload, context)
        except DocumentProtocolError as e:
            logger.warning("Rejected %s commit: %s", container.kind.value, e)
            raise
        logger.debug("Applied %s commit", container.kind.value)
        return state

    def handle_deterministic_init(self, payload: InitEventPayload, context: Context) -> DocumentState:
        if payload.content is not None:
            raise EncodingError("Deterministic init events for ModelInstanceDocuments must not have content")

        definition = load_model_definition(context, str(payload.header.model))
        assert_valid_init_header(definition, payload.header)
        return DocumentState.initial(payload.header, None)

    def handle_signed_init(self, payload: InitEventPayload, context: Context) -> DocumentState:
        content = payload.content
        if content is None:
            raise EncodingError("Signed init events for ModelInstanceDocuments must have content")
        assert_valid_content_length(content)

        model_id = str(payload.header.model)
        definition = load_model_definition(context, model_id)
        assert_valid_init_header(definition, payload.header)

        self.schema_validator.validate(model_id, definition.schema, content)
        state = DocumentState.initial(payload.header, content)
        assert_valid_unique_value(definition, state.metadata, content)
        validate_relations_content(context, definition, content)
        return state

    def handle_data(self, payload: DataEventPayload, context: Context) -> DocumentState:
        stream_id = str(get_stream_id(payload.id))
        state = load_document_state(context, stream_id)

        should_index = None
        if payload.header is not None:
            others = {k: v for k, v in payload.header.items() if k != SHOULD_INDEX}
            if others:
                raise MetadataMutationError(
                    "Updating metadata for ModelInstanceDocument Streams is not allowed.  "
                    f"Tried to change metadata for {payload.id} from "
                    f"{canonical_json_str(state.metadata.to_dict())} to {canonical_json_str(payload.header)}"
                )
            should_index = payload.header.get(SHOULD_INDEX)
            if should_index is not None and not isinstance(should_index, bool):
                raise EncodingError("Data event header shouldIndex must be a boolean")

        content = patch.apply(state.content, payload.patch)
        if not isinstance(content, dict):
            raise PatchError(f"Patched content must be an object, got {type(content).__name__}")
        assert_valid_content_length(content)

        model_id = str(state.metadata.model)
        definition = load_model_definition(context, model_id)
        self.schema_validator.validate(model_id, definition.schema, content)

        assert_valid_unique_value(definition, state.metadata, content)
        immutable_fields = get_immutable_fields_to_check(definition, state)
        if immutable_fields is not None:
            assert_no_immutable_field_change(payload.patch, immutable_fields)

        # Re-run on every data commit, even when no relation field changed
        validate_relations_content(context, definition, content)

        new_state = state.with_content(content)
        if should_index is not None:
            new_state = new_state.with_should_index(should_index)
        return new_state

    def handle_time(self, payload: TimeEventPayload, context: Context) -> DocumentState:
        return load_document_state(context, str(get_stream_id(payload.id)))


def _trace_id(container: EventContainer) -> str:
    payload = container.payload
    if isinstance(payload, (DataEventPayload, TimeEventPayload)):
        return str(get_stream_id(payload.id))
    return f"model:{payload.header.model}"
