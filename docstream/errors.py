"""
Exception types for the document protocol.

Every error is terminal for the commit being processed: the reducer never
returns a partially validated state.
"""

from typing import Optional


class DocumentProtocolError(Exception):
    """Base class for all protocol errors."""
    pass


class EncodingError(DocumentProtocolError):
    """Raised on malformed identifier/payload bytes or structural shape."""
    pass


class VerificationError(DocumentProtocolError):
    """Raised when a signature or controller check fails."""
    pass


class SchemaValidationError(DocumentProtocolError):
    """Raised when content does not satisfy the model schema."""

    def __init__(self, message: str, model_id: Optional[str] = None, errors: Optional[list] = None) -> None:
        super().__init__(message)
        self.model_id = model_id
        self.errors = list(errors or [])


class AccountRelationError(DocumentProtocolError):
    """Raised when an init header does not fit the model's account relation."""

    def __init__(self, message: str, model_name: Optional[str] = None, kind: Optional[str] = None) -> None:
        super().__init__(message)
        self.model_name = model_name
        self.kind = kind


class ImmutableFieldError(DocumentProtocolError):
    """Raised when a patch touches a field declared immutable."""

    def __init__(self, field: str) -> None:
        super().__init__(f'Immutable field "{field}" cannot be updated')
        self.field = field


UNIQUE_MISMATCH_MESSAGE = (
    "Unique content fields value does not match metadata. If you are trying to change "
    "the value of these fields, this is causing this error: these fields values are not mutable."
)


class UniqueConstraintError(DocumentProtocolError):
    """Raised when the SET unique value cannot be re-derived from content."""

    def __init__(self, message: str = UNIQUE_MISMATCH_MESSAGE, expected: Optional[bytes] = None,
                 actual: Optional[bytes] = None) -> None:
        super().__init__(message)
        self.expected = expected
        self.actual = actual


class RelationIntegrityError(DocumentProtocolError):
    """Raised when a relation field references a stream of the wrong model."""

    def __init__(
        self,
        field: str,
        stream_id: str,
        actual_model: Optional[str],
        expected_model: str,
        model_name: Optional[str],
        message: Optional[str] = None,
    ) -> None:
        if message is None:
            message = (
                f"Relation on field {field} points to Stream {stream_id}, which belongs to Model "
                f"{actual_model}, but this Stream's Model ({model_name}) specifies that this "
                f"relation must be to a Stream in the Model {expected_model}"
            )
        super().__init__(message)
        self.field = field
        self.stream_id = stream_id
        self.actual_model = actual_model
        self.expected_model = expected_model
        self.model_name = model_name


class SizeLimitError(DocumentProtocolError):
    """Raised when serialized content exceeds the maximum document size."""

    def __init__(self, size: int, limit: int) -> None:
        super().__init__(f"Content has size of {size}B which exceeds maximum size of {limit}B")
        self.size = size
        self.limit = limit


class ContextLookupError(DocumentProtocolError, LookupError):
    """Raised when the Context cannot resolve a model or a prior state."""
    pass


class PatchError(DocumentProtocolError):
    """Raised when a JSON patch operation cannot be applied."""
    pass


class MetadataMutationError(DocumentProtocolError):
    """Raised when a data commit header tries to change document metadata."""
    pass


class ChainIntegrityError(DocumentProtocolError):
    """Raised when a commit does not link to the stream's init or previous commit."""
    pass
