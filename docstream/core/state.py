"""
Document state.

A DocumentState is created by an init commit; every later commit produces a
new value. Nothing here mutates in place.
"""

from dataclasses import dataclass, replace
from typing import Any, Dict, Optional

from ..events.payloads import InitEventHeader
from ..identifiers import StreamID
from .canonical import canonical_json_str


@dataclass(frozen=True)
class DocumentMetadata:
    """
    Document metadata, fixed at init except for should_index.

    Fields:
        controller: Controller DID
        model: StreamID of the model (invariant for the life of the stream)
        unique: Unique value from the init header
        context: Optional context StreamID
        should_index: Indexing hint
    """
    controller: str
    model: StreamID
    unique: Optional[bytes] = None
    context: Optional[StreamID] = None
    should_index: Optional[bool] = None

    @staticmethod
    def from_header(header: InitEventHeader) -> "DocumentMetadata":
        return DocumentMetadata(
            controller=header.controller,
            model=header.model,
            unique=header.unique,
            context=header.context,
            should_index=header.should_index,
        )

    def to_dict(self) -> Dict[str, Any]:
        """JSON-friendly form; unset optional fields are omitted."""
        data: Dict[str, Any] = {"controller": self.controller, "model": str(self.model)}
        if self.unique is not None:
            data["unique"] = self.unique
        if self.context is not None:
            data["context"] = str(self.context)
        if self.should_index is not None:
            data["shouldIndex"] = self.should_index
        return data


@dataclass(frozen=True)
class DocumentState:
    content: Optional[Dict[str, Any]]
    metadata: DocumentMetadata

    @staticmethod
    def initial(header: InitEventHeader, content: Optional[Dict[str, Any]]) -> "DocumentState":
        return DocumentState(content=content, metadata=DocumentMetadata.from_header(header))

    def with_content(self, content: Optional[Dict[str, Any]]) -> "DocumentState":
        return replace(self, content=content)

    def with_should_index(self, should_index: bool) -> "DocumentState":
        return replace(self, metadata=replace(self.metadata, should_index=should_index))

    def to_dict(self) -> Dict[str, Any]:
        return {"content": self.content, "metadata": self.metadata.to_dict()}

    def canonical(self) -> str:
        """Canonical JSON string, stable across replays."""
        return canonical_json_str(self.to_dict())
