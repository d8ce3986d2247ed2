"""
Commit payload models.

Payloads are immutable records. `to_dict()` returns the wire form used for
DAG-CBOR encoding: optional fields that are unset are omitted entirely.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from multiformats import CID

from ..errors import EncodingError
from ..identifiers import StreamID
from ..patch import validate_operations
from ..identifiers.utils import to_cid

MODEL_SEP = "model"


def _stream_id_from_wire(value: Any, name: str) -> StreamID:
    if isinstance(value, StreamID):
        return value
    if isinstance(value, (bytes, bytearray)):
        return StreamID.from_bytes(value)
    if isinstance(value, str):
        return StreamID.from_string(value)
    raise EncodingError(f"Invalid {name} in header: {value!r}")


@dataclass(frozen=True)
class InitEventHeader:
    """
    Header of an init commit.

    Fields:
        controllers: Controller DIDs (only the first one is used)
        model: StreamID of the model the document belongs to
        sep: Separator key naming the model field
        unique: Unique value (random for LIST, derived for SET, absent for SINGLE)
        context: Optional context StreamID
        should_index: Indexing hint
    """
    controllers: List[str]
    model: StreamID
    sep: str = MODEL_SEP
    unique: Optional[bytes] = None
    context: Optional[StreamID] = None
    should_index: Optional[bool] = None

    @property
    def controller(self) -> str:
        return self.controllers[0]

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "controllers": list(self.controllers),
            "model": self.model.to_bytes(),
            "sep": self.sep,
        }
        if self.unique is not None:
            data["unique"] = bytes(self.unique)
        if self.context is not None:
            data["context"] = self.context.to_bytes()
        if self.should_index is not None:
            data["shouldIndex"] = self.should_index
        return data

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "InitEventHeader":
        if not isinstance(data, dict):
            raise EncodingError("Init header must be a map")
        controllers = data.get("controllers")
        if (
            not isinstance(controllers, list)
            or len(controllers) != 1
            or not all(isinstance(c, str) for c in controllers)
        ):
            raise EncodingError("Init header must have exactly one controller")
        if "model" not in data:
            raise EncodingError("Init header is missing model")
        unique = data.get("unique")
        if unique is not None and not isinstance(unique, (bytes, bytearray)):
            raise EncodingError("Init header unique value must be bytes")
        should_index = data.get("shouldIndex")
        if should_index is not None and not isinstance(should_index, bool):
            raise EncodingError("Init header shouldIndex must be a boolean")
        context = data.get("context")
        return InitEventHeader(
            controllers=list(controllers),
            model=_stream_id_from_wire(data["model"], "model"),
            sep=data.get("sep", MODEL_SEP),
            unique=bytes(unique) if unique is not None else None,
            context=_stream_id_from_wire(context, "context") if context is not None else None,
            should_index=should_index,
        )


@dataclass(frozen=True)
class InitEventPayload:
    """Init commit payload; content is None for deterministic init commits."""
    content: Optional[Dict[str, Any]]
    header: InitEventHeader

    def to_dict(self) -> Dict[str, Any]:
        return {"data": self.content, "header": self.header.to_dict()}

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "InitEventPayload":
        content = data.get("data")
        if content is not None and not isinstance(content, dict):
            raise EncodingError("Init content must be a map or null")
        return InitEventPayload(content=content, header=InitEventHeader.from_dict(data.get("header")))


@dataclass(frozen=True)
class DataEventPayload:
    """
    Data commit payload.

    Fields:
        id: Init commit CID of the stream
        prev: Previous commit CID
        patch: JSON patch operations
        header: Optional header; only `shouldIndex` is accepted by the reducer
    """
    id: CID
    prev: CID
    patch: List[Dict[str, Any]] = field(default_factory=list)
    header: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "id": self.id,
            "prev": self.prev,
            "data": [dict(op) for op in self.patch],
        }
        if self.header is not None:
            data["header"] = dict(self.header)
        return data

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "DataEventPayload":
        patch = data.get("data")
        if not isinstance(patch, list):
            raise EncodingError("Data payload must contain a list of patch operations")
        validate_operations(patch)
        header = data.get("header")
        if header is not None and not isinstance(header, dict):
            raise EncodingError("Data payload header must be a map")
        return DataEventPayload(
            id=to_cid(data.get("id")),
            prev=to_cid(data.get("prev")),
            patch=list(patch),
            header=dict(header) if header is not None else None,
        )


@dataclass(frozen=True)
class TimeEventPayload:
    """Anchor commit: attests prev existed before the time proven by proof."""
    id: CID
    prev: CID
    proof: CID
    path: str

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "prev": self.prev, "proof": self.proof, "path": self.path}

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "TimeEventPayload":
        path = data.get("path")
        if not isinstance(path, str):
            raise EncodingError("Time event path must be a string")
        return TimeEventPayload(
            id=to_cid(data.get("id")),
            prev=to_cid(data.get("prev")),
            proof=to_cid(data.get("proof")),
            path=path,
        )
