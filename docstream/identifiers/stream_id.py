"""
Stream identifier without commit information.

Encoded as `varint(STREAMID_CODEC) || varint(type) || genesis-cid-bytes`;
the string form is the base36 multibase encoding of those bytes.
"""

from typing import Any, Union

from multiformats import CID, multibase, varint

from ..errors import EncodingError
from . import parsing
from .constants import STREAMID_CODEC, URL_SCHEME, get_code_by_name, get_name_by_code
from .utils import cid_for_value, to_cid


def encode_stream_bytes(stream_type: int, cid: CID) -> bytes:
    return varint.encode(STREAMID_CODEC) + varint.encode(stream_type) + bytes(cid)


def resolve_type(stream_type: Union[str, int]) -> int:
    if isinstance(stream_type, str):
        return get_code_by_name(stream_type)
    if isinstance(stream_type, bool) or not isinstance(stream_type, int):
        raise EncodingError(f"Invalid stream type {stream_type!r}")
    # Raises for unregistered codes
    get_name_by_code(stream_type)
    return stream_type


class StreamID:
    """
    Immutable stream identifier.

    Fields:
        type: Stream type code
        cid: Genesis commit CID

    Byte and string forms are computed once at construction.

    Example:
        StreamID("MID", cid)
        StreamID(3, "bagcqcera...")
    """

    __slots__ = ("_type", "_cid", "_bytes", "_string")

    def __init__(self, stream_type: Union[str, int], cid: Union[CID, str, bytes]) -> None:
        if stream_type is None or stream_type == "":
            raise EncodingError("StreamID constructor: type required")
        if cid is None or cid == "":
            raise EncodingError("StreamID constructor: cid required")
        self._type = resolve_type(stream_type)
        self._cid = to_cid(cid)
        self._bytes = encode_stream_bytes(self._type, self._cid)
        self._string = multibase.encode(self._bytes, "base36")

    @classmethod
    def from_bytes(cls, data: Union[bytes, bytearray, memoryview]) -> "StreamID":
        """
        Parse StreamID from its bytes representation.

        Raises:
            EncodingError: If the bytes are invalid or contain a commit
        """
        parsed = parsing.from_bytes(data, "StreamID")
        if parsed.kind != parsing.STREAM_ID_KIND:
            encoded = multibase.encode(bytes(data), "base36")
            raise EncodingError(f"Invalid StreamID bytes {encoded}: contains commit")
        return cls(parsed.type, parsed.genesis)

    @classmethod
    def from_string(cls, value: str) -> "StreamID":
        """
        Parse StreamID from a base36 string or URL.

        Raises:
            EncodingError: If the string is invalid or contains a commit
        """
        parsed = parsing.from_string(value, "StreamID")
        if parsed.kind != parsing.STREAM_ID_KIND:
            raise EncodingError(f"Invalid StreamID string {value}: contains commit")
        return cls(parsed.type, parsed.genesis)

    @classmethod
    def from_genesis(cls, stream_type: Union[str, int], genesis: Any) -> "StreamID":
        """Create a StreamID addressing the DAG-CBOR encoded genesis payload."""
        return cls(stream_type, cid_for_value(genesis))

    @property
    def type(self) -> int:
        return self._type

    @property
    def type_name(self) -> str:
        return get_name_by_code(self._type)

    @property
    def cid(self) -> CID:
        return self._cid

    @property
    def base_id(self) -> "StreamID":
        """Copy of self, for parity with CommitID."""
        return StreamID(self._type, self._cid)

    def to_bytes(self) -> bytes:
        return self._bytes

    def to_url(self) -> str:
        return f"{URL_SCHEME}{self._string}"

    def equals(self, other: object) -> bool:
        return (
            isinstance(other, StreamID)
            and self._type == other._type
            and bytes(self._cid) == bytes(other._cid)
        )

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self.equals(other)

    def __hash__(self) -> int:
        return hash((StreamID, self._bytes))

    def __str__(self) -> str:
        return self._string

    def __repr__(self) -> str:
        return f"StreamID({self._string})"
