"""
Commit identifier: a StreamID plus a pointer to one commit of the stream.
"""

from typing import Optional, Union

from multiformats import CID, multibase

from ..errors import EncodingError
from . import parsing
from .constants import GENESIS_COMMIT_MARKER, URL_SCHEME, get_name_by_code
from .stream_id import StreamID, encode_stream_bytes, resolve_type
from .utils import to_cid


class CommitID:
    """
    Immutable commit identifier.

    Fields:
        type: Stream type code
        cid: Genesis commit CID
        commit: Commit CID (the genesis CID when no commit was given)

    Encoded as StreamID bytes followed by 0x00 (genesis commit) or the commit
    CID bytes.
    """

    __slots__ = ("_type", "_cid", "_commit", "_bytes", "_string")

    def __init__(
        self,
        stream_type: Union[str, int],
        cid: Union[CID, str, bytes],
        commit: Optional[Union[CID, str, bytes, int]] = None,
    ) -> None:
        if stream_type is None or stream_type == "":
            raise EncodingError("CommitID constructor: type required")
        if cid is None or cid == "":
            raise EncodingError("CommitID constructor: cid required")
        self._type = resolve_type(stream_type)
        self._cid = to_cid(cid)
        self._commit = self._parse_commit(commit)

        tail = GENESIS_COMMIT_MARKER if self._commit is None else bytes(self._commit)
        self._bytes = encode_stream_bytes(self._type, self._cid) + tail
        self._string = multibase.encode(self._bytes, "base36")

    def _parse_commit(self, commit: Optional[Union[CID, str, bytes, int]]) -> Optional[CID]:
        # 0 and None both designate the genesis commit
        if commit is None or commit == 0 or commit == "0":
            return None
        parsed = to_cid(commit)
        if bytes(parsed) == bytes(self._cid):
            return None
        return parsed

    @classmethod
    def from_stream(cls, stream_id: StreamID, commit: Optional[Union[CID, str, bytes, int]] = None) -> "CommitID":
        return cls(stream_id.type, stream_id.cid, commit)

    @classmethod
    def from_bytes(cls, data: Union[bytes, bytearray, memoryview]) -> "CommitID":
        """
        Parse CommitID from bytes.

        Raises:
            EncodingError: If the bytes do not carry commit information
        """
        parsed = parsing.from_bytes(data, "CommitID")
        if parsed.kind != parsing.COMMIT_ID_KIND:
            encoded = multibase.encode(bytes(data), "base36")
            raise EncodingError(f"Invalid CommitID bytes {encoded}: does not contain commit")
        return cls(parsed.type, parsed.genesis, parsed.commit)

    @classmethod
    def from_string(cls, value: str) -> "CommitID":
        parsed = parsing.from_string(value, "CommitID")
        if parsed.kind != parsing.COMMIT_ID_KIND:
            raise EncodingError(f"Invalid CommitID string {value}: does not contain commit")
        return cls(parsed.type, parsed.genesis, parsed.commit)

    @property
    def type(self) -> int:
        return self._type

    @property
    def type_name(self) -> str:
        return get_name_by_code(self._type)

    @property
    def cid(self) -> CID:
        """Genesis CID."""
        return self._cid

    @property
    def commit(self) -> CID:
        """Commit CID, falling back to the genesis CID."""
        return self._commit if self._commit is not None else self._cid

    @property
    def is_genesis(self) -> bool:
        return self._commit is None

    @property
    def base_id(self) -> StreamID:
        """StreamID portion, without the commit pointer."""
        return StreamID(self._type, self._cid)

    def to_bytes(self) -> bytes:
        return self._bytes

    def to_url(self) -> str:
        return f"{URL_SCHEME}{self._string}"

    def equals(self, other: object) -> bool:
        return (
            isinstance(other, CommitID)
            and self._type == other._type
            and bytes(self._cid) == bytes(other._cid)
            and bytes(self.commit) == bytes(other.commit)
        )

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self.equals(other)

    def __hash__(self) -> int:
        return hash((CommitID, self._bytes))

    def __str__(self) -> str:
        return self._string

    def __repr__(self) -> str:
        return f"CommitID({self._string})"


def parse_stream_ref(value: Union[str, bytes, StreamID, CommitID]) -> Union[StreamID, CommitID]:
    """Parse either identifier kind from its string or bytes form."""
    if isinstance(value, (StreamID, CommitID)):
        return value
    if isinstance(value, str):
        parsed = parsing.from_string(value)
    else:
        parsed = parsing.from_bytes(value)
    if parsed.kind == parsing.COMMIT_ID_KIND:
        return CommitID(parsed.type, parsed.genesis, parsed.commit)
    return StreamID(parsed.type, parsed.genesis)
