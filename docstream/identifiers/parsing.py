"""
Binary and string parsing shared by StreamID and CommitID.

Layout:
    varint(STREAMID_CODEC) || varint(type) || genesis-cid [|| commit]

where the optional commit part is a single 0x00 byte (commit is the genesis)
or the bytes of the commit CID.
"""

from dataclasses import dataclass
from typing import Optional, Tuple, Union

from multiformats import CID, multibase, varint

from ..errors import EncodingError
from .constants import (
    GENESIS_COMMIT_MARKER,
    PATH_PREFIX,
    STREAMID_CODEC,
    STREAM_TYPES,
    URL_SCHEME,
)

STREAM_ID_KIND = "stream-id"
COMMIT_ID_KIND = "commit-id"


@dataclass(frozen=True)
class ParsedID:
    """
    Result of parsing identifier bytes.

    Fields:
        kind: STREAM_ID_KIND or COMMIT_ID_KIND
        type: Stream type code
        genesis: Genesis commit CID
        commit: Commit CID (None when the commit is the genesis commit)
    """
    kind: str
    type: int
    genesis: CID
    commit: Optional[CID] = None


def read_varint(data: bytes, offset: int) -> Tuple[int, int]:
    """Read an unsigned varint at offset, returning (value, next_offset)."""
    if offset >= len(data):
        raise EncodingError("Unexpected end of input while reading varint")
    try:
        value, size, _ = varint.decode_raw(data[offset:])
    except ValueError as e:
        raise EncodingError(f"Invalid varint: {e}") from e
    return value, offset + size


def read_cid(data: bytes, offset: int) -> Tuple[CID, int]:
    """
    Read a CID embedded at offset, returning (cid, next_offset).

    Supports CIDv0 (bare sha2-256 multihash) and CIDv1.
    """
    start = offset
    if data[offset:offset + 2] == b"\x12\x20":
        end = offset + 34
    else:
        _version, offset = read_varint(data, offset)
        _codec, offset = read_varint(data, offset)
        _hash_code, offset = read_varint(data, offset)
        digest_size, offset = read_varint(data, offset)
        end = offset + digest_size
    if end > len(data):
        raise EncodingError("Truncated CID bytes")
    try:
        cid = CID.decode(bytes(data[start:end]))
    except (ValueError, KeyError) as e:
        raise EncodingError(f"Invalid CID bytes: {e}") from e
    return cid, end


def from_bytes(data: Union[bytes, bytearray, memoryview], title: str = "StreamID") -> ParsedID:
    data = bytes(data)
    codec, offset = read_varint(data, 0)
    if codec != STREAMID_CODEC:
        raise EncodingError(f"Invalid {title}, expected codec {STREAMID_CODEC}, got {codec}")

    stream_type, offset = read_varint(data, offset)
    if stream_type not in STREAM_TYPES.values():
        raise EncodingError(f"No stream type registered for index {stream_type}")

    genesis, offset = read_cid(data, offset)
    rest = data[offset:]
    if not rest:
        return ParsedID(kind=STREAM_ID_KIND, type=stream_type, genesis=genesis)
    if rest == GENESIS_COMMIT_MARKER:
        return ParsedID(kind=COMMIT_ID_KIND, type=stream_type, genesis=genesis)

    commit, end = read_cid(data, offset)
    if end != len(data):
        raise EncodingError(f"Invalid {title}: trailing bytes after commit CID")
    return ParsedID(kind=COMMIT_ID_KIND, type=stream_type, genesis=genesis, commit=commit)


def _strip_prefix(value: str) -> str:
    if value.startswith(URL_SCHEME):
        return value[len(URL_SCHEME):]
    if value.startswith(PATH_PREFIX):
        return value[len(PATH_PREFIX):]
    return value


def decode_multibase(value: str, title: str = "StreamID") -> bytes:
    try:
        return multibase.decode(value)
    except (ValueError, KeyError) as e:
        raise EncodingError(f"Invalid {title} string {value}: {e}") from e


def from_string(value: str, title: str = "StreamID") -> ParsedID:
    """
    Parse a base36 identifier string or URL.

    Accepts `ceramic://<id>`, `/ceramic/<id>` and the `?version=<cid>` query
    form, where version `0` designates the genesis commit.
    """
    if not isinstance(value, str) or not value:
        raise EncodingError(f"Invalid {title} string {value!r}")

    body = _strip_prefix(value.strip())
    version: Optional[str] = None
    if "?" in body:
        body, query = body.split("?", 1)
        for part in query.split("&"):
            key, _, val = part.partition("=")
            if key == "version":
                version = val

    parsed = from_bytes(decode_multibase(body, title), title)
    if version is None:
        return parsed
    if parsed.kind == COMMIT_ID_KIND:
        raise EncodingError(f"Invalid {title} string {value}: commit given twice")
    if version == "0":
        return ParsedID(kind=COMMIT_ID_KIND, type=parsed.type, genesis=parsed.genesis)
    try:
        commit = CID.decode(version)
    except (ValueError, KeyError) as e:
        raise EncodingError(f"Invalid {title} string {value}: bad version {version}") from e
    return ParsedID(kind=COMMIT_ID_KIND, type=parsed.type, genesis=parsed.genesis, commit=commit)
