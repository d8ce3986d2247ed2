"""
Stream and commit identifiers.

- StreamID: stream type + genesis CID
- CommitID: StreamID + commit CID
"""

from .constants import STREAMID_CODEC, STREAM_TYPES
from .stream_id import StreamID
from .commit_id import CommitID, parse_stream_ref
from .utils import cid_for_value, create_cid, random_cid, to_cid


def random_stream_id(stream_type: str = "MID") -> StreamID:
    """Random StreamID, for fixtures and tests only."""
    return StreamID(stream_type, random_cid())


def get_stream_id(init_cid) -> StreamID:
    """StreamID of the model instance document created by the given init commit."""
    return StreamID("MID", to_cid(init_cid))


__all__ = [
    "STREAMID_CODEC",
    "STREAM_TYPES",
    "StreamID",
    "CommitID",
    "parse_stream_ref",
    "cid_for_value",
    "create_cid",
    "random_cid",
    "random_stream_id",
    "get_stream_id",
    "to_cid",
]
