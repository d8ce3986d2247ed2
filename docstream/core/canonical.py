"""
Canonical serialization for deterministic comparison and size accounting.

Document content size is the UTF-8 length of its compact JSON encoding.
"""

import base64
import json
from typing import Any

from multiformats import CID

from ..errors import EncodingError, SizeLimitError
from ..identifiers import CommitID, StreamID

MAX_DOCUMENT_SIZE = 16_000_000


def canonicalize(obj: Any) -> Any:
    """Recursively sort mapping keys and turn tuples into lists."""
    if isinstance(obj, dict):
        return {key: canonicalize(obj[key]) for key in sorted(obj)}
    if isinstance(obj, (list, tuple)):
        return [canonicalize(item) for item in obj]
    return obj


def _json_default(obj: Any) -> Any:
    if isinstance(obj, (bytes, bytearray)):
        return base64.urlsafe_b64encode(bytes(obj)).rstrip(b"=").decode("ascii")
    if isinstance(obj, (CID, StreamID, CommitID)):
        return str(obj)
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


def canonical_json_bytes(obj: Any) -> bytes:
    """
    Compact, key-sorted UTF-8 JSON of obj.

    Bytes render as unpadded base64url; CIDs and stream ids as their strings.
    """
    text = json.dumps(
        canonicalize(obj),
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
        default=_json_default,
    )
    return text.encode("utf-8")


def canonical_json_str(obj: Any) -> str:
    return canonical_json_bytes(obj).decode("utf-8")


def content_size(content: Any) -> int:
    """
    Size in bytes of the compact JSON encoding of content.

    Raises:
        EncodingError: If content holds values JSON cannot represent (bytes, CIDs)
    """
    try:
        text = json.dumps(content, separators=(",", ":"), ensure_ascii=False, allow_nan=False)
    except (TypeError, ValueError) as e:
        raise EncodingError(f"Content is not valid JSON: {e}") from e
    return len(text.encode("utf-8"))


def assert_valid_content_length(content: Any, limit: int = MAX_DOCUMENT_SIZE) -> None:
    """
    Validate that content does not exceed the maximum document size.

    Raises:
        SizeLimitError: With both the actual size and the limit
        EncodingError: If content is not representable as JSON
    """
    if content is None:
        return
    size = content_size(content)
    if size > limit:
        raise SizeLimitError(size, limit)
