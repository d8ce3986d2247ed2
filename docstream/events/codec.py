"""
Canonical binary encoding for commit payloads.

Payloads are encoded as DAG-CBOR: map keys are sorted, CIDs use tag 42 and
unset optional fields are never written.
"""

from typing import Any, Dict, Union

import dag_cbor
from multiformats import CID

from ..errors import EncodingError
from ..identifiers import create_cid
from .payloads import DataEventPayload, InitEventPayload, TimeEventPayload

Payload = Union[InitEventPayload, DataEventPayload, TimeEventPayload]

MAX_BLOCK_SIZE = 256_000


def encode_block(value: Any) -> bytes:
    # dag_cbor raises its own error classes as well as TypeError
    try:
        return dag_cbor.encode(value)
    except Exception as e:
        raise EncodingError(f"Cannot encode value as DAG-CBOR: {e}") from e


def decode_block(data: bytes) -> Any:
    try:
        return dag_cbor.decode(bytes(data))
    except Exception as e:
        raise EncodingError(f"Invalid DAG-CBOR block: {e}") from e


def restrict_block_size(block: bytes, cid: CID) -> None:
    """
    Reject commit blocks larger than MAX_BLOCK_SIZE.

    Raises:
        EncodingError: With the commit CID and the block size
    """
    size = len(block)
    if size > MAX_BLOCK_SIZE:
        raise EncodingError(f"{cid} commit size {size} exceeds the maximum block size of {MAX_BLOCK_SIZE}")


def payload_from_dict(data: Dict[str, Any]) -> Payload:
    """
    Build the payload model matching the structural shape of a decoded map.

    Shape rules:
    - `proof` present: time payload
    - `header` with `controllers`: init payload
    - `prev` and `data` present: data payload
    """
    if not isinstance(data, dict):
        raise EncodingError("Commit payload must be a map")
    if "proof" in data:
        return TimeEventPayload.from_dict(data)
    header = data.get("header")
    if isinstance(header, dict) and "controllers" in header:
        return InitEventPayload.from_dict(data)
    if "prev" in data and "data" in data:
        return DataEventPayload.from_dict(data)
    raise EncodingError(f"Unrecognized commit payload shape with keys {sorted(data.keys())}")


def encode_payload(payload: Payload) -> bytes:
    return encode_block(payload.to_dict())


def decode_payload(data: bytes) -> Payload:
    return payload_from_dict(decode_block(data))


def payload_cid(payload: Payload) -> CID:
    """CID of the canonical encoding of payload."""
    return create_cid(encode_payload(payload))
