"""
CID helpers.
"""

import os
from typing import Any, Union

import dag_cbor
from multiformats import CID, multihash

from ..errors import EncodingError

DAG_CBOR_CODEC = "dag-cbor"
HASH_FUNCTION = "sha2-256"


def create_cid(block: bytes, codec: str = DAG_CBOR_CODEC) -> CID:
    """
    Create a CIDv1 (sha2-256) for a binary block.

    Args:
        block: Encoded block bytes
        codec: Multicodec name of the block encoding

    Returns:
        CID addressing the block
    """
    digest = multihash.digest(block, HASH_FUNCTION)
    return CID("base32", 1, codec, digest)


def cid_for_value(value: Any) -> CID:
    """CID of the DAG-CBOR encoding of value."""
    return create_cid(dag_cbor.encode(value))


def to_cid(value: Union[CID, str, bytes]) -> CID:
    """Coerce a CID, CID string or CID bytes to a CID."""
    if isinstance(value, CID):
        return value
    try:
        return CID.decode(value)
    except (ValueError, KeyError, TypeError) as e:
        raise EncodingError(f"Invalid CID {value!r}: {e}") from e


def random_cid() -> CID:
    """Random CID, for fixtures and tests only."""
    return create_cid(os.urandom(32), codec="raw")
