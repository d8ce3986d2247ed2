"""
Commit payloads, canonical encoding and signed envelopes.
"""

from .payloads import DataEventPayload, InitEventHeader, InitEventPayload, TimeEventPayload
from .codec import MAX_BLOCK_SIZE, Payload, decode_payload, encode_payload, payload_cid, restrict_block_size
from .signer import KeyDIDSigner, KeyDIDVerifier, Signer, Verifier
from .envelope import JWSSignature, SignedEvent, sign_event, verify_signed_event
from .container import (
    CommitKind,
    Event,
    EventContainer,
    decode_event,
    encode_event,
    event_cid,
    event_to_container,
)
from .builders import (
    create_data_event,
    create_data_payload,
    create_init_event,
    create_init_header,
    get_deterministic_init_payload,
)

__all__ = [
    "DataEventPayload",
    "InitEventHeader",
    "InitEventPayload",
    "TimeEventPayload",
    "MAX_BLOCK_SIZE",
    "Payload",
    "decode_payload",
    "encode_payload",
    "payload_cid",
    "restrict_block_size",
    "KeyDIDSigner",
    "KeyDIDVerifier",
    "Signer",
    "Verifier",
    "JWSSignature",
    "SignedEvent",
    "sign_event",
    "verify_signed_event",
    "CommitKind",
    "Event",
    "EventContainer",
    "decode_event",
    "encode_event",
    "event_cid",
    "event_to_container",
    "create_data_event",
    "create_data_payload",
    "create_init_event",
    "create_init_header",
    "get_deterministic_init_payload",
]
