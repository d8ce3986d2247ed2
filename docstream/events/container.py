"""
Decoded commit containers.

The commit variant is resolved once here and carried as `CommitKind`;
downstream code dispatches on the kind instead of re-inspecting payload shape.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Union

from multiformats import CID

from ..errors import EncodingError, VerificationError
from ..identifiers import create_cid
from .codec import Payload, decode_block, encode_block, encode_payload, payload_from_dict, restrict_block_size
from .envelope import SignedEvent, verify_signed_event
from .payloads import DataEventPayload, InitEventPayload, TimeEventPayload
from .signer import Verifier

Event = Union[SignedEvent, InitEventPayload, TimeEventPayload]


class CommitKind(str, Enum):
    DETERMINISTIC_INIT = "deterministic-init"
    SIGNED_INIT = "signed-init"
    DATA = "data"
    TIME = "time"

    @property
    def is_init(self) -> bool:
        return self in (CommitKind.DETERMINISTIC_INIT, CommitKind.SIGNED_INIT)


@dataclass(frozen=True)
class EventContainer:
    """
    Verified commit.

    Fields:
        kind: Commit variant
        payload: Decoded payload
        signed: Whether the commit came in a signed envelope
        signer: DID that signed the commit (signed commits only)
        cid: CID of the payload block (signed commits only)
        cacao_block: Capability block attached to the envelope, if any
    """
    kind: CommitKind
    payload: Payload
    signed: bool = False
    signer: Optional[str] = None
    cid: Optional[CID] = None
    cacao_block: Optional[bytes] = None


def classify(payload: Payload, signed: bool) -> CommitKind:
    """
    Map a payload to its commit kind.

    Raises:
        EncodingError: If the payload cannot appear with this signing mode
    """
    if isinstance(payload, TimeEventPayload):
        if signed:
            raise EncodingError("Time events must not be signed")
        return CommitKind.TIME
    if isinstance(payload, DataEventPayload):
        if not signed:
            raise EncodingError("Data events must be signed")
        return CommitKind.DATA
    if isinstance(payload, InitEventPayload):
        return CommitKind.SIGNED_INIT if signed else CommitKind.DETERMINISTIC_INIT
    raise EncodingError(f"Unsupported payload type {type(payload).__name__}")


def signed_event_to_container(verifier: Verifier, event: SignedEvent) -> EventContainer:
    restrict_block_size(event.linked_block, event.link)
    signer = verify_signed_event(verifier, event)
    payload = payload_from_dict(decode_block(event.linked_block))
    kind = classify(payload, signed=True)
    if kind is CommitKind.SIGNED_INIT:
        controller = payload.header.controller
        if controller != signer:
            raise VerificationError(
                f"Invalid signature: controller {controller} does not match signer {signer}"
            )
    return EventContainer(
        kind=kind,
        payload=payload,
        signed=True,
        signer=signer,
        cid=event.link,
        cacao_block=event.cacao_block,
    )


def event_to_container(verifier: Optional[Verifier], event: Event) -> EventContainer:
    """
    Verify and classify a commit.

    Signed envelopes are verified with verifier; unsigned payloads (deterministic
    init, time) pass through unchanged. Blocks over MAX_BLOCK_SIZE are rejected.
    """
    if isinstance(event, SignedEvent):
        if verifier is None:
            raise VerificationError("A verifier is required for signed events")
        return signed_event_to_container(verifier, event)
    if isinstance(event, (InitEventPayload, TimeEventPayload)):
        block = encode_payload(event)
        restrict_block_size(block, create_cid(block))
        return EventContainer(kind=classify(event, signed=False), payload=event)
    if isinstance(event, DataEventPayload):
        raise EncodingError("Data events must be signed")
    raise EncodingError(f"Unsupported event type {type(event).__name__}")


def event_to_dict(event: Event) -> Dict[str, Any]:
    return event.to_dict()


def event_from_dict(data: Dict[str, Any]) -> Event:
    if not isinstance(data, dict):
        raise EncodingError("Event must be a map")
    if "jws" in data:
        return SignedEvent.from_dict(data)
    payload = payload_from_dict(data)
    if isinstance(payload, DataEventPayload):
        raise EncodingError("Data events must be signed")
    return payload


def encode_event(event: Event) -> bytes:
    """Canonical bytes of a whole event (envelope or unsigned payload)."""
    return encode_block(event_to_dict(event))


def decode_event(data: bytes) -> Event:
    return event_from_dict(decode_block(data))


def event_cid(event: Event) -> CID:
    """Commit CID: the CID of the event's canonical bytes."""
    return create_cid(encode_event(event))
