"""
Signed commit envelopes.

A signed event carries the canonical payload block (`linkedBlock`) and a JWS
whose payload is the base64url encoded CID of that block. Signatures are over
the JWS signing input `protected + "." + payload`.
"""

import base64
import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from multiformats import CID

from ..errors import EncodingError, VerificationError
from ..identifiers import create_cid
from ..identifiers.utils import to_cid
from .codec import Payload, encode_payload
from .signer import JWS_ALG, Signer, Verifier


def b64url_encode(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def b64url_decode(value: str) -> bytes:
    try:
        return base64.urlsafe_b64decode(value + "=" * (-len(value) % 4))
    except (ValueError, TypeError) as e:
        raise EncodingError(f"Invalid base64url value: {e}") from e


@dataclass(frozen=True)
class JWSSignature:
    protected: str
    signature: str

    @property
    def header(self) -> Dict[str, Any]:
        try:
            return json.loads(b64url_decode(self.protected))
        except ValueError as e:
            raise EncodingError(f"Invalid JWS protected header: {e}") from e


@dataclass(frozen=True)
class SignedEvent:
    """
    Signed envelope.

    Fields:
        payload: base64url CID bytes of linked_block
        signatures: JWS signatures
        link: CID of linked_block
        linked_block: Canonical payload bytes
        cacao_block: Optional linked capability block, carried unchanged
    """
    payload: str
    signatures: List[JWSSignature]
    link: CID
    linked_block: bytes
    cacao_block: Optional[bytes] = None

    def signing_input(self, signature: JWSSignature) -> bytes:
        return f"{signature.protected}.{self.payload}".encode("ascii")

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "jws": {
                "link": self.link,
                "payload": self.payload,
                "signatures": [
                    {"protected": s.protected, "signature": s.signature} for s in self.signatures
                ],
            },
            "linkedBlock": self.linked_block,
        }
        if self.cacao_block is not None:
            data["cacaoBlock"] = self.cacao_block
        return data

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "SignedEvent":
        jws = data.get("jws")
        if not isinstance(jws, dict):
            raise EncodingError("Signed event must contain a JWS")
        signatures = jws.get("signatures")
        if not isinstance(signatures, list) or not signatures:
            raise EncodingError("Signed event must contain at least one signature")
        linked_block = data.get("linkedBlock")
        if not isinstance(linked_block, (bytes, bytearray)):
            raise EncodingError("Signed event must contain the linked payload block")
        try:
            parsed = [JWSSignature(protected=s["protected"], signature=s["signature"]) for s in signatures]
        except (KeyError, TypeError) as e:
            raise EncodingError(f"Invalid JWS signature entry: {e}") from e
        cacao = data.get("cacaoBlock")
        return SignedEvent(
            payload=jws.get("payload", ""),
            signatures=parsed,
            link=to_cid(jws.get("link")),
            linked_block=bytes(linked_block),
            cacao_block=bytes(cacao) if cacao is not None else None,
        )


def sign_event(signer: Signer, payload: Payload, cacao_block: Optional[bytes] = None) -> SignedEvent:
    """
    Wrap payload into a signed envelope.

    Args:
        signer: Signing capability
        payload: Init or data payload
        cacao_block: Optional capability block to attach

    Returns:
        SignedEvent
    """
    block = encode_payload(payload)
    link = create_cid(block)
    payload_b64 = b64url_encode(bytes(link))
    header = {"alg": JWS_ALG, "kid": signer.kid}
    protected = b64url_encode(json.dumps(header, sort_keys=True, separators=(",", ":")).encode("utf-8"))
    signature = signer.sign(f"{protected}.{payload_b64}".encode("ascii"))
    return SignedEvent(
        payload=payload_b64,
        signatures=[JWSSignature(protected=protected, signature=b64url_encode(signature))],
        link=link,
        linked_block=block,
        cacao_block=cacao_block,
    )


def verify_signed_event(verifier: Verifier, event: SignedEvent) -> str:
    """
    Verify the envelope and return the signer DID.

    Checks that the JWS payload and link address the linked block and that the
    first signature is valid for its key id.

    Raises:
        VerificationError: On any mismatch
    """
    block_cid = create_cid(event.linked_block)
    if bytes(event.link) != bytes(block_cid):
        raise VerificationError(f"Linked block does not match JWS link {event.link}")
    try:
        payload_cid = CID.decode(b64url_decode(event.payload))
    except (ValueError, KeyError, EncodingError) as e:
        raise VerificationError(f"Invalid JWS payload: {e}") from e
    if bytes(payload_cid) != bytes(block_cid):
        raise VerificationError("JWS payload does not match the linked block")

    signature = event.signatures[0]
    try:
        header = signature.header
    except EncodingError as e:
        raise VerificationError(str(e)) from e
    kid = header.get("kid")
    if header.get("alg") != JWS_ALG or not isinstance(kid, str):
        raise VerificationError(f"Unsupported JWS header {header}")
    return verifier.verify_jws(event.signing_input(signature), b64url_decode(signature.signature), kid)
