"""
Ed25519 signing and verification for commit envelopes.

Identities are `did:key` DIDs: `did:key:z` + base58btc(0xed01 || public key).
Other DID methods are not resolved here; any object implementing
`Verifier.verify_jws` can be passed to the envelope codec instead.
"""

import os
from abc import ABC, abstractmethod
from typing import Optional

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.ed25519 import (
    Ed25519PrivateKey,
    Ed25519PublicKey,
)
from multiformats import multibase

from ..errors import VerificationError

DID_KEY_PREFIX = "did:key:"
# Multicodec ed25519-pub (0xed) as varint
ED25519_PUB_CODEC = b"\xed\x01"
JWS_ALG = "EdDSA"


def did_from_public_key(public_key: Ed25519PublicKey) -> str:
    raw = public_key.public_bytes(
        encoding=serialization.Encoding.Raw,
        format=serialization.PublicFormat.Raw,
    )
    return DID_KEY_PREFIX + multibase.encode(ED25519_PUB_CODEC + raw, "base58btc")


def public_key_from_did(did: str) -> Ed25519PublicKey:
    """
    Resolve an Ed25519 `did:key` to its public key.

    Raises:
        VerificationError: If the DID is not an Ed25519 did:key
    """
    if not did.startswith(DID_KEY_PREFIX + "z"):
        raise VerificationError(f"Unsupported DID {did}: only Ed25519 did:key is supported")
    try:
        data = multibase.decode(did[len(DID_KEY_PREFIX):])
    except (ValueError, KeyError) as e:
        raise VerificationError(f"Invalid did:key {did}: {e}") from e
    if not data.startswith(ED25519_PUB_CODEC) or len(data) != len(ED25519_PUB_CODEC) + 32:
        raise VerificationError(f"Unsupported key type in DID {did}")
    return Ed25519PublicKey.from_public_bytes(data[len(ED25519_PUB_CODEC):])


def did_from_kid(kid: str) -> str:
    """Strip the fragment from a key identifier."""
    return kid.split("#", 1)[0]


class Signer(ABC):
    """Signing capability bound to a DID."""

    @property
    @abstractmethod
    def did(self) -> str:
        ...

    @property
    def kid(self) -> str:
        return f"{self.did}#{self.did[len(DID_KEY_PREFIX):]}"

    @abstractmethod
    def sign(self, data: bytes) -> bytes:
        ...


class Verifier(ABC):
    """
    Signature verification capability.

    verify_jws() returns the DID of the signer or raises VerificationError.
    """

    @abstractmethod
    def verify_jws(self, signing_input: bytes, signature: bytes, kid: str) -> str:
        ...


class KeyDIDSigner(Signer):
    """
    Ed25519 signer identified by a did:key.

    Usage:
        signer = KeyDIDSigner.from_seed(bytes(32))
        signature = signer.sign(b"payload")
    """

    def __init__(self, private_key: Ed25519PrivateKey):
        self.private_key = private_key
        self.public_key = private_key.public_key()
        self._did = did_from_public_key(self.public_key)

    @classmethod
    def generate(cls) -> "KeyDIDSigner":
        """Generate new Ed25519 keypair."""
        return cls(Ed25519PrivateKey.generate())

    @classmethod
    def from_seed(cls, seed: bytes) -> "KeyDIDSigner":
        """Deterministic signer from a 32 byte seed."""
        if len(seed) != 32:
            raise ValueError("Ed25519 seed must be 32 bytes")
        return cls(Ed25519PrivateKey.from_private_bytes(bytes(seed)))

    @classmethod
    def load_from_file(cls, path: str) -> "KeyDIDSigner":
        """
        Load private key from PEM file.

        Raises:
            FileNotFoundError: If key file doesn't exist
            ValueError: If key format is invalid
        """
        with open(path, "rb") as f:
            private_key = serialization.load_pem_private_key(f.read(), password=None)

        if not isinstance(private_key, Ed25519PrivateKey):
            raise ValueError("Key file is not Ed25519 private key")

        return cls(private_key)

    def save_to_file(self, path: str) -> None:
        """Save private key to PEM file."""
        os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
        private_pem = self.private_key.private_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PrivateFormat.PKCS8,
            encryption_algorithm=serialization.NoEncryption(),
        )
        with open(path, "wb") as f:
            f.write(private_pem)

    @property
    def did(self) -> str:
        return self._did

    def sign(self, data: bytes) -> bytes:
        return self.private_key.sign(data)

    def verifier(self) -> "KeyDIDVerifier":
        """Verifier bound to this signer's identity."""
        return KeyDIDVerifier(self._did)


class KeyDIDVerifier(Verifier):
    """
    Verifies Ed25519 signatures made by any did:key.

    Fields:
        id: DID the verifier is bound to (informational)
    """

    def __init__(self, did: Optional[str] = None):
        self.id = did

    def verify_jws(self, signing_input: bytes, signature: bytes, kid: str) -> str:
        did = did_from_kid(kid)
        public_key = public_key_from_did(did)
        try:
            public_key.verify(signature, signing_input)
        except InvalidSignature as e:
            raise VerificationError(f"Invalid signature for {did}") from e
        return did
