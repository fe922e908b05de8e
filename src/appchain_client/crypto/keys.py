"""
Ed25519 key pairs for appchain accounts.

A key account's address is its 32-byte public key rendered as 0x-hex, which
is also the AccountId the runtime uses for signature verification.
"""

from __future__ import annotations
import secrets
from typing import Optional, Union

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.ed25519 import (
    Ed25519PrivateKey,
    Ed25519PublicKey,
)

from ..codec.hashes import blake2_256
from ..runtime.errors import ErrorCode, InvalidIdError, SigningError
from ..runtime.ids import hex_to_bytes


class KeyPair:
    """
    Ed25519 key pair.

    Example:
        ```python
        alice = KeyPair.generate(username="alice")
        signature = alice.sign(b"payload")
        assert KeyPair.verify_with(alice.address, b"payload", signature)
        ```
    """

    def __init__(self, seed: bytes, username: Optional[str] = None):
        """
        Initialize from a 32-byte private key seed.

        Args:
            seed: 32-byte Ed25519 private key seed
            username: Optional label carried for logging

        Raises:
            SigningError: If the seed is not 32 bytes
        """
        if len(seed) != 32:
            raise SigningError(f"Ed25519 seed must be 32 bytes, got {len(seed)}")

        self._seed = seed
        self.username = username
        self._private_key = Ed25519PrivateKey.from_private_bytes(seed)
        self._public_bytes = self._private_key.public_key().public_bytes(
            encoding=serialization.Encoding.Raw,
            format=serialization.PublicFormat.Raw,
        )

    @classmethod
    def generate(cls, username: Optional[str] = None) -> KeyPair:
        """Generate a new random key pair."""
        return cls(secrets.token_bytes(32), username=username)

    @classmethod
    def from_seed(cls, seed: Union[str, bytes], username: Optional[str] = None) -> KeyPair:
        """
        Create a key pair from a seed.

        Args:
            seed: 32 raw bytes or a 0x-prefixed/bare hex string of 32 bytes
            username: Optional label
        """
        try:
            seed_bytes = hex_to_bytes(seed)
        except InvalidIdError as e:
            raise SigningError(f"Invalid seed: {e}", cause=e)
        return cls(seed_bytes, username=username)

    @classmethod
    def from_password(cls, username: str, password: str) -> KeyPair:
        """
        Derive a deterministic key pair from a username and password.

        The seed is ``blake2_256("{username}:{password}")``, so the same
        credentials always yield the same account.
        """
        return cls(blake2_256(f"{username}:{password}".encode('utf-8')), username=username)

    @property
    def public_key(self) -> bytes:
        return self._public_bytes

    @property
    def address(self) -> str:
        """0x-prefixed hex AccountId of this key."""
        return "0x" + self._public_bytes.hex()

    @property
    def seed_hex(self) -> str:
        return "0x" + self._seed.hex()

    def sign(self, message: bytes) -> bytes:
        """
        Sign a message.

        Returns:
            64-byte Ed25519 signature
        """
        return self._private_key.sign(message)

    def verify(self, message: bytes, signature: bytes) -> bool:
        return KeyPair.verify_with(self.address, message, signature)

    @staticmethod
    def verify_with(address: str, message: bytes, signature: bytes) -> bool:
        """
        Verify a signature against a key address.

        Args:
            address: 0x-hex public key of the signer
            message: Message that was signed
            signature: 64-byte signature

        Returns:
            True if the signature is valid
        """
        try:
            public_key = Ed25519PublicKey.from_public_bytes(hex_to_bytes(address))
        except ValueError as e:
            raise SigningError(f"Invalid public key {address}: {e}",
                               ErrorCode.INVALID_SIGNATURE, cause=e)
        try:
            public_key.verify(signature, message)
        except InvalidSignature:
            return False
        return True

    def __eq__(self, other) -> bool:
        if not isinstance(other, KeyPair):
            return False
        return self._public_bytes == other._public_bytes

    def __hash__(self) -> int:
        return hash(self._public_bytes)

    def __repr__(self) -> str:
        label = f"{self.username}, " if self.username else ""
        return f"KeyPair({label}{self.address})"
