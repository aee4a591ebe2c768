"""
Transaction signing.

The service hands out unsigned Solana transactions as base64 text. A
``Signer`` fills in the owner's signature and returns the signed transaction
in the same encoding, ready for ``PostSubmit``.
"""

from __future__ import annotations

import base64
import binascii
import logging
from typing import TYPE_CHECKING, List, Optional, Protocol, Tuple

import base58
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey

from .config import private_key_setting
from .errors import SigningError

if TYPE_CHECKING:
    from .config import ClientOptions

logger = logging.getLogger(__name__)

SIGNATURE_LENGTH = 64
PUBLIC_KEY_LENGTH = 32
SEED_LENGTH = 32
KEYPAIR_LENGTH = 64
MESSAGE_HEADER_LENGTH = 3
VERSIONED_MESSAGE_FLAG = 0x80


class Signer(Protocol):
    """Anything that can sign an unsigned base64 transaction."""

    def sign(self, unsigned_transaction: str) -> str: ...


def read_compact_u16(data: bytes, offset: int) -> Tuple[int, int]:
    """Decode a Solana compact-u16 at ``offset``; returns ``(value, next_offset)``."""
    value = 0
    for index in range(3):
        if offset + index >= len(data):
            raise SigningError("transaction truncated inside a length prefix")
        byte = data[offset + index]
        value |= (byte & 0x7F) << (7 * index)
        if not byte & 0x80:
            return value, offset + index + 1
    raise SigningError("length prefix is longer than three bytes")


class _WireTransaction:
    """Signature slots plus the message bytes of a serialised transaction"""

    def __init__(self, raw: bytes) -> None:
        count, offset = read_compact_u16(raw, 0)
        signatures_end = offset + count * SIGNATURE_LENGTH
        if signatures_end > len(raw):
            raise SigningError("transaction truncated inside its signatures")
        self.signatures: List[bytes] = [
            raw[start : start + SIGNATURE_LENGTH] for start in range(offset, signatures_end, SIGNATURE_LENGTH)
        ]
        self.message = raw[signatures_end:]
        self.required_signers = self._parse_required_signers()

    def _parse_required_signers(self) -> List[bytes]:
        message = self.message
        offset = 1 if message and message[0] & VERSIONED_MESSAGE_FLAG else 0
        if len(message) < offset + MESSAGE_HEADER_LENGTH:
            raise SigningError("transaction message header is truncated")
        num_required = message[offset]
        key_count, keys_offset = read_compact_u16(message, offset + MESSAGE_HEADER_LENGTH)
        if num_required > key_count:
            raise SigningError("message requires more signers than it lists accounts")
        keys_end = keys_offset + key_count * PUBLIC_KEY_LENGTH
        if keys_end > len(message):
            raise SigningError("transaction message truncated inside its account keys")
        if num_required != len(self.signatures):
            raise SigningError(
                f"transaction has {len(self.signatures)} signature slot(s) but its message requires {num_required}"
            )
        signers_end = keys_offset + num_required * PUBLIC_KEY_LENGTH
        return [message[start : start + PUBLIC_KEY_LENGTH] for start in range(keys_offset, signers_end, PUBLIC_KEY_LENGTH)]

    def serialize(self) -> bytes:
        count = len(self.signatures)
        prefix = bytearray()
        while True:
            byte = count & 0x7F
            count >>= 7
            if count:
                prefix.append(byte | 0x80)
            else:
                prefix.append(byte)
                break
        return bytes(prefix) + b"".join(self.signatures) + self.message


class Ed25519TransactionSigner:
    """Signs Solana transactions with a local Ed25519 key."""

    def __init__(self, private_key: Ed25519PrivateKey) -> None:
        self._private_key = private_key
        self._public_key = private_key.public_key().public_bytes(
            encoding=serialization.Encoding.Raw,
            format=serialization.PublicFormat.Raw,
        )

    @classmethod
    def from_base58(cls, encoded_key: str) -> "Ed25519TransactionSigner":
        """Load a base58 key: a 64-byte keypair (seed + public key) or a 32-byte seed."""
        if not encoded_key or not encoded_key.strip():
            raise SigningError("private key is empty")
        try:
            key_bytes = base58.b58decode(encoded_key.strip())
        except ValueError as exc:
            raise SigningError("private key is not valid base58") from exc

        if len(key_bytes) not in (SEED_LENGTH, KEYPAIR_LENGTH):
            raise SigningError(f"private key must decode to {SEED_LENGTH} or {KEYPAIR_LENGTH} bytes, got {len(key_bytes)}")

        signer = cls(Ed25519PrivateKey.from_private_bytes(key_bytes[:SEED_LENGTH]))
        if len(key_bytes) == KEYPAIR_LENGTH and key_bytes[SEED_LENGTH:] != signer.public_key:
            raise SigningError("keypair public half does not match its secret seed")
        return signer

    @property
    def public_key(self) -> bytes:
        return self._public_key

    @property
    def public_key_base58(self) -> str:
        return base58.b58encode(self._public_key).decode("ascii")

    def sign(self, unsigned_transaction: str) -> str:
        try:
            raw = base64.b64decode(unsigned_transaction, validate=True)
        except (ValueError, binascii.Error) as exc:
            raise SigningError("transaction is not valid base64") from exc
        if not raw:
            raise SigningError("transaction is empty")

        transaction = _WireTransaction(raw)
        try:
            slot = transaction.required_signers.index(self._public_key)
        except ValueError as exc:
            raise SigningError(f"{self.public_key_base58} is not a required signer of this transaction") from exc

        transaction.signatures[slot] = self._private_key.sign(transaction.message)
        logger.debug("Signed transaction slot %d for %s", slot, self.public_key_base58)
        return base64.b64encode(transaction.serialize()).decode("ascii")


def load_private_key_from_env() -> Optional[str]:
    """Return ``PRIVATE_KEY`` from the environment or ``.env`` defaults, if set."""
    return private_key_setting()


def signer_from_options(options: "ClientOptions") -> Optional[Signer]:
    """Resolve the signer for a client; ``None`` when no key is configured."""
    if options.signer is not None:
        return options.signer
    if options.private_key:
        return Ed25519TransactionSigner.from_base58(options.private_key)
    return None


__all__ = [
    "Ed25519TransactionSigner",
    "Signer",
    "load_private_key_from_env",
    "read_compact_u16",
    "signer_from_options",
]
