"""Solana wallet signature helpers."""

from __future__ import annotations

from collections.abc import Sequence

import base58
from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PublicKey

from app.utils.errors import InvalidInputError

PUBLIC_KEY_LENGTH = 32
SIGNATURE_LENGTH = 64


def decode_public_key(address: str) -> bytes:
    """Decode a base58 wallet address into raw Ed25519 public key bytes."""
    try:
        raw = base58.b58decode(address.strip())
    except ValueError as exc:
        raise InvalidInputError("Wallet address is not valid base58") from exc
    if len(raw) != PUBLIC_KEY_LENGTH:
        raise InvalidInputError("Wallet address must decode to 32 bytes")
    return raw


def decode_signature(signature: str | Sequence[int]) -> bytes:
    """Accept a base58 string or a byte array as produced by wallet adapters."""
    if isinstance(signature, str):
        try:
            raw = base58.b58decode(signature.strip())
        except ValueError as exc:
            raise InvalidInputError("Signature is not valid base58") from exc
    else:
        try:
            raw = bytes(signature)
        except (TypeError, ValueError) as exc:
            raise InvalidInputError("Invalid signature format") from exc

    if len(raw) != SIGNATURE_LENGTH:
        raise InvalidInputError("Signature must be 64 bytes")
    return raw


def sign_in_message(statement: str, nonce: int) -> bytes:
    """Return the exact bytes a wallet signs during admin sign-in."""
    return f"{statement}: {nonce}".encode()


def verify_wallet_signature(address: str, message: bytes, signature: str | Sequence[int]) -> bool:
    """Return True when ``signature`` is a valid Ed25519 signature of ``message``."""
    public_key = Ed25519PublicKey.from_public_bytes(decode_public_key(address))
    try:
        public_key.verify(decode_signature(signature), message)
    except InvalidSignature:
        return False
    return True
