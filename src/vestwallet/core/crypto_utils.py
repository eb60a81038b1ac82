"""Utility helpers for secp256k1 keys, recoverable signatures and digests."""

from __future__ import annotations

from cryptography.hazmat.primitives.asymmetric import ec
from eth_keys import keys
from eth_keys.exceptions import BadSignature
from eth_utils import ValidationError, keccak

from .address_checksum import ZERO_ADDRESS

_CURVE = ec.SECP256K1()
_CURVE_ORDER = int("FFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141", 16)
_HALF_CURVE_ORDER = _CURVE_ORDER // 2

SIGNATURE_LENGTH = 65
DIGEST_LENGTH = 32

def _private_key_to_hex(private_key: ec.EllipticCurvePrivateKey) -> str:
    return private_key.private_numbers().private_value.to_bytes(32, "big").hex()

def _load_eth_private_key(private_hex: str) -> keys.PrivateKey:
    raw = bytes.fromhex(private_hex[2:] if private_hex.startswith("0x") else private_hex)
    if len(raw) != 32:
        raise ValueError("Private key hex must be 32 bytes.")
    return keys.PrivateKey(raw)

def generate_secp256k1_keypair_hex() -> tuple[str, str]:
    """Generate a fresh key and return ``(private_hex, checksummed_address)``."""
    private_key = ec.generate_private_key(_CURVE)
    private_hex = _private_key_to_hex(private_key)
    return private_hex, address_from_private_key(private_hex)

def address_from_private_key(private_hex: str) -> str:
    return _load_eth_private_key(private_hex).public_key.to_checksum_address()

def _validate_signature_range(r: int, s: int) -> None:
    """
    Ensure signature components fall within the curve order.

    Raises:
        ValueError: If either component is out of range.
    """
    if not (1 <= r < _CURVE_ORDER):
        raise ValueError("Signature r component out of range.")
    if not (1 <= s < _CURVE_ORDER):
        raise ValueError("Signature s component out of range.")

def is_canonical_signature(r: int, s: int) -> bool:
    """
    Check whether signature components are already canonical.

    Args:
        r: Signature r component
        s: Signature s component

    Returns:
        True if components fall within range and have low-S form.
    """
    try:
        _validate_signature_range(r, s)
    except ValueError:
        return False
    return s <= _HALF_CURVE_ORDER

def hash_personal_message(message: bytes) -> bytes:
    """EIP-191 ``personal_sign`` digest of ``message``."""
    prefix = b"\x19Ethereum Signed Message:\n" + str(len(message)).encode()
    return keccak(prefix + message)

def sign_digest(private_hex: str, digest: bytes) -> bytes:
    """
    Sign a 32-byte digest and return the 65-byte ``r || s || v`` encoding.

    ``v`` is 27 or 28 and ``s`` is always in low-S form.
    """
    if len(digest) != DIGEST_LENGTH:
        raise ValueError(f"Digest must be {DIGEST_LENGTH} bytes, got {len(digest)}")
    signature = _load_eth_private_key(private_hex).sign_msg_hash(digest)
    return (
        signature.r.to_bytes(32, "big")
        + signature.s.to_bytes(32, "big")
        + bytes([signature.v + 27])
    )

def recover_signer_address(digest: bytes, v: int, r: int, s: int) -> str:
    """
    Recover the address that produced ``(v, r, s)`` over ``digest``.

    Returns the null address when recovery is impossible, mirroring the
    behaviour of the EVM ``ecrecover`` precompile.
    """
    if len(digest) != DIGEST_LENGTH or v not in (27, 28):
        return ZERO_ADDRESS
    try:
        _validate_signature_range(r, s)
        signature = keys.Signature(vrs=(v - 27, r, s))
        public_key = signature.recover_public_key_from_msg_hash(digest)
    except (ValueError, BadSignature, ValidationError):
        return ZERO_ADDRESS
    return public_key.to_checksum_address()
