from __future__ import annotations

"""
Address handling - EIP-55 mixed-case checksummed identities.

Every identity the wallet stores or compares (beneficiary, revoker,
recovered signer, token contract) passes through ``normalize_address`` so
that comparisons are case-insensitive and the null identity has a single
representation.

Address Format:
- Raw:      0x7a8b9c0d1e2f3a4b5c6d7e8f9a0b1c2d3e4f5a6b
- Checksum: 0x7A8b9C0d1E2f3A4b5C6D7e8F9a0B1c2D3e4F5A6b
"""

from eth_utils import is_address, is_checksum_address, to_checksum_address

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"


def is_null_address(address: str | None) -> bool:
    """True for ``None``, the empty string, and the all-zero address."""
    if not address:
        return True
    return address.lower() == ZERO_ADDRESS


def is_checksum_valid(address: str) -> bool:
    """
    Verify if address has valid checksum.

    Args:
        address: Address to verify

    Returns:
        True if checksum is valid or address is all lowercase/uppercase
        False if checksum is invalid
    """
    if not isinstance(address, str) or not address.startswith(("0x", "0X")):
        return False
    hex_part = address[2:]
    if hex_part == hex_part.lower() or hex_part == hex_part.upper():
        return is_address(address)
    return is_checksum_address(address)


def validate_address(address: str) -> tuple[bool, str]:
    """
    Validate address format.

    Args:
        address: Address to validate

    Returns:
        Tuple of (is_valid, error_message or checksummed_address)
    """
    if not isinstance(address, str):
        return False, "Address must be a string"
    if not address.startswith(("0x", "0X")):
        return False, "Address must start with 0x"
    if len(address) != 42:
        return False, "Address must be 42 characters"
    try:
        int(address[2:], 16)
    except ValueError:
        return False, "Address contains invalid hex characters"
    if not is_checksum_valid(address):
        expected = to_checksum_address(address.lower())
        return False, f"Invalid checksum. Did you mean {expected}?"
    return True, to_checksum_address(address)


def normalize_address(address: str) -> str:
    """
    Normalize address to checksummed format.

    Raises:
        ValueError: If address is invalid
    """
    is_valid, result = validate_address(address)
    if not is_valid:
        raise ValueError(result)
    return result


def normalize_identity(address: str | None) -> str | None:
    """
    Normalize an identity that may be null.

    Returns ``None`` for the null identity and the checksummed address
    otherwise.
    """
    if is_null_address(address):
        return None
    return normalize_address(address)
