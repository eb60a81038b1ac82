"""
Contract signature validation (ERC-1271).

Answers "did the wallet's owner sign this digest?" for third-party verifiers.
The answer is one of two fixed 4-byte sentinels:

- ``0x1626ba7e``: the magic value, signature valid
- ``0xffffffff``: signature invalid or unrecognised

Signatures are 65 bytes, ``r (32) || s (32) || v (1)``. Upper-half ``s``
values are rejected rather than normalised, so a signature and its
malleated twin never both validate.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from ..address_checksum import is_null_address, normalize_identity
from ..crypto_utils import (
    DIGEST_LENGTH,
    SIGNATURE_LENGTH,
    _HALF_CURVE_ORDER,
    is_canonical_signature,
    recover_signer_address,
)
from ..vesting_exceptions import (
    MalformedSignatureError,
    NonCanonicalSignatureError,
    SignatureError,
)

logger = logging.getLogger(__name__)

ERC1271_MAGIC_VALUE = bytes.fromhex("1626ba7e")
ERC1271_INVALID_VALUE = bytes.fromhex("ffffffff")

RecoverFn = Callable[[bytes, int, int, int], Optional[str]]


def decode_signature(signature: bytes) -> tuple[int, int, int]:
    """
    Split a 65-byte signature into ``(r, s, v)``.

    Raises:
        MalformedSignatureError: Wrong length, ``r``/``s`` out of range or ``v`` not 27/28
        NonCanonicalSignatureError: ``s`` above half the curve order
    """
    if not isinstance(signature, (bytes, bytearray)):
        raise MalformedSignatureError("Signature must be bytes")
    if len(signature) != SIGNATURE_LENGTH:
        raise MalformedSignatureError(
            f"Signature must be {SIGNATURE_LENGTH} bytes, got {len(signature)} bytes"
        )

    r = int.from_bytes(signature[0:32], "big")
    s = int.from_bytes(signature[32:64], "big")
    v = signature[64]

    if not is_canonical_signature(r, s):
        if s > _HALF_CURVE_ORDER:
            raise NonCanonicalSignatureError("Signature s value is in the upper half of the curve order")
        raise MalformedSignatureError("Signature r or s component is out of range")
    if v not in (27, 28):
        raise MalformedSignatureError(f"Signature v must be 27 or 28, got {v}")
    return r, s, v


class SignatureAuthorizationPolicy:
    """
    Validates signatures against the wallet owner.

    ``owner_provider`` returns the owner at call time so ownership changes
    are honoured. ``recover`` is the public-key recovery primitive; it
    returns the signer address, or the null address when recovery fails.
    """

    def __init__(
        self,
        owner_provider: Callable[[], Optional[str]],
        recover: RecoverFn = recover_signer_address,
    ) -> None:
        self._owner_provider = owner_provider
        self._recover = recover

    def recover_signer(self, digest: bytes, signature: bytes) -> str:
        """
        Recover the signer of ``digest``.

        Raises:
            SignatureError: If the digest or signature is malformed, or
                recovery yields the null address
        """
        if not isinstance(digest, (bytes, bytearray)) or len(digest) != DIGEST_LENGTH:
            raise MalformedSignatureError(f"Digest must be {DIGEST_LENGTH} bytes")
        r, s, v = decode_signature(signature)

        signer = self._recover(bytes(digest), v, r, s)
        if is_null_address(signer):
            raise SignatureError("Signature recovery yielded the null address")
        return normalize_identity(signer)

    def is_valid_signature(self, digest: bytes, signature: bytes) -> bytes:
        """
        ERC-1271 ``isValidSignature(hash, signature)``.

        Returns:
            ERC1271_MAGIC_VALUE if the owner signed ``digest``,
            ERC1271_INVALID_VALUE otherwise
        """
        try:
            signer = self.recover_signer(digest, signature)
        except SignatureError as exc:
            logger.warning(
                "Signature rejected",
                extra={
                    "event": "signature.rejected",
                    "reason": type(exc).__name__,
                    "error": str(exc),
                }
            )
            return ERC1271_INVALID_VALUE

        owner = normalize_identity(self._owner_provider())
        if owner is not None and signer == owner:
            logger.debug(
                "Signature accepted",
                extra={"event": "signature.accepted", "signer": signer[:10]},
            )
            return ERC1271_MAGIC_VALUE

        logger.warning(
            "Signature rejected",
            extra={
                "event": "signature.rejected",
                "reason": "signer_mismatch",
                "signer": signer[:10],
            }
        )
        return ERC1271_INVALID_VALUE
