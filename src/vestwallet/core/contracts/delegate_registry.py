"""
Snapshot-style delegation registry.

Maps ``(delegator, scope_id)`` to a delegate. A scope id is a 32-byte value;
the all-zero id is the global scope. The vesting wallet forwards its
beneficiary's choice here with the wallet itself as delegator.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Optional

from ..access_control import parse_identity
from ..address_checksum import normalize_address
from ..vesting_exceptions import InvalidArgumentError

logger = logging.getLogger(__name__)

GLOBAL_SCOPE_ID = b"\x00" * 32


def normalize_scope_id(scope_id: bytes | str) -> bytes:
    """Accept raw bytes or a hex string and return the 32-byte scope id."""
    if isinstance(scope_id, str):
        text = scope_id[2:] if scope_id.startswith("0x") else scope_id
        try:
            scope_id = bytes.fromhex(text)
        except ValueError as exc:
            raise InvalidArgumentError(f"Scope id is not valid hex: {scope_id!r}") from exc
    if len(scope_id) > 32:
        raise InvalidArgumentError("Scope id must be at most 32 bytes")
    return scope_id.rjust(32, b"\x00")


def _delegator(delegator: str) -> str:
    try:
        return normalize_address(delegator)
    except ValueError as exc:
        raise InvalidArgumentError(f"Invalid delegator: {exc}") from exc


@dataclass
class DelegationEvent:
    """SetDelegate / ClearDelegate record."""

    event_type: str
    delegator: str
    scope_id: bytes
    delegate: str
    timestamp: float = field(default_factory=time.time)


class DelegateRegistry:
    """In-memory delegation registry."""

    def __init__(self, address: str = "0x469788fe6e9e9681c6ebf3bf78e7fd26fc015446") -> None:
        self.address = normalize_address(address)
        self._delegation: dict[tuple[str, bytes], str] = {}
        self.events: list[DelegationEvent] = []

    def delegation(self, delegator: str, scope_id: bytes | str = GLOBAL_SCOPE_ID) -> Optional[str]:
        return self._delegation.get((_delegator(delegator), normalize_scope_id(scope_id)))

    def set_delegate(self, delegator: str, scope_id: bytes | str, delegate: str) -> bool:
        """
        Record ``delegate`` for ``delegator`` in ``scope_id``.

        Raises:
            InvalidArgumentError: On self-delegation, a null or malformed delegate, or an
                unchanged delegate
        """
        delegator_norm = _delegator(delegator)
        scope = normalize_scope_id(scope_id)
        delegate_norm = parse_identity(delegate, "delegate")

        if delegate_norm is None:
            raise InvalidArgumentError("Can't delegate to 0x0")
        if delegate_norm == delegator_norm:
            raise InvalidArgumentError("Can't delegate to self")

        current = self._delegation.get((delegator_norm, scope))
        if current == delegate_norm:
            raise InvalidArgumentError("Already delegated to this delegate")

        self._delegation[(delegator_norm, scope)] = delegate_norm
        if current is not None:
            self.events.append(DelegationEvent("ClearDelegate", delegator_norm, scope, current))
        self.events.append(DelegationEvent("SetDelegate", delegator_norm, scope, delegate_norm))

        logger.info(
            "Delegate set",
            extra={
                "event": "delegation.set",
                "delegator": delegator_norm[:10],
                "scope_id": scope.hex()[:16],
                "delegate": delegate_norm[:10],
            }
        )
        return True

    def clear_delegate(self, delegator: str, scope_id: bytes | str) -> bool:
        """
        Raises:
            InvalidArgumentError: If no delegate is set for the scope
        """
        delegator_norm = _delegator(delegator)
        scope = normalize_scope_id(scope_id)
        current = self._delegation.get((delegator_norm, scope))
        if current is None:
            raise InvalidArgumentError("No delegate set")

        del self._delegation[(delegator_norm, scope)]
        self.events.append(DelegationEvent("ClearDelegate", delegator_norm, scope, current))
        logger.info(
            "Delegate cleared",
            extra={"event": "delegation.cleared", "delegator": delegator_norm[:10], "scope_id": scope.hex()[:16]},
        )
        return True
