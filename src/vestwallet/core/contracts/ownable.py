"""
Single-owner identity store.

The vesting wallet's beneficiary is the owner recorded here. Ownership
transfer lives in this module only; the vesting core reads the owner and
never changes it.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Optional

from ..access_control import AuthorizationResult, Role, parse_identity, require_role
from ..vesting_exceptions import InvalidArgumentError

logger = logging.getLogger(__name__)


@dataclass
class OwnershipEvent:
    """OwnershipTransferred record."""

    previous_owner: Optional[str]
    new_owner: Optional[str]
    timestamp: float = field(default_factory=time.time)


class Ownable:
    """Owner identity with owner-gated transfer and renounce."""

    def __init__(self, initial_owner: Optional[str]) -> None:
        owner = parse_identity(initial_owner, "owner")
        if owner is None:
            raise InvalidArgumentError("Owner cannot be the null address")
        self._owner: Optional[str] = owner
        self.events: list[OwnershipEvent] = [OwnershipEvent(None, owner)]

    @classmethod
    def restore(cls, owner: Optional[str]) -> "Ownable":
        """Rebuild persisted state; a null owner restores a renounced store."""
        ownable = cls.__new__(cls)
        ownable._owner = parse_identity(owner, "owner")
        ownable.events = []
        return ownable

    @property
    def owner(self) -> Optional[str]:
        return self._owner

    def require_owner(self, caller: Optional[str]) -> AuthorizationResult:
        """
        Raises:
            AuthorizationError: If caller is not the owner
        """
        return require_role(caller, self._owner, Role.BENEFICIARY)

    def transfer_ownership(self, caller: Optional[str], new_owner: Optional[str]) -> bool:
        """
        Move ownership to ``new_owner``.

        Raises:
            AuthorizationError: If caller is not the owner
            InvalidArgumentError: If new_owner is null or malformed
        """
        self.require_owner(caller)
        new_norm = parse_identity(new_owner, "new owner")
        if new_norm is None:
            raise InvalidArgumentError("New owner cannot be the null address; use renounce_ownership")
        self._transfer(new_norm)
        return True

    def renounce_ownership(self, caller: Optional[str]) -> bool:
        """Leave the wallet without an owner. Nothing owner-gated can run afterwards."""
        self.require_owner(caller)
        self._transfer(None)
        return True

    def _transfer(self, new_owner: Optional[str]) -> None:
        previous = self._owner
        self._owner = new_owner
        self.events.append(OwnershipEvent(previous, new_owner))
        logger.info(
            "Ownership transferred",
            extra={
                "event": "ownable.transferred",
                "previous": (previous or "none")[:10],
                "new": (new_owner or "none")[:10],
            }
        )
