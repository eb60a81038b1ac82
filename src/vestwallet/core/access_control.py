"""
Role-based authorization for vesting wallets.

Provides the caller-identity guards every gated wallet operation composes,
and the revocation authority that owns the revoker role.

Roles:
- BENEFICIARY: may release vested assets, delegate and sign for the wallet
- REVOKER: may revoke unvested assets, accelerate vesting, and hand over or
  renounce the revoker role

A null role holder never authorizes anyone, so once the revoker role is
renounced every revoker-gated operation is permanently unreachable.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from .address_checksum import normalize_identity
from .vesting_exceptions import AuthorizationError, InvalidArgumentError

logger = logging.getLogger(__name__)


class Role(Enum):
    """Roles recognised by the vesting wallet."""
    BENEFICIARY = "beneficiary"
    REVOKER = "revoker"


class RevocationMode(Enum):
    """Whether the revoker role is still held by someone."""
    ACTIVE = "active"
    RENOUNCED = "renounced"


@dataclass(frozen=True)
class AuthorizationResult:
    """Outcome of a role check."""

    granted: bool
    role: Role
    caller: Optional[str]
    holder: Optional[str]
    reason: str = ""

    def __bool__(self) -> bool:
        return self.granted


def _caller_identity(caller: Optional[str]) -> Optional[str]:
    try:
        return normalize_identity(caller)
    except ValueError:
        # A malformed caller cannot hold any role.
        return None


def parse_identity(address: Optional[str], field: str) -> Optional[str]:
    """
    Normalize an identity argument; ``None`` for the null identity.

    Raises:
        InvalidArgumentError: If ``address`` is not a well-formed address
    """
    try:
        return normalize_identity(address)
    except ValueError as exc:
        raise InvalidArgumentError(f"Invalid {field}: {exc}") from exc


def check_role(caller: Optional[str], holder: Optional[str], role: Role) -> AuthorizationResult:
    """
    Compare the authenticated caller with the current holder of ``role``.

    Args:
        caller: Identity making the call (msg.sender)
        holder: Current holder of the role, ``None`` if nobody holds it
        role: Role being checked

    Returns:
        AuthorizationResult describing whether access is granted
    """
    caller_norm = _caller_identity(caller)
    holder_norm = normalize_identity(holder)

    if holder_norm is None:
        return AuthorizationResult(False, role, caller_norm, None, f"{role.value} role is not held")
    if caller_norm is None:
        return AuthorizationResult(False, role, None, holder_norm, "caller is not a valid identity")
    if caller_norm != holder_norm:
        return AuthorizationResult(False, role, caller_norm, holder_norm, f"caller is not the {role.value}")
    return AuthorizationResult(True, role, caller_norm, holder_norm)


def require_role(caller: Optional[str], holder: Optional[str], role: Role) -> AuthorizationResult:
    """
    Check ``role`` and raise if the caller does not hold it.

    Raises:
        AuthorizationError: If access is denied
    """
    result = check_role(caller, holder, role)
    if not result.granted:
        logger.warning(
            "Access denied",
            extra={
                "event": "access_control.denied",
                "role": role.value,
                "caller": (result.caller or str(caller))[:10],
                "reason": result.reason,
            }
        )
        raise AuthorizationError(
            f"Unauthorized: {result.reason}",
            caller=result.caller,
            role=role.value,
        )
    return result


class RevocationAuthority:
    """
    Holder of the revoker role.

    The authority starts ACTIVE with a non-null revoker. The revoker may hand
    the role to another identity or renounce it; renouncing moves the
    authority to RENOUNCED, from which there is no way back.

    Every change is reported to ``on_change(previous, new)``; ``new`` is
    ``None`` when the role is renounced.
    """

    def __init__(
        self,
        initial_revoker: Optional[str],
        on_change: Optional[Callable[[Optional[str], Optional[str]], None]] = None,
    ) -> None:
        revoker = parse_identity(initial_revoker, "revoker")
        if revoker is None:
            raise InvalidArgumentError("Initial revoker cannot be the null address")
        self._revoker: Optional[str] = revoker
        self._mode = RevocationMode.ACTIVE
        self._on_change = on_change

    @classmethod
    def restore(
        cls,
        revoker: Optional[str],
        on_change: Optional[Callable[[Optional[str], Optional[str]], None]] = None,
    ) -> "RevocationAuthority":
        """Rebuild persisted state; a null revoker restores a RENOUNCED authority."""
        authority = cls.__new__(cls)
        authority._revoker = parse_identity(revoker, "revoker")
        authority._mode = RevocationMode.ACTIVE if authority._revoker else RevocationMode.RENOUNCED
        authority._on_change = on_change
        return authority

    @property
    def revoker(self) -> Optional[str]:
        return self._revoker

    @property
    def mode(self) -> RevocationMode:
        return self._mode

    def is_revokable(self) -> bool:
        return self._mode is RevocationMode.ACTIVE

    def require_revoker(self, caller: Optional[str]) -> AuthorizationResult:
        return require_role(caller, self._revoker, Role.REVOKER)

    def change_revoker(self, caller: Optional[str], new_revoker: Optional[str]) -> bool:
        """
        Hand the revoker role to ``new_revoker``.

        Raises:
            AuthorizationError: If caller is not the current revoker
            InvalidArgumentError: If new_revoker is null (use renounce) or malformed
        """
        self.require_revoker(caller)
        new_norm = parse_identity(new_revoker, "new revoker")
        if new_norm is None:
            raise InvalidArgumentError(
                "New revoker cannot be the null address; use renounce_revokability"
            )
        self._set_revoker(new_norm)
        return True

    def renounce(self, caller: Optional[str]) -> bool:
        """
        Give up the revoker role permanently.

        Raises:
            AuthorizationError: If caller is not the current revoker
        """
        self.require_revoker(caller)
        self._set_revoker(None)
        return True

    def _set_revoker(self, new_revoker: Optional[str]) -> None:
        if self._mode is RevocationMode.RENOUNCED:
            raise AuthorizationError("Revoker role has been renounced", role=Role.REVOKER.value)

        previous = self._revoker
        self._revoker = new_revoker
        if new_revoker is None:
            self._mode = RevocationMode.RENOUNCED

        logger.info(
            "Revoker changed",
            extra={
                "event": "access_control.revoker_changed",
                "previous": (previous or "none")[:10],
                "new": (new_revoker or "none")[:10],
                "mode": self._mode.value,
            }
        )
        if self._on_change is not None:
            self._on_change(previous, new_revoker)
