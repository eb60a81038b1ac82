"""
Vesting-wallet exception hierarchy.

Provides typed exceptions for custody operations so callers can tell an
authorization failure from a malformed argument or a declined transfer.
Every error aborts the enclosing operation; nothing in the core retries.
"""

from __future__ import annotations
from typing import Optional, Any, Dict


class VestingError(Exception):
    """Base exception for all vesting-wallet errors.

    Attributes:
        message: Human-readable error description
        details: Additional context about the error
        recoverable: Whether the operation can be retried
    """

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        recoverable: bool = False,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.recoverable = recoverable


# ==================== Authorization Errors ====================


class AuthorizationError(VestingError):
    """Raised when the caller does not hold the role a gated operation needs.

    Examples: release by someone other than the beneficiary, revoke or
    accelerate by someone other than the revoker (including after the
    revoker role was renounced).
    """

    def __init__(
        self,
        message: str,
        caller: Optional[str] = None,
        role: Optional[str] = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, **kwargs)
        self.caller = caller
        self.role = role


# ==================== Argument Errors ====================


class InvalidArgumentError(VestingError):
    """Raised when an operation receives an argument it cannot accept.

    Examples: null initial revoker, null replacement revoker, negative
    duration.
    """
    pass


class SignatureError(InvalidArgumentError):
    """Base exception for signature decoding failures."""
    pass


class MalformedSignatureError(SignatureError):
    """Raised when a signature is not 65 bytes or carries an invalid v."""
    pass


class NonCanonicalSignatureError(SignatureError):
    """Raised when a signature's s component lies in the upper half of the curve order."""
    pass


# ==================== Asset Movement Errors ====================


class TransferFailureError(VestingError):
    """Raised when the asset ledger declines a transfer.

    The enclosing operation is aborted and no bookkeeping is changed.
    """

    def __init__(
        self,
        message: str,
        asset: Optional[str] = None,
        amount: Optional[int] = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, **kwargs)
        self.asset = asset
        self.amount = amount


# ==================== State Errors ====================


class AccountingError(VestingError):
    """Raised when balances and released totals no longer add up.

    A negative revokable or releasable amount means the bookkeeping has been
    disturbed from outside; the value is never clamped.
    """
    recoverable = False


class ReentrancyError(VestingError):
    """Raised when a mutating operation starts while another one is in progress."""
    pass


# ==================== Configuration Errors ====================


class ConfigurationError(VestingError):
    """Raised when configuration is missing or invalid."""
    recoverable = False


# ==================== Utility Functions ====================


def is_recoverable_error(exc: Exception) -> bool:
    """Check if an exception represents a recoverable error.

    Args:
        exc: The exception to check

    Returns:
        True if the error is recoverable and the operation can be retried
    """
    if isinstance(exc, VestingError):
        return exc.recoverable

    recoverable_types = (
        ConnectionError,
        TimeoutError,
    )
    return isinstance(exc, recoverable_types)


def get_error_context(exc: Exception) -> Dict[str, Any]:
    """Extract error context from an exception for logging.

    Args:
        exc: The exception to extract context from

    Returns:
        Dictionary containing error type, message, and any additional details
    """
    context = {
        "error_type": type(exc).__name__,
        "error_message": str(exc),
    }

    if isinstance(exc, VestingError):
        context["recoverable"] = exc.recoverable
        if exc.details:
            context["details"] = exc.details

    if isinstance(exc, AuthorizationError):
        if exc.caller is not None:
            context["caller"] = exc.caller
        if exc.role is not None:
            context["role"] = exc.role

    if isinstance(exc, TransferFailureError):
        context["asset"] = exc.asset or "native"
        if exc.amount is not None:
            context["amount"] = exc.amount

    return context
