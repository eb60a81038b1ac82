"""
Revokable, accelerable vesting wallet.

Holds native currency and ERC20 tokens for a beneficiary and releases them
on a linear schedule with a cliff. A separate revoker may:
- claw back whatever has not vested yet (revoke)
- force full vesting (accelerate), which also ends any further revocation
- hand the revoker role to someone else or renounce it for good

Accounting:
- total allocation = current balance + everything already released
- releasable = vested(total) - released
- revokable  = total - vested(total), or 0 once accelerated or renounced

Balances are read from the asset ledger on every call, never cached, and
each operation reads the clock exactly once. Assets move before any
bookkeeping changes, so a declined transfer leaves the wallet untouched.
"""

from __future__ import annotations

import logging
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterator, Optional

from eth_utils import keccak, to_checksum_address

from vestwallet.blockchain.vesting_schedule import VestingMode, VestingSchedule

from .. import config
from ..access_control import RevocationAuthority, RevocationMode, parse_identity
from ..crypto_utils import recover_signer_address
from ..vesting_exceptions import AccountingError, ConfigurationError, ReentrancyError
from .asset_ledger import AssetLedger, asset_label
from .delegate_registry import DelegateRegistry
from .ownable import Ownable
from .signature_policy import RecoverFn, SignatureAuthorizationPolicy

logger = logging.getLogger(__name__)

_RESTORE_STAND_IN = "0x000000000000000000000000000000000000dead"


@dataclass
class WalletEvent:
    """Notification emitted by a successful wallet operation."""

    event_type: str
    args: Dict[str, Any] = field(default_factory=dict)
    timestamp: float = field(default_factory=time.time)


class RevokableVestingWallet:
    """
    Vesting wallet with cliff, acceleration and revocation.

    Every mutating method takes the authenticated ``caller`` first. Release
    and delegation are beneficiary-only; revoke, accelerate and revoker
    changes are revoker-only.

    Usage:
        ledger = AssetLedger()
        wallet = RevokableVestingWallet(beneficiary, start, 400, 100, revoker, ledger=ledger)
        ledger.deposit(wallet.address, 1000)
        wallet.release(beneficiary)
    """

    def __init__(
        self,
        beneficiary: str,
        start: int,
        duration: int,
        cliff: int,
        revoker: str,
        ledger: Optional[AssetLedger] = None,
        time_provider: Optional[Callable[[], int]] = None,
        address: str = "",
        recover: RecoverFn = recover_signer_address,
    ) -> None:
        self.schedule = VestingSchedule(start=start, duration=duration, cliff=cliff)
        self.ownership = Ownable(beneficiary)
        self.ledger = ledger if ledger is not None else AssetLedger()
        self.events: list[WalletEvent] = []
        self._authority = RevocationAuthority(revoker, on_change=self._on_revoker_changed)
        self._mode = VestingMode.SCHEDULED
        self._released: dict[Optional[str], int] = {None: 0}
        self._time_provider = time_provider or (lambda: int(time.time()))
        self._signature_policy = SignatureAuthorizationPolicy(lambda: self.ownership.owner, recover)
        self._entered = False

        wallet_address = parse_identity(address, "wallet address") if address else None
        if wallet_address:
            self.address = wallet_address
        else:
            seed = f"{self.ownership.owner}{self._authority.revoker}{start}{duration}{cliff}{time.time()}"
            self.address = to_checksum_address("0x" + keccak(seed.encode())[-20:].hex())

        logger.info(
            "Vesting wallet created",
            extra={
                "event": "vesting.created",
                "wallet": self.address[:10],
                "beneficiary": self.ownership.owner[:10],
                "start": start,
                "duration": duration,
                "cliff": cliff,
            }
        )

    # ==================== Clock ====================

    def _current_time(self) -> int:
        timestamp = self._time_provider()
        try:
            return int(timestamp)
        except (TypeError, ValueError) as exc:
            raise ConfigurationError("time_provider must return an integer timestamp") from exc

    # ==================== Schedule Queries ====================

    def beneficiary(self) -> Optional[str]:
        return self.ownership.owner

    @property
    def owner(self) -> Optional[str]:
        return self.ownership.owner

    def start(self) -> int:
        return self.schedule.start

    def duration(self) -> int:
        return self.schedule.duration

    def end(self) -> int:
        return self.schedule.end

    def cliff(self) -> int:
        """Cliff offset in seconds, relative to ``start``."""
        return self.schedule.cliff

    def cliff_end(self) -> int:
        return self.schedule.cliff_end

    def is_past_cliff(self) -> bool:
        return self.schedule.is_past_cliff(self._current_time())

    # ==================== Mode Queries ====================

    @property
    def vesting_mode(self) -> VestingMode:
        return self._mode

    @property
    def revocation_mode(self) -> RevocationMode:
        return self._authority.mode

    def is_accelerated(self) -> bool:
        return self._mode is VestingMode.ACCELERATED

    def revoker(self) -> Optional[str]:
        return self._authority.revoker

    def is_revokable(self) -> bool:
        return self._authority.is_revokable()

    # ==================== Accounting Queries ====================

    def balance(self, asset: Optional[str] = None) -> int:
        return self.ledger.balance_of(self.address, self.ledger.normalize_asset(asset))

    def released(self, asset: Optional[str] = None) -> int:
        return self._released.get(self.ledger.normalize_asset(asset), 0)

    def vested_amount(self, timestamp: Optional[int] = None, asset: Optional[str] = None) -> int:
        """Amount of ``asset`` vested at ``timestamp`` (now if omitted)."""
        asset_key = self.ledger.normalize_asset(asset)
        if timestamp is None:
            timestamp = self._current_time()
        return self._vested_at(asset_key, timestamp)

    def releasable(self, asset: Optional[str] = None) -> int:
        """Vested but not yet released amount of ``asset``."""
        return self._releasable_at(self.ledger.normalize_asset(asset), self._current_time())

    def revokable_amount(self, asset: Optional[str] = None) -> int:
        """Amount of ``asset`` the revoker could claw back right now."""
        return self._revokable_at(self.ledger.normalize_asset(asset), self._current_time())

    def snapshot(self, asset: Optional[str] = None, timestamp: Optional[int] = None) -> Dict[str, Any]:
        """All accounting figures for ``asset`` evaluated at a single instant."""
        asset_key = self.ledger.normalize_asset(asset)
        now = self._current_time() if timestamp is None else timestamp
        held = self.ledger.balance_of(self.address, asset_key)
        released = self._released.get(asset_key, 0)
        return {
            "asset": asset_label(asset_key),
            "timestamp": now,
            "balance": held,
            "released": released,
            "vested": self._vested_at(asset_key, now),
            "releasable": self._releasable_at(asset_key, now),
            "revokable": self._revokable_at(asset_key, now),
            "past_cliff": self.schedule.is_past_cliff(now),
        }

    def _vested_at(self, asset_key: Optional[str], now: int) -> int:
        total = self.ledger.balance_of(self.address, asset_key) + self._released.get(asset_key, 0)
        return self.schedule.vested_amount(total, now, self._mode)

    def _releasable_at(self, asset_key: Optional[str], now: int) -> int:
        released = self._released.get(asset_key, 0)
        amount = self._vested_at(asset_key, now) - released
        if amount < 0:
            raise AccountingError(
                f"Released total exceeds vested amount for {asset_label(asset_key)}",
                details={"released": released, "releasable": amount, "timestamp": now},
            )
        return amount

    def _revokable_at(self, asset_key: Optional[str], now: int) -> int:
        if not self._authority.is_revokable() or self._mode is VestingMode.ACCELERATED:
            return 0
        held = self.ledger.balance_of(self.address, asset_key)
        total = held + self._released.get(asset_key, 0)
        amount = total - self.schedule.vested_amount(total, now, self._mode)
        if amount < 0:
            raise AccountingError(
                f"Vested amount exceeds total allocation for {asset_label(asset_key)}",
                details={"held": held, "revokable": amount, "timestamp": now},
            )
        return amount

    # ==================== Beneficiary Operations ====================

    def release(self, caller: str, asset: Optional[str] = None) -> int:
        """
        Send the releasable amount of ``asset`` to the beneficiary.

        Args:
            caller: Must be the beneficiary
            asset: Token address, or None for the native currency

        Returns:
            Amount released (possibly 0)

        Raises:
            AuthorizationError: If caller is not the beneficiary
            TransferFailureError: If the ledger declines the transfer
            AccountingError: If released exceeds vested
        """
        with self._non_reentrant("release"):
            self.ownership.require_owner(caller)
            asset_key = self.ledger.normalize_asset(asset)
            now = self._current_time()
            amount = self._releasable_at(asset_key, now)
            beneficiary = self.ownership.owner

            self.ledger.transfer(self.address, beneficiary, amount, asset_key)
            self._released[asset_key] = self._released.get(asset_key, 0) + amount

            if asset_key is None:
                self._emit("EtherReleased", amount=amount)
            else:
                self._emit("ERC20Released", token=asset_key, amount=amount)

            logger.info(
                "Vested assets released",
                extra={
                    "event": "vesting.released",
                    "wallet": self.address[:10],
                    "asset": asset_label(asset_key)[:10],
                    "amount": amount,
                    "timestamp": now,
                }
            )
            return amount

    def set_delegate(
        self,
        caller: str,
        registry: DelegateRegistry,
        delegate: str,
        scope_id: bytes | str | None = None,
    ) -> bool:
        """Forward a delegation choice to ``registry`` with this wallet as delegator."""
        with self._non_reentrant("set_delegate"):
            self.ownership.require_owner(caller)
            scope = config.DELEGATION_SCOPE_ID if scope_id is None else scope_id
            return registry.set_delegate(self.address, scope, delegate)

    def clear_delegate(
        self,
        caller: str,
        registry: DelegateRegistry,
        scope_id: bytes | str | None = None,
    ) -> bool:
        with self._non_reentrant("clear_delegate"):
            self.ownership.require_owner(caller)
            scope = config.DELEGATION_SCOPE_ID if scope_id is None else scope_id
            return registry.clear_delegate(self.address, scope)

    def is_valid_signature(self, digest: bytes, signature: bytes) -> bytes:
        """ERC-1271 query: magic value iff the beneficiary signed ``digest``."""
        return self._signature_policy.is_valid_signature(digest, signature)

    def receive(self, sender: str, amount: int) -> None:
        """Accept a native deposit from ``sender``."""
        self.ledger.transfer(sender, self.address, amount)

    # ==================== Revoker Operations ====================

    def revoke(self, caller: str, asset: Optional[str] = None) -> int:
        """
        Send the unvested part of ``asset`` to the revoker.

        ``released`` is not touched: the transfer lowers the balance and
        therefore the total allocation every later computation sees.

        Returns:
            Amount revoked (0 when accelerated or nothing is unvested)

        Raises:
            AuthorizationError: If caller is not the revoker
            TransferFailureError: If the ledger declines the transfer
        """
        with self._non_reentrant("revoke"):
            self._authority.require_revoker(caller)
            asset_key = self.ledger.normalize_asset(asset)
            now = self._current_time()
            amount = self._revokable_at(asset_key, now)
            revoker = self._authority.revoker

            self.ledger.transfer(self.address, revoker, amount, asset_key)

            if asset_key is None:
                self._emit("EtherRevoked", amount=amount)
            else:
                self._emit("ERC20Revoked", token=asset_key, amount=amount)

            logger.warning(
                "Unvested assets revoked",
                extra={
                    "event": "vesting.revoked",
                    "wallet": self.address[:10],
                    "asset": asset_label(asset_key)[:10],
                    "amount": amount,
                    "timestamp": now,
                }
            )
            return amount

    def accelerate(self, caller: str) -> bool:
        """
        Vest everything immediately. Irreversible; repeated calls only re-emit.

        Raises:
            AuthorizationError: If caller is not the revoker
        """
        with self._non_reentrant("accelerate"):
            self._authority.require_revoker(caller)
            self._mode = self._mode.accelerate()
            self._emit("Accelerated")
            logger.info(
                "Vesting accelerated",
                extra={"event": "vesting.accelerated", "wallet": self.address[:10]},
            )
            return True

    def change_revoker(self, caller: str, new_revoker: str) -> bool:
        with self._non_reentrant("change_revoker"):
            return self._authority.change_revoker(caller, new_revoker)

    def renounce_revokability(self, caller: str) -> bool:
        """Drop the revoker role; revoke and accelerate become unreachable."""
        with self._non_reentrant("renounce_revokability"):
            return self._authority.renounce(caller)

    # ==================== Internals ====================

    @contextmanager
    def _non_reentrant(self, operation: str) -> Iterator[None]:
        if self._entered:
            logger.error(
                "Re-entrant call blocked",
                extra={"event": "vesting.reentrancy_blocked", "wallet": self.address[:10], "operation": operation},
            )
            raise ReentrancyError(f"{operation} called while another operation is in progress")
        self._entered = True
        try:
            yield
        finally:
            self._entered = False

    def _on_revoker_changed(self, previous: Optional[str], new: Optional[str]) -> None:
        self._emit("RevokerChanged", previous=previous, new=new)

    def _emit(self, event_type: str, **args: Any) -> None:
        self.events.append(WalletEvent(event_type=event_type, args=args))

    # ==================== Serialization ====================

    def to_dict(self) -> Dict[str, Any]:
        """Serialize wallet parameters and bookkeeping (balances live in the ledger)."""
        return {
            "address": self.address,
            "beneficiary": self.ownership.owner,
            "revoker": self._authority.revoker,
            "schedule": self.schedule.to_dict(),
            "accelerated": self.is_accelerated(),
            "released": {asset_label(key): amount for key, amount in self._released.items()},
        }

    @classmethod
    def from_dict(
        cls,
        data: Dict[str, Any],
        ledger: AssetLedger,
        time_provider: Optional[Callable[[], int]] = None,
    ) -> "RevokableVestingWallet":
        """Rebuild a wallet from ``to_dict`` output against an existing ledger."""
        schedule = data["schedule"]
        beneficiary = parse_identity(data["beneficiary"], "beneficiary")
        revoker = parse_identity(data.get("revoker"), "revoker")
        # Renounced roles are swapped in after construction.
        stand_in = beneficiary or revoker or _RESTORE_STAND_IN
        wallet = cls(
            beneficiary=beneficiary or stand_in,
            start=schedule["start"],
            duration=schedule["duration"],
            cliff=schedule.get("cliff", 0),
            revoker=revoker or stand_in,
            ledger=ledger,
            time_provider=time_provider,
            address=data.get("address", ""),
        )
        if beneficiary is None:
            wallet.ownership = Ownable.restore(None)
        if revoker is None:
            wallet._authority = RevocationAuthority.restore(None, on_change=wallet._on_revoker_changed)
        if data.get("accelerated"):
            wallet._mode = VestingMode.ACCELERATED
        for label, amount in data.get("released", {}).items():
            key = None if label == "native" else ledger.normalize_asset(label)
            wallet._released[key] = int(amount)
        return wallet
