"""
Balance and transfer primitives for custodied assets.

An asset is either the native currency (``None``) or the address of a
registered ERC20 token. Transfers are all-or-nothing: they either move the
full amount or raise TransferFailureError with every balance unchanged.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Optional

from ..address_checksum import is_null_address, normalize_address
from ..vesting_exceptions import InvalidArgumentError, TransferFailureError
from .erc20 import ERC20Token

logger = logging.getLogger(__name__)

NATIVE = None


def asset_label(asset: Optional[str]) -> str:
    return "native" if asset is None else asset


@dataclass
class NativeTransfer:
    """Record of a native-currency movement."""

    from_address: Optional[str]
    to_address: str
    value: int
    timestamp: float = field(default_factory=time.time)


class AssetLedger:
    """
    Native balances plus a registry of ERC20 tokens.

    Rejecting recipients model accounts that refuse incoming native
    transfers (contracts without a payable receive hook).
    """

    def __init__(self) -> None:
        self.native_balances: dict[str, int] = {}
        self.tokens: dict[str, ERC20Token] = {}
        self.native_transfers: list[NativeTransfer] = []
        self._rejecting_recipients: set[str] = set()

    # ==================== Registry ====================

    def register_token(self, token: ERC20Token) -> ERC20Token:
        self.tokens[normalize_address(token.address)] = token
        logger.debug(
            "Token registered",
            extra={"event": "ledger.token_registered", "token": token.symbol, "address": token.address[:10]},
        )
        return token

    def token(self, address: str) -> ERC20Token:
        """
        Raises:
            InvalidArgumentError: If no token is registered at ``address``
        """
        try:
            return self.tokens[normalize_address(address)]
        except (KeyError, ValueError) as exc:
            raise InvalidArgumentError(f"Unknown token {address}") from exc

    def normalize_asset(self, asset: Optional[str]) -> Optional[str]:
        """Canonical asset key: ``None`` for native, checksummed token address otherwise."""
        if asset is None:
            return None
        return normalize_address(self.token(asset).address)

    def add_rejecting_recipient(self, account: str) -> None:
        """Make ``account`` refuse incoming native transfers."""
        self._rejecting_recipients.add(normalize_address(account))

    def remove_rejecting_recipient(self, account: str) -> None:
        self._rejecting_recipients.discard(normalize_address(account))

    # ==================== Queries ====================

    def balance_of(self, account: str, asset: Optional[str] = NATIVE) -> int:
        if asset is None:
            return self.native_balances.get(normalize_address(account), 0)
        return self.token(asset).balance_of(account)

    # ==================== Movements ====================

    def deposit(self, account: str, amount: int, asset: Optional[str] = NATIVE) -> None:
        """
        Credit ``account`` from outside the ledger (genesis funding or a mint by the token owner).
        """
        if amount < 0:
            raise InvalidArgumentError("Deposit amount cannot be negative")
        account_norm = normalize_address(account)
        if asset is None:
            self.native_balances[account_norm] = self.native_balances.get(account_norm, 0) + amount
            self.native_transfers.append(NativeTransfer(None, account_norm, amount))
            return
        token = self.token(asset)
        token.mint(token.owner, account_norm, amount)

    def transfer(
        self,
        sender: str,
        recipient: str,
        amount: int,
        asset: Optional[str] = NATIVE,
    ) -> None:
        """
        Move ``amount`` of ``asset`` from sender to recipient.

        Raises:
            TransferFailureError: If the transfer is declined; no balance changes
        """
        if asset is not None:
            try:
                token = self.token(asset)
            except InvalidArgumentError as exc:
                raise TransferFailureError(str(exc), asset=asset, amount=amount) from exc
            if not token.transfer(sender, recipient, amount):
                raise TransferFailureError("ERC20: transfer returned false", asset=token.address, amount=amount)
            return

        self._transfer_native(sender, recipient, amount)

    def _transfer_native(self, sender: str, recipient: str, amount: int) -> None:
        if is_null_address(recipient):
            raise TransferFailureError("Native transfer to the zero address", amount=amount)
        if amount < 0:
            raise TransferFailureError("Native transfer amount cannot be negative", amount=amount)

        sender_norm = normalize_address(sender)
        recipient_norm = normalize_address(recipient)
        if recipient_norm in self._rejecting_recipients:
            raise TransferFailureError(
                f"Recipient {recipient_norm[:10]} rejected native transfer", amount=amount
            )

        balance = self.native_balances.get(sender_norm, 0)
        if balance < amount:
            raise TransferFailureError(
                f"Insufficient native balance ({amount} > {balance})", amount=amount
            )

        self.native_balances[sender_norm] = balance - amount
        self.native_balances[recipient_norm] = self.native_balances.get(recipient_norm, 0) + amount
        self.native_transfers.append(NativeTransfer(sender_norm, recipient_norm, amount))

        logger.debug(
            "Native transfer",
            extra={
                "event": "ledger.native_transfer",
                "from": sender_norm[:10],
                "to": recipient_norm[:10],
                "amount": amount,
            }
        )
