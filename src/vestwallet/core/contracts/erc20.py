"""
Fungible token (ERC20-style) used as a custodied asset.

Provides the token side of the asset ledger:
- Balance queries
- All-or-nothing transfers
- Owner-only minting with an optional supply cap
- Owner-only pause switch (paused tokens decline every transfer)
- Transfer events

Failures raise TransferFailureError and leave balances untouched.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Dict

from eth_utils import keccak, to_checksum_address

from ..address_checksum import ZERO_ADDRESS, is_null_address, normalize_address
from ..vesting_exceptions import AuthorizationError, TransferFailureError

logger = logging.getLogger(__name__)


@dataclass
class TokenEvent:
    """Represents an ERC20 Transfer event."""

    event_type: str
    from_address: str
    to_address: str
    value: int
    timestamp: float = field(default_factory=time.time)


@dataclass
class ERC20Token:
    """
    In-memory ERC20 token.

    Security considerations:
    - 256-bit amount bound
    - Zero address checks on recipients
    - Balance underflow prevention
    """

    # Token metadata
    name: str
    symbol: str
    decimals: int = 18
    total_supply: int = 0

    # Contract address
    address: str = ""

    # Owner (for minting and pausing)
    owner: str = ""

    # State
    balances: dict[str, int] = field(default_factory=dict)
    events: list[TokenEvent] = field(default_factory=list)

    # Supply cap (0 = unlimited)
    max_supply: int = 0

    paused: bool = False

    UINT256_MAX: int = 2**256 - 1

    def __post_init__(self) -> None:
        """Derive the contract address and normalise the owner."""
        if not self.address:
            addr_input = f"{self.name}{self.symbol}{time.time()}".encode()
            self.address = to_checksum_address("0x" + keccak(addr_input)[-20:].hex())
        else:
            self.address = normalize_address(self.address)
        if self.owner:
            self.owner = normalize_address(self.owner)

    # ==================== View Functions ====================

    def balance_of(self, account: str) -> int:
        """
        Get the token balance of an account.

        Args:
            account: Address to check

        Returns:
            Token balance
        """
        return self.balances.get(normalize_address(account), 0)

    # ==================== State-Changing Functions ====================

    def transfer(self, sender: str, recipient: str, amount: int) -> bool:
        """
        Transfer tokens from sender to recipient.

        Args:
            sender: Address sending tokens (msg.sender)
            recipient: Address receiving tokens
            amount: Amount to transfer

        Returns:
            True if successful

        Raises:
            TransferFailureError: If transfer fails
        """
        self._require_not_paused()
        self._validate_address(recipient, "recipient")
        self._validate_amount(amount)
        sender_norm = normalize_address(sender)
        recipient_norm = normalize_address(recipient)

        sender_balance = self.balances.get(sender_norm, 0)
        if sender_balance < amount:
            raise TransferFailureError(
                f"ERC20: transfer amount exceeds balance ({amount} > {sender_balance})",
                asset=self.address,
                amount=amount,
            )

        self.balances[sender_norm] = sender_balance - amount
        self.balances[recipient_norm] = self.balances.get(recipient_norm, 0) + amount

        self._emit_transfer(sender_norm, recipient_norm, amount)

        logger.debug(
            "ERC20 transfer",
            extra={
                "event": "erc20.transfer",
                "token": self.symbol,
                "from": sender_norm[:10],
                "to": recipient_norm[:10],
                "amount": amount,
            }
        )

        return True

    def mint(self, minter: str, to: str, amount: int) -> bool:
        """
        Mint new tokens (owner only).

        Raises:
            AuthorizationError: If minter is not the owner
            TransferFailureError: If the mint would exceed the supply cap
        """
        self._require_owner(minter)
        self._validate_address(to, "recipient")
        self._validate_amount(amount)
        to_norm = normalize_address(to)

        if self.max_supply > 0 and self.total_supply + amount > self.max_supply:
            raise TransferFailureError(
                f"ERC20: mint would exceed max supply "
                f"({self.total_supply + amount} > {self.max_supply})",
                asset=self.address,
                amount=amount,
            )

        self.total_supply += amount
        self.balances[to_norm] = self.balances.get(to_norm, 0) + amount
        self._emit_transfer(ZERO_ADDRESS, to_norm, amount)

        logger.info(
            "ERC20 mint",
            extra={
                "event": "erc20.mint",
                "token": self.symbol,
                "to": to_norm[:10],
                "amount": amount,
                "new_supply": self.total_supply,
            }
        )

        return True

    # ==================== Admin Functions ====================

    def pause(self, caller: str) -> bool:
        """Pause token transfers (owner only)."""
        self._require_owner(caller)
        self.paused = True
        return True

    def unpause(self, caller: str) -> bool:
        """Unpause token transfers (owner only)."""
        self._require_owner(caller)
        self.paused = False
        return True

    # ==================== Helpers ====================

    def _validate_address(self, address: str, field: str) -> None:
        if is_null_address(address):
            raise TransferFailureError(f"ERC20: {field} is zero address", asset=self.address)

    def _validate_amount(self, amount: int) -> None:
        if amount < 0:
            raise TransferFailureError("ERC20: amount cannot be negative", asset=self.address, amount=amount)
        if amount > self.UINT256_MAX:
            raise TransferFailureError("ERC20: amount exceeds uint256", asset=self.address, amount=amount)

    def _require_owner(self, caller: str) -> None:
        if not self.owner or normalize_address(caller) != self.owner:
            raise AuthorizationError("ERC20: caller is not owner", caller=caller, role="token_owner")

    def _require_not_paused(self) -> None:
        if self.paused:
            raise TransferFailureError("ERC20: token is paused", asset=self.address)

    def _emit_transfer(self, from_addr: str, to_addr: str, amount: int) -> None:
        self.events.append(
            TokenEvent(
                event_type="Transfer",
                from_address=from_addr,
                to_address=to_addr,
                value=amount,
            )
        )

    # ==================== Serialization ====================

    def to_dict(self) -> Dict:
        """Serialize token state to dictionary."""
        return {
            "name": self.name,
            "symbol": self.symbol,
            "decimals": self.decimals,
            "total_supply": self.total_supply,
            "address": self.address,
            "owner": self.owner,
            "balances": dict(self.balances),
            "max_supply": self.max_supply,
            "paused": self.paused,
        }

    @classmethod
    def from_dict(cls, data: Dict) -> "ERC20Token":
        """Deserialize token state from dictionary."""
        token = cls(
            name=data["name"],
            symbol=data["symbol"],
            decimals=data.get("decimals", 18),
            total_supply=data.get("total_supply", 0),
            address=data.get("address", ""),
            owner=data.get("owner", ""),
            max_supply=data.get("max_supply", 0),
            paused=data.get("paused", False),
        )
        token.balances = {
            normalize_address(holder): int(amount)
            for holder, amount in data.get("balances", {}).items()
        }
        return token
