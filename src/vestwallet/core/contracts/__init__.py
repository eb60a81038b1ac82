"""
vestwallet Contract Implementations.

This module provides:
- RevokableVestingWallet: vesting custody with cliff, revoke and accelerate
- ERC20: fungible token used as a custodied asset
- AssetLedger: native balances and token registry
- Ownable: single-owner identity (the wallet beneficiary)
- DelegateRegistry: Snapshot-style vote delegation
- ERC-1271 signature authorization policy
"""

from .asset_ledger import NATIVE, AssetLedger, NativeTransfer
from .delegate_registry import GLOBAL_SCOPE_ID, DelegateRegistry, DelegationEvent
from .erc20 import ERC20Token, TokenEvent
from .ownable import Ownable, OwnershipEvent
from .signature_policy import (
    ERC1271_INVALID_VALUE,
    ERC1271_MAGIC_VALUE,
    SignatureAuthorizationPolicy,
    decode_signature,
)
from .vesting_wallet import RevokableVestingWallet, WalletEvent

__all__ = [
    # Vesting
    "RevokableVestingWallet",
    "WalletEvent",
    # Assets
    "AssetLedger",
    "NativeTransfer",
    "NATIVE",
    "ERC20Token",
    "TokenEvent",
    # Identity
    "Ownable",
    "OwnershipEvent",
    # Delegation
    "DelegateRegistry",
    "DelegationEvent",
    "GLOBAL_SCOPE_ID",
    # Signatures
    "SignatureAuthorizationPolicy",
    "decode_signature",
    "ERC1271_MAGIC_VALUE",
    "ERC1271_INVALID_VALUE",
]
