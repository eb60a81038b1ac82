"""
vestwallet - Revokable, accelerable vesting wallets

Custody of native currency and ERC20 tokens for a beneficiary, released on a
linear schedule with a cliff.

Main Components:
- Blockchain: vesting schedule engine (cliff, acceleration, linear release)
- Core: wallet accounting, revoker authority, ERC-1271 signature checks
- CLI: operator tooling for schedules, wallet status and signatures
"""

__version__ = "0.1.0"
__author__ = "vestwallet Development Team"

__all__ = []
