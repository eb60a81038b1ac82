"""
vestwallet Core Module

Core functionality for vesting wallets including:
- Exception hierarchy, configuration and structured logging
- Address normalisation and secp256k1 signature helpers
- Role checks and the revocation authority
- Wallet and collaborator contracts (see ``vestwallet.core.contracts``)
"""

__all__ = []
