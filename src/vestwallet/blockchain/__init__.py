"""
vestwallet Blockchain Module

Time-based token release components:
- Vesting schedule with cliff and linear release
- Scheduled / accelerated vesting modes
"""

__all__ = []
