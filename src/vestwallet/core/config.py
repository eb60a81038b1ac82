"""
Vesting wallet configuration.

Supports testnet and mainnet with separate configurations. All settings
come from environment variables read at import time.
"""

from __future__ import annotations

import logging
import os
from enum import Enum

from .vesting_exceptions import ConfigurationError

logger = logging.getLogger(__name__)


class NetworkType(Enum):
    TESTNET = "testnet"
    MAINNET = "mainnet"


_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _get_int(env_var: str, default: str) -> int:
    raw = os.getenv(env_var, default).strip()
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{env_var} must be an integer, got {raw!r}") from exc


def _get_scope_id(env_var: str) -> str:
    raw = os.getenv(env_var, "").strip().lower()
    if not raw:
        return "0x" + "00" * 32
    text = raw[2:] if raw.startswith("0x") else raw
    try:
        value = bytes.fromhex(text)
    except ValueError as exc:
        raise ConfigurationError(f"{env_var} must be hex, got {raw!r}") from exc
    if len(value) > 32:
        raise ConfigurationError(f"{env_var} must be at most 32 bytes")
    return "0x" + value.rjust(32, b"\x00").hex()


NETWORK = os.getenv("VESTWALLET_NETWORK", "testnet").strip().lower()  # Default to testnet for safety
if NETWORK not in {network.value for network in NetworkType}:
    raise ConfigurationError(f"VESTWALLET_NETWORK must be testnet or mainnet, got {NETWORK!r}")

LOG_LEVEL = os.getenv("VESTWALLET_LOG_LEVEL", "INFO").strip().upper()
if LOG_LEVEL not in _LOG_LEVELS:
    raise ConfigurationError(f"VESTWALLET_LOG_LEVEL must be one of {', '.join(_LOG_LEVELS)}")
LOG_FILE = os.getenv("VESTWALLET_LOG_FILE", "").strip()
DELEGATION_SCOPE_ID = _get_scope_id("VESTWALLET_DELEGATION_SCOPE_ID")
MAX_CLIFF_SECONDS = _get_int("VESTWALLET_MAX_CLIFF_SECONDS", "0")
if MAX_CLIFF_SECONDS < 0:
    raise ConfigurationError("VESTWALLET_MAX_CLIFF_SECONDS cannot be negative")


class TestnetConfig:
    """Testnet configuration (local experiments, verbose logging allowed)."""

    NETWORK_TYPE = NetworkType.TESTNET
    ENVIRONMENT = "development"
    LOG_LEVEL = LOG_LEVEL
    LOG_FILE = LOG_FILE
    DELEGATION_SCOPE_ID = DELEGATION_SCOPE_ID
    MAX_CLIFF_SECONDS = MAX_CLIFF_SECONDS


class MainnetConfig:
    """Mainnet configuration."""

    NETWORK_TYPE = NetworkType.MAINNET
    ENVIRONMENT = "production"
    LOG_LEVEL = LOG_LEVEL
    LOG_FILE = LOG_FILE
    DELEGATION_SCOPE_ID = DELEGATION_SCOPE_ID
    MAX_CLIFF_SECONDS = MAX_CLIFF_SECONDS


# Select config based on network
if NETWORK == "mainnet":
    Config = MainnetConfig
    if LOG_LEVEL == "DEBUG":
        raise ConfigurationError(
            "VESTWALLET_LOG_LEVEL=DEBUG is not allowed on mainnet; it logs full call traces"
        )
else:
    Config = TestnetConfig

logger.debug(
    "Configuration loaded",
    extra={"event": "config.loaded", "network": NETWORK, "log_level": LOG_LEVEL},
)

__all__ = [
    "Config",
    "NetworkType",
    "TestnetConfig",
    "MainnetConfig",
    "DELEGATION_SCOPE_ID",
    "LOG_FILE",
    "LOG_LEVEL",
    "MAX_CLIFF_SECONDS",
]
