import importlib
import os

import pytest

import vestwallet.core.config as config_module
from vestwallet.core.vesting_exceptions import ConfigurationError


@pytest.fixture
def reload_config(monkeypatch):
    def _reload(env: dict[str, str]):
        for key in list(os.environ.keys()):
            if key.startswith("VESTWALLET_"):
                monkeypatch.delenv(key, raising=False)
        for key, value in env.items():
            monkeypatch.setenv(key, value)
        return importlib.reload(config_module)

    yield _reload
    # Restore module state for the rest of the session
    monkeypatch.undo()
    importlib.reload(config_module)


def test_defaults(reload_config):
    config = reload_config({})
    assert config.NETWORK == "testnet"
    assert config.LOG_LEVEL == "INFO"
    assert config.LOG_FILE == ""
    assert config.DELEGATION_SCOPE_ID == "0x" + "00" * 32
    assert config.MAX_CLIFF_SECONDS == 0
    assert config.Config.ENVIRONMENT == "development"


def test_mainnet_selects_production_config(reload_config):
    config = reload_config({"VESTWALLET_NETWORK": "mainnet", "VESTWALLET_LOG_LEVEL": "warning"})
    assert config.Config is config.MainnetConfig
    assert config.Config.ENVIRONMENT == "production"
    assert config.LOG_LEVEL == "WARNING"


def test_mainnet_forbids_debug_logging(reload_config):
    with pytest.raises(ConfigurationError):
        reload_config({"VESTWALLET_NETWORK": "mainnet", "VESTWALLET_LOG_LEVEL": "DEBUG"})


def test_scope_id_is_padded_to_32_bytes(reload_config):
    config = reload_config({"VESTWALLET_DELEGATION_SCOPE_ID": "0xABCD"})
    assert config.DELEGATION_SCOPE_ID == "0x" + "00" * 30 + "abcd"


@pytest.mark.parametrize(
    "env",
    [
        {"VESTWALLET_NETWORK": "devnet"},
        {"VESTWALLET_LOG_LEVEL": "chatty"},
        {"VESTWALLET_DELEGATION_SCOPE_ID": "not-hex"},
        {"VESTWALLET_DELEGATION_SCOPE_ID": "0x" + "11" * 33},
        {"VESTWALLET_MAX_CLIFF_SECONDS": "soon"},
        {"VESTWALLET_MAX_CLIFF_SECONDS": "-1"},
    ],
)
def test_invalid_values_raise(reload_config, env):
    with pytest.raises(ConfigurationError):
        reload_config(env)
