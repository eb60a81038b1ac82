import sys
from pathlib import Path

import pytest

# Ensure the src directory is importable before collection runs.
project_root = Path(__file__).resolve().parents[2]
src_path = project_root / "src"
sys.path.insert(0, str(src_path))

from vestwallet.core.contracts.asset_ledger import AssetLedger  # noqa: E402
from vestwallet.core.contracts.erc20 import ERC20Token  # noqa: E402
from vestwallet.core.contracts.vesting_wallet import RevokableVestingWallet  # noqa: E402
from vestwallet.core.crypto_utils import generate_secp256k1_keypair_hex  # noqa: E402

BENEFICIARY = "0x1111111111111111111111111111111111111111"
REVOKER = "0x2222222222222222222222222222222222222222"
STRANGER = "0x3333333333333333333333333333333333333333"
TOKEN_OWNER = "0x4444444444444444444444444444444444444444"

START = 0
DURATION = 400
CLIFF = 100
TOTAL = 1000


class ManualClock:
    def __init__(self, start_time: int):
        self.current_time = start_time

    def now(self) -> int:
        return self.current_time

    def advance(self, seconds: int):
        self.current_time += seconds

    def set(self, timestamp: int):
        self.current_time = timestamp


@pytest.fixture
def clock():
    return ManualClock(start_time=START)


@pytest.fixture
def ledger():
    return AssetLedger()


@pytest.fixture
def token(ledger):
    return ledger.register_token(ERC20Token(name="Test Token", symbol="TST", owner=TOKEN_OWNER))


@pytest.fixture
def wallet(ledger, clock):
    """Wallet over the reference schedule (start=0, duration=400, cliff=100) holding 1000 native."""
    vesting_wallet = RevokableVestingWallet(
        BENEFICIARY,
        start=START,
        duration=DURATION,
        cliff=CLIFF,
        revoker=REVOKER,
        ledger=ledger,
        time_provider=clock.now,
    )
    ledger.deposit(vesting_wallet.address, TOTAL)
    return vesting_wallet


@pytest.fixture
def owner_keypair():
    """(private_hex, checksummed address) of a freshly generated key."""
    return generate_secp256k1_keypair_hex()
