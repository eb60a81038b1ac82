"""
Property-based tests for vesting wallet invariants.

Verifies the schedule formula (cliff, acceleration, linear baseline) and
that arbitrary operation sequences on a wallet never lose funds, never
decrease the released total, and never let anyone but the revoker claw
back assets.

Uses Hypothesis for property-based testing with random inputs.
"""

import pytest
from hypothesis import given, settings, strategies as st

from vestwallet.blockchain.vesting_schedule import VestingMode, VestingSchedule
from vestwallet.core.contracts.asset_ledger import AssetLedger
from vestwallet.core.contracts.vesting_wallet import RevokableVestingWallet
from vestwallet.core.vesting_exceptions import (
    AccountingError,
    AuthorizationError,
    TransferFailureError,
)

BENEFICIARY = "0x1111111111111111111111111111111111111111"
REVOKER = "0x2222222222222222222222222222222222222222"
FUNDER = "0x4444444444444444444444444444444444444444"

starts = st.integers(min_value=0, max_value=10_000)
durations = st.integers(min_value=1, max_value=10_000)
cliffs = st.integers(min_value=0, max_value=12_000)
totals = st.integers(min_value=0, max_value=10**24)
offsets = st.integers(min_value=0, max_value=25_000)


class TestScheduleInvariants:
    @given(start=starts, duration=durations, cliff=cliffs, total=totals, offset=offsets)
    @settings(max_examples=200)
    def test_nothing_vests_before_cliff(self, start, duration, cliff, total, offset):
        schedule = VestingSchedule(start=start, duration=duration, cliff=cliff)
        timestamp = offset
        if timestamp < schedule.cliff_end:
            assert schedule.vested_amount(total, timestamp) == 0

    @given(start=starts, duration=durations, cliff=cliffs, total=totals, offset=offsets)
    @settings(max_examples=200)
    def test_linear_after_cliff(self, start, duration, cliff, total, offset):
        schedule = VestingSchedule(start=start, duration=duration, cliff=cliff)
        timestamp = schedule.cliff_end + offset
        expected = min(total, total * max(timestamp - start, 0) // duration)
        assert schedule.vested_amount(total, timestamp) == expected

    @given(start=starts, duration=durations, cliff=cliffs, total=totals, timestamp=offsets)
    @settings(max_examples=200)
    def test_accelerated_always_total(self, start, duration, cliff, total, timestamp):
        schedule = VestingSchedule(start=start, duration=duration, cliff=cliff)
        assert schedule.vested_amount(total, timestamp, VestingMode.ACCELERATED) == total

    @given(
        start=starts,
        duration=durations,
        cliff=cliffs,
        total=totals,
        t1=offsets,
        t2=offsets,
    )
    @settings(max_examples=200)
    def test_vested_is_monotone_and_bounded(self, start, duration, cliff, total, t1, t2):
        schedule = VestingSchedule(start=start, duration=duration, cliff=cliff)
        early, late = sorted((t1, t2))
        vested_early = schedule.vested_amount(total, early)
        vested_late = schedule.vested_amount(total, late)
        assert 0 <= vested_early <= vested_late <= total


operations = st.lists(
    st.tuples(
        st.sampled_from(["release", "revoke", "accelerate", "deposit", "renounce", "intruder"]),
        st.integers(min_value=0, max_value=150),
        st.integers(min_value=0, max_value=5_000),
    ),
    max_size=25,
)


class TestWalletInvariants:
    @given(
        duration=durations,
        cliff=st.integers(min_value=0, max_value=2_000),
        initial=st.integers(min_value=0, max_value=10**12),
        ops=operations,
    )
    @settings(max_examples=150, deadline=None)
    def test_operation_sequences_conserve_funds(self, duration, cliff, initial, ops):
        now = {"t": 0}
        ledger = AssetLedger()
        wallet = RevokableVestingWallet(
            BENEFICIARY, 0, duration, cliff, REVOKER, ledger=ledger, time_provider=lambda: now["t"]
        )
        ledger.deposit(wallet.address, initial)
        deposited = initial
        last_released = 0

        for op, step, amount in ops:
            now["t"] += step
            try:
                if op == "release":
                    wallet.release(BENEFICIARY)
                elif op == "revoke":
                    wallet.revoke(REVOKER)
                elif op == "accelerate":
                    wallet.accelerate(REVOKER)
                elif op == "renounce":
                    wallet.renounce_revokability(REVOKER)
                elif op == "intruder":
                    with pytest.raises(AuthorizationError):
                        wallet.revoke(BENEFICIARY)
                    continue
                else:
                    ledger.deposit(FUNDER, amount)
                    wallet.receive(FUNDER, amount)
                    deposited += amount
            except AuthorizationError:
                # Revoker-gated calls after renouncing
                assert wallet.is_revokable() is False
            except AccountingError:
                # A revoke can shrink the allocation below what was already released
                assert op == "release"
            except TransferFailureError:
                # ...and then ask for more than the wallet still holds
                assert op == "revoke"

            released = wallet.released()
            assert released >= last_released
            last_released = released

            total_out = ledger.balance_of(BENEFICIARY) + ledger.balance_of(REVOKER)
            assert wallet.balance() + total_out == deposited
            assert ledger.balance_of(BENEFICIARY) == released

            if not wallet.is_revokable() or wallet.is_accelerated():
                assert wallet.revokable_amount() == 0
