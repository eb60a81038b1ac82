import logging

import pytest

from vestwallet.blockchain.vesting_schedule import (
    VestingMode,
    VestingSchedule,
    linear_vested_amount,
)
from vestwallet.core.vesting_exceptions import InvalidArgumentError


@pytest.mark.parametrize(
    "timestamp,expected",
    [
        (0, 0),
        (50, 0),
        (99, 0),
        (100, 250),  # cliff crossing jumps to the linear amount
        (300, 750),
        (399, 997),
        (400, 1000),
        (500, 1000),
    ],
)
def test_cliff_stair_step(timestamp: int, expected: int):
    schedule = VestingSchedule(start=0, duration=400, cliff=100)
    assert schedule.vested_amount(1000, timestamp) == expected


def test_accelerated_is_fully_vested_at_every_timestamp():
    schedule = VestingSchedule(start=1_000, duration=400, cliff=100)
    for timestamp in (0, 999, 1_050, 1_100, 1_399, 5_000):
        assert schedule.vested_amount(1000, timestamp, VestingMode.ACCELERATED) == 1000


def test_accessors_are_derived_from_parameters():
    schedule = VestingSchedule(start=1_700_000_000, duration=400, cliff=100)
    assert schedule.end == 1_700_000_400
    assert schedule.cliff_end == 1_700_000_100
    assert schedule.is_past_cliff(1_700_000_099) is False
    assert schedule.is_past_cliff(1_700_000_100) is True
    assert schedule.to_dict() == {"start": 1_700_000_000, "duration": 400, "cliff": 100}


def test_linear_amount_floors():
    assert linear_vested_amount(10, 1, 0, 3) == 3
    assert linear_vested_amount(10, 2, 0, 3) == 6
    assert linear_vested_amount(10, 3, 0, 3) == 10


def test_zero_duration_vests_everything_at_start():
    schedule = VestingSchedule(start=100, duration=0)
    assert schedule.vested_amount(1000, 99) == 0
    assert schedule.vested_amount(1000, 100) == 1000


def test_cliff_past_end_locks_until_cliff(caplog):
    with caplog.at_level(logging.WARNING, logger="vestwallet"):
        schedule = VestingSchedule(start=0, duration=100, cliff=200)
    assert any(getattr(r, "event", None) == "vesting.cliff_past_end" for r in caplog.records)

    assert schedule.vested_amount(1000, 150) == 0
    assert schedule.vested_amount(1000, 200) == 1000


def test_negative_cliff_falls_back_to_start():
    schedule = VestingSchedule(start=100, duration=100, cliff=-50)
    assert schedule.cliff_end == 50
    assert schedule.vested_amount(1000, 60) == 0  # before start
    assert schedule.vested_amount(1000, 150) == 500


@pytest.mark.parametrize(
    "kwargs",
    [
        {"start": -1, "duration": 10},
        {"start": 0, "duration": -10},
        {"start": True, "duration": 10},
        {"start": 0, "duration": 10.5},
        {"start": 0, "duration": 10, "cliff": "5"},
    ],
)
def test_invalid_parameters_rejected(kwargs):
    with pytest.raises(InvalidArgumentError):
        VestingSchedule(**kwargs)


def test_vesting_mode_only_moves_forward():
    assert VestingMode.SCHEDULED.accelerate() is VestingMode.ACCELERATED
    assert VestingMode.ACCELERATED.accelerate() is VestingMode.ACCELERATED
