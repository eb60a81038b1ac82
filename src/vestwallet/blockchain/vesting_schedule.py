from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

from vestwallet.core.vesting_exceptions import InvalidArgumentError

logger = logging.getLogger("vestwallet.blockchain.vesting_schedule")


class VestingMode(Enum):
    """Whether vesting follows the schedule or has been forced to completion."""

    SCHEDULED = "scheduled"
    ACCELERATED = "accelerated"

    def accelerate(self) -> "VestingMode":
        # One-way: there is no transition back to SCHEDULED.
        return VestingMode.ACCELERATED


def linear_vested_amount(total_allocation: int, timestamp: int, start: int, duration: int) -> int:
    """
    Baseline linear release: nothing before ``start``, everything from
    ``start + duration`` on, and a proportional (floored) share in between.
    """
    if timestamp < start:
        return 0
    if timestamp >= start + duration:
        return total_allocation
    return total_allocation * (timestamp - start) // duration


def _require_int(name: str, value: object) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidArgumentError(
            f"{name} must be an integer (Unix timestamp/duration).",
            details={"parameter": name, "value": repr(value)},
        )
    return value


@dataclass(frozen=True)
class VestingSchedule:
    """
    Immutable time parameters of a vesting wallet.

    ``cliff`` is an offset from ``start``. It is not bounded by ``duration``:
    a cliff past the end simply keeps everything locked until ``cliff_end``,
    and a negative cliff ends before ``start``.
    """

    start: int
    duration: int
    cliff: int = 0

    def __post_init__(self) -> None:
        _require_int("start", self.start)
        _require_int("duration", self.duration)
        _require_int("cliff", self.cliff)
        if self.start < 0:
            raise InvalidArgumentError("Start time cannot be negative.")
        if self.duration < 0:
            raise InvalidArgumentError("Duration cannot be negative.")
        if self.cliff > self.duration:
            logger.warning(
                "Cliff ends after the vesting period",
                extra={
                    "event": "vesting.cliff_past_end",
                    "cliff": self.cliff,
                    "duration": self.duration,
                },
            )

    @property
    def end(self) -> int:
        return self.start + self.duration

    @property
    def cliff_end(self) -> int:
        return self.start + self.cliff

    def is_past_cliff(self, timestamp: int) -> bool:
        return timestamp >= self.cliff_end

    def vested_amount(
        self,
        total_allocation: int,
        timestamp: int,
        mode: VestingMode = VestingMode.SCHEDULED,
    ) -> int:
        """
        Amount of ``total_allocation`` vested at ``timestamp``.

        An accelerated wallet is fully vested at every timestamp, cliff
        included. Otherwise nothing vests before ``cliff_end`` and the linear
        baseline applies from there on, so crossing the cliff jumps straight
        to what the baseline already owes at that moment.

        Args:
            total_allocation: Held balance plus everything already released
            timestamp: Point in time to evaluate
            mode: Current vesting mode

        Returns:
            Vested amount, between 0 and ``total_allocation``
        """
        # Acceleration wins over the cliff; see DESIGN.md, open question 1.
        if mode is VestingMode.ACCELERATED:
            return total_allocation
        if timestamp < self.cliff_end:
            return 0
        return linear_vested_amount(total_allocation, timestamp, self.start, self.duration)

    def to_dict(self) -> dict[str, int]:
        return {"start": self.start, "duration": self.duration, "cliff": self.cliff}
