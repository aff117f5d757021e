"""Tests for vesting math."""

from datetime import UTC, datetime, timedelta

from src.rk_account.domain.models import VestingKind, VestingPeriod, VestingSchedule
from src.rk_account.domain.vesting import locked_coins, vested_coins, vesting_coins
from src.rk_common.coins import Coins

START = datetime(2023, 1, 1, tzinfo=UTC)
DAY = 86400


def _schedule(delegated_vesting: int = 0) -> VestingSchedule:
    # 3 periods of 100 ukava, one day each
    return VestingSchedule(
        original_vesting=Coins.of("ukava", 300),
        start_time=START,
        end_time=START + timedelta(days=3),
        periods=tuple(VestingPeriod(DAY, Coins.of("ukava", 100)) for _ in range(3)),
        delegated_vesting=Coins.of("ukava", delegated_vesting),
    )


class TestVestedCoins:
    def test_nothing_before_start(self) -> None:
        assert vested_coins(_schedule(), START - timedelta(seconds=1)).is_empty()

    def test_nothing_at_start(self) -> None:
        assert vested_coins(_schedule(), START).is_empty()

    def test_everything_after_end(self) -> None:
        assert vested_coins(_schedule(), START + timedelta(days=4)) == Coins.of("ukava", 300)

    def test_period_boundary_inclusive(self) -> None:
        assert vested_coins(_schedule(), START + timedelta(days=1)) == Coins.of("ukava", 100)

    def test_mid_period(self) -> None:
        t = START + timedelta(days=1, hours=12)
        assert vested_coins(_schedule(), t) == Coins.of("ukava", 100)


class TestContinuousVesting:
    def _schedule(self, original: Coins) -> VestingSchedule:
        return VestingSchedule(
            kind=VestingKind.CONTINUOUS,
            original_vesting=original,
            start_time=START,
            end_time=START + timedelta(seconds=3000),
        )

    def test_linear_between_start_and_end(self) -> None:
        schedule = self._schedule(Coins.of("ukava", 3000))
        assert vested_coins(schedule, START).is_empty()
        assert vested_coins(schedule, START + timedelta(seconds=1000)) == Coins.of("ukava", 1000)
        assert vested_coins(schedule, START + timedelta(seconds=3000)) == Coins.of("ukava", 3000)

    def test_rounds_to_nearest_unit(self) -> None:
        schedule = self._schedule(Coins({"ukava": 1000, "hard": 2}))
        # 2/3 elapsed: 666.67 ukava and 1.33 hard
        vested = vested_coins(schedule, START + timedelta(seconds=2000))
        assert vested == Coins({"ukava": 667, "hard": 1})

    def test_sub_second_block_time_ignored(self) -> None:
        schedule = self._schedule(Coins.of("ukava", 3000))
        t = START + timedelta(seconds=1000, microseconds=999_999)
        assert vested_coins(schedule, t) == Coins.of("ukava", 1000)

    def test_no_periods_allowed(self) -> None:
        schedule = VestingSchedule(
            kind=VestingKind.CONTINUOUS,
            original_vesting=Coins.of("ukava", 100),
            start_time=START,
            end_time=START + timedelta(days=1),
            periods=(VestingPeriod(DAY, Coins.of("ukava", 100)),),
        )
        assert schedule.validate() == ["continuous schedule with vesting periods"]


class TestDelayedVesting:
    def _schedule(self) -> VestingSchedule:
        end = START + timedelta(days=2)
        return VestingSchedule(
            kind=VestingKind.DELAYED,
            original_vesting=Coins.of("ukava", 500),
            start_time=end,
            end_time=end,
        )

    def test_nothing_before_end(self) -> None:
        assert vested_coins(self._schedule(), START + timedelta(days=1)).is_empty()

    def test_everything_at_end(self) -> None:
        assert vested_coins(self._schedule(), START + timedelta(days=2)) == Coins.of("ukava", 500)

    def test_consistent_without_periods(self) -> None:
        assert self._schedule().validate() == []


class TestVestingAndLocked:
    def test_vesting_is_remainder(self) -> None:
        t = START + timedelta(days=2)
        assert vesting_coins(_schedule(), t) == Coins.of("ukava", 100)

    def test_locked_reduced_by_delegated_vesting(self) -> None:
        t = START + timedelta(days=1)
        assert locked_coins(_schedule(delegated_vesting=150), t) == Coins.of("ukava", 50)

    def test_locked_never_negative(self) -> None:
        t = START + timedelta(days=2)
        assert locked_coins(_schedule(delegated_vesting=250), t).is_empty()


class TestScheduleValidation:
    def test_consistent(self) -> None:
        assert _schedule().validate() == []

    def test_period_sum_mismatch(self) -> None:
        schedule = VestingSchedule(
            original_vesting=Coins.of("ukava", 500),
            start_time=START,
            end_time=START + timedelta(days=1),
            periods=(VestingPeriod(DAY, Coins.of("ukava", 100)),),
        )
        violations = schedule.validate()
        assert len(violations) == 1
        assert "original vesting" in violations[0]
