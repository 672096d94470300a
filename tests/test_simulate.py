#
# Runecalc - Simulation Tests
#

# Standard library -----------------------------------------------------------------------------------------------------
import math

# Third-party ----------------------------------------------------------------------------------------------------------
import pytest

# Local ----------------------------------------------------------------------------------------------------------------
from runecalc.durations import format_duration
from runecalc.runes import BonusEffect, Modifier, Rune, SpecialCost, StatTarget
from runecalc.simulate import (
    SimulationConf, SimulationResult, SimulationState, apply_bonus, linear_multiplier, simulate,
)


# Tests ----------------------------------------------------------------------------------------------------------------

class TestSimulateNoBonus:

    @pytest.mark.parametrize(
        "start, end, speed, bulk",
        [
            pytest.param(0, 3, 1e6, 1, id="three"),
            pytest.param(18, 19, 2.5e3, 4, id="single"),
            pytest.param(0, 1000, 1e9, 1e3, id="thousand"),
        ],
    )
    def test_linear_time(self, plain_rune, start, end, speed, bulk):
        result = simulate(plain_rune, start, end, speed, bulk)
        assert result.total_time_seconds == pytest.approx((end - start) * plain_rune.chance / (speed * bulk))
        assert result.final_rps == pytest.approx(speed * bulk)
        assert result.is_finite

    def test_end_to_end_scenario(self, plain_rune, small_table):
        result = simulate(plain_rune, 0, 3, 1e6, 1, table=small_table)
        assert result.total_time_seconds == pytest.approx(3_000_000)
        assert format_duration(result.total_time_seconds) == "34 days, 17 hours, 20 minutes"

    def test_trace_lines(self, plain_rune, small_table):
        result = simulate(plain_rune, 0, 2, 1e6, 1, table=small_table)
        assert result.trace_log == (
            "Rune #1: Speed=1 M, Bulk=1, RPS=1 M -> Time: 11 days, 13 hours, 46 minutes",
            "Rune #2: Speed=1 M, Bulk=1, RPS=1 M -> Time: 11 days, 13 hours, 46 minutes",
        )

    def test_trace_lines_without_table(self, plain_rune):
        result = simulate(plain_rune, 4, 5, 2e6, 0.5)
        assert result.trace_log == ("Rune #5: Speed=2.00e+6, Bulk=5.00e-1, RPS=1.00e+6 -> Time: 1000000.00s",)

    def test_other_targets_are_inert(self, make_rune):
        rune = make_rune(
            BonusEffect(StatTarget.OTHER, Modifier.MULTIPLIER, 10.0),
            BonusEffect(StatTarget.RUNE_SPEED, Modifier.POWER, None),
            BonusEffect(StatTarget.RUNE_BULK, Modifier.SUBTRACTIVE, 0.5),
            BonusEffect(StatTarget.RUNE_SPEED, None, 2.0),
        )
        result = simulate(rune, 0, 5, 10.0, 10.0)
        assert result.final_rps == 100.0
        assert result.total_time_seconds == pytest.approx(5 * 1e6 / 100)


class TestSimulateTermination:

    @pytest.mark.parametrize(
        "speed, bulk",
        [
            pytest.param(0, 1, id="zero-speed"),
            pytest.param(1e6, 0, id="zero-bulk"),
            pytest.param(-1, 5, id="negative"),
            pytest.param(math.nan, 1, id="nan"),
        ],
    )
    def test_non_positive_initial_rate(self, plain_rune, speed, bulk):
        result = simulate(plain_rune, 0, 10, speed, bulk)
        assert result.total_time_seconds == math.inf
        assert result.final_rps == 0
        assert result.trace_log == (SimulationConf.NON_POSITIVE_RPS,)
        assert not result.is_finite

    def test_rate_drops_to_zero(self, make_rune):
        rune = make_rune(BonusEffect(StatTarget.RUNE_SPEED, Modifier.ADDITIVE, -5.0))
        result = simulate(rune, 0, 10, 10.0, 1.0)
        assert result.total_time_seconds == math.inf
        assert result.final_rps == 0
        assert len(result.trace_log) == 3
        assert result.trace_log[0].startswith("Rune #1:")
        assert result.trace_log[1].startswith("Rune #2:")
        assert result.trace_log[-1] == SimulationConf.NON_POSITIVE_RPS

    def test_fractional_power_of_negative_rate(self, make_rune):
        rune = make_rune(
            BonusEffect(StatTarget.RUNE_BULK, Modifier.ADDITIVE, -3.0),
            BonusEffect(StatTarget.RUNE_BULK, Modifier.POWER, 0.5),
        )
        result = simulate(rune, 0, 5, 1.0, 2.0)
        assert result.total_time_seconds == math.inf

    def test_trace_bound(self, plain_rune):
        result = simulate(plain_rune, 0, 10_000, 1e6, 1)
        assert len(result.trace_log) == SimulationConf.TRACE_LIMIT
        assert result.trace_log[-1].startswith("Rune #200:")

    def test_error_line_within_bound(self, make_rune):
        rune = make_rune(BonusEffect(StatTarget.RUNE_SPEED, Modifier.ADDITIVE, -1.0))
        result = simulate(rune, 0, 1000, 500.0, 1.0, trace_limit=50)
        assert len(result.trace_log) == 50
        assert result.trace_log[-1] == SimulationConf.NON_POSITIVE_RPS

    def test_zero_trace_limit(self, plain_rune):
        result = simulate(plain_rune, 0, 10, 1e6, 1, trace_limit=0)
        assert result.trace_log == ()


class TestSimulateValidation:

    def test_special_cost(self):
        rune = Rune(name="Stellar", source="Shop", chance=SpecialCost(500, "Stars"))
        with pytest.raises(TypeError, match="special cost"):
            simulate(rune, 0, 1, 1.0, 1.0)

    @pytest.mark.parametrize(
        "start, end, error",
        [
            pytest.param(-1, 5, ValueError, id="negative-start"),
            pytest.param(5, 5, ValueError, id="empty-range"),
            pytest.param(6, 5, ValueError, id="reversed-range"),
            pytest.param(0, 2_000_000, ValueError, id="too-many-steps"),
            pytest.param(0.0, 5, TypeError, id="float-start"),
            pytest.param(0, "5", TypeError, id="str-end"),
            pytest.param(False, 5, TypeError, id="bool-start"),
        ],
    )
    def test_counts(self, plain_rune, start, end, error):
        with pytest.raises(error):
            simulate(plain_rune, start, end, 1.0, 1.0)

    def test_custom_max_steps(self, plain_rune):
        with pytest.raises(ValueError, match="max_steps=10"):
            simulate(plain_rune, 0, 11, 1.0, 1.0, max_steps=10)


class TestBonuses:

    def test_additive(self, make_rune, speed_bonus):
        rune = make_rune(speed_bonus(Modifier.ADDITIVE, 2.0))
        result = simulate(rune, 0, 3, 1.0, 1.0)
        # speed 1, 3, 5 while acquiring, 7 after
        assert result.total_time_seconds == pytest.approx(1e6 * (1 + 1 / 3 + 1 / 5))
        assert result.final_rps == pytest.approx(7.0)

    def test_bulk_additive(self, make_rune):
        rune = make_rune(BonusEffect(StatTarget.RUNE_BULK, Modifier.ADDITIVE, 1.0))
        result = simulate(rune, 0, 4, 3.0, 1.0)
        assert result.final_rps == pytest.approx(15.0)

    @pytest.mark.parametrize("flag", ["is_exponential", "is_dual_exponential"])
    def test_exponential_multiplier_is_flat_per_step(self, make_rune, speed_bonus, flag):
        rune = make_rune(speed_bonus(Modifier.MULTIPLIER, 2.0, **{flag: True}))
        result = simulate(rune, 0, 10, 1.0, 1.0)
        assert result.final_rps == pytest.approx(2.0 ** 10)

    def test_power(self, make_rune, speed_bonus):
        rune = make_rune(speed_bonus(Modifier.POWER, 2.0))
        result = simulate(rune, 0, 3, 3.0, 1.0)
        assert result.final_rps == pytest.approx(3.0 ** 8)

    def test_power_overflow(self, make_rune, speed_bonus):
        rune = make_rune(speed_bonus(Modifier.POWER, 10.0))
        result = simulate(rune, 0, 5, 1e40, 1.0)
        assert result.final_rps == math.inf
        assert result.total_time_seconds == pytest.approx(1e6 / 1e40)

    def test_linear_uncapped(self, make_rune, speed_bonus):
        rune = make_rune(speed_bonus(Modifier.MULTIPLIER, 1.5))
        result = simulate(rune, 0, 4, 1.0, 1.0)
        assert result.final_rps == pytest.approx(linear_multiplier(1.5, 4))

    def test_linear_from_nonzero_start(self, make_rune, speed_bonus):
        rune = make_rune(speed_bonus(Modifier.MULTIPLIER, 1.5))
        result = simulate(rune, 2, 4, 10.0, 1.0)
        # multiplier goes 2.0 -> 3.0 over counts 2..4
        assert result.final_rps == pytest.approx(10.0 * 3.0 / 2.0)

    def test_capped_linear_bonus(self, make_rune, speed_bonus):
        rune = make_rune(speed_bonus(Modifier.MULTIPLIER, 1.1, cap=2.0))
        speeds = [simulate(rune, 0, n, 1.0, 1.0).final_rps for n in range(1, 21)]

        assert max(speeds) == pytest.approx(2.0)
        assert all(s <= 2.0 + 1e-12 for s in speeds)
        # cap reached after 10 acquisitions, later steps leave speed unchanged
        assert speeds[9] == pytest.approx(2.0)
        assert all(s == speeds[9] for s in speeds[10:])
        assert all(b >= a for a, b in zip(speeds, speeds[1:]))


class TestApplyBonus:

    @pytest.mark.parametrize(
        "modifier, magnitude, count, expected",
        [
            pytest.param(Modifier.ADDITIVE, 5.0, 0, 15.0, id="additive"),
            pytest.param(Modifier.MULTIPLIER, 1.5, 0, 15.0, id="linear-first"),
            pytest.param(Modifier.MULTIPLIER, 1.5, 1, 10.0 * 2.0 / 1.5, id="linear-second"),
            pytest.param(Modifier.POWER, 2.0, 0, 100.0, id="power"),
            pytest.param(Modifier.SUBTRACTIVE, 3.0, 0, 10.0, id="subtractive"),
        ],
    )
    def test_modifiers(self, speed_bonus, modifier, magnitude, count, expected):
        assert apply_bonus(10.0, speed_bonus(modifier, magnitude), count) == pytest.approx(expected)

    def test_linear_at_cap(self, speed_bonus):
        bonus = speed_bonus(Modifier.MULTIPLIER, 1.5, cap=2.0)
        assert apply_bonus(10.0, bonus, 2) == 10.0

    def test_linear_non_positive_before(self, speed_bonus):
        # 1 + 3 × (0.5 - 1) < 0, no change applied
        bonus = speed_bonus(Modifier.MULTIPLIER, 0.5)
        assert apply_bonus(10.0, bonus, 3) == 10.0

    def test_missing_magnitude(self, speed_bonus):
        with pytest.raises(ValueError, match="numeric magnitude"):
            apply_bonus(10.0, speed_bonus(Modifier.ADDITIVE, None), 0)

    @pytest.mark.parametrize(
        "magnitude, count, cap, expected",
        [
            pytest.param(1.5, 0, None, 1.0, id="zero-count"),
            pytest.param(1.5, 4, None, 3.0, id="uncapped"),
            pytest.param(1.5, 4, 2.5, 2.5, id="capped"),
            pytest.param(2.0, 1, 5.0, 2.0, id="below-cap"),
        ],
    )
    def test_linear_multiplier(self, magnitude, count, cap, expected):
        assert linear_multiplier(magnitude, count, cap) == pytest.approx(expected)


class TestSimulationState:

    def test_record_respects_limit(self):
        state = SimulationState(speed=1.0, bulk=2.0, trace_limit=2)
        for i in range(5):
            state.record(str(i))
        assert state.trace_log == ["0", "1"]
        assert state.trace_full
        assert state.rps == 2.0

    def test_record_error_replaces_last_line_when_full(self):
        state = SimulationState(speed=1.0, bulk=1.0, trace_limit=2)
        state.record("a")
        state.record("b")
        state.record_error("error")
        assert state.trace_log == ["a", "error"]

    def test_result_is_frozen(self):
        result = SimulationResult(1.0, 2.0)
        with pytest.raises(AttributeError):
            result.final_rps = 3.0
