"""
Unit tests for the Period Schedule Generator (mortgage_engine.schedule).

Version: 0.1.0
Status: Active
"""

import unittest

import numpy as np

from mortgage_engine.exceptions import (
    InvalidTerm,
    MissingRateInput,
    ScheduleTooLarge,
    UnsupportedFrequency,
)
from mortgage_engine.models import GraceConfig, GraceType, PeriodCountPolicy, RateBasis, RateType
from mortgage_engine.rates import effective_annual_to_period_rate
from mortgage_engine.schedule import (
    classify_periods,
    count_periods,
    generate_periods,
    remaining_amortizing_periods,
    resolve_annual_rate,
    resolve_grace_type,
)

TOTAL = GraceType.TOTAL
PARCIAL = GraceType.PARCIAL
SIN_PLAZO = GraceType.SIN_PLAZO


class TestCountPeriods(unittest.TestCase):

    def test_whole_years(self):
        self.assertEqual(count_periods(20, 12.0), 240)
        self.assertEqual(count_periods(10, 4.0), 40)
        self.assertEqual(count_periods(1, 360.0), 360)

    def test_fractional_term_does_not_lose_a_period(self):
        # 11/12 * 12 is not exactly 11.0 in binary floating point
        self.assertEqual(count_periods(11 / 12, 12.0), 11)
        self.assertEqual(count_periods(7 / 12, 12.0), 7)

    def test_floor_and_round_policies(self):
        self.assertEqual(count_periods(1.75, 2.0, PeriodCountPolicy.FLOOR), 3)
        self.assertEqual(count_periods(1.75, 2.0, PeriodCountPolicy.ROUND), 4)
        self.assertEqual(count_periods(1.7, 2.0, PeriodCountPolicy.ROUND), 3)

    def test_365_day_convention(self):
        self.assertEqual(count_periods(1, 365 / 30), 12)
        self.assertEqual(count_periods(2, 365 / 30), 24)

    def test_non_positive_term(self):
        for years in (0, -1, 0.01):
            with self.subTest(years=years):
                with self.assertRaises(InvalidTerm):
                    count_periods(years, 12.0)

    def test_non_finite_term(self):
        with self.assertRaises(InvalidTerm):
            count_periods(float("inf"), 12.0)

    def test_too_large(self):
        with self.assertRaises(ScheduleTooLarge) as ctx:
            count_periods(40, 360.0, max_periods=12_000)
        self.assertIsInstance(ctx.exception, InvalidTerm)
        self.assertIn("14400", str(ctx.exception))

    def test_limit_is_inclusive(self):
        self.assertEqual(count_periods(20, 12.0, max_periods=240), 240)


class TestGraceClassification(unittest.TestCase):

    def test_leading_block(self):
        config = GraceConfig(total_periods=3, partial_periods=3)
        expected = [TOTAL] * 3 + [PARCIAL] * 3 + [SIN_PLAZO] * 4
        actual = [resolve_grace_type(k, config) for k in range(1, 11)]
        self.assertEqual(actual, expected)

    def test_no_grace(self):
        self.assertEqual(classify_periods(4), (SIN_PLAZO,) * 4)

    def test_partial_only(self):
        self.assertEqual(
            classify_periods(4, GraceConfig(partial_periods=2)),
            (PARCIAL, PARCIAL, SIN_PLAZO, SIN_PLAZO),
        )

    def test_overrides_win_then_config_applies(self):
        actual = classify_periods(
            4, GraceConfig(total_periods=4), overrides=[SIN_PLAZO, PARCIAL]
        )
        self.assertEqual(actual, (SIN_PLAZO, PARCIAL, TOTAL, TOTAL))

    def test_overrides_accept_codes(self):
        actual = classify_periods(3, overrides=["parcial", "TOTAL", "SIN_PLAZO"])
        self.assertEqual(actual, (PARCIAL, TOTAL, SIN_PLAZO))

    def test_unknown_override_code(self):
        with self.assertRaises(ValueError):
            classify_periods(2, overrides=["HOLIDAY"])

    def test_grace_config_rejects_negative(self):
        with self.assertRaises(ValueError):
            GraceConfig(total_periods=-1)


class TestRemainingAmortizingPeriods(unittest.TestCase):

    def test_suffix_count(self):
        remaining = remaining_amortizing_periods([TOTAL, SIN_PLAZO, SIN_PLAZO, PARCIAL, SIN_PLAZO])
        np.testing.assert_array_equal(remaining, [0, 3, 2, 0, 1])

    def test_all_amortizing(self):
        np.testing.assert_array_equal(remaining_amortizing_periods([SIN_PLAZO] * 4), [4, 3, 2, 1])

    def test_trailing_grace(self):
        np.testing.assert_array_equal(
            remaining_amortizing_periods([SIN_PLAZO, SIN_PLAZO, TOTAL]), [2, 1, 0]
        )


class TestResolveAnnualRate(unittest.TestCase):

    def test_single_rate_holds(self):
        self.assertEqual(resolve_annual_rate(1, [8.0]), 8.0)
        self.assertEqual(resolve_annual_rate(240, [8.0]), 8.0)

    def test_per_period_curve_carries_last_value(self):
        rates = [7.0, 8.0, 9.0]
        self.assertEqual(resolve_annual_rate(2, rates), 8.0)
        self.assertEqual(resolve_annual_rate(3, rates), 9.0)
        self.assertEqual(resolve_annual_rate(10, rates), 9.0)

    def test_per_year_curve(self):
        rates = [7.0, 8.0]
        self.assertEqual(resolve_annual_rate(1, rates, RateBasis.PER_YEAR, 12.0), 7.0)
        self.assertEqual(resolve_annual_rate(12, rates, RateBasis.PER_YEAR, 12.0), 7.0)
        self.assertEqual(resolve_annual_rate(13, rates, RateBasis.PER_YEAR, 12.0), 8.0)
        self.assertEqual(resolve_annual_rate(40, rates, RateBasis.PER_YEAR, 12.0), 8.0)

    def test_missing_rates(self):
        for rates in ([], None, [float("nan")], ["8"], [True]):
            with self.subTest(rates=rates):
                with self.assertRaises(MissingRateInput):
                    resolve_annual_rate(1, rates)


class TestGeneratePeriods(unittest.TestCase):

    def test_contiguous_periods_and_rates(self):
        periods = generate_periods(24, 30, 360, [8.0])
        self.assertEqual([p.period for p in periods], list(range(1, 25)))
        expected_tep = effective_annual_to_period_rate(0.08, 30, 360)
        for p in periods:
            self.assertAlmostEqual(p.annual_rate, 0.08, places=15)
            self.assertAlmostEqual(p.period_rate, expected_tep, places=15)
        self.assertEqual(periods[0].remaining, 24)
        self.assertEqual(periods[-1].remaining, 1)

    def test_grace_periods_have_no_remaining_term(self):
        periods = generate_periods(24, 30, 360, [8.0], grace_config=GraceConfig(total_periods=2))
        self.assertEqual(periods[0].grace_type, TOTAL)
        self.assertEqual(periods[0].remaining, 0)
        self.assertEqual(periods[2].grace_type, SIN_PLAZO)
        self.assertEqual(periods[2].remaining, 22)

    def test_per_year_curve(self):
        periods = generate_periods(36, 30, 360, (6.0, 12.0), rate_basis=RateBasis.PER_YEAR)
        self.assertAlmostEqual(periods[11].annual_rate, 0.06)
        self.assertAlmostEqual(periods[12].annual_rate, 0.12)
        self.assertAlmostEqual(periods[35].annual_rate, 0.12)

    def test_nominal_rate_with_monthly_capitalization(self):
        periods = generate_periods(4, 90, 360, [12.0], rate_type=RateType.NOMINAL, capitalization="MENSUAL")
        self.assertAlmostEqual(periods[0].annual_rate, 1.01 ** 12 - 1, places=12)
        self.assertAlmostEqual(periods[0].period_rate, 1.01 ** 3 - 1, places=12)

    def test_unknown_capitalization(self):
        with self.assertRaises(UnsupportedFrequency):
            generate_periods(4, 30, 360, [12.0], rate_type=RateType.NOMINAL, capitalization="WEEKLY")

    def test_invalid_inputs(self):
        with self.assertRaises(InvalidTerm):
            generate_periods(0, 30, 360, [8.0])
        with self.assertRaises(MissingRateInput):
            generate_periods(12, 30, 360, [])


if __name__ == '__main__':
    unittest.main()
