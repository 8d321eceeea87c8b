"""
Unit tests for the Amortization Row Calculator (mortgage_engine.amortization).

Tests cover:
- Cent rounding and financed capital
- The annuity (French) installment and its zero-rate case
- One transition per grace type
- Balance chaining and full amortization over a fixed-rate schedule

Version: 0.1.0
Status: Active
"""

import math
import unittest

from mortgage_engine.amortization import (
    amortize,
    amortize_period,
    annuity_installment,
    financed_capital,
    round_money,
)
from mortgage_engine.models import GraceConfig, GraceType
from mortgage_engine.schedule import SchedulePeriod, generate_periods

# Loan used throughout: 350,000 at 8% TEA, 240 monthly periods
PRINCIPAL = 350_000.0
TEP_8 = 1.08 ** (30 / 360) - 1


def setUpModule():
    global STANDARD_ROWS
    STANDARD_ROWS = amortize(PRINCIPAL, generate_periods(240, 30, 360, [8.0]))


class TestRoundMoney(unittest.TestCase):

    def test_half_up_on_decimal_ties(self):
        self.assertEqual(round_money(1.005), 1.01)
        self.assertEqual(round_money(2.675), 2.68)
        self.assertEqual(round_money(0.125), 0.13)

    def test_negative_ties_round_away_from_zero(self):
        self.assertEqual(round_money(-1.005), -1.01)

    def test_ordinary_values(self):
        self.assertEqual(round_money(1234.5678), 1234.57)
        self.assertEqual(round_money(1234.5649), 1234.56)
        self.assertEqual(round_money(0.0), 0.0)

    def test_non_finite_passthrough(self):
        self.assertEqual(round_money(math.inf), math.inf)
        self.assertTrue(math.isnan(round_money(math.nan)))


class TestFinancedCapital(unittest.TestCase):

    def test_price_minus_down_payment_and_bond(self):
        self.assertEqual(financed_capital(400_000, 50_000), 350_000.0)
        self.assertEqual(financed_capital(400_000, 50_000, 25_000), 325_000.0)

    def test_never_negative(self):
        self.assertEqual(financed_capital(100, 200), 0.0)
        self.assertEqual(financed_capital(100, 60, 60), 0.0)

    def test_amounts_rounded_before_subtraction(self):
        self.assertEqual(financed_capital(1_000, 100.004, 0.006), 899.99)


class TestAnnuityInstallment(unittest.TestCase):

    def test_zero_rate_is_straight_line(self):
        self.assertEqual(annuity_installment(1_000, 0.0, 4), 250.0)

    def test_single_period_pays_everything(self):
        self.assertAlmostEqual(annuity_installment(1_000, 0.1, 1), 1_100.0, places=9)

    def test_annuity_factor(self):
        # PV of the installment stream equals the balance
        payment = annuity_installment(PRINCIPAL, TEP_8, 240)
        present_value = sum(payment / (1 + TEP_8) ** k for k in range(1, 241))
        self.assertAlmostEqual(present_value, PRINCIPAL, places=6)
        self.assertAlmostEqual(payment, 2867.03, delta=0.01)

    def test_non_positive_remaining(self):
        with self.assertRaises(ValueError):
            annuity_installment(1_000, 0.01, 0)


class TestAmortizePeriod(unittest.TestCase):

    def test_total_grace_capitalizes_interest(self):
        row = amortize_period(1_000.0, SchedulePeriod(1, GraceType.TOTAL, 0.1268, 0.01, 0))
        self.assertEqual(row.interest, 10.0)
        self.assertEqual(row.installment, 0.0)
        self.assertEqual(row.amortization, 0.0)
        self.assertEqual(row.final_balance, 1_010.0)

    def test_partial_grace_pays_interest_only(self):
        row = amortize_period(1_000.0, SchedulePeriod(1, GraceType.PARCIAL, 0.1268, 0.01, 0))
        self.assertEqual(row.installment, 10.0)
        self.assertEqual(row.amortization, 0.0)
        self.assertEqual(row.final_balance, 1_000.0)

    def test_last_period_closes_balance(self):
        row = amortize_period(1_000.0, SchedulePeriod(9, GraceType.SIN_PLAZO, 0.1268, 0.01, 1))
        self.assertEqual(row.amortization, 1_000.0)
        self.assertEqual(row.installment, 1_010.0)
        self.assertEqual(row.final_balance, 0.0)

    def test_zero_rate_amortizing(self):
        row = amortize_period(1_000.0, SchedulePeriod(1, GraceType.SIN_PLAZO, 0.0, 0.0, 2))
        self.assertEqual(row.interest, 0.0)
        self.assertEqual(row.installment, 500.0)
        self.assertEqual(row.amortization, 500.0)
        self.assertEqual(row.final_balance, 500.0)


class TestFixedRateSchedule(unittest.TestCase):

    def test_length_and_order(self):
        self.assertEqual(len(STANDARD_ROWS), 240)
        self.assertEqual([r.period for r in STANDARD_ROWS], list(range(1, 241)))

    def test_first_installment(self):
        self.assertAlmostEqual(STANDARD_ROWS[0].installment, 2867.03, delta=0.01)
        self.assertEqual(STANDARD_ROWS[0].interest, round_money(PRINCIPAL * TEP_8))

    def test_installment_constant_up_to_rounding(self):
        installments = [r.installment for r in STANDARD_ROWS]
        self.assertLessEqual(max(installments) - min(installments), 0.10)

    def test_balance_chaining(self):
        for current, following in zip(STANDARD_ROWS, STANDARD_ROWS[1:]):
            self.assertEqual(current.final_balance, following.initial_balance)

    def test_balance_strictly_decreasing(self):
        for row in STANDARD_ROWS:
            self.assertLess(row.final_balance, row.initial_balance)

    def test_fully_amortized(self):
        self.assertEqual(STANDARD_ROWS[-1].final_balance, 0.0)
        self.assertAlmostEqual(math.fsum(r.amortization for r in STANDARD_ROWS), PRINCIPAL, places=2)

    def test_row_identity(self):
        for row in STANDARD_ROWS[:-1]:
            self.assertAlmostEqual(row.installment, row.interest + row.amortization, places=2)


class TestGraceSchedule(unittest.TestCase):

    def setUp(self):
        periods = generate_periods(
            24, 30, 360, [12.0], grace_config=GraceConfig(total_periods=2, partial_periods=2)
        )
        self.rows = amortize(10_000.0, periods)

    def test_balance_grows_during_total_grace(self):
        self.assertGreater(self.rows[0].final_balance, self.rows[0].initial_balance)
        self.assertGreater(self.rows[1].final_balance, self.rows[1].initial_balance)

    def test_balance_flat_during_partial_grace(self):
        for row in self.rows[2:4]:
            self.assertEqual(row.final_balance, row.initial_balance)
            self.assertEqual(row.installment, row.interest)

    def test_amortizes_capitalized_balance(self):
        entering = self.rows[4].initial_balance
        self.assertGreater(entering, 10_000.0)
        self.assertAlmostEqual(math.fsum(r.amortization for r in self.rows), entering, places=2)
        self.assertEqual(self.rows[-1].final_balance, 0.0)

    def test_annuity_over_remaining_amortizing_periods(self):
        first = self.rows[4]
        expected = round_money(annuity_installment(first.initial_balance, first.period_rate, 20))
        self.assertEqual(first.installment, expected)


if __name__ == '__main__':
    unittest.main()
