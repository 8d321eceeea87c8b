# Requires Python 3.12+
# Uses native type hints: list[x], tuple[x, y], X | None (PEP 585, PEP 604)
from __future__ import annotations

import math
from collections.abc import Iterable
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from mortgage_engine.models import GraceType
from mortgage_engine.schedule import SchedulePeriod

__version__ = "0.1.0"

CENT = Decimal("0.01")


# =============================================================================
# ROUNDING AND CAPITAL
# =============================================================================

def round_money(value: float) -> float:
    """
    Round a monetary amount to the cent, half away from zero on exact ties.

    The shortest repr of the float is rounded, so 1.005 becomes 1.01 (as a
    teller would write it) instead of 1.00 from its binary expansion.
    Non-finite values are returned unchanged.
    """
    if not math.isfinite(value):
        return value
    return float(Decimal(repr(float(value))).quantize(CENT, rounding=ROUND_HALF_UP))


def financed_capital(price: float, down_payment: float, bond_amount: float = 0.0) -> float:
    """
    C = max(0, price - down payment - bond), rounded to the cent.

    Down payment and bond are rounded to the cent before they are subtracted.
    """
    capital = price - round_money(down_payment) - round_money(bond_amount)
    return round_money(max(0.0, capital))


# =============================================================================
# AMORTIZATION: ONE TRANSITION PER PERIOD
# =============================================================================
#
# The row calculator is a state machine over the grace classification. The
# balance is the only state carried from one period to the next:
#
#   | grace     | installment R     | amortization A | final balance SF |
#   |-----------|-------------------|----------------|------------------|
#   | TOTAL     | 0                 | 0              | SI + I           |
#   | PARCIAL   | I                 | 0              | SI               |
#   | SIN_PLAZO | SI x AF(n, i)     | R - I          | SI - A           |
#
# with I = round(SI x i) and the annuity factor over the n SIN_PLAZO periods
# still ahead (current one included):
#
#   AF(n, i) = i (1+i)^n / ((1+i)^n - 1),    AF(n, 0) = 1 / n
#
# Re-computing the annuity every period from the rounded balance keeps the
# schedule correct when the rate changes mid-term, and makes the fixed-rate
# installment constant up to cent rounding. Every monetary amount is rounded
# as soon as it is computed.
# =============================================================================

@dataclass(frozen=True)
class AmortizationRow:
    """Raw schedule row before the cost overlay."""
    period: int
    grace_type: GraceType
    annual_rate: float
    period_rate: float
    initial_balance: float
    interest: float
    installment: float
    amortization: float
    final_balance: float


def annuity_installment(balance: float, period_rate: float, remaining_periods: int) -> float:
    """
    Level (French) installment that amortizes ``balance`` over ``remaining_periods``.

    Formula:
        R = SI x [ i (1+i)^n / ((1+i)^n - 1) ]     if i != 0
        R = SI / n                                 if i == 0

    Args:
        balance: Balance at the start of the period (SI)
        period_rate: Effective period rate i (fraction)
        remaining_periods: n, amortizing periods left including the current one

    Returns:
        Unrounded installment

    Raises:
        ValueError: If remaining_periods is not positive
    """
    if remaining_periods <= 0:
        raise ValueError(f"remaining_periods must be positive, got {remaining_periods}")
    if period_rate == 0:
        return balance / remaining_periods
    factor = (1.0 + period_rate) ** remaining_periods
    return balance * (period_rate * factor) / (factor - 1.0)


def amortize_period(balance: float, period: SchedulePeriod) -> AmortizationRow:
    """
    Apply one period's transition to the carried balance.

    In the last SIN_PLAZO period (remaining == 1) the whole balance is
    amortized, so the final balance is exactly 0.00 regardless of the cents
    lost to rounding in earlier periods.
    """
    initial_balance = balance
    interest = round_money(period.period_rate * initial_balance)

    if period.grace_type is GraceType.TOTAL:
        installment = 0.0
        amortization = 0.0
        final_balance = round_money(initial_balance + interest)
    elif period.grace_type is GraceType.PARCIAL:
        installment = interest
        amortization = 0.0
        final_balance = initial_balance
    elif period.remaining == 1:
        amortization = initial_balance
        installment = round_money(interest + amortization)
        final_balance = 0.0
    else:
        installment = round_money(
            annuity_installment(initial_balance, period.period_rate, period.remaining)
        )
        amortization = round_money(installment - interest)
        final_balance = round_money(initial_balance - amortization)

    return AmortizationRow(
        period=period.period,
        grace_type=period.grace_type,
        annual_rate=period.annual_rate,
        period_rate=period.period_rate,
        initial_balance=initial_balance,
        interest=interest,
        installment=installment,
        amortization=amortization,
        final_balance=final_balance,
    )


def amortize(principal: float, periods: Iterable[SchedulePeriod]) -> tuple[AmortizationRow, ...]:
    """
    Roll ``principal`` forward over the periods.

    Each row's final balance is the next row's initial balance.

    Args:
        principal: Balance entering period 1 (rounded to the cent)
        periods: Output of schedule.generate_periods()

    Returns:
        Tuple of AmortizationRow in period order
    """
    rows: list[AmortizationRow] = []
    balance = round_money(principal)
    for period in periods:
        row = amortize_period(balance, period)
        rows.append(row)
        balance = row.final_balance
    return tuple(rows)
