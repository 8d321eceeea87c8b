# Requires Python 3.12+
"""
Cost & insurance overlay.

Augments each raw amortization row with the ancillary charges of the period:

    life insurance = life rate (annual %) / 100 x balance / periods per year
    risk insurance = risk rate (annual %) / 100 x balance / periods per year
    commission, charges, admin expense: flat amounts from PeriodicCosts

    total payment = installment + all of the above

The insurance balance is the initial balance of the period by default
(InsuranceBasis.INITIAL_BALANCE), i.e. the balance outstanding while the
period runs. One-time initial costs never appear on a row; they belong to
the period-0 cash flow.
"""

from __future__ import annotations

from collections.abc import Iterable

from mortgage_engine.amortization import AmortizationRow, round_money
from mortgage_engine.models import (
    CashFlowPerspective,
    InsuranceBasis,
    PeriodicCosts,
    ScheduleRow,
)

__version__ = "0.1.0"


def insurance_premium(annual_rate_percent: float, balance: float, periods_per_year: float) -> float:
    """Premium for one period, prorated from an annual percentage rate."""
    if periods_per_year <= 0:
        raise ValueError(f"periods_per_year must be positive, got {periods_per_year}")
    return round_money(annual_rate_percent / 100.0 * balance / periods_per_year)


def payment_sign(perspective: CashFlowPerspective) -> float:
    """Sign of a payment made by the borrower under the given perspective."""
    return -1.0 if perspective is CashFlowPerspective.BORROWER else 1.0


def overlay_row(
    row: AmortizationRow,
    periodic_costs: PeriodicCosts,
    periods_per_year: float,
    basis: InsuranceBasis = InsuranceBasis.INITIAL_BALANCE,
    perspective: CashFlowPerspective = CashFlowPerspective.BORROWER,
) -> ScheduleRow:
    """Attach insurance, fees and the signed cash flow to one row."""
    insured_balance = (
        row.final_balance if basis is InsuranceBasis.FINAL_BALANCE else row.initial_balance
    )
    life_insurance = insurance_premium(
        periodic_costs.life_insurance_rate, insured_balance, periods_per_year
    )
    risk_insurance = insurance_premium(
        periodic_costs.risk_insurance_rate, insured_balance, periods_per_year
    )
    commission = round_money(periodic_costs.commission)
    charges = round_money(periodic_costs.charges)
    admin_expense = round_money(periodic_costs.admin_expense)

    total_payment = round_money(
        row.installment + life_insurance + risk_insurance + commission + charges + admin_expense
    )

    return ScheduleRow(
        period=row.period,
        grace_type=row.grace_type,
        annual_rate=row.annual_rate,
        period_rate=row.period_rate,
        initial_balance=row.initial_balance,
        interest=row.interest,
        installment=row.installment,
        amortization=row.amortization,
        final_balance=row.final_balance,
        life_insurance=life_insurance,
        risk_insurance=risk_insurance,
        commission=commission,
        charges=charges,
        admin_expense=admin_expense,
        total_payment=total_payment,
        cash_flow=payment_sign(perspective) * total_payment,
    )


def overlay_schedule(
    rows: Iterable[AmortizationRow],
    periodic_costs: PeriodicCosts,
    periods_per_year: float,
    basis: InsuranceBasis = InsuranceBasis.INITIAL_BALANCE,
    perspective: CashFlowPerspective = CashFlowPerspective.BORROWER,
) -> tuple[ScheduleRow, ...]:
    return tuple(
        overlay_row(row, periodic_costs, periods_per_year, basis, perspective) for row in rows
    )
