# Requires Python 3.12+
# Uses native type hints: list[x], tuple[x, y], X | None (PEP 585, PEP 604)
from __future__ import annotations

import math
from collections.abc import Iterable
from concurrent.futures import Executor, ThreadPoolExecutor
from functools import partial

from mortgage_engine.amortization import amortize, financed_capital, round_money
from mortgage_engine.config import EngineSettings
from mortgage_engine.costs import overlay_schedule
from mortgage_engine.logging_config import get_logger
from mortgage_engine.metrics import build_cash_flows, irr, npv, tcea
from mortgage_engine.models import LoanInput, ScheduleResult, ScheduleRow
from mortgage_engine.rates import (
    effective_annual_to_period_rate,
    frequency_days,
    resolve_frequency,
)
from mortgage_engine.schedule import count_periods, generate_periods

__version__ = "0.1.0"

logger = get_logger(__name__)


# =============================================================================
# Pipeline
# =============================================================================
#
#   LoanInput
#     -> rates.resolve_frequency / periods per year      (fail closed)
#     -> schedule.count_periods / generate_periods       (period, rate, grace)
#     -> amortization.amortize                           (raw rows)
#     -> costs.overlay_schedule                          (insurance, fees)
#     -> metrics.build_cash_flows / npv / irr / tcea     (summary metrics)
#     -> ScheduleResult
#
# The pipeline is a pure function of (LoanInput, EngineSettings). Any error
# propagates before a ScheduleResult exists, so callers never see a partial
# schedule.
# =============================================================================

def _money_sum(values: Iterable[float]) -> float:
    return round_money(math.fsum(values))


def calculate_schedule(loan: LoanInput, settings: EngineSettings | None = None) -> ScheduleResult:
    """
    Build the amortization schedule and financial indicators of a loan.

    Args:
        loan: Fully resolved loan parameters
        settings: Engine parameters; defaults to EngineSettings()

    Returns:
        Immutable ScheduleResult

    Raises:
        UnsupportedFrequency: Unknown payment or capitalization frequency
        MissingRateInput: Empty or non-numeric rate source
        InvalidTerm: Term yields no periods
        ScheduleTooLarge: Term yields more than settings.max_periods periods
        IrrNotFound: Cash flows admit no IRR (e.g. nothing financed)

    Example:
        >>> result = calculate_schedule(LoanInput(
        ...     price=400_000, down_payment=50_000, years=20,
        ...     frequency="MENSUAL", annual_rates=8.0))
        >>> result.total_periods, result.rows[-1].final_balance
        (240, 0.0)
    """
    settings = settings or EngineSettings()

    frequency = resolve_frequency(loan.frequency)
    days_in_year = loan.days_in_year or settings.days_in_year
    period_days = frequency_days(frequency)
    periods_per_year = days_in_year / period_days
    total_periods = count_periods(
        loan.term_years,
        periods_per_year,
        settings.period_count_policy,
        settings.max_periods,
    )

    logger.debug(
        "Calculating schedule",
        extra={
            "frequency": frequency.value,
            "total_periods": total_periods,
            "days_in_year": days_in_year,
        },
    )

    down_payment = round_money(loan.down_payment)
    bond = round_money(loan.bond_amount)
    capital = financed_capital(loan.price, down_payment, bond)
    initial_costs_total = round_money(loan.initial_costs.total)
    if loan.capitalize_initial_costs:
        capitalized_costs, upfront_costs = initial_costs_total, 0.0
    else:
        capitalized_costs, upfront_costs = 0.0, initial_costs_total
    principal = round_money(capital + capitalized_costs)

    periods = generate_periods(
        total_periods=total_periods,
        period_days=period_days,
        days_in_year=days_in_year,
        annual_rates=loan.annual_rates,
        rate_type=loan.rate_type,
        capitalization=loan.capitalization,
        rate_basis=loan.rate_basis,
        grace_config=loan.grace_config,
        grace_overrides=loan.grace_overrides,
    )
    raw_rows = amortize(principal, periods)
    rows: tuple[ScheduleRow, ...] = overlay_schedule(
        raw_rows,
        loan.periodic_costs,
        periods_per_year,
        basis=settings.insurance_basis,
        perspective=settings.perspective,
    )

    cash_flows = build_cash_flows(
        amount_received=capital,
        upfront_costs=upfront_costs,
        total_payments=[row.total_payment for row in rows],
        perspective=settings.perspective,
    )
    cash_flows[0] = round_money(cash_flows[0])

    opportunity_period_rate = effective_annual_to_period_rate(
        loan.opportunity_rate / 100.0, period_days, days_in_year
    )
    npv_value = round_money(npv(cash_flows, opportunity_period_rate))
    irr_value = irr(
        cash_flows,
        guess=opportunity_period_rate,
        tolerance=settings.irr_tolerance,
        max_iterations=settings.irr_max_iterations,
    )
    tcea_value = tcea(irr_value, periods_per_year)

    total_insurance = _money_sum(row.life_insurance + row.risk_insurance for row in rows)
    total_periodic_costs = _money_sum(
        row.commission + row.charges + row.admin_expense for row in rows
    )

    result = ScheduleResult(
        price=loan.price,
        down_payment=down_payment,
        bond_applied=bond,
        financed_capital=capital,
        capitalized_costs=capitalized_costs,
        loan_principal=principal,
        initial_costs_total=initial_costs_total,
        frequency=frequency,
        days_in_year=days_in_year,
        periods_per_year=periods_per_year,
        total_periods=total_periods,
        rows=rows,
        cash_flows=tuple(float(cf) for cf in cash_flows),
        total_installments=_money_sum(row.installment for row in rows),
        total_amortization=_money_sum(row.amortization for row in rows),
        total_interest=_money_sum(row.interest for row in rows),
        total_insurance=total_insurance,
        total_periodic_costs=total_periodic_costs,
        total_payments=_money_sum(row.total_payment for row in rows),
        npv=npv_value,
        irr=irr_value,
        tcea=tcea_value,
    )

    logger.debug(
        "Schedule calculated",
        extra={
            "total_periods": total_periods,
            "financed_capital": capital,
            "npv": npv_value,
            "irr": irr_value,
            "tcea": tcea_value,
        },
    )
    return result


def calculate_batch(
    loans: Iterable[LoanInput],
    settings: EngineSettings | None = None,
    max_workers: int | None = None,
    executor: Executor | None = None,
) -> list[ScheduleResult]:
    """
    Run independent scenarios concurrently.

    The engine holds no shared state, so scenarios need no locking. Results
    are returned in input order; the first failing scenario's error is raised.

    By default a ThreadPoolExecutor is created. Schedule building is mostly
    pure-Python arithmetic and holds the GIL, so threads overlap little of
    the work; for CPU-bound batches pass a ProcessPoolExecutor. A supplied
    executor is used as is and left open for the caller to shut down.

    Example:
        >>> with ProcessPoolExecutor() as pool:
        ...     results = calculate_batch(loans, executor=pool)
    """
    loans = list(loans)
    if not loans:
        return []
    run = partial(calculate_schedule, settings=settings)
    if executor is not None:
        return list(executor.map(run, loans))
    with ThreadPoolExecutor(max_workers=max_workers) as pool:
        return list(pool.map(run, loans))
