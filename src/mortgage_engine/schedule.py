# Requires Python 3.12+
# Uses native type hints: list[x], tuple[x, y], X | None (PEP 585, PEP 604)
from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass
from numbers import Real

import numpy as np

from mortgage_engine.exceptions import InvalidTerm, MissingRateInput, ScheduleTooLarge
from mortgage_engine.models import (
    GraceConfig,
    GraceType,
    PaymentFrequency,
    PeriodCountPolicy,
    RateBasis,
    RateType,
)
from mortgage_engine.rates import effective_annual_to_period_rate, to_effective_annual

__version__ = "0.1.0"

# Absorbs binary representation error before flooring (20 * 12.0 must be 240).
_PERIOD_COUNT_EPSILON = 1e-9


# =============================================================================
# Period Schedule Generator
# =============================================================================
#
# Produces the ordered periods 1..N, each with:
#   - grace classification (override array first, then GraceConfig)
#   - annual rate in effect (single value, rate curve, or per-year curve;
#     the last value holds beyond the declared horizon)
#   - effective period rate TEP(k)
#   - remaining SIN_PLAZO periods from k to N inclusive, which is the term
#     the annuity of period k is computed over
# =============================================================================

@dataclass(frozen=True)
class SchedulePeriod:
    """One (period, rate, grace) triple emitted for the row calculator."""
    period: int
    grace_type: GraceType
    annual_rate: float   # TEA as fraction
    period_rate: float   # TEP as fraction
    remaining: int       # SIN_PLAZO periods from here to the end (0 for grace rows)


def count_periods(
        years: float,
        periods_per_year: float,
        policy: PeriodCountPolicy = PeriodCountPolicy.FLOOR,
        max_periods: int | None = None
) -> int:
    """
    Total number of periods N for a term.

    N = floor(years * periods_per_year)   (PeriodCountPolicy.FLOOR)
    N = round(years * periods_per_year)   (PeriodCountPolicy.ROUND, half up)

    Args:
        years: Term in years (may be fractional, e.g. months / 12)
        periods_per_year: Periods per year for the payment frequency
        policy: Rounding policy
        max_periods: Upper bound; None disables the check

    Returns:
        Positive period count

    Raises:
        InvalidTerm: If the count is not a positive integer
        ScheduleTooLarge: If the count exceeds max_periods
    """
    raw = years * periods_per_year
    if not math.isfinite(raw):
        raise InvalidTerm("Loan term is not finite", context={"years": years})

    if policy is PeriodCountPolicy.ROUND:
        total = math.floor(raw + 0.5)
    else:
        total = math.floor(raw + _PERIOD_COUNT_EPSILON)

    if total <= 0:
        raise InvalidTerm(
            "Loan term must yield a positive number of periods",
            context={"years": years, "periods_per_year": periods_per_year, "policy": policy.value},
        )
    if max_periods is not None and total > max_periods:
        raise ScheduleTooLarge(
            f"Schedule of {total} periods exceeds the limit of {max_periods}",
            context={"years": years, "periods_per_year": periods_per_year},
        )
    return total


def resolve_grace_type(period: int, grace_config: GraceConfig) -> GraceType:
    """Grace classification of a period from the leading TOTAL/PARCIAL block."""
    if period <= grace_config.total_periods:
        return GraceType.TOTAL
    if period <= grace_config.total_periods + grace_config.partial_periods:
        return GraceType.PARCIAL
    return GraceType.SIN_PLAZO


def _as_grace_type(value: GraceType | str) -> GraceType:
    if isinstance(value, GraceType):
        return value
    try:
        return GraceType(str(value).strip().upper())
    except ValueError as e:
        raise ValueError(f"Unknown grace type: {value!r}") from e


def classify_periods(
        total_periods: int,
        grace_config: GraceConfig | None = None,
        overrides: Sequence[GraceType | str] | None = None
) -> tuple[GraceType, ...]:
    """
    Grace classification for periods 1..total_periods.

    An explicit override array wins for the periods it covers; periods past
    its end fall back to the GraceConfig block.
    """
    grace_config = grace_config or GraceConfig()
    overrides = tuple(_as_grace_type(g) for g in overrides) if overrides else ()
    return tuple(
        overrides[period - 1] if period <= len(overrides)
        else resolve_grace_type(period, grace_config)
        for period in range(1, total_periods + 1)
    )


def remaining_amortizing_periods(grace_types: Sequence[GraceType]) -> np.ndarray:
    """
    For each period, the number of SIN_PLAZO periods from it to the end (inclusive).

    Grace periods get 0. Counting only SIN_PLAZO periods keeps a trailing
    grace block from distorting the annuity of the periods before it.

    Example:
        >>> remaining_amortizing_periods([TOTAL, SIN_PLAZO, SIN_PLAZO, PARCIAL, SIN_PLAZO])
        array([0, 3, 2, 0, 1])
    """
    is_amortizing = np.array([g is GraceType.SIN_PLAZO for g in grace_types], dtype=int)
    suffix_counts = np.cumsum(is_amortizing[::-1])[::-1]
    return np.where(is_amortizing == 1, suffix_counts, 0)


def _validated_rates(annual_rates: Sequence[float]) -> np.ndarray:
    if annual_rates is None or len(annual_rates) == 0:
        raise MissingRateInput("At least one annual interest rate is required")
    for rate in annual_rates:
        if isinstance(rate, bool) or not isinstance(rate, Real) or not math.isfinite(rate):
            raise MissingRateInput(
                "Annual interest rates must be finite numbers",
                context={"rate": rate},
            )
    return np.asarray(annual_rates, dtype=float)


def resolve_annual_rate(
        period: int,
        annual_rates: Sequence[float],
        basis: RateBasis = RateBasis.PER_PERIOD,
        periods_per_year: float = 12.0
) -> float:
    """
    Annual rate in effect for a period (same units as ``annual_rates``).

    PER_PERIOD: period k uses rates[k-1].
    PER_YEAR:   period k uses rates[y-1], y = loan year containing period k.
    Beyond the end of the array the last rate holds.

    Raises:
        MissingRateInput: If the rate source is empty or not numeric
    """
    rates = _validated_rates(annual_rates)
    if basis is RateBasis.PER_YEAR:
        index = math.ceil(period / periods_per_year - _PERIOD_COUNT_EPSILON) - 1
    else:
        index = period - 1
    return float(rates[min(max(index, 0), len(rates) - 1)])


def generate_periods(
        total_periods: int,
        period_days: int,
        days_in_year: int,
        annual_rates: Sequence[float],
        rate_type: RateType = RateType.EFFECTIVE,
        capitalization: PaymentFrequency | str = PaymentFrequency.MENSUAL,
        rate_basis: RateBasis = RateBasis.PER_PERIOD,
        grace_config: GraceConfig | None = None,
        grace_overrides: Sequence[GraceType | str] | None = None
) -> tuple[SchedulePeriod, ...]:
    """
    Emit the ordered periods of a schedule.

    Args:
        total_periods: N, from count_periods()
        period_days: Days per payment period
        days_in_year: Days-in-year convention
        annual_rates: Annual rates in percent (single value or curve)
        rate_type: EFFECTIVE (TEA) or NOMINAL (TNA)
        capitalization: Capitalization frequency for NOMINAL rates
        rate_basis: Whether one rate element covers a period or a loan year
        grace_config: Leading TOTAL/PARCIAL block
        grace_overrides: Explicit per-period classification

    Returns:
        Tuple of SchedulePeriod, periods 1..N with no gaps

    Raises:
        InvalidTerm: If total_periods is not positive
        MissingRateInput: If the rate source is empty or not numeric
        UnsupportedFrequency: If the capitalization code is unknown
    """
    if total_periods <= 0:
        raise InvalidTerm("total_periods must be positive", context={"total_periods": total_periods})
    rates = _validated_rates(annual_rates)
    periods_per_year = days_in_year / period_days

    # Rate index for every period, holding the last value past the curve
    period_numbers = np.arange(1, total_periods + 1)
    if rate_basis is RateBasis.PER_YEAR:
        index = np.ceil(period_numbers / periods_per_year - _PERIOD_COUNT_EPSILON).astype(int) - 1
    else:
        index = period_numbers - 1
    index = np.clip(index, 0, len(rates) - 1)

    annual = to_effective_annual(rates[index] / 100.0, rate_type, capitalization, days_in_year)
    period_rates = effective_annual_to_period_rate(annual, period_days, days_in_year)

    grace_types = classify_periods(total_periods, grace_config, grace_overrides)
    remaining = remaining_amortizing_periods(grace_types)

    return tuple(
        SchedulePeriod(
            period=int(k),
            grace_type=grace_types[k - 1],
            annual_rate=float(annual[k - 1]),
            period_rate=float(period_rates[k - 1]),
            remaining=int(remaining[k - 1]),
        )
        for k in period_numbers
    )
