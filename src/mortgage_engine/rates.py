# Requires Python 3.12+
# Uses native type hints: list[x], tuple[x, y], X | None (PEP 585, PEP 604)
from __future__ import annotations

import numpy as np

from mortgage_engine.exceptions import UnsupportedFrequency
from mortgage_engine.models import PaymentFrequency, RateType

__version__ = "0.1.0"


# =============================================================================
# Rate Converter
# =============================================================================
#
# Two conversions take a quoted annual rate to the rate applied in one period:
#
#   TNA -> TEA   nominal_to_effective_annual:   TEA = (1 + j/m)^m - 1
#   TEA -> TEP   effective_annual_to_period_rate:
#                TEP = (1 + TEA)^(period_days / days_in_year) - 1
#
# The days-in-year convention (360 by default) enters the math only in the
# second conversion and in periods_per_year(). All rates here are fractions.
# =============================================================================

FREQUENCY_DAYS: dict[PaymentFrequency, int] = {
    PaymentFrequency.DIARIA: 1,
    PaymentFrequency.QUINCENAL: 15,
    PaymentFrequency.MENSUAL: 30,
    PaymentFrequency.BIMESTRAL: 60,
    PaymentFrequency.TRIMESTRAL: 90,
    PaymentFrequency.CUATRIMESTRAL: 120,
    PaymentFrequency.SEMESTRAL: 180,
    PaymentFrequency.ANUAL: 360,
}


def resolve_frequency(code: PaymentFrequency | str) -> PaymentFrequency:
    """
    Resolve a frequency code to a PaymentFrequency.

    Args:
        code: PaymentFrequency member or its code ("MENSUAL", "mensual", ...)

    Returns:
        The matching PaymentFrequency

    Raises:
        UnsupportedFrequency: If the code is not one of the eight supported codes.
            The engine never guesses a frequency.
    """
    if isinstance(code, PaymentFrequency):
        return code
    if isinstance(code, str):
        try:
            return PaymentFrequency(code.strip().upper())
        except ValueError:
            pass
    raise UnsupportedFrequency(
        f"Unsupported payment frequency: {code!r}",
        context={"supported": ", ".join(f.value for f in PaymentFrequency)},
    )


def frequency_days(frequency: PaymentFrequency | str) -> int:
    """Number of days in one period of the given frequency."""
    return FREQUENCY_DAYS[resolve_frequency(frequency)]


def periods_per_year(frequency: PaymentFrequency | str, days_in_year: int = 360) -> float:
    """
    Periods per year for a frequency under a days-in-year convention.

    Example:
        >>> periods_per_year("MENSUAL", 360)
        12.0
        >>> periods_per_year("MENSUAL", 365)
        12.1666...
    """
    if days_in_year <= 0:
        raise ValueError(f"days_in_year must be positive, got {days_in_year}")
    return days_in_year / frequency_days(frequency)


def _check_rate(rate: float | np.ndarray, name: str) -> None:
    if np.any(np.asarray(rate, dtype=float) <= -1.0):
        raise ValueError(f"{name} must be greater than -100%, got {rate}")


def nominal_to_effective_annual(
        nominal_rate: float,
        capitalization_periods_per_year: float
) -> float:
    """
    Convert a nominal annual rate (TNA) to an effective annual rate (TEA).

    Formula:
        TEA = (1 + j / m)^m - 1

    Where:
        j = nominal annual rate (fraction)
        m = capitalization periods per year

    Args:
        nominal_rate: TNA as a fraction (e.g. 0.12 for 12%)
        capitalization_periods_per_year: m, e.g. 12 for monthly capitalization

    Returns:
        TEA as a fraction

    Raises:
        ValueError: If m is not positive or j/m <= -1

    Example:
        >>> nominal_to_effective_annual(0.12, 12)
        0.12682503...
    """
    if capitalization_periods_per_year <= 0:
        raise ValueError(
            f"capitalization_periods_per_year must be positive, got {capitalization_periods_per_year}"
        )
    m = capitalization_periods_per_year
    _check_rate(nominal_rate / m, "nominal_rate / m")
    return (1.0 + nominal_rate / m) ** m - 1.0


def effective_annual_to_period_rate(
        effective_annual_rate: float | np.ndarray,
        period_days: float,
        days_in_year: float = 360
) -> float | np.ndarray:
    """
    Convert an effective annual rate (TEA) to the effective rate of one period (TEP).

    Formula:
        TEP = (1 + TEA)^(period_days / days_in_year) - 1

    This generalizes the "monthly equivalent rate" to any period length and
    is the single place where the days-in-year convention enters the rate
    math. Works on scalars and numpy arrays.

    Args:
        effective_annual_rate: TEA as a fraction, scalar or array
        period_days: Length of one period in days (30 for MENSUAL)
        days_in_year: Days-in-year convention (default 360)

    Returns:
        TEP as a fraction (same shape as the input)

    Example:
        >>> effective_annual_to_period_rate(0.08, 30, 360)
        0.00643403...
    """
    if period_days <= 0 or days_in_year <= 0:
        raise ValueError(
            f"period_days and days_in_year must be positive, got {period_days}, {days_in_year}"
        )
    _check_rate(effective_annual_rate, "effective_annual_rate")
    exponent = period_days / days_in_year
    if isinstance(effective_annual_rate, np.ndarray):
        return np.power(1.0 + effective_annual_rate, exponent) - 1.0
    return (1.0 + effective_annual_rate) ** exponent - 1.0


def period_rate_to_effective_annual(period_rate: float, periods_per_year: float) -> float:
    """
    Annualize an effective per-period rate: (1 + i)^n - 1.

    This is the inverse of effective_annual_to_period_rate when
    n = days_in_year / period_days, and is how the TCEA is obtained from
    the per-period IRR.
    """
    _check_rate(period_rate, "period_rate")
    return (1.0 + period_rate) ** periods_per_year - 1.0


def to_effective_annual(
        annual_rate: float | np.ndarray,
        rate_type: RateType,
        capitalization: PaymentFrequency | str = PaymentFrequency.MENSUAL,
        days_in_year: int = 360
) -> float | np.ndarray:
    """
    Normalize a quoted annual rate to TEA.

    Effective rates pass through unchanged; nominal rates are converted with
    m = days_in_year / capitalization days (12 for MENSUAL on a 360-day year).

    Raises:
        UnsupportedFrequency: If the capitalization code is unknown (NOMINAL only)
    """
    if rate_type is RateType.EFFECTIVE:
        return annual_rate
    m = periods_per_year(capitalization, days_in_year)
    if isinstance(annual_rate, np.ndarray):
        _check_rate(annual_rate / m, "nominal_rate / m")
        return np.power(1.0 + annual_rate / m, m) - 1.0
    return nominal_to_effective_annual(annual_rate, m)
