# Requires Python 3.12+
# Uses native type hints: list[x], tuple[x, y], X | None (PEP 585, PEP 604)
from __future__ import annotations

import warnings
from collections.abc import Sequence

import numpy as np
from scipy.optimize import brentq, newton

from mortgage_engine.exceptions import IrrNotFound
from mortgage_engine.logging_config import get_logger
from mortgage_engine.models import CashFlowPerspective
from mortgage_engine.rates import period_rate_to_effective_annual

__version__ = "0.1.0"

logger = get_logger(__name__)


# =============================================================================
# Cash Flow & Metrics Engine
# =============================================================================
#
# Cash-flow vector (borrower perspective, index = period):
#
#   CF[0] = amount received - initial costs paid up front
#   CF[k] = -total_payment[k],   k = 1..N
#
# The lender perspective is the sign-flipped vector. NPV, IRR and TCEA:
#
#   NPV(r)  = sum_k CF[k] / (1 + r)^k
#   IRR i*  : NPV(i*) = 0
#   TCEA    = (1 + i*)^(periods per year) - 1
#
# IRR is solved with Newton-Raphson seeded at the opportunity rate, falling
# back to Brent's method on a bracket inside (-1, inf). Both are taken from
# scipy.optimize.
# =============================================================================

# Candidate points scanned for a sign change when Newton fails
_BRACKET_GRID = (
    -0.999, -0.99, -0.9, -0.5, -0.1, 0.0, 0.001, 0.01, 0.05, 0.1, 0.25,
    0.5, 1.0, 2.0, 5.0, 10.0, 100.0, 1000.0,
)


def build_cash_flows(
        amount_received: float,
        upfront_costs: float,
        total_payments: Sequence[float] | np.ndarray,
        perspective: CashFlowPerspective = CashFlowPerspective.BORROWER
) -> np.ndarray:
    """
    Assemble the N + 1 cash-flow vector.

    Args:
        amount_received: Capital delivered to the borrower at t=0
        upfront_costs: Initial costs paid at t=0 (0 when they are capitalized)
        total_payments: Total payment of periods 1..N (positive amounts)
        perspective: BORROWER (default) or LENDER sign convention

    Returns:
        float array of length N + 1
    """
    payments = np.asarray(total_payments, dtype=float)
    cash_flows = np.empty(len(payments) + 1, dtype=float)
    cash_flows[0] = amount_received - upfront_costs
    cash_flows[1:] = -payments
    if perspective is CashFlowPerspective.LENDER:
        cash_flows = -cash_flows
    return cash_flows


def _npv_unchecked(rate: float, cash_flows: np.ndarray) -> float:
    k = np.arange(len(cash_flows))
    return float(np.sum(cash_flows * np.power(1.0 + rate, -k)))


def _npv_derivative_unchecked(rate: float, cash_flows: np.ndarray) -> float:
    k = np.arange(len(cash_flows))
    return float(-np.sum(k * cash_flows * np.power(1.0 + rate, -k - 1.0)))


def npv(cash_flows: Sequence[float] | np.ndarray, rate: float) -> float:
    """
    Net present value of a cash-flow vector at a per-period rate.

    NPV = sum_k CF[k] / (1 + r)^k,  k = 0..N

    Args:
        cash_flows: CF[0..N]
        rate: Discount rate per period (fraction), must exceed -1

    Returns:
        NPV in the cash-flow currency

    Raises:
        ValueError: If rate <= -1

    Example:
        >>> npv([-100.0, 210.0], 1.0)
        5.0
    """
    if rate <= -1.0:
        raise ValueError(f"rate must be greater than -100%, got {rate}")
    return _npv_unchecked(rate, np.asarray(cash_flows, dtype=float))


def npv_derivative(cash_flows: Sequence[float] | np.ndarray, rate: float) -> float:
    """dNPV/dr = -sum_k k CF[k] / (1 + r)^(k+1)."""
    if rate <= -1.0:
        raise ValueError(f"rate must be greater than -100%, got {rate}")
    return _npv_derivative_unchecked(rate, np.asarray(cash_flows, dtype=float))


def _accept(root: float, cash_flows: np.ndarray, tolerance: float, scale: float) -> bool:
    if not np.isfinite(root) or root <= -1.0:
        return False
    value = _npv_unchecked(root, cash_flows)
    return bool(np.isfinite(value) and abs(value) <= tolerance * scale)


def _newton_irr(cash_flows: np.ndarray, guess: float, max_iterations: int) -> float | None:
    with warnings.catch_warnings(), np.errstate(all="ignore"):
        warnings.simplefilter("ignore", RuntimeWarning)
        root, result = newton(
            _npv_unchecked,
            x0=guess,
            fprime=_npv_derivative_unchecked,
            args=(cash_flows,),
            tol=1e-12,
            maxiter=max_iterations,
            full_output=True,
            disp=False,
        )
    if not result.converged:
        return None
    return float(root)


def _find_bracket(cash_flows: np.ndarray) -> tuple[float, float] | None:
    previous: tuple[float, float] | None = None
    with np.errstate(all="ignore"):
        for rate in _BRACKET_GRID:
            value = _npv_unchecked(rate, cash_flows)
            if not np.isfinite(value):
                continue
            if value == 0.0:
                return rate, rate
            if previous is not None and np.sign(previous[1]) != np.sign(value):
                return previous[0], rate
            previous = (rate, value)
    return None


def irr(
        cash_flows: Sequence[float] | np.ndarray,
        guess: float = 0.01,
        tolerance: float = 1e-7,
        max_iterations: int = 100
) -> float:
    """
    Internal rate of return per period.

    Solves NPV(i) = 0 with Newton-Raphson seeded at ``guess``; when Newton
    does not converge within ``max_iterations`` (or lands outside (-1, inf))
    Brent's method is run on a bracketing interval found by scanning rates.

    Convergence is accepted when |NPV(i)| <= tolerance x max(1, sum |CF|),
    so the test scales with the size of the loan.

    Args:
        cash_flows: CF[0..N]
        guess: Seed rate per period (typically the opportunity rate)
        tolerance: Relative NPV tolerance
        max_iterations: Iteration budget for each solver

    Returns:
        IRR per period (fraction)

    Raises:
        IrrNotFound: If all flows share a sign (IRR undefined) or no root
            is found within the iteration budget
    """
    cf = np.asarray(cash_flows, dtype=float)
    if cf.size < 2 or not np.all(np.isfinite(cf)):
        raise IrrNotFound("IRR needs at least two finite cash flows", context={"size": cf.size})
    if not (np.any(cf > 0) and np.any(cf < 0)):
        raise IrrNotFound(
            "IRR is undefined when all cash flows have the same sign",
            context={"periods": cf.size - 1},
        )

    scale = max(1.0, float(np.sum(np.abs(cf))))
    seed = guess if np.isfinite(guess) and guess > -1.0 else 0.01

    root = _newton_irr(cf, seed, max_iterations)
    if root is not None and _accept(root, cf, tolerance, scale):
        return root

    logger.warning(
        "Newton-Raphson did not converge for IRR, falling back to Brent's method",
        extra={"seed": seed, "periods": cf.size - 1},
    )
    bracket = _find_bracket(cf)
    if bracket is None:
        raise IrrNotFound("No sign change found for IRR bracket", context={"periods": cf.size - 1})
    low, high = bracket
    if low == high:
        return low
    try:
        with np.errstate(all="ignore"):
            root = brentq(
                _npv_unchecked,
                low, high,
                args=(cf,),
                xtol=1e-14,
                maxiter=max_iterations,
            )
    except (ValueError, RuntimeError) as e:
        raise IrrNotFound(
            f"IRR solver did not converge: {e}",
            context={"bracket": (low, high), "max_iterations": max_iterations},
        ) from e

    if not _accept(root, cf, tolerance, scale):
        raise IrrNotFound(
            "IRR solver did not reach the NPV tolerance",
            context={"root": root, "tolerance": tolerance},
        )
    return float(root)


def tcea(irr_per_period: float, periods_per_year: float) -> float:
    """Total effective annual cost: (1 + IRR)^(periods per year) - 1, as a fraction."""
    return period_rate_to_effective_annual(irr_per_period, periods_per_year)
