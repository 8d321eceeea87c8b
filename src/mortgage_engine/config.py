# Requires Python 3.12+
"""
Engine settings.

Every parameter the engine would otherwise take from ambient state (days-in-
year convention, period-count rounding, solver budget, sign convention) lives
on one frozen ``EngineSettings`` instance passed explicitly to
``calculate_schedule``. ``EngineSettings.from_env`` is a convenience for
applications; the engine itself never reads the environment.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, replace

from mortgage_engine.models import CashFlowPerspective, InsuranceBasis, PeriodCountPolicy

__version__ = "0.1.0"


# ── Defaults ──────────────────────────────────────────────────────────────────

DEFAULT_DAYS_IN_YEAR: int = 360
DEFAULT_MAX_PERIODS: int = 12_000        # > 30 years of daily periods on a 360-day year
DEFAULT_IRR_TOLERANCE: float = 1e-7      # relative: |NPV| <= tol x max(1, sum |CF|)
DEFAULT_IRR_MAX_ITERATIONS: int = 100

ENV_PREFIX = "MORTGAGE_ENGINE_"


@dataclass(frozen=True)
class EngineSettings:
    """
    Explicit engine parameters with their documented defaults.

    ``irr_tolerance`` is relative to the size of the cash flows: an IRR is
    accepted when |NPV(irr)| <= irr_tolerance x max(1, sum |CF|). With the
    default 1e-7 a 350,000 loan over 240 months may leave up to about 0.1
    of residual NPV; the solvers themselves iterate to 1e-12, so the residual
    is normally far smaller. Pass a smaller value for a tighter check.
    """
    days_in_year: int = DEFAULT_DAYS_IN_YEAR
    period_count_policy: PeriodCountPolicy = PeriodCountPolicy.FLOOR
    max_periods: int = DEFAULT_MAX_PERIODS
    irr_tolerance: float = DEFAULT_IRR_TOLERANCE
    irr_max_iterations: int = DEFAULT_IRR_MAX_ITERATIONS
    insurance_basis: InsuranceBasis = InsuranceBasis.INITIAL_BALANCE
    perspective: CashFlowPerspective = CashFlowPerspective.BORROWER

    def __post_init__(self) -> None:
        if self.days_in_year <= 0:
            raise ValueError(f"days_in_year must be positive, got {self.days_in_year}")
        if self.max_periods <= 0:
            raise ValueError(f"max_periods must be positive, got {self.max_periods}")
        if self.irr_tolerance <= 0:
            raise ValueError(f"irr_tolerance must be positive, got {self.irr_tolerance}")
        if self.irr_max_iterations <= 0:
            raise ValueError(
                f"irr_max_iterations must be positive, got {self.irr_max_iterations}"
            )

    def with_overrides(self, **changes) -> EngineSettings:
        """Copy of these settings with some fields replaced."""
        return replace(self, **changes)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> EngineSettings:
        """
        Build settings from ``MORTGAGE_ENGINE_*`` variables.

        Recognized variables (all optional):
            MORTGAGE_ENGINE_DAYS_IN_YEAR        int
            MORTGAGE_ENGINE_PERIOD_COUNT_POLICY FLOOR | ROUND
            MORTGAGE_ENGINE_MAX_PERIODS         int
            MORTGAGE_ENGINE_IRR_TOLERANCE       float
            MORTGAGE_ENGINE_IRR_MAX_ITERATIONS  int
            MORTGAGE_ENGINE_INSURANCE_BASIS     INITIAL_BALANCE | FINAL_BALANCE
            MORTGAGE_ENGINE_PERSPECTIVE         BORROWER | LENDER

        Raises:
            ValueError: If a variable cannot be parsed
        """
        env = os.environ if environ is None else environ
        kwargs: dict[str, object] = {}

        def lookup(name: str) -> str | None:
            value = env.get(ENV_PREFIX + name)
            return value.strip() if value is not None and value.strip() else None

        for name, attr, parse in (
            ("DAYS_IN_YEAR", "days_in_year", int),
            ("MAX_PERIODS", "max_periods", int),
            ("IRR_TOLERANCE", "irr_tolerance", float),
            ("IRR_MAX_ITERATIONS", "irr_max_iterations", int),
        ):
            raw = lookup(name)
            if raw is not None:
                try:
                    kwargs[attr] = parse(raw)
                except ValueError as e:
                    raise ValueError(f"{ENV_PREFIX}{name} is not a valid {parse.__name__}: {raw!r}") from e

        for name, attr, enum_cls in (
            ("PERIOD_COUNT_POLICY", "period_count_policy", PeriodCountPolicy),
            ("INSURANCE_BASIS", "insurance_basis", InsuranceBasis),
            ("PERSPECTIVE", "perspective", CashFlowPerspective),
        ):
            raw = lookup(name)
            if raw is not None:
                try:
                    kwargs[attr] = enum_cls(raw.upper())
                except ValueError as e:
                    raise ValueError(f"{ENV_PREFIX}{name} has unknown value {raw!r}") from e

        return cls(**kwargs)
