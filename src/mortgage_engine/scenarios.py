"""
Mortgage Engine - Reference Scenarios

Named loan scenarios with the values a correct engine must reproduce. They
double as documentation of the input conventions (rates in annual percent,
MENSUAL = 30-day periods on a 360-day year) and as fixtures for the tests.

Structure:
  (1) ExpectedResult - values checked against ScheduleResult
  (2) ReferenceScenario - LoanInput + ExpectedResult
  (3) SCENARIOS - the catalogue, keyed by name
"""

from dataclasses import dataclass
from typing import Dict, Optional

from mortgage_engine.models import (
    GraceConfig,
    InitialCosts,
    LoanInput,
    PeriodicCosts,
    RateBasis,
    RateType,
)


# =============================================================================
# (1) EXPECTED RESULT
# =============================================================================

@dataclass(frozen=True)
class ExpectedResult:
    """Values a ScheduleResult must match (None = not checked)."""
    financed_capital: float
    periods_per_year: float
    total_periods: int
    final_balance: float = 0.0
    first_installment: Optional[float] = None     # R(1), to the cent
    first_amortizing_period: int = 1              # first SIN_PLAZO period


# =============================================================================
# (2) REFERENCE SCENARIO
# =============================================================================

@dataclass(frozen=True)
class ReferenceScenario:
    name: str
    description: str
    loan: LoanInput
    expected: ExpectedResult


# =============================================================================
# (3) CATALOGUE
# =============================================================================

_BASE = dict(price=400_000.0, down_payment=50_000.0, bond_amount=0.0, years=20, frequency="MENSUAL")

STANDARD_ANNUITY = ReferenceScenario(
    name="standard_annuity",
    description="20-year monthly loan at 8% TEA, no grace: constant installment, balance to 0.00",
    loan=LoanInput(**_BASE, annual_rates=8.0),
    expected=ExpectedResult(
        financed_capital=350_000.0,
        periods_per_year=12.0,
        total_periods=240,
        # TEP = 1.08^(30/360) - 1 = 0.0064340301; R = C * AF(240, TEP)
        first_installment=2867.03,
    ),
)

GRACE_TOTAL_PARTIAL = ReferenceScenario(
    name="grace_total_partial",
    description="Standard annuity with 3 TOTAL then 3 PARCIAL grace periods",
    loan=LoanInput(**_BASE, annual_rates=8.0, grace_config=GraceConfig(total_periods=3, partial_periods=3)),
    expected=ExpectedResult(
        financed_capital=350_000.0,
        periods_per_year=12.0,
        total_periods=240,
        first_installment=0.0,
        first_amortizing_period=7,
    ),
)

ZERO_RATE = ReferenceScenario(
    name="zero_rate",
    description="Rate array [0]: no interest, straight-line installment",
    loan=LoanInput(**_BASE, annual_rates=[0.0]),
    expected=ExpectedResult(
        financed_capital=350_000.0,
        periods_per_year=12.0,
        total_periods=240,
        first_installment=1458.33,   # 350000 / 240
    ),
)

COSTS_AND_INSURANCE = ReferenceScenario(
    name="costs_and_insurance",
    description="Bond, initial costs paid up front, monthly fees and insurance, COK 10%",
    loan=LoanInput(
        **{**_BASE, "bond_amount": 25_000.0},
        annual_rates=9.0,
        initial_costs=InitialCosts(
            notary=1_200.0,
            registry=800.0,
            appraisal=500.0,
            study_commission=300.0,
            activation_commission=200.0,
        ),
        periodic_costs=PeriodicCosts(
            commission=5.0,
            charges=3.5,
            admin_expense=10.0,
            life_insurance_rate=0.60,
            risk_insurance_rate=0.36,
        ),
        opportunity_rate=10.0,
    ),
    expected=ExpectedResult(
        financed_capital=325_000.0,
        periods_per_year=12.0,
        total_periods=240,
    ),
)

NOMINAL_RATE = ReferenceScenario(
    name="nominal_rate",
    description="12% TNA capitalized monthly = 12.6825% TEA, quarterly payments over 10 years",
    loan=LoanInput(
        price=200_000.0,
        down_payment=40_000.0,
        years=10,
        frequency="TRIMESTRAL",
        annual_rates=12.0,
        rate_type=RateType.NOMINAL,
        capitalization="MENSUAL",
    ),
    expected=ExpectedResult(
        financed_capital=160_000.0,
        periods_per_year=4.0,
        total_periods=40,
    ),
)

RATE_CURVE_PER_YEAR = ReferenceScenario(
    name="rate_curve_per_year",
    description="Per-year TEA curve 7%, 7.5%, 8% with 8% holding for years 4 to 15",
    loan=LoanInput(
        price=300_000.0,
        down_payment=60_000.0,
        years=15,
        frequency="MENSUAL",
        annual_rates=(7.0, 7.5, 8.0),
        rate_basis=RateBasis.PER_YEAR,
    ),
    expected=ExpectedResult(
        financed_capital=240_000.0,
        periods_per_year=12.0,
        total_periods=180,
    ),
)

SCENARIOS: Dict[str, ReferenceScenario] = {
    scenario.name: scenario
    for scenario in (
        STANDARD_ANNUITY,
        GRACE_TOTAL_PARTIAL,
        ZERO_RATE,
        COSTS_AND_INSURANCE,
        NOMINAL_RATE,
        RATE_CURVE_PER_YEAR,
    )
}


def get_scenario(name: str) -> ReferenceScenario:
    """Look up a reference scenario by name (KeyError lists the known names)."""
    try:
        return SCENARIOS[name]
    except KeyError:
        raise KeyError(f"Unknown scenario {name!r}; known: {', '.join(SCENARIOS)}") from None
