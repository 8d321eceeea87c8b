# Requires Python 3.12+
# Uses native type hints: list[x], tuple[x, y], X | None (PEP 585, PEP 604)
"""
Mortgage Engine - Data Model

Structure:
  (1) Enums - frequency codes, grace classification and convention switches
  (2) Input records - GraceConfig, InitialCosts, PeriodicCosts, LoanInput
  (3) Output records - ScheduleRow, ScheduleResult

Every record is a frozen dataclass created fresh for one calculation call.
Sequences are stored as tuples so a returned result can be shared with the
persistence and report layers as is.

Rate convention (matches the loan forms the engine is fed from):
    - All rates on LoanInput and PeriodicCosts are annual percentages
      (e.g. 8.0 for 8%).
    - All rates on ScheduleRow / ScheduleResult are fractions (0.08 for 8%);
      ``*_percent`` properties convert back at the output boundary.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import asdict, dataclass, field
from enum import Enum
from numbers import Real
from typing import Any

import numpy as np

from mortgage_engine.exceptions import InvalidTerm

__version__ = "0.1.0"


# =============================================================================
# ENUMS
# =============================================================================

class PaymentFrequency(Enum):
    """Payment (and capitalization) frequency codes."""
    DIARIA = "DIARIA"
    QUINCENAL = "QUINCENAL"
    MENSUAL = "MENSUAL"
    BIMESTRAL = "BIMESTRAL"
    TRIMESTRAL = "TRIMESTRAL"
    CUATRIMESTRAL = "CUATRIMESTRAL"
    SEMESTRAL = "SEMESTRAL"
    ANUAL = "ANUAL"


class GraceType(Enum):
    """Grace classification of a single period."""
    TOTAL = "TOTAL"          # nothing paid, interest capitalizes
    PARCIAL = "PARCIAL"      # interest only
    SIN_PLAZO = "SIN_PLAZO"  # regular amortization


class RateType(Enum):
    """How the supplied annual rate is quoted."""
    EFFECTIVE = "EFFECTIVE"  # TEA
    NOMINAL = "NOMINAL"      # TNA, needs a capitalization frequency


class RateBasis(Enum):
    """What one element of a rate array covers."""
    PER_PERIOD = "PER_PERIOD"
    PER_YEAR = "PER_YEAR"


class PeriodCountPolicy(Enum):
    """Rounding of years x periods-per-year into a period count."""
    FLOOR = "FLOOR"
    ROUND = "ROUND"


class InsuranceBasis(Enum):
    """Balance that life and risk insurance premiums are charged on."""
    INITIAL_BALANCE = "INITIAL_BALANCE"
    FINAL_BALANCE = "FINAL_BALANCE"


class CashFlowPerspective(Enum):
    """Sign convention of the cash-flow vector."""
    BORROWER = "BORROWER"  # receives the loan at t=0, pays afterwards
    LENDER = "LENDER"      # disburses at t=0, collects afterwards


# =============================================================================
# INPUT RECORDS
# =============================================================================

def _check_non_negative(owner: str, **amounts: float) -> None:
    for name, value in amounts.items():
        if value < 0:
            raise ValueError(f"{owner}.{name} must be non-negative, got {value}")


def _as_rate_tuple(rates: Any) -> tuple:
    """Normalize a single rate or an iterable of rates to a tuple."""
    if rates is None:
        return ()
    if isinstance(rates, Real):
        return (rates,)
    if isinstance(rates, np.ndarray):
        return tuple(rates.ravel().tolist())
    if isinstance(rates, Iterable) and not isinstance(rates, (str, bytes)):
        return tuple(rates)
    return (rates,)


@dataclass(frozen=True)
class GraceConfig:
    """Leading grace block: ``total_periods`` TOTAL, then ``partial_periods`` PARCIAL."""
    total_periods: int = 0
    partial_periods: int = 0

    def __post_init__(self) -> None:
        if self.total_periods < 0 or self.partial_periods < 0:
            raise ValueError(
                f"grace periods must be non-negative, got total={self.total_periods}, "
                f"partial={self.partial_periods}"
            )


@dataclass(frozen=True)
class InitialCosts:
    """One-time costs paid when the loan is disbursed."""
    notary: float = 0.0
    registry: float = 0.0
    appraisal: float = 0.0
    study_commission: float = 0.0
    activation_commission: float = 0.0

    def __post_init__(self) -> None:
        _check_non_negative("InitialCosts", **asdict(self))

    @property
    def total(self) -> float:
        return (self.notary + self.registry + self.appraisal
                + self.study_commission + self.activation_commission)


@dataclass(frozen=True)
class PeriodicCosts:
    """Costs charged in every period on top of the installment.

    ``commission``, ``charges`` and ``admin_expense`` are flat amounts per
    period. The insurance rates are annual percentages prorated per period.
    """
    commission: float = 0.0
    charges: float = 0.0
    admin_expense: float = 0.0
    life_insurance_rate: float = 0.0
    risk_insurance_rate: float = 0.0

    def __post_init__(self) -> None:
        _check_non_negative("PeriodicCosts", **asdict(self))


@dataclass(frozen=True)
class LoanInput:
    """
    Fully resolved loan parameters for one simulation.

    Required fields:
        price, down_payment, frequency, annual_rates, and either years or
        term_months. None of them has a default, so a missing frequency or
        term is reported instead of assumed.

    The rate source may be a single number, one value per period, or one
    value per loan year (``rate_basis=RateBasis.PER_YEAR``). In every case
    the last value holds for periods beyond the end of the array.

    ``days_in_year=None`` defers to ``EngineSettings.days_in_year`` so the
    convention is never read from global state.
    """
    # Required
    price: float
    down_payment: float
    frequency: PaymentFrequency | str
    annual_rates: float | tuple[float, ...]

    # Term: years, or term_months when supplied
    years: float | None = None
    term_months: int | None = None

    # Optional
    bond_amount: float = 0.0
    rate_type: RateType = RateType.EFFECTIVE
    capitalization: PaymentFrequency | str = PaymentFrequency.MENSUAL
    rate_basis: RateBasis = RateBasis.PER_PERIOD
    grace_config: GraceConfig = field(default_factory=GraceConfig)
    grace_overrides: tuple[GraceType | str, ...] | None = None
    initial_costs: InitialCosts = field(default_factory=InitialCosts)
    periodic_costs: PeriodicCosts = field(default_factory=PeriodicCosts)
    opportunity_rate: float = 0.0   # COK, effective annual %
    capitalize_initial_costs: bool = False
    days_in_year: int | None = None

    def __post_init__(self) -> None:
        """Validate the monetary fields and normalize sequences to tuples."""
        if self.price <= 0:
            raise ValueError(f"price must be positive, got {self.price}")
        _check_non_negative(
            "LoanInput",
            down_payment=self.down_payment,
            bond_amount=self.bond_amount,
        )
        if self.days_in_year is not None and self.days_in_year <= 0:
            raise ValueError(f"days_in_year must be positive, got {self.days_in_year}")
        if self.years is None and self.term_months is None:
            raise InvalidTerm("Loan term is required: supply years or term_months")
        if self.term_months is not None and self.term_months < 0:
            raise ValueError(f"term_months must be non-negative, got {self.term_months}")
        if self.opportunity_rate <= -100:
            raise ValueError(f"opportunity_rate must exceed -100%, got {self.opportunity_rate}")

        object.__setattr__(self, "annual_rates", _as_rate_tuple(self.annual_rates))
        if self.grace_overrides is not None:
            object.__setattr__(self, "grace_overrides", tuple(self.grace_overrides))

    @property
    def term_years(self) -> float:
        """Loan term in years; ``term_months`` wins when supplied."""
        if self.term_months is not None:
            return self.term_months / 12.0
        return self.years


# =============================================================================
# OUTPUT RECORDS
# =============================================================================

@dataclass(frozen=True)
class ScheduleRow:
    """
    One period of the amortization schedule with its cost overlay.

    Variables follow the loan-servicing names used on statements:
    - annual_rate: TEA(k) as fraction
    - period_rate: TEP(k), effective rate for the period
    - initial_balance: SI(k)
    - interest: I(k) = TEP(k) * SI(k)
    - installment: R(k), principal + interest portion before ancillary costs
    - amortization: A(k)
    - final_balance: SF(k) = SI(k+1)
    - total_payment: R(k) + insurance + commission + charges + admin expense
    - cash_flow: signed flow of the period under the configured perspective
    """
    period: int
    grace_type: GraceType
    annual_rate: float
    period_rate: float
    initial_balance: float
    interest: float
    installment: float
    amortization: float
    final_balance: float
    life_insurance: float = 0.0
    risk_insurance: float = 0.0
    commission: float = 0.0
    charges: float = 0.0
    admin_expense: float = 0.0
    total_payment: float = 0.0
    cash_flow: float = 0.0

    @property
    def annual_rate_percent(self) -> float:
        return self.annual_rate * 100.0

    def to_record(self) -> dict[str, Any]:
        record = asdict(self)
        record["grace_type"] = self.grace_type.value
        return record


@dataclass(frozen=True)
class ScheduleResult:
    """
    Complete output of one calculation.

    ``cash_flows`` has N + 1 entries: index 0 is the disbursement, indices
    1..N are the period flows and match ``rows[k-1].cash_flow``.
    """
    price: float
    down_payment: float
    bond_applied: float
    financed_capital: float
    capitalized_costs: float
    loan_principal: float
    initial_costs_total: float
    frequency: PaymentFrequency
    days_in_year: int
    periods_per_year: float
    total_periods: int
    rows: tuple[ScheduleRow, ...]
    cash_flows: tuple[float, ...]
    total_installments: float
    total_amortization: float
    total_interest: float
    total_insurance: float
    total_periodic_costs: float
    total_payments: float
    npv: float
    irr: float
    tcea: float

    @property
    def irr_percent(self) -> float:
        """IRR per period in percent."""
        return self.irr * 100.0

    @property
    def tcea_percent(self) -> float:
        """Total effective annual cost in percent."""
        return self.tcea * 100.0

    @property
    def final_balance(self) -> float:
        return self.rows[-1].final_balance if self.rows else self.loan_principal

    def cash_flow_vector(self) -> np.ndarray:
        """Cash flows as a read-only float array (index = period)."""
        vector = np.asarray(self.cash_flows, dtype=float)
        vector.flags.writeable = False
        return vector

    def summary(self) -> dict[str, Any]:
        """Header and totals as a flat dict (report and persistence layers)."""
        return {
            "price": self.price,
            "down_payment": self.down_payment,
            "bond_applied": self.bond_applied,
            "financed_capital": self.financed_capital,
            "capitalized_costs": self.capitalized_costs,
            "loan_principal": self.loan_principal,
            "initial_costs_total": self.initial_costs_total,
            "frequency": self.frequency.value,
            "days_in_year": self.days_in_year,
            "periods_per_year": self.periods_per_year,
            "total_periods": self.total_periods,
            "total_installments": self.total_installments,
            "total_amortization": self.total_amortization,
            "total_interest": self.total_interest,
            "total_insurance": self.total_insurance,
            "total_periodic_costs": self.total_periodic_costs,
            "total_payments": self.total_payments,
            "npv": self.npv,
            "irr": self.irr,
            "tcea": self.tcea,
            "tcea_percent": self.tcea_percent,
        }

    def to_records(self) -> list[dict[str, Any]]:
        """Rows as plain dicts, one per period."""
        return [row.to_record() for row in self.rows]
