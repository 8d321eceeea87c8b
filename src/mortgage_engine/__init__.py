# Requires Python 3.12+
"""
Mortgage Engine: French amortization schedules with grace periods, costs,
insurance, NPV, IRR and TCEA.

The engine is a pure function of its input: ``calculate_schedule(LoanInput)``
returns an immutable ``ScheduleResult``.
"""

from __future__ import annotations

import logging

__version__ = "0.1.0"

# Library default: silent until the application calls configure_logging()
logging.getLogger("mortgage_engine").addHandler(logging.NullHandler())

# Data model
from mortgage_engine.models import (
    PaymentFrequency,
    GraceType,
    RateType,
    RateBasis,
    PeriodCountPolicy,
    InsuranceBasis,
    CashFlowPerspective,
    GraceConfig,
    InitialCosts,
    PeriodicCosts,
    LoanInput,
    ScheduleRow,
    ScheduleResult,
)

# Errors and settings
from mortgage_engine.exceptions import (
    MortgageEngineError,
    UnsupportedFrequency,
    MissingRateInput,
    InvalidTerm,
    ScheduleTooLarge,
    IrrNotFound,
)
from mortgage_engine.config import EngineSettings
from mortgage_engine.logging_config import configure_logging, disable_logging, get_logger

# Rate Converter
from mortgage_engine.rates import (
    FREQUENCY_DAYS,
    resolve_frequency,
    frequency_days,
    periods_per_year,
    nominal_to_effective_annual,
    effective_annual_to_period_rate,
    period_rate_to_effective_annual,
    to_effective_annual,
)

# Period Schedule Generator
from mortgage_engine.schedule import (
    SchedulePeriod,
    count_periods,
    resolve_grace_type,
    classify_periods,
    resolve_annual_rate,
    remaining_amortizing_periods,
    generate_periods,
)

# Amortization Row Calculator
from mortgage_engine.amortization import (
    AmortizationRow,
    round_money,
    financed_capital,
    annuity_installment,
    amortize_period,
    amortize,
)

# Cost & Insurance Overlay
from mortgage_engine.costs import insurance_premium, overlay_row, overlay_schedule

# Cash Flow & Metrics Engine
from mortgage_engine.metrics import build_cash_flows, npv, npv_derivative, irr, tcea

# Pipeline
from mortgage_engine.engine import calculate_schedule, calculate_batch

__all__ = [
    "__version__",
    # Data model
    "PaymentFrequency",
    "GraceType",
    "RateType",
    "RateBasis",
    "PeriodCountPolicy",
    "InsuranceBasis",
    "CashFlowPerspective",
    "GraceConfig",
    "InitialCosts",
    "PeriodicCosts",
    "LoanInput",
    "ScheduleRow",
    "ScheduleResult",
    # Errors and settings
    "MortgageEngineError",
    "UnsupportedFrequency",
    "MissingRateInput",
    "InvalidTerm",
    "ScheduleTooLarge",
    "IrrNotFound",
    "EngineSettings",
    "configure_logging",
    "disable_logging",
    "get_logger",
    # Rate Converter
    "FREQUENCY_DAYS",
    "resolve_frequency",
    "frequency_days",
    "periods_per_year",
    "nominal_to_effective_annual",
    "effective_annual_to_period_rate",
    "period_rate_to_effective_annual",
    "to_effective_annual",
    # Period Schedule Generator
    "SchedulePeriod",
    "count_periods",
    "resolve_grace_type",
    "classify_periods",
    "resolve_annual_rate",
    "remaining_amortizing_periods",
    "generate_periods",
    # Amortization Row Calculator
    "AmortizationRow",
    "round_money",
    "financed_capital",
    "annuity_installment",
    "amortize_period",
    "amortize",
    # Cost & Insurance Overlay
    "insurance_premium",
    "overlay_row",
    "overlay_schedule",
    # Cash Flow & Metrics Engine
    "build_cash_flows",
    "npv",
    "npv_derivative",
    "irr",
    "tcea",
    # Pipeline
    "calculate_schedule",
    "calculate_batch",
]
