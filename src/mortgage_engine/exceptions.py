# Requires Python 3.12+
"""
Exception hierarchy for the mortgage engine.

Every failure the engine can report is a local validation or convergence
failure raised synchronously. None of them is retried internally.

    MortgageEngineError
    ├── UnsupportedFrequency
    ├── MissingRateInput
    ├── InvalidTerm
    │   └── ScheduleTooLarge
    └── IrrNotFound
"""

from __future__ import annotations

from typing import Any

__version__ = "0.1.0"


class MortgageEngineError(ValueError):
    """Base class for engine errors.

    Derives from ValueError so callers that already guard the engine with
    ``except ValueError`` keep working.

    Attributes:
        message: Human-readable error description
        context: Additional information about the failing input
    """

    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def __str__(self) -> str:
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{self.message} (Context: {context_str})"
        return self.message


class UnsupportedFrequency(MortgageEngineError):
    """Payment or capitalization frequency code is not one of the eight supported codes.

    Example:
        >>> raise UnsupportedFrequency(
        ...     "Unsupported payment frequency",
        ...     context={"frequency": "WEEKLY"}
        ... )
    """


class MissingRateInput(MortgageEngineError):
    """The annual rate source is empty or contains non-numeric values."""


class InvalidTerm(MortgageEngineError):
    """The term does not produce a positive period count."""


class ScheduleTooLarge(InvalidTerm):
    """The period count exceeds the configured upper bound.

    Raised before any schedule row is computed, so very long daily schedules
    never start an unbounded IRR search.
    """


class IrrNotFound(MortgageEngineError):
    """No internal rate of return exists or the solver did not converge.

    Raised immediately when every cash flow has the same sign, since the
    IRR is undefined in that case.
    """
