"""
Error Taxonomy
==============
Exceptions raised by the analytics engine.

    PreconditionViolation   Caller supplied inputs the computation cannot
                            accept (series too short, non-positive counts,
                            non-finite capital).
    NumericAnomaly          An intermediate value became NaN / Inf or a
                            price became non-positive.

Both derive from the builtin exception a caller would naturally catch
(ValueError / ArithmeticError) so existing handlers keep working.
"""

import math
import numbers
from typing import Any, Dict, Optional


class TitanEngineError(Exception):
    """Base class for every error raised by the engine."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class PreconditionViolation(TitanEngineError, ValueError):
    """Inputs rejected before any computation took place."""


class NumericAnomaly(TitanEngineError, ArithmeticError):
    """A computation produced NaN, Inf or a non-positive price."""


class AnalysisInProgressError(TitanEngineError, RuntimeError):
    """An analysis was requested while the runner is already RUNNING."""


def require_finite(value: float, name: str) -> float:
    """
    Coerce ``value`` to float and reject bool, non-numeric, NaN and Inf.

    Raises
    ------
    PreconditionViolation
        If the value is not a finite real number.
    """
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise PreconditionViolation(
            f"{name} must be a real number, got {type(value).__name__}",
            {name: value},
        )
    number = float(value)
    if not math.isfinite(number):
        raise PreconditionViolation(f"{name} must be finite, got {number}", {name: number})
    return number


def require_count(value: int, name: str, minimum: int) -> int:
    """Reject non-integer counts and counts below ``minimum``."""
    if isinstance(value, bool) or not isinstance(value, numbers.Integral):
        raise PreconditionViolation(
            f"{name} must be an integer, got {type(value).__name__}",
            {name: value},
        )
    if value < minimum:
        raise PreconditionViolation(
            f"{name} must be >= {minimum}, got {value}", {name: value}
        )
    return int(value)
