"""
Core infrastructure for PyPolyfit.

Shared abstractions, utilities and numeric kernels used by the polyfit
domain module.

Key components:
    protocols: Backend protocol
    result: Generic Result[P] envelope
    exceptions: Exception hierarchy
    validation: Input validators
    compute: Hardware detection, timing, tolerances, linear algebra kernels
"""

from pypolyfit.core.protocols import Backend
from pypolyfit.core.result import Result
from pypolyfit.core.exceptions import (
    PyPolyfitError,
    ValidationError,
    DimensionError,
    NumericalError,
    SingularMatrixError,
    NotDecomposedError,
)

__all__ = [
    # Protocols
    "Backend",
    # Result
    "Result",
    # Exceptions
    "PyPolyfitError",
    "ValidationError",
    "DimensionError",
    "NumericalError",
    "SingularMatrixError",
    "NotDecomposedError",
]
