"""
Exception hierarchy for PyPolyfit.

All exceptions inherit from PyPolyfitError to allow catching any
library-specific error. Domain-specific exceptions should inherit from
the appropriate base class here.

Design principles:
    - Exceptions carry diagnostic information as attributes
    - Error messages are actionable with actual vs expected values
    - Never catch and re-raise with less information
"""


class PyPolyfitError(Exception):
    """Base exception for all PyPolyfit errors."""
    pass


class ValidationError(PyPolyfitError):
    """
    Input validation failed.

    Raised when user-provided inputs fail validation checks.
    """
    pass


class DimensionError(ValidationError):
    """
    Array dimensions are incorrect or inconsistent.

    Raised when array shapes don't match expected dimensions or
    when multiple arrays have inconsistent shapes.
    """
    pass


class NumericalError(PyPolyfitError):
    """
    Numerical computation failed.

    Base class for errors arising from numerical issues during computation.
    """
    pass


class SingularMatrixError(NumericalError):
    """
    Matrix is singular or nearly singular.

    Raised when a pivot magnitude falls below the decomposition tolerance,
    i.e. the normal matrix cannot be factored at the requested degree.

    Attributes:
        matrix_name: Name/description of the problematic matrix
        pivot_column: Column at which elimination found no usable pivot
        tolerance: Pivot tolerance that was not cleared
        rank: Number of pivots that cleared the tolerance
        expected_rank: Expected rank (number of coefficients)
    """

    def __init__(
        self,
        message: str,
        matrix_name: str | None = None,
        pivot_column: int | None = None,
        tolerance: float | None = None,
        rank: int | None = None,
        expected_rank: int | None = None
    ):
        super().__init__(message)
        self.matrix_name = matrix_name
        self.pivot_column = pivot_column
        self.tolerance = tolerance
        self.rank = rank
        self.expected_rank = expected_rank


class NotDecomposedError(PyPolyfitError):
    """
    Substitution requested without a successful decomposition.

    Raised when a solve routine receives something that was never produced
    by the decomposition routine (a raw matrix, a malformed permutation).
    This is a programming error, distinct from a degenerate system, which
    is reported through the solve routine's success flag.
    """
    pass
