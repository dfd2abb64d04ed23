"""
Polynomial least squares fitting.

Public API:
    fit(x, y, degree, ...) -> PolyFitSolution
    fit_coefficients(x, y, degree, ...) -> (coefficients, error_code)

fit() handles:
    - Input validation
    - Design construction
    - Backend selection
    - Result wrapping

Example:
    >>> from pypolyfit.polyfit import fit
    >>> result = fit(x, y, degree=3)
    >>> print(result.coefficients)
    >>> print(result.summary())
"""

from pypolyfit.polyfit.design import PolynomialDesign
from pypolyfit.polyfit.solution import PolyFitSolution, PolyParams, polyval
from pypolyfit.polyfit.solvers import fit, fit_coefficients, FIT_OK, FIT_DEGENERATE

__all__ = [
    "fit",
    "fit_coefficients",
    "polyval",
    "FIT_OK",
    "FIT_DEGENERATE",
    "PolynomialDesign",
    "PolyFitSolution",
    "PolyParams",
]
