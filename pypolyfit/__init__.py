"""
PyPolyfit: polynomial least squares with an explicit LU solver.

Fits polynomials to 2D samples through the normal equations, solved by
LU decomposition with partial pivoting, with optional GPU execution.

Submodules:
    polyfit: Polynomial fitting (fit, fit_coefficients)
    core: Exceptions, validation, result envelope, LU kernels
"""

__version__ = "0.1.0"

from pypolyfit import polyfit
from pypolyfit.polyfit import fit, fit_coefficients

__all__ = [
    "__version__",
    "polyfit",
    "fit_coefficients",
    "fit",
]
