"""
Solver dispatch for polynomial fitting.

This module provides the fit() function (public API), the error-code
fit_coefficients() entry point, and backend selection.
"""

from typing import Any, Literal
import numpy as np
from numpy.typing import ArrayLike, NDArray

from pypolyfit.core.exceptions import SingularMatrixError
from pypolyfit.core.protocols import Backend
from pypolyfit.core.compute.device import select_device
from pypolyfit.core.compute.tolerances import PIVOT_TOLERANCE
from pypolyfit.polyfit.design import PolynomialDesign
from pypolyfit.polyfit.solution import PolyFitSolution
from pypolyfit.polyfit.backends.cpu import CPULUBackend


# Type alias for backend selection
BackendChoice = Literal['auto', 'cpu', 'gpu', 'cpu_lu', 'gpu_lu']

# Error codes returned by fit_coefficients()
FIT_OK = 0
FIT_DEGENERATE = 1

# Below this many samples 'auto' stays on the CPU: the solve is
# (degree+1)² and only the power-sum accumulation benefits from a GPU.
GPU_MIN_SAMPLES = 1_000_000


def fit(
    x: ArrayLike,
    y: ArrayLike,
    degree: int,
    *,
    backend: BackendChoice = 'auto',
    tol: float = PIVOT_TOLERANCE,
) -> PolyFitSolution:
    """
    Fit a polynomial by ordinary least squares.

    Solves the normal equations (X'X) c = X'y, where X has rows
    [1, x, x², ..., x^degree], by LU decomposition with partial pivoting.

    Args:
        x: Sample abscissas (n,). Can be any array-like.
        y: Sample ordinates (n,). Can be any array-like.
        degree: Polynomial degree (non-negative integer)
        backend: Computational backend to use:
            - 'auto': CPU, or CUDA for very large sample counts
            - 'cpu' / 'cpu_lu': NumPy float64 LU
            - 'gpu' / 'gpu_lu': PyTorch LU on CUDA or MPS
        tol: Pivot tolerance for the decomposition

    Returns:
        PolyFitSolution with coefficients (constant term first),
        diagnostics, and summary methods

    Raises:
        ValidationError: If inputs are invalid
        DimensionError: If x and y have inconsistent dimensions
        SingularMatrixError: If X'X is singular at this degree and tolerance
        NumericalError: If the power sums overflow

    Example:
        >>> from pypolyfit.polyfit import fit
        >>> result = fit([0, 1, 2, 3], [1, 3, 5, 7], degree=1)
        >>> result.coefficients
        array([1., 2.])
    """
    # === Construct Design ===
    # This is the boundary - validate here, trust everywhere else
    design = PolynomialDesign.from_arrays(x, y, degree)

    # === Select Backend ===
    backend_impl = _get_backend(backend, design, tol)

    # === Solve ===
    result = backend_impl.solve(design)

    # === Wrap and Return ===
    return PolyFitSolution(_result=result, _design=design)


def fit_coefficients(
    x: ArrayLike,
    y: ArrayLike,
    degree: int,
    *,
    tol: float = PIVOT_TOLERANCE,
) -> tuple[NDArray[np.floating[Any]], int]:
    """
    Fit a polynomial and report degeneracy as an error code.

    Args:
        x: Sample abscissas (n,)
        y: Sample ordinates (n,)
        degree: Polynomial degree (non-negative integer)
        tol: Pivot tolerance for the decomposition

    Returns:
        (coefficients, error_code). error_code is FIT_OK (0) on success and
        FIT_DEGENERATE (1) when X'X is singular. The coefficients are
        meaningless when error_code != FIT_OK: they are then all NaN and
        must not be used as a fit.

    Raises:
        ValidationError: If inputs are invalid (these are not degeneracy)
        DimensionError: If x and y have inconsistent dimensions

    Example:
        >>> fit_coefficients([1, 1, 1], [1, 2, 3], 1)
        (array([nan, nan]), 1)
    """
    design = PolynomialDesign.from_arrays(x, y, degree)
    try:
        result = CPULUBackend(tol=tol).solve(design)
    except SingularMatrixError:
        return np.full(design.n_coef, np.nan, dtype=np.float64), FIT_DEGENERATE
    return result.params.coefficients, FIT_OK


def _get_backend(choice: BackendChoice, design: PolynomialDesign, tol: float) -> Backend:
    """
    Select and instantiate the appropriate backend.

    Args:
        choice: User's backend preference
        design: The polynomial design (sample count drives 'auto')
        tol: Pivot tolerance passed to the backend

    Returns:
        Backend instance ready to solve

    Raises:
        ValueError: If unknown backend specified
        RuntimeError: If GPU requested but unavailable
    """
    if choice == 'auto':
        if design.n >= GPU_MIN_SAMPLES:
            device = select_device('auto')
            if device.device_type == 'cuda':
                from pypolyfit.polyfit.backends.gpu import GPULUBackend
                return GPULUBackend(device=device.torch_device, tol=tol)
        return CPULUBackend(tol=tol)

    elif choice in ('cpu', 'cpu_lu'):
        return CPULUBackend(tol=tol)

    elif choice in ('gpu', 'gpu_lu'):
        device = select_device('gpu')
        from pypolyfit.polyfit.backends.gpu import GPULUBackend
        if device.supports_fp64:
            return GPULUBackend(device=device.torch_device, tol=tol)
        # MPS: float32 only, keep the FP32 pivot tolerance unless overridden
        return GPULUBackend(
            use_fp64=False,
            device=device.torch_device,
            tol=None if tol == PIVOT_TOLERANCE else tol,
        )

    else:
        raise ValueError(f"Unknown backend: {choice!r}")
