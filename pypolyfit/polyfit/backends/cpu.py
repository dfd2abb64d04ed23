"""
CPU reference backend for polynomial least squares.

Builds the normal equations from power sums and solves them with LU
decomposition with partial pivoting (NumPy, float64). This is the
reference implementation the GPU backend is validated against.
"""

from typing import Any
import numpy as np

from pypolyfit.core.result import Result
from pypolyfit.core.exceptions import NumericalError, SingularMatrixError
from pypolyfit.core.compute.timing import Timer
from pypolyfit.core.compute.tolerances import PIVOT_TOLERANCE, ILL_CONDITIONED_PIVOT_RATIO
from pypolyfit.core.compute.linalg.lu import LUDecomposition, lu_factor_cpu, lu_solve_cpu
from pypolyfit.core.validation import check_tolerance
from pypolyfit.polyfit.design import PolynomialDesign
from pypolyfit.polyfit.solution import PolyParams, polyval


def check_normal_equations(xx: np.ndarray, xy: np.ndarray, design: PolynomialDesign) -> None:
    """Raise NumericalError if the power sums overflowed."""
    if not (np.all(np.isfinite(xx)) and np.all(np.isfinite(xy))):
        raise NumericalError(
            f"Power sums overflowed building X'X for degree {design.degree} "
            f"(max |x| = {float(np.max(np.abs(design.x))):.3g}). "
            f"Rescale x or lower the degree."
        )


def _support_note(design: PolynomialDesign, n_distinct: int) -> str:
    return (
        f"{design.n} samples with {n_distinct} distinct x values support at most "
        f"degree {n_distinct - 1}."
    )


def check_distinct_samples(design: PolynomialDesign, tol: float) -> None:
    """
    Raise SingularMatrixError if there are fewer distinct x values than coefficients.

    X'X then has rank equal to the number of distinct x values. Rounding in
    the power sums can leave the would-be zero pivots above an absolute
    tolerance when |x| is large, so this is decided before decomposition.
    """
    n_distinct = int(np.unique(design.x).size)
    if n_distinct >= design.n_coef:
        return
    raise SingularMatrixError(
        f"Normal matrix X'X is singular at degree {design.degree}: "
        f"{design.n_coef} coefficients cannot be determined. "
        + _support_note(design, n_distinct),
        matrix_name="X'X",
        pivot_column=n_distinct,
        tolerance=tol,
        rank=n_distinct,
        expected_rank=design.n_coef,
    )


def singular_error(lu: LUDecomposition, design: PolynomialDesign) -> SingularMatrixError:
    """SingularMatrixError describing where a decomposition of X'X failed."""
    n_distinct = int(np.unique(design.x).size)
    return SingularMatrixError(
        f"Normal matrix X'X is singular at degree {design.degree}: pivot in column "
        f"{lu.failed_column} is below tolerance {lu.tol:g}. "
        + _support_note(design, n_distinct),
        matrix_name="X'X",
        pivot_column=lu.failed_column,
        tolerance=lu.tol,
        rank=lu.rank,
        expected_rank=design.n_coef,
    )


def fit_diagnostics(lu: LUDecomposition) -> tuple[float, list[str]]:
    """Pivot ratio of a successful decomposition and the warnings it implies."""
    pivots = np.abs(lu.pivots)
    pivot_ratio = float(pivots.max() / pivots.min())

    warnings_list = []
    if pivot_ratio > ILL_CONDITIONED_PIVOT_RATIO:
        warnings_list.append(
            f"Normal matrix is ill-conditioned (pivot ratio {pivot_ratio:.2e}). "
            f"Coefficients may be inaccurate; consider a lower degree or rescaling x."
        )
    return pivot_ratio, warnings_list


class CPULUBackend:
    """
    CPU backend using LU decomposition of the normal equations.

    Implements the Backend protocol for PolynomialDesign -> PolyParams.
    """

    def __init__(self, tol: float = PIVOT_TOLERANCE):
        """
        Args:
            tol: Pivot tolerance for the decomposition
        """
        self.tol = check_tolerance(tol)

    @property
    def name(self) -> str:
        return 'cpu_lu'

    def solve(self, design: PolynomialDesign) -> Result[PolyParams]:
        """
        Fit the polynomial by solving (X'X) c = X'y.

        Algorithm:
            1. Accumulate power sums S[j] = Σ x^j and X'y
            2. Fill X'X[i, j] = S[i + j]
            3. LU-decompose X'X with partial pivoting
            4. Forward and back substitution for c
            5. Fitted values, residuals and summary statistics

        Args:
            design: Validated polynomial design

        Returns:
            Result containing PolyParams

        Raises:
            SingularMatrixError: If x has fewer than degree+1 distinct values
                or a pivot falls below tolerance
            NumericalError: If the power sums overflow
        """
        check_distinct_samples(design, self.tol)

        timer = Timer()
        timer.start()

        # === Normal Equations ===
        with timer.section('normal_equations'):
            xx, xy = design.normal_equations()
        check_normal_equations(xx, xy, design)

        # === Decomposition ===
        with timer.section('decomposition'):
            lu = lu_factor_cpu(xx, tol=self.tol, overwrite_a=True)

        if not lu.success:
            timer.stop()
            raise singular_error(lu, design)

        # === Substitution ===
        with timer.section('substitution'):
            coefficients, _ = lu_solve_cpu(lu, xy)

        # === Residuals and Fitted Values ===
        with timer.section('residuals'):
            fitted_values = polyval(coefficients, design.x)
            residuals = design.y - fitted_values

        with timer.section('statistics'):
            rss = float(residuals @ residuals)
            tss = float(np.sum((design.y - np.mean(design.y)) ** 2))
            pivot_ratio, warnings_list = fit_diagnostics(lu)

        timer.stop()

        params = PolyParams(
            coefficients=coefficients,
            residuals=residuals,
            fitted_values=fitted_values,
            rss=rss,
            tss=tss,
            rank=lu.rank,
            df_residual=design.n - lu.rank,
            decomposition=lu,
        )

        info: dict[str, Any] = {
            'method': 'lu_normal_equations',
            'degree': design.degree,
            'tol': self.tol,
            'permutation': lu.permutation.copy(),
            'n_swaps': lu.n_swaps,
            'pivot_ratio': pivot_ratio,
        }

        return Result(
            params=params,
            info=info,
            timing=timer.result(),
            backend_name=self.name,
            warnings=tuple(warnings_list),
        )
