"""
Polynomial fit solution types.

Contains the parameter payload and user-facing solution wrapper.
"""

from dataclasses import dataclass
from typing import Any, TYPE_CHECKING
import numpy as np
from numpy.typing import ArrayLike, NDArray
from scipy import stats

from pypolyfit.core.result import Result
from pypolyfit.core.validation import check_array, check_finite
from pypolyfit.core.compute.linalg.lu import LUDecomposition, lu_solve_cpu

if TYPE_CHECKING:
    from pypolyfit.polyfit.design import PolynomialDesign


def polyval(coefficients: ArrayLike, x: ArrayLike) -> NDArray[np.floating[Any]]:
    """
    Evaluate a polynomial by Horner's rule.

    Args:
        coefficients: Coefficients ordered from constant term to highest power
        x: Points to evaluate at (any shape)

    Returns:
        Polynomial values with the shape of x
    """
    coef = np.asarray(coefficients, dtype=np.float64)
    x_arr = np.asarray(x, dtype=np.float64)
    result = np.zeros_like(x_arr)
    for c in coef[::-1]:
        result = result * x_arr + c
    return result


@dataclass(frozen=True)
class PolyParams:
    """
    Parameter payload for a polynomial fit.

    This is the immutable data computed by backends. decomposition holds
    the LU factors of X'X, reused for the coefficient covariance.
    """
    coefficients: NDArray[np.floating[Any]]
    residuals: NDArray[np.floating[Any]]
    fitted_values: NDArray[np.floating[Any]]
    rss: float
    tss: float
    rank: int
    df_residual: int
    decomposition: LUDecomposition


@dataclass
class PolyFitSolution:
    """
    User-facing polynomial fit results.

    Wraps the backend Result and provides accessors for the coefficients,
    goodness of fit and coefficient inference.
    """
    _result: Result[PolyParams]
    _design: 'PolynomialDesign'

    # Cached computations
    _xtx_inverse: NDArray[np.floating[Any]] | None = None
    _standard_errors: NDArray[np.floating[Any]] | None = None

    @property
    def coefficients(self) -> NDArray[np.floating[Any]]:
        """Coefficients ordered from constant term to highest power."""
        return self._result.params.coefficients

    @property
    def degree(self) -> int:
        return self._design.degree

    @property
    def residuals(self) -> NDArray[np.floating[Any]]:
        return self._result.params.residuals

    @property
    def fitted_values(self) -> NDArray[np.floating[Any]]:
        return self._result.params.fitted_values

    @property
    def rss(self) -> float:
        return self._result.params.rss

    @property
    def tss(self) -> float:
        return self._result.params.tss

    @property
    def r_squared(self) -> float:
        if self.tss == 0:
            return 1.0 if self.rss == 0 else 0.0
        return 1.0 - (self.rss / self.tss)

    @property
    def adjusted_r_squared(self) -> float:
        n = self._design.n
        p = self._result.params.rank
        if n - p <= 0 or self.tss == 0:
            return self.r_squared
        return 1.0 - (1.0 - self.r_squared) * (n - 1) / (n - p)

    @property
    def residual_std_error(self) -> float:
        df = self._result.params.df_residual
        if df <= 0:
            return 0.0
        return float(np.sqrt(self.rss / df))

    @property
    def xtx_inverse(self) -> NDArray[np.floating[Any]]:
        """
        (X'X)⁻¹, solved column by column from the stored LU factors.
        """
        if self._xtx_inverse is not None:
            return self._xtx_inverse

        lu = self._result.params.decomposition
        identity = np.eye(lu.n)
        columns = []
        for k in range(lu.n):
            col, _ = lu_solve_cpu(lu, identity[:, k])
            columns.append(col)
        self._xtx_inverse = np.column_stack(columns)
        return self._xtx_inverse

    @property
    def covariance(self) -> NDArray[np.floating[Any]]:
        """Coefficient covariance σ² (X'X)⁻¹. NaN when there are no residual DF."""
        df = self._result.params.df_residual
        if df <= 0:
            p = len(self.coefficients)
            return np.full((p, p), np.nan, dtype=np.float64)
        return (self.rss / df) * self.xtx_inverse

    @property
    def standard_errors(self) -> NDArray[np.floating[Any]]:
        """
        Standard errors of coefficients.

        Computed as SE(β) = sqrt(diag(σ² (X'X)⁻¹)). An exact interpolation
        (n == degree + 1) has no residual degrees of freedom and gets NaN.
        """
        if self._standard_errors is not None:
            return self._standard_errors

        variances = np.diag(self.covariance)
        # Rounding can leave tiny negative diagonals on ill-conditioned X'X
        with np.errstate(invalid='ignore'):
            self._standard_errors = np.where(variances >= 0, np.sqrt(variances), np.nan)
        return self._standard_errors

    @property
    def t_statistics(self) -> NDArray[np.floating[Any]]:
        """t-statistics for coefficients."""
        se = self.standard_errors
        with np.errstate(divide='ignore', invalid='ignore'):
            t = self.coefficients / se
        return np.where(np.isfinite(t), t, np.nan)

    @property
    def p_values(self) -> NDArray[np.floating[Any]]:
        """Two-sided p-values from the t distribution on df_residual DF."""
        df = self._result.params.df_residual
        t = self.t_statistics
        if df <= 0:
            return np.full_like(t, np.nan)
        return 2.0 * stats.t.sf(np.abs(t), df)

    @property
    def rank(self) -> int:
        return self._result.params.rank

    @property
    def df_residual(self) -> int:
        return self._result.params.df_residual

    @property
    def info(self) -> dict[str, Any]:
        return self._result.info

    @property
    def timing(self) -> dict[str, float] | None:
        return self._result.timing

    @property
    def backend_name(self) -> str:
        return self._result.backend_name

    @property
    def warnings(self) -> tuple[str, ...]:
        return self._result.warnings

    def predict(self, x_new: ArrayLike) -> NDArray[np.floating[Any]]:
        """
        Evaluate the fitted polynomial at new points.

        Raises:
            ValidationError: If x_new is non-numeric or non-finite
        """
        x_arr = check_array(x_new, 'x_new')
        check_finite(x_arr, 'x_new')
        return polyval(self.coefficients, x_arr)

    def summary(self) -> str:
        """Generate R-style summary output."""
        lines = [
            "Polynomial Least Squares Fit",
            "=" * 66,
            f"Observations: {self._design.n}",
            f"Degree: {self.degree}",
            f"R-squared: {self.r_squared:.6f}",
            f"Adj. R-squared: {self.adjusted_r_squared:.6f}",
            f"Residual Std. Error: {self.residual_std_error:.6f} on {self.df_residual} DF",
            "",
            "Coefficients:",
            "-" * 66,
            f"{'Term':<8} {'Estimate':>14} {'Std.Error':>12} {'t value':>10} {'Pr(>|t|)':>12}",
            "-" * 66,
        ]

        for i, (coef, se, t, pv) in enumerate(zip(
            self.coefficients, self.standard_errors, self.t_statistics, self.p_values
        )):
            term = "1" if i == 0 else ("x" if i == 1 else f"x^{i}")
            se_str = f"{se:12.6f}" if not np.isnan(se) else f"{'NA':>12}"
            t_str = f"{t:10.3f}" if not np.isnan(t) else f"{'NA':>10}"
            p_str = f"{pv:12.4g}" if not np.isnan(pv) else f"{'NA':>12}"
            lines.append(f"{term:<8} {coef:14.6f} {se_str} {t_str} {p_str}")

        lines.append("-" * 66)
        lines.append(f"Backend: {self.backend_name}")
        if self.timing:
            lines.append(f"Time: {self.timing.get('total_seconds', 0):.4f}s")
        for w in self.warnings:
            lines.append(f"Warning: {w}")

        return "\n".join(lines)

    def __repr__(self) -> str:
        return (
            f"PolyFitSolution(n={self._design.n}, degree={self.degree}, "
            f"r_squared={self.r_squared:.4f})"
        )
