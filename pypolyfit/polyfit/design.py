"""
Polynomial Design.

Design holds the sample set and the requested degree, and builds the
normal equations (X'X) c = X'y for the implicit design matrix whose rows
are the power ladders [1, x, x², ..., x^degree]. The design matrix itself
is never formed.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any
import numpy as np
from numpy.typing import ArrayLike, NDArray

from pypolyfit.core.validation import (
    check_array,
    check_finite,
    check_1d,
    check_consistent_length,
    check_min_samples,
    check_degree,
)


@dataclass(frozen=True)
class PolynomialDesign:
    """
    Sample set and polynomial degree for a least squares fit.

    Immutable after construction. Built with PolynomialDesign.from_arrays,
    which validates the inputs.
    """
    _x: NDArray[np.floating[Any]]
    _y: NDArray[np.floating[Any]]
    _degree: int

    @classmethod
    def from_arrays(cls, x: ArrayLike, y: ArrayLike, degree: int) -> PolynomialDesign:
        """
        Build a design from sample arrays.

        Args:
            x: Sample abscissas (n,)
            y: Sample ordinates (n,)
            degree: Non-negative polynomial degree

        Raises:
            ValidationError: On non-numeric or non-finite samples, no samples,
                or a degree that is not a non-negative integer
            DimensionError: If x or y is not 1D or their lengths differ

        Fewer than degree+1 distinct x values is not rejected here; the
        normal matrix is then singular and the solve reports it.
        """
        x_arr = np.asarray(check_array(x, 'x'), dtype=np.float64)
        y_arr = np.asarray(check_array(y, 'y'), dtype=np.float64)
        degree = check_degree(degree)

        check_1d(x_arr, 'x')
        check_1d(y_arr, 'y')
        check_consistent_length(x_arr, y_arr, names=('x', 'y'))
        check_min_samples(x_arr, 1, 'x')
        check_finite(x_arr, 'x')
        check_finite(y_arr, 'y')

        return cls(_x=x_arr, _y=y_arr, _degree=degree)

    # === Properties ===

    @property
    def x(self) -> NDArray[np.floating[Any]]:
        """Sample abscissas (n,)."""
        return self._x

    @property
    def y(self) -> NDArray[np.floating[Any]]:
        """Sample ordinates (n,)."""
        return self._y

    @property
    def degree(self) -> int:
        return self._degree

    @property
    def n(self) -> int:
        """Number of samples."""
        return self._x.shape[0]

    @property
    def n_coef(self) -> int:
        """Number of coefficients, degree + 1."""
        return self._degree + 1

    @property
    def n_power(self) -> int:
        """Number of distinct power sums in X'X, 2·degree + 1."""
        return self.n_coef + self._degree

    def power_sums(self) -> tuple[NDArray[np.floating[Any]], NDArray[np.floating[Any]]]:
        """
        Accumulate the power sums over all samples.

        A running ladder x^j is advanced once per power, so each power of
        every sample is formed by one multiplication.

        Returns:
            (S, XY) where S[j] = Σ x^j for j < n_power and
            XY[j] = Σ y·x^j for j < n_coef
        """
        n_coef, n_power = self.n_coef, self.n_power
        sums = np.zeros(n_power, dtype=np.float64)
        xy = np.zeros(n_coef, dtype=np.float64)

        ladder = np.ones(self.n, dtype=np.float64)
        for j in range(n_power):
            if j < n_coef:
                xy[j] = self._y @ ladder
            sums[j] = ladder.sum()
            ladder = ladder * self._x

        return sums, xy

    def normal_equations(self) -> tuple[NDArray[np.floating[Any]], NDArray[np.floating[Any]]]:
        """
        Build the normal matrix and vector.

        X'X is a Hankel matrix, XX[i, j] = S[i + j], so it is filled from
        the 2·degree + 1 power sums instead of n_coef² separate sums.

        Returns:
            (XX, XY), freshly allocated and owned by the caller
        """
        sums, xy = self.power_sums()
        idx = np.arange(self.n_coef)
        xx = sums[idx[:, np.newaxis] + idx[np.newaxis, :]]
        return xx, xy

    def __repr__(self) -> str:
        return f"PolynomialDesign(n={self.n}, degree={self.degree})"
