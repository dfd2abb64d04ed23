"""
Tests for PolynomialDesign.

Validates input checking, power-sum accumulation and the Hankel structure
of the normal matrix.
"""

import numpy as np
import pytest

from pypolyfit.polyfit import PolynomialDesign
from pypolyfit.core.exceptions import DimensionError, ValidationError


class TestConstruction:

    def test_from_lists(self):
        design = PolynomialDesign.from_arrays([0, 1, 2, 3], [1, 3, 5, 7], 1)
        assert design.n == 4
        assert design.degree == 1
        assert design.n_coef == 2
        assert design.n_power == 3
        assert design.x.dtype == np.float64
        assert design.y.dtype == np.float64

    def test_float32_promoted(self):
        x = np.arange(5, dtype=np.float32)
        design = PolynomialDesign.from_arrays(x, x, 2)
        assert design.x.dtype == np.float64

    def test_degree_zero(self):
        design = PolynomialDesign.from_arrays([1.0, 2.0], [3.0, 4.0], 0)
        assert design.n_coef == 1
        assert design.n_power == 1

    def test_mismatched_lengths(self):
        with pytest.raises(DimensionError, match=r"x=3.*y=2"):
            PolynomialDesign.from_arrays([1, 2, 3], [1, 2], 1)

    def test_2d_x_rejected(self):
        with pytest.raises(DimensionError):
            PolynomialDesign.from_arrays(np.ones((3, 2)), np.ones(3), 1)

    def test_empty_rejected(self):
        with pytest.raises(ValidationError, match="at least 1"):
            PolynomialDesign.from_arrays([], [], 1)

    def test_nan_rejected(self):
        with pytest.raises(ValidationError, match="NaN"):
            PolynomialDesign.from_arrays([1.0, np.nan], [1.0, 2.0], 1)

    def test_inf_in_y_rejected(self):
        with pytest.raises(ValidationError, match="y"):
            PolynomialDesign.from_arrays([1.0, 2.0], [1.0, np.inf], 1)

    def test_negative_degree_rejected(self):
        with pytest.raises(ValidationError, match="degree"):
            PolynomialDesign.from_arrays([1.0, 2.0], [1.0, 2.0], -1)

    def test_fewer_samples_than_coefficients_allowed(self):
        """Underdetermined designs are left to the solver to reject."""
        design = PolynomialDesign.from_arrays([1.0], [2.0], 3)
        assert design.n < design.n_coef

    def test_immutable(self):
        design = PolynomialDesign.from_arrays([1.0, 2.0], [1.0, 2.0], 1)
        with pytest.raises(AttributeError):
            design.degree = 2


class TestNormalEquations:

    def test_power_sums_linear(self):
        design = PolynomialDesign.from_arrays([0, 1, 2, 3], [1, 3, 5, 7], 1)
        sums, xy = design.power_sums()
        np.testing.assert_array_equal(sums, [4.0, 6.0, 14.0])
        np.testing.assert_array_equal(xy, [16.0, 34.0])

    def test_normal_matrix_linear(self):
        design = PolynomialDesign.from_arrays([0, 1, 2, 3], [1, 3, 5, 7], 1)
        xx, xy = design.normal_equations()
        np.testing.assert_array_equal(xx, [[4.0, 6.0], [6.0, 14.0]])
        np.testing.assert_array_equal(xy, [16.0, 34.0])

    def test_hankel_structure(self, rng):
        x = rng.uniform(-1.0, 1.0, 30)
        design = PolynomialDesign.from_arrays(x, rng.standard_normal(30), 4)
        sums, _ = design.power_sums()
        xx, _ = design.normal_equations()
        assert xx.shape == (5, 5)
        np.testing.assert_array_equal(xx, xx.T)
        for i in range(5):
            for j in range(5):
                assert xx[i, j] == sums[i + j]

    def test_matches_explicit_vandermonde(self, rng):
        x = rng.uniform(-2.0, 2.0, 50)
        y = rng.standard_normal(50)
        design = PolynomialDesign.from_arrays(x, y, 3)
        V = np.vander(x, 4, increasing=True)
        xx, xy = design.normal_equations()
        np.testing.assert_allclose(xx, V.T @ V, rtol=1e-12)
        np.testing.assert_allclose(xy, V.T @ y, rtol=1e-12, atol=1e-12)

    def test_fresh_buffers_each_call(self):
        design = PolynomialDesign.from_arrays([1.0, 2.0, 3.0], [1.0, 2.0, 3.0], 1)
        first, _ = design.normal_equations()
        first[0, 0] = -1.0
        second, _ = design.normal_equations()
        assert second[0, 0] == 3.0
