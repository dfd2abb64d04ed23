"""
Tests for input validation utilities.

Validates every function in core/validation.py:
    - check_array: conversion, dtype coercion, object/string/complex rejection
    - check_finite: NaN/Inf detection
    - check_ndim / check_1d / check_2d / check_square: shape checks
    - check_consistent_length: multi-array length matching
    - check_min_samples: minimum sample count
    - check_degree: non-negative integer degree
    - check_tolerance: finite non-negative tolerance
"""

import numpy as np
import pytest

from pypolyfit.core.exceptions import DimensionError, ValidationError
from pypolyfit.core.validation import (
    check_1d,
    check_2d,
    check_array,
    check_consistent_length,
    check_degree,
    check_finite,
    check_min_samples,
    check_ndim,
    check_square,
    check_tolerance,
)


# ═══════════════════════════════════════════════════════════════════════
# check_array
# ═══════════════════════════════════════════════════════════════════════


class TestCheckArray:
    """check_array converts to ndarray and rejects non-numeric data."""

    def test_list_to_float_array(self):
        result = check_array([1, 2, 3], "x")
        assert isinstance(result, np.ndarray)
        assert np.issubdtype(result.dtype, np.floating)
        np.testing.assert_array_equal(result, [1.0, 2.0, 3.0])

    def test_int_array_promoted_to_float(self):
        result = check_array(np.array([1, 2, 3], dtype=np.int32), "x")
        assert np.issubdtype(result.dtype, np.floating)

    def test_float_array_passthrough(self):
        arr = np.array([1.0, 2.0, 3.0])
        result = check_array(arr, "x")
        assert result.dtype == np.float64

    def test_rejects_mixed_types(self):
        with pytest.raises(ValidationError, match="object dtype"):
            check_array([None, 1, 2.0], "x")

    def test_rejects_strings(self):
        with pytest.raises(ValidationError, match="non-numeric dtype"):
            check_array(["a", "b", "c"], "x")

    def test_rejects_bool(self):
        with pytest.raises(ValidationError, match="non-numeric dtype"):
            check_array([True, False], "x")

    def test_rejects_complex(self):
        with pytest.raises(ValidationError, match="complex"):
            check_array([1 + 2j, 3.0], "x")

    def test_empty_array(self):
        result = check_array([], "x")
        assert len(result) == 0

    def test_error_message_includes_name(self):
        with pytest.raises(ValidationError, match="my_var"):
            check_array(["a", "b"], "my_var")


# ═══════════════════════════════════════════════════════════════════════
# check_finite
# ═══════════════════════════════════════════════════════════════════════


class TestCheckFinite:
    """check_finite rejects NaN and Inf values."""

    def test_finite_passes(self):
        check_finite(np.array([1.0, 2.0, 3.0]), "x")

    def test_nan_rejected(self):
        with pytest.raises(ValidationError, match="1 NaN"):
            check_finite(np.array([1.0, np.nan, 3.0]), "x")

    def test_inf_rejected(self):
        with pytest.raises(ValidationError, match="1 Inf"):
            check_finite(np.array([1.0, -np.inf, 3.0]), "x")

    def test_mixed_nan_inf(self):
        with pytest.raises(ValidationError, match="2 NaN.*1 Inf"):
            check_finite(np.array([np.nan, np.inf, np.nan]), "x")

    def test_2d_nan_rejected(self):
        with pytest.raises(ValidationError, match="A"):
            check_finite(np.array([[1.0, np.nan], [3.0, 4.0]]), "A")


# ═══════════════════════════════════════════════════════════════════════
# Shape checks
# ═══════════════════════════════════════════════════════════════════════


class TestShapeChecks:
    """check_ndim, check_1d, check_2d, check_square enforce shape."""

    def test_wrong_ndim_raises(self):
        with pytest.raises(DimensionError, match="expected 1D.*got 2D"):
            check_ndim(np.array([[1.0, 2.0]]), 1, "x")

    def test_error_includes_shape(self):
        with pytest.raises(DimensionError, match=r"shape \(3, 2\)"):
            check_ndim(np.ones((3, 2)), 1, "x")

    def test_check_1d_passes(self):
        check_1d(np.array([1.0, 2.0, 3.0]), "y")

    def test_check_1d_rejects_scalar(self):
        with pytest.raises(DimensionError):
            check_1d(np.array(5.0), "y")

    def test_check_2d_rejects_1d(self):
        with pytest.raises(DimensionError):
            check_2d(np.array([1.0, 2.0, 3.0]), "A")

    def test_square_passes(self):
        check_square(np.eye(3), "A")

    def test_empty_square_passes(self):
        check_square(np.zeros((0, 0)), "A")

    def test_rectangular_rejected(self):
        with pytest.raises(DimensionError, match=r"square.*\(2, 3\)"):
            check_square(np.ones((2, 3)), "A")

    def test_square_rejects_1d(self):
        with pytest.raises(DimensionError, match="expected 2D"):
            check_square(np.ones(4), "A")


# ═══════════════════════════════════════════════════════════════════════
# check_consistent_length / check_min_samples
# ═══════════════════════════════════════════════════════════════════════


class TestCheckConsistentLength:
    """check_consistent_length ensures first dimensions match."""

    def test_same_length_passes(self):
        check_consistent_length(np.ones(3), np.ones(3), names=("x", "y"))

    def test_error_includes_names_and_lengths(self):
        with pytest.raises(DimensionError, match=r"x=3.*y=2"):
            check_consistent_length(np.ones(3), np.ones(2), names=("x", "y"))

    def test_wrong_number_of_names(self):
        with pytest.raises(ValueError, match="Number of arrays"):
            check_consistent_length(np.ones(5), np.ones(5), names=("x",))

    def test_single_array_passes(self):
        check_consistent_length(np.ones(5), names=("x",))


class TestCheckMinSamples:
    """check_min_samples enforces minimum sample count."""

    def test_exact_minimum_passes(self):
        check_min_samples(np.ones(5), 5, "x")

    def test_too_few_raises(self):
        with pytest.raises(ValidationError, match="at least 5.*got 3"):
            check_min_samples(np.ones(3), 5, "x")

    def test_empty_array_raises(self):
        with pytest.raises(ValidationError, match="at least 1.*got 0"):
            check_min_samples(np.array([]), 1, "x")


# ═══════════════════════════════════════════════════════════════════════
# check_degree / check_tolerance
# ═══════════════════════════════════════════════════════════════════════


class TestCheckDegree:
    """check_degree accepts non-negative integers only."""

    @pytest.mark.parametrize("degree", [0, 1, 7, np.int64(3)])
    def test_integers_pass(self, degree):
        assert check_degree(degree) == int(degree)

    def test_integral_float_accepted(self):
        result = check_degree(2.0)
        assert result == 2
        assert isinstance(result, int)

    def test_negative_rejected(self):
        with pytest.raises(ValidationError, match="got -1"):
            check_degree(-1)

    def test_fractional_rejected(self):
        with pytest.raises(ValidationError, match="non-negative integer"):
            check_degree(1.5)

    def test_bool_rejected(self):
        with pytest.raises(ValidationError, match="bool"):
            check_degree(True)

    def test_string_rejected(self):
        with pytest.raises(ValidationError, match="str"):
            check_degree("2")


class TestCheckTolerance:
    """check_tolerance accepts finite values >= 0."""

    def test_default_tolerance_passes(self):
        assert check_tolerance(1e-12) == 1e-12

    def test_zero_passes(self):
        assert check_tolerance(0) == 0.0

    def test_negative_rejected(self):
        with pytest.raises(ValidationError, match=">= 0"):
            check_tolerance(-1e-12)

    def test_nan_rejected(self):
        with pytest.raises(ValidationError):
            check_tolerance(float("nan"))

    def test_non_numeric_rejected(self):
        with pytest.raises(ValidationError, match="real number"):
            check_tolerance("small")
