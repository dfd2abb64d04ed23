"""
pytest configuration and shared fixtures.
"""

import pytest
import numpy as np


@pytest.fixture
def rng():
    """Seeded random number generator for reproducible tests."""
    return np.random.default_rng(42)


@pytest.fixture
def cubic_data():
    """Noise-free samples of 1 - 2x + 0.5x² + 0.25x³ on [-2, 2]."""
    x = np.linspace(-2.0, 2.0, 20)
    coef_true = np.array([1.0, -2.0, 0.5, 0.25])
    y = coef_true[0] + coef_true[1] * x + coef_true[2] * x**2 + coef_true[3] * x**3
    return x, y, coef_true


@pytest.fixture
def noisy_quadratic_data(rng):
    """Quadratic with Gaussian noise, for inference statistics."""
    n = 200
    x = rng.uniform(-3.0, 3.0, n)
    coef_true = np.array([0.5, 1.5, -0.75])
    y = coef_true[0] + coef_true[1] * x + coef_true[2] * x**2 + rng.standard_normal(n) * 0.2
    return x, y, coef_true


@pytest.fixture
def well_conditioned_matrix(rng):
    """Random 6x6 matrix made diagonally heavy, with a known solution."""
    n = 6
    A = rng.standard_normal((n, n)) + n * np.eye(n)
    x_true = rng.standard_normal(n)
    return A, x_true
