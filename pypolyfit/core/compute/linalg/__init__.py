"""
Linear algebra kernels for PyPolyfit.

All functions follow these conventions:
    - CPU functions use NumPy
    - GPU functions use PyTorch and return NumPy arrays (data moved to CPU)
    - Decompositions return a structured result dataclass
    - Degenerate matrices are reported through a success flag, never raised

Submodules:
    lu: LU decomposition with partial pivoting and substitution
"""

from pypolyfit.core.compute.linalg.lu import (
    LUDecomposition,
    decompose,
    solve_system,
    lu_factor_cpu,
    lu_solve_cpu,
    lu_factor_gpu,
    lu_solve_gpu,
    lu_determinant,
    lu_unpack,
)

__all__ = [
    # In-place functional interface
    "decompose",
    "solve_system",
    # LU decomposition
    "LUDecomposition",
    "lu_factor_cpu",
    "lu_solve_cpu",
    "lu_factor_gpu",
    "lu_solve_gpu",
    "lu_determinant",
    "lu_unpack",
]
