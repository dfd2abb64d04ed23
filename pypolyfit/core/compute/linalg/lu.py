"""
LU decomposition with partial pivoting.

Doolittle factorization P·A = L·U stored in combined form: the strictly
lower triangle of the factored matrix holds L - E (the multipliers, unit
diagonal implied) and the upper triangle including the diagonal holds U.

The row permutation is an integer vector of length N+1. Entry i (i < N) is
the original row now at position i. Entry N starts at N and is incremented
on every row exchange, so P[N] - N is the swap count and
(-1)**(P[N] - N) is the sign of the permutation.

Two interfaces are provided:

    decompose / solve_system
        Functional, in-place on a caller-owned float64 matrix. Failure is
        reported through the returned flag.

    lu_factor_cpu / lu_solve_cpu (and the _gpu variants)
        Return an immutable LUDecomposition used by the backends. The input
        is copied unless overwrite_a=True.

Neither interface raises on a degenerate matrix. A pivot candidate whose
magnitude is below the tolerance stops the elimination and the result is
marked as failed; substitution against a failed result is refused.
"""

from dataclasses import dataclass
from typing import Any, TYPE_CHECKING
import numpy as np
from numpy.typing import ArrayLike, NDArray

from pypolyfit.core.exceptions import NotDecomposedError, DimensionError, ValidationError
from pypolyfit.core.compute.tolerances import PIVOT_TOLERANCE
from pypolyfit.core.validation import (
    check_array,
    check_finite,
    check_1d,
    check_square,
    check_tolerance,
)

if TYPE_CHECKING:
    import torch


@dataclass(frozen=True)
class LUDecomposition:
    """
    Result of LU decomposition with partial pivoting.

    Attributes:
        lu: Combined factors, (L - E) below the diagonal and U on and above
        permutation: Row permutation of length N+1 (None if failed)
        success: True if every pivot cleared the tolerance
        tol: Pivot tolerance used
        failed_column: Column whose pivot was below tol (None on success)
    """
    lu: NDArray[np.floating[Any]]
    permutation: NDArray[np.intp] | None
    success: bool
    tol: float
    failed_column: int | None = None

    @property
    def n(self) -> int:
        """Matrix order N."""
        return self.lu.shape[0]

    @property
    def n_swaps(self) -> int:
        """Number of row exchanges performed."""
        if self.permutation is None:
            raise NotDecomposedError("Degenerate decomposition has no permutation")
        return int(self.permutation[-1]) - self.n

    @property
    def pivots(self) -> NDArray[np.floating[Any]]:
        """Diagonal of U."""
        return np.diag(self.lu).copy()

    @property
    def rank(self) -> int:
        """Number of pivots that cleared the tolerance."""
        if self.success:
            return self.n
        return self.failed_column


def _eliminate(A: NDArray[np.floating[Any]], tol: float) -> tuple[NDArray[np.intp], int | None]:
    """
    Factor A in place.

    Returns the permutation and the failing column, or None for the column
    when every pivot was usable.
    """
    n = A.shape[0]
    perm = np.arange(n + 1, dtype=np.intp)

    for i in range(n):
        column = np.abs(A[i:, i])
        imax = i + int(np.argmax(column))
        max_abs = column[imax - i]

        # An exactly zero pivot is degenerate even with tol == 0
        if max_abs < tol or max_abs == 0.0:
            return perm, i

        if imax != i:
            perm[[i, imax]] = perm[[imax, i]]
            A[[i, imax]] = A[[imax, i]]
            perm[n] += 1

        A[i + 1:, i] /= A[i, i]
        A[i + 1:, i + 1:] -= np.outer(A[i + 1:, i], A[i, i + 1:])

    return perm, None


def _substitute(
    lu: NDArray[np.floating[Any]],
    perm: NDArray[np.intp],
    b: NDArray[np.floating[Any]],
) -> NDArray[np.floating[Any]]:
    """Forward substitution with unit-diagonal L, then back substitution with U."""
    n = lu.shape[0]
    x = np.empty(n, dtype=np.result_type(lu.dtype, b.dtype))

    for i in range(n):
        x[i] = b[perm[i]] - lu[i, :i] @ x[:i]

    for i in range(n - 1, -1, -1):
        x[i] = (x[i] - lu[i, i + 1:] @ x[i + 1:]) / lu[i, i]

    return x


def _check_permutation(permutation: Any, n: int) -> NDArray[np.intp]:
    """Verify a permutation could have been produced by decompose() for order n."""
    if not isinstance(permutation, np.ndarray) or permutation.ndim != 1:
        raise NotDecomposedError(
            f"permutation: expected 1D integer array from decompose(), got {type(permutation).__name__}"
        )
    if not np.issubdtype(permutation.dtype, np.integer):
        raise NotDecomposedError(
            f"permutation: expected integer dtype, got {permutation.dtype}"
        )
    if permutation.shape[0] != n + 1:
        raise NotDecomposedError(
            f"permutation: expected length {n + 1} for a {n}x{n} matrix, got {permutation.shape[0]}"
        )
    if not np.array_equal(np.sort(permutation[:n]), np.arange(n)):
        raise NotDecomposedError(
            f"permutation: first {n} entries are not a permutation of 0..{n - 1}"
        )
    if permutation[n] < n:
        raise NotDecomposedError(
            f"permutation: swap counter {int(permutation[n])} is below N={n}"
        )
    return permutation


def _check_rhs(b: ArrayLike, n: int) -> NDArray[np.floating[Any]]:
    b_arr = check_array(b, 'b')
    check_1d(b_arr, 'b')
    check_finite(b_arr, 'b')
    if b_arr.shape[0] != n:
        raise DimensionError(f"b: expected length {n}, got {b_arr.shape[0]}")
    return b_arr


# =====================================================================
# Functional in-place interface
# =====================================================================


def decompose(
    matrix: NDArray[np.float64],
    tol: float = PIVOT_TOLERANCE,
) -> tuple[bool, NDArray[np.intp] | None]:
    """
    LU-decompose a square matrix in place.

    Args:
        matrix: Writable float64 ndarray (N x N). Overwritten with the
            combined factors on success; contents are undefined on failure.
        tol: Pivot magnitudes below this value are treated as zero

    Returns:
        (success, permutation). permutation has length N+1 on success and
        is None on failure.

    Raises:
        ValidationError: If matrix cannot be factored in place
        DimensionError: If matrix is not square
    """
    if not isinstance(matrix, np.ndarray) or matrix.dtype != np.float64:
        raise ValidationError(
            "matrix: in-place decomposition requires a float64 ndarray, "
            f"got {type(matrix).__name__}"
            + (f" of dtype {matrix.dtype}" if isinstance(matrix, np.ndarray) else "")
        )
    if not matrix.flags.writeable:
        raise ValidationError("matrix: array is read-only")
    check_square(matrix, 'matrix')
    check_finite(matrix, 'matrix')
    tol = check_tolerance(tol)

    perm, failed_column = _eliminate(matrix, tol)
    if failed_column is not None:
        return False, None
    return True, perm


def solve_system(
    matrix: NDArray[np.float64],
    permutation: NDArray[np.intp] | None,
    rhs: ArrayLike,
) -> tuple[NDArray[np.float64] | None, bool]:
    """
    Solve A·x = rhs from factors produced by decompose().

    Args:
        matrix: The matrix decompose() overwrote
        permutation: The permutation decompose() returned
        rhs: Right-hand side vector of length N

    Returns:
        (solution, success). A permutation of None, which is what a failed
        decompose() returns, yields (None, False) without substitution.

    Raises:
        NotDecomposedError: If permutation is not a decompose() output for
            a matrix of this order
        DimensionError: If rhs length does not match the matrix
    """
    if permutation is None:
        return None, False

    factors = check_array(matrix, 'matrix')
    check_square(factors, 'matrix')
    n = factors.shape[0]
    perm = _check_permutation(permutation, n)
    b = _check_rhs(rhs, n)

    return _substitute(factors, perm, b), True


# =====================================================================
# CPU
# =====================================================================


def lu_factor_cpu(
    A: ArrayLike,
    tol: float = PIVOT_TOLERANCE,
    overwrite_a: bool = False,
) -> LUDecomposition:
    """
    LU decomposition with partial pivoting using NumPy.

    Args:
        A: Square matrix (N x N)
        tol: Pivot tolerance
        overwrite_a: Factor A's buffer directly when it is already a
            writable float64 ndarray

    Returns:
        LUDecomposition, with success=False if a pivot fell below tol
    """
    tol = check_tolerance(tol)

    if overwrite_a and isinstance(A, np.ndarray) and A.dtype == np.float64 and A.flags.writeable:
        work = A
    else:
        work = np.array(check_array(A, 'A'), dtype=np.float64, copy=True)

    check_square(work, 'A')
    check_finite(work, 'A')

    perm, failed_column = _eliminate(work, tol)

    return LUDecomposition(
        lu=work,
        permutation=perm if failed_column is None else None,
        success=failed_column is None,
        tol=tol,
        failed_column=failed_column,
    )


def lu_solve_cpu(
    lu: LUDecomposition,
    b: ArrayLike,
) -> tuple[NDArray[np.floating[Any]] | None, bool]:
    """
    Solve A·x = b using a decomposition from lu_factor_cpu/lu_factor_gpu.

    Returns:
        (x, True) on success, (None, False) if the decomposition is
        degenerate

    Raises:
        NotDecomposedError: If lu is not an LUDecomposition
        DimensionError: If b has the wrong length
    """
    if not isinstance(lu, LUDecomposition):
        raise NotDecomposedError(
            f"lu: expected LUDecomposition from lu_factor_*, got {type(lu).__name__}"
        )
    if not lu.success:
        return None, False

    b_arr = _check_rhs(b, lu.n)
    return _substitute(lu.lu, lu.permutation, b_arr), True


def lu_determinant(lu: LUDecomposition) -> float:
    """
    Determinant of the decomposed matrix.

    det(A) = (-1)**swaps * prod(diag(U)). A degenerate decomposition has
    determinant 0 at the tolerance it was factored with.
    """
    if not isinstance(lu, LUDecomposition):
        raise NotDecomposedError(
            f"lu: expected LUDecomposition from lu_factor_*, got {type(lu).__name__}"
        )
    if not lu.success:
        return 0.0
    sign = -1.0 if lu.n_swaps % 2 else 1.0
    return sign * float(np.prod(np.diag(lu.lu)))


def lu_unpack(
    lu: LUDecomposition,
) -> tuple[NDArray[np.floating[Any]], NDArray[np.floating[Any]], NDArray[np.floating[Any]]]:
    """
    Expand combined factors into explicit matrices.

    Returns:
        (P, L, U) with P @ A == L @ U
    """
    if not isinstance(lu, LUDecomposition) or not lu.success:
        raise NotDecomposedError("lu_unpack requires a successful LUDecomposition")
    n = lu.n
    L = np.tril(lu.lu, k=-1) + np.eye(n)
    U = np.triu(lu.lu)
    P = np.zeros((n, n), dtype=lu.lu.dtype)
    P[np.arange(n), lu.permutation[:n]] = 1.0
    return P, L, U


# =====================================================================
# GPU
# =====================================================================


def lu_factor_gpu(
    A: 'torch.Tensor',
    tol: float = PIVOT_TOLERANCE,
) -> LUDecomposition:
    """
    LU decomposition with partial pivoting using PyTorch.

    Same elimination as lu_factor_cpu, one column at a time on the tensor's
    device. The pivot test synchronizes with the device once per column.

    Args:
        A: Square tensor (N x N) on the desired device. Not modified.
        tol: Pivot tolerance

    Returns:
        LUDecomposition with factors as a NumPy array (moved to CPU)
    """
    import torch

    tol = check_tolerance(tol)
    if A.ndim != 2 or A.shape[0] != A.shape[1]:
        raise DimensionError(f"A: expected square matrix, got shape {tuple(A.shape)}")
    if not A.is_floating_point():
        raise ValidationError(f"A: expected floating dtype, got {A.dtype}")
    if not bool(torch.isfinite(A).all().item()):
        raise ValidationError("A: contains non-finite values")

    work = A.clone()
    n = work.shape[0]
    perm = np.arange(n + 1, dtype=np.intp)
    failed_column = None

    for i in range(n):
        column = work[i:, i].abs()
        offset = int(torch.argmax(column).item())
        max_abs = float(column[offset].item())
        imax = i + offset

        if max_abs < tol or max_abs == 0.0:
            failed_column = i
            break

        if imax != i:
            perm[[i, imax]] = perm[[imax, i]]
            work[[i, imax]] = work[[imax, i]]
            perm[n] += 1

        work[i + 1:, i] /= work[i, i]
        work[i + 1:, i + 1:] -= torch.outer(work[i + 1:, i], work[i, i + 1:])

    return LUDecomposition(
        lu=work.cpu().numpy(),
        permutation=perm if failed_column is None else None,
        success=failed_column is None,
        tol=tol,
        failed_column=failed_column,
    )


def lu_solve_gpu(
    lu: LUDecomposition,
    b: 'torch.Tensor',
) -> tuple[NDArray[np.floating[Any]] | None, bool]:
    """
    Solve A·x = b on b's device.

    Substitution uses torch.linalg.solve_triangular on the unpacked factors
    with a unit-diagonal L.

    Returns:
        (x as NumPy array, True) on success, (None, False) if degenerate
    """
    import torch

    if not isinstance(lu, LUDecomposition):
        raise NotDecomposedError(
            f"lu: expected LUDecomposition from lu_factor_*, got {type(lu).__name__}"
        )
    if not lu.success:
        return None, False
    if b.ndim != 1 or b.shape[0] != lu.n:
        raise DimensionError(f"b: expected length {lu.n}, got shape {tuple(b.shape)}")

    factors = torch.from_numpy(lu.lu).to(dtype=b.dtype).to(b.device)
    index = torch.from_numpy(lu.permutation[:lu.n]).to(b.device)

    z = torch.linalg.solve_triangular(
        factors, b[index].unsqueeze(1), upper=False, unitriangular=True
    )
    x = torch.linalg.solve_triangular(factors, z, upper=True)

    return x.squeeze(1).cpu().numpy(), True
