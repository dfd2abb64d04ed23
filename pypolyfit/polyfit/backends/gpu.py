"""
GPU backend for polynomial least squares using PyTorch.

The power-sum accumulation, which scales with the number of samples, runs
on the device; the (degree+1)² normal system is factored there too and
results come back as NumPy float64. Validated against the CPU reference.
Supports CUDA (Linux/Windows) and MPS (macOS Apple Silicon).
"""

import warnings
from typing import Any
import numpy as np

from pypolyfit.core.result import Result
from pypolyfit.core.compute.timing import Timer
from pypolyfit.core.compute.tolerances import PIVOT_TOLERANCE, FP32_PIVOT_TOLERANCE
from pypolyfit.core.compute.linalg.lu import lu_factor_gpu, lu_solve_gpu
from pypolyfit.core.validation import check_tolerance
from pypolyfit.polyfit.design import PolynomialDesign
from pypolyfit.polyfit.solution import PolyParams
from pypolyfit.polyfit.backends.cpu import (
    check_distinct_samples,
    check_normal_equations,
    fit_diagnostics,
    singular_error,
)


class GPULUBackend:
    """
    GPU backend using LU decomposition of the normal equations.

    FP64 by default: the normal equations square the condition number of
    the design, which float32 cannot absorb beyond low degrees. MPS has no
    float64, so it requires use_fp64=False and switches to the FP32 pivot
    tolerance.
    """

    def __init__(
        self,
        use_fp64: bool = True,
        device: str = 'cuda',
        tol: float | None = None,
    ):
        """
        Initialize GPU backend.

        Args:
            use_fp64: If True, compute in float64. MPS requires False.
            device: GPU device type ('cuda', 'cuda:0', 'mps')
            tol: Pivot tolerance. Defaults to PIVOT_TOLERANCE in FP64 and
                FP32_PIVOT_TOLERANCE in FP32.
        """
        import torch

        if device.startswith('cuda'):
            if not torch.cuda.is_available():
                raise RuntimeError(
                    "CUDA not available. Install PyTorch with CUDA support, "
                    "or use backend='cpu'."
                )
            self.device = torch.device(device)
            self.device_name = torch.cuda.get_device_name(self.device)

        elif device == 'mps':
            if not (hasattr(torch.backends, 'mps') and torch.backends.mps.is_available()):
                raise RuntimeError(
                    "MPS not available. Requires macOS with Apple Silicon "
                    "and PyTorch with MPS support."
                )
            if use_fp64:
                raise RuntimeError(
                    "MPS does not support float64. Use use_fp64=False "
                    "or use backend='cpu' for double precision."
                )
            self.device = torch.device('mps')
            self.device_name = 'Apple Silicon GPU (MPS)'

        else:
            raise ValueError(
                f"Unknown GPU device: {device!r}. Use 'cuda' or 'mps'."
            )

        self.use_fp64 = use_fp64
        self.dtype = torch.float64 if use_fp64 else torch.float32

        if tol is None:
            tol = PIVOT_TOLERANCE if use_fp64 else FP32_PIVOT_TOLERANCE
        self.tol = check_tolerance(tol)

        if not use_fp64:
            warnings.warn(
                "GPU polynomial fit running in float32; expect roughly "
                "3 significant digits and degenerate pivots for degree > 3.",
                stacklevel=2,
            )

    @property
    def name(self) -> str:
        precision = "fp64" if self.use_fp64 else "fp32"
        return f'gpu_lu_{precision}'

    def solve(self, design: PolynomialDesign) -> Result[PolyParams]:
        """
        Fit the polynomial on the GPU.

        Args:
            design: Validated polynomial design

        Returns:
            Result[PolyParams] with NumPy float64 arrays

        Raises:
            SingularMatrixError: If x has fewer than degree+1 distinct values
                or a pivot falls below tolerance
            NumericalError: If the power sums overflow
        """
        import torch

        check_distinct_samples(design, self.tol)

        timer = Timer(sync_cuda=self.device.type == 'cuda')
        timer.start()

        with timer.section('data_transfer_to_gpu'):
            x = torch.from_numpy(design.x).to(device=self.device, dtype=self.dtype)
            y = torch.from_numpy(design.y).to(device=self.device, dtype=self.dtype)

        # === Normal Equations ===
        with timer.section('normal_equations'):
            n_coef, n_power = design.n_coef, design.n_power
            ladder = torch.ones_like(x)
            sums = []
            xy_terms = []
            for j in range(n_power):
                if j < n_coef:
                    xy_terms.append(y @ ladder)
                sums.append(ladder.sum())
                ladder = ladder * x
            sums_t = torch.stack(sums)
            xy = torch.stack(xy_terms)
            idx = torch.arange(n_coef, device=self.device)
            xx = sums_t[idx.unsqueeze(1) + idx.unsqueeze(0)]

        check_normal_equations(xx.cpu().numpy(), xy.cpu().numpy(), design)

        # === Decomposition ===
        with timer.section('decomposition'):
            lu = lu_factor_gpu(xx, tol=self.tol)

        if not lu.success:
            timer.stop()
            raise singular_error(lu, design)

        # === Substitution ===
        with timer.section('substitution'):
            coef_np, _ = lu_solve_gpu(lu, xy)

        with timer.section('residuals'):
            coef_gpu = torch.from_numpy(coef_np).to(self.device)
            fitted_gpu = torch.zeros_like(x)
            for c in torch.flip(coef_gpu, dims=(0,)):
                fitted_gpu = fitted_gpu * x + c
            residuals_gpu = y - fitted_gpu

        with timer.section('data_transfer_to_cpu'):
            coefficients = coef_np.astype(np.float64)
            fitted_values = fitted_gpu.cpu().numpy().astype(np.float64)
            residuals = residuals_gpu.cpu().numpy().astype(np.float64)

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
            'device': str(self.device),
            'dtype': str(self.dtype),
            'device_name': self.device_name,
        }

        return Result(
            params=params,
            info=info,
            timing=timer.result(),
            backend_name=self.name,
            warnings=tuple(warnings_list),
        )
