"""
Tolerances for decomposition and numerical comparison.

PIVOT_TOLERANCE is the absolute threshold below which a pivot candidate
is treated as zero during LU decomposition. The tiers describe how close
results from each compute path are expected to be to an exact answer, and
are used by the test suite.
"""

from dataclasses import dataclass


# Pivot magnitudes below this value mark the matrix as degenerate.
PIVOT_TOLERANCE = 1e-12

# Ratio max|U_ii| / min|U_ii| above which a successful fit is flagged as
# ill-conditioned. cond(X'X) = cond(X)^2, so 1e12 leaves roughly four
# significant digits in the coefficients.
ILL_CONDITIONED_PIVOT_RATIO = 1e12


@dataclass(frozen=True)
class ToleranceTier:
    """Tolerance specification for numerical comparison."""
    rtol: float
    atol: float
    name: str
    description: str


# CPU reference on well-conditioned problems (low degree, spread-out x)
CPU_FP64 = ToleranceTier(
    rtol=1e-9,
    atol=1e-9,
    name='cpu_fp64',
    description='CPU double precision, well-conditioned normal equations',
)

# CPU reference when the pivot ratio is large (high degree, clustered x)
CPU_FP64_ILL_CONDITIONED = ToleranceTier(
    rtol=1e-4,
    atol=1e-6,
    name='cpu_fp64_ill_conditioned',
    description='CPU double precision, ill-conditioned normal equations',
)

# GPU with FP64 (CUDA)
GPU_FP64 = ToleranceTier(
    rtol=1e-9,
    atol=1e-9,
    name='gpu_fp64',
    description='GPU double precision, matches CPU reference',
)

# GPU with FP32 (MPS or explicit request)
GPU_FP32 = ToleranceTier(
    rtol=1e-3,
    atol=1e-3,
    name='gpu_fp32',
    description='GPU single precision, low degree only',
)

# Pivot tolerance used for FP32 decompositions. 1e-12 is below float32
# resolution, so cancellation noise would pass as a pivot.
FP32_PIVOT_TOLERANCE = 1e-6


def select_tolerance(
    backend_name: str,
    is_ill_conditioned: bool = False,
) -> ToleranceTier:
    """Select appropriate tolerance tier for a given backend."""
    if 'gpu' in backend_name:
        if 'fp32' in backend_name:
            return GPU_FP32
        return GPU_FP64
    if is_ill_conditioned:
        return CPU_FP64_ILL_CONDITIONED
    return CPU_FP64
