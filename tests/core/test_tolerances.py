"""
Tests for tolerance constants and tier selection.
"""

import numpy as np

from pypolyfit.core.compute.tolerances import (
    CPU_FP64,
    CPU_FP64_ILL_CONDITIONED,
    FP32_PIVOT_TOLERANCE,
    GPU_FP32,
    GPU_FP64,
    PIVOT_TOLERANCE,
    select_tolerance,
)


def test_pivot_tolerance_value():
    assert PIVOT_TOLERANCE == 1e-12


def test_fp32_pivot_tolerance_above_float32_resolution():
    assert FP32_PIVOT_TOLERANCE > np.finfo(np.float32).eps


class TestSelectTolerance:

    def test_cpu(self):
        assert select_tolerance('cpu_lu') is CPU_FP64

    def test_cpu_ill_conditioned(self):
        assert select_tolerance('cpu_lu', is_ill_conditioned=True) is CPU_FP64_ILL_CONDITIONED

    def test_gpu_fp64(self):
        assert select_tolerance('gpu_lu_fp64') is GPU_FP64

    def test_gpu_fp32(self):
        assert select_tolerance('gpu_lu_fp32') is GPU_FP32

    def test_tiers_loosen(self):
        assert CPU_FP64.rtol < CPU_FP64_ILL_CONDITIONED.rtol
        assert GPU_FP64.rtol < GPU_FP32.rtol
