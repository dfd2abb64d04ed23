"""
Shared compute infrastructure for PyPolyfit.

This module provides hardware detection, timing utilities, tolerances and
linear algebra kernels shared by domain backends.

IMPORTANT: This is NOT where domain-specific backends live. Those go in
{domain}/backends/. This module contains shared NUMERIC infrastructure.

Submodules:
    device: Hardware detection and device selection
    timing: Execution timing utilities
    tolerances: Pivot tolerance and comparison tiers
    linalg: Linear algebra kernels (LU)
"""

from pypolyfit.core.compute.device import (
    DeviceInfo,
    detect_gpu,
    get_cpu_info,
    select_device,
)
from pypolyfit.core.compute.timing import Timer
from pypolyfit.core.compute.tolerances import PIVOT_TOLERANCE

__all__ = [
    # Device detection
    "DeviceInfo",
    "detect_gpu",
    "get_cpu_info",
    "select_device",
    # Timing
    "Timer",
    # Tolerances
    "PIVOT_TOLERANCE",
]
