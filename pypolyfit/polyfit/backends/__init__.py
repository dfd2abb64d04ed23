"""
Polynomial fit backends.

Available backends:
    CPULUBackend: CPU reference implementation (NumPy, float64)
    GPULUBackend: PyTorch implementation (imported on demand, needs torch)
"""

from pypolyfit.polyfit.backends.cpu import CPULUBackend

__all__ = [
    "CPULUBackend",
]
