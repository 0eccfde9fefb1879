from .dtypes import DType, Backend, LayoutFormat, UnknownLayout, canonical_layout
from .io_config import IOConfig, TensorLocation
from .signature import (
    KernelNode,
    CPUKernelNode,
    KernelSignature,
    CPUKernelSignature,
    GPUKernelSignature,
    kernel_signature,
)

__all__ = [
    "DType",
    "Backend",
    "LayoutFormat",
    "UnknownLayout",
    "canonical_layout",
    "IOConfig",
    "TensorLocation",
    "KernelNode",
    "CPUKernelNode",
    "KernelSignature",
    "CPUKernelSignature",
    "GPUKernelSignature",
    "kernel_signature",
]
