# Expose main components for easy access
from .ir.dtypes import DType, Backend, LayoutFormat
from .ir.io_config import IOConfig, TensorLocation
from .ir.signature import CPUKernelSignature, GPUKernelSignature, kernel_signature
from .cache import (
    CacheKey,
    CPUKernelCache,
    GPUKernelCache,
    AlgorithmCandidate,
    FormatMismatchError,
    MissingKeyError,
)
from .benchmark.env import current_environment_context
from .benchmark.profiler import ProfilingSession
