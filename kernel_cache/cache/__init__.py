from .errors import KernelCacheError, FormatMismatchError, MissingKeyError
from .results import AlgorithmCandidate, AlgorithmCandidates, MeasuredCost
from .store import CacheKey, KernelCache, CPUKernelCache, GPUKernelCache
from .persistence import open_cache, save, load_partitions, default_cache_path

__all__ = [
    "KernelCacheError",
    "FormatMismatchError",
    "MissingKeyError",
    "AlgorithmCandidate",
    "AlgorithmCandidates",
    "MeasuredCost",
    "CacheKey",
    "KernelCache",
    "CPUKernelCache",
    "GPUKernelCache",
    "open_cache",
    "save",
    "load_partitions",
    "default_cache_path",
]
