import time
from typing import Any, Callable, Hashable, Iterable, List, Optional, Tuple, Type

import numpy as np
from tqdm import tqdm

from ..cache.store import CacheKey, KernelCache
from ..config import DEBUG_CACHE, PROFILER_REPEATS, PROFILER_WARMUPS
from ..ir.signature import KernelSignature

MeasureFn = Callable[[KernelSignature, Hashable], Any]


def time_kernel(
    fn: Callable[[], Any],
    warmups: int = PROFILER_WARMUPS,
    repeats: int = PROFILER_REPEATS,
) -> float:
    """Median wall time of `fn` in milliseconds."""
    if repeats < 1:
        raise ValueError(f"repeats must be at least 1, got {repeats}")

    # Warmup
    for _ in range(warmups):
        fn()

    # Benchmark
    timings = []
    for _ in range(repeats):
        start = time.perf_counter()
        fn()
        timings.append((time.perf_counter() - start) * 1000)

    return float(np.median(timings))


class KernelProfiler:
    """
    Memoizes a measurement routine in a kernel cache. `measure` is only called
    for keys the cache does not know yet.
    """

    def __init__(self, cache: KernelCache, measure: MeasureFn):
        self.cache = cache
        self.measure = measure
        self.hits = 0
        self.misses = 0

    def profile(self, signature: KernelSignature, io_config: Hashable) -> Any:
        key = CacheKey(signature, io_config)
        if key in self.cache:
            self.hits += 1
            return self.cache[key]

        self.misses += 1
        if DEBUG_CACHE:
            print(f"[Profiler] Measuring {signature} {io_config!r}")
        self.cache[key] = self.measure(signature, io_config)
        return self.cache[key]

    def profile_many(
        self, items: Iterable[Tuple[KernelSignature, Hashable]], desc: str = "Profiling"
    ) -> List[Any]:
        items = list(items)
        return [
            self.profile(signature, io_config)
            for signature, io_config in tqdm(items, desc=desc, disable=not items)
        ]


class ProfilingSession:
    """
    Owns one kernel cache for the duration of a profiling run.

    The cache is opened on enter and saved on a clean exit. With `save_every`,
    it is also saved after every `save_every` new measurements so a long run
    that dies keeps most of its work.
    """

    def __init__(
        self,
        cache_cls: Type[KernelCache],
        file,
        measure: MeasureFn,
        force_new: bool = False,
        context: Hashable = None,
        save_every: Optional[int] = None,
    ):
        if save_every is not None and save_every < 1:
            raise ValueError(f"save_every must be at least 1, got {save_every}")
        self.cache_cls = cache_cls
        self.file = file
        self.measure = measure
        self.force_new = force_new
        self.context = context
        self.save_every = save_every
        self.profiler: Optional[KernelProfiler] = None
        self._unsaved = 0

    @property
    def cache(self) -> KernelCache:
        if self.profiler is None:
            raise RuntimeError("ProfilingSession is not open")
        return self.profiler.cache

    def open(self) -> "ProfilingSession":
        cache = self.cache_cls.open(
            self.file, force_new=self.force_new, context=self.context
        )
        self.profiler = KernelProfiler(cache, self.measure)
        self._unsaved = 0
        return self

    def save(self) -> None:
        self.cache.save(context=self.context)
        self._unsaved = 0

    def profile(self, signature: KernelSignature, io_config: Hashable) -> Any:
        if self.profiler is None:
            raise RuntimeError("ProfilingSession is not open")
        misses = self.profiler.misses
        result = self.profiler.profile(signature, io_config)
        if self.profiler.misses != misses:
            self._unsaved += 1
            if self.save_every is not None and self._unsaved >= self.save_every:
                self.save()
        return result

    def __enter__(self) -> "ProfilingSession":
        return self.open()

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type is None:
            self.save()
        elif DEBUG_CACHE:
            print(f"[Profiler] Not saving {self.file} after {exc_type.__name__}")
        return False
