import numbers
from dataclasses import dataclass
from typing import Hashable, Iterable, Tuple, Union


@dataclass(frozen=True)
class AlgorithmCandidate:
    """One algorithm offered by the accelerator library, with its measured cost."""

    algo: Hashable
    time_ms: float
    memory_bytes: int = 0

    def __post_init__(self):
        object.__setattr__(self, "time_ms", float(self.time_ms))
        object.__setattr__(self, "memory_bytes", int(self.memory_bytes))


@dataclass(frozen=True)
class MeasuredCost:
    value: float

    def __post_init__(self):
        object.__setattr__(self, "value", float(self.value))


@dataclass(frozen=True)
class AlgorithmCandidates:
    candidates: Tuple[AlgorithmCandidate, ...]

    def __post_init__(self):
        candidates = tuple(self.candidates)
        if not candidates:
            raise ValueError("AlgorithmCandidates requires at least one candidate")
        for c in candidates:
            if not isinstance(c, AlgorithmCandidate):
                raise TypeError(f"Expected AlgorithmCandidate, got {type(c).__name__}")
        object.__setattr__(self, "candidates", candidates)

    def best(self) -> AlgorithmCandidate:
        """Fastest candidate; ties go to the one needing less memory."""
        return min(self.candidates, key=lambda c: (c.time_ms, c.memory_bytes))


GPUResult = Union[MeasuredCost, AlgorithmCandidates]


def as_gpu_result(value) -> GPUResult:
    """Wraps a raw cost or a list of candidates in the matching result variant."""
    if isinstance(value, (MeasuredCost, AlgorithmCandidates)):
        return value
    if isinstance(value, numbers.Real) and not isinstance(value, bool):
        return MeasuredCost(value)
    if isinstance(value, Iterable) and not isinstance(value, (str, bytes)):
        return AlgorithmCandidates(tuple(value))
    raise TypeError(
        f"Expected a cost or a list of AlgorithmCandidate, got {type(value).__name__}"
    )
