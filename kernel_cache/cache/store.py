import numbers
import os
from abc import ABC, abstractmethod
from typing import Any, Dict, Hashable, Iterator, NamedTuple, Optional, Type

from ..ir.signature import CPUKernelSignature, GPUKernelSignature, KernelSignature
from .errors import FormatMismatchError, MissingKeyError
from .results import AlgorithmCandidate, AlgorithmCandidates, MeasuredCost, as_gpu_result


class CacheKey(NamedTuple):
    signature: KernelSignature
    io_config: Hashable


class KernelCache(ABC):
    """
    In-memory map from (signature, io config) to a measured result, bound to
    the file it is persisted in.

    Subclasses fix the signature variant they accept and how raw results are
    coerced before storage. Lookups, membership tests and removal never raise
    for a key that is not present.
    """

    kind: str = ""
    signature_type: Type[KernelSignature] = KernelSignature

    def __init__(self, file, entries: Optional[Dict[Any, Any]] = None):
        self.file = os.fspath(file)
        self.entries: Dict[CacheKey, Any] = {}
        if entries:
            for key, value in entries.items():
                self.insert_or_update(key, value)

    # --- Keys & values ---

    def _key(self, key) -> CacheKey:
        try:
            signature, io_config = key
        except (TypeError, ValueError):
            raise TypeError(
                f"Cache keys are (signature, io_config) pairs, got {key!r}"
            ) from None
        if not isinstance(signature, self.signature_type):
            raise TypeError(
                f"{type(self).__name__} keys need a {self.signature_type.__name__}, "
                f"got {type(signature).__name__}"
            )
        hash(io_config)
        return CacheKey(signature, io_config)

    @abstractmethod
    def _coerce(self, value: Any) -> Any:
        """Validates a raw result and converts it to the stored form."""

    # --- Operations ---

    def lookup(self, key) -> Optional[Any]:
        return self.entries.get(self._key(key))

    def contains(self, key) -> bool:
        return self._key(key) in self.entries

    def insert_or_update(self, key, value) -> None:
        self.entries[self._key(key)] = self._coerce(value)

    def remove(self, key) -> None:
        self.entries.pop(self._key(key), None)

    # --- Mapping protocol ---

    def __getitem__(self, key) -> Any:
        k = self._key(key)
        try:
            return self.entries[k]
        except KeyError:
            raise MissingKeyError(
                f"No cached result for {k.signature} / {k.io_config!r}"
            ) from None

    def __setitem__(self, key, value) -> None:
        self.insert_or_update(key, value)

    def __delitem__(self, key) -> None:
        self.remove(key)

    def __contains__(self, key) -> bool:
        return self.contains(key)

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[CacheKey]:
        return iter(self.entries)

    def keys(self):
        return self.entries.keys()

    def items(self):
        return self.entries.items()

    # --- Serialization ---

    def snapshot(self) -> Dict[str, Any]:
        """
        Detached payload written to disk. The entries dict is copied so that
        serialising it never touches the live mapping.
        """
        return {"kind": self.kind, "file": self.file, "entries": dict(self.entries)}

    @classmethod
    def from_snapshot(cls, payload: Any, file=None) -> "KernelCache":
        if not isinstance(payload, dict) or payload.get("kind") != cls.kind:
            found = (
                payload.get("kind") if isinstance(payload, dict) else type(payload).__name__
            )
            raise FormatMismatchError(
                f"Expected a '{cls.kind}' kernel cache partition, found {found!r}"
            )
        entries = payload.get("entries")
        if not isinstance(entries, dict):
            raise FormatMismatchError(
                f"'{cls.kind}' kernel cache partition has no entry table"
            )
        try:
            return cls(file if file is not None else payload["file"], entries)
        except (TypeError, ValueError) as e:
            raise FormatMismatchError(
                f"Corrupt '{cls.kind}' kernel cache entry: {e}"
            ) from e

    @classmethod
    def open(cls, file, force_new: bool = False, context: Hashable = None):
        from .persistence import open_cache

        return open_cache(cls, file, force_new=force_new, context=context)

    def save(self, context: Hashable = None) -> None:
        from .persistence import save

        save(self, context=context)

    def __repr__(self):
        return f"{type(self).__name__}({self.file!r}, {len(self)} entries)"


class CPUKernelCache(KernelCache):
    """Measured run time of CPU kernels."""

    kind = "cpu"
    signature_type = CPUKernelSignature

    def _coerce(self, value: Any) -> float:
        if isinstance(value, bool) or not isinstance(value, numbers.Real):
            raise TypeError(f"CPU kernel results are costs, got {type(value).__name__}")
        return float(value)


class GPUKernelCache(KernelCache):
    """
    GPU kernel results. A kernel either has a single measured cost or, when the
    library lets us pick the algorithm, the list of candidates it offered.
    """

    kind = "gpu"
    signature_type = GPUKernelSignature

    def _coerce(self, value: Any):
        return as_gpu_result(value)

    def can_select_algorithm(self, key) -> bool:
        result = self[key]
        if isinstance(result, AlgorithmCandidates):
            return True
        if isinstance(result, MeasuredCost):
            return False
        raise TypeError(f"Unexpected GPU cache result: {type(result).__name__}")

    def best_algorithm(self, key) -> AlgorithmCandidate:
        result = self[key]
        if isinstance(result, AlgorithmCandidates):
            return result.best()
        if isinstance(result, MeasuredCost):
            raise ValueError(f"Kernel {key[0]} has no algorithm candidates")
        raise TypeError(f"Unexpected GPU cache result: {type(result).__name__}")

