from dataclasses import dataclass
from enum import Enum
from typing import Tuple


class TensorLocation(Enum):
    DRAM = "dram"  # Host memory
    PMEM = "pmem"  # Persistent memory
    DEVICE = "device"  # Accelerator memory


@dataclass(frozen=True)
class IOConfig:
    """
    Memory placement of each input and output tensor of a kernel.

    Paired with a KernelSignature to form a cache key. The caches accept any
    hashable value in this position; this is the one the profiler uses.
    """

    inputs: Tuple[TensorLocation, ...]
    outputs: Tuple[TensorLocation, ...]

    def __post_init__(self):
        object.__setattr__(self, "inputs", tuple(TensorLocation(x) for x in self.inputs))
        object.__setattr__(
            self, "outputs", tuple(TensorLocation(x) for x in self.outputs)
        )

    @classmethod
    def uniform(
        cls, num_inputs: int, num_outputs: int, location: TensorLocation
    ) -> "IOConfig":
        return cls((location,) * num_inputs, (location,) * num_outputs)

    def __repr__(self):
        ins = ",".join(x.value for x in self.inputs)
        outs = ",".join(x.value for x in self.outputs)
        return f"<IO ({ins}) -> ({outs})>"
