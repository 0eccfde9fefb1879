import hashlib
from dataclasses import dataclass, fields
from typing import Any, Protocol, Sequence, Tuple

import numpy as np

from .dtypes import Backend, DType, Layout, canonical_layout

Shape = Tuple[int, ...]


class KernelNode(Protocol):
    """
    Read-only view of an operator-graph node.

    Adapters for a concrete graph library implement this; nothing in this
    package looks past these accessors. Port indices are zero based.
    """

    def description(self) -> str: ...

    def input_port_count(self) -> int: ...

    def output_port_count(self) -> int: ...

    def input_shape(self, port: int) -> Sequence[int]: ...

    def output_shape(self, port: int) -> Sequence[int]: ...

    def input_element_type(self, port: int) -> Any: ...

    def output_element_type(self, port: int) -> Any: ...


class CPUKernelNode(KernelNode, Protocol):
    def is_hardware_optimized(self) -> bool: ...

    def layout_format(self, port: int) -> Any: ...


def _canonical_shape(shape: Sequence[Any]) -> Shape:
    dims = []
    for d in shape:
        if d is None:
            raise ValueError(f"Cannot build a kernel signature for dynamic shape: {shape}")
        if isinstance(d, (bool, np.bool_)) or not isinstance(d, (int, np.integer)):
            raise ValueError(f"Shape dimensions must be integers, got {d!r} in {shape}")
        if d <= 0:
            raise ValueError(f"Shape dimensions must be positive, got {shape}")
        dims.append(int(d))
    return tuple(dims)


def _canonical_shapes(shapes: Sequence[Sequence[Any]]) -> Tuple[Shape, ...]:
    return tuple(_canonical_shape(s) for s in shapes)


def _canonical_types(types: Sequence[Any]) -> Tuple[DType, ...]:
    return tuple(DType.canonicalize(t) for t in types)


@dataclass(frozen=True)
class KernelSignature:
    """
    Shape and type profile of one kernel instance.

    Two signatures compare equal only if every field matches element-wise,
    including port order. Instances are hashable and safe to use as dict keys.
    """

    description: str
    input_sizes: Tuple[Shape, ...]
    output_sizes: Tuple[Shape, ...]
    input_types: Tuple[DType, ...]
    output_types: Tuple[DType, ...]

    def __post_init__(self):
        object.__setattr__(self, "description", str(self.description))
        object.__setattr__(self, "input_sizes", _canonical_shapes(self.input_sizes))
        object.__setattr__(self, "output_sizes", _canonical_shapes(self.output_sizes))
        object.__setattr__(self, "input_types", _canonical_types(self.input_types))
        object.__setattr__(self, "output_types", _canonical_types(self.output_types))

        if len(self.input_sizes) != len(self.input_types):
            raise ValueError(
                f"{self.description}: {len(self.input_sizes)} input shapes but "
                f"{len(self.input_types)} input types"
            )
        if len(self.output_sizes) != len(self.output_types):
            raise ValueError(
                f"{self.description}: {len(self.output_sizes)} output shapes but "
                f"{len(self.output_types)} output types"
            )

    @property
    def num_inputs(self) -> int:
        return len(self.input_sizes)

    @property
    def num_outputs(self) -> int:
        return len(self.output_sizes)

    def _canonical_text(self) -> str:
        parts = [type(self).__name__]
        for f in fields(self):
            value = getattr(self, f.name)
            if f.name.endswith("_types"):
                value = [t.value for t in value]
            elif f.name == "input_layout_formats":
                value = [code.name for code in value]
            parts.append(f"{f.name}={value}")
        return "|".join(parts)

    def digest(self) -> str:
        """Stable hex digest for reports and file names; not used for lookup."""
        return hashlib.sha256(self._canonical_text().encode("utf-8")).hexdigest()

    def __repr__(self):
        ins = ", ".join(
            f"{t.value}{list(s)}" for s, t in zip(self.input_sizes, self.input_types)
        )
        outs = ", ".join(
            f"{t.value}{list(s)}" for s, t in zip(self.output_sizes, self.output_types)
        )
        return f"{type(self).__name__}({self.description}: ({ins}) -> ({outs}))"


@dataclass(frozen=True, repr=False)
class GPUKernelSignature(KernelSignature):
    @classmethod
    def from_node(cls, node: KernelNode) -> "GPUKernelSignature":
        description, input_sizes, output_sizes, input_types, output_types = _read_ports(
            node
        )
        return cls(description, input_sizes, output_sizes, input_types, output_types)


@dataclass(frozen=True, repr=False)
class CPUKernelSignature(KernelSignature):
    # Layout codes are only recorded for hardware optimized kernels.
    is_hardware_optimized: bool = False
    input_layout_formats: Tuple[Layout, ...] = ()

    def __post_init__(self):
        super().__post_init__()
        object.__setattr__(
            self, "is_hardware_optimized", bool(self.is_hardware_optimized)
        )
        if not self.is_hardware_optimized:
            object.__setattr__(self, "input_layout_formats", ())
            return

        formats = tuple(canonical_layout(code) for code in self.input_layout_formats)
        if len(formats) != self.num_inputs:
            raise ValueError(
                f"{self.description}: expected {self.num_inputs} layout formats, "
                f"got {len(formats)}"
            )
        object.__setattr__(self, "input_layout_formats", formats)

    @classmethod
    def from_node(cls, node: CPUKernelNode) -> "CPUKernelSignature":
        description, input_sizes, output_sizes, input_types, output_types = _read_ports(
            node
        )
        optimized = bool(node.is_hardware_optimized())
        formats: Tuple[Any, ...] = ()
        if optimized:
            formats = tuple(
                node.layout_format(i) for i in range(node.input_port_count())
            )
        return cls(
            description,
            input_sizes,
            output_sizes,
            input_types,
            output_types,
            is_hardware_optimized=optimized,
            input_layout_formats=formats,
        )

    def __repr__(self):
        base = super().__repr__()
        if not self.is_hardware_optimized:
            return base
        layouts = ",".join(f.name.lower() for f in self.input_layout_formats)
        return f"{base[:-1]} @ [{layouts}])"


def _read_ports(node: KernelNode):
    num_inputs = node.input_port_count()
    num_outputs = node.output_port_count()

    input_sizes = tuple(node.input_shape(i) for i in range(num_inputs))
    input_types = tuple(node.input_element_type(i) for i in range(num_inputs))
    output_sizes = tuple(node.output_shape(i) for i in range(num_outputs))
    output_types = tuple(node.output_element_type(i) for i in range(num_outputs))

    return node.description(), input_sizes, output_sizes, input_types, output_types


def kernel_signature(backend: Backend, node: KernelNode) -> KernelSignature:
    """Extract the kernel signature of `node` for the given backend."""
    if backend == Backend.CPU:
        return CPUKernelSignature.from_node(node)
    if backend == Backend.GPU:
        return GPUKernelSignature.from_node(node)
    raise ValueError(f"No kernel signature defined for backend: {backend}")
