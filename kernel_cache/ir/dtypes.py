from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Any, Union

import numpy as np


class DType(Enum):
    FP64 = "float64"
    FP32 = "float32"
    FP16 = "float16"
    BF16 = "bfloat16"
    INT64 = "int64"
    INT32 = "int32"
    INT16 = "int16"
    INT8 = "int8"
    UINT64 = "uint64"
    UINT32 = "uint32"
    UINT16 = "uint16"
    UINT8 = "uint8"
    BOOL = "bool"

    @property
    def itemsize(self) -> int:
        """Returns the number of bytes per element."""
        return {
            DType.FP64: 8,
            DType.FP32: 4,
            DType.FP16: 2,
            DType.BF16: 2,
            DType.INT64: 8,
            DType.INT32: 4,
            DType.INT16: 2,
            DType.INT8: 1,
            DType.UINT64: 8,
            DType.UINT32: 4,
            DType.UINT16: 2,
            DType.UINT8: 1,
            DType.BOOL: 1,
        }[self]

    @classmethod
    def canonicalize(cls, value: Any) -> "DType":
        """
        Maps an element type tag from a foreign framework onto a DType.

        Accepts DType members, their string values ("float32"), torch-style
        names ("torch.float32") and anything numpy understands as a dtype.
        """
        if isinstance(value, DType):
            return value
        if value is None:
            raise ValueError("Element type is undefined")

        if isinstance(value, str) or hasattr(value, "is_floating_point"):
            name = str(value).rsplit(".", 1)[-1].lower()
            try:
                return cls(name)
            except ValueError:
                pass

        try:
            name = np.dtype(value).name
        except TypeError:
            raise ValueError(f"Unrecognized element type: {value!r}") from None

        try:
            return cls(name)
        except ValueError:
            raise ValueError(f"Unsupported element type: {value!r}") from None


class Backend(Enum):
    CPU = "cpu"
    GPU = "gpu"


class LayoutFormat(IntEnum):
    """
    Fixed enumeration of hardware memory layouts an optimized CPU kernel may
    consume. Codes are part of the on-disk format and must never be reused.
    """

    UNDEF = 0
    ANY = 1
    BLOCKED = 2
    X = 3
    NC = 4
    NCHW = 5
    NHWC = 6
    CHWN = 7
    NCHW8C = 8
    NCHW16C = 9
    NCDHW = 10
    NDHWC = 11
    NCDHW16C = 12
    OI = 13
    IO = 14
    OIHW = 15
    IHWO = 16
    HWIO = 17
    OIHW8I8O = 18
    OIHW16I16O = 19
    OIHW8O8I = 20
    OIHW16O16I = 21
    GOIHW = 22
    GOIHW16I16O = 23
    TNC = 24
    NTC = 25
    LDSNC = 26
    LDIGO = 27
    LDGOI = 28
    LDGO = 29


# Native identifiers differ in case between library releases ("nChw16c").
_LAYOUT_NAMES = {member.name.lower(): member for member in LayoutFormat}


@dataclass(frozen=True)
class UnknownLayout:
    """
    A layout identifier missing from the LayoutFormat table. The normalized
    raw value is kept so distinct unknown layouts never share a cache key.
    """

    raw: Union[str, int]

    @property
    def name(self) -> str:
        return f"unknown({self.raw!r})"


Layout = Union[LayoutFormat, UnknownLayout]


def canonical_layout(value: Any) -> Layout:
    """
    Converts a raw layout identifier into a LayoutFormat.

    Strings of the form "<prefix>:<format>" are reduced to the part after the
    last colon and matched case-insensitively. Integers are interpreted as
    LayoutFormat codes. Identifiers not in the table become an UnknownLayout
    carrying the normalized string or integer.
    """
    if isinstance(value, (LayoutFormat, UnknownLayout)):
        return value

    if isinstance(value, str):
        name = value.rsplit(":", 1)[-1].strip().lower()
        member = _LAYOUT_NAMES.get(name)
        return member if member is not None else UnknownLayout(name)

    if isinstance(value, (int, np.integer)) and not isinstance(value, (bool, np.bool_)):
        try:
            return LayoutFormat(int(value))
        except ValueError:
            return UnknownLayout(int(value))

    raise TypeError(f"Layout identifiers are strings or integers, got {value!r}")
