"""Quantization data type registry.

Maps every accepted spelling of a data type to its canonical form and
its storage width in bytes per parameter.  All lookups -- byte widths,
cache keys, display -- go through the canonical form.
"""

from __future__ import annotations

from enum import Enum

from huggyfit.errors import UnsupportedDataTypeError


class DataType(str, Enum):
    """Supported serving precisions."""

    FLOAT16 = "float16"
    INT8 = "int8"
    INT4 = "int4"


# Bytes per parameter for each canonical dtype
_DTYPE_BYTES: dict[DataType, float] = {
    DataType.FLOAT16: 2.0,
    DataType.INT8: 1.0,
    DataType.INT4: 0.5,
}

# Aliases: people type these in many ways
_ALIASES: dict[str, DataType] = {
    "float16": DataType.FLOAT16,
    "fp16": DataType.FLOAT16,
    "f16": DataType.FLOAT16,
    "half": DataType.FLOAT16,
    "int8": DataType.INT8,
    "q8": DataType.INT8,
    "int4": DataType.INT4,
    "q4": DataType.INT4,
}


def normalize(raw: DataType | str) -> DataType:
    """Map any accepted alias to its canonical DataType.

    Raises UnsupportedDataTypeError listing the accepted spellings.
    """
    if isinstance(raw, DataType):
        return raw

    key = str(raw).lower().strip()
    if key in _ALIASES:
        return _ALIASES[key]

    raise UnsupportedDataTypeError(str(raw), sorted(_ALIASES.keys()))


def is_supported(raw: DataType | str) -> bool:
    """True if *raw* names a known data type (in any spelling)."""
    try:
        normalize(raw)
    except UnsupportedDataTypeError:
        return False
    return True


def bytes_per_param(dtype: DataType | str) -> float:
    """Storage width for one parameter, in bytes."""
    return _DTYPE_BYTES[normalize(dtype)]


def supported_types() -> list[DataType]:
    """Canonical data types in display order (widest first)."""
    return list(_DTYPE_BYTES.keys())
