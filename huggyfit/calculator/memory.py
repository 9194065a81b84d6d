"""Base model memory for serving.

    M = (P * 4B) / (32 / Q) * 1.18

where P is the parameter count in billions, 4B is four bytes per
parameter, Q is the quantization width in bits, and 1.18 covers ~18%
overhead for CUDA context, activations, and allocator slack.
"""

from __future__ import annotations

import math

from huggyfit.calculator.dtypes import DataType, bytes_per_param

_BYTES_PER_PARAMETER = 4
_BITS_PER_BYTE = 8
_BITS_IN_WORD = 32
OVERHEAD_FACTOR = 1.18


def round_half_up(value: float, decimals: int = 2) -> float:
    """Round to *decimals* places, halves away from zero for positive values."""
    multiplier = 10**decimals
    return math.floor(value * multiplier + 0.5) / multiplier


def base_memory_gb(parameters_b: float, dtype: DataType | str) -> float:
    """GPU memory (GB) to hold the weights of a *parameters_b* model in *dtype*."""
    quantization_bits = bytes_per_param(dtype) * _BITS_PER_BYTE
    memory = (
        (parameters_b * _BYTES_PER_PARAMETER)
        / (_BITS_IN_WORD / quantization_bits)
        * OVERHEAD_FACTOR
    )
    return round_half_up(memory, 2)
