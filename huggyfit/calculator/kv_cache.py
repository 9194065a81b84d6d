"""KV-cache memory formulas.

Two ways to size the KV cache for serving:

- precise: from the model's attention geometry (layers, heads, hidden size)
- estimated: from parameter count alone, for gated or config-less models
"""

from __future__ import annotations

from huggyfit.calculator.dtypes import DataType, bytes_per_param
from huggyfit.calculator.memory import round_half_up
from huggyfit.errors import DegenerateArchitectureError
from huggyfit.models.profiles import ArchitectureConfig

_GIB = 1024**3

# GB of KV cache per 1k tokens per user at fp16, by model size tier.
# (upper bound in billions of params, GB per 1k tokens)
_ESTIMATE_TIERS: list[tuple[float, float]] = [
    (7.0, 0.5),
    (20.0, 1.0),
]
_ESTIMATE_LARGE = 2.0


def precise_kv_cache_gb(
    config: ArchitectureConfig,
    users: int,
    context_length: int,
    dtype: DataType | str,
    model_id: str = "",
) -> float:
    """KV-cache GB from architecture metadata.

        kv = 2 * layers * seq_len * (hidden // heads * kv_heads) * 2

    scaled by bytes per param and user count.  The head dimension uses
    integer division, matching how frameworks size the projections.

    Raises:
        DegenerateArchitectureError: if heads, layers or hidden size are zero.
    """
    for field in ("num_attention_heads", "num_hidden_layers", "hidden_size"):
        if getattr(config, field) <= 0:
            raise DegenerateArchitectureError(model_id, field)

    kv_dim = config.hidden_size // config.num_attention_heads * config.num_key_value_heads
    kv_size = 2 * config.num_hidden_layers * context_length * kv_dim * 2

    memory_gb = (kv_size * bytes_per_param(dtype)) / _GIB
    return round_half_up(memory_gb * users, 2)


def estimate_kv_cache_gb(
    parameters_b: float,
    users: int,
    context_length: int,
    dtype: DataType | str,
) -> float:
    """KV-cache GB from parameter count alone.

    Small (< 7B): ~0.5 GB per 1k tokens, medium (< 20B): ~1 GB,
    large: ~2 GB.  Scaled linearly by context and user count, and by
    dtype width relative to fp16.
    """
    per_user = _ESTIMATE_LARGE
    for upper_bound, gb_per_1k in _ESTIMATE_TIERS:
        if parameters_b < upper_bound:
            per_user = gb_per_1k
            break

    per_user *= context_length / 1000.0
    per_user *= bytes_per_param(dtype) / bytes_per_param(DataType.FLOAT16)

    return round_half_up(per_user * users, 2)
