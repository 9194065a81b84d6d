"""Input profiles for memory calculations.

These models represent what the calculator consumes: the model's
architecture metadata, its directory summary, and the configuration
key that identifies a single memory figure.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from huggyfit.calculator.dtypes import DataType, normalize


class ArchitectureConfig(BaseModel):
    """Attention geometry pulled from a HuggingFace config.json.

    Immutable once built: a model's architecture never changes for a
    given identifier.
    """

    model_config = ConfigDict(frozen=True)

    hidden_size: int = Field(ge=0)
    num_attention_heads: int = Field(ge=0)
    num_hidden_layers: int = Field(ge=0)
    num_key_value_heads: int = Field(default=0, ge=0)  # 0 = not reported, MHA

    @model_validator(mode="before")
    @classmethod
    def _default_kv_heads(cls, data: Any) -> Any:
        # Models without GQA omit num_key_value_heads; treat as MHA
        if isinstance(data, dict) and not data.get("num_key_value_heads"):
            data = {**data, "num_key_value_heads": data.get("num_attention_heads", 0)}
        return data

    @property
    def head_dim(self) -> int:
        return self.hidden_size // self.num_attention_heads

    @classmethod
    def from_hf_config(cls, config: dict[str, Any]) -> ArchitectureConfig:
        """Build from a raw config.json dict (handles varying key names)."""
        # Multimodal wrappers nest the language model under text_config
        text_config = config.get("text_config")
        if isinstance(text_config, dict) and "hidden_size" in text_config:
            config = text_config

        num_attention_heads = config.get("num_attention_heads", config.get("n_head", 0))
        num_kv_heads = config.get(
            "num_key_value_heads",
            config.get("num_kv_heads", config.get("multi_query_group_num", 0)),
        )
        return cls(
            hidden_size=config.get("hidden_size", config.get("d_model", 0)) or 0,
            num_attention_heads=num_attention_heads or 0,
            num_hidden_layers=config.get("num_hidden_layers", config.get("n_layer", 0)) or 0,
            num_key_value_heads=num_kv_heads or 0,
        )


class CalculationKey(BaseModel):
    """Identity of one memory figure: model x users x context x dtype."""

    model_config = ConfigDict(frozen=True)

    model_id: str
    users: int = Field(ge=1)
    context_length: int = Field(ge=1)
    data_type: DataType

    @field_validator("data_type", mode="before")
    @classmethod
    def _normalize_data_type(cls, value: Any) -> DataType:
        return normalize(value)


class ModelSummary(BaseModel):
    """Directory metadata for a model, as shown in the details view."""

    model_id: str
    author: str = ""
    parameters_b: float = Field(gt=0)  # total params / 1e9
    downloads: int = 0
    likes: int = 0
    fetched_at: datetime = Field(default_factory=datetime.now)
