"""Output models for memory calculations.

These models carry computed figures from the calculator to the
report renderer and the TUI.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field

from huggyfit.calculator.dtypes import DataType


class CalculationMethod(str, Enum):
    """Which path produced a KV-cache figure."""

    PRECISE = "precise"
    ESTIMATED = "estimated"


class MemoryEstimate(BaseModel):
    """Serving memory for one data type at one configuration."""

    data_type: DataType
    base_gb: float
    kv_cache_gb: float | None = None  # None while the calculation is pending
    users: int = Field(default=1, ge=1)
    context_length: int = Field(default=4096, ge=1)
    method: CalculationMethod | None = None

    @property
    def is_pending(self) -> bool:
        return self.kv_cache_gb is None

    @property
    def total_gb(self) -> float:
        return self.base_gb + (self.kv_cache_gb or 0.0)

    @property
    def per_user_gb(self) -> float:
        return (self.kv_cache_gb or 0.0) / self.users


class MemoryReport(BaseModel):
    """Everything the one-shot report prints for a model."""

    model_id: str
    author: str = ""
    parameters_b: float
    downloads: int = 0
    likes: int = 0
    users: int
    context_length: int
    estimate: MemoryEstimate
