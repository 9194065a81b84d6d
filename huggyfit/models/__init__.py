from huggyfit.models.profiles import (
    ArchitectureConfig,
    CalculationKey,
    ModelSummary,
)
from huggyfit.models.results import (
    CalculationMethod,
    MemoryEstimate,
    MemoryReport,
)

__all__ = [
    "ArchitectureConfig",
    "CalculationKey",
    "ModelSummary",
    "CalculationMethod",
    "MemoryEstimate",
    "MemoryReport",
]
