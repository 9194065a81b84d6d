"""Exception types shared across huggyfit."""

from __future__ import annotations


class HuggyFitError(Exception):
    """Base class for all huggyfit errors."""


class UnsupportedDataTypeError(HuggyFitError):
    """Raised when a data type identifier has no known alias.

    This is a configuration error: it is reported immediately and no
    calculation is attempted.
    """

    def __init__(self, data_type: str, supported: list[str]) -> None:
        self.data_type = data_type
        self.supported = supported
        super().__init__(
            f"Unsupported data type '{data_type}'. Supported: {', '.join(supported)}"
        )


class ArchitectureFetchError(HuggyFitError):
    """Raised when a model's config.json cannot be fetched or parsed.

    Never shown to the user -- the calculation strategy falls back to
    estimation instead.
    """

    def __init__(self, model_id: str, reason: str) -> None:
        self.model_id = model_id
        self.reason = reason
        super().__init__(f"Could not fetch architecture for '{model_id}': {reason}")


class DegenerateArchitectureError(HuggyFitError, ValueError):
    """Raised when an architecture config cannot drive the precise formula."""

    def __init__(self, model_id: str, field: str) -> None:
        self.model_id = model_id
        self.field = field
        super().__init__(f"Architecture for '{model_id}' has no usable {field}")


class ModelSummaryError(HuggyFitError):
    """Raised when a model's summary (and parameter count) is unavailable."""

    def __init__(self, model_id: str, reason: str) -> None:
        self.model_id = model_id
        self.reason = reason
        super().__init__(f"Could not resolve model '{model_id}': {reason}")


class DirectoryError(HuggyFitError):
    """Raised when listing or searching the model directory fails."""
