"""HuggingFace Hub model directory.

Lists and searches model IDs, pulls per-model summaries (author,
parameter count, popularity), and fetches config.json for the precise
KV-cache path.  Every network call carries a bounded timeout; failures
surface as huggyfit errors rather than transport exceptions.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Protocol, runtime_checkable

from huggingface_hub import HfApi, hf_hub_download

from huggyfit.errors import ArchitectureFetchError, DirectoryError, ModelSummaryError
from huggyfit.hub.ranking import rank_model_ids
from huggyfit.models.profiles import ArchitectureConfig, ModelSummary

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 10.0
DEFAULT_LIST_LIMIT = 100


@runtime_checkable
class ArchitectureSource(Protocol):
    """Anything that can fetch a model's architecture metadata.

    Implementations raise ArchitectureFetchError on any failure,
    including timeouts.
    """

    def fetch_architecture(self, model_id: str) -> ArchitectureConfig:
        ...


@runtime_checkable
class ModelDirectory(ArchitectureSource, Protocol):
    """The full directory surface used by the CLI and TUI."""

    def list_models(self, limit: int = DEFAULT_LIST_LIMIT) -> list[str]:
        ...

    def search_models(self, query: str, limit: int = DEFAULT_LIST_LIMIT) -> list[str]:
        ...

    def fetch_model_summary(self, model_id: str) -> ModelSummary:
        ...


class HubDirectory:
    """ModelDirectory backed by huggingface_hub."""

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        token: str | None = None,
        api: HfApi | None = None,
    ):
        self.timeout = timeout
        self._token = token
        self._api = api or HfApi(token=token)

    def list_models(self, limit: int = DEFAULT_LIST_LIMIT) -> list[str]:
        """Most-downloaded model IDs on the Hub."""
        try:
            models = self._api.list_models(sort="downloads", limit=limit)
            return [m.id for m in models]
        except Exception as e:
            raise DirectoryError(f"Failed to fetch models: {e}") from e

    def search_models(self, query: str, limit: int = DEFAULT_LIST_LIMIT) -> list[str]:
        """Model IDs matching *query*, most relevant first."""
        try:
            models = self._api.list_models(search=query, sort="downloads", limit=limit)
            model_ids = [m.id for m in models]
        except Exception as e:
            raise DirectoryError(f"Failed to search models for '{query}': {e}") from e
        return rank_model_ids(model_ids, query)

    def fetch_model_summary(self, model_id: str) -> ModelSummary:
        """Author, parameter count and popularity for *model_id*.

        Raises:
            ModelSummaryError: if the model can't be fetched or has no
                safetensors parameter count.
        """
        if not model_id:
            raise ModelSummaryError(model_id, "model ID cannot be empty")

        try:
            info = self._api.model_info(model_id, timeout=self.timeout)
        except Exception as e:
            raise ModelSummaryError(model_id, str(e)) from e

        total = info.safetensors.total if info.safetensors is not None else 0
        if not total:
            raise ModelSummaryError(model_id, "could not determine parameter count")

        return ModelSummary(
            model_id=info.id,
            author=info.author or "",
            parameters_b=total / 1e9,
            downloads=info.downloads or 0,
            likes=info.likes or 0,
        )

    def fetch_architecture(self, model_id: str) -> ArchitectureConfig:
        """Architecture metadata from the model's config.json.

        Raises:
            ArchitectureFetchError: on any download, parse or validation
                failure.
        """
        try:
            config = self._fetch_config(model_id)
            architecture = ArchitectureConfig.from_hf_config(config)
        except Exception as e:
            raise ArchitectureFetchError(model_id, str(e)) from e

        logger.info("Fetched config.json for %s", model_id)
        return architecture

    def _fetch_config(self, model_id: str) -> dict[str, Any]:
        """Fetch config.json from HuggingFace Hub with caching."""
        config_path = hf_hub_download(
            repo_id=model_id,
            filename="config.json",
            token=self._token,
            etag_timeout=self.timeout,
        )
        with open(config_path) as f:
            config = json.load(f)
        if not isinstance(config, dict):
            raise ValueError(f"Expected a JSON object, got {type(config).__name__}")
        return config
