"""CalculationStrategy: resolves one KV-cache figure, never fails.

Priority order for a CalculationKey:

1. Result cache hit -- return immediately, no network.
2. Precise path -- architecture from the config cache, or fetched from
   the model directory and remembered.
3. Estimation -- parameter-count heuristic when the architecture is
   unavailable or unusable.

Whichever path answers, the figure is written to the result cache
before it is returned, so repeat calls never recompute.
"""

from __future__ import annotations

import logging

from huggyfit.cache.store import ArchitectureConfigCache, ResultCache
from huggyfit.calculator.kv_cache import estimate_kv_cache_gb, precise_kv_cache_gb
from huggyfit.errors import ArchitectureFetchError, DegenerateArchitectureError
from huggyfit.hub.directory import ArchitectureSource
from huggyfit.models.profiles import ArchitectureConfig, CalculationKey
from huggyfit.models.results import CalculationMethod

logger = logging.getLogger(__name__)


class CalculationStrategy:
    """Resolve KV-cache memory for a key using the shared caches."""

    def __init__(
        self,
        results: ResultCache,
        configs: ArchitectureConfigCache,
        directory: ArchitectureSource,
        use_estimation: bool = False,
    ):
        self._results = results
        self._configs = configs
        self._directory = directory
        self._use_estimation = use_estimation

    @property
    def results(self) -> ResultCache:
        return self._results

    def resolve(self, key: CalculationKey, parameters_b: float) -> float:
        """KV-cache GB for *key*; *parameters_b* feeds the estimation fallback."""
        cached = self._results.get(key)
        if cached is not None:
            return cached

        value: float | None = None
        method = CalculationMethod.PRECISE
        if not self._use_estimation:
            value = self._try_precise(key)

        if value is None:
            method = CalculationMethod.ESTIMATED
            value = estimate_kv_cache_gb(
                parameters_b, key.users, key.context_length, key.data_type
            )

        self._results.put(key, value, method)
        return value

    def last_method(self, key: CalculationKey) -> CalculationMethod | None:
        """Which path produced the cached figure for *key*, if any."""
        entry = self._results.get_entry(key)
        return entry.method if entry is not None else None

    def _try_precise(self, key: CalculationKey) -> float | None:
        config = self._architecture_for(key.model_id)
        if config is None:
            return None

        try:
            return precise_kv_cache_gb(
                config,
                users=key.users,
                context_length=key.context_length,
                dtype=key.data_type,
                model_id=key.model_id,
            )
        except DegenerateArchitectureError as e:
            logger.warning("%s; falling back to estimation", e)
            return None

    def _architecture_for(self, model_id: str) -> ArchitectureConfig | None:
        config = self._configs.get(model_id)
        if config is not None:
            return config

        try:
            config = self._directory.fetch_architecture(model_id)
        except ArchitectureFetchError as e:
            # Gated and config-less models land here routinely
            logger.debug("%s; falling back to estimation", e)
            return None
        except ValueError as e:
            # Includes pydantic ValidationError from a source that skipped wrapping
            logger.warning(
                "Invalid architecture for %s: %s; falling back to estimation", model_id, e
            )
            return None

        self._configs.put(model_id, config)
        return config
