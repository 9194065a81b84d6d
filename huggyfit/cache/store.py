"""In-process caches shared by the calculation strategy and orchestrator.

Two independent maps, each behind one coarse lock:

- ArchitectureConfigCache: model ID -> ArchitectureConfig, never evicted
- ResultCache: CalculationKey -> KV-cache GB, expires after a TTL

Write volume is a handful of entries per user action, so a single lock
per map is plenty.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable

from huggyfit.models.profiles import ArchitectureConfig, CalculationKey
from huggyfit.models.results import CalculationMethod

logger = logging.getLogger(__name__)

DEFAULT_RESULT_TTL_SECONDS = 24 * 60 * 60


class ArchitectureConfigCache:
    """Fetched architecture metadata, kept for the life of the process."""

    def __init__(self) -> None:
        self._configs: dict[str, ArchitectureConfig] = {}
        self._lock = threading.Lock()

    def get(self, model_id: str) -> ArchitectureConfig | None:
        with self._lock:
            return self._configs.get(model_id)

    def put(self, model_id: str, config: ArchitectureConfig) -> None:
        with self._lock:
            self._configs[model_id] = config

    def __contains__(self, model_id: object) -> bool:
        with self._lock:
            return model_id in self._configs

    def __len__(self) -> int:
        with self._lock:
            return len(self._configs)


@dataclass(frozen=True)
class CachedResult:
    """One computed KV-cache figure and when it was stored."""

    value_gb: float
    stored_at: float
    method: CalculationMethod | None = None


class ResultCache:
    """Computed KV-cache figures keyed by calculation configuration.

    Entries older than ``ttl_seconds`` read as misses and are dropped.
    Pass ``ttl_seconds=None`` to keep entries forever.
    """

    def __init__(
        self,
        ttl_seconds: float | None = DEFAULT_RESULT_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._entries: dict[CalculationKey, CachedResult] = {}
        self._lock = threading.Lock()
        self._ttl = ttl_seconds
        self._clock = clock

    @property
    def ttl_seconds(self) -> float | None:
        return self._ttl

    def get(self, key: CalculationKey) -> float | None:
        entry = self.get_entry(key)
        return entry.value_gb if entry is not None else None

    def get_entry(self, key: CalculationKey) -> CachedResult | None:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if self._is_expired(entry):
                del self._entries[key]
                logger.debug("Result for %s expired", key)
                return None
            return entry

    def put(
        self,
        key: CalculationKey,
        value_gb: float,
        method: CalculationMethod | None = None,
    ) -> None:
        entry = CachedResult(value_gb=value_gb, stored_at=self._clock(), method=method)
        with self._lock:
            self._entries[key] = entry

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def _is_expired(self, entry: CachedResult) -> bool:
        if self._ttl is None:
            return False
        return self._clock() - entry.stored_at >= self._ttl

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, CalculationKey):
            return False
        return self.get_entry(key) is not None

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
