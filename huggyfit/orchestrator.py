"""BatchOrchestrator: one calculation per data type, per parameter change.

Every time the selected model, user count or context length changes,
the orchestrator builds one CalculationKey per supported data type and
hands each to the CalculationStrategy on a worker thread.  Workers
never touch orchestrator state: they drop a Completion on a queue and
ring the ``notify`` hook.  The event loop calls ``poll()`` to apply
completions, which is the only place ``outstanding`` is mutated.

States:
    Idle      -- no batch tracked
    Awaiting  -- current batch still has outstanding keys

A new parameter change replaces the current batch outright.  Work
already running for the old batch finishes and fills the result cache
(keys are content-addressed, so that's harmless), but its completions
can only shrink the *current* batch's outstanding set, never revive a
finished one.
"""

from __future__ import annotations

import itertools
import logging
import queue
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Callable

from huggyfit.cache.store import ArchitectureConfigCache, ResultCache
from huggyfit.cache.strategy import CalculationStrategy
from huggyfit.calculator.dtypes import DataType, supported_types
from huggyfit.config import HuggyFitConfig
from huggyfit.hub.directory import ArchitectureSource
from huggyfit.models.profiles import CalculationKey

logger = logging.getLogger(__name__)


class _Pending:
    """Sentinel returned by get_cached_result while a figure is outstanding."""

    def __repr__(self) -> str:
        return "PENDING"

    def __bool__(self) -> bool:
        return False


PENDING = _Pending()


@dataclass(frozen=True)
class Completion:
    """A resolved figure reported back from a worker."""

    key: CalculationKey
    value_gb: float | None  # None when the calculation itself failed


@dataclass
class PendingBatch:
    """Calculations dispatched together for one configuration."""

    batch_id: int
    model_id: str
    users: int
    context_length: int
    outstanding: set[CalculationKey] = field(default_factory=set)


class BatchOrchestrator:
    """Dispatch and track per-data-type KV-cache calculations."""

    def __init__(
        self,
        strategy: CalculationStrategy,
        data_types: list[DataType] | None = None,
        max_workers: int | None = None,
        notify: Callable[[], None] | None = None,
    ):
        self._strategy = strategy
        self._data_types = data_types or supported_types()
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers or len(self._data_types),
            thread_name_prefix="huggyfit-calc",
        )
        self._completions: queue.Queue[Completion] = queue.Queue()
        self._notify = notify
        self._batch: PendingBatch | None = None
        self._batch_ids = itertools.count(1)

    @property
    def data_types(self) -> list[DataType]:
        return list(self._data_types)

    @property
    def current_batch(self) -> PendingBatch | None:
        return self._batch

    def set_notify(self, notify: Callable[[], None] | None) -> None:
        """Hook called from worker threads after each completion is queued."""
        self._notify = notify

    def keys_for(self, model_id: str, users: int, context_length: int) -> list[CalculationKey]:
        """One key per supported data type for a configuration."""
        return [
            CalculationKey(
                model_id=model_id,
                users=users,
                context_length=context_length,
                data_type=dtype,
            )
            for dtype in self._data_types
        ]

    def on_parameter_change(
        self,
        model_id: str,
        users: int,
        context_length: int,
        parameters_b: float,
    ) -> PendingBatch:
        """Start a new batch for this configuration, replacing any previous one."""
        keys = self.keys_for(model_id, users, context_length)
        batch = PendingBatch(
            batch_id=next(self._batch_ids),
            model_id=model_id,
            users=users,
            context_length=context_length,
            outstanding=set(keys),
        )
        self._batch = batch
        logger.debug(
            "Batch %d: %s users=%d context=%d (%d keys)",
            batch.batch_id, model_id, users, context_length, len(keys),
        )

        for key in keys:
            cached = self._strategy.results.get(key)
            if cached is not None:
                self._deliver(Completion(key=key, value_gb=cached))
                continue
            future = self._executor.submit(self._strategy.resolve, key, parameters_b)
            future.add_done_callback(lambda f, k=key: self._on_done(k, f))

        return batch

    def poll(self) -> list[Completion]:
        """Apply queued completions in arrival order.  Call from the event loop."""
        applied: list[Completion] = []
        while True:
            try:
                completion = self._completions.get_nowait()
            except queue.Empty:
                break
            self._apply(completion)
            applied.append(completion)
        return applied

    def discard_batch(self) -> None:
        """Stop tracking the current batch (new search, errors)."""
        if self._batch is not None:
            logger.debug("Discarding batch %d", self._batch.batch_id)
        self._batch = None

    def is_batch_pending(self) -> bool:
        return self._batch is not None and bool(self._batch.outstanding)

    def get_cached_result(self, key: CalculationKey) -> float | _Pending:
        """Non-blocking read for rendering."""
        value = self._strategy.results.get(key)
        return PENDING if value is None else value

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait, cancel_futures=not wait)

    def _on_done(self, key: CalculationKey, future: Future[float]) -> None:
        # Runs on the worker thread
        if future.cancelled():
            return
        exc = future.exception()
        if exc is not None:
            logger.error("Calculation for %s failed: %s", key, exc)
            # Still report the key so the batch can settle
            self._deliver(Completion(key=key, value_gb=None))
            return
        self._deliver(Completion(key=key, value_gb=future.result()))

    def _deliver(self, completion: Completion) -> None:
        self._completions.put(completion)
        if self._notify is not None:
            self._notify()

    def _apply(self, completion: Completion) -> None:
        batch = self._batch
        if batch is None or completion.key not in batch.outstanding:
            logger.debug("Ignoring completion outside current batch: %s", completion.key)
            return

        batch.outstanding.discard(completion.key)
        if not batch.outstanding:
            logger.debug("Batch %d settled", batch.batch_id)
            self._batch = None


def build_orchestrator(
    config: HuggyFitConfig,
    directory: ArchitectureSource,
    notify: Callable[[], None] | None = None,
) -> BatchOrchestrator:
    """Wire fresh caches, a strategy and an orchestrator for one session."""
    strategy = CalculationStrategy(
        results=ResultCache(ttl_seconds=config.cache_ttl_seconds),
        configs=ArchitectureConfigCache(),
        directory=directory,
        use_estimation=config.use_estimation,
    )
    return BatchOrchestrator(strategy, max_workers=config.max_workers, notify=notify)
