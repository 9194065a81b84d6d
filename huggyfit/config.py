"""Runtime configuration for a huggyfit session.

One HuggyFitConfig per process, built from CLI options (which fall back
to HUGGYFIT_* environment variables) and passed to whatever needs it.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from huggyfit.cache.store import DEFAULT_RESULT_TTL_SECONDS
from huggyfit.hub.directory import DEFAULT_LIST_LIMIT, DEFAULT_TIMEOUT_SECONDS

# Cycle options for the interactive view
USER_COUNTS: list[int] = [1, 2, 4, 8, 16, 32]
CONTEXT_LENGTHS: list[int] = [2048, 4096, 8192, 16384, 32768]


class HuggyFitConfig(BaseModel):
    """Tunables shared by the CLI and TUI."""

    timeout_seconds: float = Field(default=DEFAULT_TIMEOUT_SECONDS, gt=0)
    cache_ttl_seconds: float | None = Field(default=DEFAULT_RESULT_TTL_SECONDS, gt=0)
    list_limit: int = Field(default=DEFAULT_LIST_LIMIT, ge=1)
    max_workers: int | None = Field(default=None, ge=1)  # None = one per data type
    default_users: int = USER_COUNTS[0]
    default_context_length: int = CONTEXT_LENGTHS[1]
    use_estimation: bool = False
    hf_token: str | None = None
