"""huggyfit CLI -- will it fit on the GPU?

Typer-based command-line interface.  Entry points: `huggyfit calc` for a
one-shot estimate and `huggyfit tui` for the interactive explorer.
"""

from __future__ import annotations

import logging
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

from huggyfit.cache.store import ArchitectureConfigCache, ResultCache
from huggyfit.cache.strategy import CalculationStrategy
from huggyfit.calculator.dtypes import DataType, normalize
from huggyfit.calculator.memory import base_memory_gb
from huggyfit.config import HuggyFitConfig
from huggyfit.errors import ModelSummaryError, UnsupportedDataTypeError
from huggyfit.hub.directory import HubDirectory
from huggyfit.models.profiles import CalculationKey
from huggyfit.models.results import MemoryEstimate, MemoryReport
from huggyfit.report.formatter import print_report
from huggyfit.tui.app import HuggyFitApp

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="huggyfit",
    help="GPU memory calculator for serving HuggingFace models.",
    add_completion=False,
    no_args_is_help=True,
)


def _configure_logging(level: str, log_file: Optional[str]) -> None:
    numeric_level = getattr(logging, level.upper(), logging.WARNING)
    if log_file:
        handler: logging.Handler = logging.FileHandler(log_file)
        handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )
    else:
        handler = RichHandler(console=Console(stderr=True), show_path=False)
    logging.basicConfig(level=numeric_level, handlers=[handler], force=True)


@app.callback()
def main(
    ctx: typer.Context,
    timeout: float = typer.Option(
        10.0, "--timeout", envvar="HUGGYFIT_TIMEOUT", help="Network timeout in seconds"
    ),
    cache_ttl: float = typer.Option(
        24 * 60 * 60,
        "--cache-ttl",
        envvar="HUGGYFIT_CACHE_TTL",
        min=0,
        help="Seconds before a cached result expires (0 = never)",
    ),
    log_level: str = typer.Option(
        "warning", "--log-level", envvar="HUGGYFIT_LOG_LEVEL", help="Logging level"
    ),
    log_file: Optional[str] = typer.Option(
        None, "--log-file", help="Write logs to a file instead of stderr"
    ),
    hf_token: Optional[str] = typer.Option(
        None, "--hf-token", envvar="HF_TOKEN", help="HuggingFace token for gated models"
    ),
) -> None:
    """huggyfit -- will it fit on the GPU?"""
    _configure_logging(log_level, log_file)
    ctx.obj = HuggyFitConfig(
        timeout_seconds=timeout,
        cache_ttl_seconds=cache_ttl or None,
        hf_token=hf_token,
    )


@app.command()
def calc(
    ctx: typer.Context,
    model: str = typer.Option(..., "--model", "-m", help="HuggingFace model ID"),
    dtype: str = typer.Option(
        DataType.FLOAT16.value,
        "--dtype",
        "-d",
        help="Data type for model loading (float16/f16, int8/q8, int4/q4)",
    ),
    users: int = typer.Option(1, "--users", "-u", min=1, help="Number of concurrent users"),
    context: int = typer.Option(
        4096, "--context", "-c", min=1, help="Context length per user"
    ),
    estimate_kv: bool = typer.Option(
        False, "--estimate-kv", help="Use estimation for KV cache calculation"
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Show detailed model information"
    ),
) -> None:
    """Estimate GPU memory to serve a model."""
    config: HuggyFitConfig = ctx.obj or HuggyFitConfig()

    # Resolve data type before touching the network
    try:
        data_type = normalize(dtype)
    except UnsupportedDataTypeError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)

    directory = HubDirectory(timeout=config.timeout_seconds, token=config.hf_token)

    try:
        summary = directory.fetch_model_summary(model)
    except ModelSummaryError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)

    strategy = CalculationStrategy(
        results=ResultCache(ttl_seconds=config.cache_ttl_seconds),
        configs=ArchitectureConfigCache(),
        directory=directory,
        use_estimation=estimate_kv,
    )
    key = CalculationKey(
        model_id=summary.model_id,
        users=users,
        context_length=context,
        data_type=data_type,
    )
    kv_cache_gb = strategy.resolve(key, summary.parameters_b)

    report = MemoryReport(
        model_id=summary.model_id,
        author=summary.author,
        parameters_b=summary.parameters_b,
        downloads=summary.downloads,
        likes=summary.likes,
        users=users,
        context_length=context,
        estimate=MemoryEstimate(
            data_type=data_type,
            base_gb=base_memory_gb(summary.parameters_b, data_type),
            kv_cache_gb=kv_cache_gb,
            users=users,
            context_length=context,
            method=strategy.last_method(key),
        ),
    )

    print_report(report, verbose=verbose)


@app.command()
def tui(ctx: typer.Context) -> None:
    """Browse models and compare memory interactively."""
    config: HuggyFitConfig = ctx.obj or HuggyFitConfig()
    directory = HubDirectory(timeout=config.timeout_seconds, token=config.hf_token)
    HuggyFitApp(directory=directory, config=config).run()


if __name__ == "__main__":
    app()
