"""Rich terminal renderer for huggyfit memory reports.

Renders a MemoryReport as aligned terminal output: an optional model
summary, then the serving memory breakdown for the chosen data type.
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from huggyfit.models.results import MemoryEstimate, MemoryReport


def format_report(
    report: MemoryReport,
    *,
    verbose: bool = False,
    width: int | None = None,
) -> str:
    """Render a MemoryReport to a string of Rich-formatted terminal output."""
    buf = StringIO()
    console = Console(file=buf, width=width or 90, force_terminal=True)
    _render_all(console, report, verbose)
    return buf.getvalue()


def print_report(report: MemoryReport, *, verbose: bool = False) -> None:
    """Render and print a MemoryReport directly to the terminal."""
    console = Console(width=90)
    _render_all(console, report, verbose)


def format_gb(value: float | None) -> str:
    """'12.34 GB', or an ellipsis while the figure is pending."""
    if value is None:
        return "…"
    return f"{value:.2f} GB"


def format_context_length(length: int) -> str:
    return f"{length // 1024}k"


def _render_all(console: Console, report: MemoryReport, verbose: bool) -> None:
    _render_header(console, report)
    if verbose:
        _render_model_summary(console, report)
    _render_memory(console, report, verbose)


# --- Section Renderers ---


def _render_header(console: Console, report: MemoryReport) -> None:
    title = Text(f"Estimated GPU memory for {report.model_id}", style="bold cyan")
    console.print()
    console.print(Panel(title, expand=False, border_style="dim"))
    console.print()


def _render_model_summary(console: Console, report: MemoryReport) -> None:
    console.print(Text("Model", style="bold"))
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column(style="dim", min_width=16)
    table.add_column()
    table.add_row("Model ID", report.model_id)
    table.add_row("Author", report.author or "-")
    table.add_row("Parameters", f"{report.parameters_b:.2f}B")
    table.add_row("Downloads", f"{report.downloads:,}")
    table.add_row("Likes", f"{report.likes:,}")
    console.print(table)
    console.print()


def _render_memory(console: Console, report: MemoryReport, verbose: bool) -> None:
    est = report.estimate
    console.print(Text("Memory Requirements", style="bold"))

    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column(style="dim", min_width=16)
    table.add_column(justify="right", min_width=10)
    table.add_column(style="dim")

    table.add_row("Data type", est.data_type.value, "")
    if verbose:
        table.add_row("Base model", format_gb(est.base_gb), "weights + 18% overhead")
        table.add_row("KV cache", format_gb(est.kv_cache_gb), _method_label(est))
    table.add_row(
        Text("Total", style="bold"),
        Text(format_gb(est.total_gb), style="bold"),
        "",
    )
    table.add_row("Per user", format_gb(est.per_user_gb), "KV cache per user")
    if verbose:
        table.add_row("Users", str(report.users), "")
        table.add_row("Context length", f"{report.context_length} tokens", "")

    console.print(table)
    console.print()


def _method_label(est: MemoryEstimate) -> str:
    if est.method is None:
        return ""
    return est.method.value
