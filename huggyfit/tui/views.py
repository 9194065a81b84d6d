"""Renderables for the interactive explorer.

Pure functions from state to Rich renderables, so the layout can be
checked without spinning up the Textual app.
"""

from __future__ import annotations

from rich.console import Group
from rich.table import Table
from rich.text import Text

from huggyfit.calculator.memory import base_memory_gb
from huggyfit.config import CONTEXT_LENGTHS, USER_COUNTS
from huggyfit.models.profiles import ModelSummary
from huggyfit.models.results import MemoryEstimate
from huggyfit.orchestrator import PENDING, BatchOrchestrator
from huggyfit.report.formatter import format_context_length, format_gb

TABS = ["Memory Requirements", "Model Details"]

HELP_SECTIONS: list[tuple[str, list[tuple[str, str]]]] = [
    (
        "Navigation",
        [
            ("↑/↓, j/k", "Navigate through models"),
            ("PgUp/PgDn", "Jump a page"),
            ("Home/End", "Jump to top/bottom"),
            ("Enter", "Select model"),
            ("/", "Search models"),
            ("Esc", "Exit search"),
            ("Tab", "Switch view"),
            ("q", "Quit application"),
        ],
    ),
    ("Configuration", [("+/-", "Adjust user count"), ("c", "Cycle context length")]),
    ("Display", [("?", "Toggle help")]),
]


def next_user_count(current: int) -> int:
    for i, count in enumerate(USER_COUNTS):
        if current <= count:
            return USER_COUNTS[(i + 1) % len(USER_COUNTS)]
    return USER_COUNTS[0]


def prev_user_count(current: int) -> int:
    for i in range(len(USER_COUNTS) - 1, -1, -1):
        if current >= USER_COUNTS[i]:
            return USER_COUNTS[i - 1]  # wraps to the largest at i == 0
    return USER_COUNTS[-1]


def next_context_length(current: int) -> int:
    for i, length in enumerate(CONTEXT_LENGTHS):
        if current <= length:
            return CONTEXT_LENGTHS[(i + 1) % len(CONTEXT_LENGTHS)]
    return CONTEXT_LENGTHS[0]


def collect_estimates(
    orchestrator: BatchOrchestrator,
    summary: ModelSummary,
    users: int,
    context_length: int,
) -> list[MemoryEstimate]:
    """Read the current table straight from the result cache."""
    estimates = []
    for key in orchestrator.keys_for(summary.model_id, users, context_length):
        value = orchestrator.get_cached_result(key)
        estimates.append(
            MemoryEstimate(
                data_type=key.data_type,
                base_gb=base_memory_gb(summary.parameters_b, key.data_type),
                kv_cache_gb=None if value is PENDING else value,
                users=users,
                context_length=context_length,
            )
        )
    return estimates


def render_tabs(active_tab: int) -> Text:
    text = Text()
    for i, tab in enumerate(TABS):
        if i:
            text.append(" ")
        style = "bold #74B2FF" if i == active_tab else "dim"
        text.append(f"({tab})", style=style)
    return text


def render_memory_details(
    summary: ModelSummary,
    users: int,
    context_length: int,
    estimates: list[MemoryEstimate],
    pending: bool,
) -> Group:
    header = Text()
    header.append(f"Model: {summary.model_id}\n\n")
    header.append("Configuration:\n", style="bold")
    header.append(f"- Users: {users}\n")
    header.append(f"- Context Length: {format_context_length(context_length)} tokens\n")
    if pending:
        header.append("\n⟳ calculating…\n", style="italic yellow")

    table = Table(box=None, padding=(0, 1), show_edge=False)
    table.add_column("Type", style="bold")
    table.add_column("Base", justify="right")
    table.add_column("KV Cache", justify="right")
    table.add_column("Total", justify="right")
    table.add_column("Per User", justify="right")
    for est in estimates:
        pending_cell = est.is_pending
        table.add_row(
            est.data_type.value,
            format_gb(est.base_gb),
            format_gb(est.kv_cache_gb),
            format_gb(None if pending_cell else est.total_gb),
            format_gb(None if pending_cell else est.per_user_gb),
        )
    return Group(header, table)


def render_model_info(summary: ModelSummary) -> Text:
    text = Text()
    text.append(f"Model ID: {summary.model_id}\n")
    text.append(f"Author: {summary.author or '-'}\n")
    text.append(f"Parameters: {summary.parameters_b:.2f}B\n")
    text.append("\nUsage Statistics:\n", style="bold")
    text.append(f"Downloads: {summary.downloads:,}\n")
    text.append(f"Likes: {summary.likes:,}\n")
    text.append(f"\nLast Updated: {summary.fetched_at:%Y-%m-%d %H:%M:%S}\n")
    return text


def render_controls(users: int, context_length: int, model_selected: bool) -> Text:
    text = Text()
    text.append(
        "↑/↓ or j/k: Navigate • Enter: Select • /: Search • Tab: Switch view "
        "• ?: Help • q: Quit",
        style="#626262",
    )
    if not model_selected:
        return text

    text.append("\nUsers (+/-):")
    for i, count in enumerate(USER_COUNTS):
        text.append(" |" if i else "")
        text.append(f" {count}", style="bold #74B2FF" if count == users else "")

    text.append("\nContext (c):")
    for i, length in enumerate(CONTEXT_LENGTHS):
        text.append(" |" if i else "")
        label = f" {format_context_length(length)}"
        text.append(label, style="bold #74B2FF" if length == context_length else "")
    return text


def render_help() -> Text:
    text = Text("Help\n", style="bold")
    for category, items in HELP_SECTIONS:
        text.append(f"\n{category}:\n", style="bold")
        for key, desc in items:
            text.append(f"  {key:<12}", style="bold #74B2FF")
            text.append(f": {desc}\n")
    text.append("\nPress ? to hide help", style="#626262")
    return text
