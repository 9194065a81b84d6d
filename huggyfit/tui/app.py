"""Textual app: browse HuggingFace models and compare serving memory.

The app owns all UI state and the session's BatchOrchestrator.  Network
work (listing, search, model summaries) runs on Textual thread workers;
KV-cache calculations run on the orchestrator's pool and wake the app
with a CalculationsReady message, after which the event loop drains
the completions via ``orchestrator.poll()``.
"""

from __future__ import annotations

import logging

from rich.console import Group, RenderableType
from textual import on, work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, VerticalScroll
from textual.message import Message
from textual.widgets import Input, OptionList, Static

from huggyfit.config import HuggyFitConfig
from huggyfit.errors import DirectoryError, ModelSummaryError
from huggyfit.hub.directory import ModelDirectory
from huggyfit.models.profiles import ModelSummary
from huggyfit.orchestrator import BatchOrchestrator, build_orchestrator
from huggyfit.tui import views

logger = logging.getLogger(__name__)


class CalculationsReady(Message):
    """Posted from a calculation thread when a completion is queued."""


class HuggyFitApp(App):
    """Interactive GPU memory explorer."""

    TITLE = "HuggyFit - GPU Memory Calculator"

    CSS = """
    #title {
        background: #7B2FBE;
        color: #FAFAFA;
        text-style: bold;
        padding: 0 1;
        width: auto;
        margin-bottom: 1;
    }
    #error {
        color: #FF0000;
        background: #2D2D2D;
        padding: 0 1;
        display: none;
    }
    #search {
        display: none;
    }
    Horizontal {
        height: 1fr;
    }
    #models {
        width: 42;
        border: round #874BFD;
    }
    #details {
        border: round #874BFD;
        padding: 1 2;
    }
    #help {
        border: round #874BFD;
        padding: 0 1;
        display: none;
    }
    #controls {
        height: auto;
        margin-top: 1;
    }
    """

    BINDINGS = [
        Binding("q", "quit", "Quit"),
        Binding("ctrl+c", "quit", "Quit", show=False, priority=True),
        Binding("slash", "search", "Search"),
        Binding("escape", "leave_search", "Exit search", show=False),
        Binding("question_mark", "toggle_help", "Help"),
        Binding("tab", "switch_tab", "Switch view", priority=True),
        Binding("plus", "more_users", "Users +"),
        Binding("minus", "fewer_users", "Users -"),
        Binding("c", "cycle_context", "Context"),
        Binding("j", "cursor_down", show=False),
        Binding("k", "cursor_up", show=False),
    ]

    def __init__(
        self,
        directory: ModelDirectory,
        config: HuggyFitConfig | None = None,
        orchestrator: BatchOrchestrator | None = None,
    ):
        super().__init__()
        self.config = config or HuggyFitConfig()
        self.directory = directory
        self.orchestrator = orchestrator or build_orchestrator(self.config, directory)
        self.orchestrator.set_notify(lambda: self.post_message(CalculationsReady()))

        self.model_ids: list[str] = []
        self.summary: ModelSummary | None = None
        self.users = self.config.default_users
        self.context_length = self.config.default_context_length
        self.active_tab = 0
        self.loading = True
        self.error: Exception | None = None

    def compose(self) -> ComposeResult:
        yield Static("🤗 HuggyFit - GPU Memory Calculator", id="title")
        yield Static(id="error")
        yield Input(placeholder="Search models...", id="search")
        with Horizontal():
            yield OptionList(id="models")
            with VerticalScroll():
                yield Static(id="details")
                yield Static(id="help")
        yield Static(id="controls")

    def on_mount(self) -> None:
        self.query_one("#models", OptionList).focus()
        self._load_models("")
        self._refresh()

    def on_unmount(self) -> None:
        self.orchestrator.shutdown(wait=False)

    # --- Directory workers ---

    @work(thread=True, exclusive=True, group="directory")
    def _load_models(self, query: str) -> None:
        try:
            if query:
                model_ids = self.directory.search_models(query, limit=self.config.list_limit)
            else:
                model_ids = self.directory.list_models(limit=self.config.list_limit)
        except DirectoryError as e:
            self.call_from_thread(self._show_error, e)
            return
        self.call_from_thread(self._show_models, model_ids)

    @work(thread=True, exclusive=True, group="summary")
    def _load_summary(self, model_id: str) -> None:
        try:
            summary = self.directory.fetch_model_summary(model_id)
        except ModelSummaryError as e:
            self.call_from_thread(self._show_error, e)
            return
        self.call_from_thread(self.show_summary, summary)

    def _show_models(self, model_ids: list[str]) -> None:
        self.loading = False
        self.error = None
        self.model_ids = model_ids
        self.summary = None
        self.orchestrator.discard_batch()

        option_list = self.query_one("#models", OptionList)
        option_list.clear_options()
        option_list.add_options(model_ids)
        if model_ids:
            option_list.highlighted = 0
        self._refresh()

    def _show_error(self, error: Exception) -> None:
        logger.warning("%s", error)
        self.loading = False
        self.error = error
        self.orchestrator.discard_batch()
        self._refresh()

    def show_summary(self, summary: ModelSummary) -> None:
        """Select a model and kick off its memory calculations."""
        self.loading = False
        self.error = None
        self.summary = summary
        self._dispatch()

    def _dispatch(self) -> None:
        if self.summary is None:
            return
        self.orchestrator.on_parameter_change(
            self.summary.model_id,
            self.users,
            self.context_length,
            self.summary.parameters_b,
        )
        self.orchestrator.poll()
        self._refresh()

    @on(CalculationsReady)
    def _drain_calculations(self, message: CalculationsReady) -> None:
        if self.orchestrator.poll():
            self._refresh()

    # --- Events ---

    @on(OptionList.OptionSelected, "#models")
    def _select_model(self, event: OptionList.OptionSelected) -> None:
        model_id = self.model_ids[event.option_index]
        self.loading = True
        self._refresh()
        self._load_summary(model_id)

    @on(Input.Submitted, "#search")
    def _submit_search(self, event: Input.Submitted) -> None:
        self._close_search()
        self.loading = True
        self.orchestrator.discard_batch()
        self._refresh()
        self._load_models(event.value.strip())

    # --- Actions ---

    def action_search(self) -> None:
        search = self.query_one("#search", Input)
        search.value = ""
        search.display = True
        search.focus()
        self.orchestrator.discard_batch()
        self._refresh()

    def action_leave_search(self) -> None:
        self._close_search()

    def action_toggle_help(self) -> None:
        help_panel = self.query_one("#help", Static)
        help_panel.display = not help_panel.display

    def action_switch_tab(self) -> None:
        if self.summary is not None:
            self.active_tab = (self.active_tab + 1) % len(views.TABS)
            self._refresh()

    def action_more_users(self) -> None:
        if self.summary is not None:
            self.users = views.next_user_count(self.users)
            self._dispatch()

    def action_fewer_users(self) -> None:
        if self.summary is not None:
            self.users = views.prev_user_count(self.users)
            self._dispatch()

    def action_cycle_context(self) -> None:
        if self.summary is not None:
            self.context_length = views.next_context_length(self.context_length)
            self._dispatch()

    def action_cursor_down(self) -> None:
        self.query_one("#models", OptionList).action_cursor_down()

    def action_cursor_up(self) -> None:
        self.query_one("#models", OptionList).action_cursor_up()

    def _close_search(self) -> None:
        search = self.query_one("#search", Input)
        search.display = False
        self.query_one("#models", OptionList).focus()

    # --- Rendering ---

    def _refresh(self) -> None:
        error = self.query_one("#error", Static)
        error.display = self.error is not None
        if self.error is not None:
            error.update(f"Error: {self.error}")

        self.query_one("#details", Static).update(self._render_details())
        self.query_one("#help", Static).update(views.render_help())
        self.query_one("#controls", Static).update(
            views.render_controls(self.users, self.context_length, self.summary is not None)
        )

    def _render_details(self) -> RenderableType:
        if self.loading:
            return "Loading..."
        if self.summary is None:
            return "Select a model to view details"

        tabs = views.render_tabs(self.active_tab)
        if self.active_tab == 1:
            body = views.render_model_info(self.summary)
        else:
            estimates = views.collect_estimates(
                self.orchestrator, self.summary, self.users, self.context_length
            )
            body = views.render_memory_details(
                self.summary,
                self.users,
                self.context_length,
                estimates,
                self.orchestrator.is_batch_pending(),
            )

        return Group(tabs, "", body)
