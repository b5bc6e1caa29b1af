"""Textual TUI dashboard — interactive repository status viewer."""

from __future__ import annotations

import threading
from dataclasses import replace
from typing import Optional

from rich.text import Text
from textual import work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.widgets import DataTable, Footer, Header, Label, Static

from gittracker.aggregate import ScanOptions, ScanResult, scan
from gittracker.errors import FatalScanError
from gittracker.export import display_path
from gittracker.theme import TAGLINE, ahead_behind, change_counts, state_color, state_of


class SummaryPanel(Static):
    """One-line scan summary."""

    def update_data(self, result: ScanResult, show_clean: bool) -> None:
        s = result.summary
        text = Text()
        text.append("  Repos: ", style="dim")
        text.append(f"{s.total}", style="bold cyan")
        text.append("    Need attention: ", style="dim")
        text.append(f"{s.dirty}", style="bold yellow")
        if s.dirty:
            text.append(f" ({s.uncommitted} uncommitted, {s.unpushed} unpushed)", style="dim")
        text.append("    Clean: ", style="dim")
        text.append(f"{s.clean}", style="bold green")
        text.append("    Unavailable: ", style="dim")
        text.append(f"{s.errored}", style="bold red" if s.errored else "bold")
        if not show_clean and s.clean:
            text.append("    (clean hidden — press c)", style="dim italic")
        if result.interrupted:
            text.append("    interrupted", style="bold red")
        self.update(text)


class RepoTable(DataTable):
    """Scrollable repo status table."""

    def update_data(self, result: ScanResult) -> None:
        self.clear(columns=True)
        self.add_columns("State", "Repo", "Branch", "Ahead/Behind", "Changes")
        for status in result.repos:
            state = Text(state_of(status), style=f"bold {state_color(status)}")
            if status.error is not None:
                self.add_row(state, display_path(status, result.root), "", "", Text(str(status.error), style="red"))
                continue
            self.add_row(
                state,
                display_path(status, result.root),
                status.branch,
                ahead_behind(status),
                change_counts(status),
            )


class GittrackerApp(App):
    """gittracker — which checkouts need attention."""

    CSS = """
    #summary {
        height: auto;
        min-height: 3;
        border: solid $accent;
        padding: 0 1;
    }

    #repos {
        border: solid $secondary;
        height: 1fr;
    }

    #loading {
        content-align: center middle;
        text-align: center;
        height: 1fr;
    }
    """

    TITLE = "gittracker"
    SUB_TITLE = TAGLINE

    BINDINGS = [
        Binding("q", "quit", "Quit"),
        Binding("r", "rescan", "Rescan"),
        Binding("c", "toggle_clean", "Show/Hide Clean"),
    ]

    def __init__(self, scan_path: str, options: Optional[ScanOptions] = None) -> None:
        super().__init__()
        self.scan_path = scan_path
        self.options = options or ScanOptions()
        self.result: Optional[ScanResult] = None
        self._cancel = threading.Event()

    def compose(self) -> ComposeResult:
        yield Header()
        yield SummaryPanel(id="summary")
        yield Label("  Scanning repos...", id="loading")
        yield RepoTable(id="repos")
        yield Footer()

    def on_mount(self) -> None:
        self.query_one(RepoTable).display = False
        self.run_scan()

    def on_unmount(self) -> None:
        self._cancel.set()

    @work(thread=True, exclusive=True)
    def run_scan(self) -> None:
        """Scan repos in a background thread."""

        def _progress(done: int, path: str) -> None:
            self.call_from_thread(self._update_loading, f"  Scanned {done} repos...")

        try:
            result = scan(self.scan_path, self.options, cancel=self._cancel, progress=_progress)
        except FatalScanError as exc:
            self.call_from_thread(self._update_loading, f"  {exc}")
            return

        self.result = result
        self.call_from_thread(self._render_result, result)

    def _update_loading(self, text: str) -> None:
        loading = self.query_one("#loading", Label)
        loading.display = True
        loading.update(text)

    def _render_result(self, result: ScanResult) -> None:
        self.query_one(SummaryPanel).update_data(result, self.options.show_clean)
        table = self.query_one(RepoTable)
        table.update_data(result)
        if not result.repos:
            message = "  No git repos found." if not result.summary.total else "  Nothing needs attention."
            self._update_loading(message)
            table.display = False
            return
        self.query_one("#loading", Label).display = False
        table.display = True

    def action_rescan(self) -> None:
        self._update_loading("  Scanning repos...")
        self.run_scan()

    def action_toggle_clean(self) -> None:
        self.options = replace(self.options, show_clean=not self.options.show_clean)
        self.action_rescan()


def run_tui(scan_path: str, options: Optional[ScanOptions] = None) -> None:
    """Launch the gittracker TUI dashboard."""
    app = GittrackerApp(scan_path, options)
    app.run()
