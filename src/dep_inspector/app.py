"""Textual TUI for browsing a scan result."""

from textual.app import App

from dep_inspector.models import ScanResult
from dep_inspector.screens.results import ResultsScreen


class DepInspectorApp(App):
    """Read-only viewer for a merged dependency graph."""

    TITLE = "Dep Inspector"
    SUB_TITLE = "Packages · Links · Failures"

    CSS = """
    Screen {
        background: $background;
    }
    """

    BINDINGS = [
        ("q", "quit", "Quit"),
    ]

    def __init__(self, result: ScanResult, **kwargs) -> None:  # type: ignore[no-untyped-def]
        super().__init__(**kwargs)
        self.result = result

    def on_mount(self) -> None:
        self.push_screen(ResultsScreen(self.result))
