"""Results screen — tabbed view of the merged dependency graph."""

from textual.app import ComposeResult
from textual.containers import VerticalScroll
from textual.screen import Screen
from textual.widgets import DataTable, Footer, Header, Label, Static, TabbedContent, TabPane

from dep_inspector.models import ScanResult


class ResultsScreen(Screen):
    """Packages, links and parse failures of one scan."""

    CSS = """
    ResultsScreen {
        layout: vertical;
    }
    #results-header {
        height: 3;
        background: $primary;
        color: $text;
        text-align: center;
        padding: 1 2;
        text-style: bold;
    }
    .section-title {
        text-style: bold;
        margin: 1 0;
        color: $secondary;
    }
    .failure-card {
        border: round $error;
        padding: 1 2;
        margin: 1 0;
        background: $surface;
        height: auto;
    }
    """

    BINDINGS = [
        ("q", "quit", "Quit"),
    ]

    def __init__(self, result: ScanResult, **kwargs) -> None:  # type: ignore[no-untyped-def]
        super().__init__(**kwargs)
        self.result = result
        self.report = result.graph.to_report()

    def compose(self) -> ComposeResult:
        r = self.report
        yield Header(show_clock=True)
        yield Static(
            f"  📦  {r.total_nodes} packages · {r.direct_nodes} direct · "
            f"{r.total_edges} links · {len(self.result.failures)} failures  ",
            id="results-header",
        )
        with TabbedContent("📦 Packages", "🔗 Links", "⚠ Failures"):
            with TabPane("📦 Packages"):
                yield DataTable(id="nodes-table")
            with TabPane("🔗 Links"):
                yield DataTable(id="edges-table")
            with TabPane("⚠ Failures"):
                yield from self._compose_failures()
        yield Footer()

    def on_mount(self) -> None:
        nodes = self.query_one("#nodes-table", DataTable)
        nodes.add_columns("Direct", "Ecosystem", "Name", "Version", "Arch", "Sources")
        for n in self.report.nodes:
            nodes.add_row(
                "★" if n.is_direct else "",
                n.ecosystem,
                n.name,
                n.version,
                n.classifier or "",
                ", ".join(n.provenance),
            )

        edges = self.query_one("#edges-table", DataTable)
        edges.add_columns("Package", "Depends on")
        for n in self.report.nodes:
            for child in n.depends_on:
                edges.add_row(f"{n.ecosystem}:{n.name}@{n.version}", child)

    def _compose_failures(self) -> ComposeResult:
        with VerticalScroll():
            yield Static("PARSE FAILURES", classes="section-title")
            if not self.result.failures:
                yield Label("Every file parsed.")
            for f in self.result.failures:
                yield Static(f.display, classes="failure-card")
