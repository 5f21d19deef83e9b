"""Tests for the Textual results viewer."""

import pytest
from textual.widgets import DataTable

from dep_inspector.app import DepInspectorApp
from dep_inspector.graph import build_graph
from dep_inspector.models import DependencyRecord, Ecosystem, ScanResult, SourceFailure
from dep_inspector.screens.results import ResultsScreen


def _result(failures=()):
    a = DependencyRecord(ecosystem=Ecosystem.npm, name="a", version="1.0.0")
    b = DependencyRecord(ecosystem=Ecosystem.npm, name="b", version="2.0.0")
    graph = build_graph([a, b], hints=[(a, b)], direct=["a"], source="npm:package-lock.json")
    return ScanResult(graph=graph, failures=list(failures))


class TestDepInspectorApp:
    @pytest.mark.asyncio
    async def test_shows_results_screen(self):
        app = DepInspectorApp(_result())
        async with app.run_test() as pilot:
            await pilot.pause()
            assert isinstance(app.screen, ResultsScreen)
            assert app.screen.query_one("#nodes-table", DataTable).row_count == 2
            assert app.screen.query_one("#edges-table", DataTable).row_count == 1

    @pytest.mark.asyncio
    async def test_lists_failures(self):
        failure = SourceFailure(ecosystem=Ecosystem.npm, path="bad", reason="invalid JSON")
        app = DepInspectorApp(_result([failure]))
        async with app.run_test() as pilot:
            await pilot.pause()
            cards = app.screen.query(".failure-card")
            assert len(cards) == 1
