"""Scan orchestration — parse many metadata files and fold them into one graph.

This is the caller side of the core: it annotates failures with the file
they came from, logs progress, and keeps going when one file is bad.
"""

import asyncio
import logging
from collections.abc import Iterable, Sequence
from typing import Callable, Optional

from dep_inspector.errors import ParseFailure
from dep_inspector.graph import DirectSeed, build_graph
from dep_inspector.merge import merge_all
from dep_inspector.models import DependencyGraph, ScanResult, SourceFailure, SourceFile
from dep_inspector.normalize import normalize, normalize_all
from dep_inspector.parsers import direct_entries, relationships, try_parse

logger = logging.getLogger(__name__)


class ScanAborted(Exception):
    """Raised by a fail-fast scan on the first parse failure."""

    def __init__(self, failure: SourceFailure) -> None:
        super().__init__(failure.display)
        self.failure = failure


def graph_for_source(
    source: SourceFile,
    direct: Iterable[DirectSeed] = (),
) -> DependencyGraph:
    """Parse, normalize and build the graph for one file.

    Raises ``ParseFailure`` when the file does not parse.
    """
    outcome = try_parse(source.ecosystem, source.text)
    if outcome.failure is not None:
        raise outcome.failure
    eco = source.ecosystem
    records = normalize_all(eco, outcome.entries)
    hints = [
        (normalize(eco, parent), normalize(eco, child))
        for parent, child in relationships(eco, outcome.entries)
    ]
    seeds: list[DirectSeed] = [normalize(eco, e) for e in direct_entries(eco, outcome.entries)]
    seeds.extend(direct)
    return build_graph(records, hints=hints, direct=seeds, source=source.descriptor, ecosystem=eco)


class Scanner:
    """Runs one parse task per file, bounded by ``max_concurrency``."""

    def __init__(
        self,
        max_concurrency: int = 8,
        fail_fast: bool = False,
        on_status: Optional[Callable[[str], None]] = None,
    ) -> None:
        self.max_concurrency = max_concurrency
        self.fail_fast = fail_fast
        self._on_status = on_status or (lambda _: None)

    def _status(self, msg: str) -> None:
        self._on_status(msg)

    async def _scan_one(
        self,
        source: SourceFile,
        direct: Sequence[DirectSeed],
        semaphore: asyncio.Semaphore,
    ) -> DependencyGraph | SourceFailure:
        async with semaphore:
            self._status(f"Parsing {source.descriptor} …")
            try:
                graph = await asyncio.to_thread(graph_for_source, source, direct)
            except ParseFailure as e:
                failure = SourceFailure(
                    ecosystem=source.ecosystem,
                    path=source.path,
                    reason=e.reason,
                    location=e.location,
                    recoverable=e.recoverable,
                )
                logger.warning("Failed to parse %s", failure.display)
                return failure
            logger.debug("Parsed %s: %d nodes, %d edges", source.descriptor, len(graph), len(graph.edges))
            return graph

    async def _first_failure(self, tasks: list[asyncio.Task]) -> None:
        """Raise ``ScanAborted`` as soon as any task fails; cancel the rest."""
        for next_done in asyncio.as_completed(tasks):
            result = await next_done
            if isinstance(result, SourceFailure):
                for task in tasks:
                    task.cancel()
                await asyncio.gather(*tasks, return_exceptions=True)
                raise ScanAborted(result)

    async def scan(
        self,
        sources: Sequence[SourceFile],
        direct: Iterable[DirectSeed] = (),
    ) -> ScanResult:
        """Parse every source and merge the per-file graphs.

        Failed files are reported in ``ScanResult.failures``; with
        ``fail_fast`` the first failure raises ``ScanAborted`` instead.
        """
        seeds = list(direct)
        semaphore = asyncio.Semaphore(self.max_concurrency)
        tasks = [asyncio.create_task(self._scan_one(s, seeds, semaphore)) for s in sources]
        if self.fail_fast:
            await self._first_failure(tasks)
        results = await asyncio.gather(*tasks)

        graphs: list[DependencyGraph] = []
        failures: list[SourceFailure] = []
        parsed: list[str] = []
        for source, result in zip(sources, results):
            if isinstance(result, SourceFailure):
                failures.append(result)
            else:
                graphs.append(result)
                parsed.append(source.descriptor)

        self._status("Merging graphs …")
        graph = merge_all(graphs)
        logger.info(
            "Scanned %d file(s): %d nodes, %d edges, %d failure(s)",
            len(sources), len(graph), len(graph.edges), len(failures),
        )
        return ScanResult(graph=graph, failures=failures, parsed_files=parsed)
