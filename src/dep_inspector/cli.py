"""CLI entry point for dep-inspector."""

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from pydantic import ValidationError

from dep_inspector.errors import MalformedInputFailure, decode_input
from dep_inspector.models import Ecosystem, ScanResult, SourceFailure, SourceFile

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_PARTIAL = 1
EXIT_ERROR = 2


def _source_spec(value: str) -> tuple[Ecosystem, str]:
    """``ECOSYSTEM:PATH`` -> ``(Ecosystem, path)``."""
    eco, sep, path = value.partition(":")
    if not sep or not path:
        raise argparse.ArgumentTypeError(f"expected ECOSYSTEM:PATH, got {value!r}")
    try:
        return Ecosystem(eco), path
    except ValueError:
        choices = ", ".join(e.value for e in Ecosystem)
        raise argparse.ArgumentTypeError(f"unknown ecosystem {eco!r} (choose from {choices})") from None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dep-inspector",
        description="Build one dependency graph from package-manager metadata files.",
    )
    parser.add_argument(
        "sources",
        nargs="+",
        type=_source_spec,
        metavar="ECOSYSTEM:PATH",
        help="metadata file to parse, e.g. dpkg:/var/lib/dpkg/status or npm:package-lock.json",
    )
    parser.add_argument(
        "--direct",
        action="append",
        default=[],
        metavar="NAME",
        help="mark packages with this name as direct dependencies (repeatable)",
    )
    output = parser.add_mutually_exclusive_group()
    output.add_argument("--json", action="store_true", help="print the graph report as JSON")
    output.add_argument("--tui", action="store_true", help="browse the result in a terminal UI")
    parser.add_argument("--fail-fast", action="store_true", default=None, help="stop at the first bad file")
    parser.add_argument("--log-level", default=None, help="logging level (default: from environment)")
    return parser


def read_sources(specs: Sequence[tuple[Ecosystem, str]]) -> tuple[list[SourceFile], list[SourceFailure]]:
    """Read and decode every file; unreadable files become failures."""
    sources: list[SourceFile] = []
    failures: list[SourceFailure] = []
    for eco, path in specs:
        try:
            text = decode_input(Path(path).read_bytes())
        except OSError as e:
            failures.append(SourceFailure(ecosystem=eco, path=path, reason=f"cannot read file: {e.strerror}"))
            continue
        except MalformedInputFailure as e:
            failures.append(SourceFailure(ecosystem=eco, path=path, reason=e.reason))
            continue
        sources.append(SourceFile(ecosystem=eco, path=path, text=text))
    return sources, failures


def render_summary(result: ScanResult) -> str:
    """Plain-text listing of the merged graph."""
    report = result.graph.to_report()
    lines = [
        f"{report.total_nodes} packages ({report.direct_nodes} direct), "
        f"{report.total_edges} links across {', '.join(report.ecosystems) or 'no ecosystems'}",
    ]
    for node in report.nodes:
        marker = "*" if node.is_direct else " "
        arch = f" [{node.classifier}]" if node.classifier else ""
        lines.append(f"{marker} {node.ecosystem:<6} {node.name} {node.version}{arch}")
    return "\n".join(lines)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Parse the given files and print the merged dependency graph."""
    from dotenv import load_dotenv

    load_dotenv()  # DEP_INSPECTOR_* settings may live in .env

    from dep_inspector.config import load_settings
    from dep_inspector.logging_config import setup_logging
    from dep_inspector.scanner import ScanAborted, Scanner

    args = build_parser().parse_args(argv)
    try:
        settings = load_settings()
    except ValidationError as e:
        print(f"dep-inspector: invalid DEP_INSPECTOR_* setting\n{e}", file=sys.stderr)
        return EXIT_ERROR
    setup_logging(args.log_level or settings.log_level)
    fail_fast = settings.fail_fast if args.fail_fast is None else args.fail_fast

    sources, read_failures = read_sources(args.sources)
    if read_failures and fail_fast:
        print(read_failures[0].display, file=sys.stderr)
        return EXIT_ERROR

    scanner = Scanner(max_concurrency=settings.max_concurrency, fail_fast=fail_fast, on_status=logger.info)
    try:
        result = asyncio.run(scanner.scan(sources, direct=args.direct))
    except ScanAborted as e:
        print(e.failure.display, file=sys.stderr)
        return EXIT_ERROR
    result = result.model_copy(update={"failures": read_failures + result.failures})

    if args.tui:
        from dep_inspector.app import DepInspectorApp

        DepInspectorApp(result).run()
    elif args.json:
        print(result.graph.to_report().model_dump_json(indent=2))
    else:
        print(render_summary(result))

    for failure in result.failures:
        print(failure.display, file=sys.stderr)
    return EXIT_OK if result.ok else EXIT_PARTIAL


if __name__ == "__main__":
    sys.exit(main())
