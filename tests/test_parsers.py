"""Tests for the parser registry in parsers/__init__.py."""

import pytest

from dep_inspector.errors import ParseFailure
from dep_inspector.models import DpkgEntry, Ecosystem
from dep_inspector.parsers import FORMATS, get_format, parse, try_parse


class TestRegistry:
    def test_every_ecosystem_registered(self):
        assert set(FORMATS) == set(Ecosystem)

    def test_lookup_by_string_tag(self):
        assert get_format("dpkg").ecosystem == Ecosystem.dpkg

    def test_unknown_tag(self):
        with pytest.raises(ValueError):
            get_format("rpm")


class TestParse:
    def test_dispatches_by_tag(self, dpkg_status_text):
        entries = parse(Ecosystem.dpkg, dpkg_status_text)
        assert all(isinstance(e, DpkgEntry) for e in entries)

    def test_raises_failure(self):
        with pytest.raises(ParseFailure):
            parse(Ecosystem.dpkg, "Package: a\n")


class TestTryParse:
    def test_success_outcome(self, go_mod_text):
        outcome = try_parse("gomod", go_mod_text)
        assert outcome.ok
        assert outcome.ecosystem == Ecosystem.gomod
        assert len(outcome.entries) == 3

    def test_failure_outcome(self):
        outcome = try_parse(Ecosystem.npm, "{")
        assert not outcome.ok
        assert outcome.entries == []
        assert isinstance(outcome.failure, ParseFailure)
        assert outcome.failure.recoverable is True

    def test_safe_from_many_threads(self, dpkg_status_text):
        from concurrent.futures import ThreadPoolExecutor

        with ThreadPoolExecutor(max_workers=8) as pool:
            outcomes = list(pool.map(lambda _: try_parse("dpkg", dpkg_status_text), range(32)))
        assert all(o.entries == outcomes[0].entries for o in outcomes)
