"""Tests for parsers/pip.py — requirements files."""

import pytest

from dep_inspector.errors import ParseFailure
from dep_inspector.parsers.pip import direct_entries, parse, relationships


class TestParse:
    def test_requirements(self, requirements_text):
        reqs = parse(requirements_text)
        assert [r.name for r in reqs] == ["requests", "Flask", "urllib3", "numpy", "pkg"]

    def test_pinned(self, requirements_text):
        req = parse(requirements_text)[0]
        assert req.specifier == "==2.31.0"
        assert req.pinned_version == "2.31.0"
        assert req.line == 2

    def test_range_and_marker(self, requirements_text):
        req = parse(requirements_text)[1]
        assert req.specifier == ">=2.0,<3.0"
        assert req.marker == 'python_version >= "3.8"'
        assert req.pinned_version is None

    def test_extras_and_comment(self, requirements_text):
        req = parse(requirements_text)[2]
        assert req.extras == ("socks",)
        assert req.specifier == "~=1.26"

    def test_line_continuation(self, requirements_text):
        req = parse(requirements_text)[3]
        assert req.specifier == "==1.26.0"
        assert req.line == 7

    def test_url_reference(self, requirements_text):
        req = parse(requirements_text)[4]
        assert req.url == "https://example.com/pkg.whl"

    def test_hash_option_dropped(self):
        req = parse("requests==2.31.0 --hash=sha256:abcdef\n")[0]
        assert req.pinned_version == "2.31.0"

    def test_empty(self):
        assert parse("# nothing\n\n") == []

    def test_unnamed_local_path_skipped(self):
        reqs = parse("requests\n./vendor/pkg\n/abs/checkout\n")
        assert [r.name for r in reqs] == ["requests"]

    def test_archive_url_line(self):
        [req] = parse("https://example.com/dist/my-pkg-1.0.2-py3-none-any.whl\n")
        assert req.name == "my-pkg"
        assert req.pinned_version == "1.0.2"
        assert req.url == "https://example.com/dist/my-pkg-1.0.2-py3-none-any.whl"
        assert req.line == 1

    def test_local_archive_with_marker(self):
        [req] = parse("./vendor/lib-2.3.tar.gz ; python_version >= \"3.9\"\n")
        assert (req.name, req.pinned_version) == ("lib", "2.3")
        assert req.marker == 'python_version >= "3.9"'

    def test_egg_fragment_names_vcs_url(self):
        [req] = parse("git+https://github.com/org/tool.git@v1#egg=tool\n")
        assert req.name == "tool"
        assert req.specifier == ""
        assert req.url.startswith("git+https://")

    def test_unnamed_url_skipped(self):
        assert parse("https://example.com/archive/main\n") == []

    def test_form_feed_does_not_split_line(self):
        assert [r.name for r in parse("requests==1.0\x0c\nflask\n")] == ["requests", "flask"]

    def test_unparseable_line_fails(self):
        with pytest.raises(ParseFailure) as exc:
            parse("requests\nnot a requirement\n")
        assert exc.value.line == 2

    def test_bad_extra_fails(self):
        with pytest.raises(ParseFailure):
            parse("pkg[!bad]\n")


class TestDirect:
    def test_all_direct_no_links(self, requirements_text):
        reqs = parse(requirements_text)
        assert direct_entries(reqs) == reqs
        assert relationships(reqs) == []
