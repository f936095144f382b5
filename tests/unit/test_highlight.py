"""Tests for live highlight classification."""

from piemme.render import HighlightStyle, classify, highlight_spans
from piemme.store import LocalFileAccess
from tests.fixtures.fakes import DictFileAccess, DictRepository


class TestClassify:
    """Tests for classify()."""

    def test_styles(self):
        content = "[[a]] [[missing]] {{ls}} [[file:x.txt]] [[file:nope]]"
        spans = classify(content, exists=lambda name: name == "a", file_exists=lambda path: path == "x.txt")
        styled = [(s.text, s.style) for s in spans if s.style is not HighlightStyle.PLAIN]
        assert styled == [
            ("[[a]]", HighlightStyle.VALID_REFERENCE),
            ("[[missing]]", HighlightStyle.INVALID_REFERENCE),
            ("{{ls}}", HighlightStyle.COMMAND),
            ("[[file:x.txt]]", HighlightStyle.VALID_FILE),
            ("[[file:nope]]", HighlightStyle.INVALID_FILE),
        ]

    def test_spans_cover_content(self):
        content = "hi [[a]] there {{b}}"
        spans = classify(content, exists=lambda name: True)
        assert spans[0].start == 0
        assert spans[-1].end == len(content)
        for left, right in zip(spans, spans[1:]):
            assert left.end == right.start

    def test_file_references_invalid_without_checker(self):
        (span,) = classify("[[file:x]]", exists=lambda name: True)
        assert span.style is HighlightStyle.INVALID_FILE
        assert span.style.is_invalid

    def test_command_style_is_fixed(self):
        (span,) = classify("{{definitely-not-a-command}}", exists=lambda name: False)
        assert span.style is HighlightStyle.COMMAND
        assert not span.style.is_invalid


class TestHighlightSpans:
    """Tests for highlight_spans() with collaborators."""

    def test_only_existence_is_queried(self):
        repo = DictRepository({"a": "[[b]]"})
        spans = highlight_spans("[[a]]", repo, DictFileAccess())
        assert spans[0].style is HighlightStyle.VALID_REFERENCE
        assert repo.lookups == []

    def test_file_existence(self):
        files = DictFileAccess({"ctx.md": "..."})
        spans = highlight_spans("[[file:ctx.md]]", DictRepository(), files)
        assert spans[0].style is HighlightStyle.VALID_FILE
        assert spans[0].style.is_valid

    def test_unreadable_paths_are_invalid(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        content = "see [[file:~nosuchuser_zz/a.txt]] and [[file:a\x00b]]"
        spans = highlight_spans(content, DictRepository(), LocalFileAccess())
        styled = [s.style for s in spans if s.style is not HighlightStyle.PLAIN]
        assert styled == [HighlightStyle.INVALID_FILE, HighlightStyle.INVALID_FILE]
