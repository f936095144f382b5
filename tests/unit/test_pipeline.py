"""Tests for the copy and preview pipeline."""

import pytest

from piemme.errors import CopyAborted, DiagnosticKind
from piemme.render import (
    CommandExecutor,
    HighlightStyle,
    copy_raw,
    copy_resolved,
    finish_copy,
    highlight_spans,
    prepare_copy,
    preview,
)
from tests.fixtures.fakes import DictFileAccess, DictRepository, RecordingRunner, ScriptedConfirmation


class TestCopyRaw:
    """Tests for copy_raw()."""

    def test_returns_text_unchanged(self, clipboard):
        text = "[[a]] {{echo hi}}"
        assert copy_raw(text, clipboard) == text
        assert clipboard.writes == [text]

    def test_without_clipboard(self):
        assert copy_raw("x") == "x"


class TestCopyResolved:
    """Tests for copy_resolved()."""

    def test_declined_confirmation_aborts(self, clipboard):
        """Safe mode on and user declines: Aborted, nothing on the clipboard, nothing run."""
        confirmation = ScriptedConfirmation(False)
        runner = RecordingRunner()
        outcome = copy_resolved(
            "now: {{echo hi}}",
            DictRepository(),
            DictFileAccess(),
            confirmation,
            safe_mode=True,
            clipboard=clipboard,
            executor=CommandExecutor(runner),
        )
        assert outcome.aborted
        assert outcome.text is None
        assert confirmation.calls == [["echo hi"]]
        assert clipboard.writes == []
        assert runner.calls == []
        with pytest.raises(CopyAborted) as excinfo:
            outcome.unwrap()
        assert excinfo.value.commands == ["echo hi"]

    def test_confirmed_runs_commands(self, clipboard):
        confirmation = ScriptedConfirmation(True)
        outcome = copy_resolved(
            "now: {{echo hi}}",
            DictRepository(),
            DictFileAccess(),
            confirmation,
            safe_mode=True,
            clipboard=clipboard,
        )
        assert outcome.unwrap() == "now: hi"
        assert clipboard.writes == ["now: hi"]

    def test_safe_mode_off_does_not_ask(self, clipboard):
        confirmation = ScriptedConfirmation(False)
        runner = RecordingRunner({"date": "2024"})
        outcome = copy_resolved(
            "{{date}}",
            DictRepository(),
            None,
            confirmation,
            safe_mode=False,
            clipboard=clipboard,
            executor=CommandExecutor(runner),
        )
        assert outcome.text == "2024"
        assert confirmation.calls == []

    def test_no_commands_never_asks(self):
        confirmation = ScriptedConfirmation(False)
        outcome = copy_resolved("plain", DictRepository(), None, confirmation, safe_mode=True)
        assert outcome.text == "plain"
        assert confirmation.calls == []

    def test_missing_confirmation_aborts_in_safe_mode(self):
        outcome = copy_resolved("{{ls}}", DictRepository(), None, None, safe_mode=True)
        assert outcome.aborted

    def test_invalid_reference_copied_verbatim(self, clipboard):
        """An invalid reference highlights as invalid but copies unchanged."""
        repo = DictRepository()
        text = "see [[missing]]"
        spans = highlight_spans(text, repo, DictFileAccess())
        assert spans[1].style is HighlightStyle.INVALID_REFERENCE

        assert copy_raw(text) == text
        outcome = copy_resolved(text, repo, DictFileAccess(), None, safe_mode=True, clipboard=clipboard)
        assert outcome.text == text
        assert clipboard.writes == [text]
        assert [d.kind for d in outcome.diagnostics] == [DiagnosticKind.LOOKUP_MISS]

    def test_commands_inside_references_run(self):
        repo = DictRepository({"today": "Date: {{date}}"})
        runner = RecordingRunner({"date": "2024-01-01"})
        confirmation = ScriptedConfirmation(True)
        outcome = copy_resolved(
            "[[today]]",
            repo,
            None,
            confirmation,
            safe_mode=True,
            executor=CommandExecutor(runner),
        )
        assert outcome.text == "Date: 2024-01-01"
        assert confirmation.calls == [["date"]]

    def test_failed_command_is_embedded(self):
        runner = RecordingRunner(failing=["bad"])
        outcome = copy_resolved(
            "{{bad}} {{good}}",
            DictRepository(),
            None,
            None,
            safe_mode=False,
            executor=CommandExecutor(runner),
        )
        assert outcome.text == "<!-- Command failed: boom --> GOOD"
        assert [d.kind for d in outcome.diagnostics] == [DiagnosticKind.COMMAND_NONZERO_EXIT]

    def test_root_name_guards_self_reference(self):
        repo = DictRepository({"me": "hi [[me]]"})
        outcome = copy_resolved("hi [[me]]", repo, None, None, safe_mode=True, root_name="me")
        assert outcome.text == "hi <!-- [CIRCULAR REFERENCE DETECTED: me] -->"


class TestTwoPhaseCopy:
    """Tests for prepare_copy() / finish_copy()."""

    def test_pending_lists_commands(self):
        pending = prepare_copy("{{a}} [[x]]", DictRepository({"x": "{{b}}"}), None, safe_mode=True)
        assert pending.commands == ["a", "b"]
        assert pending.needs_confirmation

    def test_no_confirmation_needed_when_safe_mode_off(self):
        pending = prepare_copy("{{a}}", DictRepository(), None, safe_mode=False)
        assert not pending.needs_confirmation

    def test_finish_declined(self):
        pending = prepare_copy("{{a}}", DictRepository(), None, safe_mode=True)
        outcome = finish_copy(pending, confirmed=False)
        assert outcome.aborted
        assert outcome.commands == ["a"]

    def test_finish_confirmed(self):
        runner = RecordingRunner({"a": "A"})
        pending = prepare_copy("<{{a}}>", DictRepository(), None, safe_mode=True)
        outcome = finish_copy(pending, confirmed=True, executor=CommandExecutor(runner))
        assert outcome.text == "<A>"


class TestPreview:
    """Tests for preview()."""

    def test_preview_resolves_but_does_not_run(self):
        repo = DictRepository({"b": "B"})
        files = DictFileAccess({"f": "F"})
        result = preview("{{echo hi}} [[b]] [[file:f]]", repo, files)
        assert result.text == "{{echo hi}} B F"
