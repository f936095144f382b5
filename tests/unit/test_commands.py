"""Tests for command execution."""

import os
import subprocess

from piemme.errors import DiagnosticKind
from piemme.render import CommandExecutor, run_shell_command
from tests.fixtures.fakes import RecordingRunner


class TestRunShellCommand:
    """Tests for run_shell_command() against a real shell."""

    def test_echo_output_is_trimmed(self):
        outcome = run_shell_command("echo hi")
        assert outcome.success
        assert outcome.output == "hi"
        assert outcome.replacement == "hi"

    def test_false_fails_with_exit_status(self):
        outcome = run_shell_command("false")
        assert not outcome.success
        assert outcome.kind is DiagnosticKind.COMMAND_NONZERO_EXIT
        assert outcome.output == "exit status 1"
        assert outcome.replacement == "<!-- Command failed: exit status 1 -->"

    def test_stderr_becomes_message(self):
        outcome = run_shell_command("echo oops 1>&2; exit 3")
        assert not outcome.success
        assert outcome.output == "oops"

    def test_undecodable_output_is_replaced(self):
        outcome = run_shell_command("printf '\\377\\376'")
        assert outcome.success
        assert outcome.output == "��"

    def test_null_byte_in_command(self):
        outcome = run_shell_command("echo a\x00b")
        assert not outcome.success
        assert outcome.kind is DiagnosticKind.COMMAND_SPAWN_FAILURE

    def test_runs_in_working_directory(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        outcome = run_shell_command("pwd -P")
        assert os.path.realpath(outcome.output) == os.path.realpath(tmp_path)

    def test_spawn_failure(self, monkeypatch):
        def fail(*args, **kwargs):
            raise FileNotFoundError("sh not found")

        monkeypatch.setattr(subprocess, "run", fail)
        outcome = run_shell_command("echo hi")
        assert not outcome.success
        assert outcome.kind is DiagnosticKind.COMMAND_SPAWN_FAILURE
        assert "sh not found" in outcome.output


class TestCommandExecutor:
    """Tests for CommandExecutor."""

    def test_failure_does_not_stop_siblings(self):
        executor = CommandExecutor()
        result = executor.run_all("a {{echo hi}} b {{false}} c {{echo there}}")
        assert result.text == "a hi b <!-- Command failed: exit status 1 --> c there"
        assert [d.kind for d in result.diagnostics] == [DiagnosticKind.COMMAND_NONZERO_EXIT]

    def test_binary_output_does_not_stop_siblings(self):
        result = CommandExecutor().run_all("{{printf '\\377'}} and {{echo hi}}")
        assert result.text == "� and hi"
        assert result.diagnostics == []

    def test_commands_run_in_document_order(self):
        runner = RecordingRunner()
        CommandExecutor(runner).run_all("{{one}} {{two}} {{three}}")
        assert runner.calls == ["one", "two", "three"]

    def test_commands_in(self):
        assert CommandExecutor().commands_in("x {{a}} [[b]] {{ c }}") == ["a", "c"]

    def test_safe_mode_without_confirmer_aborts(self):
        runner = RecordingRunner()
        result = CommandExecutor(runner).execute("{{rm -rf x}}", safe_mode=True)
        assert result.aborted
        assert result.text == "{{rm -rf x}}"
        assert runner.calls == []

    def test_safe_mode_declined(self):
        runner = RecordingRunner()
        asked = []

        def decline(commands):
            asked.append(list(commands))
            return False

        result = CommandExecutor(runner).execute("{{a}} {{b}}", safe_mode=True, confirm=decline)
        assert result.aborted
        assert asked == [["a", "b"]]
        assert runner.calls == []

    def test_safe_mode_confirmed(self):
        runner = RecordingRunner({"a": "1"})
        result = CommandExecutor(runner).execute("x={{a}}", safe_mode=True, confirm=lambda commands: True)
        assert not result.aborted
        assert result.text == "x=1"

    def test_safe_mode_off_runs_without_asking(self):
        runner = RecordingRunner({"a": "1"})

        def never(commands):
            raise AssertionError("should not ask")

        result = CommandExecutor(runner).execute("{{a}}", safe_mode=False, confirm=never)
        assert result.text == "1"

    def test_no_commands_never_asks(self):
        def never(commands):
            raise AssertionError("should not ask")

        result = CommandExecutor(RecordingRunner()).execute("plain", safe_mode=True, confirm=never)
        assert result.text == "plain"
        assert not result.aborted
