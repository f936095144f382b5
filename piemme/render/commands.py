"""Execution of {{command}} tokens in resolved text."""

from __future__ import annotations

import os
import subprocess
from dataclasses import dataclass, field
from typing import Callable, Sequence

from ..errors import DiagnosticKind
from ..protocols import CommandRunner
from .resolver import Diagnostic
from .tokens import TokenKind, iter_commands, scan

FAILURE_MARKER = "<!-- Command failed: {message} -->"

Confirm = Callable[[Sequence[str]], bool]


@dataclass(frozen=True)
class CommandOutcome:
    """What happened to one command token."""

    command: str
    success: bool
    output: str
    kind: DiagnosticKind | None = None

    @property
    def replacement(self) -> str:
        if self.success:
            return self.output
        return FAILURE_MARKER.format(message=self.output)


@dataclass
class ExecutionResult:
    text: str
    outcomes: list[CommandOutcome] = field(default_factory=list)
    diagnostics: list[Diagnostic] = field(default_factory=list)
    aborted: bool = False

    @property
    def commands(self) -> list[str]:
        return [outcome.command for outcome in self.outcomes]


def run_shell_command(command: str, cwd: str | None = None) -> CommandOutcome:
    """Run one command through ``sh -c`` and capture its output.

    Blocks until the command exits; no timeout is applied.
    """
    try:
        result = subprocess.run(
            ["sh", "-c", command],
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
            cwd=cwd or os.getcwd(),
        )
    except (OSError, ValueError) as e:
        return CommandOutcome(command, False, str(e), DiagnosticKind.COMMAND_SPAWN_FAILURE)

    if result.returncode == 0:
        return CommandOutcome(command, True, result.stdout.strip())
    message = result.stderr.strip() or f"exit status {result.returncode}"
    return CommandOutcome(command, False, message, DiagnosticKind.COMMAND_NONZERO_EXIT)


class CommandExecutor:
    """Finds command tokens and replaces them with their output.

    Commands run one at a time in document order. A failing command is
    replaced by a failure marker and the rest still run.
    """

    def __init__(self, runner: CommandRunner = run_shell_command) -> None:
        self._runner = runner

    def commands_in(self, text: str) -> list[str]:
        return [token.value for token in iter_commands(text)]

    def execute(self, text: str, *, safe_mode: bool, confirm: Confirm | None = None) -> ExecutionResult:
        """Run the commands in text, asking first when safe mode is on.

        Declining (or having nobody to ask) returns the text untouched with
        ``aborted`` set, and nothing is run.
        """
        commands = self.commands_in(text)
        if not commands:
            return ExecutionResult(text=text)
        if safe_mode and (confirm is None or not confirm(commands)):
            return ExecutionResult(text=text, aborted=True)
        return self.run_all(text)

    def run_all(self, text: str) -> ExecutionResult:
        """Run every command in text without asking."""
        result = ExecutionResult(text="")
        parts: list[str] = []
        for token in scan(text):
            if token.kind is not TokenKind.COMMAND:
                parts.append(token.text)
                continue
            outcome = self._runner(token.value)
            result.outcomes.append(outcome)
            if not outcome.success and outcome.kind is not None:
                result.diagnostics.append(
                    Diagnostic(outcome.kind, outcome.command, f"Command failed: {outcome.command}: {outcome.output}")
                )
            parts.append(outcome.replacement)
        result.text = "".join(parts)
        return result
