"""Custom exceptions for piemme."""

from __future__ import annotations

from enum import Enum


class PiemmeError(Exception):
    """Base class for piemme errors."""


class PromptNotFoundError(PiemmeError, LookupError):
    """Exception raised when a prompt that must exist is missing."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Prompt not found: {name}")


class DuplicatePromptError(PiemmeError):
    """Exception raised when creating or renaming onto an existing prompt name."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"A prompt named '{name}' already exists")


class InvalidPromptFileError(PiemmeError):
    """Exception raised when a prompt file has missing or invalid frontmatter."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Invalid prompt file {path}: {reason}")


class ClipboardError(PiemmeError):
    """Exception raised when the OS clipboard cannot be reached."""


class CopyAborted(PiemmeError):
    """The user declined to run the commands of a resolved copy."""

    def __init__(self, commands: list[str]):
        self.commands = list(commands)
        super().__init__(f"Copy aborted: {len(self.commands)} command(s) not confirmed")


class BufferInvariantViolation(AssertionError):
    """Programming error: the text buffer reached an impossible state."""


class DiagnosticKind(Enum):
    """Kinds of recoverable resolution problems."""

    PARSE_INCOMPLETE = "parse_incomplete"
    LOOKUP_MISS = "lookup_miss"
    CYCLE_DETECTED = "cycle_detected"
    DEPTH_EXCEEDED = "depth_exceeded"
    COMMAND_SPAWN_FAILURE = "command_spawn_failure"
    COMMAND_NONZERO_EXIT = "command_nonzero_exit"
