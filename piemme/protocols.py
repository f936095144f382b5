"""Collaborator contracts used by the editor and render core."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, Sequence

if TYPE_CHECKING:
    from .render.commands import CommandOutcome


class Repository(Protocol):
    def lookup_by_name(self, name: str) -> str | None:
        """Return the content of the named prompt, or None if there is none."""

    def exists(self, name: str) -> bool:
        """Return True if a prompt with this name exists."""


class FileAccess(Protocol):
    def read_file(self, path: str) -> str:
        """Return the file's text. Raises OSError (or a subclass) on failure."""

    def file_exists(self, path: str) -> bool:
        """Return True if path names a readable file."""


class Clipboard(Protocol):
    def set_text(self, text: str) -> None:
        """Place text on the OS clipboard."""

    def get_text(self) -> str:
        """Return the OS clipboard text."""


class ConfirmationUI(Protocol):
    def confirm(self, commands: Sequence[str]) -> bool:
        """Block until the user accepts (True) or declines (False) running commands."""


class CommandRunner(Protocol):
    def __call__(self, command: str) -> CommandOutcome:
        """Run one shell command and report its output or failure."""
