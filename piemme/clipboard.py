"""OS clipboard access through pyperclip."""

from __future__ import annotations

import pyperclip

from .errors import ClipboardError


class SystemClipboard:
    """Clipboard contract backed by the platform clipboard."""

    def set_text(self, text: str) -> None:
        try:
            pyperclip.copy(text)
        except pyperclip.PyperclipException as exc:
            raise ClipboardError(f"Clipboard unavailable: {exc}") from exc

    def get_text(self) -> str:
        try:
            return pyperclip.paste() or ""
        except pyperclip.PyperclipException as exc:
            raise ClipboardError(f"Clipboard unavailable: {exc}") from exc


class MemoryClipboard:
    """In-process clipboard used when the OS has none (and in tests)."""

    def __init__(self, text: str = "") -> None:
        self.text = text
        self.writes: list[str] = []

    def set_text(self, text: str) -> None:
        self.text = text
        self.writes.append(text)

    def get_text(self) -> str:
        return self.text
