"""Live syntax classification of raw prompt content.

Only checks whether references exist; never resolves or runs anything.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable

from .tokens import TokenKind, scan


class HighlightStyle(Enum):
    PLAIN = "plain"
    VALID_REFERENCE = "valid_reference"
    INVALID_REFERENCE = "invalid_reference"
    VALID_FILE = "valid_file"
    INVALID_FILE = "invalid_file"
    COMMAND = "command"

    @property
    def is_valid(self) -> bool:
        return self in (HighlightStyle.VALID_REFERENCE, HighlightStyle.VALID_FILE)

    @property
    def is_invalid(self) -> bool:
        return self in (HighlightStyle.INVALID_REFERENCE, HighlightStyle.INVALID_FILE)


@dataclass(frozen=True)
class HighlightSpan:
    """A [start, end) character range of the content and its style."""

    start: int
    end: int
    style: HighlightStyle
    text: str


def classify(
    content: str,
    exists: Callable[[str], bool],
    file_exists: Callable[[str], bool] | None = None,
) -> list[HighlightSpan]:
    """Classify every token of content.

    Args:
        content: Raw, unresolved buffer text.
        exists: Whether a prompt name exists.
        file_exists: Whether a file path exists; file references are
            invalid when omitted.
    """
    spans: list[HighlightSpan] = []
    for token in scan(content):
        if token.kind is TokenKind.REFERENCE:
            style = HighlightStyle.VALID_REFERENCE if exists(token.value) else HighlightStyle.INVALID_REFERENCE
        elif token.kind is TokenKind.FILE_REFERENCE:
            found = file_exists is not None and file_exists(token.value)
            style = HighlightStyle.VALID_FILE if found else HighlightStyle.INVALID_FILE
        elif token.kind is TokenKind.COMMAND:
            style = HighlightStyle.COMMAND
        else:
            style = HighlightStyle.PLAIN
        spans.append(HighlightSpan(token.start, token.end, style, token.text))
    return spans
