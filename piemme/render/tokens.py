"""Token scanner for prompt content.

Recognises three inline forms:

    [[name]]          reference to another prompt
    [[file:path]]     reference to a file, relative to the working directory
    {{shell text}}    command whose output replaces the token

Tokens never nest. A token runs from its opening delimiter to the first
matching closer. An opener without a closer, or a delimiter pair with
nothing inside, is plain text.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto

REFERENCE_OPEN = "[["
REFERENCE_CLOSE = "]]"
COMMAND_OPEN = "{{"
COMMAND_CLOSE = "}}"
FILE_PREFIX = "file:"

_CLOSERS = {REFERENCE_OPEN: REFERENCE_CLOSE, COMMAND_OPEN: COMMAND_CLOSE}


class TokenKind(Enum):
    LITERAL = auto()
    REFERENCE = auto()
    FILE_REFERENCE = auto()
    COMMAND = auto()


@dataclass(frozen=True)
class Token:
    """One span of scanned content.

    ``text`` is the exact source slice; ``value`` is the prompt name, file
    path or shell text with surrounding whitespace removed (for literals it
    equals ``text``).
    """

    kind: TokenKind
    text: str
    value: str
    start: int
    end: int
    unterminated: bool = False

    @property
    def is_reference(self) -> bool:
        return self.kind in (TokenKind.REFERENCE, TokenKind.FILE_REFERENCE)


def _find_opener(content: str, pos: int) -> int:
    """Index of the next [[ or {{ at or after pos, or -1."""
    candidates = [i for i in (content.find(REFERENCE_OPEN, pos), content.find(COMMAND_OPEN, pos)) if i != -1]
    return min(candidates) if candidates else -1


def _classify(opener: str, inner: str) -> tuple[TokenKind, str] | None:
    value = inner.strip()
    if opener == COMMAND_OPEN:
        return (TokenKind.COMMAND, value) if value else None
    if value.startswith(FILE_PREFIX):
        path = value[len(FILE_PREFIX):].strip()
        return (TokenKind.FILE_REFERENCE, path) if path else None
    return (TokenKind.REFERENCE, value) if value else None


def scan(content: str) -> list[Token]:
    """Split content into an ordered list of tokens covering all of it."""
    tokens: list[Token] = []
    literal_start = 0
    pos = 0

    def flush(until: int) -> None:
        if until > literal_start:
            text = content[literal_start:until]
            tokens.append(Token(TokenKind.LITERAL, text, text, literal_start, until))

    while True:
        start = _find_opener(content, pos)
        if start == -1:
            break
        opener = content[start : start + 2]
        closer = _CLOSERS[opener]
        close_at = content.find(closer, start + 2)

        if close_at == -1:
            # No closer anywhere: the opener is text
            flush(start)
            tokens.append(Token(TokenKind.LITERAL, opener, opener, start, start + 2, unterminated=True))
            literal_start = pos = start + 2
            continue

        end = close_at + 2
        classified = _classify(opener, content[start + 2 : close_at])
        if classified is None:
            # Empty pair stays in the surrounding literal
            pos = end
            continue

        kind, value = classified
        flush(start)
        tokens.append(Token(kind, content[start:end], value, start, end))
        literal_start = pos = end

    flush(len(content))
    return tokens


def iter_commands(content: str) -> list[Token]:
    """Command tokens of content, in document order."""
    return [token for token in scan(content) if token.kind is TokenKind.COMMAND]
