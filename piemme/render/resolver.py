"""Recursive expansion of prompt and file references.

Every failure is recovered locally: the output always comes back as text,
with problems embedded as visible HTML comments and reported separately
as diagnostics for display.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable

from ..errors import DiagnosticKind
from ..protocols import FileAccess, Repository
from .tokens import Token, TokenKind, iter_commands, scan

MAX_DEPTH = 10

CIRCULAR_MARKER = "<!-- [CIRCULAR REFERENCE DETECTED: {name}] -->"
FILE_ERROR_MARKER = "<!-- [FILE ERROR: {path} - {message}] -->"

Lookup = Callable[[str], "str | None"]


@dataclass(frozen=True)
class ResolutionContext:
    """Names currently being expanded and how deep the expansion is.

    Passed by value: each level gets its own copy via ``descend``.
    """

    ancestors: tuple[str, ...] = ()
    depth: int = 0

    @classmethod
    def root(cls, name: str | None = None) -> ResolutionContext:
        """Context for a top-level resolve, optionally of a named prompt."""
        return cls(ancestors=(name,) if name else ())

    def descend(self, name: str) -> ResolutionContext:
        return ResolutionContext(ancestors=self.ancestors + (name,), depth=self.depth + 1)


@dataclass(frozen=True)
class Diagnostic:
    """A recoverable problem found while resolving or running commands."""

    kind: DiagnosticKind
    subject: str
    message: str

    def __str__(self) -> str:
        return self.message


@dataclass
class ResolveResult:
    """Resolved text plus what was found along the way."""

    text: str
    diagnostics: list[Diagnostic] = field(default_factory=list)
    references: list[str] = field(default_factory=list)
    file_references: list[str] = field(default_factory=list)

    @property
    def commands(self) -> list[str]:
        """Shell texts of the command tokens left in the resolved text."""
        return [token.value for token in iter_commands(self.text)]

    @property
    def ok(self) -> bool:
        return not self.diagnostics


def resolve(
    content: str,
    lookup: Lookup,
    context: ResolutionContext | None = None,
    file_access: FileAccess | None = None,
) -> ResolveResult:
    """Expand references in content.

    Args:
        content: Raw prompt text.
        lookup: Returns a prompt's content by name, or None.
        context: Ancestors and depth of this call; a fresh root if omitted.
        file_access: Reads [[file:...]] targets. Without it file references
            are left as written.
    """
    result = ResolveResult(text="")
    result.text = _resolve(content, lookup, context or ResolutionContext(), file_access, result)
    return result


def _resolve(
    content: str,
    lookup: Lookup,
    context: ResolutionContext,
    file_access: FileAccess | None,
    result: ResolveResult,
) -> str:
    parts: list[str] = []
    for token in scan(content):
        if token.kind is TokenKind.REFERENCE:
            parts.append(_resolve_reference(token, lookup, context, file_access, result))
        elif token.kind is TokenKind.FILE_REFERENCE:
            parts.append(_resolve_file(token, file_access, result))
        else:
            if token.unterminated:
                result.diagnostics.append(
                    Diagnostic(
                        DiagnosticKind.PARSE_INCOMPLETE,
                        token.text,
                        f"Unterminated '{token.text}' at offset {token.start}",
                    )
                )
            # Literals and commands pass through unchanged
            parts.append(token.text)
    return "".join(parts)


def _resolve_reference(
    token: Token,
    lookup: Lookup,
    context: ResolutionContext,
    file_access: FileAccess | None,
    result: ResolveResult,
) -> str:
    name = token.value

    if name in context.ancestors:
        result.diagnostics.append(
            Diagnostic(DiagnosticKind.CYCLE_DETECTED, name, f"Circular reference: {name}")
        )
        return CIRCULAR_MARKER.format(name=name)

    if context.depth >= MAX_DEPTH:
        result.diagnostics.append(
            Diagnostic(
                DiagnosticKind.DEPTH_EXCEEDED,
                name,
                f"Reference depth limit ({MAX_DEPTH}) reached at '{name}'",
            )
        )
        return token.text

    content = lookup(name)
    if content is None:
        result.diagnostics.append(
            Diagnostic(DiagnosticKind.LOOKUP_MISS, name, f"Prompt not found: {name}")
        )
        return token.text

    result.references.append(name)
    return _resolve(content, lookup, context.descend(name), file_access, result)


def _resolve_file(token: Token, file_access: FileAccess | None, result: ResolveResult) -> str:
    path = token.value
    if file_access is None:
        return token.text
    try:
        content = file_access.read_file(path)
    except (OSError, ValueError, RuntimeError) as exc:
        message = str(exc)
        result.diagnostics.append(Diagnostic(DiagnosticKind.LOOKUP_MISS, path, f"{path}: {message}"))
        return FILE_ERROR_MARKER.format(path=path, message=message)
    result.file_references.append(path)
    return content


class ReferenceResolver:
    """Resolver bound to a repository and a file reader."""

    def __init__(self, repository: Repository, file_access: FileAccess | None = None) -> None:
        self._repository = repository
        self._file_access = file_access

    def resolve(self, content: str, root_name: str | None = None) -> ResolveResult:
        """Resolve content, treating root_name (if given) as already being expanded."""
        return resolve(
            content,
            self._repository.lookup_by_name,
            ResolutionContext.root(root_name),
            self._file_access,
        )
