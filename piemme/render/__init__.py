"""Token scanning, reference resolution, command execution and highlighting."""

from .commands import CommandExecutor, CommandOutcome, ExecutionResult, run_shell_command
from .highlight import HighlightSpan, HighlightStyle, classify
from .pipeline import (
    CopyOutcome,
    PendingCopy,
    copy_raw,
    copy_resolved,
    finish_copy,
    highlight_spans,
    prepare_copy,
    preview,
)
from .resolver import MAX_DEPTH, Diagnostic, ReferenceResolver, ResolutionContext, ResolveResult, resolve
from .tokens import Token, TokenKind, scan

__all__ = [
    "CommandExecutor",
    "CommandOutcome",
    "CopyOutcome",
    "Diagnostic",
    "ExecutionResult",
    "HighlightSpan",
    "HighlightStyle",
    "MAX_DEPTH",
    "PendingCopy",
    "ReferenceResolver",
    "ResolutionContext",
    "ResolveResult",
    "Token",
    "TokenKind",
    "classify",
    "copy_raw",
    "copy_resolved",
    "finish_copy",
    "highlight_spans",
    "prepare_copy",
    "preview",
    "resolve",
    "run_shell_command",
    "scan",
]
