"""Operator functions.

Operators act on a range of text defined by a motion or a selection.
They're the d in "dw", the c in "cc", the y in "y$".
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable

from .state import MotionType, Position, SelectionKind

if TYPE_CHECKING:
    from .buffer import TextBuffer
    from .register import YankRegister


@dataclass
class OperatorResult:
    """Result of an operator execution."""

    success: bool = True
    text: str = ""
    enter_insert: bool = False  # For 'c' operator


# Type alias for operator functions
OperatorFunc = Callable[
    ["TextBuffer", "YankRegister", Position, Position, MotionType],
    OperatorResult,
]


def _ordered(start: Position, end: Position) -> tuple[Position, Position]:
    return (start, end) if start <= end else (end, start)


def _inclusive_end(buf: TextBuffer, end: Position) -> Position:
    """Extend an inclusive end position past its final character."""
    row, col = end
    if col < len(buf.line(row)):
        return (row, col + 1)
    return end


# ─────────────────────────────────────────────────────────────────
# Core Operators
# ─────────────────────────────────────────────────────────────────


def operator_delete(
    buf: TextBuffer,
    register: YankRegister,
    start: Position,
    end: Position,
    motion_type: MotionType,
) -> OperatorResult:
    """Delete text in range into the register (d operator)."""
    if motion_type is MotionType.LINEWISE:
        start_row = min(start[0], end[0])
        end_row = max(start[0], end[0])
        deleted = buf.delete_lines(start_row, end_row)
        register.store(deleted, SelectionKind.LINE)
        return OperatorResult(text=deleted)

    start, end = _ordered(start, end)
    if motion_type is MotionType.INCLUSIVE:
        end = _inclusive_end(buf, end)
    deleted = buf.delete_range(start, end)
    if deleted:
        register.store(deleted, SelectionKind.CHARACTER)
    return OperatorResult(success=bool(deleted), text=deleted)


def operator_change(
    buf: TextBuffer,
    register: YankRegister,
    start: Position,
    end: Position,
    motion_type: MotionType,
) -> OperatorResult:
    """Delete text and enter insert mode (c operator).

    A line-wise change keeps one empty line in place of the changed lines
    so typing starts where the text used to be.
    """
    if motion_type is MotionType.LINEWISE:
        start_row = min(start[0], end[0])
        end_row = max(start[0], end[0])
        indent = buf.line(start_row)[: buf.get_first_non_blank(start_row)[1]]
        replaced = buf.replace_lines(start_row, end_row, indent)
        register.store(replaced, SelectionKind.LINE)
        buf.move_cursor((start_row, len(indent)))
        return OperatorResult(text=replaced, enter_insert=True)

    result = operator_delete(buf, register, start, end, motion_type)
    result.success = True
    result.enter_insert = True
    return result


def operator_yank(
    buf: TextBuffer,
    register: YankRegister,
    start: Position,
    end: Position,
    motion_type: MotionType,
) -> OperatorResult:
    """Copy text to the register (y operator)."""
    if motion_type is MotionType.LINEWISE:
        start_row = min(start[0], end[0])
        end_row = max(start[0], end[0])
        text = buf.get_line_range(start_row, end_row)
        register.store(text, SelectionKind.LINE)
        return OperatorResult(text=text)

    start, end = _ordered(start, end)
    if motion_type is MotionType.INCLUSIVE:
        end = _inclusive_end(buf, end)
    text = buf.yank(start, end)
    register.store(text, SelectionKind.CHARACTER)
    buf.move_cursor(start)
    return OperatorResult(text=text)


# ─────────────────────────────────────────────────────────────────
# Operator Registry
# ─────────────────────────────────────────────────────────────────

OPERATOR_HANDLERS: dict[str, OperatorFunc] = {
    "operator_delete": operator_delete,
    "operator_change": operator_change,
    "operator_yank": operator_yank,
}


def get_operator_handler(name: str) -> OperatorFunc | None:
    """Get an operator function by handler name."""
    return OPERATOR_HANDLERS.get(name)
