"""Motion functions.

Motions compute cursor destinations without modifying text.
They're used both for navigation and as targets for operators.

Motion functions are registered by name and looked up via the keymap.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable

from .state import MotionType, Position

if TYPE_CHECKING:
    from .buffer import TextBuffer


@dataclass
class MotionResult:
    """Result of a motion computation."""

    position: Position  # Target cursor position (row, col)
    type: MotionType = MotionType.EXCLUSIVE
    failed: bool = False  # True if the cursor could not move


# Type alias for motion functions
MotionFunc = Callable[["TextBuffer", int], MotionResult]


def _relative(buf: TextBuffer, pos: Position, motion_type: MotionType) -> MotionResult:
    """Result of a relative motion; it fails when the cursor cannot move."""
    return MotionResult(position=pos, type=motion_type, failed=pos == buf.cursor)


# ─────────────────────────────────────────────────────────────────
# Basic Cursor Motions (h, j, k, l)
# ─────────────────────────────────────────────────────────────────


def motion_left(buf: TextBuffer, count: int) -> MotionResult:
    """Move cursor left (h motion)."""
    return _relative(buf, buf.get_cursor_left(count), MotionType.EXCLUSIVE)


def motion_right(buf: TextBuffer, count: int) -> MotionResult:
    """Move cursor right (l motion)."""
    return _relative(buf, buf.get_cursor_right(count), MotionType.EXCLUSIVE)


def motion_up(buf: TextBuffer, count: int) -> MotionResult:
    return _relative(buf, buf.get_cursor_up(count), MotionType.LINEWISE)


def motion_down(buf: TextBuffer, count: int) -> MotionResult:
    return _relative(buf, buf.get_cursor_down(count), MotionType.LINEWISE)


# ─────────────────────────────────────────────────────────────────
# Line Position Motions (0, ^, $)
# ─────────────────────────────────────────────────────────────────


def motion_line_start(buf: TextBuffer, count: int) -> MotionResult:
    """Move to start of line (0 motion)."""
    return MotionResult(position=buf.get_line_start(), type=MotionType.EXCLUSIVE)


def motion_first_non_blank(buf: TextBuffer, count: int) -> MotionResult:
    """Move to first non-blank character (^ motion)."""
    return MotionResult(position=buf.get_first_non_blank(), type=MotionType.EXCLUSIVE)


def motion_line_end(buf: TextBuffer, count: int) -> MotionResult:
    """Move to end of line ($ motion)."""
    return MotionResult(position=buf.get_line_end(), type=MotionType.INCLUSIVE)


# ─────────────────────────────────────────────────────────────────
# Word Motions (w, e, b)
# ─────────────────────────────────────────────────────────────────


def motion_word_forward(buf: TextBuffer, count: int) -> MotionResult:
    """Move to next word start (w motion)."""
    return _relative(buf, buf.get_word_start_forward(count), MotionType.EXCLUSIVE)


def motion_word_end(buf: TextBuffer, count: int) -> MotionResult:
    """Move to next word end (e motion)."""
    return _relative(buf, buf.get_word_end_forward(count), MotionType.INCLUSIVE)


def motion_word_backward(buf: TextBuffer, count: int) -> MotionResult:
    """Move to previous word start (b motion)."""
    return _relative(buf, buf.get_word_start_backward(count), MotionType.EXCLUSIVE)


# ─────────────────────────────────────────────────────────────────
# Paragraph and Document Motions ({, }, gg, G)
# ─────────────────────────────────────────────────────────────────


def motion_paragraph_forward(buf: TextBuffer, count: int) -> MotionResult:
    """Move to the next blank line, or the end of the buffer (} motion)."""
    return _relative(buf, buf.get_paragraph_forward(), MotionType.EXCLUSIVE)


def motion_paragraph_backward(buf: TextBuffer, count: int) -> MotionResult:
    """Move to the previous blank line, or the start of the buffer ({ motion)."""
    return _relative(buf, buf.get_paragraph_backward(), MotionType.EXCLUSIVE)


def motion_document_start(buf: TextBuffer, count: int) -> MotionResult:
    """Move to start of document (gg motion)."""
    return MotionResult(position=buf.get_document_start(), type=MotionType.LINEWISE)


def motion_document_end(buf: TextBuffer, count: int) -> MotionResult:
    """Move to the last line (G motion)."""
    return MotionResult(position=buf.get_document_end(), type=MotionType.LINEWISE)


# ─────────────────────────────────────────────────────────────────
# Motion Registry - maps handler names from keymap to functions
# ─────────────────────────────────────────────────────────────────

MOTION_HANDLERS: dict[str, MotionFunc] = {
    "motion_left": motion_left,
    "motion_right": motion_right,
    "motion_up": motion_up,
    "motion_down": motion_down,
    "motion_line_start": motion_line_start,
    "motion_first_non_blank": motion_first_non_blank,
    "motion_line_end": motion_line_end,
    "motion_word_forward": motion_word_forward,
    "motion_word_end": motion_word_end,
    "motion_word_backward": motion_word_backward,
    "motion_paragraph_forward": motion_paragraph_forward,
    "motion_paragraph_backward": motion_paragraph_backward,
    "motion_document_start": motion_document_start,
    "motion_document_end": motion_document_end,
}


def get_motion_handler(name: str) -> MotionFunc | None:
    """Get a motion function by handler name."""
    return MOTION_HANDLERS.get(name)
