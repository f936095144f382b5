"""In-memory text buffer for the prompt editor.

Owns the line-oriented content of one prompt being edited together with
the cursor, an optional selection and the undo/redo history. Navigation
helpers compute positions without moving the cursor, so motions can be
used both for movement and as operator targets.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from ..errors import BufferInvariantViolation
from .state import Position, SelectionKind

# Word characters for the small-word definition used by w/b/e
WORD_CHARS = re.compile(r"[a-zA-Z0-9_]")


@dataclass(frozen=True)
class Snapshot:
    """Immutable copy of buffer content and cursor."""

    lines: tuple[str, ...]
    cursor: Position


@dataclass(frozen=True)
class UndoRecord:
    """One logical edit: the state before and after it."""

    before: Snapshot
    after: Snapshot


@dataclass(frozen=True)
class Selection:
    """Visual selection anchored at one end, cursor at the other."""

    anchor: Position
    kind: SelectionKind = SelectionKind.CHARACTER


class TextBuffer:
    """Mutable lines, cursor, selection and undo history of one prompt.

    Invariants:
        - there is always at least one line
        - cursor row is within [0, line_count - 1]
        - cursor column is within [0, len(line)]

    Every public mutating call that changes content records exactly one
    undo entry. Calls made between ``begin_group`` and ``end_group`` are
    merged into a single entry (one insert run, one change).
    """

    def __init__(self, text: str = "") -> None:
        self._lines: list[str] = text.split("\n")
        self._cursor: Position = (0, 0)
        self.selection: Selection | None = None
        self._undo_stack: list[UndoRecord] = []
        self._redo_stack: list[UndoRecord] = []
        self._group_depth = 0
        self._group_start: Snapshot | None = None

    # ─────────────────────────────────────────────────────────────────
    # Properties
    # ─────────────────────────────────────────────────────────────────

    @property
    def text(self) -> str:
        """Full buffer text."""
        return "\n".join(self._lines)

    @property
    def lines(self) -> list[str]:
        """Buffer as a list of lines (a copy)."""
        return list(self._lines)

    @property
    def line_count(self) -> int:
        return len(self._lines)

    @property
    def cursor(self) -> Position:
        return self._cursor

    @property
    def cursor_row(self) -> int:
        return self._cursor[0]

    @property
    def cursor_col(self) -> int:
        return self._cursor[1]

    @property
    def current_line(self) -> str:
        return self._lines[self.cursor_row]

    @property
    def current_line_length(self) -> int:
        return len(self.current_line)

    @property
    def can_undo(self) -> bool:
        return bool(self._undo_stack)

    @property
    def can_redo(self) -> bool:
        return bool(self._redo_stack)

    def line(self, row: int) -> str:
        return self._lines[row]

    def check_invariants(self) -> None:
        """Raise BufferInvariantViolation if the buffer is inconsistent."""
        if not self._lines:
            raise BufferInvariantViolation("buffer has no lines")
        row, col = self._cursor
        if not 0 <= row < len(self._lines):
            raise BufferInvariantViolation(f"cursor row {row} outside buffer")
        if not 0 <= col <= len(self._lines[row]):
            raise BufferInvariantViolation(f"cursor column {col} outside line {row}")

    # ─────────────────────────────────────────────────────────────────
    # Cursor and selection
    # ─────────────────────────────────────────────────────────────────

    def clamp(self, pos: Position) -> Position:
        """Clamp a position into the buffer."""
        row = max(0, min(pos[0], len(self._lines) - 1))
        col = max(0, min(pos[1], len(self._lines[row])))
        return (row, col)

    def move_cursor(self, pos: Position) -> None:
        """Move cursor to position, clamped to the buffer."""
        self._cursor = self.clamp(pos)

    def set_selection(self, anchor: Position, kind: SelectionKind = SelectionKind.CHARACTER) -> None:
        self.selection = Selection(self.clamp(anchor), kind)

    def clear_selection(self) -> None:
        self.selection = None

    def selection_bounds(self) -> tuple[Position, Position] | None:
        """Return (start, end) of the selection with start <= end, or None."""
        if self.selection is None:
            return None
        anchor = self.selection.anchor
        cursor = self._cursor
        return (min(anchor, cursor), max(anchor, cursor))

    # ─────────────────────────────────────────────────────────────────
    # Cursor Movement (returns new position, doesn't move cursor)
    # ─────────────────────────────────────────────────────────────────

    def get_cursor_left(self, count: int = 1) -> Position:
        """Get position after moving left by count chars (stays on line)."""
        return (self.cursor_row, max(0, self.cursor_col - count))

    def get_cursor_right(self, count: int = 1, allow_eol: bool = False) -> Position:
        """Get position after moving right by count chars (stays on line)."""
        line_len = self.current_line_length
        max_col = line_len if allow_eol else max(0, line_len - 1)
        return (self.cursor_row, min(max_col, self.cursor_col + count))

    def get_cursor_up(self, count: int = 1) -> Position:
        new_row = max(0, self.cursor_row - count)
        new_col = min(self.cursor_col, max(0, len(self._lines[new_row]) - 1))
        return (new_row, new_col)

    def get_cursor_down(self, count: int = 1) -> Position:
        new_row = min(len(self._lines) - 1, self.cursor_row + count)
        new_col = min(self.cursor_col, max(0, len(self._lines[new_row]) - 1))
        return (new_row, new_col)

    def get_line_start(self) -> Position:
        return (self.cursor_row, 0)

    def get_line_end(self) -> Position:
        """Position of the last character on the current line ($ motion)."""
        return (self.cursor_row, max(0, self.current_line_length - 1))

    def get_first_non_blank(self, row: int | None = None) -> Position:
        """Position of first non-blank char on a line (^ motion)."""
        if row is None:
            row = self.cursor_row
        for i, char in enumerate(self._lines[row]):
            if not char.isspace():
                return (row, i)
        return (row, 0)

    def get_document_start(self) -> Position:
        return (0, 0)

    def get_document_end(self) -> Position:
        """First non-blank of the last line (G motion)."""
        return self.get_first_non_blank(len(self._lines) - 1)

    def get_paragraph_forward(self) -> Position:
        """Next blank line that follows non-blank content, or buffer end."""
        found_non_empty = False
        for row in range(self.cursor_row + 1, len(self._lines)):
            if self._lines[row].strip():
                found_non_empty = True
            elif found_non_empty:
                return (row, 0)
        last_row = len(self._lines) - 1
        return (last_row, len(self._lines[last_row]))

    def get_paragraph_backward(self) -> Position:
        """Previous blank line that precedes non-blank content, or buffer start."""
        found_non_empty = False
        for row in range(self.cursor_row - 1, -1, -1):
            if self._lines[row].strip():
                found_non_empty = True
            elif found_non_empty:
                return (row, 0)
        return (0, 0)

    # ─────────────────────────────────────────────────────────────────
    # Word Navigation
    # ─────────────────────────────────────────────────────────────────

    def _get_char_class(self, char: str) -> int:
        """Get character class: 0=whitespace, 1=word, 2=punctuation."""
        if char.isspace():
            return 0
        if WORD_CHARS.match(char):
            return 1
        return 2

    def get_word_start_forward(self, count: int = 1) -> Position:
        """Get position of next word start (w motion)."""
        row, col = self._cursor
        lines = self._lines

        for _ in range(count):
            if row >= len(lines):
                break
            line = lines[row]
            if col < len(line):
                start_class = self._get_char_class(line[col])
                while col < len(line) and self._get_char_class(line[col]) == start_class:
                    col += 1
            while col < len(line) and line[col].isspace():
                col += 1
            if col >= len(line):
                if row + 1 >= len(lines):
                    # No next word: stop at end of buffer
                    col = len(line)
                    break
                row += 1
                col = 0
                while col < len(lines[row]) and lines[row][col].isspace():
                    col += 1

        return (row, col)

    def get_word_end_forward(self, count: int = 1) -> Position:
        """Get position of next word end (e motion)."""
        row, col = self._cursor
        lines = self._lines

        for _ in range(count):
            col += 1
            # Skip whitespace, crossing line ends
            while True:
                line = lines[row]
                while col < len(line) and line[col].isspace():
                    col += 1
                if col < len(line):
                    break
                if row + 1 >= len(lines):
                    return (row, max(0, len(line) - 1))
                row += 1
                col = 0
            char_class = self._get_char_class(line[col])
            while col < len(line) - 1 and self._get_char_class(line[col + 1]) == char_class:
                col += 1

        return (row, col)

    def get_word_start_backward(self, count: int = 1) -> Position:
        """Get position of previous word start (b motion)."""
        row, col = self._cursor
        lines = self._lines

        for _ in range(count):
            col -= 1
            # Skip whitespace backward, crossing line starts
            while True:
                line = lines[row]
                while col >= 0 and line[col].isspace():
                    col -= 1
                if col >= 0:
                    break
                if row == 0:
                    return (0, 0)
                row -= 1
                col = len(lines[row]) - 1
            char_class = self._get_char_class(line[col])
            while col > 0 and self._get_char_class(line[col - 1]) == char_class:
                col -= 1

        return (row, max(0, col))

    # ─────────────────────────────────────────────────────────────────
    # Reading
    # ─────────────────────────────────────────────────────────────────

    def get_text_between(self, start: Position, end: Position) -> str:
        """Get text between two positions (end exclusive)."""
        if start > end:
            start, end = end, start
        start_row, start_col = self.clamp(start)
        end_row, end_col = self.clamp(end)

        if start_row == end_row:
            return self._lines[start_row][start_col:end_col]

        parts = [self._lines[start_row][start_col:]]
        parts.extend(self._lines[start_row + 1 : end_row])
        parts.append(self._lines[end_row][:end_col])
        return "\n".join(parts)

    def get_line_range(self, start_row: int, end_row: int) -> str:
        """Get complete lines from start_row to end_row (inclusive)."""
        start_row = max(0, start_row)
        end_row = min(len(self._lines) - 1, end_row)
        return "\n".join(self._lines[start_row : end_row + 1])

    def yank(self, start: Position, end: Position) -> str:
        """Return the text in [start, end) without modifying anything."""
        return self.get_text_between(start, end)

    # ─────────────────────────────────────────────────────────────────
    # Text Manipulation
    # ─────────────────────────────────────────────────────────────────

    def insert(self, text: str) -> None:
        """Insert text at the cursor; the cursor ends after the text."""
        if not text:
            return
        before = self._snapshot()
        row, col = self._cursor
        line = self._lines[row]
        new_lines = (line[:col] + text + line[col:]).split("\n")
        self._lines[row : row + 1] = new_lines
        last_row = row + len(new_lines) - 1
        tail = len(line) - col
        self._cursor = (last_row, len(self._lines[last_row]) - tail)
        self._record(before)

    def delete_range(self, start: Position, end: Position) -> str:
        """Delete text between positions (end exclusive). Returns deleted text."""
        if start > end:
            start, end = end, start
        start = self.clamp(start)
        end = self.clamp(end)
        deleted = self.get_text_between(start, end)
        if not deleted:
            return ""
        before = self._snapshot()
        start_row, start_col = start
        end_row, end_col = end
        merged = self._lines[start_row][:start_col] + self._lines[end_row][end_col:]
        self._lines[start_row : end_row + 1] = [merged]
        self._cursor = start
        self._record(before)
        return deleted

    def delete_lines(self, start_row: int, end_row: int) -> str:
        """Delete complete lines from start_row to end_row (inclusive).

        Deleting every line leaves one empty line.
        """
        start_row = max(0, start_row)
        end_row = min(len(self._lines) - 1, end_row)
        before = self._snapshot()
        deleted = "\n".join(self._lines[start_row : end_row + 1])

        del self._lines[start_row : end_row + 1]
        if not self._lines:
            self._lines.append("")
        row = min(start_row, len(self._lines) - 1)
        self._cursor = self.get_first_non_blank(row)
        self._record(before)
        return deleted

    def replace_lines(self, start_row: int, end_row: int, text: str) -> str:
        """Replace complete lines with text. Returns the replaced lines."""
        start_row = max(0, start_row)
        end_row = min(len(self._lines) - 1, end_row)
        before = self._snapshot()
        replaced = "\n".join(self._lines[start_row : end_row + 1])
        self._lines[start_row : end_row + 1] = text.split("\n")
        self._cursor = self.clamp((start_row, len(text.split("\n")[0])))
        self._record(before)
        return replaced

    def put(self, text: str, kind: SelectionKind, before: bool = False) -> None:
        """Insert yanked text relative to the cursor.

        Character-wise text goes at (before) or just after (after) the
        cursor. Line-wise text becomes whole new lines above or below the
        cursor line.
        """
        if not text and kind is SelectionKind.CHARACTER:
            return
        snapshot = self._snapshot()
        row, col = self._cursor
        if kind is SelectionKind.LINE:
            new_lines = text.split("\n")
            target = row if before else row + 1
            self._lines[target:target] = new_lines
            self._cursor = self.get_first_non_blank(target)
        else:
            line = self._lines[row]
            if not before and line:
                col = min(col + 1, len(line))
            new_lines = (line[:col] + text + line[col:]).split("\n")
            self._lines[row : row + 1] = new_lines
            last_row = row + len(new_lines) - 1
            tail = len(line) - col
            end_col = len(self._lines[last_row]) - tail
            self._cursor = (last_row, max(0, end_col - 1))
        self._record(snapshot)

    # ─────────────────────────────────────────────────────────────────
    # Undo / Redo
    # ─────────────────────────────────────────────────────────────────

    def begin_group(self) -> None:
        """Start merging subsequent edits into one undo record."""
        if self._group_depth == 0:
            self._group_start = self._snapshot()
        self._group_depth += 1

    def end_group(self) -> None:
        """Close the current group and record it if content changed."""
        if self._group_depth == 0:
            return
        self._group_depth -= 1
        if self._group_depth == 0 and self._group_start is not None:
            start = self._group_start
            self._group_start = None
            self._push(start, self._snapshot())

    def undo(self) -> bool:
        """Restore the state before the last edit. Returns False if nothing to undo."""
        if self._group_depth:
            self._group_depth = 1
            self.end_group()
        if not self._undo_stack:
            return False
        record = self._undo_stack.pop()
        self._redo_stack.append(record)
        self._restore(record.before)
        return True

    def redo(self) -> bool:
        """Re-apply the last undone edit. Returns False if nothing to redo."""
        if not self._redo_stack:
            return False
        record = self._redo_stack.pop()
        self._undo_stack.append(record)
        self._restore(record.after)
        return True

    def _snapshot(self) -> Snapshot:
        return Snapshot(tuple(self._lines), self._cursor)

    def _restore(self, snapshot: Snapshot) -> None:
        self._lines = list(snapshot.lines)
        self._cursor = self.clamp(snapshot.cursor)
        self.selection = None

    def _record(self, before: Snapshot) -> None:
        if self._group_depth:
            return
        self._push(before, self._snapshot())

    def _push(self, before: Snapshot, after: Snapshot) -> None:
        if before.lines == after.lines:
            return
        self._undo_stack.append(UndoRecord(before, after))
        self._redo_stack.clear()
