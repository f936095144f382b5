"""Editor state management.

Tracks the current mode and the pending operator of one editing session.
The mode is a property of the session, not of the buffer.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto

Position = tuple[int, int]


class EditorMode(Enum):
    """Modal editing states.

    The value is the display string shown by the renderer.
    """

    NORMAL = "NORMAL"
    INSERT = "INSERT"
    VISUAL = "VISUAL"
    VISUAL_LINE = "V-LINE"
    OPERATOR_PENDING = "OP-PENDING"

    @property
    def is_visual(self) -> bool:
        return self in (EditorMode.VISUAL, EditorMode.VISUAL_LINE)

    @property
    def border_hint(self) -> str:
        """Border colour hint for the renderer."""
        return _BORDER_HINTS[self]

    @property
    def cursor_hint(self) -> str:
        """Cursor shape hint for the renderer (block, bar or underline)."""
        if self is EditorMode.INSERT:
            return "bar"
        if self is EditorMode.OPERATOR_PENDING:
            return "underline"
        return "block"


_BORDER_HINTS = {
    EditorMode.NORMAL: "cyan",
    EditorMode.INSERT: "green",
    EditorMode.VISUAL: "magenta",
    EditorMode.VISUAL_LINE: "magenta",
    EditorMode.OPERATOR_PENDING: "yellow",
}


class SelectionKind(Enum):
    """Shape of a selection or of yanked text."""

    CHARACTER = auto()
    LINE = auto()


class MotionType(Enum):
    """How a motion's target bounds an operator range."""

    EXCLUSIVE = auto()  # Motion excludes final character
    INCLUSIVE = auto()  # Motion includes final character
    LINEWISE = auto()   # Operates on whole lines


class Operator(Enum):
    """Operators that wait for a motion."""

    DELETE = "d"
    CHANGE = "c"
    YANK = "y"


@dataclass(frozen=True)
class PendingOperator:
    """An operator awaiting its motion."""

    operator: Operator
    started_at: Position


@dataclass
class EditorState:
    """Mode plus the transient input state that goes with it.

    - Current mode
    - Pending operator (d, c, y) while in OPERATOR_PENDING
    - Buffered prefix key for multi-char sequences (gg)
    """

    mode: EditorMode = EditorMode.NORMAL
    pending: PendingOperator | None = None
    key_buffer: str = ""

    def enter_mode(self, mode: EditorMode) -> None:
        """Transition to a new mode with proper cleanup."""
        old_mode = self.mode
        self.mode = mode

        # Clear operator state when leaving operator pending
        if old_mode is EditorMode.OPERATOR_PENDING and mode is not EditorMode.OPERATOR_PENDING:
            self.pending = None

        self.key_buffer = ""

    def start_operator(self, operator: Operator, cursor: Position) -> None:
        self.pending = PendingOperator(operator, cursor)
        self.enter_mode(EditorMode.OPERATOR_PENDING)

    def reset_operator(self) -> None:
        """Drop the pending operator and return to NORMAL."""
        self.pending = None
        self.enter_mode(EditorMode.NORMAL)
