"""Prompt editor widget.

Draws an EditorSession with live token highlighting and forwards key
presses to its ModalController. Anything the controller cannot do on its
own (saving, the OS clipboard) is posted to the app as a message.
"""

from __future__ import annotations

from dataclasses import dataclass

from rich.text import Text
from textual import events
from textual.message import Message
from textual.widget import Widget

from ..editor import EditorMode, EditorSession, KeyResult, handle_key, open_session
from ..protocols import FileAccess, Repository
from ..render import HighlightSpan, HighlightStyle, highlight_spans

COMMAND_MARKER = "⚠ "

SPAN_STYLES = {
    HighlightStyle.PLAIN: "",
    HighlightStyle.VALID_REFERENCE: "bold green",
    HighlightStyle.INVALID_REFERENCE: "bold red",
    HighlightStyle.VALID_FILE: "green",
    HighlightStyle.INVALID_FILE: "red",
    HighlightStyle.COMMAND: "bold yellow",
}
SELECTION_STYLE = "on grey37"
CURSOR_STYLES = {"block": "reverse", "bar": "reverse", "underline": "underline"}


def convert_key(event: events.Key) -> str:
    """Convert a Textual Key event to the editor's key names."""
    key = event.key

    # Handle special keys
    if key == "ctrl+left_square_bracket":
        return "ctrl+["
    if key in ("enter", "return"):
        return "enter"
    if key in ("backspace", "ctrl+h"):
        return "backspace"
    if key == "space":
        return " "
    if key.startswith(("ctrl+", "shift+")) or key in ("escape", "tab", "delete"):
        return key

    # Handle character keys
    if event.is_printable and event.character and len(event.character) == 1:
        return event.character

    return key


class PromptEditor(Widget, can_focus=True):
    """Modal editor for one prompt."""

    DEFAULT_CSS = """
    PromptEditor {
        height: 1fr;
        background: $surface;
        border: round $primary;
        padding: 0 1;
    }
    """

    @dataclass
    class Exited(Message):
        """Esc in Normal mode: the user is done editing."""

        name: str | None
        content: str

    @dataclass
    class SaveRequested(Message):
        name: str | None
        content: str

    @dataclass
    class ClipboardCopy(Message):
        text: str

    class PasteRequested(Message):
        pass

    class ReferenceRequested(Message):
        """The user wants to pick a prompt to insert as a [[name]] reference."""

    @dataclass
    class ModeChanged(Message):
        mode: EditorMode

    def __init__(
        self,
        repository: Repository | None = None,
        file_access: FileAccess | None = None,
        *,
        id: str | None = None,
        classes: str | None = None,
    ) -> None:
        super().__init__(id=id, classes=classes)
        self._repository = repository
        self._file_access = file_access
        self._session: EditorSession | None = None
        self._scroll_top = 0
        self._spans_text: str | None = None
        self._spans: list[HighlightSpan] = []
        self.read_only = True

    # ─────────────────────────────────────────────────────────────────
    # Session
    # ─────────────────────────────────────────────────────────────────

    @property
    def session(self) -> EditorSession | None:
        return self._session

    @property
    def text(self) -> str:
        return self._session.buffer.text if self._session else ""

    @property
    def mode(self) -> EditorMode:
        return self._session.mode if self._session else EditorMode.NORMAL

    def load(self, content: str, name: str | None = None, read_only: bool = False) -> EditorSession:
        """Open a fresh session (undo history and register start empty)."""
        self._session = open_session(content, name=name)
        self._session.controller.set_mode_callback(self._on_mode_change)
        self._scroll_top = 0
        self.read_only = read_only
        self._apply_mode(EditorMode.NORMAL)
        self.refresh()
        return self._session

    def start_insert(self) -> None:
        """Put the session straight into Insert mode (used for new prompts)."""
        if self._session is not None:
            self._session.controller.enter_insert_mode()
            self.refresh()

    def paste(self, text: str) -> None:
        if self._session is not None:
            self._session.controller.paste_text(text)
            self.refresh()

    def insert_reference(self, name: str) -> None:
        if self._session is not None:
            self._session.controller.insert_reference(name)
            self.refresh()

    def _on_mode_change(self, mode: EditorMode) -> None:
        self._apply_mode(mode)
        self.post_message(self.ModeChanged(mode))

    def _apply_mode(self, mode: EditorMode) -> None:
        self.border_title = mode.value if not self.read_only else None
        self.styles.border = ("round", mode.border_hint if not self.read_only else "#808080")

    # ─────────────────────────────────────────────────────────────────
    # Key handling
    # ─────────────────────────────────────────────────────────────────

    def on_key(self, event: events.Key) -> None:
        if self._session is None or self.read_only:
            return

        result = handle_key(self._session, convert_key(event)).last_result
        if not result.consumed:
            return

        event.prevent_default()
        event.stop()
        self._dispatch_result(result)
        self.refresh()

    def _dispatch_result(self, result: KeyResult) -> None:
        session = self._session
        if session is None:
            return
        if result.clipboard_text is not None:
            self.post_message(self.ClipboardCopy(result.clipboard_text))
        if result.request_paste:
            self.post_message(self.PasteRequested())
        if result.request_reference:
            self.post_message(self.ReferenceRequested())
        if result.save_requested:
            self.post_message(self.SaveRequested(session.name, session.buffer.text))
        if result.exit_editor:
            self.post_message(self.Exited(session.name, session.buffer.text))
        elif result.message:
            self.notify(result.message, timeout=2)

    # ─────────────────────────────────────────────────────────────────
    # Rendering
    # ─────────────────────────────────────────────────────────────────

    def _highlight(self, text: str) -> list[HighlightSpan]:
        if self._repository is None:
            return []
        if text != self._spans_text:
            self._spans = highlight_spans(text, self._repository, self._file_access)
            self._spans_text = text
        return self._spans

    def _ensure_cursor_visible(self, height: int) -> None:
        row = self._session.buffer.cursor_row if self._session else 0
        if row < self._scroll_top:
            self._scroll_top = row
        elif row >= self._scroll_top + height:
            self._scroll_top = row - height + 1

    def _char_styles(self, text: str) -> tuple[list[str], set[int]]:
        """Per-offset span style and the offsets where a command starts."""
        styles = [""] * (len(text) + 1)
        command_starts: set[int] = set()
        for span in self._highlight(text):
            style = SPAN_STYLES[span.style]
            if span.style is HighlightStyle.COMMAND:
                command_starts.add(span.start)
            if style:
                for offset in range(span.start, span.end):
                    styles[offset] = style
        return styles, command_starts

    def render(self) -> Text:
        if self._session is None:
            return Text("No prompt selected", style="dim")

        buffer = self._session.buffer
        text = buffer.text
        styles, command_starts = self._char_styles(text)
        height = max(1, self.content_region.height)
        self._ensure_cursor_visible(height)

        cursor = buffer.cursor
        cursor_style = CURSOR_STYLES[self._session.mode.cursor_hint]
        show_cursor = self.has_focus and not self.read_only
        bounds = buffer.selection_bounds() if self._session.mode.is_visual else None
        line_mode = self._session.mode is EditorMode.VISUAL_LINE

        result = Text(no_wrap=True, overflow="crop")
        offset = 0
        for row, line in enumerate(buffer.lines):
            line_start = offset
            offset += len(line) + 1
            if row < self._scroll_top or row >= self._scroll_top + height:
                continue
            for col in range(len(line) + 1):
                absolute = line_start + col
                if absolute in command_starts:
                    result.append(COMMAND_MARKER, style="yellow")
                if col == len(line) and not (show_cursor and cursor == (row, col)):
                    break
                char = line[col] if col < len(line) else " "
                style = styles[absolute]
                if bounds and _selected(bounds, (row, col), line_mode):
                    style = f"{style} {SELECTION_STYLE}".strip()
                if show_cursor and cursor == (row, col):
                    style = f"{style} {cursor_style}".strip()
                result.append(char, style=style or None)
            if row < buffer.line_count - 1:
                result.append("\n")
        return result


def _selected(bounds: tuple[tuple[int, int], tuple[int, int]], pos: tuple[int, int], line_mode: bool) -> bool:
    start, end = bounds
    if line_mode:
        return start[0] <= pos[0] <= end[0]
    return start <= pos <= end
