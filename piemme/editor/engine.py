"""Modal editing engine.

The ModalController is the main controller that:
- Handles key events for one editing session
- Manages editor state (mode, pending operator, key buffer)
- Dispatches to motions, operators and actions via the keymap
- Moves text between the buffer and the yank register

Each mode has exactly one transition method; ``handle_key`` picks it from
a table keyed by the current mode.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from .buffer import TextBuffer
from .keymap import DefaultKeymapProvider, KeymapProvider
from .motions import MotionResult, get_motion_handler
from .operators import OperatorResult, get_operator_handler
from .register import YankRegister
from .state import EditorMode, EditorState, MotionType, Operator, SelectionKind

_OPERATOR_HANDLERS = {
    Operator.DELETE: "operator_delete",
    Operator.CHANGE: "operator_change",
    Operator.YANK: "operator_yank",
}
_OPERATORS = {handler: operator for operator, handler in _OPERATOR_HANDLERS.items()}


@dataclass
class KeyResult:
    """Result of processing a key event."""

    consumed: bool = True            # Was the key handled?
    exit_editor: bool = False        # Esc in Normal: leave the editor (and save)
    save_requested: bool = False     # Explicit save (ctrl+s)
    clipboard_text: str | None = None  # Text for the OS clipboard
    request_paste: bool = False      # UI should call paste_text() with clipboard text
    request_reference: bool = False  # UI should offer prompt names for insert_reference()
    message: str = ""                # Message to display to user


class ModalController:
    """Modal state machine over a TextBuffer.

    Translates key names into buffer mutations and register transfers.
    It never talks to the OS clipboard or storage directly; those needs
    are reported through ``KeyResult``.
    """

    def __init__(
        self,
        buffer: TextBuffer,
        keymap: KeymapProvider | None = None,
        register: YankRegister | None = None,
    ) -> None:
        self._buf = buffer
        self._state = EditorState()
        self._keymap = keymap or DefaultKeymapProvider()
        self._register = register or YankRegister()
        self._on_mode_change: Callable[[EditorMode], None] | None = None
        self._handlers: dict[EditorMode, Callable[[str], KeyResult]] = {
            EditorMode.NORMAL: self._handle_normal_mode,
            EditorMode.INSERT: self._handle_insert_mode,
            EditorMode.VISUAL: self._handle_visual_mode,
            EditorMode.VISUAL_LINE: self._handle_visual_mode,
            EditorMode.OPERATOR_PENDING: self._handle_operator_pending,
        }

    @property
    def mode(self) -> EditorMode:
        """Current editor mode."""
        return self._state.mode

    @property
    def state(self) -> EditorState:
        return self._state

    @property
    def buffer(self) -> TextBuffer:
        return self._buf

    @property
    def register(self) -> YankRegister:
        return self._register

    def set_mode_callback(self, callback: Callable[[EditorMode], None]) -> None:
        """Set callback for mode changes."""
        self._on_mode_change = callback

    def _set_mode(self, mode: EditorMode) -> None:
        changed = mode is not self._state.mode
        self._state.enter_mode(mode)
        if changed and self._on_mode_change:
            self._on_mode_change(mode)

    # ─────────────────────────────────────────────────────────────────
    # Public API
    # ─────────────────────────────────────────────────────────────────

    def handle_key(self, key: str) -> KeyResult:
        """Process a key event.

        Args:
            key: The key that was pressed (e.g., "j", "d", "escape")

        Returns:
            KeyResult indicating how the key was handled
        """
        return self._handlers[self._state.mode](key)

    def paste_text(self, text: str) -> None:
        """Insert OS clipboard text at the cursor (after a request_paste)."""
        if not text or self._state.mode.is_visual:
            return
        self._buf.insert(text)
        if self._state.mode is EditorMode.NORMAL:
            self._clamp_cursor()

    def insert_reference(self, name: str) -> None:
        """Insert ``[[name]]`` at the cursor (after a request_reference)."""
        if name:
            self.paste_text(f"[[{name}]]")

    def enter_insert_mode(self) -> None:
        """Enter insert mode; everything typed until Esc is one undo record."""
        self._buf.begin_group()
        self._set_mode(EditorMode.INSERT)

    def exit_insert_mode(self) -> None:
        """Exit insert mode, return to normal mode."""
        self._buf.end_group()
        self._set_mode(EditorMode.NORMAL)
        # Move cursor back one (vim behavior)
        if self._buf.cursor_col > 0:
            self._buf.move_cursor(self._buf.get_cursor_left(1))
        self._clamp_cursor()

    def enter_visual_mode(self, line_mode: bool = False) -> None:
        """Enter visual mode anchored at the cursor."""
        kind = SelectionKind.LINE if line_mode else SelectionKind.CHARACTER
        self._buf.set_selection(self._buf.cursor, kind)
        self._set_mode(EditorMode.VISUAL_LINE if line_mode else EditorMode.VISUAL)

    def exit_visual_mode(self) -> None:
        """Exit visual mode, dropping the selection."""
        self._buf.clear_selection()
        self._set_mode(EditorMode.NORMAL)
        self._clamp_cursor()

    def _clamp_cursor(self) -> None:
        """Keep the cursor on a character (normal mode stops at line_len - 1)."""
        row, col = self._buf.cursor
        max_col = max(0, len(self._buf.line(row)) - 1)
        if col > max_col:
            self._buf.move_cursor((row, max_col))

    # ─────────────────────────────────────────────────────────────────
    # Normal Mode
    # ─────────────────────────────────────────────────────────────────

    def _handle_normal_mode(self, key: str) -> KeyResult:
        """Handle keys in normal mode."""
        # Handle multi-char sequences (gg)
        if self._state.key_buffer:
            return self._handle_key_buffer(key)

        if self._keymap.is_escape(key):
            return KeyResult(exit_editor=True)

        binding = self._keymap.get_motion(key)
        if binding:
            return self._execute_motion(binding.handler)

        binding = self._keymap.get_operator(key)
        if binding:
            self._state.start_operator(_OPERATORS[binding.handler], self._buf.cursor)
            if self._on_mode_change:
                self._on_mode_change(self._state.mode)
            return KeyResult()

        binding = self._keymap.get_action(key, "normal")
        if binding:
            return self._execute_action(binding.handler)

        binding = self._keymap.get_mode_switch(key)
        if binding:
            self.enter_visual_mode(line_mode=binding.handler == "mode_visual_line")
            return KeyResult()

        if self._keymap.is_motion_prefix(key):
            self._state.key_buffer = key
            return KeyResult()

        return KeyResult(consumed=False)

    def _handle_key_buffer(self, key: str) -> KeyResult:
        """Handle multi-character key sequences."""
        sequence = self._state.key_buffer + key
        self._state.key_buffer = ""

        binding = self._keymap.get_motion(sequence)
        if binding:
            return self._execute_motion(binding.handler)

        # Not a valid sequence
        return KeyResult()

    def _execute_motion(self, handler_name: str) -> KeyResult:
        """Move the cursor (and in visual mode, the selection end)."""
        handler = get_motion_handler(handler_name)
        if not handler:
            return KeyResult(consumed=False)

        result = handler(self._buf, 1)
        if not result.failed:
            self._buf.move_cursor(result.position)
            self._clamp_cursor()
        return KeyResult()

    # ─────────────────────────────────────────────────────────────────
    # Operator Pending
    # ─────────────────────────────────────────────────────────────────

    def _handle_operator_pending(self, key: str) -> KeyResult:
        """Handle keys while waiting for a motion."""
        pending = self._state.pending

        # Escape cancels operator
        if self._keymap.is_escape(key) or pending is None:
            self._cancel_operator()
            return KeyResult()

        # Handle multi-char motion (gg); a pending prefix always completes first
        if self._state.key_buffer:
            key = self._state.key_buffer + key
            self._state.key_buffer = ""
        else:
            # Double operator (dd, yy, cc) operates on current line
            binding = self._keymap.get_operator(key)
            if binding and _OPERATORS.get(binding.handler) is pending.operator:
                row = self._buf.cursor_row
                return self._apply_operator(pending.operator, (row, 0), (row, 0), MotionType.LINEWISE)
            if self._keymap.is_motion_prefix(key):
                self._state.key_buffer = key
                return KeyResult()

        binding = self._keymap.get_motion(key)
        if binding is None:
            # Invalid key - cancel operator
            self._cancel_operator()
            return KeyResult()

        handler = get_motion_handler(binding.handler)
        result = handler(self._buf, 1) if handler else None
        if result is None or result.failed:
            self._cancel_operator()
            return KeyResult()

        start = self._buf.cursor
        end = self._word_motion_end(binding.handler, start, result)
        return self._apply_operator(pending.operator, start, end, result.type)

    def _word_motion_end(self, handler_name: str, start: tuple[int, int], result: MotionResult) -> tuple[int, int]:
        """dw/cw/yw never cross the end of the starting line."""
        end = result.position
        if handler_name == "motion_word_forward" and end[0] > start[0]:
            return (start[0], len(self._buf.line(start[0])))
        return end

    def _cancel_operator(self) -> None:
        self._state.reset_operator()
        if self._on_mode_change:
            self._on_mode_change(self._state.mode)

    def _apply_operator(
        self,
        operator: Operator,
        start: tuple[int, int],
        end: tuple[int, int],
        motion_type: MotionType,
    ) -> KeyResult:
        """Run an operator on [start, end] and settle the resulting mode."""
        op_result = self._run_operator(operator, start, end, motion_type)
        self._state.reset_operator()
        if op_result.enter_insert:
            self._set_mode(EditorMode.INSERT)
            return KeyResult()
        if self._on_mode_change:
            self._on_mode_change(self._state.mode)
        self._clamp_cursor()
        return KeyResult()

    def _run_operator(
        self,
        operator: Operator,
        start: tuple[int, int],
        end: tuple[int, int],
        motion_type: MotionType,
    ) -> OperatorResult:
        op_func = get_operator_handler(_OPERATOR_HANDLERS[operator])
        if op_func is None:
            return OperatorResult(success=False)
        if operator is Operator.CHANGE:
            # The change and the text typed afterwards form one undo record
            self._buf.begin_group()
        return op_func(self._buf, self._register, start, end, motion_type)

    # ─────────────────────────────────────────────────────────────────
    # Actions
    # ─────────────────────────────────────────────────────────────────

    def _execute_action(self, handler_name: str) -> KeyResult:
        """Execute an immediate action."""
        buf = self._buf
        row, col = buf.cursor

        if handler_name == "action_insert":
            self.enter_insert_mode()

        elif handler_name == "action_insert_line_start":
            buf.move_cursor(buf.get_first_non_blank())
            self.enter_insert_mode()

        elif handler_name == "action_append":
            # Allow cursor at line_length (after last char)
            buf.move_cursor((row, min(col + 1, buf.current_line_length)))
            self.enter_insert_mode()

        elif handler_name == "action_append_line_end":
            buf.move_cursor((row, buf.current_line_length))
            self.enter_insert_mode()

        elif handler_name == "action_open_below":
            self.enter_insert_mode()
            buf.move_cursor((row, buf.current_line_length))
            buf.insert("\n")

        elif handler_name == "action_open_above":
            self.enter_insert_mode()
            buf.move_cursor((row, 0))
            buf.insert("\n")
            buf.move_cursor((row, 0))

        elif handler_name == "action_change_to_eol":
            # C = c$
            self.enter_insert_mode()
            deleted = buf.delete_range((row, col), (row, buf.current_line_length))
            if deleted:
                self._register.store(deleted)

        elif handler_name == "action_delete_to_eol":
            # D = d$
            if col < buf.current_line_length:
                deleted = buf.delete_range((row, col), (row, buf.current_line_length))
                self._register.store(deleted)
            self._clamp_cursor()

        elif handler_name == "action_delete_char":
            # x = delete char under cursor
            if col < buf.current_line_length:
                deleted = buf.delete_range((row, col), (row, col + 1))
                self._register.store(deleted)
            self._clamp_cursor()

        elif handler_name in ("action_put_after", "action_put_before"):
            if not self._register.is_empty:
                buf.put(
                    self._register.text,
                    self._register.kind,
                    before=handler_name == "action_put_before",
                )
            self._clamp_cursor()

        elif handler_name in ("action_undo", "action_redo"):
            return self._undo_redo(handler_name == "action_undo")

        else:
            return self._execute_shared_action(handler_name)

        return KeyResult()

    def _execute_shared_action(self, handler_name: str) -> KeyResult:
        """Actions bound in several modes (save and clipboard bridge)."""
        buf = self._buf

        if handler_name == "action_save":
            return KeyResult(save_requested=True)

        if handler_name == "action_select_all":
            if self._state.mode is EditorMode.INSERT:
                self.exit_insert_mode()
            last_row = buf.line_count - 1
            buf.move_cursor((0, 0))
            self.enter_visual_mode(line_mode=False)
            buf.move_cursor((last_row, max(0, len(buf.line(last_row)) - 1)))
            return KeyResult()

        if handler_name == "action_clipboard_copy":
            if self._state.mode.is_visual:
                text = self._selection_text()
                self.exit_visual_mode()
            else:
                text = buf.current_line
            return KeyResult(clipboard_text=text, message="Copied to clipboard")

        if handler_name == "action_clipboard_paste":
            return KeyResult(request_paste=True)

        if handler_name == "action_insert_reference":
            return KeyResult(request_reference=True)

        return KeyResult(consumed=False)

    def _undo_redo(self, undo: bool) -> KeyResult:
        """Undo or redo; inside insert mode the current run is closed first."""
        buf = self._buf
        in_insert = self._state.mode is EditorMode.INSERT
        if in_insert:
            buf.end_group()
        changed = buf.undo() if undo else buf.redo()
        if in_insert:
            buf.begin_group()
        else:
            self._clamp_cursor()
        if not changed:
            return KeyResult(message="Already at oldest change" if undo else "Already at newest change")
        return KeyResult()

    # ─────────────────────────────────────────────────────────────────
    # Insert Mode
    # ─────────────────────────────────────────────────────────────────

    def _handle_insert_mode(self, key: str) -> KeyResult:
        """Handle keys in insert mode."""
        buf = self._buf
        row, col = buf.cursor

        # Escape exits insert mode
        if self._keymap.is_escape(key):
            self.exit_insert_mode()
            return KeyResult()

        binding = self._keymap.get_insert_action(key)
        if binding:
            handler = binding.handler
            if handler == "insert_newline":
                buf.insert("\n")
            elif handler == "insert_tab":
                buf.insert(self._keymap.get_config().tab_text)
            elif handler == "insert_backspace":
                if col > 0:
                    buf.delete_range((row, col - 1), (row, col))
                elif row > 0:
                    buf.delete_range((row - 1, len(buf.line(row - 1))), (row, 0))
            elif handler == "insert_delete":
                if col < buf.current_line_length:
                    buf.delete_range((row, col), (row, col + 1))
                elif row < buf.line_count - 1:
                    buf.delete_range((row, col), (row + 1, 0))
            elif handler in ("action_undo", "action_redo"):
                return self._undo_redo(handler == "action_undo")
            return KeyResult()

        # Cursor keys move freely, including past the last character
        if key == "left":
            buf.move_cursor(buf.get_cursor_left())
        elif key == "right":
            buf.move_cursor(buf.get_cursor_right(allow_eol=True))
        elif key == "up":
            buf.move_cursor((row - 1, col))
        elif key == "down":
            buf.move_cursor((row + 1, col))
        elif key == "home":
            buf.move_cursor((row, 0))
        elif key == "end":
            buf.move_cursor((row, buf.current_line_length))
        elif self._keymap.get_action(key, "insert"):
            return self._execute_shared_action(self._keymap.get_action(key, "insert").handler)
        elif len(key) == 1:
            buf.insert(key)
        else:
            return KeyResult(consumed=False)
        return KeyResult()

    # ─────────────────────────────────────────────────────────────────
    # Visual Mode
    # ─────────────────────────────────────────────────────────────────

    def _handle_visual_mode(self, key: str) -> KeyResult:
        """Handle keys in visual and visual-line mode."""
        # Handle multi-char sequences (gg)
        if self._state.key_buffer:
            return self._handle_key_buffer(key)

        if self._keymap.is_escape(key):
            self.exit_visual_mode()
            return KeyResult()

        # v / V toggle back to normal or switch selection kind
        binding = self._keymap.get_mode_switch(key)
        if binding:
            target = EditorMode.VISUAL_LINE if binding.handler == "mode_visual_line" else EditorMode.VISUAL
            if target is self._state.mode:
                self.exit_visual_mode()
            else:
                selection = self._buf.selection
                anchor = selection.anchor if selection else self._buf.cursor
                kind = SelectionKind.LINE if target is EditorMode.VISUAL_LINE else SelectionKind.CHARACTER
                self._buf.set_selection(anchor, kind)
                self._set_mode(target)
            return KeyResult()

        binding = self._keymap.get_visual_action(key)
        if binding:
            return self._execute_visual_action(binding.handler)

        binding = self._keymap.get_motion(key)
        if binding:
            return self._execute_motion(binding.handler)

        binding = self._keymap.get_action(key, "visual")
        if binding:
            return self._execute_shared_action(binding.handler)

        if self._keymap.is_motion_prefix(key):
            self._state.key_buffer = key
            return KeyResult()

        return KeyResult(consumed=False)

    def _selection_range(self) -> tuple[tuple[int, int], tuple[int, int], MotionType]:
        bounds = self._buf.selection_bounds()
        start, end = bounds if bounds else (self._buf.cursor, self._buf.cursor)
        if self._state.mode is EditorMode.VISUAL_LINE:
            return start, end, MotionType.LINEWISE
        end_row, end_col = end
        if end_col >= len(self._buf.line(end_row)) and end_row < self._buf.line_count - 1:
            # Ending on an empty line selects its line break
            return start, (end_row + 1, 0), MotionType.EXCLUSIVE
        return start, end, MotionType.INCLUSIVE

    def _selection_text(self) -> str:
        start, end, motion_type = self._selection_range()
        if motion_type is MotionType.LINEWISE:
            return self._buf.get_line_range(start[0], end[0])
        end_row, end_col = end
        if motion_type is MotionType.INCLUSIVE and end_col < len(self._buf.line(end_row)):
            end = (end_row, end_col + 1)
        return self._buf.get_text_between(start, end)

    def _execute_visual_action(self, handler_name: str) -> KeyResult:
        """Apply delete/change/yank to the selection."""
        operator = {
            "action_visual_delete": Operator.DELETE,
            "action_visual_change": Operator.CHANGE,
            "action_visual_yank": Operator.YANK,
        }.get(handler_name)
        if operator is None:
            return KeyResult(consumed=False)

        start, end, motion_type = self._selection_range()
        self._buf.clear_selection()
        self._state.enter_mode(EditorMode.NORMAL)
        result = self._apply_operator(operator, start, end, motion_type)
        if operator is Operator.YANK and motion_type is MotionType.LINEWISE:
            self._buf.move_cursor(self._buf.get_first_non_blank(start[0]))
        return result
