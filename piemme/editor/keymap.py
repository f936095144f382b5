"""Editor keymap configuration.

Defines the modal key bindings in a configurable way:
- Motions (can be used standalone or as operator targets)
- Operators (wait for a motion)
- Actions (immediate commands such as i, o, p, u)
- Mode switches (v, V)
- Insert mode keys

Key names follow Textual's key naming ("escape", "enter", "ctrl+r",
single characters for printable keys).
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum, auto


class BindingType(Enum):
    """Type of key binding."""

    MOTION = auto()       # Movement command (h, j, w, etc.)
    OPERATOR = auto()     # Operates on range (d, c, y)
    ACTION = auto()       # Immediate action (i, a, o, p, u, etc.)
    MODE_SWITCH = auto()  # Mode change (v, V)


@dataclass
class KeyBinding:
    """Definition of a key binding."""

    key: str                                # Key or key sequence (e.g., "w", "gg")
    type: BindingType                       # Type of binding
    handler: str                            # Handler name
    description: str = ""                   # Human-readable description
    modes: tuple[str, ...] = ("normal",)    # Which modes this applies to


def _motion(key: str, handler: str, description: str) -> KeyBinding:
    return KeyBinding(key, BindingType.MOTION, handler, description, modes=("normal", "visual"))


def _action(key: str, handler: str, description: str, *modes: str) -> KeyBinding:
    return KeyBinding(key, BindingType.ACTION, handler, description, modes=modes or ("normal",))


@dataclass
class KeymapConfig:
    """Configuration for editor keybindings."""

    # ─────────────────────────────────────────────────────────────────
    # Motions - cursor movement commands
    # ─────────────────────────────────────────────────────────────────
    motions: dict[str, KeyBinding] = field(default_factory=lambda: {
        "h": _motion("h", "motion_left", "Left"),
        "l": _motion("l", "motion_right", "Right"),
        "j": _motion("j", "motion_down", "Down"),
        "k": _motion("k", "motion_up", "Up"),
        "left": _motion("left", "motion_left", "Left"),
        "right": _motion("right", "motion_right", "Right"),
        "down": _motion("down", "motion_down", "Down"),
        "up": _motion("up", "motion_up", "Up"),

        # Line position
        "0": _motion("0", "motion_line_start", "Line start"),
        "home": _motion("home", "motion_line_start", "Line start"),
        "^": _motion("^", "motion_first_non_blank", "First non-blank"),
        "$": _motion("$", "motion_line_end", "Line end"),
        "end": _motion("end", "motion_line_end", "Line end"),

        # Word motions
        "w": _motion("w", "motion_word_forward", "Next word"),
        "e": _motion("e", "motion_word_end", "Word end"),
        "b": _motion("b", "motion_word_backward", "Previous word"),

        # Paragraph and document position
        "{": _motion("{", "motion_paragraph_backward", "Previous paragraph"),
        "}": _motion("}", "motion_paragraph_forward", "Next paragraph"),
        "gg": _motion("gg", "motion_document_start", "Document start"),
        "G": _motion("G", "motion_document_end", "Document end"),
    })

    # ─────────────────────────────────────────────────────────────────
    # Operators - commands that operate on a range
    # ─────────────────────────────────────────────────────────────────
    operators: dict[str, KeyBinding] = field(default_factory=lambda: {
        "d": KeyBinding("d", BindingType.OPERATOR, "operator_delete", "Delete"),
        "c": KeyBinding("c", BindingType.OPERATOR, "operator_change", "Change"),
        "y": KeyBinding("y", BindingType.OPERATOR, "operator_yank", "Yank"),
    })

    # ─────────────────────────────────────────────────────────────────
    # Actions - immediate commands
    # ─────────────────────────────────────────────────────────────────
    actions: dict[str, KeyBinding] = field(default_factory=lambda: {
        # Insert mode entry
        "i": _action("i", "action_insert", "Insert"),
        "I": _action("I", "action_insert_line_start", "Insert at line start"),
        "a": _action("a", "action_append", "Append"),
        "A": _action("A", "action_append_line_end", "Append at line end"),
        "o": _action("o", "action_open_below", "Open line below"),
        "O": _action("O", "action_open_above", "Open line above"),
        "C": _action("C", "action_change_to_eol", "Change to EOL"),
        "D": _action("D", "action_delete_to_eol", "Delete to EOL"),

        # Undo/redo
        "u": _action("u", "action_undo", "Undo"),
        "ctrl+r": _action("ctrl+r", "action_redo", "Redo"),

        # Register put
        "p": _action("p", "action_put_after", "Put after"),
        "P": _action("P", "action_put_before", "Put before"),

        # Other
        "x": _action("x", "action_delete_char", "Delete char"),
        "delete": _action("delete", "action_delete_char", "Delete char"),
        "ctrl+s": _action("ctrl+s", "action_save", "Save", "normal", "insert", "visual"),

        # Prompt reference picker
        "r": _action("r", "action_insert_reference", "Insert reference"),
        "ctrl+l": _action("ctrl+l", "action_insert_reference", "Insert reference", "normal", "insert"),

        # OS clipboard bridge
        "ctrl+a": _action("ctrl+a", "action_select_all", "Select all", "normal", "insert", "visual"),
        "ctrl+c": _action("ctrl+c", "action_clipboard_copy", "Copy to clipboard", "normal", "insert", "visual"),
        "ctrl+v": _action("ctrl+v", "action_clipboard_paste", "Paste from clipboard", "normal", "insert"),
    })

    # ─────────────────────────────────────────────────────────────────
    # Visual mode actions (act on the selection)
    # ─────────────────────────────────────────────────────────────────
    visual_actions: dict[str, KeyBinding] = field(default_factory=lambda: {
        "d": _action("d", "action_visual_delete", "Delete selection", "visual"),
        "x": _action("x", "action_visual_delete", "Delete selection", "visual"),
        "delete": _action("delete", "action_visual_delete", "Delete selection", "visual"),
        "c": _action("c", "action_visual_change", "Change selection", "visual"),
        "y": _action("y", "action_visual_yank", "Yank selection", "visual"),
    })

    # ─────────────────────────────────────────────────────────────────
    # Insert mode keys
    # ─────────────────────────────────────────────────────────────────
    insert_actions: dict[str, KeyBinding] = field(default_factory=lambda: {
        "enter": _action("enter", "insert_newline", "New line", "insert"),
        "backspace": _action("backspace", "insert_backspace", "Delete before cursor", "insert"),
        "delete": _action("delete", "insert_delete", "Delete at cursor", "insert"),
        "tab": _action("tab", "insert_tab", "Indent", "insert"),
        "ctrl+z": _action("ctrl+z", "action_undo", "Undo", "insert"),
        "ctrl+y": _action("ctrl+y", "action_redo", "Redo", "insert"),
    })

    # ─────────────────────────────────────────────────────────────────
    # Mode switches
    # ─────────────────────────────────────────────────────────────────
    mode_switches: dict[str, KeyBinding] = field(default_factory=lambda: {
        "v": KeyBinding("v", BindingType.MODE_SWITCH, "mode_visual", "Visual mode", modes=("normal", "visual")),
        "V": KeyBinding("V", BindingType.MODE_SWITCH, "mode_visual_line", "Visual line mode", modes=("normal", "visual")),
    })

    # First keys of multi-char motions (gg)
    sequence_prefixes: tuple[str, ...] = ("g",)

    # Keys that leave the current mode
    escape_keys: tuple[str, ...] = ("escape", "ctrl+[")

    # Spaces inserted by tab in insert mode
    tab_text: str = "    "


class KeymapProvider(ABC):
    """Abstract base class for keymap providers."""

    @abstractmethod
    def get_config(self) -> KeymapConfig:
        """Get the keymap configuration."""
        pass

    def get_motion(self, key: str) -> KeyBinding | None:
        """Get motion binding for a key."""
        return self.get_config().motions.get(key)

    def get_operator(self, key: str) -> KeyBinding | None:
        """Get operator binding for a key."""
        return self.get_config().operators.get(key)

    def get_action(self, key: str, mode: str = "normal") -> KeyBinding | None:
        """Get an action binding valid in the given mode."""
        binding = self.get_config().actions.get(key)
        if binding is not None and mode in binding.modes:
            return binding
        return None

    def get_visual_action(self, key: str) -> KeyBinding | None:
        """Get visual mode action binding for a key."""
        return self.get_config().visual_actions.get(key)

    def get_insert_action(self, key: str) -> KeyBinding | None:
        """Get insert mode binding for a key."""
        return self.get_config().insert_actions.get(key)

    def get_mode_switch(self, key: str) -> KeyBinding | None:
        """Get mode switch binding for a key."""
        return self.get_config().mode_switches.get(key)

    def is_escape(self, key: str) -> bool:
        return key in self.get_config().escape_keys

    def is_motion_prefix(self, key: str) -> bool:
        """Check if key starts a multi-char motion (the first g of gg)."""
        return key in self.get_config().sequence_prefixes


class DefaultKeymapProvider(KeymapProvider):
    """Default keymap with standard bindings."""

    def __init__(self) -> None:
        self._config = KeymapConfig()

    def get_config(self) -> KeymapConfig:
        return self._config
