"""Modal prompt editor.

Architecture:
    ModalController - Main controller that handles key events
    EditorState - Tracks mode, pending operator and key buffer
    TextBuffer - Lines, cursor, selection and undo history
    YankRegister - Single-slot internal clipboard
    KeymapConfig - Configurable key bindings

Usage:
    from piemme.editor import open_session, handle_key, current_text

    session = open_session("hello world")
    handle_key(session, "d")
    handle_key(session, "w")
    current_text(session)  # "world"
"""

from .buffer import Selection, Snapshot, TextBuffer
from .engine import KeyResult, ModalController
from .keymap import BindingType, DefaultKeymapProvider, KeyBinding, KeymapConfig, KeymapProvider
from .register import YankRegister
from .session import EditorSession, current_text, handle_key, open_session
from .state import EditorMode, EditorState, MotionType, Operator, SelectionKind

__all__ = [
    # Core
    "ModalController",
    "EditorState",
    "EditorMode",
    "KeyResult",
    # Buffer
    "TextBuffer",
    "Selection",
    "Snapshot",
    "YankRegister",
    # State types
    "MotionType",
    "Operator",
    "SelectionKind",
    # Keymap
    "BindingType",
    "KeyBinding",
    "KeymapConfig",
    "KeymapProvider",
    "DefaultKeymapProvider",
    # Session
    "EditorSession",
    "open_session",
    "handle_key",
    "current_text",
]
