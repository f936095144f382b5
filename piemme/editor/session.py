"""Editing session façade.

One session bundles the buffer, the yank register and the modal
controller for a prompt that is open for editing. Nothing here is
global; callers keep the session object and pass it back in.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from .buffer import TextBuffer
from .engine import KeyResult, ModalController
from .keymap import KeymapProvider
from .register import YankRegister
from .state import EditorMode


@dataclass
class EditorSession:
    """The editable copy of one prompt."""

    buffer: TextBuffer
    controller: ModalController
    name: str | None = None
    last_result: KeyResult = field(default_factory=KeyResult)

    @property
    def mode(self) -> EditorMode:
        return self.controller.mode

    @property
    def register(self) -> YankRegister:
        return self.controller.register

    @property
    def is_modified(self) -> bool:
        return self.buffer.can_undo


def open_session(
    content: str,
    name: str | None = None,
    keymap: KeymapProvider | None = None,
) -> EditorSession:
    """Create a session in Normal mode with the cursor at the top."""
    buffer = TextBuffer(content)
    controller = ModalController(buffer, keymap=keymap, register=YankRegister())
    return EditorSession(buffer=buffer, controller=controller, name=name)


def handle_key(session: EditorSession, key: str) -> EditorSession:
    """Feed one key to the session; the outcome is in ``session.last_result``."""
    session.last_result = session.controller.handle_key(key)
    return session


def current_text(session: EditorSession) -> str:
    return session.buffer.text
