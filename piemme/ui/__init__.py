"""Textual widgets and screens for piemme."""

from .screens import ConfirmCommandsScreen, ConfirmScreen, ReferencePickerScreen, TagScreen
from .widgets import PromptEditor, convert_key

__all__ = [
    "ConfirmCommandsScreen",
    "ConfirmScreen",
    "PromptEditor",
    "ReferencePickerScreen",
    "TagScreen",
    "convert_key",
]
