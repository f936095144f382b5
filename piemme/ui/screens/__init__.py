"""Modal screens for piemme."""

from .confirm import ConfirmCommandsScreen, ConfirmScreen
from .reference_picker import ReferencePickerScreen
from .tags import TagScreen

__all__ = [
    "ConfirmCommandsScreen",
    "ConfirmScreen",
    "ReferencePickerScreen",
    "TagScreen",
]
