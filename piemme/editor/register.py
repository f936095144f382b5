"""Single-slot yank register.

Holds the last yanked, deleted or changed text together with its shape.
The register is internal to one editing session and never touches the
OS clipboard.
"""

from __future__ import annotations

from dataclasses import dataclass

from .state import SelectionKind


@dataclass
class YankRegister:
    """Last yanked/deleted text and whether it was character- or line-wise."""

    text: str = ""
    kind: SelectionKind = SelectionKind.CHARACTER

    @property
    def is_empty(self) -> bool:
        return not self.text and self.kind is SelectionKind.CHARACTER

    def store(self, text: str, kind: SelectionKind = SelectionKind.CHARACTER) -> None:
        """Overwrite the register with new content."""
        self.text = text
        self.kind = kind
