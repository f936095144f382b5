"""Yes/no confirmation screens."""

from __future__ import annotations

from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Container
from textual.screen import ModalScreen
from textual.widgets import Static


class ConfirmScreen(ModalScreen[bool]):
    """Modal screen that asks a yes/no question and dismisses with the answer."""

    BINDINGS = [
        Binding("y", "confirm", "Yes"),
        Binding("enter", "confirm", "Yes", show=False),
        Binding("n", "cancel", "No"),
        Binding("escape", "cancel", "No", show=False),
    ]

    CSS = """
    ConfirmScreen {
        align: center middle;
        background: transparent;
    }

    #confirm-dialog {
        width: 64;
        max-width: 80%;
        height: auto;
        border: solid $warning;
        border-title-color: $warning;
        border-subtitle-color: $primary;
        padding: 0 1;
    }

    #confirm-content {
        padding: 1 0;
    }
    """

    def __init__(self, title: str, message: str):
        super().__init__()
        self._title = title
        self.message = message

    def compose(self) -> ComposeResult:
        dialog = Container(id="confirm-dialog")
        dialog.border_title = self._title
        dialog.border_subtitle = "Yes <y>  No <n>"
        with dialog:
            yield Static(self.message, id="confirm-content", markup=False)

    def action_confirm(self) -> None:
        self.dismiss(True)

    def action_cancel(self) -> None:
        self.dismiss(False)

    def check_action(self, action: str, parameters: tuple) -> bool | None:
        # Prevent underlying screens from receiving actions when another modal is on top.
        if self.app.screen is not self:
            return False
        return super().check_action(action, parameters)


class ConfirmCommandsScreen(ConfirmScreen):
    """Lists the shell commands a copy would run before running them."""

    def __init__(self, commands: list[str]):
        lines = [f"{i}. {command}" for i, command in enumerate(commands, 1)]
        message = "This prompt will run the following commands:\n\n" + "\n".join(lines) + "\n\nRun them?"
        super().__init__("Run commands?", message)
        self.commands = list(commands)
