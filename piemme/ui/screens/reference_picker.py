"""Picker for inserting a [[name]] reference."""

from __future__ import annotations

from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Container
from textual.screen import ModalScreen
from textual.widgets import Input, OptionList
from textual.widgets.option_list import Option


def filter_names(names: list[str], query: str) -> list[str]:
    """Names containing query (case-insensitive), prefix matches first."""
    needle = query.strip().lower()
    if not needle:
        return list(names)
    matches = [n for n in names if needle in n.lower()]
    return sorted(matches, key=lambda n: (not n.lower().startswith(needle), n))


class ReferencePickerScreen(ModalScreen[str | None]):
    """Type to filter prompt names; enter inserts the highlighted one."""

    BINDINGS = [
        Binding("escape", "cancel", "Cancel", show=False),
        Binding("down", "cursor_down", "Down", show=False),
        Binding("up", "cursor_up", "Up", show=False),
        Binding("ctrl+n", "cursor_down", "Down", show=False),
        Binding("ctrl+p", "cursor_up", "Up", show=False),
    ]

    CSS = """
    ReferencePickerScreen {
        align: center middle;
        background: transparent;
    }

    #reference-dialog {
        width: 50;
        max-width: 80%;
        height: auto;
        max-height: 70%;
        border: solid $primary;
        border-title-color: $primary;
        border-subtitle-color: $primary;
        padding: 0 1;
    }

    #reference-list {
        height: auto;
        max-height: 16;
        border: none;
    }
    """

    def __init__(self, names: list[str]):
        super().__init__()
        self.names = list(names)
        self._visible: list[str] = list(names)

    def compose(self) -> ComposeResult:
        dialog = Container(id="reference-dialog")
        dialog.border_title = "Insert reference"
        dialog.border_subtitle = "Insert <enter>  Cancel <esc>"
        with dialog:
            yield Input(placeholder="Filter prompts", id="reference-filter")
            yield OptionList(id="reference-list")

    def on_mount(self) -> None:
        self._fill(self.names)
        self.query_one("#reference-filter", Input).focus()

    def _fill(self, names: list[str]) -> None:
        self._visible = names
        option_list = self.query_one("#reference-list", OptionList)
        option_list.clear_options()
        option_list.add_options([Option(name) for name in names])
        if names:
            option_list.highlighted = 0

    def on_input_changed(self, event: Input.Changed) -> None:
        self._fill(filter_names(self.names, event.value))

    def on_input_submitted(self, event: Input.Submitted) -> None:
        event.stop()
        highlighted = self.query_one("#reference-list", OptionList).highlighted
        if highlighted is None or not self._visible:
            self.dismiss(None)
            return
        self.dismiss(self._visible[highlighted])

    def on_option_list_option_selected(self, event: OptionList.OptionSelected) -> None:
        event.stop()
        self.dismiss(self._visible[event.option_index])

    def action_cursor_down(self) -> None:
        self.query_one("#reference-list", OptionList).action_cursor_down()

    def action_cursor_up(self) -> None:
        self.query_one("#reference-list", OptionList).action_cursor_up()

    def action_cancel(self) -> None:
        self.dismiss(None)

    def check_action(self, action: str, parameters: tuple) -> bool | None:
        if self.app.screen is not self:
            return False
        return super().check_action(action, parameters)
