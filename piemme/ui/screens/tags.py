"""Tag editing screen."""

from __future__ import annotations

from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Container
from textual.screen import ModalScreen
from textual.widgets import Input, Static


def parse_tags(text: str) -> list[str]:
    """Split comma-separated input into tags, dropping blanks and repeats."""
    tags: list[str] = []
    for part in text.split(","):
        tag = part.strip()
        if tag and tag not in tags:
            tags.append(tag)
    return tags


class TagScreen(ModalScreen[list[str] | None]):
    """Edit a prompt's tags as a comma-separated list."""

    BINDINGS = [
        Binding("escape", "cancel", "Cancel", show=False),
    ]

    CSS = """
    TagScreen {
        align: center middle;
        background: transparent;
    }

    #tag-dialog {
        width: 64;
        max-width: 80%;
        height: auto;
        border: solid $primary;
        border-title-color: $primary;
        border-subtitle-color: $primary;
        padding: 0 1;
    }

    #tag-known {
        color: $text-muted;
        padding: 1 0 0 0;
    }
    """

    def __init__(self, prompt_name: str, tags: list[str], known_tags: list[str] | None = None):
        super().__init__()
        self.prompt_name = prompt_name
        self.tags = list(tags)
        self.known_tags = [t for t in (known_tags or []) if t not in self.tags]

    def compose(self) -> ComposeResult:
        dialog = Container(id="tag-dialog")
        dialog.border_title = f"Tags: {self.prompt_name}"
        dialog.border_subtitle = "Save <enter>  Cancel <esc>"
        with dialog:
            yield Input(value=", ".join(self.tags), placeholder="tag, other tag", id="tag-input")
            if self.known_tags:
                yield Static("Known: " + ", ".join(self.known_tags), id="tag-known", markup=False)

    def on_mount(self) -> None:
        self.query_one("#tag-input", Input).focus()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        event.stop()
        self.dismiss(parse_tags(event.value))

    def action_cancel(self) -> None:
        self.dismiss(None)

    def check_action(self, action: str, parameters: tuple) -> bool | None:
        if self.app.screen is not self:
            return False
        return super().check_action(action, parameters)
