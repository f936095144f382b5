"""Main Textual application for piemme."""

from __future__ import annotations

from rich.text import Text
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.widgets import Footer, OptionList, Static
from textual.widgets.option_list import Option

from .clipboard import MemoryClipboard, SystemClipboard
from .config import is_debug
from .context import AppContext
from .errors import ClipboardError, DiagnosticKind, DuplicatePromptError, PiemmeError, PromptNotFoundError
from .models import Prompt
from .render import CopyOutcome, Diagnostic, PendingCopy, finish_copy, prepare_copy, preview
from .ui import ConfirmCommandsScreen, ConfirmScreen, PromptEditor, ReferencePickerScreen, TagScreen

# Actions that only make sense while browsing the prompt list.
LIST_ACTIONS = frozenset(
    {
        "cursor_down",
        "cursor_up",
        "cursor_first",
        "cursor_last",
        "edit_prompt",
        "new_prompt",
        "delete_prompt",
        "archive_prompt",
        "toggle_archive_view",
        "edit_tags",
        "next_tag_filter",
        "previous_tag_filter",
        "rename_prompt",
        "duplicate_prompt",
        "toggle_preview",
        "copy_resolved",
        "copy_raw",
        "toggle_safe_mode",
        "quit",
    }
)
COMMAND_FAILURES = frozenset({DiagnosticKind.COMMAND_SPAWN_FAILURE, DiagnosticKind.COMMAND_NONZERO_EXIT})


class PiemmeApp(App):
    """Prompt manager with a modal editor."""

    TITLE = "piemme"

    CSS = """
    Screen {
        background: $surface;
    }

    #main-container {
        width: 100%;
        height: 100%;
    }

    #content {
        height: 1fr;
    }

    #sidebar {
        width: 32;
        border-right: solid $primary-darken-2;
    }

    #prompt-list {
        height: 1fr;
        border: none;
    }

    #main-panel {
        width: 1fr;
    }

    #preview {
        height: 1fr;
        border: round $secondary;
        padding: 0 1;
        display: none;
    }

    Screen.show-preview #preview {
        display: block;
    }

    Screen.show-preview #editor {
        height: 1fr;
    }

    .section-label {
        height: 1;
        color: $text-muted;
        padding: 0 1;
    }

    #status-bar {
        height: 1;
        background: $primary-background;
        padding: 0 1;
    }
    """

    BINDINGS = [
        Binding("j", "cursor_down", "Down", show=False),
        Binding("k", "cursor_up", "Up", show=False),
        Binding("g", "cursor_first", "First", show=False),
        Binding("G", "cursor_last", "Last", show=False),
        Binding("i", "edit_prompt", "Edit"),
        Binding("n", "new_prompt", "New"),
        Binding("d", "delete_prompt", "Delete"),
        Binding("a", "archive_prompt", "Archive"),
        Binding("A", "toggle_archive_view", "Archive view", show=False),
        Binding("t", "edit_tags", "Tags"),
        Binding("right_square_bracket", "next_tag_filter", "Next tag", show=False),
        Binding("left_square_bracket", "previous_tag_filter", "Previous tag", show=False),
        Binding("r", "rename_prompt", "Rename", show=False),
        Binding("ctrl+d", "duplicate_prompt", "Duplicate", show=False),
        Binding("p", "toggle_preview", "Preview"),
        Binding("y", "copy_resolved", "Copy"),
        Binding("Y", "copy_raw", "Copy raw", show=False),
        Binding("exclamation_mark", "toggle_safe_mode", "Safe mode"),
        Binding("q", "quit", "Quit"),
    ]

    def __init__(self, context: AppContext | None = None):
        super().__init__()
        self.context = context or AppContext.from_environment()
        self.prompts: list[Prompt] = []
        self._editing: str | None = None
        self._show_archived = False
        self._tag_filter: str | None = None
        self._internal_clipboard = MemoryClipboard()
        self._system_clipboard = SystemClipboard()
        self._debug_mode = is_debug()

    # ─────────────────────────────────────────────────────────────────
    # Layout
    # ─────────────────────────────────────────────────────────────────

    def compose(self) -> ComposeResult:
        with Vertical(id="main-container"):
            with Horizontal(id="content"):
                with Vertical(id="sidebar"):
                    yield Static("Prompts", id="list-label", classes="section-label")
                    yield OptionList(id="prompt-list")
                with Vertical(id="main-panel"):
                    yield PromptEditor(self.context.store, self.context.file_access, id="editor")
                    yield Static("", id="preview", markup=False)
            yield Static("", id="status-bar")
        yield Footer()

    @property
    def prompt_list(self) -> OptionList:
        return self.query_one("#prompt-list", OptionList)

    @property
    def editor(self) -> PromptEditor:
        return self.query_one("#editor", PromptEditor)

    def on_mount(self) -> None:
        self.refresh_prompts()
        self.prompt_list.focus()

    def check_action(self, action: str, parameters: tuple) -> bool | None:
        if action in LIST_ACTIONS:
            if self._editing is not None or len(self.screen_stack) > 1:
                return False
        return super().check_action(action, parameters)

    # ─────────────────────────────────────────────────────────────────
    # Prompt list
    # ─────────────────────────────────────────────────────────────────

    def _option_label(self, prompt: Prompt) -> Text:
        label = Text(prompt.name)
        for tag in prompt.tags:
            label.append(f" #{tag}", style=self.context.settings.get_tag_color(tag))
        return label

    def refresh_prompts(self, select: str | None = None) -> None:
        """Reload the prompt list from disk, keeping or moving the highlight."""
        current = select or self._selected_name()
        prompts = self.context.store.load_all(archived=self._show_archived)
        if self._tag_filter is not None:
            prompts = [p for p in prompts if p.has_tag(self._tag_filter)]
        self.prompts = prompts
        option_list = self.prompt_list
        option_list.clear_options()
        option_list.add_options([Option(self._option_label(p), id=p.name) for p in self.prompts])

        names = [p.name for p in self.prompts]
        if names:
            option_list.highlighted = names.index(current) if current in names else 0
        self._update_list_label()
        self._show_selected()

    def _update_list_label(self) -> None:
        label = "Archive" if self._show_archived else "Prompts"
        if self._tag_filter is not None:
            label = f"{label} #{self._tag_filter}"
        self.query_one("#list-label", Static).update(Text(label))

    def _selected_name(self) -> str | None:
        index = self.prompt_list.highlighted
        if index is None or index >= len(self.prompts):
            return None
        return self.prompts[index].name

    def _selected_prompt(self) -> Prompt | None:
        name = self._selected_name()
        if name is None:
            self.notify("No prompt selected", severity="warning")
            return None
        return self.context.store.get(name)

    def _show_selected(self) -> None:
        """Show the highlighted prompt read-only in the editor pane."""
        if self._editing is not None:
            return
        name = self._selected_name()
        prompt = self.context.store.get(name) if name else None
        self.editor.load(prompt.content if prompt else "", name, read_only=True)
        self._update_preview()
        self._update_status_bar()

    def on_option_list_option_highlighted(self, event: OptionList.OptionHighlighted) -> None:
        self._show_selected()

    def on_option_list_option_selected(self, event: OptionList.OptionSelected) -> None:
        self.action_edit_prompt()

    def action_cursor_down(self) -> None:
        self.prompt_list.action_cursor_down()

    def action_cursor_up(self) -> None:
        self.prompt_list.action_cursor_up()

    def action_cursor_first(self) -> None:
        self.prompt_list.action_first()

    def action_cursor_last(self) -> None:
        self.prompt_list.action_last()

    # ─────────────────────────────────────────────────────────────────
    # Editing
    # ─────────────────────────────────────────────────────────────────

    def action_edit_prompt(self) -> None:
        prompt = self._selected_prompt()
        if prompt is not None:
            self._start_editing(prompt)

    def action_new_prompt(self) -> None:
        self._show_archived = False
        self._tag_filter = None
        try:
            prompt = self.context.store.create()
        except OSError as exc:
            self.notify(str(exc), severity="error")
            return
        self.refresh_prompts(select=prompt.name)
        self._start_editing(prompt, insert=True)

    def _start_editing(self, prompt: Prompt, insert: bool = False) -> None:
        self._editing = prompt.name
        editor = self.editor
        editor.load(prompt.content, prompt.name)
        if insert:
            editor.start_insert()
        editor.focus()
        self._update_status_bar()
        self.refresh_bindings()

    def _save(self, name: str | None, content: str) -> bool:
        if name is None:
            return False
        try:
            prompt = self.context.store.require(name)
            if prompt.content == content:
                return False
            prompt.set_content(content)
            self.context.store.save(prompt)
        except (OSError, PiemmeError) as exc:
            self.notify(str(exc), severity="error")
            return False
        return True

    def on_prompt_editor_save_requested(self, event: PromptEditor.SaveRequested) -> None:
        if self._save(event.name, event.content):
            self.notify(f"Saved {event.name}")
        self._update_preview()

    def on_prompt_editor_exited(self, event: PromptEditor.Exited) -> None:
        self._save(event.name, event.content)
        self._editing = None
        self.refresh_prompts(select=event.name)
        self.prompt_list.focus()
        self.refresh_bindings()

    def on_prompt_editor_mode_changed(self, event: PromptEditor.ModeChanged) -> None:
        self._update_status_bar()

    def on_prompt_editor_clipboard_copy(self, event: PromptEditor.ClipboardCopy) -> None:
        self._copy_text(event.text)

    def on_prompt_editor_paste_requested(self, event: PromptEditor.PasteRequested) -> None:
        self.editor.paste(self._paste_text())

    def on_prompt_editor_reference_requested(self, event: PromptEditor.ReferenceRequested) -> None:
        names = [n for n in self.context.store.names() if n != self._editing]
        if not names:
            self.notify("No other prompts to reference", severity="warning")
            return

        def on_result(name: str | None) -> None:
            if name:
                self.editor.insert_reference(name)
            self.editor.focus()

        self.push_screen(ReferencePickerScreen(names), on_result)

    # ─────────────────────────────────────────────────────────────────
    # Prompt management
    # ─────────────────────────────────────────────────────────────────

    def action_delete_prompt(self) -> None:
        name = self._selected_name()
        if name is None:
            return

        def on_result(confirmed: bool | None) -> None:
            if not confirmed:
                return
            if self.context.store.delete(name):
                self.notify(f"Deleted {name}")
            self.refresh_prompts()

        self.push_screen(ConfirmScreen("Delete prompt", f"Delete '{name}'?"), on_result)

    def action_archive_prompt(self) -> None:
        """Archive the highlighted prompt, or restore it in the archive view."""
        name = self._selected_name()
        if name is None:
            return
        store = self.context.store
        restoring = store.is_archived(name)
        try:
            if restoring:
                store.unarchive(name)
            else:
                store.archive(name)
        except (OSError, PromptNotFoundError) as exc:
            self.notify(str(exc), severity="error")
            return
        self.notify(f"Restored {name}" if restoring else f"Archived {name}")
        self.refresh_prompts()

    def action_toggle_archive_view(self) -> None:
        self._show_archived = not self._show_archived
        self.refresh_prompts()

    def action_edit_tags(self) -> None:
        prompt = self._selected_prompt()
        if prompt is None:
            return

        def on_result(tags: list[str] | None) -> None:
            if tags is None or not prompt.set_tags(tags):
                return
            try:
                self.context.store.save(prompt)
            except OSError as exc:
                self.notify(str(exc), severity="error")
                return
            if self._tag_filter is not None and self._tag_filter not in self.context.store.all_tags():
                self._tag_filter = None
            self.refresh_prompts(select=prompt.name)

        screen = TagScreen(prompt.name, prompt.tags, self.context.store.all_tags())
        self.push_screen(screen, on_result)

    def action_next_tag_filter(self) -> None:
        self._cycle_tag_filter(1)

    def action_previous_tag_filter(self) -> None:
        self._cycle_tag_filter(-1)

    def _cycle_tag_filter(self, step: int) -> None:
        """Step through no filter, then each known tag in order."""
        choices: list[str | None] = [None, *self.context.store.all_tags()]
        position = choices.index(self._tag_filter) if self._tag_filter in choices else 0
        self._tag_filter = choices[(position + step) % len(choices)]
        self.refresh_prompts()
        if self._tag_filter is None:
            self.notify("Showing all tags")
        else:
            self.notify(f"Filtering by #{self._tag_filter}")

    def action_rename_prompt(self) -> None:
        name = self._selected_name()
        if name is None:
            return
        try:
            new_name = self.context.store.rename_from_content(name)
        except (OSError, ValueError, PiemmeError) as exc:
            self.notify(str(exc), severity="error")
            return
        if new_name == name:
            self.notify("Name already matches the first line", severity="warning")
            return
        self.notify(f"Renamed {name} to {new_name}")
        self.refresh_prompts(select=new_name)

    def action_duplicate_prompt(self) -> None:
        name = self._selected_name()
        if name is None:
            return
        try:
            copy = self.context.store.duplicate(name)
        except (OSError, PromptNotFoundError, DuplicatePromptError) as exc:
            self.notify(str(exc), severity="error")
            return
        self.notify(f"Duplicated {name} as {copy.name}")
        self.refresh_prompts(select=copy.name)

    def action_toggle_safe_mode(self) -> None:
        enabled = not self.context.safe_mode
        try:
            self.context.set_safe_mode(enabled)
        except OSError as exc:
            self.notify(f"Failed to save settings: {exc}", severity="error")
        state = "on" if self.context.safe_mode else "off"
        self.notify(f"Safe mode {state}", severity="information" if enabled else "warning")
        self._update_status_bar()

    # ─────────────────────────────────────────────────────────────────
    # Preview
    # ─────────────────────────────────────────────────────────────────

    def action_toggle_preview(self) -> None:
        self.screen.toggle_class("show-preview")
        self._update_preview()

    def _update_preview(self) -> None:
        if not self.screen.has_class("show-preview"):
            return
        name = self._selected_name()
        prompt = self.context.store.get(name) if name else None
        panel = self.query_one("#preview", Static)
        panel.border_title = "Preview"
        if prompt is None:
            panel.update("")
            return
        result = preview(prompt.content, self.context.store, self.context.file_access, root_name=prompt.name)
        panel.update(result.text)
        self._report_diagnostics(result.diagnostics)

    # ─────────────────────────────────────────────────────────────────
    # Copy
    # ─────────────────────────────────────────────────────────────────

    def action_copy_raw(self) -> None:
        prompt = self._selected_prompt()
        if prompt is not None:
            self._copy_text(prompt.content)
            self.notify(f"Copied {prompt.name} (raw)")

    def action_copy_resolved(self) -> None:
        prompt = self._selected_prompt()
        if prompt is None:
            return
        pending = prepare_copy(
            prompt.content,
            self.context.store,
            self.context.file_access,
            self.context.safe_mode,
            root_name=prompt.name,
        )
        if not pending.needs_confirmation:
            self._finish_copy(prompt.name, pending, True)
            return

        def on_result(confirmed: bool | None) -> None:
            self._finish_copy(prompt.name, pending, bool(confirmed))

        self.push_screen(ConfirmCommandsScreen(pending.commands), on_result)

    def _finish_copy(self, name: str, pending: PendingCopy, confirmed: bool) -> CopyOutcome:
        outcome = finish_copy(pending, confirmed)
        if outcome.aborted:
            self.notify("Copy cancelled", severity="warning")
            return outcome

        self._report_diagnostics(outcome.diagnostics)
        self._copy_text(outcome.unwrap())
        failures = [d for d in outcome.diagnostics if d.kind in COMMAND_FAILURES]
        if failures:
            self.notify(f"Copied {name} ({len(failures)} command(s) failed)", severity="warning")
        else:
            self.notify(f"Copied {name}")
        return outcome

    def _report_diagnostics(self, diagnostics: list[Diagnostic]) -> None:
        if not self._debug_mode:
            return
        for diagnostic in diagnostics:
            self.notify(str(diagnostic), severity="warning", timeout=6)

    # ─────────────────────────────────────────────────────────────────
    # Clipboard
    # ─────────────────────────────────────────────────────────────────

    def _copy_text(self, text: str) -> None:
        """Copy text to the OS clipboard if possible, otherwise keep it internally."""
        self._internal_clipboard.set_text(text)

        # Textual's clipboard support (OSC 52 where the terminal allows it).
        self.copy_to_clipboard(text)

        try:
            self._system_clipboard.set_text(text)
        except ClipboardError as exc:
            if self._debug_mode:
                self.notify(str(exc), severity="warning")

    def _paste_text(self) -> str:
        try:
            text = self._system_clipboard.get_text()
        except ClipboardError:
            return self._internal_clipboard.get_text()
        return text or self._internal_clipboard.get_text()

    # ─────────────────────────────────────────────────────────────────
    # Status bar
    # ─────────────────────────────────────────────────────────────────

    def _update_status_bar(self) -> None:
        name = self._editing or self._selected_name() or "no prompt"
        mode = self.editor.mode.value if self._editing else "LIST"
        safe = "safe mode on" if self.context.safe_mode else "safe mode OFF"
        status = Text()
        status.append(name, style="bold")
        status.append(f"  {mode}", style=self.editor.mode.border_hint if self._editing else "dim")
        if self._show_archived:
            status.append("  archive", style="yellow")
        if self._tag_filter is not None:
            status.append(f"  #{self._tag_filter}", style=self.context.settings.get_tag_color(self._tag_filter))
        status.append(f"  {safe}", style="green" if self.context.safe_mode else "bold red")
        self.query_one("#status-bar", Static).update(status)
