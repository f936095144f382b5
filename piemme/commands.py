"""CLI command handlers."""

from __future__ import annotations

import sys
from typing import Any, TextIO

from .clipboard import SystemClipboard
from .context import AppContext
from .errors import ClipboardError, PromptNotFoundError
from .render import copy_raw, copy_resolved


class TerminalConfirmation:
    """ConfirmationUI that asks on the terminal."""

    def __init__(self, assume_yes: bool = False, stdin: TextIO | None = None, stdout: TextIO | None = None):
        self.assume_yes = assume_yes
        self._stdin = stdin or sys.stdin
        self._stdout = stdout or sys.stderr

    def confirm(self, commands: list[str]) -> bool:
        if self.assume_yes:
            return True
        print("This prompt will run the following commands:", file=self._stdout)
        for i, command in enumerate(commands, 1):
            print(f"  {i}. {command}", file=self._stdout)
        print("Run them? [y/N] ", end="", file=self._stdout, flush=True)
        answer = self._stdin.readline()
        return answer.strip().lower() in ("y", "yes")


def _context(args: Any) -> AppContext:
    return getattr(args, "context", None) or AppContext.from_environment()


def _render(args: Any, context: AppContext, clipboard: SystemClipboard | None) -> str | None:
    """Raw or resolved text of the named prompt; None when the user declined."""
    prompt = context.store.require(args.name)
    if args.raw:
        return copy_raw(prompt.content, clipboard)

    outcome = copy_resolved(
        prompt.content,
        context.store,
        context.file_access,
        TerminalConfirmation(assume_yes=args.yes),
        context.safe_mode,
        root_name=prompt.name,
        clipboard=clipboard,
    )
    if outcome.aborted:
        return None
    for diagnostic in outcome.diagnostics:
        print(f"[piemme] {diagnostic}", file=sys.stderr)
    return outcome.text


def cmd_list(args: Any) -> int:
    """List prompt names."""
    context = _context(args)
    prompts = context.store.load_all(archived=args.archived)
    if not prompts:
        print("No prompts found.")
        return 0
    for prompt in prompts:
        tags = f"  [{', '.join(prompt.tags)}]" if prompt.tags else ""
        print(f"{prompt.name}{tags}")
    return 0


def cmd_show(args: Any) -> int:
    """Print a prompt, resolved unless --raw."""
    context = _context(args)
    try:
        text = _render(args, context, None)
    except PromptNotFoundError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    if text is None:
        print("Aborted", file=sys.stderr)
        return 1
    sys.stdout.write(text)
    if text and not text.endswith("\n"):
        sys.stdout.write("\n")
    return 0


def cmd_copy(args: Any) -> int:
    """Copy a prompt to the OS clipboard, resolved unless --raw."""
    context = _context(args)
    clipboard = getattr(args, "clipboard", None) or SystemClipboard()
    try:
        text = _render(args, context, clipboard)
    except PromptNotFoundError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    except ClipboardError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    if text is None:
        print("Aborted", file=sys.stderr)
        return 1
    print(f"Copied '{args.name}' to clipboard.")
    return 0


def cmd_safe_mode(args: Any) -> int:
    """Turn safe mode on or off."""
    context = _context(args)
    enabled = args.state == "on"
    try:
        context.set_safe_mode(enabled)
    except OSError as exc:
        print(f"Error: Failed to save settings: {exc}", file=sys.stderr)
        return 1
    print(f"Safe mode {'on' if enabled else 'off'}.")
    return 0
