"""Copy, preview and highlight entry points.

"Copy resolved" is the only path that runs commands. It happens in two
phases so an asynchronous UI can ask for confirmation in between:

    pending = prepare_copy(text, repository, file_access, safe_mode)
    if pending.needs_confirmation:
        ... ask the user about pending.commands ...
    outcome = finish_copy(pending, confirmed)

``copy_resolved`` runs both phases with a blocking confirmation.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from ..errors import CopyAborted
from ..protocols import Clipboard, ConfirmationUI, FileAccess, Repository
from .commands import CommandExecutor
from .highlight import HighlightSpan, classify
from .resolver import Diagnostic, ReferenceResolver, ResolveResult


@dataclass
class PendingCopy:
    """Resolved text waiting for the command decision."""

    resolved: ResolveResult
    safe_mode: bool

    @property
    def commands(self) -> list[str]:
        return self.resolved.commands

    @property
    def needs_confirmation(self) -> bool:
        return self.safe_mode and bool(self.commands)


@dataclass
class CopyOutcome:
    """Final text of a copy, or the record of its cancellation."""

    text: str | None
    aborted: bool = False
    diagnostics: list[Diagnostic] = field(default_factory=list)
    commands: list[str] = field(default_factory=list)

    def unwrap(self) -> str:
        """Return the text, raising CopyAborted if the user declined."""
        if self.aborted or self.text is None:
            raise CopyAborted(self.commands)
        return self.text


def copy_raw(text: str, clipboard: Clipboard | None = None) -> str:
    """Return text exactly as written, placing it on the clipboard if given."""
    if clipboard is not None:
        clipboard.set_text(text)
    return text


def prepare_copy(
    text: str,
    repository: Repository,
    file_access: FileAccess | None,
    safe_mode: bool,
    *,
    root_name: str | None = None,
) -> PendingCopy:
    """Resolve references; commands are found but not run."""
    resolved = ReferenceResolver(repository, file_access).resolve(text, root_name=root_name)
    return PendingCopy(resolved=resolved, safe_mode=safe_mode)


def finish_copy(
    pending: PendingCopy,
    confirmed: bool,
    executor: CommandExecutor | None = None,
) -> CopyOutcome:
    """Run the commands (if allowed) and produce the final text."""
    commands = pending.commands
    if pending.needs_confirmation and not confirmed:
        return CopyOutcome(text=None, aborted=True, commands=commands)

    executed = (executor or CommandExecutor()).run_all(pending.resolved.text)
    return CopyOutcome(
        text=executed.text,
        diagnostics=pending.resolved.diagnostics + executed.diagnostics,
        commands=commands,
    )


def copy_resolved(
    text: str,
    repository: Repository,
    file_access: FileAccess | None,
    confirmation: ConfirmationUI | None,
    safe_mode: bool,
    *,
    root_name: str | None = None,
    clipboard: Clipboard | None = None,
    executor: CommandExecutor | None = None,
) -> CopyOutcome:
    """Resolve, confirm, execute and (optionally) put the result on the clipboard.

    The clipboard is only written when the copy was not aborted.
    """
    pending = prepare_copy(text, repository, file_access, safe_mode, root_name=root_name)
    confirmed = True
    if pending.needs_confirmation:
        confirmed = confirmation is not None and confirmation.confirm(pending.commands)
    outcome = finish_copy(pending, confirmed, executor)
    if clipboard is not None and not outcome.aborted:
        clipboard.set_text(outcome.unwrap())
    return outcome


def preview(
    text: str,
    repository: Repository,
    file_access: FileAccess | None,
    *,
    root_name: str | None = None,
) -> ResolveResult:
    """Resolve references for display; command tokens stay as written."""
    return ReferenceResolver(repository, file_access).resolve(text, root_name=root_name)


def highlight_spans(
    text: str,
    repository: Repository,
    file_access: FileAccess | None,
) -> list[HighlightSpan]:
    return classify(
        text,
        repository.exists,
        file_access.file_exists if file_access is not None else None,
    )
