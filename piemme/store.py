"""File-backed prompt storage.

Each prompt is a markdown file ``<name>.md`` that starts with a YAML
frontmatter block:

    ---
    id: 0b7c...
    tags: [coding]
    created: 2024-01-01T00:00:00+00:00
    modified: 2024-01-01T00:00:00+00:00
    ---
    prompt body

Active prompts live in ``prompts/``, archived ones in ``archive/``.
Reference lookups see both.
"""

from __future__ import annotations

import errno
import sys
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import yaml

from .errors import DuplicatePromptError, InvalidPromptFileError, PromptNotFoundError
from .models import Prompt, generate_name_from_content, make_unique_name

FRONTMATTER_DELIMITER = "---"
PROMPT_SUFFIX = ".md"
NEW_PROMPT_NAME = "new_prompt"


def format_io_error(exc: OSError, path: Path | str, operation: str) -> str:
    """User-facing message for a failed file operation."""
    if isinstance(exc, PermissionError):
        return f"Permission denied: Cannot {operation} '{path}'. Check file/directory permissions."
    if isinstance(exc, FileNotFoundError):
        return f"File not found: '{path}'"
    if isinstance(exc, IsADirectoryError):
        return f"Is a directory: '{path}'"
    if isinstance(exc, FileExistsError):
        return f"File already exists: '{path}'"
    if exc.errno in (errno.ENOSPC, getattr(errno, "EDQUOT", errno.ENOSPC)):
        return f"Disk full: Cannot {operation} '{path}'"
    return f"Failed to {operation} '{path}': {exc.strerror or exc}"


def _is_valid_name(name: str) -> bool:
    return bool(name) and "/" not in name and "\\" not in name and not name.startswith(".")


def _parse_timestamp(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if isinstance(value, str):
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)
    raise ValueError(f"invalid timestamp: {value!r}")


def parse_prompt_file(text: str, path: Path) -> Prompt:
    """Build a Prompt from file text; the name comes from the file stem."""
    if not text.startswith(FRONTMATTER_DELIMITER):
        raise InvalidPromptFileError(str(path), "missing YAML frontmatter")

    rest = text[len(FRONTMATTER_DELIMITER):]
    end = rest.find("\n" + FRONTMATTER_DELIMITER)
    if end == -1:
        raise InvalidPromptFileError(str(path), "missing closing ---")

    body = rest[end + 1 + len(FRONTMATTER_DELIMITER):]
    if body.startswith("\n"):
        body = body[1:]

    try:
        meta = yaml.safe_load(rest[:end]) or {}
    except yaml.YAMLError as exc:
        raise InvalidPromptFileError(str(path), f"invalid YAML: {exc}") from exc
    if not isinstance(meta, dict):
        raise InvalidPromptFileError(str(path), "frontmatter must be a mapping")

    try:
        prompt_id = uuid.UUID(str(meta["id"]))
        created = _parse_timestamp(meta["created"])
        modified = _parse_timestamp(meta.get("modified", created))
    except KeyError as exc:
        raise InvalidPromptFileError(str(path), f"missing field {exc}") from exc
    except ValueError as exc:
        raise InvalidPromptFileError(str(path), str(exc)) from exc

    tags = meta.get("tags") or []
    if not isinstance(tags, list):
        raise InvalidPromptFileError(str(path), "tags must be a list")

    return Prompt(
        name=path.stem,
        content=body,
        id=prompt_id,
        tags=[str(tag) for tag in tags],
        created=created,
        modified=modified,
    )


def format_prompt_file(prompt: Prompt) -> str:
    meta: dict[str, Any] = {"id": str(prompt.id)}
    if prompt.tags:
        meta["tags"] = list(prompt.tags)
    meta["created"] = prompt.created.isoformat()
    meta["modified"] = prompt.modified.isoformat()
    frontmatter = yaml.safe_dump(meta, sort_keys=False, allow_unicode=True)
    return f"{FRONTMATTER_DELIMITER}\n{frontmatter}{FRONTMATTER_DELIMITER}\n{prompt.content}"


class PromptStore:
    """Prompts on disk under a data directory.

    Also serves as the Repository used for reference resolution.
    """

    def __init__(self, root: Path) -> None:
        self.root = Path(root)
        self.prompts_dir = self.root / "prompts"
        self.archive_dir = self.root / "archive"

    # ─────────────────────────────────────────────────────────────────
    # Paths
    # ─────────────────────────────────────────────────────────────────

    def _path(self, directory: Path, name: str) -> Path:
        return directory / f"{name}{PROMPT_SUFFIX}"

    def _find(self, name: str) -> Path | None:
        if not _is_valid_name(name):
            return None
        for directory in (self.prompts_dir, self.archive_dir):
            path = self._path(directory, name)
            if path.is_file():
                return path
        return None

    def is_archived(self, name: str) -> bool:
        path = self._find(name)
        return path is not None and path.parent == self.archive_dir

    # ─────────────────────────────────────────────────────────────────
    # Loading
    # ─────────────────────────────────────────────────────────────────

    def load(self, path: Path) -> Prompt:
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as exc:
            raise InvalidPromptFileError(str(path), format_io_error(exc, path, "read")) from exc
        return parse_prompt_file(text, path)

    def load_all(self, archived: bool = False) -> list[Prompt]:
        """Load every prompt of one directory, sorted by name.

        Files that cannot be parsed are skipped with a warning on stderr.
        """
        directory = self.archive_dir if archived else self.prompts_dir
        if not directory.is_dir():
            return []
        prompts = []
        for path in sorted(directory.glob(f"*{PROMPT_SUFFIX}")):
            try:
                prompts.append(self.load(path))
            except InvalidPromptFileError as exc:
                print(f"[piemme] Skipping prompt: {exc}", file=sys.stderr)
        prompts.sort(key=lambda p: p.name)
        return prompts

    def names(self, include_archived: bool = True) -> list[str]:
        directories = [self.prompts_dir, self.archive_dir] if include_archived else [self.prompts_dir]
        found = set()
        for directory in directories:
            if directory.is_dir():
                found.update(p.stem for p in directory.glob(f"*{PROMPT_SUFFIX}"))
        return sorted(found)

    def all_tags(self) -> list[str]:
        """Every tag used by an active or archived prompt, sorted."""
        tags = set()
        for prompt in self.load_all() + self.load_all(archived=True):
            tags.update(prompt.tags)
        return sorted(tags)

    def get(self, name: str) -> Prompt | None:
        """Prompt by name from either directory, or None."""
        path = self._find(name)
        if path is None:
            return None
        return self.load(path)

    def require(self, name: str) -> Prompt:
        prompt = self.get(name)
        if prompt is None:
            raise PromptNotFoundError(name)
        return prompt

    # ─────────────────────────────────────────────────────────────────
    # Repository contract
    # ─────────────────────────────────────────────────────────────────

    def lookup_by_name(self, name: str) -> str | None:
        path = self._find(name)
        if path is None:
            return None
        try:
            return self.load(path).content
        except InvalidPromptFileError:
            return None

    def exists(self, name: str) -> bool:
        return self._find(name) is not None

    # ─────────────────────────────────────────────────────────────────
    # Writing
    # ─────────────────────────────────────────────────────────────────

    def save(self, prompt: Prompt) -> Path:
        """Write prompt to the directory that already holds it (active by default)."""
        existing = self._find(prompt.name)
        directory = existing.parent if existing is not None else self.prompts_dir
        path = self._path(directory, prompt.name)
        try:
            directory.mkdir(parents=True, exist_ok=True)
            path.write_text(format_prompt_file(prompt), encoding="utf-8")
        except OSError as exc:
            raise type(exc)(format_io_error(exc, path, "write")) from exc
        return path

    def create(self, content: str = "", tags: list[str] | None = None) -> Prompt:
        """Create and save a prompt named after its content (or new_prompt)."""
        base = generate_name_from_content(content) or NEW_PROMPT_NAME
        prompt = Prompt(name=make_unique_name(base, self.names()), content=content, tags=list(tags or []))
        self.save(prompt)
        return prompt

    def duplicate(self, name: str) -> Prompt:
        original = self.require(name)
        base = generate_name_from_content(original.content) or original.name
        copy = Prompt(name=make_unique_name(base, self.names()), content=original.content, tags=list(original.tags))
        self.save(copy)
        return copy

    def delete(self, name: str) -> bool:
        path = self._find(name)
        if path is None:
            return False
        path.unlink()
        return True

    def rename(self, old_name: str, new_name: str) -> Path:
        if not _is_valid_name(new_name):
            raise ValueError(f"Invalid prompt name: {new_name!r}")
        path = self._find(old_name)
        if path is None:
            raise PromptNotFoundError(old_name)
        if self.exists(new_name):
            raise DuplicatePromptError(new_name)
        target = self._path(path.parent, new_name)
        path.rename(target)
        return target

    def rename_from_content(self, name: str) -> str:
        """Rename a prompt after its first line. Returns the (possibly unchanged) name."""
        prompt = self.require(name)
        base = generate_name_from_content(prompt.content)
        if not base or base == name:
            return name
        new_name = make_unique_name(base, [n for n in self.names() if n != name])
        self.rename(name, new_name)
        return new_name

    def archive(self, name: str) -> Path:
        return self._move(name, self.prompts_dir, self.archive_dir)

    def unarchive(self, name: str) -> Path:
        return self._move(name, self.archive_dir, self.prompts_dir)

    def _move(self, name: str, source: Path, target_dir: Path) -> Path:
        path = self._path(source, name)
        if not _is_valid_name(name) or not path.is_file():
            raise PromptNotFoundError(name)
        target_dir.mkdir(parents=True, exist_ok=True)
        target = self._path(target_dir, name)
        path.rename(target)
        return target


class LocalFileAccess:
    """Reads [[file:...]] targets relative to the working directory."""

    def __init__(self, base: Path | None = None) -> None:
        self._base = base

    def _resolve(self, path: str) -> Path:
        candidate = Path(path)
        if self._base is not None and not candidate.is_absolute():
            return self._base / candidate
        return candidate

    def read_file(self, path: str) -> str:
        target = self._resolve(path)
        try:
            return target.read_text(encoding="utf-8")
        except OSError as exc:
            raise type(exc)(format_io_error(exc, path, "read")) from exc
        except UnicodeDecodeError:
            raise
        except ValueError as exc:
            # embedded NUL bytes never reach the OS
            raise OSError(f"Invalid path: {path!r}") from exc

    def file_exists(self, path: str) -> bool:
        try:
            return self._resolve(path).is_file()
        except (OSError, ValueError):
            return False
