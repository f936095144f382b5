"""Prompt model and naming helpers."""

from __future__ import annotations

import re
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Iterable

NAME_SOURCE_LENGTH = 20

_SEPARATORS = re.compile(r"[\s\-]")
_INVALID_NAME_CHARS = re.compile(r"[^a-z0-9_]")
_REPEATED_UNDERSCORES = re.compile(r"_+")


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Prompt:
    """A named, persisted block of text with tags and timestamps."""

    name: str
    content: str = ""
    id: uuid.UUID = field(default_factory=uuid.uuid4)
    tags: list[str] = field(default_factory=list)
    created: datetime = field(default_factory=_now)
    modified: datetime = field(default_factory=_now)

    def set_content(self, content: str) -> None:
        """Update the content and refresh the modified timestamp."""
        self.content = content
        self.modified = _now()

    def add_tag(self, tag: str) -> None:
        if tag not in self.tags:
            self.tags.append(tag)
            self.modified = _now()

    def remove_tag(self, tag: str) -> bool:
        if tag not in self.tags:
            return False
        self.tags.remove(tag)
        self.modified = _now()
        return True

    def has_tag(self, tag: str) -> bool:
        return tag in self.tags

    def set_tags(self, tags: Iterable[str]) -> bool:
        """Make the tags match the given ones; returns True if anything changed."""
        wanted = []
        for tag in tags:
            tag = tag.strip()
            if tag and tag not in wanted:
                wanted.append(tag)
        changed = False
        for tag in [t for t in self.tags if t not in wanted]:
            changed = self.remove_tag(tag) or changed
        for tag in wanted:
            if not self.has_tag(tag):
                self.add_tag(tag)
                changed = True
        return changed

    @property
    def first_line(self) -> str:
        """First line of content (for list previews)."""
        return self.content.split("\n", 1)[0]


def generate_name_from_content(content: str) -> str:
    """Derive a short identifier from the first line of content.

    The first 20 characters are lower-cased, whitespace and dashes become
    underscores, anything outside ``[a-z0-9_]`` is dropped and runs of
    underscores collapse. Returns "" for blank content.

    >>> generate_name_from_content("Hello World - A Test!")
    'hello_world_a_test'
    """
    first_line = content.split("\n", 1)[0]
    if not first_line.strip():
        return ""
    name = _SEPARATORS.sub("_", first_line[:NAME_SOURCE_LENGTH].lower())
    name = _INVALID_NAME_CHARS.sub("", name)
    return _REPEATED_UNDERSCORES.sub("_", name).strip("_")


def make_unique_name(base_name: str, existing: Iterable[str]) -> str:
    """Return base_name, or base_name_N for the first free N.

    An empty base yields empty_prompt_N.
    """
    taken = set(existing)
    if not base_name:
        n = 1
        while f"empty_prompt_{n}" in taken:
            n += 1
        return f"empty_prompt_{n}"

    if base_name not in taken:
        return base_name

    suffix = 1
    while f"{base_name}_{suffix}" in taken:
        suffix += 1
    return f"{base_name}_{suffix}"
