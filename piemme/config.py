"""Configuration management for piemme.

Everything lives in a ``.piemme/`` directory under the current working
directory (or ``$PIEMME_HOME``). Settings are a JSON object in
``settings.json``.
"""

from __future__ import annotations

import json
import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

DATA_DIR_NAME = ".piemme"
SETTINGS_FILE = "settings.json"

TAG_COLORS = ("blue", "green", "yellow", "magenta", "cyan", "red")


def data_dir() -> Path:
    """Root of all piemme data."""
    override = os.environ.get("PIEMME_HOME")
    if override:
        return Path(override).expanduser()
    return Path.cwd() / DATA_DIR_NAME


def settings_path() -> Path:
    return data_dir() / SETTINGS_FILE


def is_debug() -> bool:
    """True when PIEMME_DEBUG asks for diagnostics to be shown."""
    return os.environ.get("PIEMME_DEBUG", "").strip().lower() in ("1", "true", "yes", "on")


@dataclass
class Settings:
    """User settings."""

    safe_mode: bool = True
    tag_colors: dict[str, str] = field(default_factory=dict)
    extra: dict[str, Any] = field(default_factory=dict, repr=False)

    def get_tag_color(self, tag: str) -> str:
        """Configured colour for tag, else a stable colour derived from its name."""
        color = self.tag_colors.get(tag)
        if color:
            return color
        return TAG_COLORS[sum(tag.encode("utf-8")) % len(TAG_COLORS)]

    def to_dict(self) -> dict[str, Any]:
        data = dict(self.extra)
        data.update(
            {
                "safe_mode": self.safe_mode,
                "tag_colors": dict(self.tag_colors),
            }
        )
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Settings:
        known = {"safe_mode", "tag_colors"}
        settings = cls(extra={k: v for k, v in data.items() if k not in known})

        safe_mode = data.get("safe_mode", True)
        if isinstance(safe_mode, bool):
            settings.safe_mode = safe_mode

        tag_colors = data.get("tag_colors", {})
        if isinstance(tag_colors, dict):
            settings.tag_colors = {str(k): str(v) for k, v in tag_colors.items()}
        return settings


def load_settings(path: Path | None = None) -> Settings:
    """Load settings, falling back to defaults when the file is missing or broken."""
    path = path or settings_path()
    if not path.exists():
        return Settings()

    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        print(f"[piemme] Failed to read settings '{path}': {exc}", file=sys.stderr)
        return Settings()

    if not isinstance(payload, dict):
        print(f"[piemme] Settings file '{path}' must contain a JSON object.", file=sys.stderr)
        return Settings()
    return Settings.from_dict(payload)


def save_settings(settings: Settings, path: Path | None = None) -> None:
    """Write settings as JSON, creating the data directory if needed."""
    path = path or settings_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(settings.to_dict(), indent=2), encoding="utf-8")
