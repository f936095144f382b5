"""Application context shared by the CLI and the TUI."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from .config import Settings, data_dir, load_settings, save_settings, settings_path
from .store import LocalFileAccess, PromptStore


@dataclass
class AppContext:
    """Settings and collaborators for one run, created once at startup."""

    settings: Settings
    store: PromptStore
    file_access: LocalFileAccess
    settings_file: Path

    @classmethod
    def from_environment(cls) -> AppContext:
        """Build a context from the data directory of the working directory."""
        path = settings_path()
        return cls(
            settings=load_settings(path),
            store=PromptStore(data_dir()),
            file_access=LocalFileAccess(),
            settings_file=path,
        )

    @property
    def safe_mode(self) -> bool:
        return self.settings.safe_mode

    def set_safe_mode(self, enabled: bool) -> None:
        self.settings.safe_mode = enabled
        save_settings(self.settings, self.settings_file)
