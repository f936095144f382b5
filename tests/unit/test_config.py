"""Tests for settings and data directory helpers."""

import json

from piemme.config import (
    TAG_COLORS,
    Settings,
    data_dir,
    is_debug,
    load_settings,
    save_settings,
    settings_path,
)
from piemme.context import AppContext


class TestDataDir:
    """Tests for data directory resolution."""

    def test_defaults_to_working_directory(self, tmp_path, monkeypatch):
        monkeypatch.delenv("PIEMME_HOME")
        monkeypatch.chdir(tmp_path)
        assert data_dir() == tmp_path / ".piemme"

    def test_env_override(self, tmp_path, monkeypatch):
        monkeypatch.setenv("PIEMME_HOME", str(tmp_path / "elsewhere"))
        assert settings_path() == tmp_path / "elsewhere" / "settings.json"

    def test_debug_flag(self, monkeypatch):
        assert not is_debug()
        monkeypatch.setenv("PIEMME_DEBUG", "1")
        assert is_debug()


class TestSettings:
    """Tests for Settings load/save."""

    def test_missing_file_gives_defaults(self, tmp_path):
        settings = load_settings(tmp_path / "nope.json")
        assert settings.safe_mode is True

    def test_round_trip_preserves_unknown_keys(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text(json.dumps({"safe_mode": False, "theme": "dark"}), encoding="utf-8")

        settings = load_settings(path)
        assert settings.safe_mode is False
        settings.tag_colors["work"] = "red"
        save_settings(settings, path)

        data = json.loads(path.read_text(encoding="utf-8"))
        assert data["theme"] == "dark"
        assert data["safe_mode"] is False
        assert data["tag_colors"] == {"work": "red"}

    def test_invalid_json_warns_and_uses_defaults(self, tmp_path, capsys):
        path = tmp_path / "settings.json"
        path.write_text("{not json", encoding="utf-8")
        settings = load_settings(path)
        assert settings.safe_mode is True
        assert "[piemme]" in capsys.readouterr().err

    def test_non_object_json(self, tmp_path, capsys):
        path = tmp_path / "settings.json"
        path.write_text("[1, 2]", encoding="utf-8")
        assert load_settings(path) == Settings()
        assert "must contain a JSON object" in capsys.readouterr().err

    def test_bad_values_ignored(self):
        settings = Settings.from_dict({"safe_mode": "no", "tag_colors": ["red"]})
        assert settings.safe_mode is True
        assert settings.tag_colors == {}

    def test_tag_color_default_is_stable(self):
        settings = Settings()
        # "a" is byte 97; 97 % 6 == 1
        assert settings.get_tag_color("a") == TAG_COLORS[1]
        assert settings.get_tag_color("a") == settings.get_tag_color("a")

    def test_configured_tag_color(self):
        settings = Settings(tag_colors={"a": "white"})
        assert settings.get_tag_color("a") == "white"


class TestAppContext:
    """Tests for the shared application context."""

    def test_from_environment(self, tmp_path):
        context = AppContext.from_environment()
        assert context.store.root == tmp_path / ".piemme"
        assert context.safe_mode is True

    def test_set_safe_mode_persists(self, tmp_path):
        context = AppContext.from_environment()
        context.set_safe_mode(False)
        assert not context.safe_mode
        assert load_settings(tmp_path / ".piemme" / "settings.json").safe_mode is False
