"""Tests for file-backed prompt storage."""

import uuid
from datetime import datetime, timezone
from pathlib import Path

import pytest

from piemme.errors import DuplicatePromptError, InvalidPromptFileError, PromptNotFoundError
from piemme.models import Prompt
from piemme.render import ReferenceResolver
from piemme.store import LocalFileAccess, format_prompt_file, parse_prompt_file


class TestPromptFileFormat:
    """Tests for frontmatter parsing and formatting."""

    def test_format_then_parse(self):
        prompt = Prompt(
            name="greet",
            content="Hello\n\nworld",
            tags=["coding", "daily"],
            created=datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc),
        )
        text = format_prompt_file(prompt)
        assert text.startswith("---\n")

        parsed = parse_prompt_file(text, Path("greet.md"))
        assert parsed.name == "greet"
        assert parsed.content == "Hello\n\nworld"
        assert parsed.id == prompt.id
        assert parsed.tags == ["coding", "daily"]
        assert parsed.created == prompt.created

    def test_parse_handwritten_file(self):
        text = (
            "---\n"
            "id: 6f1c2b3a-0000-4000-8000-000000000001\n"
            "tags: [a]\n"
            "created: 2024-01-01T00:00:00Z\n"
            "---\n"
            "body"
        )
        prompt = parse_prompt_file(text, Path("x.md"))
        assert prompt.id == uuid.UUID("6f1c2b3a-0000-4000-8000-000000000001")
        assert prompt.content == "body"
        assert prompt.modified == prompt.created

    @pytest.mark.parametrize(
        "text",
        [
            "no frontmatter",
            "---\nid: x\n",
            "---\n: : [\n---\nbody",
            "---\ntags: []\n---\nbody",
            "---\nid: not-a-uuid\ncreated: 2024-01-01T00:00:00Z\n---\n",
        ],
    )
    def test_invalid_files(self, text):
        with pytest.raises(InvalidPromptFileError):
            parse_prompt_file(text, Path("bad.md"))


class TestPromptStore:
    """Tests for PromptStore."""

    def test_create_names_from_content(self, store):
        prompt = store.create("Hello World\nmore")
        assert prompt.name == "hello_world"
        assert (store.prompts_dir / "hello_world.md").is_file()
        assert store.get("hello_world").content == "Hello World\nmore"

    def test_create_blank_uses_new_prompt(self, store):
        assert store.create().name == "new_prompt"
        assert store.create().name == "new_prompt_1"

    def test_save_updates_content(self, store):
        prompt = store.create("draft")
        prompt.set_content("final")
        store.save(prompt)
        assert store.get("draft").content == "final"

    def test_load_all_sorted(self, store):
        store.create("beta")
        store.create("alpha")
        assert [p.name for p in store.load_all()] == ["alpha", "beta"]

    def test_load_all_skips_invalid_files(self, store, capsys):
        store.create("good")
        (store.prompts_dir / "broken.md").write_text("nothing here", encoding="utf-8")
        assert [p.name for p in store.load_all()] == ["good"]
        assert "[piemme] Skipping prompt" in capsys.readouterr().err

    def test_load_all_without_directory(self, store):
        assert store.load_all() == []

    def test_delete(self, store):
        store.create("gone")
        assert store.delete("gone") is True
        assert store.delete("gone") is False
        assert not store.exists("gone")

    def test_rename(self, store):
        store.create("old")
        store.rename("old", "new")
        assert store.exists("new")
        assert not store.exists("old")

    def test_rename_errors(self, store):
        store.create("one")
        store.create("two")
        with pytest.raises(DuplicatePromptError):
            store.rename("one", "two")
        with pytest.raises(PromptNotFoundError):
            store.rename("missing", "three")
        with pytest.raises(ValueError):
            store.rename("one", "../escape")

    def test_rename_from_content(self, store):
        prompt = store.create()
        prompt.set_content("Code Review checklist")
        store.save(prompt)
        assert store.rename_from_content("new_prompt") == "code_review_checklis"
        assert store.exists("code_review_checklis")

    def test_duplicate(self, store):
        original = store.create("Shared text")
        copy = store.duplicate(original.name)
        assert copy.name == "shared_text_1"
        assert copy.id != original.id
        assert store.get(copy.name).content == "Shared text"

    def test_archive_and_unarchive(self, store):
        store.create("keep")
        store.archive("keep")
        assert store.is_archived("keep")
        assert store.load_all() == []
        assert [p.name for p in store.load_all(archived=True)] == ["keep"]
        # Archived prompts remain resolvable
        assert store.exists("keep")
        assert store.lookup_by_name("keep") == "keep"

        store.unarchive("keep")
        assert not store.is_archived("keep")

    def test_all_tags_spans_archive(self, store):
        store.create("one", tags=["work", "daily"])
        old = store.create("two", tags=["old"])
        store.archive(old.name)
        store.create("three")
        assert store.all_tags() == ["daily", "old", "work"]

    def test_archive_missing(self, store):
        with pytest.raises(PromptNotFoundError):
            store.archive("nope")

    def test_require(self, store):
        with pytest.raises(PromptNotFoundError):
            store.require("nope")

    def test_lookup_rejects_path_names(self, store):
        assert store.lookup_by_name("../secrets") is None
        assert not store.exists(".hidden")

    def test_store_as_repository(self, store):
        store.create("Name\nhello")
        outer = store.create("greeting [[name]]")
        result = ReferenceResolver(store).resolve(outer.content, root_name=outer.name)
        assert result.text == "greeting Name\nhello"


class TestLocalFileAccess:
    """Tests for LocalFileAccess."""

    def test_reads_relative_to_working_directory(self, tmp_path, monkeypatch):
        (tmp_path / "a.txt").write_text("A", encoding="utf-8")
        monkeypatch.chdir(tmp_path)
        files = LocalFileAccess()
        assert files.file_exists("a.txt")
        assert files.read_file("a.txt") == "A"

    def test_missing_file_message(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        with pytest.raises(FileNotFoundError) as excinfo:
            LocalFileAccess().read_file("missing.txt")
        assert str(excinfo.value) == "File not found: 'missing.txt'"
        assert not LocalFileAccess().file_exists("missing.txt")

    def test_base_directory(self, tmp_path):
        (tmp_path / "b.txt").write_text("B", encoding="utf-8")
        assert LocalFileAccess(tmp_path).read_file("b.txt") == "B"

    def test_home_shorthand_is_not_expanded(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        files = LocalFileAccess()
        assert not files.file_exists("~nosuchuser_zz/a.txt")
        with pytest.raises(FileNotFoundError):
            files.read_file("~nosuchuser_zz/a.txt")

    def test_null_byte_path(self):
        files = LocalFileAccess()
        assert not files.file_exists("a\x00b")
        with pytest.raises(OSError) as excinfo:
            files.read_file("a\x00b")
        assert str(excinfo.value).startswith("Invalid path")
