"""Tests for the on-disk vault note source."""
import os

import pytest

from delulu.config import DeluluSettings
from delulu.vault.context import gather_context, get_notes_from_location
from delulu.vault.source import VaultNoteSource, normalize_relative_path


def test_lists_markdown_only_and_skips_hidden(vault):
    files = VaultNoteSource(vault).list_markdown_files()
    assert sorted(f.path for f in files) == ["Daily/2024-06-14.md", "Daily/2024-06-15.md", "Ideas.md"]
    assert {f.basename for f in files} == {"2024-06-14", "2024-06-15", "Ideas"}


def test_timestamps_are_milliseconds(vault):
    os.utime(vault / "Ideas.md", (1_700_000_000, 1_700_000_000))
    note = next(f for f in VaultNoteSource(vault).list_markdown_files() if f.path == "Ideas.md")
    assert note.mtime == 1_700_000_000_000


def test_recent_by_mtime_from_disk(vault):
    os.utime(vault / "Daily" / "2024-06-14.md", (1_000, 3_000))
    os.utime(vault / "Daily" / "2024-06-15.md", (1_000, 2_000))
    os.utime(vault / "Ideas.md", (1_000, 1_000))

    notes = get_notes_from_location(VaultNoteSource(vault), "all", 100, "mtime")

    assert [n.title for n in notes] == ["2024-06-14", "2024-06-15", "Ideas"]
    assert notes[0].content == "Yesterday was long."


def test_exists(vault):
    source = VaultNoteSource(vault)
    assert source.exists("Daily")
    assert source.exists("Ideas.md")
    assert not source.exists("Journal")
    assert not source.exists("../outside")


def test_resolve_refuses_escape(vault):
    with pytest.raises(ValueError):
        VaultNoteSource(vault).resolve("../etc/passwd")


def test_normalize_relative_path():
    assert normalize_relative_path("/Daily//./2024.md") == "Daily/2024.md"
    assert normalize_relative_path("Daily\\note.md") == "Daily/note.md"
    with pytest.raises(ValueError):
        normalize_relative_path("a/../b")


def test_undecodable_note_reads_with_replacement(vault):
    (vault / "legacy.md").write_bytes(b"caf\xe9 notes")
    source = VaultNoteSource(vault)
    note = next(f for f in source.list_markdown_files() if f.path == "legacy.md")

    assert source.read(note) == "caf\ufffd notes"


def test_undecodable_note_does_not_break_context(vault):
    (vault / "legacy.md").write_bytes(b"caf\xe9 notes")

    prompt = gather_context(DeluluSettings(daily_note_location="Daily"), VaultNoteSource(vault))

    assert "Yesterday was long." in prompt
    assert "- legacy (Modified:" in prompt
