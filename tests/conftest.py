"""
Shared fixtures for the Daily Delulu test suite.

Provides an in-memory note source with controllable timestamps, settings
factories and a temporary on-disk vault.
"""
from pathlib import Path

import pytest

from delulu.config import DeluluSettings
from delulu.domain.models import NoteFile
from delulu.vault.source import NoteSource


class FakeNoteSource(NoteSource):
    """Notes keyed by vault-relative path, with explicit ctime/mtime."""

    def __init__(self):
        self.files: dict[str, NoteFile] = {}
        self.contents: dict[str, str] = {}
        self.reads: list[str] = []

    def add(self, path: str, content: str = "", ctime: int = 0, mtime: int | None = None) -> NoteFile:
        note = NoteFile(
            path=path,
            basename=Path(path).stem,
            ctime=ctime,
            mtime=ctime if mtime is None else mtime,
        )
        self.files[path] = note
        self.contents[path] = content
        return note

    def list_markdown_files(self) -> list[NoteFile]:
        return list(self.files.values())

    def exists(self, path: str) -> bool:
        path = path.rstrip("/")
        return any(p == path or p.startswith(path + "/") for p in self.files)

    def read(self, note: NoteFile) -> str:
        self.reads.append(note.path)
        return self.contents[note.path]


@pytest.fixture
def source() -> FakeNoteSource:
    return FakeNoteSource()


@pytest.fixture
def settings() -> DeluluSettings:
    return DeluluSettings()


@pytest.fixture
def vault(tmp_path: Path) -> Path:
    root = tmp_path / "vault"
    (root / "Daily").mkdir(parents=True)
    (root / ".obsidian").mkdir()
    (root / ".obsidian" / "workspace.md").write_text("hidden", encoding="utf-8")
    (root / "Daily" / "2024-06-14.md").write_text("Yesterday was long.", encoding="utf-8")
    (root / "Daily" / "2024-06-15.md").write_text("# Today\n\n", encoding="utf-8")
    (root / "Ideas.md").write_text("Garden plans", encoding="utf-8")
    (root / "image.png").write_bytes(b"\x89PNG")
    return root
