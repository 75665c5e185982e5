"""Note Source: Markdown documents of a vault folder on disk."""
import abc
import logging
import os
from pathlib import Path

from ..domain.models import NoteFile
from ..util import to_millis

log = logging.getLogger("delulu.vault.source")

_HIDDEN_PREFIX = "."


class NoteSource(abc.ABC):
    """What the context assembler needs from a note store."""

    @abc.abstractmethod
    def list_markdown_files(self) -> list[NoteFile]:
        ...

    @abc.abstractmethod
    def exists(self, path: str) -> bool:
        """True if the vault-relative path is an existing file or folder."""
        ...

    @abc.abstractmethod
    def read(self, note: NoteFile) -> str:
        ...


def normalize_relative_path(raw_path: str) -> str:
    raw_path = (raw_path or "").replace("\\", "/").strip()
    if not raw_path:
        return ""
    raw_path = raw_path.lstrip("/")

    parts = [p.strip() for p in raw_path.split("/") if p.strip() and p.strip() != "."]
    if not parts or any(p == ".." for p in parts):
        raise ValueError("Unsafe path")

    return "/".join(parts)


class VaultNoteSource(NoteSource):
    """Every *.md file under root, skipping hidden folders such as .obsidian."""

    def __init__(self, root: Path):
        self.root = Path(root).expanduser().resolve()

    def resolve(self, relative_path: str) -> Path:
        """Absolute path for a vault-relative one; refuses paths that leave the vault."""
        rel_path = normalize_relative_path(relative_path)
        target = (self.root / rel_path).resolve()
        if os.path.commonpath([str(self.root), str(target)]) != str(self.root):
            raise ValueError("Path escapes vault")
        return target

    def list_markdown_files(self) -> list[NoteFile]:
        results: list[NoteFile] = []
        for root, dirs, files in os.walk(self.root):
            dirs[:] = sorted(d for d in dirs if not d.startswith(_HIDDEN_PREFIX))
            for name in sorted(files):
                if not name.lower().endswith(".md"):
                    continue
                full_path = Path(root) / name
                try:
                    stat = full_path.stat()
                except OSError as e:
                    log.warning("Skipping unreadable note | path=%s | error=%s", full_path, e)
                    continue
                created = getattr(stat, "st_birthtime", stat.st_ctime)
                results.append(
                    NoteFile(
                        path=full_path.relative_to(self.root).as_posix(),
                        basename=full_path.stem,
                        ctime=to_millis(created),
                        mtime=to_millis(stat.st_mtime),
                    )
                )
        return results

    def exists(self, path: str) -> bool:
        try:
            return self.resolve(path).exists()
        except ValueError:
            return False

    def read(self, note: NoteFile) -> str:
        return (self.root / note.path).read_text(encoding="utf-8", errors="replace")
