"""Insertion Sink: text buffers with a cursor and range replacement."""
import abc
import logging
from pathlib import Path

from .domain.models import Cursor

log = logging.getLogger("delulu.editor")


class Editor(abc.ABC):
    """The slice of an editor the generation flow touches."""

    @abc.abstractmethod
    def get_cursor(self) -> Cursor:
        ...

    @abc.abstractmethod
    def set_cursor(self, cursor: Cursor) -> None:
        ...

    @abc.abstractmethod
    def get_range(self, start: Cursor, end: Cursor) -> str:
        ...

    @abc.abstractmethod
    def replace_range(self, text: str, start: Cursor, end: Cursor | None = None) -> None:
        """Replace [start, end) with text; with no end, insert at start."""
        ...

    @abc.abstractmethod
    def get_value(self) -> str:
        ...


class TextBuffer(Editor):
    """In-memory document kept as a list of lines (without their newlines)."""

    def __init__(self, text: str = "", cursor: Cursor | None = None):
        self.lines = text.split("\n")
        self._cursor = self._clamp(cursor) if cursor else self.end()

    def end(self) -> Cursor:
        return Cursor(len(self.lines) - 1, len(self.lines[-1]))

    def _clamp(self, cursor: Cursor) -> Cursor:
        line = min(max(cursor.line, 0), len(self.lines) - 1)
        ch = min(max(cursor.ch, 0), len(self.lines[line]))
        return Cursor(line, ch)

    def _offset(self, cursor: Cursor) -> int:
        cursor = self._clamp(cursor)
        return sum(len(line) + 1 for line in self.lines[: cursor.line]) + cursor.ch

    def get_cursor(self) -> Cursor:
        return self._cursor

    def set_cursor(self, cursor: Cursor) -> None:
        self._cursor = self._clamp(cursor)

    def get_range(self, start: Cursor, end: Cursor) -> str:
        return self.get_value()[self._offset(start):self._offset(end)]

    def replace_range(self, text: str, start: Cursor, end: Cursor | None = None) -> None:
        value = self.get_value()
        a = self._offset(start)
        b = self._offset(end) if end is not None else a
        self.lines = (value[:a] + text + value[b:]).split("\n")

    def get_value(self) -> str:
        return "\n".join(self.lines)


class FileEditor(TextBuffer):
    """A TextBuffer backed by a file; every edit is written back atomically.

    The buffer works on LF lines. A file that used CRLF line endings is written back with CRLF.
    """

    def __init__(self, path: Path, cursor: Cursor | None = None):
        self.path = Path(path)
        text = ""
        if self.path.exists():
            with self.path.open("r", encoding="utf-8", newline="") as f:
                text = f.read()
        self.newline = "\r\n" if "\r\n" in text else "\n"
        super().__init__(text.replace("\r\n", "\n"), cursor)

    def replace_range(self, text: str, start: Cursor, end: Cursor | None = None) -> None:
        super().replace_range(text, start, end)
        self._write()

    def _write(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        with tmp.open("w", encoding="utf-8", newline=self.newline) as f:
            f.write(self.get_value())
        tmp.replace(self.path)
        log.debug("Wrote %s", self.path)
