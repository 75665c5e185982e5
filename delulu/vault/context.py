"""Context Assembler: recent journal entries and recently touched notes, rendered as one prompt."""
import logging
from concurrent.futures import ThreadPoolExecutor

from ..config import DeluluSettings
from ..domain.models import NoteFile, RecentNote, SortKey
from ..util import local_date, strip_code_blocks
from .source import NoteSource

log = logging.getLogger("delulu.vault.context")

NUMBER_OF_DAILY_NOTES = 3
NUMBER_OF_MONTHLY_NOTES = 1
NUMBER_OF_YEARLY_NOTES = 1
NUMBER_OF_RECENT_NOTES = 100
ALL_NOTES = "all"
READ_CONCURRENCY = 8


def _read_notes(source: NoteSource, files: list[NoteFile]) -> list[RecentNote]:
    """Read a batch of notes on a thread pool; order follows files."""
    if not files:
        return []

    def load(file: NoteFile) -> RecentNote:
        return RecentNote(
            title=file.basename,
            ctime=file.ctime,
            mtime=file.mtime,
            content=source.read(file),
        )

    with ThreadPoolExecutor(max_workers=min(READ_CONCURRENCY, len(files))) as executor:
        return list(executor.map(load, files))


def get_notes_from_location(
    source: NoteSource,
    location: str,
    count: int = 3,
    sort: SortKey = "ctime",
    with_content: bool = True,
) -> list[RecentNote]:
    """The `count` newest notes under a folder prefix, or across the vault for "all".

    Only the notes that survive truncation are read; with_content=False skips reading.
    """
    if location == ALL_NOTES:
        files = source.list_markdown_files()
    else:
        if not location:
            return []
        if not source.exists(location):
            log.info("Note location not found in vault | location=%s", location)
            return []
        files = [f for f in source.list_markdown_files() if f.path.startswith(location)]

    files = sorted(files, key=lambda f: getattr(f, sort), reverse=True)[:count]
    if not with_content:
        return [RecentNote(title=f.basename, ctime=f.ctime, mtime=f.mtime) for f in files]
    return _read_notes(source, files)


def get_journal_notes(settings: DeluluSettings, source: NoteSource) -> list[RecentNote]:
    """Daily, then monthly, then yearly entries with fenced code blocks removed."""
    journal: list[RecentNote] = []
    folders = (
        (settings.daily_note_location, NUMBER_OF_DAILY_NOTES),
        (settings.monthly_note_location, NUMBER_OF_MONTHLY_NOTES),
        (settings.yearly_note_location, NUMBER_OF_YEARLY_NOTES),
    )
    for location, count in folders:
        if location != "":
            journal.extend(get_notes_from_location(source, location, count, "ctime"))

    return [
        note if not note.content else note.with_content(strip_code_blocks(note.content))
        for note in journal
    ]


def _format_entry(note: RecentNote) -> str:
    return f"\n{note.title} ({local_date(note.ctime)}):\n{note.content or ''}\n"


def format_notes_for_prompt(daily_notes: list[RecentNote], recent_notes: list[RecentNote]) -> str:
    prompt = "User's recent journal:\n"

    if daily_notes:
        prompt += "\nRecent Daily Notes:\n"
        prompt += "".join(_format_entry(note) for note in daily_notes)

    # Month and year sections are picked out of the merged journal by title.
    monthly = [note for note in daily_notes if "Monthly" in note.title]
    if monthly:
        prompt += "\nCurrent Month Note:\n"
        prompt += "".join(_format_entry(note) for note in monthly)

    yearly = [note for note in daily_notes if "Yearly" in note.title]
    if yearly:
        prompt += "\nCurrent Year Note:\n"
        prompt += "".join(_format_entry(note) for note in yearly)

    if recent_notes:
        prompt += "\nRecently created or modified notes:\n"
        for note in recent_notes:
            prompt += f"- {note.title} (Modified: {local_date(note.mtime)})\n"
    return prompt


def gather_context(settings: DeluluSettings, source: NoteSource) -> str:
    journal = get_journal_notes(settings, source)
    recent = get_notes_from_location(
        source, ALL_NOTES, NUMBER_OF_RECENT_NOTES, "mtime", with_content=False
    )
    log.info("Context gathered | journal=%d | recent=%d", len(journal), len(recent))
    return format_notes_for_prompt(journal, recent)
