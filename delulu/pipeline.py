"""Generation flow: gather context, ask the seer, splice the answer in at the cursor."""
import logging
from dataclasses import dataclass, field
from enum import Enum

from .config import DeluluSettings
from .domain.models import Cursor
from .editor import Editor
from .errors import InsertionError
from .llm import CompletionClient
from .notify import Notifier
from .vault.context import gather_context
from .vault.prompts import UnknownPlaceholderPolicy, generate_system_message
from .vault.source import NoteSource

log = logging.getLogger("delulu.pipeline")

PLACEHOLDER = "🔮"

CONJURING = "🔮 Your Daily Delulu is being conjured from the digital stars..."
ARRIVED = "🔮 Your Daily Delulu has arrived."
NO_EDITOR = "Please place the cursor in a document where you want the horoscope."
NOT_INSERTED = "Horoscope could not be inserted."
FAILED = "Failed to fetch horoscope. Please check your settings."


class GenerationState(str, Enum):
    IDLE = "idle"
    PENDING = "pending"
    DELIVERED = "delivered"
    FAILED = "failed"


@dataclass(frozen=True)
class PendingInsertion:
    """Where one request left its placeholder. Owned by that request only."""
    editor: Editor
    cursor: Cursor

    @property
    def end(self) -> Cursor:
        return self.cursor.shifted(len(PLACEHOLDER))


@dataclass
class GenerationResult:
    state: GenerationState = GenerationState.IDLE
    text: str = ""
    pending: PendingInsertion | None = None
    error: Exception | None = None
    notices: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.state is GenerationState.DELIVERED


def start(editor: Editor) -> PendingInsertion:
    """Write the placeholder glyph at the cursor and remember where it went."""
    cursor = editor.get_cursor()
    editor.replace_range(PLACEHOLDER, cursor)
    return PendingInsertion(editor=editor, cursor=cursor)


def deliver(pending: PendingInsertion, text: str) -> None:
    """Replace exactly the placeholder span with the generated text."""
    found = pending.editor.get_range(pending.cursor, pending.end)
    if found != PLACEHOLDER:
        raise InsertionError(
            f"Placeholder not found at line {pending.cursor.line}, ch {pending.cursor.ch}"
        )
    pending.editor.replace_range(text, pending.cursor, pending.end)


class HoroscopeGenerator:
    def __init__(
        self,
        settings: DeluluSettings,
        source: NoteSource,
        notifier: Notifier,
        client: CompletionClient | None = None,
        policy: UnknownPlaceholderPolicy = UnknownPlaceholderPolicy.FAIL,
    ):
        self.settings = settings
        self.source = source
        self.notifier = notifier
        self.client = client or CompletionClient(settings)
        self.policy = policy

    def generate(self, editor: Editor | None) -> GenerationResult:
        result = GenerationResult(notices=self.notifier.notices)
        try:
            prompt = gather_context(self.settings, self.source)
            system_message = generate_system_message(self.settings, self.policy)
            log.info("Generating horoscope | model=%s", self.settings.model)

            self.notifier.notify(CONJURING)
            if editor is None:
                self.notifier.notify(NO_EDITOR)
                result.state = GenerationState.FAILED
                return result

            result.pending = start(editor)
            result.state = GenerationState.PENDING
            result.text = self.client.complete(system_message, prompt)
        except Exception as e:
            log.exception("Error fetching horoscope")
            self.notifier.notify(FAILED)
            result.state = GenerationState.FAILED
            result.error = e
            return result

        self.notifier.notify(ARRIVED)
        try:
            deliver(result.pending, result.text)
        except InsertionError as e:
            log.error("Horoscope could not be inserted: %s", e)
            self.notifier.notify(NOT_INSERTED)
            result.state = GenerationState.FAILED
            result.error = e
            return result

        result.state = GenerationState.DELIVERED
        log.info("Horoscope delivered | chars=%d", len(result.text))
        return result
