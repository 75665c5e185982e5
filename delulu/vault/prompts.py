"""System message for the seer: built-in instructions or a user template with {{variables}}."""
import logging
import re
from datetime import date, datetime
from enum import Enum
from typing import Callable

from ..config import DeluluSettings
from ..errors import UnknownPlaceholderError

log = logging.getLogger("delulu.vault.prompts")

PLACEHOLDER_RE = re.compile(r"{{\s*(.*?)\s*}}")

DEFAULT_SYSTEM_MESSAGE = """
You are a horoscope generator. Your task is to generate a personalized horoscope for today. The first user message will be used as context for the horoscope.

Your horoscope should be creative and thought provoking, helpful to the user's life and relevant to their unique situation.

THE HOROSCOPE MUST BE {length} paragraphs or LESS!!

Tips for creating your horoscope:
- Maintain an almost poetic and mysterious horoscope vibe and language.
- Make vague references, but avoid direct references such as naming dates, or specific things or projects.
- Direct the user to what you believe they need most in their life in the current moment, be it happiness, direction in their pursuits, or reminders of the past.
- Listen to your inner guiding spirit.
- Be mysterious and vague, but not too vague. You want the user to feel like you're talking to them, but you don't want to be too specific like you're talking only to them.
- Put more weight on more recent notes, but don't ignore older notes.
- Limit your horoscope to {length} paragraphs at max (you'll always have another one tomorrow to say more).
"""

_DATE_FORMATS = ("%m/%d/%Y", "%Y-%m-%d")


class UnknownPlaceholderPolicy(str, Enum):
    FAIL = "fail"
    KEEP = "keep"


def parse_birth_date(raw: str) -> date | None:
    raw = (raw or "").strip()
    if not raw:
        return None
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(raw, fmt).date()
        except ValueError:
            continue
    log.warning("Unrecognized date of birth, expected MM/DD/YYYY | value=%s", raw)
    return None


def _today() -> date:
    return date.today()


def calculate_age(birth: date, today: date | None = None) -> int:
    """Whole years since birth, counting only birthdays already passed."""
    today = today or _today()
    age = today.year - birth.year
    if (today.month, today.day) < (birth.month, birth.day):
        age -= 1
    return age


def _age(settings: DeluluSettings) -> str:
    birth = parse_birth_date(settings.date_of_birth)
    return "" if birth is None else str(calculate_age(birth))


class Binding(str, Enum):
    """Variables a system-message template may reference."""

    HOROSCOPE_LENGTH = "horoscopeLength"
    ZODIAC_SIGN = "zodiacSign"
    DATE_OF_BIRTH = "dateOfBirth"
    TIME_OF_BIRTH = "timeOfBirth"
    SUN_SIGN = "sunSign"
    MOON_SIGN = "moonSign"
    RISING_SIGN = "risingSign"
    CHINESE_ZODIAC_ANIMAL = "chineseZodiacAnimal"
    ELEMENT = "element"
    NUMEROLOGY_NUMBERS = "numerologyNumbers"
    AGE = "age"


BINDING_ACCESSORS: dict[Binding, Callable[[DeluluSettings], str]] = {
    Binding.HOROSCOPE_LENGTH: lambda s: str(s.horoscope_length),
    Binding.ZODIAC_SIGN: lambda s: s.zodiac_sign,
    Binding.DATE_OF_BIRTH: lambda s: s.date_of_birth,
    Binding.TIME_OF_BIRTH: lambda s: s.time_of_birth,
    Binding.SUN_SIGN: lambda s: s.sun_sign,
    Binding.MOON_SIGN: lambda s: s.moon_sign,
    Binding.RISING_SIGN: lambda s: s.rising_sign,
    Binding.CHINESE_ZODIAC_ANIMAL: lambda s: s.chinese_zodiac_animal,
    Binding.ELEMENT: lambda s: s.element,
    Binding.NUMEROLOGY_NUMBERS: lambda s: s.numerology_numbers,
    Binding.AGE: _age,
}

BINDING_DESCRIPTIONS: dict[Binding, str] = {
    Binding.HOROSCOPE_LENGTH: "number 1 - 5",
    Binding.ZODIAC_SIGN: "The user's zodiac sign",
    Binding.DATE_OF_BIRTH: "The user's date of birth",
    Binding.TIME_OF_BIRTH: "The user's time of birth",
    Binding.SUN_SIGN: "The user's sun sign",
    Binding.MOON_SIGN: "The user's moon sign",
    Binding.RISING_SIGN: "The user's rising sign",
    Binding.CHINESE_ZODIAC_ANIMAL: "The user's Chinese zodiac animal",
    Binding.ELEMENT: "The user's element",
    Binding.NUMEROLOGY_NUMBERS: "The user's numerology numbers",
    Binding.AGE: "The calculated user's age from their date of birth",
}


def available_variables() -> list[str]:
    return [f"{{{{{b.value}}}}} - {BINDING_DESCRIPTIONS[b]}" for b in Binding]


def render(
    template: str,
    settings: DeluluSettings,
    policy: UnknownPlaceholderPolicy = UnknownPlaceholderPolicy.FAIL,
) -> str:
    """Replace every {{ name }} with its binding. Values are computed only when referenced."""

    def substitute(match: re.Match) -> str:
        name = match.group(1)
        try:
            binding = Binding(name)
        except ValueError:
            if policy is UnknownPlaceholderPolicy.KEEP:
                return match.group(0)
            raise UnknownPlaceholderError(name) from None
        return BINDING_ACCESSORS[binding](settings)

    return PLACEHOLDER_RE.sub(substitute, template)


def generate_system_message(
    settings: DeluluSettings,
    policy: UnknownPlaceholderPolicy = UnknownPlaceholderPolicy.FAIL,
) -> str:
    if not settings.system_message:
        return DEFAULT_SYSTEM_MESSAGE.format(length=settings.horoscope_length)
    return render(settings.system_message, settings, policy)
