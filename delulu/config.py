"""Persisted tool settings: documented defaults, field-by-field merge, save on every change."""
import abc
import json
import logging
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

log = logging.getLogger("delulu.config")

OPENAI_URL = "https://api.openai.com/v1/chat/completions"
DEFAULT_MODEL = "gpt-3.5-turbo-1106"
MIN_HOROSCOPE_LENGTH = 1
MAX_HOROSCOPE_LENGTH = 5


class DeluluSettings(BaseModel):
    """Everything the settings surface can change. Persisted with camelCase keys."""

    model_config = ConfigDict(populate_by_name=True, validate_assignment=True)

    # Settings
    api_key: str = Field("", alias="apiKey")
    daily_note_location: str = Field("", alias="dailyNoteLocation")
    monthly_note_location: str = Field("", alias="monthlyNoteLocation")
    yearly_note_location: str = Field("", alias="yearlyNoteLocation")
    # Personalization
    zodiac_sign: str = Field("", alias="zodiacSign")
    date_of_birth: str = Field("", alias="dateOfBirth")
    time_of_birth: str = Field("", alias="timeOfBirth")
    sun_sign: str = Field("", alias="sunSign")
    moon_sign: str = Field("", alias="moonSign")
    rising_sign: str = Field("", alias="risingSign")
    chinese_zodiac_animal: str = Field("", alias="chineseZodiacAnimal")
    element: str = Field("", alias="element")
    numerology_numbers: str = Field("", alias="numerologyNumbers")
    # Advanced
    endpoint: str = Field(OPENAI_URL, alias="endpoint")
    model: str = Field(DEFAULT_MODEL, alias="model")
    system_message: str = Field("", alias="systemMessage")
    horoscope_length: int = Field(1, alias="horoscopeLength")

    def to_blob(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


def field_name(key: str) -> str:
    """Map a camelCase persisted key or a snake_case field name to the field name."""
    fields = DeluluSettings.model_fields
    if key in fields:
        return key
    for name, info in fields.items():
        if info.alias == key:
            return name
    raise ValueError(f"Unknown setting: {key}")


def load_settings(persisted: dict | None) -> DeluluSettings:
    """Merge a persisted blob over the defaults, one field at a time.

    Keys that are missing or null keep their default; unknown keys are ignored.
    A value of the wrong type also falls back to the default for that field only.
    """
    merged: dict[str, Any] = {}
    persisted = persisted or {}
    for name, info in DeluluSettings.model_fields.items():
        value = persisted.get(info.alias, persisted.get(name))
        if value is None:
            merged[name] = info.default
            continue
        try:
            merged[name] = TypeAdapter(info.annotation).validate_python(value)
        except ValidationError:
            log.warning("Ignoring invalid persisted setting | key=%s | value=%r", info.alias, value)
            merged[name] = info.default
    return DeluluSettings(**merged)


class SettingsStore(abc.ABC):
    """Where the settings blob is kept between runs."""

    @abc.abstractmethod
    def load(self) -> dict | None:
        """Return the previously saved blob, or None if nothing was saved."""
        ...

    @abc.abstractmethod
    def save(self, blob: dict) -> None:
        ...


class JsonSettingsStore(SettingsStore):
    def __init__(self, path: Path):
        self.path = Path(path)

    def load(self) -> dict | None:
        if not self.path.exists():
            return None
        with self.path.open("r", encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            log.warning("Ignoring settings file that is not a JSON object | path=%s", self.path)
            return None
        return data

    def save(self, blob: dict) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp.write_text(json.dumps(blob, indent=2, ensure_ascii=False), encoding="utf-8")
        tmp.replace(self.path)


class SettingsManager:
    """Loads settings once and persists them after every mutation."""

    def __init__(self, store: SettingsStore):
        self.store = store
        self._settings = load_settings(store.load())
        log.info("Settings loaded | store=%s", getattr(store, "path", type(store).__name__))

    @property
    def settings(self) -> DeluluSettings:
        return self._settings

    def update(self, **changes: Any) -> DeluluSettings:
        """Apply changes keyed by field name or persisted key, then save.

        The whole update is validated before anything changes; a failure leaves
        the current settings untouched.
        """
        resolved = {field_name(k): v for k, v in changes.items()}
        length = resolved.get("horoscope_length")
        if length is not None:
            length = int(length)
            if not MIN_HOROSCOPE_LENGTH <= length <= MAX_HOROSCOPE_LENGTH:
                raise ValueError(
                    f"horoscopeLength must be between {MIN_HOROSCOPE_LENGTH} and {MAX_HOROSCOPE_LENGTH}"
                )
            resolved["horoscope_length"] = length
        self._settings = DeluluSettings.model_validate(
            {**self._settings.model_dump(), **resolved}
        )
        self.save()
        log.info("Settings updated | keys=%s", ",".join(sorted(resolved)))
        return self._settings

    def save(self) -> None:
        self.store.save(self._settings.to_blob())
