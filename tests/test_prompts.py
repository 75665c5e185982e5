"""Tests for the system-message template engine and age computation."""
from datetime import date, timedelta

import pytest

from delulu.config import DeluluSettings
from delulu.errors import UnknownPlaceholderError
from delulu.vault import prompts
from delulu.vault.prompts import (
    Binding,
    UnknownPlaceholderPolicy,
    available_variables,
    calculate_age,
    generate_system_message,
    parse_birth_date,
    render,
)


class TestAge:
    def test_day_before_birthday(self):
        assert calculate_age(date(2000, 6, 15), date(2024, 6, 14)) == 23

    def test_on_birthday(self):
        assert calculate_age(date(2000, 6, 15), date(2024, 6, 15)) == 24

    def test_earlier_month(self):
        assert calculate_age(date(2000, 6, 15), date(2024, 5, 30)) == 23

    @pytest.mark.parametrize("raw", ["06/15/2000", "2000-06-15", " 06/15/2000 "])
    def test_parse_birth_date_formats(self, raw):
        assert parse_birth_date(raw) == date(2000, 6, 15)

    def test_parse_birth_date_garbage(self):
        assert parse_birth_date("sometime in June") is None
        assert parse_birth_date("") is None


class TestRender:
    def test_literal_text_unchanged(self, settings):
        template = "You are a seer. Speak softly { not a placeholder }."
        assert render(template, settings) == template

    def test_replaces_with_and_without_spaces(self):
        settings = DeluluSettings(zodiac_sign="Gemini", moon_sign="Pisces")
        out = render("{{zodiacSign}} / {{ moonSign }} / {{   zodiacSign}}", settings)
        assert out == "Gemini / Pisces / Gemini"

    def test_horoscope_length_is_stringified(self):
        settings = DeluluSettings(horoscope_length=4)
        assert render("max {{horoscopeLength}} paragraphs", settings) == "max 4 paragraphs"

    def test_every_binding_is_resolvable(self, settings):
        for binding in Binding:
            render("{{" + binding.value + "}}", settings)

    def test_age_one_year_minus_one_day(self, monkeypatch):
        today = date(2024, 6, 14)
        monkeypatch.setattr(prompts, "_today", lambda: today)
        birth = today + timedelta(days=1)
        settings = DeluluSettings(date_of_birth=f"{birth.month:02d}/{birth.day:02d}/{today.year - 1}")

        assert render("{{age}}", settings) == "0"

    def test_age_from_settings(self, monkeypatch):
        monkeypatch.setattr(prompts, "_today", lambda: date(2024, 6, 15))
        settings = DeluluSettings(date_of_birth="06/15/2000")
        assert render("I am {{ age }}.", settings) == "I am 24."

    def test_age_empty_without_birth_date(self, settings):
        assert render("[{{age}}]", settings) == "[]"

    def test_unknown_placeholder_fails(self, settings):
        with pytest.raises(UnknownPlaceholderError) as excinfo:
            render("Hello {{ name }}", settings)
        assert excinfo.value.name == "name"
        assert isinstance(excinfo.value, KeyError)

    def test_unknown_placeholder_kept_verbatim(self):
        settings = DeluluSettings(element="Fire")
        out = render("{{ name }} of {{element}}", settings, UnknownPlaceholderPolicy.KEEP)
        assert out == "{{ name }} of Fire"


class TestSystemMessage:
    def test_default_when_template_empty(self):
        settings = DeluluSettings(horoscope_length=3)

        message = generate_system_message(settings)

        assert "You are a horoscope generator." in message
        assert "THE HOROSCOPE MUST BE 3 paragraphs or LESS!!" in message
        assert "Limit your horoscope to 3 paragraphs at max" in message

    def test_default_ignores_placeholder_syntax(self):
        assert "{{" not in generate_system_message(DeluluSettings())

    def test_custom_template(self):
        settings = DeluluSettings(
            system_message="Seer for a {{sunSign}} sun, {{risingSign}} rising.",
            sun_sign="Leo",
            rising_sign="Virgo",
        )
        assert generate_system_message(settings) == "Seer for a Leo sun, Virgo rising."


def test_available_variables_lists_every_binding():
    variables = available_variables()
    assert len(variables) == len(Binding)
    assert variables[0] == "{{horoscopeLength}} - number 1 - 5"
    assert "{{age}} - The calculated user's age from their date of birth" in variables
