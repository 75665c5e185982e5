"""The Daily Delulu: journal-aware horoscopes for a Markdown vault."""

__version__ = "0.1.0"
