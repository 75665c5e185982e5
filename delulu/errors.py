"""Exceptions raised along the generation flow."""


class DeluluError(Exception):
    """Base class for every failure the tool reports to the user."""


class TransportError(DeluluError):
    """The completion request could not be sent or its body was not JSON."""


class UnexpectedResponseError(DeluluError):
    """The endpoint answered with JSON lacking choices[0].message.content."""

    def __init__(self, message: str = "Unexpected response structure from API", body=None):
        super().__init__(message)
        self.body = body


class UnknownPlaceholderError(DeluluError, KeyError):
    """A system-message template referenced a variable that does not exist."""

    def __init__(self, name: str):
        super().__init__(name)
        self.name = name

    def __str__(self) -> str:
        return f"Unknown template variable: {{{{{self.name}}}}}"


class InsertionError(DeluluError):
    """The placeholder glyph is no longer where the request left it."""
