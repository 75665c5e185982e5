"""Transient user notifications."""
import logging
import sys

log = logging.getLogger("delulu.notify")


class Notifier:
    """Collects notices; subclasses also show them somewhere."""

    def __init__(self):
        self.notices: list[str] = []

    def notify(self, message: str) -> None:
        self.notices.append(message)
        log.info("Notice | %s", message)
        self.show(message)

    def show(self, message: str) -> None:
        pass


class ConsoleNotifier(Notifier):
    def __init__(self, stream=None):
        super().__init__()
        self.stream = stream or sys.stderr

    def show(self, message: str) -> None:
        print(message, file=self.stream)
