import logging
from pathlib import Path

_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
_NOISY = ("urllib3", "requests")


def setup_logging(level: str = "INFO", log_file: Path | None = None) -> logging.Logger:
    """Attach handlers to the "delulu" logger once; later calls only adjust the level."""
    logger = logging.getLogger("delulu")
    normalized_level = (level or "INFO").upper()

    if getattr(setup_logging, "_configured", False):
        logger.setLevel(normalized_level)
        return logger

    formatter = logging.Formatter(_FORMAT)
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))

    for handler in handlers:
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    logger.setLevel(normalized_level)
    logger.propagate = False

    for name in _NOISY:
        logging.getLogger(name).setLevel(logging.WARNING)

    setup_logging._configured = True
    return logger
