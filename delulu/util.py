import re
from datetime import datetime

_CODE_BLOCK_RE = re.compile(r"```[\s\S]*?```")


def strip_code_blocks(text: str) -> str:
    """Remove every fenced ``` block, fences included."""
    return _CODE_BLOCK_RE.sub("", text)


def to_millis(seconds: float) -> int:
    return int(seconds * 1000)


def local_date(millis: int) -> str:
    """Date part of an epoch-millisecond timestamp in the process locale."""
    return datetime.fromtimestamp(millis / 1000).strftime("%x")
