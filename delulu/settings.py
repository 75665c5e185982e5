"""Process-level settings read from the environment (.env supported)."""
import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()


def _env_str(name: str, default: str) -> str:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip()


def _env_int(name: str, default: int | None) -> int | None:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw.strip())
    except ValueError:
        return default


def vault_dir() -> Path:
    return Path(_env_str("DELULU_VAULT_DIR", ".")).expanduser().resolve()


def config_path(vault: Path | None = None) -> Path:
    """Where the persisted settings blob lives; defaults to <vault>/.delulu/data.json."""
    raw = _env_str("DELULU_CONFIG_PATH", "")
    if raw:
        return Path(raw).expanduser().resolve()
    return (vault or vault_dir()) / ".delulu" / "data.json"


def log_level() -> str:
    return _env_str("LOG_LEVEL", "INFO").upper()


def log_file() -> Path | None:
    raw = _env_str("DELULU_LOG_FILE", "")
    return Path(raw).expanduser().resolve() if raw else None


def server_host() -> str:
    return _env_str("DELULU_HOST", "127.0.0.1")


def server_port() -> int:
    v = _env_int("DELULU_PORT", 8765)
    return v if v is not None else 8765


def openai_api_key() -> str:
    return _env_str("OPENAI_API_KEY", "")
