"""Local HTTP surface: settings, context preview and in-place generation for vault files."""
import logging
from contextlib import asynccontextmanager
from typing import Any, Optional

from fastapi import Depends, FastAPI, HTTPException
from pydantic import BaseModel

from . import settings as env
from .config import JsonSettingsStore, SettingsManager
from .domain.models import Cursor
from .editor import FileEditor
from .errors import UnknownPlaceholderError
from .logging_config import setup_logging
from .notify import Notifier
from .pipeline import HoroscopeGenerator
from .vault.context import gather_context
from .vault.prompts import available_variables, generate_system_message
from .vault.source import VaultNoteSource

setup_logging(env.log_level(), env.log_file())
logger = logging.getLogger("delulu.server")


class AppState:
    def __init__(self, source: VaultNoteSource, manager: SettingsManager):
        self.source = source
        self.manager = manager


_state: AppState | None = None


def configure(source: VaultNoteSource, manager: SettingsManager) -> AppState:
    global _state
    _state = AppState(source, manager)
    return _state


def get_state() -> AppState:
    global _state
    if _state is None:
        vault = env.vault_dir()
        _state = AppState(VaultNoteSource(vault), SettingsManager(JsonSettingsStore(env.config_path(vault))))
    return _state


@asynccontextmanager
async def lifespan(app: FastAPI):
    state = get_state()
    logger.info("API startup | vault=%s", state.source.root)
    yield
    logger.info("API shutdown completed")


app = FastAPI(
    title="Daily Delulu API",
    description="Journal-aware horoscopes for a Markdown vault",
    lifespan=lifespan,
)


class GenerateRequest(BaseModel):
    path: str
    line: Optional[int] = None
    ch: Optional[int] = None


def _masked(blob: dict[str, Any]) -> dict[str, Any]:
    key = blob.get("apiKey") or ""
    blob["apiKey"] = f"...{key[-4:]}" if len(key) > 4 else ("set" if key else "")
    return blob


@app.get("/")
def read_root():
    return {"status": "online", "system": "Daily Delulu"}


@app.get("/settings")
def read_settings(state: AppState = Depends(get_state)):
    return _masked(state.manager.settings.to_blob())


@app.patch("/settings")
def update_settings(changes: dict[str, Any], state: AppState = Depends(get_state)):
    try:
        updated = state.manager.update(**changes)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _masked(updated.to_blob())


@app.get("/variables")
def read_variables():
    return {"variables": available_variables()}


@app.get("/context")
def read_context(state: AppState = Depends(get_state)):
    return {"context": gather_context(state.manager.settings, state.source)}


@app.get("/system-message")
def read_system_message(state: AppState = Depends(get_state)):
    try:
        return {"system_message": generate_system_message(state.manager.settings)}
    except UnknownPlaceholderError as e:
        raise HTTPException(status_code=400, detail=str(e))


@app.post("/generate")
def generate(req: GenerateRequest, state: AppState = Depends(get_state)):
    try:
        target = state.source.resolve(req.path)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if not target.is_file():
        raise HTTPException(status_code=404, detail="File not found")

    editor = FileEditor(target)
    if req.line is not None:
        editor.set_cursor(Cursor(req.line, req.ch or 0))
    logger.info("Generate request | path=%s | cursor=%s", req.path, editor.get_cursor())

    notifier = Notifier()
    result = HoroscopeGenerator(state.manager.settings, state.source, notifier).generate(editor)
    body = {
        "status": "ok" if result.ok else "error",
        "state": result.state.value,
        "notices": result.notices,
        "text": result.text,
    }
    if not result.ok:
        raise HTTPException(status_code=502, detail=body)
    return body
