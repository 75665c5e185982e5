#!/usr/bin/env python3
"""
CLI entry point for The Daily Delulu.
Reads journal notes from a Markdown vault and writes a horoscope into a note.
"""
import argparse
import json
import logging
import sys
from pathlib import Path

from . import settings
from .config import JsonSettingsStore, SettingsManager
from .domain.models import Cursor
from .editor import FileEditor
from .errors import UnknownPlaceholderError
from .logging_config import setup_logging
from .notify import ConsoleNotifier
from .pipeline import HoroscopeGenerator
from .vault.context import gather_context
from .vault.prompts import available_variables, generate_system_message
from .vault.source import VaultNoteSource

log = logging.getLogger("delulu.run")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="delulu", description="Journal-aware horoscopes for a Markdown vault")
    p.add_argument("--vault", help="Vault directory (default: DELULU_VAULT_DIR or .)")
    p.add_argument("--config", help="Settings file (default: <vault>/.delulu/data.json)")
    sub = p.add_subparsers(dest="command", required=True)

    g = sub.add_parser("generate", help="Write a horoscope into a note at the cursor")
    g.add_argument("file", help="Note to write into, relative to the vault")
    g.add_argument("--line", type=int, help="Cursor line (0-based, default: end of file)")
    g.add_argument("--ch", type=int, default=0, help="Cursor column (0-based)")

    sub.add_parser("context", help="Print the prompt assembled from recent notes")
    sub.add_parser("system-message", help="Print the system message sent to the model")
    sub.add_parser("variables", help="List the variables usable in a custom system message")

    c = sub.add_parser("config", help="Show or change settings")
    csub = c.add_subparsers(dest="action", required=True)
    csub.add_parser("show", help="Print the current settings")
    cs = csub.add_parser("set", help="Change one setting and save it")
    cs.add_argument("key", help="Setting name, e.g. dailyNoteLocation")
    cs.add_argument("value")

    s = sub.add_parser("serve", help="Run the local HTTP API")
    s.add_argument("--host", default=None)
    s.add_argument("--port", type=int, default=None)
    return p.parse_args(argv)


def _cmd_generate(args, source: VaultNoteSource, manager: SettingsManager) -> int:
    try:
        target = source.resolve(args.file)
    except ValueError as e:
        log.error("Refusing to write outside the vault: %s", e)
        return 1
    editor = FileEditor(target)
    if args.line is not None:
        editor.set_cursor(Cursor(args.line, args.ch))

    result = HoroscopeGenerator(manager.settings, source, ConsoleNotifier()).generate(editor)
    return 0 if result.ok else 1


def _cmd_config(args, manager: SettingsManager) -> int:
    if args.action == "show":
        print(json.dumps(manager.settings.to_blob(), indent=2, ensure_ascii=False))
        return 0
    try:
        manager.update(**{args.key: args.value})
    except ValueError as e:
        log.error("%s", e)
        return 1
    return 0


def _cmd_serve(args, source: VaultNoteSource, manager: SettingsManager) -> int:
    import uvicorn

    from . import server

    server.configure(source, manager)
    uvicorn.run(
        server.app,
        host=args.host or settings.server_host(),
        port=args.port or settings.server_port(),
    )
    return 0


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    setup_logging(settings.log_level(), settings.log_file())

    vault = Path(args.vault).expanduser().resolve() if args.vault else settings.vault_dir()
    config = Path(args.config).expanduser().resolve() if args.config else settings.config_path(vault)
    if not vault.is_dir():
        log.error("Vault dir does not exist: %s", vault)
        return 1

    source = VaultNoteSource(vault)
    manager = SettingsManager(JsonSettingsStore(config))

    if args.command == "generate":
        return _cmd_generate(args, source, manager)
    if args.command == "context":
        print(gather_context(manager.settings, source))
        return 0
    if args.command == "system-message":
        try:
            print(generate_system_message(manager.settings))
        except UnknownPlaceholderError as e:
            log.error("%s", e)
            return 1
        return 0
    if args.command == "variables":
        print("\n".join(available_variables()))
        return 0
    if args.command == "config":
        return _cmd_config(args, manager)
    if args.command == "serve":
        return _cmd_serve(args, source, manager)
    return 1


if __name__ == "__main__":
    sys.exit(main())
