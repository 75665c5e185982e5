"""Tests for the command-line entry point."""
import json
from unittest.mock import patch

from delulu.pipeline import PLACEHOLDER
from delulu.run import main


def test_config_set_and_show(vault, capsys):
    assert main(["--vault", str(vault), "config", "set", "zodiacSign", "Gemini"]) == 0
    assert main(["--vault", str(vault), "config", "show"]) == 0

    shown = json.loads(capsys.readouterr().out)
    assert shown["zodiacSign"] == "Gemini"
    saved = json.loads((vault / ".delulu" / "data.json").read_text(encoding="utf-8"))
    assert saved["zodiacSign"] == "Gemini"


def test_config_set_rejects_unknown_key(vault):
    assert main(["--vault", str(vault), "config", "set", "colour", "blue"]) == 1


def test_context_prints_prompt(vault, capsys):
    main(["--vault", str(vault), "config", "set", "dailyNoteLocation", "Daily"])
    capsys.readouterr()

    assert main(["--vault", str(vault), "context"]) == 0

    out = capsys.readouterr().out
    assert out.startswith("User's recent journal:")
    assert "Yesterday was long." in out


def test_context_with_undecodable_note(vault, capsys):
    (vault / "legacy.md").write_bytes(b"caf\xe9 notes")

    assert main(["--vault", str(vault), "context"]) == 0
    assert "- legacy (Modified:" in capsys.readouterr().out


def test_variables(vault, capsys):
    assert main(["--vault", str(vault), "variables"]) == 0
    assert "{{zodiacSign}} - The user's zodiac sign" in capsys.readouterr().out


def test_generate_appends_at_end(vault):
    with patch("delulu.pipeline.CompletionClient") as client_cls:
        client_cls.return_value.complete.return_value = "A door opens."
        code = main(["--vault", str(vault), "generate", "Ideas.md"])

    assert code == 0
    assert (vault / "Ideas.md").read_text(encoding="utf-8") == "Garden plansA door opens."


def test_generate_failure_exit_code(vault):
    with patch("delulu.pipeline.CompletionClient") as client_cls:
        client_cls.return_value.complete.side_effect = RuntimeError("boom")
        code = main(["--vault", str(vault), "generate", "Ideas.md", "--line", "0", "--ch", "0"])

    assert code == 1
    assert (vault / "Ideas.md").read_text(encoding="utf-8") == f"{PLACEHOLDER}Garden plans"


def test_missing_vault(tmp_path):
    assert main(["--vault", str(tmp_path / "nowhere"), "context"]) == 1
