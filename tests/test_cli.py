"""Tests for CLI parsing and dispatch."""

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace
from typing import Any

import pytest

from mpd_fzf import cli
from mpd_fzf.config import AppConfig
from mpd_fzf.errors import CorruptedDatabase


@pytest.fixture
def runs(monkeypatch) -> list[dict[str, Any]]:
    """Stub out logging and the pipeline, recording each pipeline call."""
    calls: list[dict[str, Any]] = []

    def fake_pipeline(db_file: Path, **kwargs: Any) -> int:
        calls.append({"db_file": db_file, **kwargs})
        return 0

    monkeypatch.setattr(cli, "init_logging", lambda **_kwargs: Path("app.log"))
    monkeypatch.setattr(cli, "_install_exception_hooks", lambda: None)
    monkeypatch.setattr(cli, "load_config", AppConfig)
    monkeypatch.setattr(cli, "find_db_file", lambda: Path("/var/lib/mpd/database"))
    monkeypatch.setattr(cli, "terminal_width", lambda: 100)
    monkeypatch.setattr(cli, "pick_and_enqueue", fake_pipeline)
    return calls


def test_parse_defaults() -> None:
    args = cli.build_parser().parse_args([])
    assert args.db_file is None
    assert args.width is None
    assert args.selector is None
    assert args.verbose is False


def test_parse_options() -> None:
    args = cli.build_parser().parse_args(
        ["--db-file", "/tmp/db", "--width", "120", "--selector", "fzf -m", "-v"]
    )
    assert args.db_file == Path("/tmp/db")
    assert args.width == 120
    assert args.selector == "fzf -m"
    assert args.verbose is True


@pytest.mark.parametrize("width", ["10", "wide"])
def test_parse_rejects_bad_width(width: str, capsys) -> None:
    with pytest.raises(SystemExit):
        cli.build_parser().parse_args(["--width", width])
    assert "width" in capsys.readouterr().err


def test_main_uses_discovered_defaults(runs) -> None:
    assert cli.main([]) == 0
    (call,) = runs
    assert call["db_file"] == Path("/var/lib/mpd/database")
    assert call["width"] == 100
    assert call["selector_command"] == ("fzf-tmux", "--no-hscroll", "-m")
    assert call["mpc_command"] == ("mpc",)
    assert call["interrupt_exit_code"] == 130


def test_main_flags_override_config(monkeypatch, runs) -> None:
    monkeypatch.setattr(
        cli,
        "load_config",
        lambda: AppConfig(db_file="/cfg/db", width=90, selector_command=("sk", "-m")),
    )
    cli.main(["--db-file", "/flag/db", "--width", "140", "--selector", "fzf --multi"])
    (call,) = runs
    assert call["db_file"] == Path("/flag/db")
    assert call["width"] == 140
    assert call["selector_command"] == ("fzf", "--multi")


def test_main_config_overrides_discovery(monkeypatch, runs) -> None:
    monkeypatch.setattr(
        cli,
        "load_config",
        lambda: AppConfig(db_file="/cfg/db", width=90, mpc_command=("mpc", "-q")),
    )
    monkeypatch.setattr(cli, "find_db_file", lambda: pytest.fail("discovery used"))
    cli.main([])
    (call,) = runs
    assert call["db_file"] == Path("/cfg/db")
    assert call["width"] == 90
    assert call["mpc_command"] == ("mpc", "-q")


def test_main_console_level(monkeypatch, runs) -> None:
    levels: list[int] = []
    monkeypatch.setattr(cli, "set_console_level", levels.append)
    cli.main([])
    cli.main(["-v"])
    assert levels == [cli.logging.WARNING, cli.logging.INFO]


def test_main_reports_fatal_errors(monkeypatch, runs, capsys) -> None:
    def boom(*_args, **_kwargs) -> int:
        raise CorruptedDatabase("Invalid directory state. Corrupted database?")

    monkeypatch.setattr(cli, "pick_and_enqueue", boom)
    assert cli.main([]) == 1
    assert capsys.readouterr().err.strip() == (
        "Invalid directory state. Corrupted database?"
    )


def test_thread_exceptions_are_logged(monkeypatch, caplog) -> None:
    import sys
    import threading

    original_excepthook = sys.excepthook
    original_thread_hook = threading.excepthook
    try:
        cli._install_exception_hooks()
        fake_args = SimpleNamespace(
            exc_type=RuntimeError,
            exc_value=RuntimeError("boom"),
            exc_traceback=None,
            thread=SimpleNamespace(name="SelectorFeed"),
        )
        threading.excepthook(fake_args)
        sys.excepthook(ValueError, ValueError("bad"), None)
    finally:
        sys.excepthook = original_excepthook
        threading.excepthook = original_thread_hook

    assert "Thread exception in SelectorFeed" in caplog.text
    assert "Uncaught exception" in caplog.text
