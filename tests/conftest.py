"""Pytest configuration for mpd-fzf."""

from __future__ import annotations

from collections.abc import Callable
import gzip
from pathlib import Path

import pytest

DbWriter = Callable[..., Path]


@pytest.fixture
def write_db(tmp_path: Path) -> DbWriter:
    """Return a helper that writes a database dump and returns its path."""

    def write(text: str, *, compressed: bool = True, name: str = "database") -> Path:
        path = tmp_path / name
        data = text.encode("utf-8")
        if compressed:
            data = gzip.compress(data)
        path.write_bytes(data)
        return path

    return write


@pytest.fixture(autouse=True)
def _isolated_home(monkeypatch, tmp_path: Path) -> None:
    """Keep tests away from the real config, state and MPD files."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(home / ".config"))
    monkeypatch.setenv("XDG_STATE_HOME", str(home / ".local" / "state"))
    monkeypatch.delenv("MPD_FZF_LOG_LEVEL", raising=False)
