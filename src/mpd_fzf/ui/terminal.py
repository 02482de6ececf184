"""Terminal width discovery for selector lines."""

from __future__ import annotations

import logging
import os
import subprocess
import sys
from typing import Callable, Optional

logger = logging.getLogger(__name__)

DEFAULT_WIDTH = 80
MIN_WIDTH = 21
# Columns fzf keeps for its pointer, marker and scrollbar.
SELECTOR_GUTTER = 5

Runner = Callable[..., "subprocess.CompletedProcess[str]"]


def _tmux_width(runner: Runner) -> Optional[int]:
    if not os.environ.get("TMUX"):
        return None
    try:
        result = runner(
            ["tmux", "display-message", "-p", "#{pane_width}"],
            capture_output=True,
            text=True,
            check=False,
        )
    except OSError:
        return None
    if result.returncode != 0:
        return None
    return _parse_int(result.stdout)


def _env_width() -> Optional[int]:
    return _parse_int(os.environ.get("COLUMNS", ""))


def _stty_width(runner: Runner) -> Optional[int]:
    try:
        result = runner(
            ["stty", "size"],
            stdin=sys.stdin,
            capture_output=True,
            text=True,
            check=False,
        )
    except (OSError, ValueError):
        return None
    if result.returncode != 0:
        return None
    parts = result.stdout.split()
    if len(parts) != 2:
        return None
    return _parse_int(parts[1])


def _parse_int(text: str) -> Optional[int]:
    try:
        return int(text.strip())
    except ValueError:
        return None


def terminal_width(runner: Runner = subprocess.run) -> int:
    """Return the width of the pane the selector will draw in.

    Tries tmux, then ``$COLUMNS``, then ``stty size``; falls back to 80.
    """
    probes: tuple[tuple[str, Callable[[], Optional[int]]], ...] = (
        ("tmux", lambda: _tmux_width(runner)),
        ("COLUMNS", _env_width),
        ("stty", lambda: _stty_width(runner)),
    )
    for name, probe in probes:
        width = probe()
        if width is not None and width >= MIN_WIDTH:
            logger.debug("Terminal width %d from %s", width, name)
            return width
    logger.debug("Terminal width unknown, using %d", DEFAULT_WIDTH)
    return DEFAULT_WIDTH


def available_columns(width: int) -> int:
    """Return the columns left for line text once the selector gutter is taken."""
    return max(0, width - SELECTOR_GUTTER)
