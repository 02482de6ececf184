"""Selector line encoding.

Each line handed to the selector is ``visible text + DELIMITER + path``. The
selector echoes chosen lines verbatim, so the path is recovered by splitting
on the last delimiter.
"""

from __future__ import annotations

import logging

from rich.cells import cell_len

from mpd_fzf.database import Track
from mpd_fzf.errors import MalformedSelectorOutput
from mpd_fzf.metadata import format_display_title
from mpd_fzf.ui.text_helpers import fit_to_width

logger = logging.getLogger(__name__)

# Forward slashes cannot repeat inside a path segment.
DELIMITER = "////"
ELLIPSIS = ".."


def encode_track(track: Track, available_cols: int) -> str:
    """Render ``track`` as one selector line of ``available_cols`` visible cells."""
    content_cols = available_cols - cell_len(track.duration)
    if content_cols < 0:
        raise ValueError(
            f"{available_cols} columns cannot hold duration {track.duration!r}"
        )
    visible = fit_to_width(format_display_title(track), content_cols, ELLIPSIS)
    return f"{visible}{track.duration}{DELIMITER}{track.path}"


def decode_line(line: str) -> str:
    if DELIMITER not in line:
        raise MalformedSelectorOutput(f"No track path in selector line {line!r}")
    _visible, path = line.rsplit(DELIMITER, 1)
    return path


def decode_selection(output: str) -> list[str]:
    """Return the paths of every chosen line, in selector output order."""
    if not output.strip():
        return []
    lines = output.split("\n")
    if lines[-1] == "":
        lines.pop()
    paths: list[str] = []
    for line in lines:
        try:
            paths.append(decode_line(line))
        except MalformedSelectorOutput as exc:
            logger.warning("Skipping selector line: %s", exc)
    return paths
