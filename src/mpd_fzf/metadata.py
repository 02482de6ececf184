"""Track metadata helpers for display."""

from __future__ import annotations

import math
import posixpath
import re
from typing import TYPE_CHECKING, Union

if TYPE_CHECKING:
    from mpd_fzf.database import Track

DurationInput = Union[int, float, str, None]


# Whole seconds, optionally with a decimal fraction as MPD writes for Time:.
_SECONDS_RE = re.compile(r"(\d+)(?:\.\d*)?", re.ASCII)


def _parse_seconds(value: DurationInput) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        seconds = value
    elif isinstance(value, float):
        if not math.isfinite(value):
            return None
        seconds = int(value)
    else:
        match = _SECONDS_RE.fullmatch(value.strip())
        if match is None:
            return None
        try:
            seconds = int(match.group(1))
        except ValueError:
            # Beyond the interpreter's int string conversion limit.
            return None
    if seconds < 0:
        return None
    return seconds


def format_duration(value: DurationInput) -> str:
    """Return ``(MM:SS)`` or ``(H:MM:SS)`` for a duration in seconds.

    Unknown, negative or unparseable input yields an empty string.
    """
    total_seconds = _parse_seconds(value)
    if total_seconds is None:
        return ""
    minutes, seconds = divmod(total_seconds, 60)
    hours, minutes = divmod(minutes, 60)
    if hours:
        return f"({hours}:{minutes:02d}:{seconds:02d})"
    return f"({minutes:02d}:{seconds:02d})"


def strip_extension(filename: str) -> str:
    basename = posixpath.basename(filename)
    stem, _ext = posixpath.splitext(basename)
    return stem


def format_display_title(track: Track) -> str:
    """Return the human-readable part of a selector line, before width fitting."""
    text = f"{track.artist} - {track.title}"
    if not track.artist:
        text = text[len(" - ") :]
    if not text:
        text = strip_extension(track.filename)
    if track.album:
        text += f" {{{track.album}}}"
    return text
