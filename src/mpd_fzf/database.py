"""MPD database parsing.

The database is a line-oriented dump of the music directory tree::

    directory: Music
    begin: Music
    song_begin: chandelier.mp3
    Time: 215
    Artist: Sia
    Title: Chandelier
    song_end
    end: Music

Only the keys needed to display and identify a track are read; everything
else is skipped so newer database formats keep working.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import gzip
import logging
from pathlib import Path
import random
from typing import IO, Iterable, Optional
import zlib

from mpd_fzf.errors import CorruptedDatabase, DatabaseUnreadable
from mpd_fzf.metadata import format_duration

logger = logging.getLogger(__name__)

GZIP_MAGIC = b"\x1f\x8b"
DB_ENCODING = "utf-8"
DB_ERRORS = "surrogateescape"

_TAG_FIELDS = {
    "Album": "album",
    "Artist": "artist",
    "Date": "date",
    "Genre": "genre",
    "Title": "title",
}


@dataclass(frozen=True)
class Track:
    """A playable song; ``path`` is its only unique identifier."""

    path: str
    filename: str
    artist: str = ""
    title: str = ""
    album: str = ""
    date: str = ""
    genre: str = ""
    duration: str = ""


def split_key_value(line: str) -> tuple[str, str]:
    """Split ``key: value`` on the first colon; bare keys get an empty value."""
    key, sep, value = line.partition(":")
    if not sep:
        return line, ""
    if value.startswith(" "):
        value = value[1:]
    return key, value


@dataclass
class DatabaseParser:
    """Line-by-line reducer over the database dump."""

    stack: list[str] = field(default_factory=list)
    current: Optional[dict[str, str]] = None
    tracks: list[Track] = field(default_factory=list)
    line_number: int = 0

    def feed(self, line: str) -> None:
        self.line_number += 1
        key, value = split_key_value(line.rstrip("\r\n"))
        if key == "directory":
            self.stack.append(value)
        elif key == "end":
            if not self.stack:
                raise CorruptedDatabase(
                    f"Invalid directory state at line {self.line_number}. "
                    "Corrupted database?"
                )
            self.stack.pop()
        elif key == "song_begin":
            self._begin_song(value)
        elif key == "song_end":
            self._end_song()
        elif self.current is not None:
            if key in _TAG_FIELDS:
                self.current[_TAG_FIELDS[key]] = value
            elif key == "Time":
                self.current["duration"] = format_duration(value)

    def finish(self) -> list[Track]:
        """Check the final state and return the parsed tracks."""
        if self.current is not None:
            raise CorruptedDatabase(
                f"Song {self.current['path']!r} is never closed. Truncated database?"
            )
        if self.stack:
            raise CorruptedDatabase(
                f"Directory {'/'.join(self.stack)!r} is never closed. "
                "Truncated database?"
            )
        return self.tracks

    def _begin_song(self, filename: str) -> None:
        if self.current is not None:
            raise CorruptedDatabase(
                f"song_begin at line {self.line_number} inside an open song. "
                "Corrupted database?"
            )
        segments = [segment for segment in (*self.stack, filename) if segment]
        self.current = {"filename": filename, "path": "/".join(segments)}

    def _end_song(self) -> None:
        if self.current is None:
            raise CorruptedDatabase(
                f"song_end at line {self.line_number} without song_begin. "
                "Corrupted database?"
            )
        self.tracks.append(Track(**self.current))
        self.current = None


def parse_database(lines: Iterable[str]) -> list[Track]:
    """Parse database lines into tracks in database order."""
    parser = DatabaseParser()
    for line in lines:
        parser.feed(line)
    return parser.finish()


def group_by_artist(
    tracks: Iterable[Track], rng: Optional[random.Random] = None
) -> list[Track]:
    """Keep each artist's tracks together, in a random order of artists."""
    buckets: dict[str, list[Track]] = {}
    for track in tracks:
        buckets.setdefault(track.artist, []).append(track)
    groups = list(buckets.values())
    (rng or random.Random()).shuffle(groups)
    return [track for group in groups for track in group]


def open_database(path: Path) -> IO[str]:
    """Open a gzip-compressed or plain database as text."""
    with path.open("rb") as probe:
        compressed = probe.read(len(GZIP_MAGIC)) == GZIP_MAGIC
    # Only "\n" ends a record; a stray "\r" inside a tag must not split it.
    if compressed:
        return gzip.open(
            path, "rt", encoding=DB_ENCODING, errors=DB_ERRORS, newline="\n"
        )
    return path.open("r", encoding=DB_ENCODING, errors=DB_ERRORS, newline="\n")


def read_tracks(path: Path) -> list[Track]:
    """Read and parse the database file at ``path``."""
    logger.info("Reading database %s", path)
    try:
        with open_database(path) as handle:
            tracks = parse_database(handle)
    except (OSError, EOFError, zlib.error) as exc:
        raise DatabaseUnreadable(f"Could not read database '{path}': {exc}") from exc
    logger.info("Parsed %d tracks", len(tracks))
    return tracks
