"""Error types for mpd-fzf."""

from __future__ import annotations


class MpdFzfError(RuntimeError):
    """Base class for errors that abort the run."""


class ConfigNotFound(MpdFzfError):
    """No usable MPD configuration (or no ``db_file`` directive in it)."""


class DatabaseUnreadable(MpdFzfError):
    """The database file could not be opened, read or decompressed."""


class CorruptedDatabase(MpdFzfError):
    """The database dump violates its nesting structure."""


class ExternalToolFailure(MpdFzfError):
    """The selector or mpc failed to start, exited badly, or broke a pipe."""


class MalformedSelectorOutput(ValueError):
    """A selector output line carries no hidden path."""


class TerminalTooNarrow(MpdFzfError):
    """The selector width cannot fit a track's duration column."""
