"""Parse, select and enqueue, start to finish."""

from __future__ import annotations

import logging
from pathlib import Path
import random
from typing import Iterator, Optional, Sequence

from rich.cells import cell_len

from mpd_fzf.database import Track, group_by_artist, read_tracks
from mpd_fzf.errors import TerminalTooNarrow
from mpd_fzf.queue_sync import DEFAULT_MPC_COMMAND, MpcClient, QueueReconciler
from mpd_fzf.selector import (
    DEFAULT_SELECTOR_COMMAND,
    INTERRUPT_EXIT_CODE,
    SelectorSession,
)
from mpd_fzf.ui.line_codec import encode_track
from mpd_fzf.ui.terminal import available_columns

logger = logging.getLogger(__name__)


def encoded_lines(tracks: Sequence[Track], width: int) -> Iterator[str]:
    """Check the width against every duration, then encode lazily."""
    columns = available_columns(width)
    widest = max((cell_len(track.duration) for track in tracks), default=0)
    if widest > columns:
        raise TerminalTooNarrow(
            f"A width of {width} columns cannot show durations "
            f"{widest} cells wide; use a wider terminal or --width"
        )
    return (encode_track(track, columns) for track in tracks)


def pick_and_enqueue(
    db_file: Path,
    *,
    width: int,
    selector_command: Sequence[str] = DEFAULT_SELECTOR_COMMAND,
    mpc_command: Sequence[str] = DEFAULT_MPC_COMMAND,
    interrupt_exit_code: int = INTERRUPT_EXIT_CODE,
    rng: Optional[random.Random] = None,
) -> int:
    """Let the user pick tracks and queue them after the current song.

    Returns the process exit code; fatal problems raise ``MpdFzfError``.
    """
    tracks = group_by_artist(read_tracks(db_file), rng)
    session = SelectorSession(selector_command, interrupt_exit_code=interrupt_exit_code)
    chosen = session.run(encoded_lines(tracks, width))
    if not chosen:
        logger.info("Nothing selected (%s)", session.state.value)
        return 0
    QueueReconciler(MpcClient(mpc_command)).reconcile(chosen)
    return 0
