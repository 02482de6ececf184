"""Queue reconciliation through ``mpc``."""

from __future__ import annotations

from dataclasses import dataclass
import logging
import subprocess
from typing import Callable, Iterable, NamedTuple, Sequence

from mpd_fzf.errors import ExternalToolFailure

logger = logging.getLogger(__name__)

DEFAULT_MPC_COMMAND = ("mpc",)
QUEUE_FORMAT = "%position% %file%"
# Non-UTF-8 file names survive the round trip through mpc byte for byte.
_CODEC = ("utf-8", "surrogateescape")

Runner = Callable[..., "subprocess.CompletedProcess[bytes]"]


class QueueEntry(NamedTuple):
    position: int
    path: str


@dataclass(frozen=True)
class ReconcileResult:
    removed: tuple[int, ...]
    inserted: tuple[str, ...]


def parse_queue(output: str) -> list[QueueEntry]:
    """Parse ``<position> <path>`` lines; paths may contain spaces."""
    entries: list[QueueEntry] = []
    for line in output.split("\n"):
        position, sep, path = line.partition(" ")
        if not sep:
            continue
        try:
            entries.append(QueueEntry(int(position), path))
        except ValueError as exc:
            raise ExternalToolFailure(
                f"Unexpected queue line from mpc: {line!r}"
            ) from exc
    return entries


class MpcClient:
    """Thin wrapper over the ``mpc`` command line client."""

    def __init__(
        self,
        command: Sequence[str] = DEFAULT_MPC_COMMAND,
        *,
        runner: Runner = subprocess.run,
    ) -> None:
        self._command = list(command)
        self._runner = runner

    def queue(self) -> list[QueueEntry]:
        """Return the current queue in play order."""
        return parse_queue(self._run("playlist", "-f", QUEUE_FORMAT))

    def delete(self, positions: Iterable[int]) -> None:
        """Remove queue entries by their position before any removal."""
        self._run("del", stdin=_as_lines(str(position) for position in positions))

    def insert(self, paths: Iterable[str]) -> None:
        """Insert ``paths`` after the current song, keeping their order."""
        self._run("insert", stdin=_as_lines(paths))

    def _run(self, *args: str, stdin: str | None = None) -> str:
        argv = [*self._command, *args]
        logger.debug("Running %s", " ".join(argv))
        try:
            result = self._runner(
                argv,
                input=None if stdin is None else stdin.encode(*_CODEC),
                capture_output=True,
                check=False,
            )
        except OSError as exc:
            raise ExternalToolFailure(f"Could not run {argv[0]}: {exc}") from exc
        if result.returncode != 0:
            detail = (result.stderr or b"").decode(*_CODEC).strip()
            message = f"'{' '.join(argv)}' exited with status {result.returncode}"
            raise ExternalToolFailure(f"{message}: {detail}" if detail else message)
        return (result.stdout or b"").decode(*_CODEC)


def _as_lines(items: Iterable[str]) -> str:
    return "".join(f"{item}\n" for item in items)


class QueueReconciler:
    """Move chosen tracks to just after the current song.

    Existing queue entries for the chosen paths are removed first, then the
    paths are inserted in selection order. There is no rollback if the
    insert fails after the removal.
    """

    def __init__(self, client: MpcClient) -> None:
        self._client = client

    def reconcile(self, chosen: Sequence[str]) -> ReconcileResult:
        wanted = {path for path in chosen if path}
        stale = tuple(
            entry.position for entry in self._client.queue() if entry.path in wanted
        )
        if stale:
            logger.info("Removing %d queued duplicates", len(stale))
            self._client.delete(stale)
        inserted = tuple(path for path in chosen if path)
        self._client.insert(inserted)
        logger.info("Inserted %d tracks after the current song", len(inserted))
        return ReconcileResult(removed=stale, inserted=inserted)
