"""Interactive selector (fzf) session."""

from __future__ import annotations

from enum import Enum
import logging
import subprocess
import threading
from typing import IO, Callable, Iterable, Optional, Sequence

from mpd_fzf.errors import ExternalToolFailure
from mpd_fzf.ui.line_codec import decode_selection

logger = logging.getLogger(__name__)

DEFAULT_SELECTOR_COMMAND = ("fzf-tmux", "--no-hscroll", "-m")
# fzf exits with 130 on Ctrl-C / Esc.
INTERRUPT_EXIT_CODE = 130
PIPE_ENCODING = "utf-8"
PIPE_ERRORS = "surrogateescape"


class SelectorState(Enum):
    NOT_STARTED = "not_started"
    STREAMING = "streaming"
    AWAITING_RESULT = "awaiting_result"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    FAILED = "failed"


class SelectorSession:
    """Feed candidate lines to the selector and collect the chosen paths.

    Input is written from a background thread while the calling thread
    drains the selector's output, so neither side can stall on a full pipe.
    A session runs once.
    """

    def __init__(
        self,
        command: Sequence[str] = DEFAULT_SELECTOR_COMMAND,
        *,
        interrupt_exit_code: int = INTERRUPT_EXIT_CODE,
        popen: Callable[..., subprocess.Popen[bytes]] = subprocess.Popen,
    ) -> None:
        self._command = list(command)
        self._interrupt_exit_code = interrupt_exit_code
        self._popen = popen
        self._state = SelectorState.NOT_STARTED
        self._feed_error: Optional[BaseException] = None
        self._lines_written = 0

    @property
    def state(self) -> SelectorState:
        return self._state

    @property
    def lines_written(self) -> int:
        return self._lines_written

    def run(self, lines: Iterable[str]) -> list[str]:
        """Run the selector over ``lines`` and return the chosen paths.

        Returns an empty list when the user cancels. Raises
        :class:`ExternalToolFailure` on launch, pipe or exit failures.
        """
        if self._state is not SelectorState.NOT_STARTED:
            raise RuntimeError("SelectorSession can only run once")
        process = self._start()
        writer = threading.Thread(
            target=self._feed,
            args=(process.stdin, lines),
            name="SelectorFeed",
            daemon=True,
        )
        self._state = SelectorState.STREAMING
        writer.start()
        try:
            output = self._drain(process)
            self._state = SelectorState.AWAITING_RESULT
            returncode = process.wait()
        except OSError as exc:
            self._state = SelectorState.FAILED
            process.kill()
            process.wait()
            raise ExternalToolFailure(
                f"Lost connection to {self._command[0]}: {exc}"
            ) from exc
        finally:
            writer.join()
        return self._finish(returncode, output)

    def _start(self) -> subprocess.Popen[bytes]:
        logger.info("Starting selector: %s", " ".join(self._command))
        try:
            return self._popen(
                self._command,
                stdin=subprocess.PIPE,
                stdout=subprocess.PIPE,
            )
        except OSError as exc:
            self._state = SelectorState.FAILED
            raise ExternalToolFailure(
                f"Could not start {self._command[0]}: {exc}"
            ) from exc

    def _feed(self, stdin: Optional[IO[bytes]], lines: Iterable[str]) -> None:
        if stdin is None:
            return
        try:
            for line in lines:
                stdin.write((line + "\n").encode(PIPE_ENCODING, PIPE_ERRORS))
                self._lines_written += 1
        except BrokenPipeError:
            # The selector quit (or the user confirmed) before reading everything.
            logger.debug(
                "Selector closed its input after %d lines", self._lines_written
            )
        except Exception as exc:
            self._feed_error = exc
        finally:
            try:
                stdin.close()
            except BrokenPipeError:
                pass
            except OSError as exc:
                if self._feed_error is None:
                    self._feed_error = exc

    def _drain(self, process: subprocess.Popen[bytes]) -> str:
        if process.stdout is None:
            return ""
        with process.stdout:
            return process.stdout.read().decode(PIPE_ENCODING, PIPE_ERRORS)

    def _finish(self, returncode: int, output: str) -> list[str]:
        if self._feed_error is not None:
            self._state = SelectorState.FAILED
            raise ExternalToolFailure(
                f"Failed to write to {self._command[0]}: {self._feed_error}"
            ) from self._feed_error
        if returncode == self._interrupt_exit_code:
            logger.info("Selection cancelled")
            self._state = SelectorState.CANCELLED
            return []
        if returncode != 0:
            self._state = SelectorState.FAILED
            raise ExternalToolFailure(
                f"{self._command[0]} exited with status {returncode}"
            )
        paths = decode_selection(output)
        logger.info("Selected %d of %d tracks", len(paths), self._lines_written)
        self._state = SelectorState.COMPLETED
        return paths
