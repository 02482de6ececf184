"""Command-line interface for mpd-fzf."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
import shlex
import sys
import threading
from types import TracebackType
from typing import Iterable, Optional, Tuple

from mpd_fzf.config import AppConfig, find_db_file, load_config
from mpd_fzf.errors import MpdFzfError
from mpd_fzf.logging_setup import init_logging, set_console_level
from mpd_fzf.pipeline import pick_and_enqueue
from mpd_fzf.ui.terminal import MIN_WIDTH, terminal_width

logger = logging.getLogger(__name__)


def _width_arg(value: str) -> int:
    try:
        width = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid width: {value!r}") from None
    if width < MIN_WIDTH:
        raise argparse.ArgumentTypeError(f"width must be at least {MIN_WIDTH}")
    return width


def build_parser() -> argparse.ArgumentParser:
    """Build and return the CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="mpd-fzf",
        description="Pick songs from the MPD database with fzf and play them next.",
    )
    parser.add_argument(
        "--db-file",
        type=Path,
        default=None,
        help="MPD database file (default: db_file from the MPD config)",
    )
    parser.add_argument(
        "--width",
        type=_width_arg,
        default=None,
        help="Line width in columns (default: detected from the terminal)",
    )
    parser.add_argument(
        "--selector",
        default=None,
        help='Selector command line (default: "fzf-tmux --no-hscroll -m")',
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Also print log messages to stderr",
    )
    return parser


def _install_exception_hooks() -> None:
    def excepthook(exc_type, exc, tb) -> None:
        logger.critical("Uncaught exception", exc_info=(exc_type, exc, tb))

    sys.excepthook = excepthook

    def thread_hook(args: threading.ExceptHookArgs) -> None:
        exc_value = args.exc_value or RuntimeError("unknown")
        exc_info: Tuple[type[BaseException], BaseException, Optional[TracebackType]] = (
            args.exc_type,
            exc_value,
            args.exc_traceback,
        )
        thread_name = args.thread.name if args.thread else "thread"
        logger.critical("Thread exception in %s", thread_name, exc_info=exc_info)

    threading.excepthook = thread_hook


def _resolve_db_file(args: argparse.Namespace, cfg: AppConfig) -> Path:
    if args.db_file is not None:
        return args.db_file
    if cfg.db_file:
        return Path(cfg.db_file).expanduser()
    return find_db_file()


def _resolve_selector(args: argparse.Namespace, cfg: AppConfig) -> tuple[str, ...]:
    command = tuple(shlex.split(args.selector or ""))
    return command or cfg.selector_command


def main(argv: Optional[Iterable[str]] = None) -> int:
    """Entry point for the CLI."""
    parser = build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)

    console_level = logging.INFO if args.verbose else logging.WARNING
    init_logging(console_level=console_level)
    set_console_level(console_level)
    _install_exception_hooks()
    logger.info("App start")

    cfg = load_config()
    try:
        exit_code = pick_and_enqueue(
            _resolve_db_file(args, cfg),
            width=args.width or cfg.width or terminal_width(),
            selector_command=_resolve_selector(args, cfg),
            mpc_command=cfg.mpc_command,
            interrupt_exit_code=cfg.interrupt_exit_code,
        )
    except MpdFzfError as exc:
        logger.info("Run aborted: %s", exc)
        print(str(exc), file=sys.stderr)
        return 1
    logger.info("App exit code=%s", exit_code)
    return exit_code


if __name__ == "__main__":
    raise SystemExit(main())
