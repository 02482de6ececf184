"""Configuration for mpd-fzf.

Two sources are read, never written:

* the MPD daemon config, only to find its ``db_file``;
* an optional ``config.json`` with mpd-fzf's own settings.
"""

from __future__ import annotations

from dataclasses import dataclass
import json
import logging
import os
from pathlib import Path
import re
from typing import Any, Iterable, Optional

from mpd_fzf.errors import ConfigNotFound
from mpd_fzf.queue_sync import DEFAULT_MPC_COMMAND
from mpd_fzf.selector import DEFAULT_SELECTOR_COMMAND, INTERRUPT_EXIT_CODE
from mpd_fzf.ui.terminal import MIN_WIDTH

logger = logging.getLogger(__name__)

APP_NAME = "mpd-fzf"
DB_FILE_PATTERN = re.compile(r'^\s*db_file\s*"([^"]+)"')


@dataclass(frozen=True)
class AppConfig:
    """Immutable user settings loaded from disk."""

    selector_command: tuple[str, ...] = DEFAULT_SELECTOR_COMMAND
    mpc_command: tuple[str, ...] = DEFAULT_MPC_COMMAND
    interrupt_exit_code: int = INTERRUPT_EXIT_CODE
    db_file: Optional[str] = None
    width: Optional[int] = None


def get_config_dir(app_name: str = APP_NAME) -> Path:
    """Return the per-user config directory for the current platform."""
    if os.name == "nt":
        base = os.environ.get("APPDATA")
        root = Path(base) if base else Path.home() / "AppData" / "Roaming"
        return root / app_name
    if _is_macos():
        return Path.home() / "Library" / "Application Support" / app_name
    base = os.environ.get("XDG_CONFIG_HOME")
    root = Path(base) if base else Path.home() / ".config"
    return root / app_name


def get_config_path() -> Path:
    """Return the full config file path."""
    return get_config_dir() / "config.json"


def load_config() -> AppConfig:
    """Load settings from disk, falling back to defaults when missing or invalid."""
    path = get_config_path()
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return AppConfig()
    except (OSError, json.JSONDecodeError):
        logger.exception("Failed to load config from %s", path)
        return AppConfig()
    if not isinstance(raw, dict):
        logger.warning("Ignoring config %s: expected a JSON object", path)
        return AppConfig()
    return _config_from_mapping(raw)


def _is_macos() -> bool:
    """Return True when running on macOS."""
    return os.uname().sysname == "Darwin" if hasattr(os, "uname") else False


def _get_command(
    raw: dict[str, Any], key: str, default: tuple[str, ...]
) -> tuple[str, ...]:
    """Fetch a non-empty list of strings as an argv tuple."""
    value = raw.get(key)
    if (
        isinstance(value, list)
        and value
        and all(isinstance(item, str) and item for item in value)
    ):
        return tuple(value)
    return default


def _get_int(
    raw: dict[str, Any],
    key: str,
    default: Optional[int],
    *,
    min_value: int | None = None,
) -> Optional[int]:
    """Fetch an integer value with optional lower clamping."""
    value = raw.get(key, default)
    if isinstance(value, bool) or not isinstance(value, int):
        value = default
    if value is not None and min_value is not None:
        value = max(min_value, value)
    return value


def _get_optional_str(raw: dict[str, Any], key: str) -> Optional[str]:
    value = raw.get(key)
    if not isinstance(value, str) or not value:
        return None
    return value


def _config_from_mapping(raw: dict[str, Any]) -> AppConfig:
    """Normalize raw JSON data into an AppConfig."""
    interrupt = _get_int(raw, "interrupt_exit_code", INTERRUPT_EXIT_CODE)
    return AppConfig(
        selector_command=_get_command(
            raw, "selector_command", DEFAULT_SELECTOR_COMMAND
        ),
        mpc_command=_get_command(raw, "mpc_command", DEFAULT_MPC_COMMAND),
        interrupt_exit_code=INTERRUPT_EXIT_CODE if interrupt is None else interrupt,
        db_file=_get_optional_str(raw, "db_file"),
        width=_get_int(raw, "width", None, min_value=MIN_WIDTH),
    )


def mpd_config_candidates(home: Optional[Path] = None) -> list[Path]:
    """Return MPD config locations in the order MPD itself searches them."""
    home = home or Path.home()
    candidates: list[Path] = []
    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        candidates.append(Path(xdg) / "mpd" / "mpd.conf")
    candidates.extend(
        [
            home / ".config" / "mpd" / "mpd.conf",
            home / ".mpdconf",
            Path("/etc/mpd.conf"),
            Path("/usr/local/etc/musicpd.conf"),
        ]
    )
    return candidates


def expand_user(path: str, home: Path) -> str:
    if path.startswith("~/"):
        return str(home) + path[1:]
    return path


def parse_db_file(lines: Iterable[str], home: Path) -> Optional[str]:
    """Return the last ``db_file`` setting in an MPD config, if any."""
    db_file: Optional[str] = None
    for line in lines:
        match = DB_FILE_PATTERN.match(line)
        if match:
            db_file = expand_user(match.group(1), home)
    return db_file


def find_db_file(home: Optional[Path] = None) -> Path:
    """Locate the MPD database through the first readable MPD config file."""
    home = home or Path.home()
    for candidate in mpd_config_candidates(home):
        try:
            text = candidate.read_text(encoding="utf-8", errors="replace")
        except OSError:
            continue
        logger.info("Using MPD config %s", candidate)
        db_file = parse_db_file(text.splitlines(), home)
        if db_file is None:
            raise ConfigNotFound(
                f"Could not find 'db_file' in configuration file '{candidate}'"
            )
        return Path(db_file)
    raise ConfigNotFound("No config file found")
