"""
Logging configuration — set up once by the CLI entrypoint.

Every module does ``logger = logging.getLogger(__name__)`` and inherits
this config.

Levels are resolved in precedence order:
    --debug  >  -v / -vv  >  --quiet  >  DEBIAN_BRIDGE_LOG_LEVEL  >  WARNING

Optional file output via DEBIAN_BRIDGE_LOG_FILE / DEBIAN_BRIDGE_LOG_FILE_LEVEL.
The file always gets the detailed format, whatever the console shows.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

LOG_LEVEL_ENV = "DEBIAN_BRIDGE_LOG_LEVEL"
LOG_FILE_ENV = "DEBIAN_BRIDGE_LOG_FILE"
LOG_FILE_LEVEL_ENV = "DEBIAN_BRIDGE_LOG_FILE_LEVEL"

# ── Formats ─────────────────────────────────────────────────────

_DETAILED = ("%(asctime)s %(levelname)-7s %(name)s:%(lineno)d  %(message)s", "%H:%M:%S")

# (upper bound, format, datefmt), first match wins
_CONSOLE_FORMATS: tuple[tuple[int, str, str | None], ...] = (
    (logging.DEBUG, *_DETAILED),
    (logging.INFO, "%(asctime)s %(message)s", "%H:%M:%S"),
    (logging.CRITICAL, "%(levelname)s: %(message)s", None),
)

_FILE_FORMAT = (_DETAILED[0], "%Y-%m-%d %H:%M:%S")

# pydantic and yaml stay quiet unless we're debugging
_NOISY_LOGGERS = ("urllib3", "pydantic", "yaml")


def level_from_flags(
    verbose: int = 0,
    quiet: bool = False,
    debug: bool = False,
    env_level: str | None = None,
) -> str:
    """Resolve the console level name from CLI flags and the environment."""
    if debug or verbose >= 2:
        return "DEBUG"
    if verbose == 1:
        return "INFO"
    if quiet:
        return "ERROR"
    return env_level or "WARNING"


def setup_logging(
    level: str = "WARNING",
    log_file: str | None = None,
    log_file_level: str | None = None,
    quiet_third_party: bool = True,
) -> None:
    """Configure logging for the whole process.

    Replaces any handlers already on the root logger, so calling it
    again (tests, repeated CLI invocations) does not stack output.

    Args:
        level: Console level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_file: Optional path to a log file; parent dirs are created.
        log_file_level: Level for the log file; defaults to ``level``.
        quiet_third_party: Keep library loggers at WARNING above DEBUG.
    """
    console_level = _parse_level(level)
    handlers: list[logging.Handler] = [_console_handler(console_level)]

    if log_file:
        file_level = _parse_level(log_file_level) if log_file_level else console_level
        handlers.append(_file_handler(Path(log_file), file_level))

    root = logging.getLogger()
    for old in root.handlers[:]:
        root.removeHandler(old)
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(min(h.level for h in handlers))

    if quiet_third_party and console_level > logging.DEBUG:
        for name in _NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)

    logging.raiseExceptions = False


def _console_handler(level: int) -> logging.Handler:
    fmt, datefmt = next((f, d) for bound, f, d in _CONSOLE_FORMATS if level <= bound)
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt, datefmt=datefmt))
    return handler


def _file_handler(path: Path, level: int) -> logging.Handler:
    path.expanduser().parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(path.expanduser(), encoding="utf-8")
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(*_FILE_FORMAT))
    return handler


def _parse_level(level: str | None) -> int:
    """Level name to its numeric value; WARNING when unknown or empty."""
    numeric = logging.getLevelName((level or "").upper())
    return numeric if isinstance(numeric, int) else logging.WARNING
