"""
Logging configuration — central setup for the CLI and the orchestrator child.

Called once per process.  Every module that does
``logger = logging.getLogger(__name__)`` inherits this config.
Diagnostics go to stderr; progress lines are echoed separately and
never pass through logging.

Level precedence:
    --debug  >  --verbose  >  --quiet  >  PROVISIONER_LOG_LEVEL  >  WARNING

PROVISIONER_LOG_FILE adds a file handler (level PROVISIONER_LOG_FILE_LEVEL,
default: same as console).
"""

from __future__ import annotations

import logging
import os
import sys

_FMT_MINIMAL = "%(message)s"

_FMT_VERBOSE = "%(asctime)s [%(role)s] %(message)s"
_DATEFMT_VERBOSE = "%H:%M:%S"

_FMT_DEBUG = "%(asctime)s %(levelname)-5s %(role)s %(name)s:%(lineno)d — %(message)s"
_DATEFMT_DEBUG = "%H:%M:%S"

_FMT_FILE = "%(asctime)s %(levelname)-5s %(role)s pid=%(process)d %(name)s — %(message)s"
_DATEFMT_FILE = "%Y-%m-%d %H:%M:%S"


class _RoleFilter(logging.Filter):
    """Tag records with the process role (supervisor / orchestrator)."""

    def __init__(self, role: str) -> None:
        super().__init__()
        self.role = role

    def filter(self, record: logging.LogRecord) -> bool:
        record.role = self.role
        return True


def resolve_level(*, debug: bool = False, verbose: bool = False, quiet: bool = False) -> str:
    """Pick the console level from CLI flags, falling back to the env var."""
    if debug:
        return "DEBUG"
    if verbose:
        return "INFO"
    if quiet:
        return "ERROR"
    return os.environ.get("PROVISIONER_LOG_LEVEL", "WARNING")


def setup_logging(
    level: str = "WARNING",
    *,
    role: str = "supervisor",
    log_file: str | None = None,
    log_file_level: str | None = None,
) -> None:
    """Configure logging for the whole process.

    Args:
        level: Console level name.
        role: Tag shown in verbose formats (``supervisor`` / ``orchestrator``).
        log_file: Optional log file path (appended to).
        log_file_level: Level for the file handler; defaults to ``level``.
    """
    numeric_level = _parse_level(level)

    if numeric_level <= logging.DEBUG:
        fmt, datefmt = _FMT_DEBUG, _DATEFMT_DEBUG
    elif numeric_level <= logging.INFO:
        fmt, datefmt = _FMT_VERBOSE, _DATEFMT_VERBOSE
    else:
        fmt, datefmt = _FMT_MINIMAL, None

    role_filter = _RoleFilter(role)

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(numeric_level)
    console.setFormatter(logging.Formatter(fmt, datefmt=datefmt))
    console.addFilter(role_filter)

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(console)
    effective_level = numeric_level

    if log_file:
        file_level = _parse_level(log_file_level) if log_file_level else numeric_level
        effective_level = min(effective_level, file_level)

        fh = logging.FileHandler(log_file, encoding="utf-8")
        fh.setLevel(file_level)
        fh.setFormatter(logging.Formatter(_FMT_FILE, datefmt=_DATEFMT_FILE))
        fh.addFilter(role_filter)
        root.addHandler(fh)

    root.setLevel(effective_level)
    logging.raiseExceptions = False


def _parse_level(level: str | None) -> int:
    """Convert a level name to its numeric constant (WARNING if unknown)."""
    if not level:
        return logging.WARNING
    numeric = getattr(logging, level.upper(), None)
    if not isinstance(numeric, int):
        return logging.WARNING
    return numeric
