"""
Logging configuration — set up once by the CLI.

Library code never configures logging; every module just does
``logger = logging.getLogger(__name__)``. The CLI calls
``setup_logging`` with the level picked by ``resolve_level``:

    --debug  >  --verbose  >  --quiet  >  PKGPLAN_LOG_LEVEL  >  WARNING

Compiled scripts go to stdout, so log records always go to stderr.
PKGPLAN_LOG_FILE / PKGPLAN_LOG_FILE_LEVEL add a file handler.
"""

from __future__ import annotations

import logging
import os
import sys
from collections.abc import Mapping

ENV_LEVEL = "PKGPLAN_LOG_LEVEL"
ENV_FILE = "PKGPLAN_LOG_FILE"
ENV_FILE_LEVEL = "PKGPLAN_LOG_FILE_LEVEL"

# ── Formats ─────────────────────────────────────────────────────

# (highest level, format): the first entry the console level fits wins.
_CONSOLE_FORMATS = (
    (logging.DEBUG, "%(asctime)s %(levelname)s %(name)s:%(lineno)d %(message)s"),
    (logging.INFO, "%(asctime)s %(name)s: %(message)s"),
)
_PLAIN_FORMAT = "%(levelname)s: %(message)s"
_FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def resolve_level(
    *,
    debug: bool = False,
    verbose: bool = False,
    quiet: bool = False,
    environ: Mapping[str, str] | None = None,
) -> str:
    """Pick the console level name from CLI flags and the environment."""
    if debug:
        return "DEBUG"
    if verbose:
        return "INFO"
    if quiet:
        return "ERROR"
    env = os.environ if environ is None else environ
    return env.get(ENV_LEVEL, "WARNING")


def _console_format(level: int) -> str:
    for ceiling, fmt in _CONSOLE_FORMATS:
        if level <= ceiling:
            return fmt
    return _PLAIN_FORMAT


def _configured(handler: logging.Handler, level: int, fmt: str, datefmt: str) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt, datefmt=datefmt))
    return handler


def setup_logging(
    level: str = "WARNING",
    log_file: str | None = None,
    log_file_level: str | None = None,
) -> None:
    """Replace the root logger's handlers for the whole process.

    Args:
        level: Console level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_file: Also write records to this file.
        log_file_level: Level for the file; defaults to ``level``.
    """
    console_level = _parse_level(level)
    handlers = [
        _configured(
            logging.StreamHandler(sys.stderr),
            console_level,
            _console_format(console_level),
            "%H:%M:%S",
        ),
    ]
    if log_file:
        handlers.append(_configured(
            logging.FileHandler(log_file, encoding="utf-8"),
            _parse_level(log_file_level or level),
            _FILE_FORMAT,
            "%Y-%m-%dT%H:%M:%S",
        ))

    root = logging.getLogger()
    root.handlers[:] = handlers
    root.setLevel(min(h.level for h in handlers))


def setup_from_env(level: str) -> None:
    """``setup_logging`` with the file handler taken from the environment."""
    setup_logging(
        level=level,
        log_file=os.environ.get(ENV_FILE),
        log_file_level=os.environ.get(ENV_FILE_LEVEL),
    )


def _parse_level(level: str | None) -> int:
    value = logging.getLevelName((level or "").upper())
    return value if isinstance(value, int) else logging.WARNING
