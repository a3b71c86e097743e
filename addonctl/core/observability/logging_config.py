"""
Logging configuration for addonctl.

The CLI calls ``configure_from_env`` once; every module then just does
``logger = logging.getLogger(__name__)``.  All log output goes to
stderr because stdout carries the ``-- Installed Add-On Package:``
report, which other tooling may parse.

Console level, highest precedence first:
    --debug / --verbose / --quiet  >  ADDONCTL_LOG_LEVEL  >  WARNING

ADDONCTL_LOG_FILE adds a file handler (ADDONCTL_LOG_FILE_LEVEL sets
its level, defaulting to the console level).
"""

from __future__ import annotations

import logging
import os
import sys

ENV_LEVEL = "ADDONCTL_LOG_LEVEL"
ENV_FILE = "ADDONCTL_LOG_FILE"
ENV_FILE_LEVEL = "ADDONCTL_LOG_FILE_LEVEL"

# (max level, format, datefmt), checked top to bottom
_CONSOLE_FORMATS = (
    (logging.DEBUG, "%(asctime)s %(levelname)-5s %(name)s:%(lineno)d — %(message)s", "%H:%M:%S"),
    (logging.INFO, "%(asctime)s %(message)s", "%H:%M:%S"),
)
_WARNING_FORMAT = "%(levelname)s: %(message)s"

_FILE_FORMAT = "%(asctime)s %(levelname)-5s [%(process)d] %(name)s — %(message)s"

# Only chatty when some other library drags them in
_NOISY_LOGGERS = ("urllib3", "charset_normalizer")


def resolve_level(debug: bool = False, verbose: bool = False, quiet: bool = False) -> str:
    """Console level name from CLI flags, else the environment."""
    if debug:
        return "DEBUG"
    if verbose:
        return "INFO"
    if quiet:
        return "ERROR"
    return os.environ.get(ENV_LEVEL, "WARNING")


def configure_from_env(debug: bool = False, verbose: bool = False, quiet: bool = False) -> None:
    """Set up logging from CLI flags plus the ADDONCTL_LOG_* variables."""
    setup_logging(
        level=resolve_level(debug=debug, verbose=verbose, quiet=quiet),
        log_file=os.environ.get(ENV_FILE),
        log_file_level=os.environ.get(ENV_FILE_LEVEL),
        quiet_third_party=not debug,
    )


def setup_logging(
    level: str = "WARNING",
    log_file: str | None = None,
    log_file_level: str | None = None,
    quiet_third_party: bool = True,
) -> None:
    """Replace the root logger's handlers with addonctl's.

    Args:
        level: Console level name.  Unknown names mean WARNING.
        log_file: Also log to this file.
        log_file_level: Level for ``log_file``; the console level if None.
        quiet_third_party: Hold noisy libraries at WARNING below DEBUG.
    """
    console_level = _parse_level(level)
    handlers: list[logging.Handler] = [_console_handler(console_level)]

    if log_file:
        file_level = _parse_level(log_file_level) if log_file_level else console_level
        fh = logging.FileHandler(log_file, encoding="utf-8")
        fh.setLevel(file_level)
        fh.setFormatter(logging.Formatter(_FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        handlers.append(fh)

    root = logging.getLogger()
    root.handlers.clear()
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(min(h.level for h in handlers))

    if quiet_third_party and console_level > logging.DEBUG:
        for name in _NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)

    logging.raiseExceptions = False


def _console_handler(level: int) -> logging.Handler:
    fmt, datefmt = _WARNING_FORMAT, None
    for ceiling, candidate, candidate_datefmt in _CONSOLE_FORMATS:
        if level <= ceiling:
            fmt, datefmt = candidate, candidate_datefmt
            break
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt, datefmt=datefmt))
    return handler


def _parse_level(level: str | None) -> int:
    numeric = getattr(logging, (level or "").upper(), None)
    return numeric if isinstance(numeric, int) else logging.WARNING
