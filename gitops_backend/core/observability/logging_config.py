"""
Logging configuration — one setup call per process.

Called by the CLI before any command runs. Modules log through
``logging.getLogger(__name__)`` and inherit this setup.

Levels are resolved in precedence order:
    CLI flag  >  GITOPS_LOG_LEVEL env var  >  WARNING (default)

Optional file output via GITOPS_LOG_FILE / GITOPS_LOG_FILE_LEVEL.
"""

from __future__ import annotations

import logging
import os
import sys
from collections.abc import Mapping

ENV_LEVEL = "GITOPS_LOG_LEVEL"
ENV_FILE = "GITOPS_LOG_FILE"
ENV_FILE_LEVEL = "GITOPS_LOG_FILE_LEVEL"

DEFAULT_LEVEL = "WARNING"

# Console format per level threshold, most verbose first. Anything
# above INFO prints the bare message.
_CONSOLE_FORMATS: tuple[tuple[int, str, str], ...] = (
    (logging.DEBUG, "%(asctime)s %(levelname)-5s %(name)s:%(lineno)d - %(message)s", "%H:%M:%S"),
    (logging.INFO, "%(asctime)s [%(name)s] %(message)s", "%H:%M:%S"),
)

_FILE_FORMAT = "%(asctime)s %(levelname)-5s %(name)s:%(lineno)d - %(message)s"
_FILE_DATEFMT = "%Y-%m-%d %H:%M:%S"

# Werkzeug logs every request at INFO
_NOISY_LOGGERS = ("werkzeug", "urllib3")


def configure_from_env(
    flag_level: str | None = None,
    environ: Mapping[str, str] | None = None,
    quiet_third_party: bool = True,
) -> int:
    """Set up logging from a CLI flag level and ``GITOPS_LOG_*`` variables.

    Returns the root logger's effective level.
    """
    env = os.environ if environ is None else environ
    return setup_logging(
        flag_level or env.get(ENV_LEVEL) or DEFAULT_LEVEL,
        log_file=env.get(ENV_FILE) or None,
        log_file_level=env.get(ENV_FILE_LEVEL) or None,
        quiet_third_party=quiet_third_party,
    )


def setup_logging(
    level: str = DEFAULT_LEVEL,
    log_file: str | None = None,
    log_file_level: str | None = None,
    quiet_third_party: bool = True,
) -> int:
    """Replace the root logger's handlers.

    Args:
        level: Console level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_file: Optional path to a log file.
        log_file_level: Level for the file; defaults to ``level``.
        quiet_third_party: Hold noisy third-party loggers at WARNING
            unless the console runs at DEBUG.

    Returns:
        The root logger's level: the lower of the console and file levels.
    """
    console_level = level_number(level)
    handlers: list[logging.Handler] = [_console_handler(console_level)]

    if log_file:
        file_level = level_number(log_file_level or level)
        handlers.append(_file_handler(log_file, file_level))

    root = logging.getLogger()
    root.handlers[:] = handlers
    root.setLevel(min(h.level for h in handlers))

    if quiet_third_party and console_level > logging.DEBUG:
        for name in _NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)

    logging.raiseExceptions = False
    return root.level


def level_number(name: str | None) -> int:
    """Level name to its numeric value; unknown or empty names mean WARNING."""
    value = logging.getLevelName((name or "").upper())
    return value if isinstance(value, int) else logging.WARNING


def _console_handler(level: int) -> logging.Handler:
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    for threshold, fmt, datefmt in _CONSOLE_FORMATS:
        if level <= threshold:
            handler.setFormatter(logging.Formatter(fmt, datefmt=datefmt))
            break
    else:
        handler.setFormatter(logging.Formatter("%(message)s"))
    return handler


def _file_handler(path: str, level: int) -> logging.Handler:
    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(_FILE_FORMAT, datefmt=_FILE_DATEFMT))
    return handler
