"""
Logging setup for the ``vai`` CLI.

``setup_logging`` runs once, from main.py, after installer.yml has been
loaded.  Modules only ever do ``logger = logging.getLogger(__name__)``.

Console level, highest precedence first:
    --debug / --verbose / --quiet  >  VAI_LOG_LEVEL  >  log_level  >  WARNING

File output goes to VAI_LOG_FILE, else installer.yml ``log_file``, at
VAI_LOG_FILE_LEVEL (default: the console level).
"""

from __future__ import annotations

import logging
import os
import sys

from src.core.models.config import InstallerConfig

LEVEL_ENV_VAR = "VAI_LOG_LEVEL"
FILE_ENV_VAR = "VAI_LOG_FILE"
FILE_LEVEL_ENV_VAR = "VAI_LOG_FILE_LEVEL"

# Console output is plain unless debugging; the file always carries context
_CONSOLE_FMT = "%(message)s"
_DETAIL_FMT = "%(asctime)s %(levelname)-7s %(name)s:%(lineno)d %(message)s"
_DETAIL_DATEFMT = "%Y-%m-%d %H:%M:%S"


def setup_logging(
    flag_level: str | None = None,
    config: InstallerConfig | None = None,
) -> int:
    """Install the console handler and, when configured, a file handler.

    Args:
        flag_level: Level chosen by a CLI flag, if any.
        config: Loaded installer.yml; supplies ``log_level`` and ``log_file``.

    Returns:
        The numeric console level in effect.
    """
    config = config or InstallerConfig()
    console_level = _parse_level(
        flag_level or os.environ.get(LEVEL_ENV_VAR) or config.log_level
    )

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    detailed = console_level <= logging.DEBUG
    console.setFormatter(
        logging.Formatter(_DETAIL_FMT if detailed else _CONSOLE_FMT, datefmt=_DETAIL_DATEFMT)
    )
    handlers: list[logging.Handler] = [console]

    log_file = os.environ.get(FILE_ENV_VAR) or config.log_file
    if log_file:
        file_level_name = os.environ.get(FILE_LEVEL_ENV_VAR)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(_parse_level(file_level_name) if file_level_name else console_level)
        file_handler.setFormatter(logging.Formatter(_DETAIL_FMT, datefmt=_DETAIL_DATEFMT))
        handlers.append(file_handler)

    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(min(h.level for h in handlers))

    logging.raiseExceptions = False
    return console_level


def _parse_level(level: str | None) -> int:
    """Numeric level for a name; unknown or empty names mean WARNING."""
    numeric = logging.getLevelName(level.strip().upper()) if level else None
    return numeric if isinstance(numeric, int) else logging.WARNING
