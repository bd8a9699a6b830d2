"""worktrees-tui logging configuration.

The dashboard owns the terminal, so logs never go to stdout/stderr while the
TUI is running. Records are written to a rotating file under the state
directory (default: ``~/.local/state/worktrees-tui/logs/worktrees-tui.log``).
"""

from __future__ import annotations

import logging
import logging.handlers
import os
from pathlib import Path
from typing import Optional

from worktrees_tui.paths import DEFAULT_LOG_DIR

LOG_LEVEL_ENV = "WORKTREES_TUI_LOG_LEVEL"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
MAX_LOG_BYTES = 5 * 1024 * 1024
BACKUP_COUNT = 3


def setup_logging(level: Optional[str] = None, log_dir: Optional[Path] = None) -> Path:
    """Configure the ``worktrees_tui`` logger.

    Args:
        level: Optional override for ``WORKTREES_TUI_LOG_LEVEL``.
        log_dir: Directory for the log file (defaults to the state directory).

    Returns:
        Path of the log file in use.
    """
    if level:
        os.environ[LOG_LEVEL_ENV] = level
    level_name = os.environ.get(LOG_LEVEL_ENV, "INFO").upper()

    directory = log_dir or DEFAULT_LOG_DIR
    directory.mkdir(parents=True, exist_ok=True)
    log_path = directory / "worktrees-tui.log"

    handler = logging.handlers.RotatingFileHandler(
        log_path,
        maxBytes=MAX_LOG_BYTES,
        backupCount=BACKUP_COUNT,
        encoding="utf-8",
    )
    handler.setFormatter(logging.Formatter(LOG_FORMAT))

    package_logger = logging.getLogger("worktrees_tui")
    package_logger.handlers.clear()
    package_logger.addHandler(handler)
    package_logger.setLevel(getattr(logging, level_name, logging.INFO))
    package_logger.propagate = False
    return log_path
