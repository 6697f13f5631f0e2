"""
Logging setup for suite runs.

Everything in the suite logs through ``logging.getLogger(__name__)``; this
module only decides where those records go.  A run writes to the console
and, unless ``LOG_TO_FILE=false``, to two files under the log directory:

- ``combined.log`` -- every record at or above the configured level
- ``error.log`` -- errors only, for a quick look at what broke
"""

from __future__ import annotations

import logging
from pathlib import Path

from hrm_bdd.config import RunConfig

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

LEVELS = {
    "error": logging.ERROR,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "info": logging.INFO,
    "debug": logging.DEBUG,
}

# Marks handlers installed here so repeated calls replace rather than stack.
_HANDLER_FLAG = "_hrm_bdd_handler"


def level_for(name: str) -> int:
    """Translate a ``LOG_LEVEL`` value into a ``logging`` level (default INFO)."""
    return LEVELS.get(name.strip().lower(), logging.INFO)


def configure_logging(run_config: RunConfig) -> logging.Logger:
    """
    Install console and file handlers on the root logger.

    Safe to call more than once: handlers from an earlier call are
    closed and replaced.

    Args:
        run_config: Resolved run settings (level, file logging, log dir).

    Returns:
        The configured root logger.
    """
    root = logging.getLogger()
    level = level_for(run_config.log_level)
    root.setLevel(level)

    for handler in list(root.handlers):
        if getattr(handler, _HANDLER_FLAG, False):
            root.removeHandler(handler)
            handler.close()

    formatter = logging.Formatter(LOG_FORMAT, DATE_FORMAT)

    console = logging.StreamHandler()
    console.setLevel(level)
    console.setFormatter(formatter)
    _install(root, console)

    if run_config.log_to_file:
        log_dir = Path(run_config.log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)

        combined = logging.FileHandler(log_dir / "combined.log", encoding="utf-8")
        combined.setLevel(level)
        combined.setFormatter(formatter)
        _install(root, combined)

        errors = logging.FileHandler(log_dir / "error.log", encoding="utf-8")
        errors.setLevel(logging.ERROR)
        errors.setFormatter(formatter)
        _install(root, errors)

    return root


def _install(root: logging.Logger, handler: logging.Handler) -> None:
    setattr(handler, _HANDLER_FLAG, True)
    root.addHandler(handler)
