"""Logging configuration for wm-cli.

Console records go through rich on stderr; an optional file handler keeps
DEBUG detail for later inspection.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Optional

from rich.console import Console
from rich.logging import RichHandler

logger = logging.getLogger("wm_cli")


def resolve_level(config: Dict[str, Any], verbose: bool = False, quiet: bool = False) -> int:
    """Pick the console level from CLI flags, falling back to config."""
    if verbose:
        return logging.DEBUG
    if quiet:
        return logging.ERROR
    name = str(config.get("logging", {}).get("level") or "WARNING").upper()
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.WARNING


def setup_logging(
    level: int = logging.WARNING,
    log_file: Optional[Path] = None,
    console: Optional[Console] = None,
) -> logging.Logger:
    """Configure the ``wm_cli`` logger.

    Args:
        level: Level for console output.
        log_file: Optional file receiving DEBUG and above.
        console: Console to render records on; defaults to stderr.

    Returns:
        Configured logger.
    """
    logger.handlers.clear()
    logger.setLevel(logging.DEBUG)
    logger.propagate = False

    console_handler = RichHandler(
        console=console or Console(stderr=True),
        show_time=False,
        show_path=False,
        markup=False,
    )
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(console_handler)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(
            logging.Formatter(
                "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
        logger.addHandler(file_handler)

    logger.debug("Logging initialized at level %s", logging.getLevelName(level))
    return logger
