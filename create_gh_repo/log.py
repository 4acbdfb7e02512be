"""Logging helpers shared by the CLI and library modules."""

from __future__ import annotations

import logging
import os
import sys

ROOT_LOGGER = "create_gh_repo"
LEVEL_ENV = "CREATE_GH_REPO_LOG_LEVEL"


def _resolve_level() -> int:
    raw = os.environ.get(LEVEL_ENV, "").strip().upper()
    if raw:
        level = logging.getLevelName(raw)
        if isinstance(level, int):
            return level
    return logging.INFO


def configure_logging(*, quiet: bool = False, verbose: bool = False) -> None:
    """Set the package logger level from CLI flags. --quiet/--verbose override the env."""
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.WARNING
    else:
        level = _resolve_level()
    root = logging.getLogger(ROOT_LOGGER)
    root.setLevel(level)
    if not root.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter("%(message)s"))
        root.addHandler(handler)


def get_logger(name: str) -> logging.Logger:
    """Return a child of the package logger; handlers live on the package root."""
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")
