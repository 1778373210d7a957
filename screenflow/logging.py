"""Logging setup shared by the analysis core and the CLI."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Mapping

_LOGGER_NAME = "screenflow"
LEVEL_ENV_VAR = "SCREENFLOW_LOG_LEVEL"

_CONSOLE_FORMAT = "[screenflow] %(levelname)s %(message)s"
_FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a module-scoped logger under the screenflow hierarchy."""
    full_name = f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME
    return logging.getLogger(full_name)


def resolve_level(
    *, verbose: bool = False, quiet: bool = False, environ: Mapping[str, str] | None = None
) -> int:
    """Pick the console level.

    ``--verbose`` wins over ``--quiet``. Without either flag a valid level name
    in ``SCREENFLOW_LOG_LEVEL`` is used, and INFO otherwise.
    """
    if verbose:
        return logging.DEBUG
    if quiet:
        return logging.WARNING
    env = os.environ if environ is None else environ
    name = env.get(LEVEL_ENV_VAR, "").strip().upper()
    level = logging.getLevelName(name) if name else None
    return level if isinstance(level, int) else logging.INFO


def configure_logging(
    *,
    verbose: bool = False,
    quiet: bool = False,
    log_file: Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> logging.Logger:
    """Install console and optional file handlers on the screenflow logger."""
    level = resolve_level(verbose=verbose, quiet=quiet, environ=environ)
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    # Repeated CLI invocations in one process must not stack handlers.
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    stream_handler = logging.StreamHandler()
    stream_handler.setLevel(level)
    stream_handler.setFormatter(logging.Formatter(_CONSOLE_FORMAT))
    logger.addHandler(stream_handler)

    if log_file is not None:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(logging.Formatter(_FILE_FORMAT))
        logger.addHandler(file_handler)

    return logger


__all__ = ["LEVEL_ENV_VAR", "configure_logging", "get_logger", "resolve_level"]
