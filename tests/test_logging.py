"""Logger hierarchy and level selection."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from screenflow.logging import LEVEL_ENV_VAR, configure_logging, get_logger, resolve_level


@pytest.mark.parametrize(
    ("verbose", "quiet", "env", "expected"),
    [
        (False, False, {}, logging.INFO),
        (True, False, {}, logging.DEBUG),
        (False, True, {}, logging.WARNING),
        (True, True, {}, logging.DEBUG),
        (False, False, {LEVEL_ENV_VAR: "error"}, logging.ERROR),
        (False, False, {LEVEL_ENV_VAR: "chatty"}, logging.INFO),
        (False, True, {LEVEL_ENV_VAR: "debug"}, logging.WARNING),
    ],
)
def test_resolve_level(verbose: bool, quiet: bool, env: dict[str, str], expected: int) -> None:
    assert resolve_level(verbose=verbose, quiet=quiet, environ=env) == expected


def test_get_logger_nests_under_package() -> None:
    assert get_logger("orchestrator").name == "screenflow.orchestrator"
    assert get_logger().name == "screenflow"


def test_configure_logging_replaces_handlers(tmp_path: Path) -> None:
    log_file = tmp_path / "run.log"

    configure_logging(environ={})
    logger = configure_logging(quiet=True, log_file=log_file, environ={})

    try:
        assert logger.level == logging.WARNING
        assert len(logger.handlers) == 2
        get_logger("test").warning("disk almost full")
    finally:
        configure_logging(environ={})

    assert "WARNING screenflow.test: disk almost full" in log_file.read_text(encoding="utf-8")
    assert len(logging.getLogger("screenflow").handlers) == 1
