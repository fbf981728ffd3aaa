"""Tests for the logging setup."""
import logging
from collections.abc import Generator

import pytest

from core.logging import LOG_FORMAT, configure_logging


@pytest.fixture
def restore_root_logger() -> Generator[logging.Logger]:
    """Put the root logger back the way pytest configured it."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)


def test__configure_logging__sets_level_and_format(restore_root_logger: logging.Logger) -> None:
    configure_logging("debug")

    assert restore_root_logger.level == logging.DEBUG
    assert restore_root_logger.handlers[0].formatter._fmt == LOG_FORMAT


def test__configure_logging__quiets_uvicorn_access(restore_root_logger: logging.Logger) -> None:  # noqa: ARG001
    configure_logging()

    assert logging.getLogger("uvicorn.access").level == logging.WARNING
