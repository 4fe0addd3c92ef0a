from __future__ import annotations

import logging
import logging.handlers

from rich.console import Console
from rich.logging import RichHandler

from repocache.log import logger, setup_logging


def test_setup_logging_console_levels():
    setup_logging(console=Console(stderr=True))
    handlers = logger.handlers
    assert len(handlers) == 1
    assert isinstance(handlers[0], RichHandler)
    assert handlers[0].level == logging.WARNING

    setup_logging(verbose=True)
    assert len(logger.handlers) == 1
    assert logger.handlers[0].level == logging.DEBUG


def test_setup_logging_writes_log_file(tmp_path):
    log_file = tmp_path / "logs" / "repocache.log"

    setup_logging(log_file=log_file)
    logger.debug("cache check done")
    for handler in logger.handlers:
        handler.flush()

    file_handlers = [
        h for h in logger.handlers if isinstance(h, logging.handlers.RotatingFileHandler)
    ]
    assert len(file_handlers) == 1
    assert "cache check done" in log_file.read_text(encoding="utf-8")

    setup_logging()
    assert not any(
        isinstance(h, logging.handlers.RotatingFileHandler) for h in logger.handlers
    )
