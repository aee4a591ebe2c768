"""Tests for logging setup."""

import logging

import pytest

from serum_client.logging_config import TECHNICAL_FORMAT, setup_logging


@pytest.fixture(autouse=True)
def restore_root_logger():
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    for handler in list(root.handlers):
        if handler not in handlers:
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)


def _managed(root):
    return [handler for handler in root.handlers if getattr(handler, "_serum_client_managed", False)]


def test_setup_logging_is_idempotent():
    setup_logging(logging.DEBUG)
    setup_logging(logging.DEBUG)

    root = logging.getLogger()
    assert len(_managed(root)) == 1
    assert root.level == logging.DEBUG
    assert _managed(root)[0].formatter._fmt == TECHNICAL_FORMAT


def test_file_handler(tmp_path):
    log_file = tmp_path / "logs" / "serum.log"

    setup_logging(log_file=log_file)
    logging.getLogger("serum_client.test").warning("hello file")
    for handler in _managed(logging.getLogger()):
        handler.flush()

    assert "hello file" in log_file.read_text()


def test_quiets_transport_loggers():
    logging.getLogger("websockets").setLevel(logging.DEBUG)

    setup_logging(logging.DEBUG)

    assert logging.getLogger("websockets").level == logging.WARNING
    assert logging.getLogger("aiohttp").level == logging.WARNING
