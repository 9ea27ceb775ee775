"""Tests for core.logging_config."""

import logging

import pytest

from core.logging_config import APP_LOGGER_NAME, get_logger, setup_logging


@pytest.fixture(autouse=True)
def _reset_loggers():
    yield
    for name in (APP_LOGGER_NAME, "core", "chunking", "vector_store", "chat_archive", "retrieval"):
        logger = logging.getLogger(name)
        logger.handlers.clear()
        logger.propagate = True
        logger.setLevel(logging.NOTSET)


class TestSetupLogging:
    def test_returns_app_logger(self):
        logger = setup_logging(level=logging.DEBUG)
        assert logger.name == APP_LOGGER_NAME
        assert logger.level == logging.DEBUG
        assert len(logger.handlers) == 1

    def test_no_duplicate_handlers(self):
        setup_logging()
        logger = setup_logging()
        assert len(logger.handlers) == 1

    def test_package_loggers_share_handlers(self, tmp_path):
        log_file = tmp_path / "rag.log"
        app_logger = setup_logging(log_file=log_file)

        store_logger = logging.getLogger("vector_store.store")
        store_logger.info("Opened vector store")
        for handler in app_logger.handlers:
            handler.flush()

        assert "Opened vector store" in log_file.read_text(encoding="utf-8")
        assert logging.getLogger("vector_store").propagate is False

    def test_custom_format(self, tmp_path):
        log_file = tmp_path / "rag.log"
        setup_logging(log_file=log_file, format_string="%(levelname)s|%(message)s")
        logging.getLogger("retrieval.service").warning("careful")
        for handler in logging.getLogger(APP_LOGGER_NAME).handlers:
            handler.flush()
        assert "WARNING|careful" in log_file.read_text(encoding="utf-8")


class TestGetLogger:
    def test_namespaced(self):
        assert get_logger("ingest").name == f"{APP_LOGGER_NAME}.ingest"
