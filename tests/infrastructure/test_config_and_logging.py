"""Tests for settings loading and logging setup."""

import logging
from pathlib import Path

import pydantic
import pytest

from ims.infrastructure.config import Settings
from ims.infrastructure.logging_config import ROOT_LOGGER, get_logger, setup_logging


class TestSettings:

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("IMS_DATA_DIR", raising=False)
        settings = Settings(_env_file=None)
        assert settings.currency == "INR"
        assert settings.expiry_window_days == 30
        assert settings.default_valuation_method == "fifo"
        assert settings.data_dir == Path("data")

    def test_environment_overrides(self, monkeypatch, tmp_path):
        monkeypatch.setenv("IMS_DATA_DIR", str(tmp_path))
        monkeypatch.setenv("IMS_DEFAULT_VALUATION_METHOD", "LIFO")
        monkeypatch.setenv("IMS_EXPIRY_WINDOW_DAYS", "7")
        settings = Settings(_env_file=None)
        assert settings.data_dir == tmp_path
        assert settings.default_valuation_method == "lifo"
        assert settings.expiry_window_days == 7

    def test_unknown_valuation_method_rejected(self, monkeypatch):
        monkeypatch.setenv("IMS_DEFAULT_VALUATION_METHOD", "average")
        with pytest.raises(pydantic.ValidationError):
            Settings(_env_file=None)


class TestLogging:

    @pytest.fixture(autouse=True)
    def _clean_logger(self):
        logger = logging.getLogger(ROOT_LOGGER)
        saved = list(logger.handlers)
        logger.handlers.clear()
        yield
        for handler in logger.handlers:
            handler.close()
        logger.handlers[:] = saved

    def test_setup_is_idempotent(self):
        logger = setup_logging("DEBUG")
        count = len(logger.handlers)
        setup_logging("DEBUG")
        assert len(logger.handlers) == count
        assert logger.level == logging.DEBUG

    def test_file_handler_writes(self, tmp_path):
        log_file = tmp_path / "logs" / "ims.log"
        setup_logging("INFO", log_file)
        get_logger("tests").info("hello stores")
        for handler in logging.getLogger(ROOT_LOGGER).handlers:
            handler.flush()
        assert "hello stores" in log_file.read_text()
