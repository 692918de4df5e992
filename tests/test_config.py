"""Unit tests for settings and logging helpers."""

import io
import logging

import pytest

from chartpatterns.config import Settings, get_logger, setup_logging
from chartpatterns.config.logging import HANDLER_NAME


@pytest.fixture
def package_logger():
    """Restore the chartpatterns logger after each test."""
    logger = logging.getLogger("chartpatterns")
    handlers, level = list(logger.handlers), logger.level
    yield logger
    logger.handlers = handlers
    logger.setLevel(level)


class TestSetupLogging:

    def test_format_is_applied(self, package_logger):
        buf = io.StringIO()

        setup_logging("debug", stream=buf)
        get_logger("features.triangles").debug("3 distinct windows")

        line = buf.getvalue().strip()
        assert line.endswith("| DEBUG    | chartpatterns.features.triangles | 3 distinct windows")
        assert package_logger.level == logging.DEBUG

    def test_level_filters_records(self, package_logger):
        buf = io.StringIO()

        setup_logging("WARNING", stream=buf)
        get_logger("features.patterns").info("not shown")

        assert buf.getvalue() == ""

    def test_repeated_setup_keeps_one_handler(self, package_logger):
        setup_logging("INFO", stream=io.StringIO())
        setup_logging("INFO", stream=io.StringIO())

        named = [h for h in package_logger.handlers if h.get_name() == HANDLER_NAME]
        assert len(named) == 1

    def test_root_logger_is_untouched(self, package_logger):
        root_handlers = list(logging.getLogger().handlers)

        setup_logging("INFO", stream=io.StringIO())

        assert logging.getLogger().handlers == root_handlers


class TestSettings:

    def test_defaults(self):
        settings = Settings()

        assert settings.DEFAULT_LOOKBACK_PERIOD == 60
        assert settings.DEFAULT_MIN_CONFIDENCE == 0.6
        assert settings.EXTREMA_RADIUS == 5

    def test_invalid_env_value_fails(self, monkeypatch):
        monkeypatch.setenv("CHARTPATTERNS_EXTREMA_RADIUS", "0")

        with pytest.raises(ValueError):
            Settings()
