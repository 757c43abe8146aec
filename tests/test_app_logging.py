"""Tests for logging configuration."""

import logging

from nutrition_sync.app_logging import PACKAGE_LOGGER, configure_logging


def test_configure_logging_adds_single_handler() -> None:
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.handlers.clear()

    configure_logging()
    configure_logging()

    assert len(logger.handlers) == 1
    assert logger.propagate is False


def test_configure_logging_follows_latest_level() -> None:
    logger = logging.getLogger(PACKAGE_LOGGER)

    configure_logging("debug")
    assert logger.level == logging.DEBUG

    configure_logging("WARNING")
    assert logger.level == logging.WARNING
    configure_logging()


def test_module_loggers_inherit_package_level() -> None:
    configure_logging("ERROR")
    try:
        child = logging.getLogger("nutrition_sync.services.sync")
        assert child.getEffectiveLevel() == logging.ERROR
    finally:
        configure_logging()
