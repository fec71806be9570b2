"""Tests for the logging setup of the fluentxlsx package."""

import logging
import logging.handlers
import os
from unittest import mock

import pytest

import fluentxlsx
from fluentxlsx import setup_logging


@pytest.fixture
def package_logger():
    """Restore handlers and level of the package logger after the test."""
    pkg_logger = logging.getLogger("fluentxlsx")
    handlers = list(pkg_logger.handlers)
    level = pkg_logger.level
    yield pkg_logger
    for handler in pkg_logger.handlers:
        if handler not in handlers:
            pkg_logger.removeHandler(handler)
            handler.close()
    pkg_logger.setLevel(level)


def test_default_level(package_logger):
    with mock.patch.dict(os.environ, {}, clear=True):
        assert setup_logging() is None
    assert package_logger.level == logging.INFO


@mock.patch.dict(os.environ, {"LOGLEVEL": "debug"})
def test_loglevel_env_overrides_argument(package_logger):
    setup_logging(logging.WARNING)
    assert package_logger.level == logging.DEBUG


@mock.patch.dict(os.environ, {"LOGLEVEL": "VERBOSE"})
def test_unknown_loglevel_env_is_ignored(package_logger):
    setup_logging(logging.ERROR)
    assert package_logger.level == logging.ERROR


@pytest.mark.parametrize(
    ("requested", "expected"),
    [(-5, logging.NOTSET), (99, logging.FATAL)],
)
def test_loglevel_is_clamped(package_logger, requested, expected):
    with mock.patch.dict(os.environ, {}, clear=True):
        setup_logging(requested)
    assert package_logger.level == expected


@mock.patch.dict(os.environ, {"LOGLEVEL": "DEBUG"})
def test_logfile_receives_module_records(package_logger, tmp_path):
    logfile = tmp_path / "fluentxlsx.log"
    fh = setup_logging(logfile=logfile)

    assert isinstance(fh, logging.handlers.RotatingFileHandler)
    assert fh in package_logger.handlers
    assert fh.baseFilename == os.path.abspath(logfile)
    assert fh.maxBytes == 100000
    assert fh.backupCount == 5
    assert fh.level == logging.DEBUG

    logging.getLogger("fluentxlsx.xlsx_fluent").debug("Auto index %d assigned", 3)
    fh.flush()
    line = logfile.read_text(encoding="utf-8").strip()
    assert "fluentxlsx.xlsx_fluent" in line
    assert line.endswith("|DEBUG   |Auto index 3 assigned")


def test_repeated_setup_reuses_file_handler(package_logger, tmp_path):
    logfile = tmp_path / "fluentxlsx.log"
    with mock.patch.dict(os.environ, {}, clear=True):
        first = setup_logging(logfile=logfile)
        second = setup_logging(logging.WARNING, logfile=logfile)

    assert first is second
    assert second.level == logging.WARNING
    file_handlers = [
        h
        for h in package_logger.handlers
        if isinstance(h, logging.handlers.RotatingFileHandler)
    ]
    assert file_handlers == [first]


def test_package_logger_is_used():
    assert fluentxlsx.logger is logging.getLogger("fluentxlsx")
