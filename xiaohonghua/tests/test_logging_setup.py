import io
import logging

from xiaohonghua import logging_setup


def test_configure_logging_once(monkeypatch):
    monkeypatch.setattr(logging_setup, "_CONFIGURED", False)
    pkg_logger = logging.getLogger("xiaohonghua")
    saved = (list(pkg_logger.handlers), pkg_logger.level, pkg_logger.propagate)
    stream = io.StringIO()
    try:
        logging_setup.configure_logging("DEBUG", stream=stream)
        logging_setup.configure_logging("ERROR", stream=io.StringIO())
        logging_setup.get_logger("xiaohonghua.test").debug("hello ledger")
        assert "hello ledger" in stream.getvalue()
        assert pkg_logger.level == logging.DEBUG
    finally:
        pkg_logger.handlers[:] = saved[0]
        pkg_logger.setLevel(saved[1])
        pkg_logger.propagate = saved[2]


def test_level_from_environment(monkeypatch):
    monkeypatch.setenv("XIAOHONGHUA_LOG_LEVEL", "warning")
    assert logging_setup._parse_level(None) == logging.WARNING
    assert logging_setup._parse_level("10") == 10


def test_unrecognised_level_falls_back_to_info(monkeypatch):
    monkeypatch.setenv("XIAOHONGHUA_LOG_LEVEL", "verbose")
    assert logging_setup._parse_level(None) == logging.INFO
    assert logging_setup._parse_level("loud") == logging.INFO
