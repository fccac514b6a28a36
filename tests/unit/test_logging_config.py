import logging

import pytest

from gliderecord.logging_config import configure_logging, level_from_env


def test_explicit_level_is_applied(caplog):
    logger = logging.getLogger("gliderecord.record")

    assert configure_logging(logging.INFO) == logging.INFO
    logger.info("query-done")
    assert any("query-done" in rec.message for rec in caplog.records)

    caplog.clear()
    configure_logging(logging.WARNING)
    logger.info("hidden")
    assert not any("hidden" in rec.message for rec in caplog.records)


def test_default_level_is_warning():
    assert configure_logging(None) == logging.WARNING
    assert logging.getLogger().level == logging.WARNING


@pytest.mark.parametrize(
    "raw, expected",
    [("DEBUG", logging.DEBUG), ("info", logging.INFO), ("30", 30), ("chatty", logging.WARNING)],
)
def test_level_from_env(monkeypatch, raw, expected):
    monkeypatch.setenv("GLIDE_LOG_LEVEL", raw)
    assert level_from_env() == expected


def test_env_level_used_when_no_flag(monkeypatch):
    monkeypatch.setenv("GLIDE_LOG_LEVEL", "debug")
    assert configure_logging(None) == logging.DEBUG


def test_flag_wins_over_env(monkeypatch):
    monkeypatch.setenv("GLIDE_LOG_LEVEL", "debug")
    assert configure_logging(logging.INFO) == logging.INFO


def test_urllib3_is_quieted():
    configure_logging(logging.DEBUG)
    assert logging.getLogger("urllib3.connection").level == logging.ERROR
    assert logging.getLogger("urllib3.connectionpool").level == logging.ERROR
