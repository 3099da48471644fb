"""Tests for settings parsing and logging setup."""

import logging

import pytest

from core.config import Settings, get_settings
from core.logging_config import LOG_FORMAT, configure_logging


def test_defaults(settings):
    assert settings.parser_max_xml_size == 10 * 1024 * 1024
    assert settings.parser_max_file_size == 10 * 1024 * 1024
    assert settings.parser_max_cue_length == 50
    assert settings.log_level == "INFO"


def test_cue_length_from_env(monkeypatch):
    """Read limits from environment variables."""
    monkeypatch.setenv("PARSER_MAX_CUE_LENGTH", "30")
    assert Settings(_env_file=None).parser_max_cue_length == 30


def test_non_positive_limit_rejected(monkeypatch):
    monkeypatch.setenv("PARSER_MAX_XML_SIZE", "0")
    with pytest.raises(ValueError):
        Settings(_env_file=None)


def test_log_level_normalized(monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", " debug ")
    assert Settings(_env_file=None).log_level == "DEBUG"


def test_invalid_log_level_rejected(monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "chatty")
    with pytest.raises(ValueError):
        Settings(_env_file=None)


def test_get_settings_cached():
    assert get_settings() is get_settings()


def test_configure_logging_sets_level(monkeypatch):
    root = logging.getLogger()
    previous = root.level
    calls: list[dict] = []
    monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: calls.append(kwargs))
    try:
        configure_logging(Settings(_env_file=None, log_level="WARNING"))
        assert root.level == logging.WARNING
        assert calls == [{"level": "WARNING", "format": LOG_FORMAT}]
    finally:
        root.setLevel(previous)
