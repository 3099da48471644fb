"""Pytest configuration and fixtures."""

from typing import Generator

import pytest

from core.config import Settings, get_settings


@pytest.fixture(autouse=True)
def clear_settings_cache() -> Generator[None, None, None]:
    """Make every test see settings built from its own environment."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def settings() -> Settings:
    """Default settings, isolated from any local .env file."""
    return Settings(_env_file=None)


@pytest.fixture
def office_scene() -> str:
    """The two-speaker Fountain scene used across several tests."""
    return (
        "INT. OFFICE - DAY\n"
        "\n"
        "JOHN\n"
        "Hello there.\n"
        "\n"
        "MARY\n"
        "Hi John.\n"
    )
