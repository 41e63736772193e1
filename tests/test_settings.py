"""Tests for runtime settings resolution."""

from __future__ import annotations

import pytest

from librarian.settings import (
    DEFAULT_MAX_LIMIT,
    DEFAULT_PAGE_LIMIT,
    DEFAULT_PROVIDER_TIMEOUT,
    Settings,
    load_settings,
)


def test_load_settings_defaults() -> None:
    """Fall back to defaults when nothing is configured."""
    settings = load_settings({})

    assert settings == Settings()
    assert settings.provider_timeout == DEFAULT_PROVIDER_TIMEOUT
    assert settings.default_limit == DEFAULT_PAGE_LIMIT
    assert settings.max_limit == DEFAULT_MAX_LIMIT
    assert settings.credential_for("core") is None


def test_load_settings_reads_values() -> None:
    """Read database, logging, timing and paging values."""
    settings = load_settings({
        "DATABASE_URL": "postgresql+psycopg://localhost/library",
        "LIBRARIAN_LOG_LEVEL": "debug",
        "LIBRARIAN_PROVIDER_TIMEOUT": "2.5",
        "LIBRARIAN_DEFAULT_LIMIT": "10",
        "LIBRARIAN_MAX_LIMIT": "50",
    })

    assert settings.database_url == "postgresql+psycopg://localhost/library"
    assert settings.log_level == "debug"
    assert settings.provider_timeout == pytest.approx(2.5)
    assert settings.default_limit == 10
    assert settings.max_limit == 50


@pytest.mark.parametrize(
    "raw_value",
    ["soon", "0", "-3", "   "],
)
def test_invalid_timeout_uses_default(raw_value: str) -> None:
    """Replace unusable timeouts with the default."""
    settings = load_settings({"LIBRARIAN_PROVIDER_TIMEOUT": raw_value})

    assert settings.provider_timeout == DEFAULT_PROVIDER_TIMEOUT


def test_default_limit_never_exceeds_maximum() -> None:
    """Clamp the default page size to the maximum page size."""
    settings = load_settings({
        "LIBRARIAN_DEFAULT_LIMIT": "40",
        "LIBRARIAN_MAX_LIMIT": "25",
    })

    assert settings.default_limit == 25


def test_blank_credentials_are_ignored() -> None:
    """Only keep non-blank provider credentials."""
    settings = load_settings({
        "GOOGLE_BOOKS_API_KEY": "  ",
        "CORE_API_KEY": " core-key ",
    })

    assert settings.provider_credentials == {"core": "core-key"}
    assert settings.credential_for("googleBooks") is None
