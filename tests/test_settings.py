"""Tests for settings and configuration."""

import logging

import pytest
from pydantic import ValidationError

from src.models.settings import Settings


def test_settings_defaults(monkeypatch):
    """Test that settings have proper default values."""
    for name in ("DEBUG", "LOG_LEVEL", "TOC_STRATEGY", "TOC_ROWS_PER_PAGE", "FONTS_DIR"):
        monkeypatch.delenv(name, raising=False)

    settings = Settings(_env_file=None)
    assert settings.debug is False
    assert settings.log_level == "INFO"
    assert settings.toc_strategy == "measured"
    assert settings.toc_rows_per_page == 25
    assert settings.min_image_bytes == 500
    assert settings.fonts_dir is None
    assert settings.report_filename == "IT-Park-Bulletin.pdf"


def test_settings_from_env(monkeypatch):
    """Test that settings are loaded from environment variables."""
    monkeypatch.setenv("TOC_STRATEGY", "estimate")
    monkeypatch.setenv("PAGE_TIMEOUT", "6.5")
    monkeypatch.setenv("LOG_LEVEL", "DEBUG")

    settings = Settings(_env_file=None)
    assert settings.toc_strategy == "estimate"
    assert settings.page_timeout == 6.5
    assert settings.log_level == "DEBUG"


def test_settings_case_insensitive(monkeypatch):
    """Test that environment variable names are case insensitive."""
    monkeypatch.setenv("city", "Astana")
    monkeypatch.setenv("ORGANIZATION", "Analytics Office")

    settings = Settings(_env_file=None)
    assert settings.city == "Astana"
    assert settings.organization == "Analytics Office"


def test_settings_reject_unknown_toc_strategy():
    with pytest.raises(ValidationError):
        Settings(_env_file=None, toc_strategy="guess")


@pytest.mark.parametrize(
    "field,value",
    [("redirect_timeout", 0.5), ("page_timeout", 60), ("toc_rows_per_page", 0)],
)
def test_settings_bounds(field, value):
    """Timeouts and row estimates are range checked."""
    with pytest.raises(ValidationError):
        Settings(_env_file=None, **{field: value})


def test_settings_missing_assets_fall_back(tmp_path):
    """Missing asset paths are accepted; the renderer falls back."""
    settings = Settings(
        _env_file=None, fonts_dir=tmp_path / "nope", logo_path=tmp_path / "logo.png"
    )
    assert settings.fonts_dir == tmp_path / "nope"


def test_log_level_is_normalised(monkeypatch):
    monkeypatch.delenv("DEBUG", raising=False)
    settings = Settings(_env_file=None, log_level=" warning ")
    assert settings.log_level == "WARNING"
    assert settings.logging_level == logging.WARNING


def test_debug_forces_debug_logging():
    settings = Settings(_env_file=None, debug=True, log_level="ERROR")
    assert settings.logging_level == logging.DEBUG


def test_unknown_log_level_rejected():
    with pytest.raises(ValidationError):
        Settings(_env_file=None, log_level="LOUD")
