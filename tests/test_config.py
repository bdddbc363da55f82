"""
Unit tests for configuration module.
"""
import pytest
from pydantic import ValidationError

from core.config import Settings, get_settings, reset_settings


def test_settings_defaults():
    """Test default configuration values."""
    settings = get_settings()
    assert settings.app_name == "XML Batch Converter"
    assert settings.host == "0.0.0.0"
    assert settings.port == 8000
    assert settings.log_level == "INFO"
    assert settings.remote_url == "https://localhost:44357/api/account/processXml"
    assert settings.remote_content_type == "application/xml"
    assert settings.remote_timeout == 5.0
    assert settings.remote_max_attempts == 1
    assert settings.repeating_types == ["IbanHesap", "Details"]
    assert settings.scalar_sections == ["Parameters", "Header"]


def test_settings_creates_storage_directory(tmp_path):
    """Test storage directory is created on first access."""
    settings = get_settings()
    assert (tmp_path / "files").is_dir()
    assert settings.temp_storage_path == str(tmp_path / "files")


def test_settings_validation_port(monkeypatch):
    """Test port validation."""
    monkeypatch.setenv("PORT", "99999")
    reset_settings()
    with pytest.raises(ValidationError):
        get_settings()


def test_settings_validation_log_level(monkeypatch):
    """Test log level validation."""
    monkeypatch.setenv("LOG_LEVEL", "INVALID")
    reset_settings()
    with pytest.raises(ValidationError):
        get_settings()


def test_settings_log_level_is_uppercased(monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "debug")
    assert get_settings().log_level == "DEBUG"


def test_settings_remote_timeout_from_env(monkeypatch):
    """Test the remote deadline is tunable."""
    monkeypatch.setenv("REMOTE_TIMEOUT", "2.5")
    assert get_settings().remote_timeout == 2.5


@pytest.mark.parametrize("timeout", [0, -1, 301])
def test_settings_validation_remote_timeout(timeout):
    with pytest.raises(ValidationError):
        Settings(remote_timeout=timeout)


def test_settings_validation_max_attempts():
    with pytest.raises(ValidationError):
        Settings(remote_max_attempts=0)


def test_settings_repeating_types_from_env(monkeypatch):
    """Test comma separated type lists are split and trimmed."""
    monkeypatch.setenv("REPEATING_TYPES", "Accounts, Lines ,")
    assert get_settings().repeating_types == ["Accounts", "Lines"]


def test_settings_validation_scalar_sections(monkeypatch):
    monkeypatch.setenv("SCALAR_SECTIONS", "Parameters")
    with pytest.raises(ValidationError):
        get_settings()


def test_settings_validation_empty_repeating_types(monkeypatch):
    monkeypatch.setenv("REPEATING_TYPES", " , ")
    with pytest.raises(ValidationError):
        get_settings()


def test_settings_singleton():
    """Test settings singleton behavior."""
    settings1 = get_settings()
    settings2 = get_settings()
    assert settings1 is settings2
