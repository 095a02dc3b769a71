"""
Smoke tests de configuración.
"""
import pytest
from pydantic import ValidationError

from printer_repair.core.config import Settings, get_settings, reload_settings


def test_defaults():
    settings = Settings(_env_file=None)

    assert settings.environment == "development"
    assert settings.timezone == "America/Bogota"
    assert settings.uses_sqlite
    assert settings.log_file is None


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("BUSINESS_TITLE", "Impresoras del Norte")
    monkeypatch.setenv("LOGO_SOURCE", "https://example.com/logo.png")

    settings = Settings(_env_file=None)

    assert settings.business_title == "Impresoras del Norte"
    assert settings.logo_source == "https://example.com/logo.png"


def test_blank_logo_source_disables_logo(monkeypatch):
    monkeypatch.setenv("LOGO_SOURCE", "   ")

    assert Settings(_env_file=None).logo_source is None


def test_invalid_database_url():
    with pytest.raises(ValidationError):
        Settings(_env_file=None, database_url="mysql://localhost/db")


def test_unknown_timezone_is_rejected():
    with pytest.raises(ValidationError):
        Settings(_env_file=None, timezone="Mars/Olympus")


def test_debug_forbidden_in_production():
    with pytest.raises(ValidationError):
        Settings(_env_file=None, environment="production", debug=True)


def test_log_file_inside_logs_dir(tmp_path):
    settings = Settings(_env_file=None, logs_dir=tmp_path)

    assert settings.log_file == tmp_path / "printer_repair.log"


def test_reload_settings_returns_new_instance():
    first = get_settings()

    assert reload_settings() is not first
