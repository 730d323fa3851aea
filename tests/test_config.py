"""
Tests for settings and Firebase credential resolution.
"""
import pytest

from campus_admin.core import firebase
from campus_admin.core.config import Settings

@pytest.fixture
def no_credentials(monkeypatch):
    for name in (
        "FIREBASE_CREDENTIALS_JSON",
        "FIREBASE_CREDENTIALS_PATH",
        "FIREBASE_PROJECT_ID",
        "FIREBASE_CLIENT_EMAIL",
        "FIREBASE_PRIVATE_KEY",
    ):
        monkeypatch.setattr(firebase.settings, name, None)

def test_defaults():
    settings = Settings()

    assert settings.RATE_LIMIT_BAN == "20/minute"
    assert settings.RATE_LIMIT_PROMOTE == "10/hour"
    assert settings.RATE_LIMIT_SUSPEND == "5/hour"
    assert settings.AUDIT_LOG_DEFAULT_DAYS == 30

def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("RATE_LIMIT_BAN", "3/minute")
    monkeypatch.setenv("ENVIRONMENT", "production")

    settings = Settings()

    assert settings.RATE_LIMIT_BAN == "3/minute"
    assert settings.is_production is True

def test_no_credentials_configured(no_credentials):
    assert firebase.load_credentials() is None

def test_malformed_credentials_json(no_credentials, monkeypatch):
    monkeypatch.setattr(firebase.settings, "FIREBASE_CREDENTIALS_JSON", "{not json")

    with pytest.raises(ValueError, match="not valid JSON"):
        firebase.load_credentials()

def test_missing_credentials_file(no_credentials, monkeypatch, tmp_path):
    monkeypatch.setattr(firebase.settings, "FIREBASE_CREDENTIALS_PATH", str(tmp_path / "missing.json"))

    with pytest.raises(ValueError, match="not found"):
        firebase.load_credentials()

def test_service_account_from_individual_vars(no_credentials, monkeypatch):
    monkeypatch.setattr(firebase.settings, "FIREBASE_PROJECT_ID", "campus-dev")
    monkeypatch.setattr(firebase.settings, "FIREBASE_CLIENT_EMAIL", "svc@campus-dev.iam.gserviceaccount.com")
    monkeypatch.setattr(firebase.settings, "FIREBASE_PRIVATE_KEY", "line1\\nline2")

    account = firebase._service_account_from_env()

    assert account["project_id"] == "campus-dev"
    assert account["private_key"] == "line1\nline2"
