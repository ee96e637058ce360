"""Tests de Settings (defaults y validadores)."""

import pytest
from pydantic import ValidationError

from staffdesk.crosscutting.config import Settings

pytestmark = pytest.mark.unit


def make_settings(**overrides):
    return Settings(_env_file=None, **overrides)


class TestSettings:
    def test_defaults(self):
        settings = make_settings()

        assert settings.session_default_ttl_seconds == 3600
        assert settings.session_warning_lead_seconds == 300
        assert settings.session_expiring_soon_seconds == 600
        assert settings.retry_max_attempts == 3
        assert settings.local_page_size == 6

    def test_base_url_trailing_slash_is_removed(self):
        assert make_settings(api_base_url="http://api.local/api/").api_base_url == (
            "http://api.local/api"
        )

    def test_ttl_must_be_positive(self):
        with pytest.raises(ValidationError):
            make_settings(session_default_ttl_seconds=0)

    def test_negative_threshold_is_rejected(self):
        with pytest.raises(ValidationError):
            make_settings(session_warning_lead_seconds=-1)

    def test_production_requires_https(self):
        with pytest.raises(ValidationError):
            make_settings(app_env="production", api_base_url="http://api.local")

        settings = make_settings(app_env="production", api_base_url="https://api.local")
        assert settings.is_production() is True

    def test_env_vars_are_read(self, monkeypatch):
        monkeypatch.setenv("RETRY_MAX_ATTEMPTS", "5")

        assert make_settings().retry_max_attempts == 5
