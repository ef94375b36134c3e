"""
Unit tests for the settings loader.
"""

from typing import List, Optional
from unittest.mock import patch

import pytest

from services.common.settings import AliasChoices, BaseSettings, Field, SettingsConfigDict
from services.meetings.settings import (
    Settings,
    configure_logging,
    get_settings,
    reset_settings,
)


class SampleSettings(BaseSettings):
    api_url: str = Field(..., validation_alias=AliasChoices("SAMPLE_API_URL", "API_URL"))
    retries: int = Field(default=3, validation_alias=AliasChoices("SAMPLE_RETRIES"))
    debug: bool = Field(default=False)
    ratio: float = Field(default=0.5)
    hosts: List[str] = Field(default=[])
    token: Optional[str] = Field(default=None)

    model_config = SettingsConfigDict(env_file=None, case_sensitive=False)


class TestBaseSettings:
    @pytest.fixture(autouse=True)
    def clean_env(self, monkeypatch):
        for name in (
            "SAMPLE_API_URL",
            "API_URL",
            "SAMPLE_RETRIES",
            "RETRIES",
            "DEBUG",
            "RATIO",
            "HOSTS",
            "TOKEN",
        ):
            monkeypatch.delenv(name, raising=False)
        self.monkeypatch = monkeypatch

    def test_required_field_missing(self):
        with pytest.raises(ValueError, match="api_url"):
            SampleSettings()

    def test_alias_priority(self):
        self.monkeypatch.setenv("API_URL", "http://second")
        assert SampleSettings().api_url == "http://second"

        self.monkeypatch.setenv("SAMPLE_API_URL", "http://first")
        assert SampleSettings().api_url == "http://first"

    def test_type_conversion(self):
        self.monkeypatch.setenv("API_URL", "http://x")
        self.monkeypatch.setenv("SAMPLE_RETRIES", "7")
        self.monkeypatch.setenv("DEBUG", "yes")
        self.monkeypatch.setenv("RATIO", "0.25")
        self.monkeypatch.setenv("HOSTS", "a.example, b.example")
        self.monkeypatch.setenv("TOKEN", "secret")

        settings = SampleSettings()
        assert settings.retries == 7
        assert settings.debug is True
        assert settings.ratio == 0.25
        assert settings.hosts == ["a.example", "b.example"]
        assert settings.token == "secret"

    def test_json_list(self):
        self.monkeypatch.setenv("HOSTS", '["a", "b"]')
        assert SampleSettings(api_url="http://x").hosts == ["a", "b"]

    def test_kwargs_override_environment(self):
        self.monkeypatch.setenv("SAMPLE_RETRIES", "7")
        settings = SampleSettings(api_url="http://x", retries=1)
        assert settings.retries == 1
        assert settings.token is None

    def test_env_file(self, tmp_path):
        env_file = tmp_path / ".env"
        env_file.write_text('# comment\nAPI_URL="http://from-file"\nSAMPLE_RETRIES=9\n')

        class FileSettings(SampleSettings):
            model_config = SettingsConfigDict(env_file=str(env_file))

        settings = FileSettings()
        assert settings.api_url == "http://from-file"
        assert settings.retries == 9


class TestMeetingsSettings:
    def setup_method(self):
        reset_settings()

    def teardown_method(self):
        reset_settings()

    def test_defaults(self, monkeypatch):
        for name in ("ICS_PROD_ID", "ICS_REMINDER_MINUTES", "ICS_MAX_LINE_OCTETS"):
            monkeypatch.delenv(name, raising=False)

        settings = Settings()
        assert settings.ics_prod_id == "-//Linux Foundation//LFX Meeting Service//EN"
        assert settings.ics_reminder_minutes == 10
        assert settings.ics_max_line_octets == 75

    def test_environment_override(self, monkeypatch):
        monkeypatch.setenv("ICS_REMINDER_MINUTES", "15")
        assert Settings().ics_reminder_minutes == 15

    def test_get_settings_is_cached(self):
        first = get_settings()
        assert get_settings() is first
        reset_settings()
        assert get_settings() is not first

    def test_configure_logging_uses_settings(self):
        with patch("services.meetings.settings.setup_service_logging") as setup:
            configure_logging(Settings(log_level="DEBUG", log_format="text"))
        setup.assert_called_once_with(
            service_name="meetings", log_level="DEBUG", log_format="text"
        )
