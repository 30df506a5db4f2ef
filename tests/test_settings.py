"""Tests for settings resolution."""

import pytest
from pydantic import ValidationError

from wherefilter.settings import Settings, load_settings


class TestLoadSettings:
    def test_defaults(self):
        settings = load_settings(env={})
        assert settings == Settings()
        assert settings.max_query_length == 4096
        assert settings.percent_decode is False
        assert settings.log_level == "WARNING"

    def test_environment(self):
        settings = load_settings(
            env={
                "WHEREFILTER_MAX_QUERY_LENGTH": "128",
                "WHEREFILTER_PERCENT_DECODE": "true",
                "WHEREFILTER_LOG_LEVEL": "DEBUG",
                "OTHER_MAX_QUERY_LENGTH": "1",
            }
        )
        assert settings.max_query_length == 128
        assert settings.percent_decode is True
        assert settings.log_level == "DEBUG"

    def test_overrides_win(self):
        settings = load_settings(
            overrides={"max_query_length": 10},
            env={"WHEREFILTER_MAX_QUERY_LENGTH": "128"},
        )
        assert settings.max_query_length == 10

    def test_none_overrides_are_ignored(self):
        settings = load_settings(
            overrides={"max_query_length": None},
            env={"WHEREFILTER_MAX_QUERY_LENGTH": "128"},
        )
        assert settings.max_query_length == 128

    def test_reads_os_environ_by_default(self, monkeypatch):
        monkeypatch.setenv("WHEREFILTER_LOG_LEVEL", "INFO")
        assert load_settings().log_level == "INFO"

    def test_invalid_value(self):
        with pytest.raises(ValidationError):
            load_settings(env={"WHEREFILTER_MAX_QUERY_LENGTH": "lots"})

    def test_negative_length_rejected(self):
        with pytest.raises(ValidationError):
            load_settings(overrides={"max_query_length": -1})
