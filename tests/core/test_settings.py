"""Tests for taskline.core.settings and taskline.core.configuration."""

import pytest
from pydantic import ValidationError as PydanticValidationError

from taskline.core.configuration import Configuration, configuration, configure, reset_configuration
from taskline.core.errors import ConfigError
from taskline.core.locale import current_locale
from taskline.core.settings import TasklineSettings
from taskline.execution.middleware import MiddlewareRegistry


class TestTasklineSettings:
    """Environment-driven defaults."""

    def test_defaults(self):
        settings = TasklineSettings()
        assert settings.log_level == "INFO"
        assert settings.task_halt == ["failed"]
        assert settings.workflow_halt == ["failed"]
        assert settings.retries == 0
        assert settings.retry_delay == 0.0
        assert settings.backtrace is False
        assert settings.skip_freezing is False
        assert settings.locale == "en"

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("TASKLINE_RETRIES", "3")
        monkeypatch.setenv("TASKLINE_RETRY_DELAY", "0.5")
        monkeypatch.setenv("TASKLINE_BACKTRACE", "true")

        settings = TasklineSettings()
        assert settings.retries == 3
        assert settings.retry_delay == 0.5
        assert settings.backtrace is True

    def test_status_lists_from_json(self, monkeypatch):
        monkeypatch.setenv("TASKLINE_TASK_HALT", '["failed", "skipped"]')
        assert TasklineSettings().task_halt == ["failed", "skipped"]

    def test_status_lists_from_csv(self, monkeypatch):
        monkeypatch.setenv("TASKLINE_WORKFLOW_HALT", "failed, skipped")
        assert TasklineSettings().workflow_halt == ["failed", "skipped"]

    def test_negative_retries_rejected(self, monkeypatch):
        monkeypatch.setenv("TASKLINE_RETRIES", "-1")
        with pytest.raises(PydanticValidationError):
            TasklineSettings()


class TestConfiguration:
    """Global configuration lifecycle."""

    def test_seeded_from_settings(self):
        config = Configuration(TasklineSettings(retries=2, task_halt=["skipped"]))
        assert config.retries == 2
        assert config.task_halt == ["skipped"]
        assert config.retry_on == (Exception,)
        assert isinstance(config.middlewares, MiddlewareRegistry)

    def test_singleton_until_reset(self):
        first = configuration()
        assert configuration() is first
        assert reset_configuration() is not first

    def test_env_read_on_reset(self, monkeypatch):
        monkeypatch.setenv("TASKLINE_RETRIES", "4")
        assert reset_configuration().retries == 4

    def test_configure_kwargs(self):
        config = configure(retries=3, skip_freezing=True)
        assert config.retries == 3
        assert configuration().skip_freezing is True

    def test_configure_callable(self):
        configure(lambda config: setattr(config, "task_halt", ["failed", "skipped"]))
        assert configuration().task_halt == ["failed", "skipped"]

    def test_configure_unknown_option(self):
        with pytest.raises(ConfigError, match="unknown configuration option colour"):
            configure(colour="blue")

    def test_configure_unknown_locale(self):
        with pytest.raises(ConfigError, match="unknown locale 'xx'"):
            configure(locale="xx")

    def test_locale_applied(self):
        configure(locale="en")
        assert current_locale() == "en"

    def test_to_settings_copies_registries(self):
        config = configuration()
        settings = config.to_settings()
        settings["middlewares"].register(object())
        settings["task_halt"].append("skipped")

        assert len(config.middlewares) == 0
        assert config.task_halt == ["failed"]
        assert settings["tags"] == []
        assert len(settings["attributes"]) == 0

    def test_repr(self):
        assert repr(configuration()).startswith("<Configuration task_halt=['failed']")
