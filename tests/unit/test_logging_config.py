"""
Tests for dictConfig-based logging setup.
"""

import logging.config

import pytest

from apnea_clusters import logging_config
from apnea_clusters.config import LoggingSettings, save_config
from apnea_clusters.constants import DEFAULT_LOG_BACKUP_COUNT, DEFAULT_LOG_MAX_BYTES


@pytest.fixture
def log_dir(tmp_path, monkeypatch):
    path = tmp_path / "logs"
    monkeypatch.setattr(logging_config, "DEFAULT_LOG_DIR", path)
    return path


@pytest.fixture
def no_file():
    return LoggingSettings(enabled=False)


class TestBuildLoggingConfig:
    """Test the generated dictConfig dictionary."""

    def test_console_only(self, log_dir, no_file):
        config = logging_config.build_logging_config(settings=no_file)

        assert list(config["handlers"]) == ["console"]
        assert config["handlers"]["console"]["level"] == "INFO"
        assert config["handlers"]["console"]["stream"] == "ext://sys.stderr"
        assert config["root"]["handlers"] == ["console"]
        assert not log_dir.exists()

    def test_verbose_console(self, log_dir, no_file):
        config = logging_config.build_logging_config(verbose=True, settings=no_file)

        assert config["handlers"]["console"]["level"] == "DEBUG"

    def test_file_handler_defaults(self, config_path, log_dir):
        config = logging_config.build_logging_config()

        handler = config["handlers"]["file"]
        assert handler["class"] == "logging.handlers.RotatingFileHandler"
        assert handler["filename"] == str(log_dir / "apnea_clusters.log")
        assert handler["maxBytes"] == DEFAULT_LOG_MAX_BYTES
        assert handler["backupCount"] == DEFAULT_LOG_BACKUP_COUNT
        assert handler["level"] == "DEBUG"
        assert config["root"]["handlers"] == ["console", "file"]
        assert log_dir.is_dir()

    def test_settings_from_config_file(self, config_path, log_dir):
        save_config(
            {"logging": {"level": "warning", "max_size_mb": 1, "backup_count": 2}}
        )

        handler = logging_config.build_logging_config()["handlers"]["file"]

        assert handler["level"] == "WARNING"
        assert handler["maxBytes"] == 1024 * 1024
        assert handler["backupCount"] == 2

    def test_file_disabled_in_config(self, config_path, log_dir):
        save_config({"logging": {"enabled": False}})

        assert "file" not in logging_config.build_logging_config()["handlers"]

    def test_console_format_override(self, log_dir, no_file):
        config = logging_config.build_logging_config(
            console_format="%(message)s", settings=no_file
        )

        assert config["formatters"]["console"]["format"] == "%(message)s"
        assert config["formatters"]["file"]["format"] == logging_config.LOG_FORMAT


class TestSetupLogging:
    """Test one-time logging setup."""

    @pytest.fixture
    def applied(self, monkeypatch):
        calls = []
        monkeypatch.setattr(logging_config, "_logging_configured", False)
        monkeypatch.setattr(logging.config, "dictConfig", calls.append)
        return calls

    def test_configures_once(self, config_path, log_dir, applied):
        logging_config.setup_logging(log_to_file=False)
        logging_config.setup_logging(log_to_file=False)

        assert len(applied) == 1

    def test_log_to_file_overrides_config(self, config_path, log_dir, applied):
        save_config({"logging": {"enabled": True}})

        logging_config.setup_logging(log_to_file=False)

        assert "file" not in applied[0]["handlers"]

    def test_falls_back_to_basic_config(self, config_path, log_dir, monkeypatch):
        def broken(config):
            raise ValueError("bad handler")

        basic_calls = []
        monkeypatch.setattr(logging_config, "_logging_configured", False)
        monkeypatch.setattr(logging.config, "dictConfig", broken)
        monkeypatch.setattr(
            logging, "basicConfig", lambda **kwargs: basic_calls.append(kwargs)
        )

        logging_config.setup_logging(verbose=True)

        assert basic_calls[0]["level"] == logging.DEBUG
        assert logging_config._logging_configured
