"""
Unit tests for bootstrap/config.py and bootstrap/logging_setup.py

Tests defaults, environment and file loading, validation and logging setup.
"""

import json
import logging

import pytest

from naascalc.bootstrap.config import (
    LoggingConfig,
    NaaSCalcConfig,
    OrchestratorConfig,
    load_config,
)
from naascalc.bootstrap.logging_setup import JSONFormatter, setup_logging
from naascalc.errors.taxonomy import ConfigurationError


@pytest.fixture
def clean_env(monkeypatch):
    for name in (
        "NAASCALC_DEBOUNCE_MS",
        "NAASCALC_RETRY_DELAY_MS",
        "NAASCALC_QUEUE_CHECK_MS",
        "NAASCALC_MAX_HISTORY",
        "NAASCALC_RECENT_BATCHES",
        "NAASCALC_MAX_ERROR_LOG",
        "NAASCALC_LOG_LEVEL",
        "NAASCALC_LOG_FILE",
        "NAASCALC_JSON_LOGS",
        "NAASCALC_ENVIRONMENT",
        "NAASCALC_DEBUG",
    ):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestOrchestratorConfig:
    """Tests for OrchestratorConfig."""

    def test_defaults(self):
        config = OrchestratorConfig()
        assert config.debounce_ms == 50
        assert config.retry_delay_ms == 100
        assert config.queue_check_ms == 10
        assert config.max_history_size == 50
        assert config.recent_batches == 5

    def test_negative_delay_rejected(self):
        with pytest.raises(ConfigurationError):
            OrchestratorConfig(debounce_ms=-1)

    def test_zero_history_rejected(self):
        with pytest.raises(ConfigurationError):
            OrchestratorConfig(max_history_size=0)

    def test_from_env(self, clean_env):
        clean_env.setenv("NAASCALC_DEBOUNCE_MS", "20")
        clean_env.setenv("NAASCALC_MAX_HISTORY", "7")

        config = OrchestratorConfig.from_env()

        assert config.debounce_ms == 20
        assert config.max_history_size == 7
        assert config.retry_delay_ms == 100

    def test_from_env_bad_integer(self, clean_env):
        clean_env.setenv("NAASCALC_RETRY_DELAY_MS", "soon")
        with pytest.raises(ConfigurationError):
            OrchestratorConfig.from_env()

    def test_to_dict(self):
        assert OrchestratorConfig(debounce_ms=5).to_dict()["debounce_ms"] == 5


class TestNaaSCalcConfig:
    """Tests for the root configuration."""

    def test_from_env(self, clean_env):
        clean_env.setenv("NAASCALC_LOG_LEVEL", "DEBUG")
        clean_env.setenv("NAASCALC_JSON_LOGS", "true")

        config = NaaSCalcConfig.from_env()

        assert config.logging.level == "DEBUG"
        assert config.logging.json_logs is True
        assert config.orchestrator.debounce_ms == 50

    def test_from_file(self, clean_env, tmp_path):
        path = tmp_path / "naascalc.json"
        path.write_text(json.dumps({
            "environment": "production",
            "orchestrator": {"debounce_ms": 25, "unknown_key": 1},
            "logging": {"level": "WARNING"},
        }))

        config = NaaSCalcConfig.from_file(str(path))

        assert config.environment == "production"
        assert config.orchestrator.debounce_ms == 25
        assert config.logging.level == "WARNING"

    def test_from_file_invalid_value(self, clean_env, tmp_path):
        path = tmp_path / "naascalc.json"
        path.write_text(json.dumps({"orchestrator": {"queue_check_ms": -5}}))

        with pytest.raises(ConfigurationError):
            NaaSCalcConfig.from_file(str(path))

    def test_from_file_bad_json(self, clean_env, tmp_path):
        path = tmp_path / "naascalc.json"
        path.write_text("{not json")

        with pytest.raises(ConfigurationError):
            NaaSCalcConfig.from_file(str(path))

    def test_missing_file_uses_env(self, clean_env, tmp_path):
        config = NaaSCalcConfig.from_file(str(tmp_path / "missing.json"))
        assert config.environment == "development"

    def test_load_config_explicit_path(self, clean_env, tmp_path):
        path = tmp_path / "custom.json"
        path.write_text(json.dumps({"debug": True}))

        assert load_config(str(path)).debug is True

    def test_load_config_default_location(self, clean_env, tmp_path):
        clean_env.chdir(tmp_path)
        clean_env.setenv("HOME", str(tmp_path))
        (tmp_path / "naascalc.json").write_text(json.dumps({"environment": "staging"}))

        assert load_config().environment == "staging"

    def test_to_dict(self):
        data = NaaSCalcConfig().to_dict()
        assert data["orchestrator"]["max_history_size"] == 50
        assert data["logging"]["level"] == "INFO"


class TestLoggingSetup:
    """Tests for setup_logging."""

    def test_sets_level(self):
        setup_logging(level="WARNING")
        assert logging.getLogger().level == logging.WARNING
        setup_logging(level="INFO")
        assert logging.getLogger().level == logging.INFO

    def test_repeated_setup_does_not_stack_handlers(self):
        root = logging.getLogger()
        setup_logging()
        count = len(root.handlers)
        setup_logging()
        assert len(root.handlers) == count

    def test_log_file(self, tmp_path):
        log_file = tmp_path / "naascalc.log"
        setup_logging(level="INFO", log_file=str(log_file))

        logging.getLogger("naascalc.test").info("written to file")
        for handler in logging.getLogger().handlers:
            handler.flush()

        assert "written to file" in log_file.read_text()
        setup_logging()

    def test_json_formatter(self):
        record = logging.LogRecord("naascalc", logging.INFO, __file__, 1, "hello %s", ("world",), None)
        data = json.loads(JSONFormatter().format(record))
        assert data["message"] == "hello world"
        assert data["level"] == "INFO"
        assert data["logger"] == "naascalc"

    def test_logging_config_defaults(self, clean_env):
        config = LoggingConfig.from_env()
        assert config.level == "INFO"
        assert config.log_file is None
