"""
bootstrap/config.py - Application configuration

Provides configuration loading from files, environment variables, and defaults.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, Optional
from pathlib import Path
import os
import json
import logging

from naascalc.core.constants import (
    DEFAULT_DEBOUNCE_MS,
    DEFAULT_MAX_ERROR_LOG,
    DEFAULT_MAX_HISTORY_SIZE,
    DEFAULT_QUEUE_CHECK_MS,
    DEFAULT_RECENT_BATCHES,
    DEFAULT_RETRY_DELAY_MS,
)
from naascalc.errors.taxonomy import ConfigurationError

logger = logging.getLogger("bootstrap.config")


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from None


def _env_bool(name: str, default: bool) -> bool:
    return os.getenv(name, "true" if default else "false").lower() == "true"


@dataclass
class OrchestratorConfig:
    """Timing and retention settings for the calculation orchestrator."""

    debounce_ms: int = DEFAULT_DEBOUNCE_MS          # Quiet window before a drain
    retry_delay_ms: int = DEFAULT_RETRY_DELAY_MS    # Re-attempt when a drain is in flight
    queue_check_ms: int = DEFAULT_QUEUE_CHECK_MS    # Re-drain after a batch refilled the queue
    max_history_size: int = DEFAULT_MAX_HISTORY_SIZE
    recent_batches: int = DEFAULT_RECENT_BATCHES    # Batches shown in stats
    max_error_log: int = DEFAULT_MAX_ERROR_LOG

    def __post_init__(self):
        self.validate()

    def validate(self) -> None:
        for name in ("debounce_ms", "retry_delay_ms", "queue_check_ms", "recent_batches"):
            value = getattr(self, name)
            if value < 0:
                raise ConfigurationError(f"{name} must be non-negative, got {value}")
        for name in ("max_history_size", "max_error_log"):
            value = getattr(self, name)
            if value < 1:
                raise ConfigurationError(f"{name} must be at least 1, got {value}")

    @classmethod
    def from_env(cls) -> "OrchestratorConfig":
        return cls(
            debounce_ms=_env_int("NAASCALC_DEBOUNCE_MS", DEFAULT_DEBOUNCE_MS),
            retry_delay_ms=_env_int("NAASCALC_RETRY_DELAY_MS", DEFAULT_RETRY_DELAY_MS),
            queue_check_ms=_env_int("NAASCALC_QUEUE_CHECK_MS", DEFAULT_QUEUE_CHECK_MS),
            max_history_size=_env_int("NAASCALC_MAX_HISTORY", DEFAULT_MAX_HISTORY_SIZE),
            recent_batches=_env_int("NAASCALC_RECENT_BATCHES", DEFAULT_RECENT_BATCHES),
            max_error_log=_env_int("NAASCALC_MAX_ERROR_LOG", DEFAULT_MAX_ERROR_LOG),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "debounce_ms": self.debounce_ms,
            "retry_delay_ms": self.retry_delay_ms,
            "queue_check_ms": self.queue_check_ms,
            "max_history_size": self.max_history_size,
            "recent_batches": self.recent_batches,
            "max_error_log": self.max_error_log,
        }


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    log_file: Optional[str] = None
    json_logs: bool = False

    @classmethod
    def from_env(cls) -> "LoggingConfig":
        return cls(
            level=os.getenv("NAASCALC_LOG_LEVEL", "INFO"),
            format=os.getenv("NAASCALC_LOG_FORMAT", "%(asctime)s - %(name)s - %(levelname)s - %(message)s"),
            log_file=os.getenv("NAASCALC_LOG_FILE"),
            json_logs=_env_bool("NAASCALC_JSON_LOGS", False),
        )


@dataclass
class NaaSCalcConfig:
    """Root configuration."""

    environment: str = "development"
    debug: bool = False

    orchestrator: OrchestratorConfig = field(default_factory=OrchestratorConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_env(cls) -> "NaaSCalcConfig":
        """Create configuration from environment variables."""
        return cls(
            environment=os.getenv("NAASCALC_ENVIRONMENT", "development"),
            debug=_env_bool("NAASCALC_DEBUG", False),
            orchestrator=OrchestratorConfig.from_env(),
            logging=LoggingConfig.from_env(),
        )

    @classmethod
    def from_file(cls, filepath: str) -> "NaaSCalcConfig":
        """Load configuration from a JSON file; missing file falls back to env."""
        path = Path(filepath)
        if not path.exists():
            logger.warning(f"Config file not found: {filepath}, using defaults")
            return cls.from_env()

        with open(path) as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError as e:
                raise ConfigurationError(f"Invalid config file {filepath}: {e}") from e

        return cls._from_dict(data)

    @classmethod
    def _from_dict(cls, data: Dict[str, Any]) -> "NaaSCalcConfig":
        """Environment config overridden by file values."""
        config = cls.from_env()

        if "environment" in data:
            config.environment = data["environment"]
        if "debug" in data:
            config.debug = bool(data["debug"])

        if "orchestrator" in data:
            for key, value in data["orchestrator"].items():
                if hasattr(config.orchestrator, key):
                    setattr(config.orchestrator, key, value)
            config.orchestrator.validate()

        if "logging" in data:
            for key, value in data["logging"].items():
                if hasattr(config.logging, key):
                    setattr(config.logging, key, value)

        return config

    def to_dict(self) -> Dict[str, Any]:
        return {
            "environment": self.environment,
            "debug": self.debug,
            "orchestrator": self.orchestrator.to_dict(),
            "logging": {
                "level": self.logging.level,
                "log_file": self.logging.log_file,
                "json_logs": self.logging.json_logs,
            },
        }


def load_config(filepath: Optional[str] = None) -> NaaSCalcConfig:
    """
    Load configuration from file or environment.

    Without a path, ./naascalc.json and ~/.naascalc/config.json are tried
    before falling back to the environment.
    """
    if filepath:
        config = NaaSCalcConfig.from_file(filepath)
    else:
        default_paths = [
            "./naascalc.json",
            os.path.expanduser("~/.naascalc/config.json"),
        ]
        for path in default_paths:
            if Path(path).exists():
                logger.info(f"Loading config from: {path}")
                return NaaSCalcConfig.from_file(path)
        config = NaaSCalcConfig.from_env()

    logger.info(f"Configuration loaded: environment={config.environment}")
    return config
