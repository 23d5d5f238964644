"""
naascalc.bootstrap - Configuration, logging and application wiring.

`naascalc.bootstrap.app` is imported explicitly; it depends on the
orchestration package, which itself reads configuration from here.
"""

from .config import (
    OrchestratorConfig,
    LoggingConfig,
    NaaSCalcConfig,
    load_config,
)
from .logging_setup import setup_logging

__all__ = [
    "OrchestratorConfig",
    "LoggingConfig",
    "NaaSCalcConfig",
    "load_config",
    "setup_logging",
]
