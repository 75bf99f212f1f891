"""Config module exports."""

from phpscope.config.loader import load_config
from phpscope.config.models import (
    LoggingConfig,
    LogOutputConfig,
    PhpScopeConfig,
    ReflectionConfig,
)

__all__ = [
    "load_config",
    "LoggingConfig",
    "LogOutputConfig",
    "PhpScopeConfig",
    "ReflectionConfig",
]
