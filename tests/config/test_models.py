"""Tests for configuration models."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from phpscope.config.models import (
    LoggingConfig,
    LogOutputConfig,
    PhpScopeConfig,
    ReflectionConfig,
)


class TestLogOutputConfig:
    """Log output destination validation."""

    @pytest.mark.parametrize("destination", ["stderr", "stdout"])
    def test_given_stream_destination_when_validated_then_accepted(self, destination: str) -> None:
        assert LogOutputConfig(destination=destination).destination == destination

    def test_given_relative_path_when_validated_then_rejected(self) -> None:
        """File destinations must be absolute."""
        with pytest.raises(ValidationError):
            LogOutputConfig(destination="logs/phpscope.log")

    def test_given_absolute_path_when_validated_then_kept(self, tmp_path: Path) -> None:
        path = tmp_path / "phpscope.log"
        assert LogOutputConfig(destination=str(path)).destination == str(path)


class TestLoggingConfig:
    """Logging level validation."""

    @pytest.mark.parametrize("level", ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"])
    def test_given_log_level_when_validated_then_accepts_standard_levels(self, level: str) -> None:
        """Log level accepts standard Python logging levels."""
        config = PhpScopeConfig(logging={"level": level})
        assert config.logging.level == level

    def test_given_invalid_log_level_when_validated_then_rejects(self) -> None:
        with pytest.raises(ValidationError):
            PhpScopeConfig(logging={"level": "INVALID"})

    def test_defaults(self) -> None:
        config = LoggingConfig()
        assert config.level == "WARNING"
        assert len(config.outputs) == 1
        assert config.outputs[0].destination == "stderr"


class TestReflectionConfig:
    """Reflection defaults and size limit."""

    def test_defaults_disable_every_flag(self) -> None:
        config = ReflectionConfig()
        assert config.safe is False
        assert config.autoloadable is False
        assert config.loaded is False
        assert config.max_file_size_mb == 10

    def test_max_file_size_bytes(self) -> None:
        assert ReflectionConfig(max_file_size_mb=2).max_file_size_bytes == 2 * 1024 * 1024

    @pytest.mark.parametrize("size", [0, -1])
    def test_given_non_positive_size_when_validated_then_rejected(self, size: float) -> None:
        """File size limit must be positive."""
        with pytest.raises(ValidationError):
            ReflectionConfig(max_file_size_mb=size)
