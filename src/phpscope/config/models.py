"""Pydantic configuration models with env var support.

Configuration Hierarchy (highest to lowest precedence):
1. Direct kwargs to load_config()
2. Environment variables (PHPSCOPE__SECTION__KEY)
3. Project YAML (.phpscope/config.yaml)
4. Global YAML (~/.config/phpscope/config.yaml)
5. Built-in defaults (this file)

Examples:
    PHPSCOPE__LOGGING__LEVEL=DEBUG
    PHPSCOPE__REFLECTION__SAFE=true
    PHPSCOPE__REFLECTION__MAX_FILE_SIZE_MB=2
"""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class LogOutputConfig(BaseModel):
    """Single logging output configuration.

    Env vars: Not directly configurable via env (use YAML for multi-output).
    """

    format: Literal["json", "console"] = "console"
    destination: str = "stderr"  # stderr, stdout, or absolute file path
    level: LogLevel | None = None  # Inherits from parent if None

    @field_validator("destination")
    @classmethod
    def validate_destination(cls, v: str) -> str:
        if v in ("stderr", "stdout"):
            return v
        path = Path(v).expanduser()
        if not path.is_absolute():
            raise ValueError(f"File destination must be absolute path: {v}")
        return str(path)


class LoggingConfig(BaseModel):
    """Logging configuration.

    Env vars:
        PHPSCOPE__LOGGING__LEVEL: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """

    level: LogLevel = Field(
        default="WARNING",
        description="Root log level. DEBUG traces every indexed declaration.",
    )
    outputs: list[LogOutputConfig] = Field(default_factory=lambda: [LogOutputConfig()])


class ReflectionConfig(BaseModel):
    """Defaults applied when a ReflectionFile is created without explicit flags.

    Env vars:
        PHPSCOPE__REFLECTION__SAFE: Evaluate constant value expressions
        PHPSCOPE__REFLECTION__AUTOLOADABLE: Return declaration handles, built on access
        PHPSCOPE__REFLECTION__LOADED: Return declaration handles, built with the index
        PHPSCOPE__REFLECTION__MAX_FILE_SIZE_MB: Refuse larger source files
    """

    safe: bool = Field(
        default=False,
        description="Evaluate constant expressions. Only enable for trusted input.",
    )
    autoloadable: bool = Field(
        default=False,
        description="Declaration getters return handles instead of names.",
    )
    loaded: bool = Field(
        default=False,
        description="Build declaration handles eagerly while indexing.",
    )
    max_file_size_mb: float = Field(
        default=10,
        description="Source files larger than this (MB) are rejected.",
    )

    @field_validator("max_file_size_mb")
    @classmethod
    def validate_max_file_size(cls, v: float) -> float:
        if v <= 0:
            raise ValueError(f"max_file_size_mb must be positive, got {v}")
        return v

    @property
    def max_file_size_bytes(self) -> int:
        return int(self.max_file_size_mb * 1024 * 1024)


class PhpScopeConfig(BaseModel):
    """Root configuration for phpscope.

    All settings can be configured via:
    1. Environment variables: PHPSCOPE__SECTION__KEY
    2. YAML config files (project or global)
    3. Direct kwargs to load_config()
    """

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    reflection: ReflectionConfig = Field(default_factory=ReflectionConfig)
