"""Core module exports."""

from phpscope.core.errors import (
    ConfigError,
    ConstantEvaluationError,
    DeclarationNotFoundError,
    ErrorCode,
    MalformedDeclarationError,
    NameNotFoundError,
    PhpScopeError,
    SourceFileError,
)
from phpscope.core.logging import (
    bound_source_file,
    configure_logging,
    get_logger,
)

__all__ = [
    # Errors
    "ConfigError",
    "ConstantEvaluationError",
    "DeclarationNotFoundError",
    "ErrorCode",
    "MalformedDeclarationError",
    "NameNotFoundError",
    "PhpScopeError",
    "SourceFileError",
    # Logging
    "bound_source_file",
    "configure_logging",
    "get_logger",
]
