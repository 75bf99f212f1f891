"""phpscope error types with typed error codes.

Error code ranges:
- 2xxx: Config
- 30xx: Source file / tokenizer
- 31xx: Declaration indexing
- 32xx: Lookup
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any


class ErrorCode(IntEnum):
    """Typed error codes for programmatic handling."""

    # Config (2xxx)
    CONFIG_PARSE_ERROR = 2001
    CONFIG_INVALID_VALUE = 2002
    CONFIG_FILE_NOT_FOUND = 2004

    # Source file (30xx)
    SOURCE_NOT_FOUND = 3001
    SOURCE_UNREADABLE = 3002
    GRAMMAR_UNAVAILABLE = 3003
    SOURCE_TOO_LARGE = 3004

    # Indexing (31xx)
    MALFORMED_DECLARATION = 3101
    CONSTANT_EVALUATION_FAILED = 3102

    # Lookup (32xx)
    DECLARATION_NOT_FOUND = 3201
    NAME_NOT_FOUND = 3202


@dataclass(frozen=True)
class PhpScopeError(Exception):
    """Base error with structured context for tooling consumers."""

    code: ErrorCode
    message: str
    retryable: bool = False
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def error_name(self) -> str:
        """String identifier for logging (e.g., 'DECLARATION_NOT_FOUND')."""
        return self.code.name

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON output."""
        return {
            "code": self.code.value,
            "error": self.error_name,
            "message": self.message,
            "retryable": self.retryable,
            "details": self.details,
        }

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.error_name}: {self.message}"


class ConfigError(PhpScopeError):
    """Configuration-related errors."""

    @classmethod
    def parse_error(cls, path: str, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_PARSE_ERROR,
            message=f"Failed to parse config at {path}: {reason}",
            details={"path": path, "reason": reason},
        )

    @classmethod
    def invalid_value(cls, field: str, value: Any, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_INVALID_VALUE,
            message=f"Invalid value for '{field}': {reason}",
            details={"field": field, "value": str(value), "reason": reason},
        )

    @classmethod
    def file_not_found(cls, path: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_FILE_NOT_FOUND,
            message=f"Config file not found: {path}",
            details={"path": path},
        )


class SourceFileError(PhpScopeError):
    """The PHP source could not be read or tokenized."""

    @classmethod
    def not_found(cls, path: str) -> "SourceFileError":
        return cls(
            code=ErrorCode.SOURCE_NOT_FOUND,
            message=f"{path}: File not found",
            details={"path": path},
        )

    @classmethod
    def unreadable(cls, path: str, reason: str) -> "SourceFileError":
        return cls(
            code=ErrorCode.SOURCE_UNREADABLE,
            message=f"{path}: File is not readable ({reason})",
            details={"path": path, "reason": reason},
        )

    @classmethod
    def too_large(cls, path: str, size: int, limit: int) -> "SourceFileError":
        return cls(
            code=ErrorCode.SOURCE_TOO_LARGE,
            message=f"{path}: File is {size} bytes, limit is {limit}",
            details={"path": path, "size": size, "limit": limit},
        )

    @classmethod
    def grammar_unavailable(cls, module: str) -> "SourceFileError":
        return cls(
            code=ErrorCode.GRAMMAR_UNAVAILABLE,
            message=f"PHP grammar not available: {module}",
            details={"module": module},
        )


class MalformedDeclarationError(PhpScopeError):
    """A declaration could not be read from the token stream."""

    @classmethod
    def missing_token(
        cls, kind: str, name: str, expected: str, line: int
    ) -> "MalformedDeclarationError":
        return cls(
            code=ErrorCode.MALFORMED_DECLARATION,
            message=f"{kind} {name}: expected '{expected}' on line {line}",
            details={"kind": kind, "name": name, "expected": expected, "line": line},
        )


class ConstantEvaluationError(PhpScopeError):
    """A constant value expression cannot be evaluated."""

    @classmethod
    def unsupported(cls, expression: str, reason: str) -> "ConstantEvaluationError":
        return cls(
            code=ErrorCode.CONSTANT_EVALUATION_FAILED,
            message=f"Cannot evaluate '{expression}': {reason}",
            details={"expression": expression, "reason": reason},
        )


class DeclarationNotFoundError(PhpScopeError):
    """A declaration is not part of the index."""

    @classmethod
    def missing(cls, kind: str, name: str) -> "DeclarationNotFoundError":
        return cls(
            code=ErrorCode.DECLARATION_NOT_FOUND,
            message=f"{kind} {name} does not exist",
            details={"kind": kind, "name": name},
        )


class NameNotFoundError(PhpScopeError):
    """A short name does not resolve to any known qualified name."""

    @classmethod
    def unresolved(cls, name: str, kinds: list[str]) -> "NameNotFoundError":
        return cls(
            code=ErrorCode.NAME_NOT_FOUND,
            message=f"Unable to resolve {name} as {' or '.join(kinds)}",
            details={"name": name, "kinds": kinds},
        )

