"""Tests for error types and codes."""

from collections.abc import Iterator
from contextlib import contextmanager

import pytest

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


class TestErrorCode:
    """Error code value tests."""

    @pytest.mark.parametrize(
        ("code", "expected_range"),
        [
            (ErrorCode.CONFIG_PARSE_ERROR, 2000),
            (ErrorCode.CONFIG_INVALID_VALUE, 2000),
            (ErrorCode.SOURCE_NOT_FOUND, 3000),
            (ErrorCode.MALFORMED_DECLARATION, 3000),
            (ErrorCode.NAME_NOT_FOUND, 3000),
        ],
    )
    def test_given_error_code_when_checked_then_in_correct_range(
        self, code: ErrorCode, expected_range: int
    ) -> None:
        """Error codes fall within their designated numeric range."""
        assert expected_range <= code.value < expected_range + 1000


class TestPhpScopeError:
    """Base error behavior tests."""

    def test_given_error_when_to_dict_then_serializes_all_fields(self) -> None:
        """Error serializes to dict with all required fields."""
        # Given
        error = PhpScopeError(
            code=ErrorCode.CONFIG_PARSE_ERROR,
            message="Test message",
            retryable=True,
            details={"key": "value"},
        )

        # When
        result = error.to_dict()

        # Then
        assert result == {
            "code": 2001,
            "error": "CONFIG_PARSE_ERROR",
            "message": "Test message",
            "retryable": True,
            "details": {"key": "value"},
        }

    def test_given_error_when_str_then_human_readable(self) -> None:
        """Error string representation is human readable."""
        error = PhpScopeError(code=ErrorCode.NAME_NOT_FOUND, message="Something broke")
        assert str(error) == "[3202] NAME_NOT_FOUND: Something broke"

    def test_given_subclass_when_raised_then_caught_as_base(self) -> None:
        """Every error type derives from PhpScopeError."""
        with pytest.raises(PhpScopeError):
            raise SourceFileError.not_found("missing.php")


class TestFactories:
    """Classmethod constructor tests."""

    def test_config_parse_error(self) -> None:
        error = ConfigError.parse_error("/a/config.yaml", "bad indent")
        assert error.code == ErrorCode.CONFIG_PARSE_ERROR
        assert "/a/config.yaml" in error.message
        assert error.details["reason"] == "bad indent"

    def test_source_not_found_message(self) -> None:
        """Missing file message names the path."""
        error = SourceFileError.not_found("src/Foo.php")
        assert error.message == "src/Foo.php: File not found"
        assert error.code == ErrorCode.SOURCE_NOT_FOUND

    def test_source_too_large(self) -> None:
        error = SourceFileError.too_large("big.php", 2048, 1024)
        assert error.code == ErrorCode.SOURCE_TOO_LARGE
        assert error.details == {"path": "big.php", "size": 2048, "limit": 1024}

    def test_malformed_declaration_names_constant(self) -> None:
        error = MalformedDeclarationError.missing_token("constant", "Foo\\BAR", "=", 3)
        assert error.message == "constant Foo\\BAR: expected '=' on line 3"
        assert error.details["line"] == 3

    def test_constant_evaluation_keeps_expression(self) -> None:
        error = ConstantEvaluationError.unsupported("$x + 1", "variables are not constant")
        assert error.details["expression"] == "$x + 1"
        assert "$x + 1" in error.message

    def test_declaration_not_found_message(self) -> None:
        """Lookup failures read like 'class Y does not exist'."""
        error = DeclarationNotFoundError.missing("class", "Y")
        assert error.message == "class Y does not exist"
        assert error.code == ErrorCode.DECLARATION_NOT_FOUND

    def test_name_not_found_lists_kinds(self) -> None:
        error = NameNotFoundError.unresolved("Foo", ["class", "trait"])
        assert error.message == "Unable to resolve Foo as class or trait"
        assert error.details["kinds"] == ["class", "trait"]

    def test_errors_are_frozen(self) -> None:
        """Errors are immutable once created."""
        error = DeclarationNotFoundError.missing("trait", "T")
        with pytest.raises(AttributeError):
            error.message = "changed"  # type: ignore[misc]

    def test_given_error_raised_through_context_manager_then_propagates_unchanged(
        self,
    ) -> None:
        """Context managers can attach a traceback to a frozen error."""

        @contextmanager
        def wrapping() -> Iterator[None]:
            yield

        with pytest.raises(MalformedDeclarationError) as exc_info:
            with wrapping():
                raise MalformedDeclarationError.missing_token("constant", "A", "=", 3)
        assert exc_info.value.__traceback__ is not None
        assert exc_info.value.details["name"] == "A"
