"""PHP lexical tokens.

A token is an immutable ``(index, type, value, line)`` record. Token types
only distinguish what the scope visitor and the declaration indexer look at;
everything else is ``TokenType.OTHER`` and keeps its source text.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class TokenType(StrEnum):
    """Token categories."""

    OPEN_TAG = "open_tag"
    CLOSE_TAG = "close_tag"
    INLINE_HTML = "inline_html"
    WHITESPACE = "whitespace"
    COMMENT = "comment"
    STRING = "string"
    VARIABLE = "variable"
    NUMBER = "number"
    IDENTIFIER = "identifier"
    NS_SEPARATOR = "ns_separator"
    # Declaration keywords
    NAMESPACE = "namespace"
    USE = "use"
    CONST = "const"
    FUNCTION = "function"
    INTERFACE = "interface"
    TRAIT = "trait"
    CLASS = "class"
    AS = "as"
    # Punctuation
    OPEN_BRACE = "{"
    CLOSE_BRACE = "}"
    SEMICOLON = ";"
    EQUALS = "="
    COMMA = ","
    DOUBLE_COLON = "::"
    OPEN_PAREN = "("
    CLOSE_PAREN = ")"
    OPEN_BRACKET = "["
    CLOSE_BRACKET = "]"
    AMPERSAND = "&"
    OTHER = "other"


TRIVIA_TYPES = frozenset({TokenType.WHITESPACE, TokenType.COMMENT})

NAME_TYPES = frozenset({TokenType.IDENTIFIER, TokenType.NS_SEPARATOR})


@dataclass(frozen=True, slots=True)
class Token:
    """A lexical token of a PHP source text."""

    index: int
    type: TokenType
    value: str
    line: int

    @property
    def is_trivia(self) -> bool:
        """Whitespace or comment."""
        return self.type in TRIVIA_TYPES

    def __str__(self) -> str:
        return self.value
