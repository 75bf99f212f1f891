"""PHP tokenization."""

from phpscope.parsing.tokens import NAME_TYPES, TRIVIA_TYPES, Token, TokenType
from phpscope.parsing.treesitter import PhpTokenizer

__all__ = [
    "NAME_TYPES",
    "PhpTokenizer",
    "TRIVIA_TYPES",
    "Token",
    "TokenType",
]
