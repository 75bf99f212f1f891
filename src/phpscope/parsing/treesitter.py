"""Tree-sitter backed PHP tokenizer.

The PHP grammar produces a concrete syntax tree. The declaration indexer
works on a flat token stream instead, so the tree is flattened back into
its leaves, in source order:

- string literals, comments, inline HTML, numbers and variable names are
  kept whole, whatever their internal structure in the grammar
- zero-width nodes inserted by error recovery (``MISSING``) are dropped,
  so an unclosed brace stays unclosed
- the text between two leaves becomes a whitespace token

Usage::

    tokenizer = PhpTokenizer()
    tokens = tokenizer.tokenize("<?php namespace Foo; class Bar {}")
"""

from __future__ import annotations

import importlib
from dataclasses import dataclass, field
from typing import Any

import tree_sitter

from phpscope.config.constants import PHP_GRAMMAR_MODULE, PHP_LANGUAGE_FUNC
from phpscope.core.errors import SourceFileError
from phpscope.core.logging import get_logger
from phpscope.parsing.tokens import Token, TokenType

log = get_logger(__name__)

# Nodes emitted as one token, children included
_ATOMIC_NODES: dict[str, TokenType] = {
    "comment": TokenType.COMMENT,
    "text": TokenType.INLINE_HTML,
    "string": TokenType.STRING,
    "encapsed_string": TokenType.STRING,
    "heredoc": TokenType.STRING,
    "nowdoc": TokenType.STRING,
    "shell_command_expression": TokenType.STRING,
    "variable_name": TokenType.VARIABLE,
    "integer": TokenType.NUMBER,
    "float": TokenType.NUMBER,
}

# Named leaves
_NAMED_LEAVES: dict[str, TokenType] = {
    "php_tag": TokenType.OPEN_TAG,
    "php_end_tag": TokenType.CLOSE_TAG,
    "name": TokenType.IDENTIFIER,
}

# Anonymous leaves: keywords (case-folded by the grammar) and punctuation
_ANONYMOUS_LEAVES: dict[str, TokenType] = {
    "?>": TokenType.CLOSE_TAG,
    "\\": TokenType.NS_SEPARATOR,
    "namespace": TokenType.NAMESPACE,
    "use": TokenType.USE,
    "const": TokenType.CONST,
    "function": TokenType.FUNCTION,
    "interface": TokenType.INTERFACE,
    "trait": TokenType.TRAIT,
    "class": TokenType.CLASS,
    "as": TokenType.AS,
    "{": TokenType.OPEN_BRACE,
    "}": TokenType.CLOSE_BRACE,
    ";": TokenType.SEMICOLON,
    "=": TokenType.EQUALS,
    ",": TokenType.COMMA,
    "::": TokenType.DOUBLE_COLON,
    "(": TokenType.OPEN_PAREN,
    ")": TokenType.CLOSE_PAREN,
    "[": TokenType.OPEN_BRACKET,
    "]": TokenType.CLOSE_BRACKET,
    "&": TokenType.AMPERSAND,
}


def _classify(node: Any, text: str) -> TokenType:
    if node.is_named:
        token_type = _NAMED_LEAVES.get(node.type, TokenType.OTHER)
        # "<?=" is an echo tag, not the start of a code block
        if token_type is TokenType.OPEN_TAG and text.startswith("<?="):
            return TokenType.OTHER
        return token_type
    return _ANONYMOUS_LEAVES.get(node.type, TokenType.OTHER)


@dataclass
class PhpTokenizer:
    """Turns PHP source text into a flat list of :class:`Token`.

    The grammar is loaded on first use and kept by the instance.
    """

    _parser: Any = field(default=None, repr=False)
    _language: Any = field(default=None, repr=False)

    def _get_language(self) -> Any:
        if self._language is not None:
            return self._language
        try:
            mod = importlib.import_module(PHP_GRAMMAR_MODULE)
            lang_fn = getattr(mod, PHP_LANGUAGE_FUNC)
        except (ImportError, AttributeError) as err:
            raise SourceFileError.grammar_unavailable(PHP_GRAMMAR_MODULE) from err
        self._language = tree_sitter.Language(lang_fn())
        return self._language

    def parse(self, content: bytes) -> Any:
        """Parse PHP source bytes into a tree-sitter tree."""
        if self._parser is None:
            self._parser = tree_sitter.Parser()
            self._parser.language = self._get_language()
        return self._parser.parse(content)

    def tokenize(self, source: str | bytes) -> list[Token]:
        """Tokenize PHP source text.

        Args:
            source: PHP source, text or UTF-8 bytes.

        Returns:
            Tokens in source order; ``token.index`` is the list position.
        """
        content = source.encode("utf-8") if isinstance(source, str) else source
        tree = self.parse(content)

        tokens: list[Token] = []
        pos = 0
        line = 1

        def emit(token_type: TokenType, start: int, end: int) -> None:
            nonlocal pos, line
            start = max(start, pos)
            if start > pos:
                gap = content[pos:start]
                gap_type = TokenType.WHITESPACE if gap.isspace() else TokenType.OTHER
                tokens.append(Token(len(tokens), gap_type, gap.decode("utf-8", "replace"), line))
                line += gap.count(b"\n")
            chunk = content[start:end]
            tokens.append(Token(len(tokens), token_type, chunk.decode("utf-8", "replace"), line))
            line += chunk.count(b"\n")
            pos = end

        stack = [tree.root_node]
        while stack:
            node = stack.pop()
            if node.is_missing:
                continue
            atomic = _ATOMIC_NODES.get(node.type) if node.is_named else None
            if atomic is not None:
                emit(atomic, node.start_byte, node.end_byte)
            elif node.child_count == 0:
                if node.end_byte > node.start_byte:
                    text = content[node.start_byte : node.end_byte].decode("utf-8", "replace")
                    emit(_classify(node, text), node.start_byte, node.end_byte)
            else:
                stack.extend(reversed(node.children))

        if pos < len(content):
            tail = content[pos:]
            tail_type = TokenType.WHITESPACE if tail.isspace() else TokenType.OTHER
            tokens.append(Token(len(tokens), tail_type, tail.decode("utf-8", "replace"), line))

        log.debug("php_tokenized", tokens=len(tokens), has_error=tree.root_node.has_error)
        return tokens
