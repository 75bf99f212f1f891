"""Tests for the tree-sitter PHP tokenizer."""

import pytest

from phpscope.parsing import PhpTokenizer, Token, TokenType


@pytest.fixture(scope="module")
def tokenizer() -> PhpTokenizer:
    return PhpTokenizer()


def _significant(tokens: list[Token]) -> list[tuple[TokenType, str]]:
    return [(t.type, t.value) for t in tokens if not t.is_trivia]


class TestTokenize:
    """Flattening of the syntax tree into tokens."""

    def test_given_source_when_tokenized_then_values_concatenate_to_source(
        self, tokenizer: PhpTokenizer
    ) -> None:
        """No source text is lost or duplicated."""
        source = "<?php\n// note\nnamespace A\\B;\n\nclass C { const X = 'y'; }\n"

        tokens = tokenizer.tokenize(source)

        assert "".join(t.value for t in tokens) == source

    def test_given_tokens_then_index_is_list_position(self, tokenizer: PhpTokenizer) -> None:
        tokens = tokenizer.tokenize("<?php function f() { return 1; }")
        assert [t.index for t in tokens] == list(range(len(tokens)))

    def test_given_namespace_statement_when_tokenized_then_keywords_typed(
        self, tokenizer: PhpTokenizer
    ) -> None:
        """Declaration keywords and qualified names get their own types."""
        tokens = tokenizer.tokenize("<?php namespace Food\\Fruit;")

        assert _significant(tokens) == [
            (TokenType.OPEN_TAG, "<?php"),
            (TokenType.NAMESPACE, "namespace"),
            (TokenType.IDENTIFIER, "Food"),
            (TokenType.NS_SEPARATOR, "\\"),
            (TokenType.IDENTIFIER, "Fruit"),
            (TokenType.SEMICOLON, ";"),
        ]

    def test_given_uppercase_keyword_when_tokenized_then_still_keyword(
        self, tokenizer: PhpTokenizer
    ) -> None:
        """PHP keywords are case-insensitive; the value keeps the source spelling."""
        tokens = tokenizer.tokenize("<?php CLASS Foo {}")

        keyword = next(t for t in tokens if t.type is TokenType.CLASS)
        assert keyword.value == "CLASS"

    def test_given_string_with_braces_when_tokenized_then_single_token(
        self, tokenizer: PhpTokenizer
    ) -> None:
        """Braces inside strings and comments never become brace tokens."""
        tokens = tokenizer.tokenize("<?php $a = '{'; /* } */ $b = \"{$a}\";")

        types = [t.type for t in tokens]
        assert TokenType.OPEN_BRACE not in types
        assert TokenType.CLOSE_BRACE not in types
        assert [t.value for t in tokens if t.type is TokenType.STRING] == ["'{'", '"{$a}"']
        assert [t.value for t in tokens if t.type is TokenType.COMMENT] == ["/* } */"]

    def test_given_inline_html_when_tokenized_then_tags_and_html_typed(
        self, tokenizer: PhpTokenizer
    ) -> None:
        tokens = tokenizer.tokenize("<p>hi</p>\n<?php echo 1; ?>\n<b>bye</b>")

        types = [t.type for t in tokens]
        assert types[0] is TokenType.INLINE_HTML
        assert TokenType.OPEN_TAG in types
        assert TokenType.CLOSE_TAG in types

    def test_given_close_tag_when_tokenized_then_close_tag_typed(
        self, tokenizer: PhpTokenizer
    ) -> None:
        tokens = tokenizer.tokenize("<?php echo 1; ?>b")

        close = [t for t in tokens if t.type is TokenType.CLOSE_TAG]
        assert [t.value for t in close] == ["?>"]
        assert tokens[-1].type is TokenType.INLINE_HTML

    def test_given_echo_tag_when_tokenized_then_not_open_tag(self, tokenizer: PhpTokenizer) -> None:
        """The short echo tag does not open a code block."""
        tokens = tokenizer.tokenize("<p><?= $title ?></p>")
        assert TokenType.OPEN_TAG not in [t.type for t in tokens]

    def test_given_multiline_source_when_tokenized_then_lines_tracked(
        self, tokenizer: PhpTokenizer
    ) -> None:
        tokens = tokenizer.tokenize("<?php\n\nclass A\n{\n}\n")

        by_type = {t.type: t.line for t in tokens if not t.is_trivia}
        assert by_type[TokenType.OPEN_TAG] == 1
        assert by_type[TokenType.CLASS] == 3
        assert by_type[TokenType.OPEN_BRACE] == 4
        assert by_type[TokenType.CLOSE_BRACE] == 5

    def test_given_unclosed_brace_when_tokenized_then_no_inserted_brace(
        self, tokenizer: PhpTokenizer
    ) -> None:
        """Error recovery never invents tokens."""
        tokens = tokenizer.tokenize("<?php class A {")

        types = [t.type for t in tokens]
        assert types.count(TokenType.OPEN_BRACE) == 1
        assert TokenType.CLOSE_BRACE not in types

    def test_given_bytes_when_tokenized_then_same_as_text(self, tokenizer: PhpTokenizer) -> None:
        source = "<?php const A = 1;"
        assert tokenizer.tokenize(source.encode()) == tokenizer.tokenize(source)


class TestToken:
    """Token record behavior."""

    def test_trivia(self) -> None:
        assert Token(0, TokenType.WHITESPACE, " ", 1).is_trivia
        assert Token(0, TokenType.COMMENT, "# x", 1).is_trivia
        assert not Token(0, TokenType.IDENTIFIER, "x", 1).is_trivia

    def test_str_is_value(self) -> None:
        assert str(Token(3, TokenType.SEMICOLON, ";", 2)) == ";"

    def test_frozen(self) -> None:
        token = Token(0, TokenType.OTHER, "+", 1)
        with pytest.raises(AttributeError):
            token.value = "-"  # type: ignore[misc]
