"""Tests for the promotion DSL lexer."""

import pytest

from promodsl.dsl import LexError, Lexer, Token, TokenType, tokenize


def types_of(source: str) -> list[TokenType]:
    return [token.type for token in tokenize(source)]


class TestLexer:
    """Tokenization of promotion source text."""

    def test_tokenize_header_line(self):
        tokens = Lexer('promotion: "Simple Test"\n').tokenize()

        assert tokens == [
            Token(TokenType.PROMOTION, "promotion", 0, 1, 1),
            Token(TokenType.COLON, ":", 9, 1, 10),
            Token(TokenType.STRING, '"Simple Test"', 11, 1, 12),
            Token(TokenType.NEWLINE, "\n", 24, 1, 25),
            Token(TokenType.EOF, "", 25, 2, 1),
        ]

    def test_keywords_are_distinct_from_identifiers(self):
        assert types_of("promotion conditions rewards condition conditionName Promotion") == [
            TokenType.PROMOTION,
            TokenType.CONDITIONS,
            TokenType.REWARDS,
            TokenType.CONDITION,
            TokenType.IDENTIFIER,
            TokenType.IDENTIFIER,
            TokenType.EOF,
        ]

    def test_tokenize_identifiers(self):
        tokens = tokenize("minAmount _private var123")

        assert [t.value for t in tokens[:-1]] == ["minAmount", "_private", "var123"]
        assert all(t.type == TokenType.IDENTIFIER for t in tokens[:-1])

    def test_tokenize_numbers(self):
        tokens = tokenize("42 3.14 0")

        assert [(t.type, t.value) for t in tokens[:-1]] == [
            (TokenType.NUMBER, "42"),
            (TokenType.NUMBER, "3.14"),
            (TokenType.NUMBER, "0"),
        ]

    def test_number_without_fraction_digits_leaves_dot(self):
        assert types_of("5.") == [TokenType.NUMBER, TokenType.DOT, TokenType.EOF]

    def test_strings_keep_quotes(self):
        tokens = tokenize('"50% off # today" ""')

        assert tokens[0] == Token(TokenType.STRING, '"50% off # today"', 0, 1, 1)
        assert tokens[1].value == '""'

    def test_tokenize_operators(self):
        assert types_of("&& || >= <= != = > < : - .") == [
            TokenType.AND,
            TokenType.OR,
            TokenType.GTE,
            TokenType.LTE,
            TokenType.NEQ,
            TokenType.EQ,
            TokenType.GT,
            TokenType.LT,
            TokenType.COLON,
            TokenType.DASH,
            TokenType.DOT,
            TokenType.EOF,
        ]

    def test_multi_character_operators_win(self):
        assert types_of(">==") == [TokenType.GTE, TokenType.EQ, TokenType.EOF]
        assert types_of("a>=b") == [
            TokenType.IDENTIFIER,
            TokenType.GTE,
            TokenType.IDENTIFIER,
            TokenType.EOF,
        ]

    def test_property_path(self):
        tokens = tokenize("config.minAmount")

        assert [(t.type, t.value) for t in tokens] == [
            (TokenType.IDENTIFIER, "config"),
            (TokenType.DOT, "."),
            (TokenType.IDENTIFIER, "minAmount"),
            (TokenType.EOF, ""),
        ]

    def test_line_and_column_tracking(self):
        tokens = tokenize("a\n  - b")

        assert (tokens[0].line, tokens[0].column) == (1, 1)
        assert tokens[1].type == TokenType.NEWLINE
        assert (tokens[2].type, tokens[2].line, tokens[2].column) == (TokenType.DASH, 2, 3)
        assert (tokens[3].line, tokens[3].column) == (2, 5)


class TestNewlines:
    """Line breaks are significant and collapse."""

    def test_consecutive_breaks_collapse(self):
        assert types_of("a\n\n\n  \nb") == [
            TokenType.IDENTIFIER,
            TokenType.NEWLINE,
            TokenType.IDENTIFIER,
            TokenType.EOF,
        ]

    def test_comment_lines_collapse_with_breaks(self):
        tokens = tokenize("a # trailing comment\n# full line\n\nb")

        assert [t.type for t in tokens] == [
            TokenType.IDENTIFIER,
            TokenType.NEWLINE,
            TokenType.IDENTIFIER,
            TokenType.EOF,
        ]
        assert tokens[2].line == 4

    def test_no_leading_newline(self):
        tokens = tokenize("\n\n  a")

        assert tokens[0].type == TokenType.IDENTIFIER
        assert (tokens[0].line, tokens[0].column) == (3, 3)

    def test_windows_line_endings(self):
        tokens = tokenize("a\r\nb\rc")

        assert [t.type for t in tokens] == [
            TokenType.IDENTIFIER,
            TokenType.NEWLINE,
            TokenType.IDENTIFIER,
            TokenType.NEWLINE,
            TokenType.IDENTIFIER,
            TokenType.EOF,
        ]
        assert tokens[2].line == 2
        assert tokens[4].line == 3

    def test_trailing_newline_before_eof(self):
        assert types_of("a\n") == [TokenType.IDENTIFIER, TokenType.NEWLINE, TokenType.EOF]

    def test_empty_source(self):
        assert tokenize("") == [Token(TokenType.EOF, "", 0, 1, 1)]


class TestLexErrors:
    """Malformed input raises LexError with its location."""

    def test_unexpected_character(self):
        with pytest.raises(LexError) as exc_info:
            tokenize("a @")

        assert exc_info.value.char == "@"
        assert (exc_info.value.line, exc_info.value.column) == (1, 3)
        assert "line 1, column 3" in str(exc_info.value)

    @pytest.mark.parametrize("source", ["&", "|", "!", "a & b"])
    def test_lone_operator_characters(self, source):
        with pytest.raises(LexError):
            tokenize(source)

    def test_unterminated_string_at_end_of_input(self):
        with pytest.raises(LexError) as exc_info:
            tokenize('promotion: "Oops')

        assert "Unterminated string" in str(exc_info.value)
        assert (exc_info.value.line, exc_info.value.column) == (1, 12)

    def test_unterminated_string_at_end_of_line(self):
        with pytest.raises(LexError) as exc_info:
            tokenize('a\n"abc\n"')

        assert exc_info.value.line == 2
        assert exc_info.value.column == 1
