"""Lexer/tokenizer for the promotion DSL.

Converts promotion source text into a flat stream of tokens for the parser.

Token types:
- Literals: NUMBER, STRING (kept with surrounding quotes)
- Identifiers: IDENTIFIER (condition names, function names, path segments)
- Keywords: PROMOTION, CONDITIONS, REWARDS, CONDITION
- Operators: comparison and logical
- Structure: COLON, DASH, DOT, NEWLINE
"""

import re
from dataclasses import dataclass
from enum import Enum, auto
from typing import Iterator

from promodsl.errors import LexError


class TokenType(Enum):
    """Types of tokens in the promotion language."""

    # Literals
    NUMBER = auto()
    STRING = auto()

    # Identifiers
    IDENTIFIER = auto()

    # Keywords
    PROMOTION = auto()   # promotion
    CONDITIONS = auto()  # conditions
    REWARDS = auto()     # rewards
    CONDITION = auto()   # condition

    # Logical operators
    AND = auto()         # &&
    OR = auto()          # ||

    # Comparison operators
    EQ = auto()          # =
    NEQ = auto()         # !=
    LT = auto()          # <
    LTE = auto()         # <=
    GT = auto()          # >
    GTE = auto()         # >=

    # Structure
    COLON = auto()       # :
    DASH = auto()        # -
    DOT = auto()         # .
    NEWLINE = auto()

    # End of input
    EOF = auto()


COMPARISON_TYPES = frozenset({
    TokenType.EQ,
    TokenType.NEQ,
    TokenType.LT,
    TokenType.LTE,
    TokenType.GT,
    TokenType.GTE,
})

LOGICAL_TYPES = frozenset({TokenType.AND, TokenType.OR})


@dataclass(frozen=True)
class Token:
    """A single token from the lexer.

    Attributes:
        type: The token type
        value: The exact source text of the token (strings include their quotes)
        position: Character offset in the source string
        line: Line number (1-indexed)
        column: Column number (1-indexed)
    """

    type: TokenType
    value: str
    position: int
    line: int = 1
    column: int = 1

    def __repr__(self) -> str:
        return f"Token({self.type.name}, {self.value!r}, {self.line}:{self.column})"


# Token patterns (order matters - longer matches first)
TOKEN_PATTERNS = [
    # Multi-character operators (before single character)
    (r"&&", TokenType.AND),
    (r"\|\|", TokenType.OR),
    (r">=", TokenType.GTE),
    (r"<=", TokenType.LTE),
    (r"!=", TokenType.NEQ),

    # Single character operators and structure
    (r"=", TokenType.EQ),
    (r">", TokenType.GT),
    (r"<", TokenType.LT),
    (r":", TokenType.COLON),
    (r"-", TokenType.DASH),
    (r"\.", TokenType.DOT),

    # Numbers (no sign, no exponent)
    (r"[0-9]+(?:\.[0-9]+)?", TokenType.NUMBER),

    # Strings: no escapes, may not span lines
    (r'"[^"\r\n]*"', TokenType.STRING),

    # Keywords and identifiers
    (r"[A-Za-z_][A-Za-z0-9_]*", TokenType.IDENTIFIER),
]

KEYWORDS = {
    "promotion": TokenType.PROMOTION,
    "conditions": TokenType.CONDITIONS,
    "rewards": TokenType.REWARDS,
    "condition": TokenType.CONDITION,
}

_BLANK = re.compile(r"[ \t\f\v]+")
_COMMENT = re.compile(r"#[^\r\n]*")
_LINE_BREAK = re.compile(r"\r\n|\r|\n")


class Lexer:
    """Tokenizer for the promotion DSL.

    Usage:
        lexer = Lexer('promotion: "Summer"\\nconditions:\\n...')
        for token in lexer:
            print(token)
    """

    def __init__(self, source: str):
        self.source = source
        self.position = 0
        self.line = 1
        self.column = 1
        self._last_type: TokenType | None = None
        self._compiled_patterns = [
            (re.compile(pattern), token_type)
            for pattern, token_type in TOKEN_PATTERNS
        ]

    def __iter__(self) -> Iterator[Token]:
        """Iterate over all tokens in the source."""
        while True:
            token = self.next_token()
            yield token
            if token.type == TokenType.EOF:
                break

    def next_token(self) -> Token:
        """Get the next token from the source."""
        while True:
            self._skip_blanks_and_comments()

            if self.position >= len(self.source):
                return self._emit(Token(TokenType.EOF, "", self.position, self.line, self.column))

            match = _LINE_BREAK.match(self.source, self.position)
            if match is None:
                break

            start = (self.position, self.line, self.column)
            self._consume_line_breaks()
            # Collapse runs of breaks; never lead with a NEWLINE
            if self._last_type not in (None, TokenType.NEWLINE):
                return self._emit(Token(TokenType.NEWLINE, "\n", *start))

        if self.source[self.position] == '"':
            self._check_string_terminated()

        for pattern, token_type in self._compiled_patterns:
            match = pattern.match(self.source, self.position)
            if match:
                value = match.group()
                token = Token(token_type, value, self.position, self.line, self.column)
                self._advance(len(value))

                if token_type == TokenType.IDENTIFIER and value in KEYWORDS:
                    token = Token(KEYWORDS[value], value, token.position, token.line, token.column)

                return self._emit(token)

        raise LexError(self.source[self.position], self.line, self.column)

    def tokenize(self) -> list[Token]:
        """Tokenize the entire source and return list of tokens."""
        return list(self)

    def _emit(self, token: Token) -> Token:
        self._last_type = token.type
        return token

    def _skip_blanks_and_comments(self) -> None:
        while self.position < len(self.source):
            match = _BLANK.match(self.source, self.position) or _COMMENT.match(
                self.source, self.position
            )
            if not match:
                return
            self._advance(len(match.group()))

    def _consume_line_breaks(self) -> None:
        """Consume line breaks along with any blanks or comments between them."""
        while self.position < len(self.source):
            match = _LINE_BREAK.match(self.source, self.position)
            if not match:
                return
            self.position = match.end()
            self.line += 1
            self.column = 1
            self._skip_blanks_and_comments()

    def _check_string_terminated(self) -> None:
        """Raise if the string starting at the current position never closes on its line."""
        end = self.position + 1
        while end < len(self.source) and self.source[end] not in '"\r\n':
            end += 1
        if end >= len(self.source) or self.source[end] != '"':
            raise LexError(
                '"',
                self.line,
                self.column,
                message="Unterminated string",
            )

    def _advance(self, count: int) -> None:
        """Advance position by count characters on the current line."""
        self.position += count
        self.column += count


def tokenize(source: str) -> list[Token]:
    """Convenience function to tokenize a promotion source string."""
    return Lexer(source).tokenize()
