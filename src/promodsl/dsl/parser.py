"""Parser for the promotion DSL.

Converts a stream of tokens into a PromotionDefinition.
Uses single-pass recursive descent and stops at the first mismatch.

Grammar:
    program        := promotionDef EOF
    promotionDef   := 'promotion' ':' STRING NEWLINE
                      'conditions' ':' NEWLINE condition+
                      'rewards' ':' NEWLINE reward+
    condition      := '-' IDENT functionCall expression? (NEWLINE | EOF)
    reward         := '-' 'condition' IDENT functionCall expression? (NEWLINE | EOF)
    functionCall   := IDENT propertyAccess?
    propertyAccess := IDENT ('.' IDENT)*
    expression     := comparison (('&&' | '||') comparison)*
    comparison     := operand (('=' | '>' | '<' | '>=' | '<=' | '!=') operand)?
    operand        := propertyAccess | NUMBER | STRING

A chain of comparisons is joined by a single operator: ``&&`` if the
expression text contains ``&&`` anywhere, otherwise ``||``. Lines that mix
the two therefore apply one operator uniformly.
"""

import logging
from decimal import Decimal

from promodsl.domain.types import Condition, PromotionDefinition, Reward
from promodsl.dsl.ast import Comparison, Expression, Literal, Logical, Operand, PropertyAccess
from promodsl.dsl.lexer import (
    COMPARISON_TYPES,
    LOGICAL_TYPES,
    Lexer,
    Token,
    TokenType,
)
from promodsl.errors import ParseError

logger = logging.getLogger(__name__)

_OPERAND_TYPES = (TokenType.IDENTIFIER, TokenType.NUMBER, TokenType.STRING)


def strip_quotes(text: str) -> str:
    """Remove one leading and one trailing double quote, if both are present."""
    if not text:
        return text
    if len(text) >= 2 and text.startswith('"') and text.endswith('"'):
        return text[1:-1]
    return text


def describe_token(token: Token) -> str:
    """Human-readable token description for error messages."""
    if token.type in (TokenType.EOF, TokenType.NEWLINE):
        return token.type.name
    return f"'{token.value}'"


class Parser:
    """Recursive descent parser for the promotion DSL.

    Usage:
        tokens = Lexer(source).tokenize()
        definition = Parser(tokens).parse()
    """

    def __init__(self, tokens: list[Token]):
        self.tokens = tokens
        self.position = 0

    def parse(self) -> PromotionDefinition:
        """Parse the whole program and return the promotion definition."""
        definition = self._parse_promotion_def()
        self._consume(TokenType.EOF, "EOF")
        logger.debug(
            "Parsed promotion %r: %d condition(s), %d reward(s)",
            definition.name,
            len(definition.conditions),
            len(definition.rewards),
        )
        return definition

    # -------------------------------------------------------------------------
    # Helper methods
    # -------------------------------------------------------------------------

    def _current(self) -> Token:
        """Get current token."""
        return self._peek()

    def _peek(self, offset: int = 0) -> Token:
        """Peek at a token without consuming it."""
        pos = self.position + offset
        if pos >= len(self.tokens):
            last = self.tokens[-1] if self.tokens else None
            if last is None:
                return Token(TokenType.EOF, "", 0)
            return Token(TokenType.EOF, "", last.position, last.line, last.column)
        return self.tokens[pos]

    def _advance(self) -> Token:
        """Consume and return current token."""
        token = self._current()
        self.position += 1
        return token

    def _match(self, *types: TokenType) -> bool:
        """Check if current token matches any of the given types."""
        return self._current().type in types

    def _consume(self, token_type: TokenType, expected: str) -> Token:
        """Consume a token of the expected type, or raise error."""
        if self._current().type == token_type:
            return self._advance()
        raise self._error(expected)

    def _error(self, expected: str) -> ParseError:
        token = self._current()
        return ParseError(expected, describe_token(token), token.line, token.column)

    def _end_line(self) -> None:
        """A condition or reward line ends at NEWLINE, or at the end of input."""
        if self._match(TokenType.NEWLINE):
            self._advance()
        elif not self._match(TokenType.EOF):
            raise self._error("NEWLINE")

    # -------------------------------------------------------------------------
    # Sections
    # -------------------------------------------------------------------------

    def _parse_promotion_def(self) -> PromotionDefinition:
        self._consume(TokenType.PROMOTION, "'promotion'")
        self._consume(TokenType.COLON, "':'")
        name = strip_quotes(self._consume(TokenType.STRING, "STRING").value)
        self._consume(TokenType.NEWLINE, "NEWLINE")

        self._consume(TokenType.CONDITIONS, "'conditions'")
        self._consume(TokenType.COLON, "':'")
        self._consume(TokenType.NEWLINE, "NEWLINE")
        conditions = [self._parse_condition()]
        while self._match(TokenType.DASH):
            conditions.append(self._parse_condition())

        self._consume(TokenType.REWARDS, "'rewards'")
        self._consume(TokenType.COLON, "':'")
        self._consume(TokenType.NEWLINE, "NEWLINE")
        rewards = [self._parse_reward()]
        while self._match(TokenType.DASH):
            rewards.append(self._parse_reward())

        return PromotionDefinition(
            name=name,
            conditions=tuple(conditions),
            rewards=tuple(rewards),
        )

    def _parse_condition(self) -> Condition:
        self._consume(TokenType.DASH, "'-'")
        name = self._consume(TokenType.IDENTIFIER, "IDENTIFIER").value
        function_name, parameters = self._parse_function_call()
        expression = self._parse_optional_expression()
        self._end_line()
        return Condition(
            name=name,
            function_name=function_name,
            parameters=parameters,
            expression=expression,
        )

    def _parse_reward(self) -> Reward:
        self._consume(TokenType.DASH, "'-'")
        self._consume(TokenType.CONDITION, "'condition'")
        condition_name = self._consume(TokenType.IDENTIFIER, "IDENTIFIER").value
        reward_type, parameters = self._parse_function_call()
        expression = self._parse_optional_expression()
        self._end_line()
        return Reward(
            condition_name=condition_name,
            reward_type=reward_type,
            parameters=parameters,
            expression=expression,
        )

    # -------------------------------------------------------------------------
    # Function calls and expressions
    # -------------------------------------------------------------------------

    def _parse_function_call(self) -> tuple[str, tuple[str, ...]]:
        """Parse ``IDENT propertyAccess?`` into a name and its parameters."""
        name = self._consume(TokenType.IDENTIFIER, "function name").value

        if self._match(TokenType.IDENTIFIER) and not self._path_starts_expression():
            return name, (self._parse_property_access().path,)
        return name, ()

    def _path_starts_expression(self) -> bool:
        """True if the path at the cursor is followed by an operator.

        Such a path can only be the left operand of the trailing expression,
        never the function's parameter.
        """
        offset = 1
        while (
            self._peek(offset).type == TokenType.DOT
            and self._peek(offset + 1).type == TokenType.IDENTIFIER
        ):
            offset += 2
        following = self._peek(offset).type
        return following in COMPARISON_TYPES or following in LOGICAL_TYPES

    def _parse_property_access(self) -> PropertyAccess:
        segments = [self._consume(TokenType.IDENTIFIER, "IDENTIFIER").value]
        while self._match(TokenType.DOT):
            self._advance()
            segments.append(
                self._consume(TokenType.IDENTIFIER, "IDENTIFIER after '.'").value
            )
        return PropertyAccess(tuple(segments))

    def _parse_optional_expression(self) -> Expression | None:
        if self._match(*_OPERAND_TYPES):
            return self._parse_expression()
        return None

    def _parse_expression(self) -> Expression:
        start = self.position
        comparisons = [self._parse_comparison()]
        while self._match(*LOGICAL_TYPES):
            self._advance()
            comparisons.append(self._parse_comparison())

        if len(comparisons) == 1:
            return comparisons[0]

        text = "".join(token.value for token in self.tokens[start:self.position])
        operator = "&&" if "&&" in text else "||"

        result: Expression = comparisons[0]
        for comparison in comparisons[1:]:
            result = Logical(result, operator, comparison)
        return result

    def _parse_comparison(self) -> Comparison:
        left = self._parse_operand()
        if self._match(*COMPARISON_TYPES):
            operator = self._advance().value
            right = self._parse_operand()
            return Comparison(left, operator, right)
        return Comparison(left)

    def _parse_operand(self) -> Operand:
        token = self._current()

        if token.type == TokenType.IDENTIFIER:
            return self._parse_property_access()

        if token.type == TokenType.NUMBER:
            self._advance()
            return Literal(Decimal(token.value))

        if token.type == TokenType.STRING:
            self._advance()
            return Literal(strip_quotes(token.value))

        raise self._error("operand")


def parse(tokens: list[Token]) -> PromotionDefinition:
    """Parse a token list into a promotion definition."""
    return Parser(tokens).parse()


def parse_promotion(source: str) -> PromotionDefinition:
    """Convenience function to lex and parse promotion source text.

    Raises:
        LexError: On malformed characters or unterminated strings
        ParseError: On the first grammar mismatch
    """
    return Parser(Lexer(source).tokenize()).parse()
