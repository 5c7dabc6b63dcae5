"""Promotion DSL front end.

This module provides:
- Lexer: Tokenizes promotion source text
- Parser: Builds a PromotionDefinition from tokens
- AST: Expression nodes attached to conditions and rewards
"""

from promodsl.dsl.ast import (
    Comparison,
    Expression,
    FunctionCall,
    Literal,
    Logical,
    Operand,
    PropertyAccess,
    property_paths,
)
from promodsl.dsl.lexer import Lexer, Token, TokenType, tokenize
from promodsl.dsl.parser import Parser, parse, parse_promotion, strip_quotes
from promodsl.errors import LexError, ParseError

__all__ = [
    # Lexer
    "LexError",
    "Lexer",
    "Token",
    "TokenType",
    "tokenize",
    # Parser
    "ParseError",
    "Parser",
    "parse",
    "parse_promotion",
    "strip_quotes",
    # AST
    "Comparison",
    "Expression",
    "FunctionCall",
    "Literal",
    "Logical",
    "Operand",
    "PropertyAccess",
    "property_paths",
]
