"""promodsl: a small language for retail promotions and its evaluation engine.

Usage:
    from promodsl import PromotionEngine, parse_promotion

    definition = parse_promotion(source)
    result = PromotionEngine().apply(definition, context)
"""

from promodsl.domain import (
    AppliedReward,
    Cart,
    CartItem,
    Condition,
    PromotionConfig,
    PromotionContext,
    PromotionDefinition,
    PromotionResult,
    Reward,
    RewardOutcome,
    ValidationResult,
)
from promodsl.dsl import Lexer, Parser, parse, parse_promotion, tokenize
from promodsl.engine import PromotionEngine, apply_reward, calculate_value, evaluate_condition
from promodsl.errors import ContextLoadError, LexError, ParseError, PromoDSLError

__version__ = "0.1.0"

__all__ = [
    "AppliedReward",
    "Cart",
    "CartItem",
    "Condition",
    "ContextLoadError",
    "LexError",
    "Lexer",
    "ParseError",
    "Parser",
    "PromoDSLError",
    "PromotionConfig",
    "PromotionContext",
    "PromotionDefinition",
    "PromotionEngine",
    "PromotionResult",
    "Reward",
    "RewardOutcome",
    "ValidationResult",
    "apply_reward",
    "calculate_value",
    "evaluate_condition",
    "parse",
    "parse_promotion",
    "tokenize",
]
