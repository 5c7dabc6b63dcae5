"""Promotion domain model: definitions, context and results."""

from promodsl.domain.context import (
    Cart,
    CartItem,
    ConfigValue,
    PromotionConfig,
    PromotionContext,
    to_decimal,
)
from promodsl.domain.types import (
    AppliedReward,
    Condition,
    PromotionDefinition,
    PromotionResult,
    Reward,
    RewardOutcome,
    ValidationResult,
)

__all__ = [
    # Context
    "Cart",
    "CartItem",
    "ConfigValue",
    "PromotionConfig",
    "PromotionContext",
    "to_decimal",
    # Definitions and results
    "AppliedReward",
    "Condition",
    "PromotionDefinition",
    "PromotionResult",
    "Reward",
    "RewardOutcome",
    "ValidationResult",
]
