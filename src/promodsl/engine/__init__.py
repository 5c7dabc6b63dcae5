"""Promotion evaluation engine.

This module provides:
- Evaluator: Evaluates condition expressions against a context
- Reward application and value calculation
- PromotionEngine: validate / apply orchestration
"""

from promodsl.engine.evaluator import (
    CONDITION_FUNCTION_TABLE,
    EvaluationError,
    Evaluator,
    compare_values,
    evaluate_condition,
    evaluate_expression,
    truthy,
)
from promodsl.engine.functions import (
    FunctionDefinition,
    FunctionKind,
    FunctionParameter,
    FunctionTable,
)
from promodsl.engine.promotion import (
    PromotionEngine,
    all_items_condition,
    any_item_condition,
    apply,
    calculate_potential_value,
    create_condition,
    discount_amount_reward,
    discount_percentage_reward,
    free_item_reward,
    is_eligible,
    minimum_quantity_condition,
    minimum_spending_condition,
    points_reward,
    required_data,
    validate,
)
from promodsl.engine.rewards import (
    REWARD_TYPE_TABLE,
    UNSUPPORTED_REWARD_TYPE,
    apply_reward,
    calculate_value,
)

__all__ = [
    # Evaluator
    "CONDITION_FUNCTION_TABLE",
    "EvaluationError",
    "Evaluator",
    "compare_values",
    "evaluate_condition",
    "evaluate_expression",
    "truthy",
    # Functions
    "FunctionDefinition",
    "FunctionKind",
    "FunctionParameter",
    "FunctionTable",
    # Rewards
    "REWARD_TYPE_TABLE",
    "UNSUPPORTED_REWARD_TYPE",
    "apply_reward",
    "calculate_value",
    # Orchestration
    "PromotionEngine",
    "apply",
    "calculate_potential_value",
    "is_eligible",
    "required_data",
    "validate",
    # Factories
    "all_items_condition",
    "any_item_condition",
    "create_condition",
    "discount_amount_reward",
    "discount_percentage_reward",
    "free_item_reward",
    "minimum_quantity_condition",
    "minimum_spending_condition",
    "points_reward",
]
