"""Promotion orchestration.

Runs a PromotionDefinition against a PromotionContext in one pass:
validate, evaluate conditions in declaration order, then apply the rewards of
each triggered condition in declaration order. Nothing here raises; problems
end up in the returned result's error list.
"""

import logging
from datetime import datetime
from decimal import Decimal
from typing import Callable

from promodsl.domain.context import PromotionContext
from promodsl.domain.types import (
    Condition,
    PromotionDefinition,
    PromotionResult,
    Reward,
    ValidationResult,
)
from promodsl.dsl.ast import property_paths
from promodsl.engine.evaluator import config_key, evaluate_condition
from promodsl.engine.rewards import apply_reward, calculate_value

logger = logging.getLogger(__name__)

Clock = Callable[[datetime | None], datetime]


def _system_clock(reference: datetime | None) -> datetime:
    """Current time, aware when the promotion's dates are aware."""
    if reference is not None and reference.tzinfo is not None:
        return datetime.now(reference.tzinfo)
    return datetime.now()


class PromotionEngine:
    """Validates and applies promotions.

    Usage:
        engine = PromotionEngine()
        result = engine.apply(definition, context)

    Attributes:
        clock: Returns "now" for validity-window checks; receives the
            promotion's start or end date so it can match its timezone
    """

    def __init__(self, clock: Clock | None = None):
        self.clock = clock or _system_clock

    def validate(self, definition: PromotionDefinition, context: PromotionContext | None) -> ValidationResult:
        """Check that a promotion can be applied to a context.

        Activity, validity window and context checks stop at the first
        failure; every invalid condition and reward is then reported.
        Rewards pointing at unknown conditions are warnings only.
        """
        result = ValidationResult(promotion_name=definition.name)

        if not definition.is_active:
            result.errors.append("Promotion is not active")
            return result

        now = self.clock(definition.start_date or definition.end_date)
        try:
            not_started = definition.start_date is not None and now < definition.start_date
            expired = definition.end_date is not None and now > definition.end_date
        except TypeError:
            # Naive and timezone-aware datetimes do not compare
            result.errors.append("Promotion dates mix naive and timezone-aware values")
            return result

        if not_started:
            result.errors.append(
                f"Promotion has not started yet (starts: {definition.start_date:%Y-%m-%d})"
            )
            return result
        if expired:
            result.errors.append(
                f"Promotion has expired (ended: {definition.end_date:%Y-%m-%d})"
            )
            return result

        if context is None or context.cart is None:
            result.errors.append("Cart is required")
            return result
        if context.config is None:
            result.errors.append("Configuration is required")
            return result
        if context.cart.is_empty:
            result.errors.append("Cart is empty")
            return result

        seen: set[str] = set()
        for condition in definition.conditions:
            if not condition.is_valid():
                result.errors.append(f"Invalid condition: {condition.name}")
            lowered = condition.name.lower()
            if lowered in seen:
                result.errors.append(f"Duplicate condition name: {condition.name}")
            seen.add(lowered)

        for reward in definition.rewards:
            if not reward.is_valid():
                result.errors.append(
                    f"Invalid reward: {reward.reward_type} for condition {reward.condition_name}"
                )
            if reward.condition_name.lower() not in seen:
                result.warnings.append(
                    f"Reward {reward.reward_type} targets unknown condition {reward.condition_name}"
                )

        result.is_valid = not result.errors
        return result

    def is_eligible(self, definition: PromotionDefinition, context: PromotionContext) -> bool:
        """True if the promotion is valid for the context and any condition holds."""
        if not self.validate(definition, context).is_valid:
            return False
        return any(evaluate_condition(condition, context) for condition in definition.conditions)

    def apply(self, definition: PromotionDefinition, context: PromotionContext) -> PromotionResult:
        """Apply the promotion and return a fresh result."""
        result = PromotionResult(promotion_name=definition.name)

        validation = self.validate(definition, context)
        if not validation.is_valid:
            logger.info(
                "Promotion '%s' failed validation: %s",
                definition.name,
                "; ".join(validation.errors),
            )
            result.errors.extend(validation.errors)
            return result

        triggered = self._triggered_conditions(definition, context)
        result.triggered_conditions.extend(condition.name for condition in triggered)

        if not triggered:
            return result

        result.is_applicable = True

        for condition in triggered:
            for reward in definition.get_rewards_for_condition(condition.name):
                outcome = apply_reward(reward, context)
                if outcome.ok and outcome.applied is not None:
                    result.applied_rewards.append(outcome.applied)
                else:
                    result.errors.append(
                        f"Error applying reward {reward.reward_type} "
                        f"for condition {reward.condition_name}: {outcome.error}"
                    )

        result.metadata["totalValue"] = result.total_value
        result.metadata["triggeredConditionsCount"] = len(result.triggered_conditions)
        result.metadata["appliedRewardsCount"] = len(result.applied_rewards)

        logger.debug(
            "Promotion '%s' applied: %d condition(s), %d reward(s), total %s",
            definition.name,
            len(result.triggered_conditions),
            len(result.applied_rewards),
            result.total_value,
        )
        return result

    def calculate_potential_value(
        self, definition: PromotionDefinition, context: PromotionContext
    ) -> Decimal:
        """Sum of reward values the promotion would grant, without applying it."""
        if not self.is_eligible(definition, context):
            return Decimal("0")

        total = Decimal("0")
        for condition in self._triggered_conditions(definition, context):
            for reward in definition.get_rewards_for_condition(condition.name):
                total += calculate_value(reward, context)
        return total

    def _triggered_conditions(
        self, definition: PromotionDefinition, context: PromotionContext
    ) -> list[Condition]:
        return [
            condition
            for condition in definition.conditions
            if evaluate_condition(condition, context)
        ]


def required_data(definition: PromotionDefinition) -> list[str]:
    """Data paths the promotion's conditions read, distinct and in first-seen order."""
    paths: list[str] = []

    for condition in definition.conditions:
        function = condition.function_name.lower()
        if function == "minimumspending":
            paths.append("cart.totalAmount")
        elif function == "minimumquantity":
            paths.append("cart.totalQuantity")
        elif function in ("any", "all"):
            paths.append("cart.items")

        for parameter in condition.parameters:
            paths.append(f"config.{config_key(parameter)}")

        if condition.expression is not None:
            paths.extend(property_paths(condition.expression))

    return list(dict.fromkeys(paths))


# -----------------------------------------------------------------------------
# Factories
# -----------------------------------------------------------------------------


def create_condition(
    name: str,
    function_name: str,
    parameters: list[str] | tuple[str, ...] = (),
    expression=None,
) -> Condition:
    """Build a condition, failing loudly on an invalid configuration.

    Raises:
        ValueError: If the function is unknown or a required parameter is missing
    """
    condition = Condition(
        name=name,
        function_name=function_name,
        parameters=tuple(parameters),
        expression=expression,
    )
    if not condition.is_valid():
        raise ValueError(f"Invalid condition configuration: {condition}")
    return condition


def minimum_spending_condition(name: str, key: str) -> Condition:
    return create_condition(name, "minimumSpending", [f"config.{key}"])


def minimum_quantity_condition(name: str, key: str) -> Condition:
    return create_condition(name, "minimumQuantity", [f"config.{key}"])


def any_item_condition(name: str, expression) -> Condition:
    return create_condition(name, "any", expression=expression)


def all_items_condition(name: str, expression) -> Condition:
    return create_condition(name, "all", expression=expression)


def discount_percentage_reward(condition_name: str, key: str) -> Reward:
    return Reward(condition_name, "discountPercentage", (f"config.{key}",))


def discount_amount_reward(condition_name: str, key: str) -> Reward:
    return Reward(condition_name, "discountAmount", (f"config.{key}",))


def free_item_reward(condition_name: str, sku_key: str, value_key: str) -> Reward:
    return Reward(condition_name, "freeItem", (f"config.{sku_key}", f"config.{value_key}"))


def points_reward(condition_name: str, key: str) -> Reward:
    return Reward(condition_name, "points", (f"config.{key}",))


# -----------------------------------------------------------------------------
# Convenience functions
# -----------------------------------------------------------------------------

_default_engine = PromotionEngine()


def validate(definition: PromotionDefinition, context: PromotionContext | None) -> ValidationResult:
    return _default_engine.validate(definition, context)


def is_eligible(definition: PromotionDefinition, context: PromotionContext) -> bool:
    return _default_engine.is_eligible(definition, context)


def apply(definition: PromotionDefinition, context: PromotionContext) -> PromotionResult:
    """Apply a promotion using the system clock."""
    return _default_engine.apply(definition, context)


def calculate_potential_value(definition: PromotionDefinition, context: PromotionContext) -> Decimal:
    return _default_engine.calculate_potential_value(definition, context)
