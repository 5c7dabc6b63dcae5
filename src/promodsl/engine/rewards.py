"""Reward computation for triggered conditions.

Each builtin reward type computes a Decimal value from the cart and the
promotion configuration. The reward's parameter (usually ``config.<key>``)
names where its number lives; when it is omitted or does not resolve, the
conventional config key for the type is used, then the type's default.
"""

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Callable

from promodsl.domain.context import PromotionContext, to_decimal
from promodsl.domain.types import AppliedReward, Reward, RewardOutcome
from promodsl.engine.evaluator import Evaluator
from promodsl.engine.functions import (
    FunctionDefinition,
    FunctionKind,
    FunctionParameter,
    FunctionTable,
)
from promodsl.errors import PromoDSLError

logger = logging.getLogger(__name__)

UNSUPPORTED_REWARD_TYPE = "UnsupportedRewardType"
INACTIVE_REWARD = "InactiveReward"
INVALID_REWARD_VALUE = "InvalidRewardValue"
REWARD_COMPUTATION_ERROR = "RewardComputationError"

_HUNDRED = Decimal("100")


class RewardValueError(PromoDSLError):
    """A configured reward input is present but not numeric."""


@dataclass(frozen=True)
class RewardComputation:
    """Value of a reward plus what went into it."""

    value: Decimal
    description: str
    parameters: dict[str, Any] = field(default_factory=dict)


def _money(value: Decimal) -> str:
    return f"${value:,.2f}"


class _RewardInputs:
    """Looks up the numbers a reward type needs."""

    def __init__(self, reward: Reward, context: PromotionContext):
        self.reward = reward
        self.evaluator = Evaluator(context)

    @property
    def cart_total(self) -> Decimal:
        return self.evaluator.cart.total_amount

    def parameter_value(self, index: int = 0) -> Any:
        """Value the reward's parameter at ``index`` resolves to, or None."""
        if index >= len(self.reward.parameters):
            return None
        path = self.reward.parameters[index]
        if "." not in path:
            return self.evaluator.config.get(path)
        return self.evaluator.resolve_path(path)

    def config_value(self, key: str) -> Any:
        return self.evaluator.config.get(key)

    def number(self, default_key: str, default: Decimal, index: int | None = 0) -> Decimal:
        """Parameter value, else config[default_key], else default.

        Raises:
            RewardValueError: If the chosen value is not numeric
        """
        raw = self.parameter_value(index) if index is not None else None
        source = self.reward.parameters[index] if raw is not None else f"config.{default_key}"
        if raw is None:
            raw = self.config_value(default_key)
        if raw is None:
            return default

        value = to_decimal(raw)
        if value is None:
            raise RewardValueError(f"{source} is not numeric: {raw!r}")
        return value


# -----------------------------------------------------------------------------
# Builtin reward types
# -----------------------------------------------------------------------------


def _discount(inputs: _RewardInputs) -> RewardComputation:
    percentage = inputs.number("discountPercent", Decimal("0"))
    value = inputs.cart_total * (percentage / _HUNDRED)
    return RewardComputation(
        value=value,
        description=f"Discount applied: {_money(value)}",
        parameters={"percentage": percentage},
    )


def _discount_percentage(inputs: _RewardInputs) -> RewardComputation:
    percentage = inputs.number("discountPercent", Decimal("0"))
    value = inputs.cart_total * (percentage / _HUNDRED)
    return RewardComputation(
        value=value,
        description=f"Percentage discount applied: {percentage}% ({_money(value)})",
        parameters={"percentage": percentage},
    )


def _discount_amount(inputs: _RewardInputs) -> RewardComputation:
    amount = inputs.number("discountAmount", Decimal("0"))
    return RewardComputation(
        value=amount,
        description=f"Fixed amount discount applied: {_money(amount)}",
        parameters={"amount": amount},
    )


def _free_item(inputs: _RewardInputs) -> RewardComputation:
    sku = inputs.parameter_value()
    if sku is None:
        sku = inputs.config_value("freeItemSku")
    sku = "" if sku is None else str(sku)
    value = inputs.number("freeItemValue", Decimal("0"), index=1)
    return RewardComputation(
        value=value,
        description=f"Free item added: {sku}",
        parameters={"sku": sku, "value": value},
    )


def _free_shipping(inputs: _RewardInputs) -> RewardComputation:
    cost = inputs.number("shippingCost", Decimal("0"), index=None)
    return RewardComputation(
        value=cost,
        description="Free shipping applied",
        parameters={"shippingCost": cost},
    )


def _points(inputs: _RewardInputs) -> RewardComputation:
    multiplier = inputs.number("pointsMultiplier", Decimal("1"))
    value = inputs.cart_total * multiplier
    return RewardComputation(
        value=value,
        description=f"Points awarded: {value} points",
        parameters={"multiplier": multiplier},
    )


def _reward(
    name: str,
    description: str,
    implementation: Callable[[_RewardInputs], RewardComputation],
    parameter: FunctionParameter | None = None,
    config_keys: tuple[str, ...] = (),
) -> FunctionDefinition:
    return FunctionDefinition(
        name=name,
        kind=FunctionKind.REWARD,
        description=description,
        parameters=(parameter,) if parameter else (),
        config_keys=config_keys,
        examples=(f"- condition A {name} config.value",),
        implementation=implementation,
    )


REWARD_TYPE_TABLE = FunctionTable([
    _reward(
        "discount",
        "Percentage off the cart total",
        _discount,
        FunctionParameter("percent", "Config key holding the percentage", False, "discountPercent"),
    ),
    _reward(
        "discountPercentage",
        "Percentage off the cart total",
        _discount_percentage,
        FunctionParameter("percent", "Config key holding the percentage", False, "discountPercent"),
    ),
    _reward(
        "discountAmount",
        "Fixed amount off",
        _discount_amount,
        FunctionParameter("amount", "Config key holding the amount", False, "discountAmount"),
    ),
    _reward(
        "freeItem",
        "Adds a free item worth the configured value",
        _free_item,
        FunctionParameter("sku", "Config key holding the free item SKU", False, "freeItemSku"),
        config_keys=("freeItemValue",),
    ),
    _reward(
        "freeShipping",
        "Waives the configured shipping cost",
        _free_shipping,
        config_keys=("shippingCost",),
    ),
    _reward(
        "points",
        "Loyalty points: cart total times the multiplier",
        _points,
        FunctionParameter("multiplier", "Config key holding the multiplier", False, "pointsMultiplier"),
    ),
])


# -----------------------------------------------------------------------------
# Public API
# -----------------------------------------------------------------------------


def apply_reward(reward: Reward, context: PromotionContext) -> RewardOutcome:
    """Apply a reward to a context.

    Returns a failed outcome (never raises) for inactive rewards, unsupported
    reward types, non-numeric configured inputs and arithmetic failures such
    as a Decimal overflow.
    """
    if not reward.is_active:
        return RewardOutcome.failure(
            INACTIVE_REWARD,
            f"Reward {reward.reward_type} for condition {reward.condition_name} is not active",
        )

    definition = REWARD_TYPE_TABLE.find(reward.reward_type)
    if definition is None or definition.implementation is None:
        return RewardOutcome.failure(
            UNSUPPORTED_REWARD_TYPE,
            f"Reward type {reward.reward_type} is not supported",
        )

    try:
        computation = definition.implementation(_RewardInputs(reward, context))
    except RewardValueError as e:
        logger.warning("Error applying reward %s: %s", reward.reward_type, e)
        return RewardOutcome.failure(INVALID_REWARD_VALUE, str(e))
    except ArithmeticError as e:
        logger.warning("Error computing reward %s: %r", reward.reward_type, e)
        return RewardOutcome.failure(
            REWARD_COMPUTATION_ERROR,
            f"Reward {reward.reward_type} could not be computed: {type(e).__name__}",
        )

    return RewardOutcome.success(
        AppliedReward(
            reward_type=definition.name,
            condition_name=reward.condition_name,
            value=computation.value,
            description=computation.description,
            parameters=computation.parameters,
        )
    )


def calculate_value(reward: Reward, context: PromotionContext) -> Decimal:
    """Value a reward would have, without applying it.

    Unknown reward types, non-numeric inputs and arithmetic failures are worth 0.
    """
    definition = REWARD_TYPE_TABLE.find(reward.reward_type)
    if definition is None or definition.implementation is None:
        return Decimal("0")

    try:
        return definition.implementation(_RewardInputs(reward, context)).value
    except (RewardValueError, ArithmeticError) as e:
        logger.debug("Reward %s has no computable value: %r", reward.reward_type, e)
        return Decimal("0")
