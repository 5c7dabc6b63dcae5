"""Core types for promotion definitions and evaluation results.

This module defines the data structures shared by the parser, the evaluator
and the orchestration layer:
- Condition / Reward: a single DSL line
- PromotionDefinition: the parsed promotion (immutable after construction)
- AppliedReward / RewardOutcome: the result of applying one reward
- ValidationResult / PromotionResult: what validate() and apply() return
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from promodsl.dsl.ast import Expression


@dataclass(frozen=True)
class Condition:
    """A named boolean rule.

    Attributes:
        name: Condition name, referenced by rewards
        function_name: One of the builtin condition functions
        parameters: Dotted paths passed to the function (at most one from the DSL)
        expression: Optional expression AND-combined with the function result
        is_active: Inactive conditions never trigger
    """

    name: str
    function_name: str
    parameters: tuple[str, ...] = ()
    expression: Expression | None = None
    is_active: bool = True

    def is_valid(self) -> bool:
        """Check that the condition names a known function with what it needs."""
        from promodsl.engine.evaluator import CONDITION_FUNCTION_TABLE

        if not self.name or not self.function_name:
            return False
        definition = CONDITION_FUNCTION_TABLE.find(self.function_name)
        if definition is None:
            return False
        required = sum(1 for parameter in definition.parameters if parameter.required)
        return len(self.parameters) >= required

    def __str__(self) -> str:
        params = f" {' '.join(self.parameters)}" if self.parameters else ""
        expr = f" {self.expression}" if self.expression is not None else ""
        return f"{self.name} {self.function_name}{params}{expr}"


@dataclass(frozen=True)
class Reward:
    """A reward granted when its target condition triggers.

    Attributes:
        condition_name: Name of the condition that triggers this reward
        reward_type: One of the builtin reward types
        parameters: Dotted paths (typically ``config.<key>``)
        expression: Optional attached expression, kept for diagnostics
        is_active: Inactive rewards fail to apply
    """

    condition_name: str
    reward_type: str
    parameters: tuple[str, ...] = ()
    expression: Expression | None = None
    is_active: bool = True

    def is_valid(self) -> bool:
        from promodsl.engine.rewards import REWARD_TYPE_TABLE

        if not self.condition_name or not self.reward_type:
            return False
        return self.reward_type in REWARD_TYPE_TABLE

    def targets(self, condition_name: str) -> bool:
        """Check (case-insensitively) whether this reward belongs to a condition."""
        return self.condition_name.lower() == condition_name.lower()

    def __str__(self) -> str:
        params = f" {' '.join(self.parameters)}" if self.parameters else ""
        expr = f" {self.expression}" if self.expression is not None else ""
        return f"condition {self.condition_name} {self.reward_type}{params}{expr}"


@dataclass(frozen=True)
class PromotionDefinition:
    """A parsed promotion: a name, ordered conditions and ordered rewards.

    Treat as immutable; ``with_condition``/``with_reward`` return copies.
    """

    name: str
    conditions: tuple[Condition, ...] = ()
    rewards: tuple[Reward, ...] = ()
    is_active: bool = True
    start_date: datetime | None = None
    end_date: datetime | None = None
    description: str = ""
    metadata: dict[str, Any] = field(default_factory=dict, compare=False)

    def get_condition(self, name: str) -> Condition | None:
        """Find a condition by name (case-insensitive)."""
        lowered = name.lower()
        for condition in self.conditions:
            if condition.name.lower() == lowered:
                return condition
        return None

    def get_rewards_for_condition(self, condition_name: str) -> list[Reward]:
        """Rewards targeting a condition, in declaration order."""
        return [reward for reward in self.rewards if reward.targets(condition_name)]

    def with_condition(self, condition: Condition) -> PromotionDefinition:
        """Return a copy with ``condition`` appended.

        Raises:
            ValueError: If the condition is not valid
        """
        if not condition.is_valid():
            raise ValueError(f"Invalid condition: {condition}")
        return dataclasses.replace(self, conditions=self.conditions + (condition,))

    def with_reward(self, reward: Reward) -> PromotionDefinition:
        """Return a copy with ``reward`` appended.

        Raises:
            ValueError: If the reward is not valid
        """
        if not reward.is_valid():
            raise ValueError(f"Invalid reward: {reward}")
        return dataclasses.replace(self, rewards=self.rewards + (reward,))

    def __str__(self) -> str:
        return (
            f"Promotion: {self.name} (Conditions: {len(self.conditions)}, "
            f"Rewards: {len(self.rewards)}, Active: {self.is_active})"
        )


@dataclass
class AppliedReward:
    """Details of a reward that was applied.

    Attributes:
        reward_type: Canonical reward type name
        condition_name: The condition that triggered it
        value: Computed monetary or point value
        description: Human-readable summary
        parameters: Snapshot of the inputs used to compute the value
    """

    reward_type: str
    condition_name: str
    value: Decimal
    description: str = ""
    parameters: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "rewardType": self.reward_type,
            "conditionName": self.condition_name,
            "value": str(self.value),
            "description": self.description,
            "parameters": {k: _jsonable(v) for k, v in self.parameters.items()},
        }


@dataclass(frozen=True)
class RewardOutcome:
    """Either an applied reward or the reason it could not be applied."""

    applied: AppliedReward | None = None
    error: str | None = None
    code: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, applied: AppliedReward) -> RewardOutcome:
        return cls(applied=applied)

    @classmethod
    def failure(cls, code: str, error: str) -> RewardOutcome:
        return cls(error=error, code=code)


@dataclass
class ValidationResult:
    """Result of validating a promotion against a context."""

    promotion_name: str
    is_valid: bool = False
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


@dataclass
class PromotionResult:
    """Result of applying a promotion to a context.

    Attributes:
        promotion_name: Name of the evaluated promotion
        is_applicable: True when at least one condition triggered
        triggered_conditions: Names of triggered conditions, in declaration order
        applied_rewards: Rewards applied, in application order
        errors: Validation and reward application errors
        metadata: totalValue, triggeredConditionsCount, appliedRewardsCount
    """

    promotion_name: str
    is_applicable: bool = False
    triggered_conditions: list[str] = field(default_factory=list)
    applied_rewards: list[AppliedReward] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def total_value(self) -> Decimal:
        return sum((reward.value for reward in self.applied_rewards), Decimal("0"))

    def to_dict(self) -> dict[str, Any]:
        return {
            "promotionName": self.promotion_name,
            "isApplicable": self.is_applicable,
            "triggeredConditions": list(self.triggered_conditions),
            "appliedRewards": [reward.to_dict() for reward in self.applied_rewards],
            "errors": list(self.errors),
            "metadata": {k: _jsonable(v) for k, v in self.metadata.items()},
        }


def _jsonable(value: Any) -> Any:
    if isinstance(value, Decimal):
        return str(value)
    return value
