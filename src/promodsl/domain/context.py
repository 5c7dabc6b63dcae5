"""Runtime context for promotion evaluation.

A PromotionContext pairs the shopping cart with the promotion configuration.
Both are read-only during evaluation; cart totals are computed on every read.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Any, Union

# The closed set of types a config value may take
ConfigValue = Union[Decimal, int, float, str, bool]


def to_decimal(value: Any) -> Decimal | None:
    """Coerce a number or numeric string to Decimal.

    Returns None when the value cannot be coerced. Booleans are not numbers.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        return value if value.is_finite() else None
    if isinstance(value, int):
        return Decimal(value)
    if isinstance(value, float):
        # str() keeps the shortest repr, so 29.99 stays 29.99
        result = Decimal(str(value))
        return result if result.is_finite() else None
    if isinstance(value, str):
        try:
            result = Decimal(value.strip())
        except InvalidOperation:
            return None
        return result if result.is_finite() else None
    return None


@dataclass
class CartItem:
    """A single line in the cart."""

    sku: str = ""
    price: Decimal = Decimal("0")
    quantity: int = 0
    name: str = ""
    properties: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not isinstance(self.price, Decimal):
            price = to_decimal(self.price)
            if price is None:
                raise ValueError(f"Invalid price for item {self.sku!r}: {self.price!r}")
            self.price = price

    @property
    def total_price(self) -> Decimal:
        return self.price * self.quantity


@dataclass
class Cart:
    """Shopping cart; derived totals always reflect the current items."""

    items: list[CartItem] = field(default_factory=list)

    @property
    def total_amount(self) -> Decimal:
        return sum((item.total_price for item in self.items), Decimal("0"))

    @property
    def total_quantity(self) -> int:
        return sum(item.quantity for item in self.items)

    @property
    def unique_items_count(self) -> int:
        return len(self.items)

    @property
    def is_empty(self) -> bool:
        return not self.items

    def get_item_by_sku(self, sku: str) -> CartItem | None:
        for item in self.items:
            if item.sku == sku:
                return item
        return None

    def get_items_by_sku(self, sku: str) -> list[CartItem]:
        return [item for item in self.items if item.sku == sku]


@dataclass
class PromotionConfig:
    """Named configuration values referenced as ``config.<key>``."""

    values: dict[str, ConfigValue] = field(default_factory=dict)

    def has_value(self, key: str) -> bool:
        return key in self.values

    def get(self, key: str, default: Any = None) -> Any:
        return self.values.get(key, default)

    def get_decimal(self, key: str) -> Decimal | None:
        """Numeric value at ``key``, or None if missing or not numeric."""
        return to_decimal(self.values.get(key))


@dataclass
class PromotionContext:
    """Everything a promotion is evaluated against.

    Attributes:
        cart: The shopping cart (None is reported by validation)
        config: Promotion configuration (None is reported by validation)
        additional_data: Free-form caller data, not read by the engine
    """

    cart: Cart | None = field(default_factory=Cart)
    config: PromotionConfig | None = field(default_factory=PromotionConfig)
    additional_data: dict[str, Any] = field(default_factory=dict)
