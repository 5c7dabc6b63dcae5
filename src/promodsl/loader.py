"""Loaders for promotion sources and evaluation contexts.

A context document is YAML:

    cart:
      items:
        - sku: ITEM001
          price: 29.99
          quantity: 2
          name: Test Product 1
          properties: {category: shoes}
    config:
      minAmount: 50.00
      discountPercent: 10

Floats are converted through ``str()`` to Decimal so 29.99 stays 29.99.
"""

from __future__ import annotations

from decimal import Decimal
from pathlib import Path
from typing import Any

import yaml

from promodsl.domain.context import (
    Cart,
    CartItem,
    ConfigValue,
    PromotionConfig,
    PromotionContext,
    to_decimal,
)
from promodsl.domain.types import PromotionDefinition
from promodsl.dsl.parser import parse_promotion
from promodsl.errors import ContextLoadError


def load_promotion(path: Path) -> PromotionDefinition:
    """Read and parse a ``.promo`` file."""
    return parse_promotion(Path(path).read_text(encoding="utf-8"))


def load_context(path: Path) -> PromotionContext:
    """Read a YAML context document from disk."""
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise ContextLoadError(f"Cannot read context file {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ContextLoadError(f"Invalid YAML in {path}: {e}") from e
    return context_from_dict(data or {})


def context_from_dict(data: Any) -> PromotionContext:
    """Build a PromotionContext from parsed YAML/JSON data."""
    if not isinstance(data, dict):
        raise ContextLoadError("Context document must be a mapping")

    cart_data = data.get("cart") or {}
    if not isinstance(cart_data, dict):
        raise ContextLoadError("'cart' must be a mapping")
    items_data = cart_data.get("items") or []
    if not isinstance(items_data, list):
        raise ContextLoadError("'cart.items' must be a list")

    config_data = data.get("config") or {}
    if not isinstance(config_data, dict):
        raise ContextLoadError("'config' must be a mapping")

    additional_data = data.get("additionalData") or {}
    if not isinstance(additional_data, dict):
        raise ContextLoadError("'additionalData' must be a mapping")

    return PromotionContext(
        cart=Cart(items=[_resolve_item(item, index) for index, item in enumerate(items_data)]),
        config=PromotionConfig(
            values={str(key): _resolve_config_value(key, value) for key, value in config_data.items()}
        ),
        additional_data=dict(additional_data),
    )


def _resolve_item(data: Any, index: int) -> CartItem:
    if not isinstance(data, dict):
        raise ContextLoadError(f"cart.items[{index}] must be a mapping")

    price = to_decimal(data.get("price", 0))
    if price is None:
        raise ContextLoadError(f"cart.items[{index}].price is not a number: {data.get('price')!r}")

    properties = data.get("properties") or {}
    if not isinstance(properties, dict):
        raise ContextLoadError(f"cart.items[{index}].properties must be a mapping")

    quantity = data.get("quantity", 1)
    if isinstance(quantity, bool) or not isinstance(quantity, int):
        raise ContextLoadError(f"cart.items[{index}].quantity must be an integer: {quantity!r}")

    return CartItem(
        sku=str(data.get("sku", "")),
        price=price,
        quantity=quantity,
        name=str(data.get("name", "")),
        properties=dict(properties),
    )


def _resolve_config_value(key: Any, value: Any) -> ConfigValue:
    if isinstance(value, (bool, int, str, Decimal)):
        return value
    if isinstance(value, float):
        converted = to_decimal(value)
        if converted is not None:
            return converted
    raise ContextLoadError(
        f"config.{key} must be a number, string or boolean, got {type(value).__name__}"
    )


def sample_context() -> PromotionContext:
    """A two-item cart with the config keys used by the bundled examples."""
    return PromotionContext(
        cart=Cart(
            items=[
                CartItem(sku="ITEM001", price=Decimal("29.99"), quantity=2, name="Test Product 1"),
                CartItem(sku="ITEM002", price=Decimal("49.99"), quantity=1, name="Test Product 2"),
            ]
        ),
        config=PromotionConfig(
            values={
                "minAmount": Decimal("50.00"),
                "minQuantity": 2,
                "discountPercent": Decimal("10.0"),
                "discountAmount": Decimal("5.00"),
                "sku": "ITEM001",
                "targetSku": "ITEM001",
                "threshold": Decimal("100.00"),
                "premiumThreshold": Decimal("200.00"),
                "pointsMultiplier": Decimal("2.0"),
                "freeProduct": "FREE001",
                "bonusProduct": "BONUS001",
                "standardDiscount": Decimal("10.0"),
                "premiumDiscount": Decimal("25.00"),
                "minTargetQuantity": 1,
            }
        ),
    )
