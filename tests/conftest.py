"""Shared fixtures for promodsl tests."""

from decimal import Decimal
from pathlib import Path

import pytest

from promodsl.domain import Cart, CartItem, PromotionConfig, PromotionContext

FIXTURES = Path(__file__).parent / "fixtures"

SIMPLE_DSL = """promotion: "Simple Test"
conditions:
- A minimumSpending config.minAmount
rewards:
- condition A discount config.discountPercent
"""


def make_context(items=None, config=None) -> PromotionContext:
    """Build a context from (sku, price, quantity[, name[, properties]]) tuples."""
    cart_items = []
    for entry in items or []:
        sku, price, quantity, *rest = entry
        name = rest[0] if rest else ""
        properties = rest[1] if len(rest) > 1 else {}
        cart_items.append(
            CartItem(sku=sku, price=Decimal(price), quantity=quantity, name=name, properties=properties)
        )
    return PromotionContext(
        cart=Cart(items=cart_items),
        config=PromotionConfig(values=dict(config or {})),
    )


@pytest.fixture
def fixtures_dir() -> Path:
    return FIXTURES


@pytest.fixture
def standard_items():
    """Two items totalling 109.97 over 3 units."""
    return [
        ("ITEM001", "29.99", 2, "Test Product 1", {"category": "shirts"}),
        ("ITEM002", "49.99", 1, "Test Product 2"),
    ]


@pytest.fixture
def standard_context(standard_items) -> PromotionContext:
    return make_context(
        standard_items,
        {
            "minAmount": Decimal("50.00"),
            "minQuantity": 2,
            "discountPercent": Decimal("10.0"),
            "discountAmount": Decimal("5.00"),
            "targetSku": "ITEM001",
            "pointsMultiplier": Decimal("2"),
        },
    )
