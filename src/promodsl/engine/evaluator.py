"""Evaluator for promotion conditions.

Walks condition expressions and computes booleans against a PromotionContext.
Evaluation is fail-soft: a path that cannot be resolved, an unknown function
or a type mismatch evaluates to False instead of raising.

Property paths resolve against three roots:
- ``item.<field>``: the FIRST cart item only (sku, price, quantity,
  totalPrice, name, else a free-form item property)
- ``config.<key>``: the promotion configuration
- ``cart.<field>``: totalAmount, totalQuantity, itemsCount
"""

import logging
import operator
from decimal import Decimal
from typing import Any, Callable

from promodsl.domain.context import Cart, CartItem, PromotionConfig, PromotionContext, to_decimal
from promodsl.domain.types import Condition
from promodsl.dsl.ast import (
    Comparison,
    Expression,
    FunctionCall,
    Literal,
    Logical,
    PropertyAccess,
)
from promodsl.engine.functions import (
    FunctionDefinition,
    FunctionKind,
    FunctionParameter,
    FunctionTable,
)

logger = logging.getLogger(__name__)


class EvaluationError(Exception):
    """Internal error for malformed trees; never escapes evaluate_condition."""
    pass


_NUMERIC_OPERATORS: dict[str, Callable[[Decimal, Decimal], bool]] = {
    "=": operator.eq,
    "!=": operator.ne,
    ">": operator.gt,
    "<": operator.lt,
    ">=": operator.ge,
    "<=": operator.le,
}

_ITEM_FIELDS: dict[str, Callable[[CartItem], Any]] = {
    "sku": lambda item: item.sku,
    "price": lambda item: item.price,
    "quantity": lambda item: item.quantity,
    "totalprice": lambda item: item.total_price,
    "name": lambda item: item.name,
}

_CART_FIELDS: dict[str, Callable[[Cart], Any]] = {
    "totalamount": lambda cart: cart.total_amount,
    "totalquantity": lambda cart: cart.total_quantity,
    "itemscount": lambda cart: cart.unique_items_count,
}


def config_key(parameter: str) -> str:
    """Config key named by a function parameter; the ``config.`` prefix is optional."""
    if parameter.lower().startswith("config."):
        return parameter[len("config."):]
    return parameter


class Evaluator:
    """Evaluates condition expressions against a context.

    Usage:
        evaluator = Evaluator(PromotionContext(cart=cart, config=config))
        matched = evaluator.evaluate_bool(condition.expression)
    """

    def __init__(self, context: PromotionContext):
        self.context = context
        self.cart = context.cart if context.cart is not None else Cart()
        self.config = context.config if context.config is not None else PromotionConfig()

    def evaluate(self, node: Expression) -> Any:
        """Evaluate an AST node and return its value."""
        method_name = f"_eval_{type(node).__name__.lower()}"
        method = getattr(self, method_name, None)

        if method is None:
            raise EvaluationError(f"Unknown node type: {type(node).__name__}")

        return method(node)

    def evaluate_bool(self, node: Expression) -> bool:
        """Evaluate an AST node and reduce the result to a boolean."""
        return truthy(self.evaluate(node))

    # -------------------------------------------------------------------------
    # Node type evaluators
    # -------------------------------------------------------------------------

    def _eval_literal(self, node: Literal) -> Decimal | str:
        return node.value

    def _eval_propertyaccess(self, node: PropertyAccess) -> Any:
        return self.resolve(node.segments)

    def _eval_comparison(self, node: Comparison) -> bool:
        left = self.evaluate(node.left)

        # A bare operand tests the truthiness of what it resolves to
        if node.operator is None:
            return truthy(left)

        if node.right is None:
            raise EvaluationError(f"Comparison '{node}' has no right operand")
        right = self.evaluate(node.right)

        return compare_values(left, node.operator, right)

    def _eval_logical(self, node: Logical) -> bool:
        # Both sides are always evaluated
        left = self.evaluate_bool(node.left)
        right = self.evaluate_bool(node.right)

        if node.operator == "&&":
            return left and right
        if node.operator == "||":
            return left or right

        logger.warning("Unknown logical operator %r in %s", node.operator, node)
        return False

    def _eval_functioncall(self, node: FunctionCall) -> bool:
        parameters = tuple(
            arg.path if isinstance(arg, PropertyAccess) else str(arg.value)
            for arg in node.args
        )
        return self.call_function(node.name, parameters)

    # -------------------------------------------------------------------------
    # Functions and paths
    # -------------------------------------------------------------------------

    def call_function(self, name: str, parameters: tuple[str, ...]) -> bool:
        """Run a builtin condition function; unknown names evaluate to False."""
        definition = CONDITION_FUNCTION_TABLE.find(name)
        if definition is None or definition.implementation is None:
            logger.warning("Unknown condition function '%s', evaluating to false", name)
            return False
        return bool(definition.implementation(self, parameters))

    def resolve(self, segments: tuple[str, ...]) -> Any:
        """Resolve a property path; returns None when it cannot be resolved."""
        if len(segments) < 2:
            return None

        root = segments[0].lower()

        if root == "config":
            return self.config.get(".".join(segments[1:]))

        if len(segments) != 2:
            return None

        if root == "item":
            return self._item_property(segments[1])
        if root == "cart":
            getter = _CART_FIELDS.get(segments[1].lower())
            return getter(self.cart) if getter else None

        return None

    def resolve_path(self, path: str) -> Any:
        """Resolve a dotted path string."""
        return self.resolve(tuple(path.split(".")))

    def _item_property(self, name: str) -> Any:
        if not self.cart.items:
            return None
        item = self.cart.items[0]
        getter = _ITEM_FIELDS.get(name.lower())
        if getter is not None:
            return getter(item)
        return item.properties.get(name)

    def config_decimal(self, parameter: str) -> Decimal | None:
        return self.config.get_decimal(config_key(parameter))


# -----------------------------------------------------------------------------
# Value helpers
# -----------------------------------------------------------------------------


def truthy(value: Any) -> bool:
    """Truthiness of a resolved value; absent values are false."""
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float, Decimal)):
        return value != 0
    if isinstance(value, str):
        return len(value) > 0
    return True


def compare_values(left: Any, op: str, right: Any) -> bool:
    """Compare two resolved values.

    Strings compare case-insensitively with ``=``/``!=`` only. Everything else
    is coerced to Decimal first; a failed coercion yields False.
    """
    if left is None or right is None:
        return False

    if isinstance(left, str) and isinstance(right, str):
        if op == "=":
            return left.casefold() == right.casefold()
        if op == "!=":
            return left.casefold() != right.casefold()
        return False

    if isinstance(left, bool) and isinstance(right, bool):
        if op == "=":
            return left == right
        if op == "!=":
            return left != right
        return False

    left_number = to_decimal(left)
    right_number = to_decimal(right)
    if left_number is None or right_number is None:
        return False

    compare = _NUMERIC_OPERATORS.get(op)
    if compare is None:
        return False
    return compare(left_number, right_number)


# -----------------------------------------------------------------------------
# Builtin condition functions
# -----------------------------------------------------------------------------


def _minimum_spending(evaluator: Evaluator, parameters: tuple[str, ...]) -> bool:
    if not parameters:
        return False
    minimum = evaluator.config_decimal(parameters[0])
    if minimum is None:
        logger.debug("minimumSpending: no numeric config value for %s", parameters[0])
        return False
    return evaluator.cart.total_amount >= minimum


def _minimum_quantity(evaluator: Evaluator, parameters: tuple[str, ...]) -> bool:
    if not parameters:
        return False
    minimum = evaluator.config_decimal(parameters[0])
    if minimum is None:
        logger.debug("minimumQuantity: no numeric config value for %s", parameters[0])
        return False
    return evaluator.cart.total_quantity >= minimum


def _has_items(evaluator: Evaluator, parameters: tuple[str, ...]) -> bool:
    # Per-item predicates come from the attached expression
    return not evaluator.cart.is_empty


_THRESHOLD = FunctionParameter("configKey", "Config key holding the threshold")

CONDITION_FUNCTION_TABLE = FunctionTable([
    FunctionDefinition(
        name="minimumSpending",
        kind=FunctionKind.CONDITION,
        description="Cart total amount is at least the configured minimum",
        parameters=(_THRESHOLD,),
        examples=("- A minimumSpending config.minAmount",),
        implementation=_minimum_spending,
    ),
    FunctionDefinition(
        name="minimumQuantity",
        kind=FunctionKind.CONDITION,
        description="Cart total quantity is at least the configured minimum",
        parameters=(_THRESHOLD,),
        examples=("- B minimumQuantity config.minQuantity",),
        implementation=_minimum_quantity,
    ),
    FunctionDefinition(
        name="any",
        kind=FunctionKind.CONDITION,
        description="Cart has at least one item; combine with an item expression",
        examples=('- C any item.sku = config.targetSku',),
        implementation=_has_items,
    ),
    FunctionDefinition(
        name="all",
        kind=FunctionKind.CONDITION,
        description="Cart has at least one item; combine with an item expression",
        examples=("- D all item.price > 10",),
        implementation=_has_items,
    ),
])


# -----------------------------------------------------------------------------
# Convenience functions
# -----------------------------------------------------------------------------


def evaluate_condition(condition: Condition, context: PromotionContext) -> bool:
    """Evaluate a condition: its function result AND its attached expression.

    Never raises; anything that cannot be evaluated is False.
    """
    if not condition.is_active:
        return False

    if context.cart is None or context.config is None:
        logger.warning("Condition '%s' evaluated without a cart or config", condition.name)
        return False

    evaluator = Evaluator(context)
    try:
        result = evaluator.call_function(condition.function_name, condition.parameters)
        if condition.expression is not None:
            expression_result = evaluator.evaluate_bool(condition.expression)
            result = result and expression_result
    except (EvaluationError, ArithmeticError) as e:
        logger.warning("Error evaluating condition %s: %r", condition.name, e)
        return False

    logger.debug("Condition %s evaluated to %s", condition.name, result)
    return result


def evaluate_expression(expression: Expression, context: PromotionContext) -> bool:
    """Evaluate a standalone expression to a boolean, fail-soft."""
    try:
        return Evaluator(context).evaluate_bool(expression)
    except (EvaluationError, ArithmeticError) as e:
        logger.warning("Error evaluating expression %s: %r", expression, e)
        return False
