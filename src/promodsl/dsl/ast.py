"""Expression AST for the promotion DSL.

Nodes are immutable and built only by the parser. Each node renders a
diagnostic form via ``str()``, e.g. ``(item.price > 10 && cart.itemsCount >= 2)``.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Union


@dataclass(frozen=True)
class PropertyAccess:
    """A dotted property path (e.g., config.minAmount, item.sku)."""

    segments: tuple[str, ...]

    @property
    def path(self) -> str:
        return ".".join(self.segments)

    def __str__(self) -> str:
        return self.path


@dataclass(frozen=True)
class Literal:
    """A number or string literal."""

    value: Decimal | str

    def __str__(self) -> str:
        if isinstance(self.value, str):
            return f'"{self.value}"'
        return str(self.value)


Operand = Union[PropertyAccess, Literal]


@dataclass(frozen=True)
class Comparison:
    """``left op right``, or a bare operand when operator is None."""

    left: Operand
    operator: str | None = None
    right: Operand | None = None

    @property
    def is_bare(self) -> bool:
        return self.operator is None

    def __str__(self) -> str:
        if self.operator is None:
            return str(self.left)
        return f"{self.left} {self.operator} {self.right}"


@dataclass(frozen=True)
class Logical:
    """``left && right`` or ``left || right``."""

    left: "Expression"
    operator: str
    right: "Expression"

    def __str__(self) -> str:
        return f"({self.left} {self.operator} {self.right})"


@dataclass(frozen=True)
class FunctionCall:
    """A builtin call with its operand arguments."""

    name: str
    args: tuple[Operand, ...] = ()

    def __str__(self) -> str:
        return f"{self.name}({', '.join(str(arg) for arg in self.args)})"


Expression = Union[Comparison, Logical, FunctionCall, PropertyAccess, Literal]


def property_paths(node: Expression) -> list[str]:
    """Collect the dotted paths an expression reads, left to right."""
    if isinstance(node, PropertyAccess):
        return [node.path]
    if isinstance(node, Literal):
        return []
    if isinstance(node, Comparison):
        paths = property_paths(node.left)
        if node.right is not None:
            paths.extend(property_paths(node.right))
        return paths
    if isinstance(node, Logical):
        return property_paths(node.left) + property_paths(node.right)
    if isinstance(node, FunctionCall):
        return [path for arg in node.args for path in property_paths(arg)]
    raise TypeError(f"Unknown node type: {type(node).__name__}")
