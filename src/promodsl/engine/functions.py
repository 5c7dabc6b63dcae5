"""Builtin function tables for the promotion engine.

Condition functions (``minimumSpending``, ``any``, ...) and reward types
(``discount``, ``points``, ...) are fixed sets. Each is described by a
FunctionDefinition carrying documentation and its implementation; a
FunctionTable gives case-insensitive lookup over a set of definitions.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Iterable


class FunctionKind(Enum):
    """What a builtin name is used for in the DSL."""

    CONDITION = "condition"
    REWARD = "reward"


@dataclass(frozen=True)
class FunctionParameter:
    """Definition of a function parameter.

    Attributes:
        name: Parameter name
        description: Human-readable description
        required: Whether the DSL line must supply it
        default_key: Config key used when the parameter is omitted or unresolved
    """

    name: str
    description: str
    required: bool = True
    default_key: str | None = None


@dataclass(frozen=True)
class FunctionDefinition:
    """Complete definition of a builtin condition function or reward type.

    Attributes:
        name: Canonical name as written in the DSL
        kind: Condition function or reward type
        description: Human-readable description
        parameters: Parameter definitions (at most one comes from the DSL line)
        config_keys: Additional config keys read by the implementation
        examples: Example DSL lines
        implementation: The Python callable
    """

    name: str
    kind: FunctionKind
    description: str
    parameters: tuple[FunctionParameter, ...] = ()
    config_keys: tuple[str, ...] = ()
    examples: tuple[str, ...] = ()
    implementation: Callable[..., Any] | None = field(default=None, compare=False)

    def to_dict(self) -> dict[str, Any]:
        """Export for the CLI documentation listing."""
        return {
            "name": self.name,
            "kind": self.kind.value,
            "description": self.description,
            "parameters": [
                {
                    "name": p.name,
                    "description": p.description,
                    "required": p.required,
                    "defaultKey": p.default_key,
                }
                for p in self.parameters
            ],
            "configKeys": list(self.config_keys),
            "examples": list(self.examples),
        }


class FunctionTable:
    """Immutable, case-insensitive lookup over builtin definitions.

    Example:
        table = FunctionTable([FunctionDefinition(name="any", ...)])
        table.find("ANY").implementation(evaluator, ())
    """

    def __init__(self, definitions: Iterable[FunctionDefinition]):
        self._definitions: dict[str, FunctionDefinition] = {
            definition.name.lower(): definition for definition in definitions
        }

    def __contains__(self, name: str) -> bool:
        return name.lower() in self._definitions

    def find(self, name: str) -> FunctionDefinition | None:
        """Get a definition by name, or None."""
        return self._definitions.get(name.lower())

    def list_all(self) -> list[FunctionDefinition]:
        return list(self._definitions.values())

    def export_documentation(self) -> dict[str, Any]:
        return {definition.name: definition.to_dict() for definition in self.list_all()}
