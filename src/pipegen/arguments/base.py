"""Argument type registry.

Every schema type name maps to an ArgType subclass. An ArgType wraps one
argument declaration and knows how to check the declaration, check a supplied
value and normalise that value for rendering.
"""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

from pipegen.errors import TemplateDefinitionError, ValidateError

if TYPE_CHECKING:
    from pipegen.arguments.spec import ArgItem


class ArgType(ABC):
    """Behaviour of one schema type, bound to a declaration"""

    type_id: str = ""

    def __init__(self, arg: "ArgItem") -> None:
        self.arg = arg

    @property
    def name(self) -> str:
        return self.arg.name

    def validate_definition(self) -> None:
        """Type specific definition checks, raise TemplateDefinitionError."""

    @abstractmethod
    def validate_value(self, value: Any) -> None:
        """Check a non-None value, raise ValidateError."""

    @abstractmethod
    def get_value(self, value: Any) -> Any:
        """Normalise a validated value, None means "use the default"."""

    def default_or(self, fallback: Any) -> Any:
        if self.arg.default is None:
            return fallback
        return self.arg.default

    def require_display_type(self) -> None:
        display_type = self.arg.display.type if self.arg.display else ""
        if display_type != self.type_id:
            raise TemplateDefinitionError(
                f"{self.name}.display.type should be {self.type_id}",
                {"displayType": display_type},
            )


class JsonDecodingArgType(ArgType):
    """Base for composite types whose value may arrive as a JSON string"""

    def decode(self, value: Any) -> Any:
        if isinstance(value, str):
            try:
                return json.loads(value)
            except json.JSONDecodeError as exc:
                raise ValidateError(
                    f"argument {self.arg.schema_type}({self.name})'s value is not valid json: {exc.msg}",
                    {"receivedValue": value},
                ) from exc
        return value

    def get_value(self, value: Any) -> Any:
        if value is None:
            return self.arg.default
        return self.decode(value)


# Registry of schema type name -> implementation, filled by pipegen.arguments
_ARG_TYPES: dict[str, type[ArgType]] = {}


def register_arg_type(type_id: str, arg_type: type[ArgType]) -> None:
    """Register an implementation for a schema type name"""
    _ARG_TYPES[type_id] = arg_type


def get_arg_type(type_id: str) -> type[ArgType] | None:
    return _ARG_TYPES.get(type_id)


def is_registered(type_id: str) -> bool:
    return type_id in _ARG_TYPES


def registered_types() -> list[str]:
    return sorted(_ARG_TYPES)
