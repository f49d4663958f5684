"""Scalar, object and array argument types"""

from __future__ import annotations

import re
from typing import Any

from pipegen.arguments.base import ArgType, get_arg_type
from pipegen.errors import ErrorList, PipegenError, TemplateDefinitionError, ValidateError

DISPLAY_INTEGRATION = "pipegen.io/integration"

_TRUE_LITERALS = {"1", "t", "T", "TRUE", "true", "True"}
_FALSE_LITERALS = {"0", "f", "F", "FALSE", "false", "False"}


def parse_bool_literal(value: Any) -> bool | None:
    """Parse a boolean spelled as a string, None if it is not one"""
    if not isinstance(value, str):
        return None
    if value in _TRUE_LITERALS:
        return True
    if value in _FALSE_LITERALS:
        return False
    return None


class StringArg(ArgType):
    type_id = "string"

    def validate_definition(self) -> None:
        display = self.arg.display
        if display is not None and display.type == DISPLAY_INTEGRATION:
            if "types" not in display.args:
                raise TemplateDefinitionError(
                    f'{self.name}.display.args require key "types"'
                )

    def validate_value(self, value: Any) -> None:
        if not isinstance(value, str):
            raise ValidateError(
                f"{self.name} should be string",
                {"receivedValue": value, "receivedType": type(value).__name__},
            )

        validation = self.arg.validation
        if validation is None:
            return
        if validation.max_length > 0 and len(value) > validation.max_length:
            raise ValidateError(
                f"{self.name} is too long, length should be less than {validation.max_length}",
                {"receivedValue": value, "maxLength": validation.max_length},
            )
        if validation.pattern:
            try:
                matched = re.search(validation.pattern, value)
            except re.error as exc:
                raise TemplateDefinitionError(
                    f"{self.name}.validation.pattern is invalid: {exc}"
                ) from exc
            if matched is None:
                raise ValidateError(
                    f"{self.name}'s value {value} is not match the pattern {validation.pattern}",
                    {"receivedValue": value, "pattern": validation.pattern},
                )

    def get_value(self, value: Any) -> Any:
        if value is None:
            return self.default_or("")
        return str(value).strip()


class BooleanArg(ArgType):
    type_id = "boolean"

    def validate_value(self, value: Any) -> None:
        if isinstance(value, bool) or parse_bool_literal(value) is not None:
            return
        raise ValidateError(
            f"{self.name} should be boolean",
            {"receivedValue": value, "receivedType": type(value).__name__},
        )

    def get_value(self, value: Any) -> Any:
        if value is None:
            return self.default_or(False)
        parsed = parse_bool_literal(value)
        if parsed is not None:
            return parsed
        return value


class IntArg(ArgType):
    type_id = "int"

    def validate_value(self, value: Any) -> None:
        pass

    def get_value(self, value: Any) -> Any:
        if value is None:
            return self.default_or(0)
        return value


class ObjectArg(ArgType):
    type_id = "object"

    def validate_value(self, value: Any) -> None:
        pass

    def get_value(self, value: Any) -> Any:
        if value is None:
            return self.default_or({})
        return value


class ArrayArg(ArgType):
    """Array whose elements are checked by the ``schema.items.type`` type"""

    type_id = "array"

    def item_type(self) -> ArgType:
        items = self.arg.schema_.items if self.arg.schema_ else None
        item_type_id = items.type if items else ""
        item_cls = get_arg_type(item_type_id)
        if item_cls is None:
            raise TemplateDefinitionError(
                f"{self.name}.schema.items.type={item_type_id} is not support now"
            )
        return item_cls(self.arg)

    def validate_definition(self) -> None:
        items = self.arg.schema_.items if self.arg.schema_ else None
        if items is None:
            raise TemplateDefinitionError(f"{self.name}.schema.items should not be nil")
        # the item type shares this declaration, so it cannot carry items itself
        if items.type == self.type_id:
            raise TemplateDefinitionError(
                f"{self.name}.schema.items.type={items.type} is not support, nested arrays are not allowed"
            )
        self.item_type().validate_definition()

    def validate_value(self, value: Any) -> None:
        if not isinstance(value, list):
            raise ValidateError(
                f"argument {self.name}'s value is invalid format, it should be an array, "
                f"but got type {type(value).__name__}"
            )

        item_type = self.item_type()
        errors: list[Exception] = []
        for i, element in enumerate(value):
            try:
                item_type.validate_value(element)
            except PipegenError as exc:
                exc.data.setdefault("index", i)
                errors.append(exc)
        if errors:
            raise ErrorList(errors)

    def get_value(self, value: Any) -> Any:
        if value is None:
            return self.arg.default
        return value
