"""Pipegen Exceptions

Error kinds raised while validating and rendering pipeline templates.

Three kinds exist and they do not nest into a hierarchy:

- TemplateDefinitionError: the template itself is structurally invalid
- ValidateError: a supplied runtime value breaks its declared contract
- TemplateRenderError: substituting values into a script body failed

Errors of one pass are collected into an ErrorList instead of failing fast.
"""

from __future__ import annotations

from typing import Any, Iterable


class PipegenError(Exception):
    """Base exception for all pipegen errors."""

    kind = "PipegenError"
    default_message = "pipegen error"

    def __init__(self, message: str = "", data: dict[str, Any] | None = None) -> None:
        self.message = message or self.default_message
        self.data = data or {}
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.data:
            return f"{self.kind}: {self.message}, data={self.data}"
        return f"{self.kind}: {self.message}"


class TemplateDefinitionError(PipegenError):
    """Raised when a template definition is invalid."""

    kind = "TemplateDefinitionError"
    default_message = "template format error"


class ValidateError(PipegenError):
    """Raised when a supplied value does not match its declaration."""

    kind = "ValidateError"
    default_message = "validate error"


class TemplateRenderError(PipegenError):
    """Raised when a script body cannot be rendered."""

    kind = "TemplateRenderError"
    default_message = "template render error"


class ErrorList(PipegenError):
    """Several errors collected during one pass.

    Sub-errors keep their own kind; an ErrorList may contain other ErrorLists.
    """

    kind = "ErrorList"

    def __init__(self, errors: Iterable[Exception]) -> None:
        self.errors: list[Exception] = list(errors)
        super().__init__(f"{len(self.errors)} error(s)")

    def __str__(self) -> str:
        lines = "\n".join(f"  - {err}" for err in self.errors)
        return f"multiple errors:\n{lines}"

    def __iter__(self):
        return iter(self.errors)

    def __len__(self) -> int:
        return len(self.errors)

    def flatten(self) -> list[Exception]:
        """Return the leaf errors, depth first."""
        leaves: list[Exception] = []
        for err in self.errors:
            if isinstance(err, ErrorList):
                leaves.extend(err.flatten())
            else:
                leaves.append(err)
        return leaves

    def contains(self, kind: type[PipegenError]) -> bool:
        """Whether any leaf error is an instance of ``kind``."""
        return any(isinstance(err, kind) for err in self.flatten())


def raise_errors(errors: list[Exception]) -> None:
    """Raise an ErrorList when ``errors`` is non-empty."""
    if errors:
        raise ErrorList(errors)


def _is_kind(error: BaseException, kind: type[PipegenError]) -> bool:
    if isinstance(error, ErrorList):
        return error.contains(kind)
    return isinstance(error, kind)


def is_definition_error(error: BaseException) -> bool:
    """Whether ``error`` is, or contains, a TemplateDefinitionError."""
    return _is_kind(error, TemplateDefinitionError)


def is_validate_error(error: BaseException) -> bool:
    """Whether ``error`` is, or contains, a ValidateError."""
    return _is_kind(error, ValidateError)


def is_render_error(error: BaseException) -> bool:
    """Whether ``error`` is, or contains, a TemplateRenderError."""
    return _is_kind(error, TemplateRenderError)
