"""Argument declarations.

Templates declare their arguments grouped into display sections:

    arguments:
      - displayName:
          zh-CN: 基本信息
          en: Basic
        items:
          - name: imageTag
            schema:
              type: string
            binding:
              - build.args.imageTag
            required: true
            default: latest
            validation:
              pattern: "^[a-z0-9.-]+$"
              maxLength: 64
            display:
              type: string
              name:
                zh-CN: 镜像版本
                en: Image Tag
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import BaseModel, Field

from pipegen.arguments.base import ArgType, get_arg_type
from pipegen.errors import ErrorList, PipegenError, TemplateDefinitionError, ValidateError
from pipegen.relation import Relation, is_visible

log = logging.getLogger(__name__)


class LocalizedText(BaseModel):
    """Text in Chinese and English"""

    zh_cn: str = Field(default="", alias="zh-CN")
    en: str = ""

    model_config = {"populate_by_name": True}


class ArgValidation(BaseModel):
    pattern: str = ""
    max_length: int = Field(default=0, alias="maxLength")

    model_config = {"populate_by_name": True}


class ArgSchemaItems(BaseModel):
    type: str = ""


class ArgSchema(BaseModel):
    type: str = ""
    items: ArgSchemaItems | None = None


class ArgDisplay(BaseModel):
    """How a UI presents the argument"""

    type: str = ""
    name: LocalizedText = Field(default_factory=LocalizedText)
    args: dict[str, Any] = Field(default_factory=dict)
    description: LocalizedText | None = None


def check_binding_path(arg_name: str, path: str) -> None:
    """A binding path is ``task.scope[.field...]`` with at least two segments."""
    segments = path.split(".")
    if len(segments) < 2 or any(s == "" for s in segments):
        raise TemplateDefinitionError(
            f"{arg_name}.binding `{path}` is invalid, it should be like `task.args.field`",
            {"binding": path},
        )
    # segments after the field name are ignored when routing
    if segments[1] == "args" and len(segments) < 3:
        raise TemplateDefinitionError(
            f"{arg_name}.binding `{path}` is invalid, `args` binding should be `task.args.field`",
            {"binding": path},
        )


class ArgItem(BaseModel):
    """A single argument declaration"""

    name: str = ""
    binding: list[str] = Field(default_factory=list)
    schema_: ArgSchema | None = Field(default=None, alias="schema")
    required: bool = False
    default: Any = None
    validation: ArgValidation | None = None
    display: ArgDisplay | None = None
    relation: Relation | None = None

    model_config = {"populate_by_name": True}

    @property
    def schema_type(self) -> str:
        return self.schema_.type if self.schema_ else ""

    def implementor(self) -> ArgType:
        arg_type = get_arg_type(self.schema_type)
        if arg_type is None:
            raise TemplateDefinitionError(
                f"{self.name}.schema.type={self.schema_type} is not support now"
            )
        return arg_type(self)

    def validate_definition(self) -> None:
        """Check the declaration, raise TemplateDefinitionError or ErrorList.

        Structural checks stop at the first failure since later checks depend
        on them; bindings, relation and type checks are reported together.
        """
        if not self.name.strip():
            raise TemplateDefinitionError("name should not be empty")
        if self.schema_ is None:
            raise TemplateDefinitionError(f"{self.name}.schema is required")
        implementor = self.implementor()
        if self.display is None:
            raise TemplateDefinitionError(f"{self.name}.display is required")
        if not self.display.type:
            raise TemplateDefinitionError(f"{self.name}.display.type is required")
        if not self.display.name.zh_cn:
            raise TemplateDefinitionError(f"{self.name}.display.name.zh-CN is required")
        if not self.display.name.en:
            raise TemplateDefinitionError(f"{self.name}.display.name.en is required")

        errors: list[Exception] = []
        for path in self.binding:
            try:
                check_binding_path(self.name, path)
            except TemplateDefinitionError as exc:
                errors.append(exc)
        if self.relation is not None:
            try:
                self.relation.validate_definition()
            except PipegenError as exc:
                errors.append(exc)
        try:
            implementor.validate_definition()
        except PipegenError as exc:
            errors.append(exc)

        if errors:
            raise ErrorList(errors)

    def validate_value(self, value: Any) -> None:
        if value is None:
            if self.required:
                raise ValidateError(f"{self.name} is required")
            return
        self.implementor().validate_value(value)

    def get_value(self, value: Any) -> Any:
        """Normalised value, validate_value must have passed first"""
        return self.implementor().get_value(value)

    def is_visible(self, values: dict[str, Any]) -> bool:
        visible = is_visible(self.relation, values)
        log.debug("argument %s visible=%s", self.name, visible)
        return visible


class ArgSection(BaseModel):
    """A titled group of arguments"""

    display_name: LocalizedText = Field(default_factory=LocalizedText, alias="displayName")
    items: list[ArgItem] = Field(default_factory=list)

    model_config = {"populate_by_name": True}


def all_arg_items(sections: list[ArgSection]) -> list[ArgItem]:
    return [item for section in sections for item in section.items]


def default_values(items: list[ArgItem]) -> dict[str, Any]:
    """Declared defaults, arguments without a default are left out"""
    return {item.name: item.default for item in items if item.default is not None}


def validate_definitions(items: list[ArgItem]) -> list[Exception]:
    """Check every declaration, return the collected errors"""
    errors: list[Exception] = []
    seen: set[str] = set()
    for item in items:
        try:
            item.validate_definition()
        except PipegenError as exc:
            errors.append(exc)
        if item.name and item.name in seen:
            errors.append(TemplateDefinitionError(f"argument name `{item.name}` is duplicated"))
        seen.add(item.name)
    return errors


def validate_values(items: list[ArgItem], values: dict[str, Any]) -> list[Exception]:
    """Check supplied values of the visible arguments, return collected errors"""
    errors: list[Exception] = []
    for item in items:
        if not item.is_visible(values):
            log.debug("skip validating invisible argument %s", item.name)
            continue
        try:
            item.validate_value(values.get(item.name))
        except PipegenError as exc:
            errors.append(exc)
    return errors
