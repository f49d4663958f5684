"""Pipegen - compile pipeline templates into Jenkins declarative pipelines."""

from pipegen._version import __version__
from pipegen.ast import PipelineTemplateSpec, SCMInfo, SCMType, TaskTemplateSpec
from pipegen.compiler import Compiler, Renderer, render_and_format, render_pipeline
from pipegen.config import RenderSettings
from pipegen.errors import (
    ErrorList,
    PipegenError,
    TemplateDefinitionError,
    TemplateRenderError,
    ValidateError,
    is_definition_error,
    is_render_error,
    is_validate_error,
)
from pipegen.formatter import format_script

__all__ = [
    "__version__",
    "Compiler",
    "ErrorList",
    "PipegenError",
    "PipelineTemplateSpec",
    "RenderSettings",
    "Renderer",
    "SCMInfo",
    "SCMType",
    "TaskTemplateSpec",
    "TemplateDefinitionError",
    "TemplateRenderError",
    "ValidateError",
    "format_script",
    "is_definition_error",
    "is_render_error",
    "is_validate_error",
    "render_and_format",
    "render_pipeline",
]
