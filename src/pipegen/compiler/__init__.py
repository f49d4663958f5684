"""Pipegen compiler - template composition, rendering and formatting."""

from typing import Any, Dict, Mapping, Optional

from pipegen.ast.spec import PipelineTemplateSpec, SCMInfo, TaskTemplateSpec
from pipegen.compiler.compiler import Compiler
from pipegen.compiler.renderer import Renderer, render_agent, render_stage_agent
from pipegen.compiler.resolver import Resolver, TaskBinding
from pipegen.compiler.spec import Pipeline, PostCondition, ResolvedTask, Stage, Steps
from pipegen.config import RenderSettings
from pipegen.formatter import format_script


def render_pipeline(
    spec: PipelineTemplateSpec,
    task_templates: Mapping[str, TaskTemplateSpec],
    values: Optional[Dict[str, Any]] = None,
    scm: Optional[SCMInfo] = None,
    settings: Optional[RenderSettings] = None,
) -> str:
    """Compile and render a pipeline template to unformatted script text."""
    pipeline = Compiler(task_templates).compile(spec, values, scm)
    return Renderer(settings).render(pipeline)


def render_and_format(
    spec: PipelineTemplateSpec,
    task_templates: Mapping[str, TaskTemplateSpec],
    values: Optional[Dict[str, Any]] = None,
    scm: Optional[SCMInfo] = None,
    settings: Optional[RenderSettings] = None,
) -> str:
    """Compile, render and format a pipeline template."""
    settings = settings or RenderSettings()
    text = render_pipeline(spec, task_templates, values, scm, settings)
    return format_script(text, settings.indent_spaces)


__all__ = [
    "Compiler",
    "Pipeline",
    "PostCondition",
    "Renderer",
    "ResolvedTask",
    "Resolver",
    "Stage",
    "Steps",
    "TaskBinding",
    "render_agent",
    "render_and_format",
    "render_pipeline",
    "render_stage_agent",
]
