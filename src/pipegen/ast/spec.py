"""Pipeline and task template models.

A pipeline template lists stages of tasks; each task names a task template
(by ``type``) that supplies the script body. Pipeline arguments reach task
templates through binding paths.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from pipegen.arguments import ArgItem, ArgSection, all_arg_items, default_values
from pipegen.arguments.spec import validate_definitions
from pipegen.errors import (
    ErrorList,
    PipegenError,
    TemplateDefinitionError,
    raise_errors,
)
from pipegen.relation import Relation, is_visible
from pipegen.template import interpolate

log = logging.getLogger(__name__)

# Reserved identifiers
SYSTEM_ARG_KEY = "_system_"
SCM_ARG_NAME = "SCM"
CLONE_TASK_NAME = "Clone"

POST_ALWAYS = "always"
POST_CONDITIONS = (
    "always",
    "changed",
    "fixed",
    "regression",
    "aborted",
    "failure",
    "success",
    "unstable",
    "unsuccessful",
    "cleanup",
)

PIPELINE_ENGINES = ("", "graph")
TASK_TEMPLATE_ENGINES = ("", "interpolate")


class SCMType(str, Enum):
    GIT = "GIT"
    SVN = "SVN"


class SCMInfo(BaseModel):
    """Source control context of one invocation"""

    type: SCMType
    repository_path: str = Field(default="", alias="repositoryPath")
    credentials_id: str = Field(default="", alias="credentialsId")
    branch: str = ""

    model_config = {"populate_by_name": True}

    def to_value(self) -> dict[str, Any]:
        """Argument value handed to the clone task"""
        return self.model_dump(mode="json", by_alias=True)


def validate_agent(agent: Any) -> None:
    """An agent is None, a label expression string or a mapping"""
    if agent is None or isinstance(agent, (str, dict)):
        return
    raise TemplateDefinitionError(
        f"agent should be string or mapping, but got {type(agent).__name__}",
        {"agent": agent},
    )


class Options(BaseModel):
    timeout: int = 0


class Approve(BaseModel):
    """Manual approval gate in front of a stage's steps"""

    timeout: int = 0
    message: str = ""


class EnvVar(BaseModel):
    name: str
    value: Any = None


class TaskConstValue(BaseModel):
    """Author constants for one task, never overridden by invocation values"""

    args: dict[str, Any] = Field(default_factory=dict)
    options: Options | None = None
    approve: Approve | None = None


class ConstValues(BaseModel):
    tasks: dict[str, TaskConstValue] = Field(default_factory=dict)


class Task(BaseModel):
    """A task reference inside a stage or post condition"""

    name: str = ""
    type: str = ""
    agent: Any = None
    options: Options | None = None
    # Groovy expressions keyed by "all" or "any"
    conditions: dict[str, list[str]] | None = None
    approve: Approve | None = None
    environments: list[EnvVar] = Field(default_factory=list)
    relation: Relation | None = None

    def validate_definition(self) -> None:
        errors: list[Exception] = []
        if not self.name:
            errors.append(TemplateDefinitionError("task.name should not be empty"))
        if not self.type:
            errors.append(
                TemplateDefinitionError(f"task {self.name}.type should not be empty")
            )
        try:
            validate_agent(self.agent)
        except TemplateDefinitionError as exc:
            errors.append(exc)
        if "." in self.name:
            errors.append(
                TemplateDefinitionError(f"task name {self.name} should not contain dot")
            )
        if self.conditions:
            for key in self.conditions:
                if key not in ("all", "any"):
                    errors.append(
                        TemplateDefinitionError(
                            f"task {self.name}.conditions key `{key}` should be all or any"
                        )
                    )
        if self.relation is not None:
            try:
                self.relation.validate_definition()
            except PipegenError as exc:
                errors.append(exc)
        raise_errors(errors)

    def is_visible(self, values: dict[str, Any]) -> bool:
        visible = is_visible(self.relation, values)
        log.debug("task %s visible=%s", self.name, visible)
        return visible


class Stage(BaseModel):
    name: str = ""
    conditions: dict[str, list[str]] | None = None
    tasks: list[Task] = Field(default_factory=list)

    def validate_definition(self) -> None:
        if not self.name.strip():
            raise TemplateDefinitionError("stage.name should not be empty")
        if not self.tasks:
            raise TemplateDefinitionError(
                f"stage `{self.name}`'s tasks should be one at least"
            )


class TaskTemplateSpec(BaseModel):
    """A reusable script body with its own argument declarations"""

    engine: str = ""
    agent: Any = None
    body: str = ""
    arguments: list[ArgItem] = Field(default_factory=list)

    def validate_definition(self) -> None:
        errors: list[Exception] = []
        if not self.body.strip():
            errors.append(TemplateDefinitionError("task template body should not be empty"))
        if self.engine not in TASK_TEMPLATE_ENGINES:
            errors.append(
                TemplateDefinitionError(f"task template engine `{self.engine}` is not supported")
            )
        try:
            validate_agent(self.agent)
        except TemplateDefinitionError as exc:
            errors.append(exc)
        errors.extend(validate_definitions(self.arguments))
        raise_errors(errors)

    def validate_value(self, values: dict[str, Any]) -> None:
        errors: list[Exception] = []
        for arg in self.arguments:
            if not arg.is_visible(values):
                log.debug("skip validating invisible task argument %s", arg.name)
                continue
            try:
                arg.validate_value(values.get(arg.name))
            except PipegenError as exc:
                errors.append(exc)
        raise_errors(errors)

    def get_values(self, values: dict[str, Any]) -> dict[str, Any]:
        """Normalised values of every declared argument plus the system value"""
        result = {arg.name: arg.get_value(values.get(arg.name)) for arg in self.arguments}
        if SYSTEM_ARG_KEY in values:
            result[SYSTEM_ARG_KEY] = values[SYSTEM_ARG_KEY]
        return result

    def render(self, values: dict[str, Any]) -> str:
        """Render the body with the given template argument values.

        Raises:
            ErrorList: the definition or one of the values is invalid
            TemplateRenderError: the body could not be interpolated
        """
        self.validate_definition()
        self.validate_value(values)
        return interpolate(self.body, self.get_values(values))


class PipelineTemplateSpec(BaseModel):
    """Stages, post conditions and arguments of a pipeline"""

    engine: str = ""
    with_scm: bool = Field(default=False, alias="withSCM")
    agent: Any = None
    stages: list[Stage] = Field(default_factory=list)
    post: dict[str, list[Task]] | None = None
    const_values: ConstValues | None = Field(default=None, alias="values")
    options: Options | None = None
    arguments: list[ArgSection] = Field(default_factory=list)
    environments: list[EnvVar] = Field(default_factory=list)

    model_config = {"populate_by_name": True}

    def stage_tasks(self) -> list[Task]:
        return [task for stage in self.stages for task in stage.tasks]

    def post_tasks(self) -> list[Task]:
        return [task for tasks in (self.post or {}).values() for task in tasks]

    def all_tasks(self) -> list[Task]:
        return self.stage_tasks() + self.post_tasks()

    def all_task_types(self) -> list[str]:
        """Task template names referenced by this pipeline, in order"""
        seen: dict[str, None] = {}
        for task in self.all_tasks():
            seen.setdefault(task.type, None)
        return list(seen)

    def arg_items(self) -> list[ArgItem]:
        return all_arg_items(self.arguments)

    def default_values(self) -> dict[str, Any]:
        return default_values(self.arg_items())

    def validate_definition(self) -> None:
        """Check the whole template, raise an ErrorList with every problem."""
        errors: list[Exception] = []
        if self.engine not in PIPELINE_ENGINES:
            errors.append(
                TemplateDefinitionError(f"pipeline engine `{self.engine}` is not supported")
            )
        try:
            validate_agent(self.agent)
        except TemplateDefinitionError as exc:
            errors.append(exc)

        errors.extend(self._validate_stages())
        errors.extend(self._validate_tasks())
        errors.extend(self._validate_post())
        errors.extend(validate_definitions(self.arg_items()))
        raise_errors(errors)

    def _validate_stages(self) -> list[Exception]:
        if not self.stages:
            return [TemplateDefinitionError("stages should be one at least")]
        errors: list[Exception] = []
        for stage in self.stages:
            try:
                stage.validate_definition()
            except TemplateDefinitionError as exc:
                errors.append(exc)
        return errors

    def _validate_tasks(self) -> list[Exception]:
        tasks = self.all_tasks()
        if not tasks:
            return [TemplateDefinitionError("tasks should be one at least")]

        errors: list[Exception] = []
        names: set[str] = set()
        for task in tasks:
            if task.name in names:
                errors.append(
                    TemplateDefinitionError(f"task name {task.name} should be unique")
                )
            names.add(task.name)
            try:
                task.validate_definition()
            except (TemplateDefinitionError, ErrorList) as exc:
                errors.append(exc)
        return errors

    def _validate_post(self) -> list[Exception]:
        errors: list[Exception] = []
        for name in self.post or {}:
            if name not in POST_CONDITIONS:
                errors.append(
                    TemplateDefinitionError(
                        f"post condition `{name}` is not supported, "
                        f"it should be one of {', '.join(POST_CONDITIONS)}"
                    )
                )
        return errors
