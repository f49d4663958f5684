"""Compiler IR spec - Jenkins declarative pipeline intermediate representation."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from pipegen.ast.spec import Approve, EnvVar, Options, Task, TaskTemplateSpec

CLEAN_WORKSPACE_SCRIPT = """
script{
    echo "clean up workspace"
    deleteDir()
}
"""


@dataclass
class ResolvedTask:
    """A task after composition: template attached, values resolved.

    Built fresh on every compile, the declarative Task is never modified.
    """

    task: Task
    template: TaskTemplateSpec
    template_args: Dict[str, Any] = field(default_factory=dict)
    options: Optional[Options] = None
    approve: Optional[Approve] = None
    visible: bool = True

    @property
    def name(self) -> str:
        return self.task.name

    @property
    def agent(self) -> Any:
        """The task's own agent, else the task template's."""
        if self.task.agent is not None:
            return self.task.agent
        return self.template.agent


@dataclass
class Steps:
    """Rendered script content of a stage."""

    scripts: str = ""


@dataclass
class Stage:
    """A sequential stage, or a parallel container when ``stages`` is set."""

    name: str
    agent: Any = None
    options: Optional[Options] = None
    when: Optional[Dict[str, List[str]]] = None
    approve: Optional[Approve] = None
    environments: List[EnvVar] = field(default_factory=list)
    steps: Optional[Steps] = None
    fail_fast: bool = False
    stages: List["Stage"] = field(default_factory=list)

    @property
    def is_parallel(self) -> bool:
        return bool(self.stages)


@dataclass
class PostCondition:
    """Post block entry, e.g. ``always { ... }``."""

    name: str
    scripts: str = ""


@dataclass
class Pipeline:
    """Complete pipeline IR, consumed once by the Renderer."""

    agent: Any = None
    environments: List[EnvVar] = field(default_factory=list)
    options: Optional[Options] = None
    stages: List[Stage] = field(default_factory=list)
    post: List[PostCondition] = field(default_factory=list)
