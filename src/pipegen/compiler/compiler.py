"""Compiler - composes a pipeline template and argument values into Pipeline IR."""

import logging
from typing import Any, Dict, List, Mapping, Optional

from pipegen.arguments import ArgItem, ArgSchema, validate_values
from pipegen.ast.spec import (
    CLONE_TASK_NAME,
    POST_ALWAYS,
    SCM_ARG_NAME,
    Approve,
    Options,
    PipelineTemplateSpec,
    SCMInfo,
    Task,
    TaskConstValue,
    TaskTemplateSpec,
)
from pipegen.compiler.resolver import Resolver, TaskBinding
from pipegen.compiler.spec import (
    CLEAN_WORKSPACE_SCRIPT,
    Pipeline,
    PostCondition,
    ResolvedTask,
    Stage,
    Steps,
)
from pipegen.errors import (
    PipegenError,
    ValidateError,
    raise_errors,
)

log = logging.getLogger(__name__)

DEFAULT_PIPELINE_AGENT = "any"

# direct task fields a binding may override
TIMEOUT_FIELDS = ("options.timeout", "approve.timeout")
DIRECT_FIELDS = TIMEOUT_FIELDS + ("approve.message",)


def scm_arg_item() -> ArgItem:
    """Implicit argument carrying the source control context to the clone task."""
    return ArgItem(
        name=SCM_ARG_NAME,
        schema=ArgSchema(type="object"),
        binding=[f"{CLONE_TASK_NAME}.args.{SCM_ARG_NAME}"],
        required=True,
    )


class Compiler:
    """Compiles a PipelineTemplateSpec to Pipeline IR."""

    def __init__(self, task_templates: Mapping[str, TaskTemplateSpec]):
        """Initialize compiler with the task templates it may reference.

        Args:
            task_templates: Task template name -> spec, resolved by the caller.
        """
        self.task_templates = dict(task_templates)
        self.resolver = Resolver()

    def compile(
        self,
        spec: PipelineTemplateSpec,
        values: Optional[Dict[str, Any]] = None,
        scm: Optional[SCMInfo] = None,
    ) -> Pipeline:
        """Compile a pipeline template with argument values.

        Algorithm, each step aborts the compile on error:
        1. Validate the template definition
        2. Merge declared defaults under the supplied values
        3. Inject the SCM argument when the template asks for it
        4. Validate the values of visible arguments
        5. Attach task templates to tasks
        6. Resolve bindings, apply constants, evaluate visibility
        7. Build stages and post conditions

        Args:
            spec: The pipeline template.
            values: Argument name -> value supplied for this invocation.
            scm: Source control context, required when ``spec.with_scm``.

        Returns:
            Pipeline IR ready for the Renderer.

        Raises:
            ErrorList: Aggregated definition, validation or render errors.
        """
        spec.validate_definition()

        merged = {**spec.default_values(), **(values or {})}
        items = spec.arg_items()
        if spec.with_scm:
            items = items + [scm_arg_item()]
            merged[SCM_ARG_NAME] = scm.to_value() if scm is not None else None

        raise_errors(validate_values(items, merged))

        templates = self._attach_task_templates(spec)

        all_tasks = spec.all_tasks()
        bindings = self.resolver.resolve(items, merged, [t.name for t in all_tasks])
        const_tasks = spec.const_values.tasks if spec.const_values else {}

        errors: List[Exception] = []
        resolved: Dict[str, ResolvedTask] = {}
        for task in all_tasks:
            try:
                resolved[task.name] = self._resolve_task(
                    task,
                    templates[task.name],
                    bindings.get(task.name, TaskBinding()),
                    const_tasks.get(task.name),
                    merged,
                )
            except PipegenError as exc:
                errors.append(exc)
        raise_errors(errors)

        stages = self._build_stages(spec, resolved, errors)
        post = self._build_post(spec, resolved, errors)
        raise_errors(errors)

        return Pipeline(
            agent=spec.agent if spec.agent is not None else DEFAULT_PIPELINE_AGENT,
            environments=list(spec.environments),
            options=spec.options,
            stages=stages,
            post=post,
        )

    def _attach_task_templates(self, spec: PipelineTemplateSpec) -> Dict[str, TaskTemplateSpec]:
        """Look up every task's template, one error per missing template name."""
        raise_errors(
            [
                ValidateError(f"require definition of task template named:{name}")
                for name in spec.all_task_types()
                if name not in self.task_templates
            ]
        )
        return {task.name: self.task_templates[task.type] for task in spec.all_tasks()}

    def _resolve_task(
        self,
        task: Task,
        template: TaskTemplateSpec,
        binding: TaskBinding,
        const: Optional[TaskConstValue],
        values: Dict[str, Any],
    ) -> ResolvedTask:
        """Assemble one task's values.

        Template args are the bound values with constants on top. Constant
        timeouts are copied into options/approve first, then direct field
        bindings override them. Unknown field paths are logged and ignored.
        """
        template_args = dict(binding.template_args)
        options = task.options.model_copy() if task.options else None
        approve = task.approve.model_copy() if task.approve else None

        if const is not None:
            template_args.update(const.args)
            if const.options is not None:
                options = options or Options()
                options.timeout = const.options.timeout
            if const.approve is not None:
                approve = approve or Approve()
                approve.timeout = const.approve.timeout
                if const.approve.message:
                    approve.message = const.approve.message

        for path, value in binding.fields.items():
            if path not in DIRECT_FIELDS:
                log.warning(
                    "task %s does not support binding field `%s`, supported: %s; ignored",
                    task.name,
                    path,
                    ", ".join(DIRECT_FIELDS),
                )
                continue
            if value is None:
                continue
            if path in TIMEOUT_FIELDS and (isinstance(value, bool) or not isinstance(value, int)):
                raise ValidateError(
                    f"{path}'s value {value!r} should be int, but got {type(value).__name__}",
                    {"task": task.name},
                )
            if path == "options.timeout":
                options = options or Options()
                options.timeout = value
            elif path == "approve.timeout":
                approve = approve or Approve()
                approve.timeout = value
            else:
                approve = approve or Approve()
                approve.message = str(value)

        return ResolvedTask(
            task=task,
            template=template,
            template_args=template_args,
            options=options,
            approve=approve,
            visible=task.is_visible(values),
        )

    def _render_task(self, rt: ResolvedTask, errors: List[Exception]) -> Optional[Stage]:
        try:
            scripts = rt.template.render(rt.template_args)
        except PipegenError as exc:
            log.warning("render task %s script body failed: %s", rt.name, exc)
            errors.append(exc)
            return None

        return Stage(
            name=rt.name,
            agent=rt.agent,
            options=rt.options,
            when=rt.task.conditions,
            approve=rt.approve,
            environments=list(rt.task.environments),
            steps=Steps(scripts=scripts),
        )

    def _build_stages(
        self,
        spec: PipelineTemplateSpec,
        resolved: Dict[str, ResolvedTask],
        errors: List[Exception],
    ) -> List[Stage]:
        """One flat stage per single-task stage, a parallel container otherwise."""
        stages: List[Stage] = []
        for stage in spec.stages:
            if len(stage.tasks) == 1:
                rt = resolved[stage.tasks[0].name]
                if not rt.visible:
                    log.debug("task %s is not visible, skip rendering it", rt.name)
                    continue
                rendered = self._render_task(rt, errors)
                if rendered is not None:
                    stages.append(rendered)
                continue

            children: List[Stage] = []
            for task in stage.tasks:
                rt = resolved[task.name]
                if not rt.visible:
                    log.debug("task %s is not visible, skip rendering it", rt.name)
                    continue
                rendered = self._render_task(rt, errors)
                if rendered is not None:
                    children.append(rendered)

            if not children:
                log.debug("stage %s has no visible task, skip rendering it", stage.name)
                continue
            stages.append(Stage(name=stage.name, when=stage.conditions, stages=children))
        return stages

    def _build_post(
        self,
        spec: PipelineTemplateSpec,
        resolved: Dict[str, ResolvedTask],
        errors: List[Exception],
    ) -> List[PostCondition]:
        """Concatenate post task scripts per condition; post tasks ignore visibility."""
        if not spec.post:
            return [PostCondition(name=POST_ALWAYS, scripts=CLEAN_WORKSPACE_SCRIPT)]

        post: List[PostCondition] = []
        for name, tasks in spec.post.items():
            scripts = ""
            for task in tasks:
                rt = resolved[task.name]
                try:
                    scripts += rt.template.render(rt.template_args)
                except PipegenError as exc:
                    log.warning("render post task %s script body failed: %s", rt.name, exc)
                    errors.append(exc)
            post.append(PostCondition(name=name, scripts=scripts))
        return post
