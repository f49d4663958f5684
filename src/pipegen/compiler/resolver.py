"""Resolver - routes flat argument values onto tasks through binding paths.

A binding path is ``<task>.<scope>.<field>``:

- ``build.args.timeout`` puts the value into task ``build``'s template
  arguments under ``timeout``
- ``build.options.timeout`` overrides the direct task field ``options.timeout``

Bindings of arguments hidden by their relation are dropped, so values of
skipped arguments never reach a task.

The reserved system value (``_system_``) is handed to every task without an
explicit binding.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List

from pipegen.arguments import ArgItem
from pipegen.ast.spec import SYSTEM_ARG_KEY
from pipegen.errors import TemplateDefinitionError

log = logging.getLogger(__name__)

ARGS_SCOPE = "args"


@dataclass
class TaskBinding:
    """Values bound to one task."""

    template_args: Dict[str, Any] = field(default_factory=dict)
    fields: Dict[str, Any] = field(default_factory=dict)


class Resolver:
    """Resolves argument bindings into per-task values."""

    def resolve(
        self,
        items: List[ArgItem],
        values: Dict[str, Any],
        task_names: Iterable[str] = (),
    ) -> Dict[str, TaskBinding]:
        """Build the task name -> TaskBinding map.

        Args:
            items: Every declared pipeline argument.
            values: Argument name -> value, defaults already merged.
            task_names: Tasks that get an entry even without bindings.

        Returns:
            Map of task name to its bound template args and direct fields.

        Raises:
            TemplateDefinitionError: A binding path has fewer than two segments.
        """
        bindings: Dict[str, TaskBinding] = {name: TaskBinding() for name in task_names}

        for item in items:
            if not item.is_visible(values):
                log.debug("argument %s is not visible, skip its bindings", item.name)
                continue
            value = values.get(item.name)
            for path in item.binding:
                task_name, scope, rest = self._split(item.name, path)
                binding = bindings.setdefault(task_name, TaskBinding())
                if scope == ARGS_SCOPE:
                    binding.template_args[rest] = value
                else:
                    binding.fields[f"{scope}.{rest}" if rest else scope] = value
                log.debug("bind %s -> %s", item.name, path)

        system_value = self.system_value(values)
        if system_value is not None:
            for binding in bindings.values():
                binding.template_args[SYSTEM_ARG_KEY] = system_value

        return bindings

    @staticmethod
    def system_value(values: Dict[str, Any]) -> Any:
        """Invocation level context under the reserved key, or None."""
        return values.get(SYSTEM_ARG_KEY)

    @staticmethod
    def _split(arg_name: str, path: str):
        segments = path.split(".")
        if len(segments) < 2:
            raise TemplateDefinitionError(
                f"pipeline template error, {arg_name}'s binding format `{path}` is invalid",
                {"binding": path},
            )
        task_name, scope = segments[0], segments[1]
        if scope == ARGS_SCOPE:
            if len(segments) < 3 or not segments[2]:
                raise TemplateDefinitionError(
                    f"pipeline template error, {arg_name}'s binding `{path}` misses the argument name",
                    {"binding": path},
                )
            return task_name, scope, segments[2]
        return task_name, scope, ".".join(segments[2:])
