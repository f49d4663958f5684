"""Visibility relations between arguments and tasks.

A relation is an ordered list of ``(action, when)`` entries. Evaluating it
against the current argument values answers one question: should the owner
(an argument or a task) be shown?

    relation:
      - action: show
        when:
          all:
            - name: deploy
              value: true
            - name: env
              value: prod
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Iterator

from pydantic import BaseModel, Field, RootModel

from pipegen.errors import ErrorList, TemplateDefinitionError

log = logging.getLogger(__name__)


class RelationAction(str, Enum):
    SHOW = "show"
    HIDDEN = "hidden"

    def negate(self) -> "RelationAction":
        if self is RelationAction.SHOW:
            return RelationAction.HIDDEN
        return RelationAction.SHOW


def stringify(value: Any) -> str:
    """Render a value the way relation comparisons see it.

    Numbers compare by their textual form, so ``3``, ``3.0`` and ``"3"`` are
    all equal; booleans are ``true``/``false``.
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (list, tuple)):
        return "[" + " ".join(stringify(v) for v in value) + "]"
    return str(value)


class RelationWhenItem(BaseModel):
    """A single equality test against a named argument"""

    name: str = ""
    value: Any = None

    def match(self, values: dict[str, Any]) -> bool:
        if self.name not in values:
            return False
        return stringify(values[self.name]) == stringify(self.value)


class RelationWhen(BaseModel):
    """Condition of a relation entry: one of name/value, ``all`` or ``any``"""

    name: str = ""
    value: Any = None
    all_: list[RelationWhenItem] | None = Field(default=None, alias="all")
    any_: list[RelationWhenItem] | None = Field(default=None, alias="any")

    model_config = {"populate_by_name": True}

    def is_empty(self) -> bool:
        return not self.name and not self.all_ and not self.any_

    def validate_definition(self) -> None:
        forms = sum(
            [self.all_ is not None, self.any_ is not None, self.name != ""]
        )
        if forms == 0:
            return
        if forms > 1:
            raise TemplateDefinitionError(
                "not support multi relation when, you can only set "
                "`name and value` or `all` or `any`"
            )

        errors: list[Exception] = []
        for key, items in (("all", self.all_), ("any", self.any_)):
            for i, item in enumerate(items or []):
                if not item.name:
                    errors.append(
                        TemplateDefinitionError(
                            f"relation.when.{key}[{i}].name should not be empty"
                        )
                    )
        if errors:
            raise ErrorList(errors)

    def match(self, values: dict[str, Any]) -> bool:
        if self.all_:
            # evaluate every item, no short circuit
            results = [item.match(values) for item in self.all_]
            return all(results)
        if self.any_:
            results = [item.match(values) for item in self.any_]
            return any(results)
        if self.name:
            return RelationWhenItem(name=self.name, value=self.value).match(values)
        return True


class RelationItem(BaseModel):
    """One ``(action, when)`` entry"""

    action: str
    when: RelationWhen | None = None

    @property
    def relation_action(self) -> RelationAction:
        try:
            return RelationAction(self.action)
        except ValueError:
            raise TemplateDefinitionError(
                f"not support relation action `{self.action}`"
            ) from None

    def validate_definition(self) -> None:
        errors: list[Exception] = []
        try:
            self.relation_action
        except TemplateDefinitionError as exc:
            errors.append(exc)

        if self.when is None:
            errors.append(TemplateDefinitionError("relation when should not be nil"))
        else:
            try:
                self.when.validate_definition()
            except (TemplateDefinitionError, ErrorList) as exc:
                errors.append(exc)

        if errors:
            raise ErrorList(errors)


class Relation(RootModel[list[RelationItem]]):
    """Ordered list of relation entries, at most one per action"""

    root: list[RelationItem] = []

    def __iter__(self) -> Iterator[RelationItem]:  # type: ignore[override]
        return iter(self.root)

    def __len__(self) -> int:
        return len(self.root)

    def validate_definition(self) -> None:
        errors: list[Exception] = []
        seen: set[str] = set()
        for i, item in enumerate(self.root):
            try:
                item.validate_definition()
            except (TemplateDefinitionError, ErrorList) as exc:
                errors.append(exc)
            if item.action in seen:
                errors.append(
                    TemplateDefinitionError(
                        f"relation[{i}]: duplicated relation action `{item.action}`"
                    )
                )
            seen.add(item.action)
        if errors:
            raise ErrorList(errors)

    def evaluate(self, values: dict[str, Any]) -> bool:
        """Return True when the owner of this relation should be shown."""
        if not self.root:
            return True

        by_action: dict[str, RelationItem] = {}
        for item in self.root:
            by_action[item.action] = item

        if len(by_action) > 1:
            if RelationAction.SHOW.value not in by_action:
                log.debug("no show entry in relation %s, treat as visible", self.root)
                return True
            chosen = by_action[RelationAction.SHOW.value]
        else:
            chosen = self.root[0]

        action = chosen.relation_action
        if chosen.when is None or chosen.when.is_empty():
            return True

        if chosen.when.match(values):
            return action is RelationAction.SHOW
        return action.negate() is RelationAction.SHOW


def is_visible(relation: Relation | None, values: dict[str, Any]) -> bool:
    """Evaluate an optional relation; no relation means visible."""
    if relation is None:
        return True
    return relation.evaluate(values)
