from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List

import yaml
from pydantic import ValidationError

from pipegen.ast.manifest import KIND_TASK_TEMPLATE, Resource
from pipegen.ast.spec import TaskTemplateSpec
from pipegen.errors import TemplateDefinitionError

log = logging.getLogger(__name__)

YAML_SUFFIXES = (".yaml", ".yml")


def read_file(path: str | Path) -> str:
    """Read a manifest file, only .yaml/.yml files are accepted."""
    p = Path(path)
    if p.suffix not in YAML_SUFFIXES:
        raise TemplateDefinitionError(
            f"{p} is not a yaml file, only {', '.join(YAML_SUFFIXES)} are supported"
        )
    return p.read_text(encoding="utf-8")


def parse_yaml(text: str, source: str = "<string>") -> Dict[str, Any]:
    """Parse YAML text into a mapping.

    Raises:
        TemplateDefinitionError: if the text is not valid YAML or is not a
            mapping at the top level.
    """
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise TemplateDefinitionError(f"invalid yaml in {source}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise TemplateDefinitionError(
            f"{source} should contain a mapping, got {type(data).__name__}"
        )
    return data


def parse_resource(text: str, source: str = "<string>") -> Resource:
    """Parse a manifest from YAML text."""
    data = parse_yaml(text, source)
    try:
        return Resource.model_validate(data)
    except ValidationError as e:
        raise TemplateDefinitionError(
            f"{source} is not a valid manifest: {e.error_count()} error(s)",
            {"errors": e.errors(include_url=False)},
        ) from e


def load_resource(path: str | Path) -> Resource:
    """Load a manifest from a file."""
    return parse_resource(read_file(path), source=str(path))


def find_manifests(directory: str | Path) -> List[Path]:
    """All yaml files below directory, sorted for stable output."""
    root = Path(directory)
    found = [p for p in root.rglob("*") if p.is_file() and p.suffix in YAML_SUFFIXES]
    return sorted(found)


def load_task_templates(directory: str | Path) -> Dict[str, TaskTemplateSpec]:
    """Load every PipelineTaskTemplate below directory, keyed by metadata.name.

    Files holding other kinds are skipped.
    """
    templates: Dict[str, TaskTemplateSpec] = {}
    for path in find_manifests(directory):
        resource = load_resource(path)
        if resource.kind != KIND_TASK_TEMPLATE:
            log.debug("skip %s, kind is %s", path, resource.kind)
            continue
        if resource.name in templates:
            raise TemplateDefinitionError(
                f"task template {resource.name} is defined more than once ({path})"
            )
        templates[resource.name] = resource.task_template_spec()
        log.debug("loaded task template %s from %s", resource.name, path)
    return templates


def load_values(path: str | Path | None) -> Dict[str, Any]:
    """Load argument values from a yaml or json file, empty when path is None."""
    if path is None:
        return {}
    p = Path(path)
    # yaml is a superset of json
    return parse_yaml(p.read_text(encoding="utf-8"), source=str(p))
