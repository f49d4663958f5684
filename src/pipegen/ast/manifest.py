"""Resource envelope around pipeline and task templates.

    apiVersion: pipegen.io/v1alpha1
    kind: PipelineTaskTemplate
    metadata:
      name: maven-build
      annotations:
        pipegen.io/displayName.zh-CN: Maven 构建
        pipegen.io/displayName.en: Maven Build
        pipegen.io/version: v1.0.0
    spec:
      body: |
        sh "mvn package"
"""

from __future__ import annotations

import re
from typing import Any

from pydantic import BaseModel, Field, ValidationError

from pipegen.ast.spec import PipelineTemplateSpec, TaskTemplateSpec
from pipegen.errors import ErrorList, PipegenError, TemplateDefinitionError, raise_errors

API_VERSION = "pipegen.io/v1alpha1"
SUPPORTED_API_VERSIONS = (API_VERSION,)

KIND_PIPELINE_TEMPLATE = "PipelineTemplate"
KIND_TASK_TEMPLATE = "PipelineTaskTemplate"
SUPPORTED_KINDS = (KIND_PIPELINE_TEMPLATE, KIND_TASK_TEMPLATE)

ANNOTATION_DISPLAY_NAME_ZH = "pipegen.io/displayName.zh-CN"
ANNOTATION_DISPLAY_NAME_EN = "pipegen.io/displayName.en"
ANNOTATION_VERSION = "pipegen.io/version"
REQUIRED_ANNOTATIONS = (
    ANNOTATION_DISPLAY_NAME_ZH,
    ANNOTATION_DISPLAY_NAME_EN,
    ANNOTATION_VERSION,
)

NAME_PATTERN = re.compile(r"^[a-zA-Z]([-a-zA-Z0-9]*[a-zA-Z0-9])?$")


def _typed(model: type[BaseModel], data: dict[str, Any], name: str) -> Any:
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        raise TemplateDefinitionError(
            f"spec of {name or 'resource'} is malformed: {exc.error_count()} error(s)",
            {"errors": exc.errors(include_url=False)},
        ) from exc


class Metadata(BaseModel):
    name: str = ""
    namespace: str = ""
    labels: dict[str, str] = Field(default_factory=dict)
    annotations: dict[str, str] = Field(default_factory=dict)

    @property
    def version(self) -> str:
        return self.annotations.get(ANNOTATION_VERSION, "")


class Resource(BaseModel):
    """A pipegen manifest, ``spec`` stays a raw mapping until typed"""

    api_version: str = Field(default="", alias="apiVersion")
    kind: str = ""
    metadata: Metadata | None = None
    spec: dict[str, Any] | None = None
    data: dict[str, Any] | None = None
    status: dict[str, Any] | None = None

    model_config = {"populate_by_name": True}

    @property
    def name(self) -> str:
        return self.metadata.name if self.metadata else ""

    def pipeline_spec(self) -> PipelineTemplateSpec:
        self._require_kind(KIND_PIPELINE_TEMPLATE)
        return _typed(PipelineTemplateSpec, self.spec or {}, self.name)

    def task_template_spec(self) -> TaskTemplateSpec:
        self._require_kind(KIND_TASK_TEMPLATE)
        return _typed(TaskTemplateSpec, self.spec or {}, self.name)

    def _require_kind(self, kind: str) -> None:
        if self.kind != kind:
            raise TemplateDefinitionError(
                f"resource {self.name} is a {self.kind or 'resource without kind'}, expected {kind}"
            )

    def validate_envelope(self) -> list[Exception]:
        errors: list[Exception] = []
        if self.api_version not in SUPPORTED_API_VERSIONS:
            errors.append(
                TemplateDefinitionError(
                    f"apiVersion `{self.api_version}` is not supported, "
                    f"supported: {', '.join(SUPPORTED_API_VERSIONS)}"
                )
            )
        if self.kind not in SUPPORTED_KINDS:
            errors.append(
                TemplateDefinitionError(
                    f"kind `{self.kind}` is not supported, supported: {', '.join(SUPPORTED_KINDS)}"
                )
            )
        if self.spec is None:
            errors.append(TemplateDefinitionError("spec is required"))
        if self.metadata is None:
            errors.append(TemplateDefinitionError("metadata is required"))
            return errors

        if not NAME_PATTERN.match(self.metadata.name):
            errors.append(
                TemplateDefinitionError(
                    f"metadata.name `{self.metadata.name}` is invalid, "
                    f"it should match {NAME_PATTERN.pattern}"
                )
            )
        for key in REQUIRED_ANNOTATIONS:
            if not self.metadata.annotations.get(key):
                errors.append(
                    TemplateDefinitionError(f"metadata.annotations[{key}] is required")
                )
        version = self.metadata.version
        if version and not version.startswith("v"):
            errors.append(
                TemplateDefinitionError(
                    f"metadata.annotations[{ANNOTATION_VERSION}] `{version}` should start with v"
                )
            )
        return errors

    def validate_definition(self) -> None:
        """Envelope checks followed by the embedded spec's own checks"""
        errors = self.validate_envelope()
        if not errors:
            try:
                if self.kind == KIND_PIPELINE_TEMPLATE:
                    self.pipeline_spec().validate_definition()
                else:
                    self.task_template_spec().validate_definition()
            except (PipegenError, ErrorList) as exc:
                errors.append(exc)
        raise_errors(errors)
