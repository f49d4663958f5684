"""Composite ("mix") argument types.

A mix value is a mapping (or a JSON string that decodes to one) carrying a
fixed set of string fields, e.g. a code repository:

    {"url": "https://git.example.com/app.git", "kind": "git", "credentialId": "ci"}

The display type of a mix argument must be the mix type id itself.
"""

from __future__ import annotations

from typing import Any

from pipegen.arguments.base import JsonDecodingArgType
from pipegen.errors import ValidateError


class MixArg(JsonDecodingArgType):
    """Mapping with required string fields"""

    required_fields: tuple[str, ...] = ()

    def validate_definition(self) -> None:
        self.require_display_type()

    def validate_value(self, value: Any) -> None:
        decoded = self.decode(value)
        if decoded is None:
            return
        if not isinstance(decoded, dict):
            raise ValidateError(
                f"argument {self.type_id}({self.name})'s value {decoded!r} is invalid format, "
                f"got type {type(decoded).__name__}"
            )

        for field in self.required_fields:
            if field not in decoded:
                raise ValidateError(
                    f"{field} is required for argument {self.name}, but get value {decoded!r}"
                )
            if not isinstance(decoded[field], str):
                raise ValidateError(
                    f"argument {self.name}.{field}'s value {decoded[field]!r} is invalid format, "
                    f"it should be string, but got type {type(decoded[field]).__name__}"
                )


class CodeRepositoryMix(MixArg):
    type_id = "pipegen.io/coderepositorymix"
    required_fields = ("url", "kind", "credentialId")


class ImageRepositoryMix(MixArg):
    type_id = "pipegen.io/imagerepositorymix"
    required_fields = ("registry", "repository")


class DockerImageRepositoryMix(MixArg):
    type_id = "pipegen.io/dockerimagerepositorymix"
    required_fields = ("repositoryPath", "credentialId", "tag")


class ContainerMix(MixArg):
    type_id = "pipegen.io/newk8scontainermix"
    required_fields = ("clusterName", "serviceName", "containerName", "namespace")


class V1ContainerMix(MixArg):
    type_id = "pipegen.io/v1newk8scontainermix"
    required_fields = (
        "clusterName",
        "namespace",
        "applicationName",
        "componentName",
        "componentType",
        "containerName",
    )


class ToolBinding(MixArg):
    type_id = "pipegen.io/toolbinding"
    required_fields = ("name",)


class K8sEnvList(JsonDecodingArgType):
    """List of container env entries.

    Each entry has a name and exactly one of ``value`` or
    ``valueFrom.configMapKeyRef{name, key}``.
    """

    type_id = "pipegen.io/k8senv"

    def validate_definition(self) -> None:
        self.require_display_type()

    def _invalid(self, entry: Any, reason: str) -> ValidateError:
        return ValidateError(
            f"argument {self.name}'s item value `{entry!r}` is invalid format, {reason}"
        )

    def validate_value(self, value: Any) -> None:
        decoded = self.decode(value)
        if decoded is None:
            return
        if not isinstance(decoded, list):
            raise ValidateError(
                f"argument {self.type_id}({self.name})'s value {decoded!r} is invalid format, "
                f"got type {type(decoded).__name__}"
            )

        for entry in decoded:
            if not isinstance(entry, dict):
                raise self._invalid(entry, "it should be map in array")
            if "name" not in entry:
                raise ValidateError(f"[].name is required for argument {self.name}")
            if not entry["name"]:
                raise ValidateError(f"[].name should not be empty for argument {self.name}")

            with_value = "value" in entry
            with_value_from = "valueFrom" in entry
            if with_value == with_value_from:
                raise self._invalid(entry, "exactly one of value and valueFrom is required")

            if with_value:
                if entry["value"] == "" or entry["value"] is None:
                    raise ValidateError(f"[].value should not be empty for argument {self.name}")
                continue

            value_from = entry["valueFrom"]
            if not isinstance(value_from, dict):
                raise self._invalid(entry, "valueFrom should be map")
            ref = value_from.get("configMapKeyRef")
            if ref is None:
                raise self._invalid(entry, "should contains configMapKeyRef")
            if not isinstance(ref, dict):
                raise self._invalid(entry, "configMapKeyRef should be map")
            if not ref.get("name") or not ref.get("key"):
                raise self._invalid(entry, "configMapKeyRef requires name and key")
