"""Typed argument declarations and the argument type registry"""

from pipegen.arguments.base import (
    ArgType,
    JsonDecodingArgType,
    get_arg_type,
    is_registered,
    register_arg_type,
    registered_types,
)
from pipegen.arguments.builtin import (
    DISPLAY_INTEGRATION,
    ArrayArg,
    BooleanArg,
    IntArg,
    ObjectArg,
    StringArg,
)
from pipegen.arguments.mix import (
    CodeRepositoryMix,
    ContainerMix,
    DockerImageRepositoryMix,
    ImageRepositoryMix,
    K8sEnvList,
    MixArg,
    ToolBinding,
    V1ContainerMix,
)
from pipegen.arguments.spec import (
    ArgDisplay,
    ArgItem,
    ArgSchema,
    ArgSchemaItems,
    ArgSection,
    ArgValidation,
    LocalizedText,
    all_arg_items,
    check_binding_path,
    default_values,
    validate_definitions,
    validate_values,
)

BUILTIN_ARG_TYPES: tuple[type[ArgType], ...] = (
    StringArg,
    BooleanArg,
    IntArg,
    ObjectArg,
    ArrayArg,
    CodeRepositoryMix,
    ImageRepositoryMix,
    DockerImageRepositoryMix,
    ContainerMix,
    V1ContainerMix,
    ToolBinding,
    K8sEnvList,
)

for _arg_type in BUILTIN_ARG_TYPES:
    register_arg_type(_arg_type.type_id, _arg_type)

__all__ = [
    "ArgDisplay",
    "ArgItem",
    "ArgSchema",
    "ArgSchemaItems",
    "ArgSection",
    "ArgType",
    "ArgValidation",
    "ArrayArg",
    "BUILTIN_ARG_TYPES",
    "BooleanArg",
    "CodeRepositoryMix",
    "ContainerMix",
    "DISPLAY_INTEGRATION",
    "DockerImageRepositoryMix",
    "ImageRepositoryMix",
    "IntArg",
    "JsonDecodingArgType",
    "K8sEnvList",
    "LocalizedText",
    "MixArg",
    "ObjectArg",
    "StringArg",
    "ToolBinding",
    "V1ContainerMix",
    "all_arg_items",
    "check_binding_path",
    "default_values",
    "get_arg_type",
    "is_registered",
    "register_arg_type",
    "registered_types",
    "validate_definitions",
    "validate_values",
]
