from pipegen.ast.manifest import (
    API_VERSION,
    KIND_PIPELINE_TEMPLATE,
    KIND_TASK_TEMPLATE,
    Metadata,
    Resource,
)
from pipegen.ast.parser import (
    find_manifests,
    load_resource,
    load_task_templates,
    load_values,
    parse_resource,
    parse_yaml,
    read_file,
)
from pipegen.ast.spec import (
    CLONE_TASK_NAME,
    POST_ALWAYS,
    POST_CONDITIONS,
    SCM_ARG_NAME,
    SYSTEM_ARG_KEY,
    Approve,
    ConstValues,
    EnvVar,
    Options,
    PipelineTemplateSpec,
    SCMInfo,
    SCMType,
    Stage,
    Task,
    TaskConstValue,
    TaskTemplateSpec,
    validate_agent,
)

__all__ = [
    "API_VERSION",
    "Approve",
    "CLONE_TASK_NAME",
    "ConstValues",
    "EnvVar",
    "KIND_PIPELINE_TEMPLATE",
    "KIND_TASK_TEMPLATE",
    "Metadata",
    "Options",
    "POST_ALWAYS",
    "POST_CONDITIONS",
    "PipelineTemplateSpec",
    "Resource",
    "SCMInfo",
    "SCMType",
    "SCM_ARG_NAME",
    "SYSTEM_ARG_KEY",
    "Stage",
    "Task",
    "TaskConstValue",
    "TaskTemplateSpec",
    "find_manifests",
    "load_resource",
    "load_task_templates",
    "load_values",
    "parse_resource",
    "parse_yaml",
    "read_file",
    "validate_agent",
]
