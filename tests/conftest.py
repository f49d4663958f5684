"""Shared fixtures: a small set of task templates and a pipeline using them."""

import textwrap

import pytest

from pipegen.ast import PipelineTemplateSpec, TaskTemplateSpec


def display(type_="string", en="Name", zh="名称"):
    return {"type": type_, "name": {"zh-CN": zh, "en": en}}


SHELL_TEMPLATE = {
    "body": 'sh "${{ cmd }}"\n',
    "arguments": [
        {
            "name": "cmd",
            "schema": {"type": "string"},
            "required": True,
            "display": display(en="Command", zh="命令"),
        }
    ],
}

CLONE_TEMPLATE = {
    "body": 'git url: "${{ SCM.repositoryPath }}", branch: "${{ SCM.branch }}"\n',
    "arguments": [
        {
            "name": "SCM",
            "schema": {"type": "object"},
            "required": True,
            "display": display("object", en="Source", zh="代码源"),
        }
    ],
}

PIPELINE = {
    "stages": [
        {"name": "build", "tasks": [{"name": "build", "type": "shell"}]},
        {
            "name": "test",
            "tasks": [
                {"name": "unit", "type": "shell"},
                {
                    "name": "lint",
                    "type": "shell",
                    "relation": [{"action": "show", "when": {"name": "lint", "value": True}}],
                },
            ],
        },
    ],
    "arguments": [
        {
            "displayName": {"zh-CN": "基本信息", "en": "Basic"},
            "items": [
                {
                    "name": "buildCmd",
                    "schema": {"type": "string"},
                    "binding": ["build.args.cmd"],
                    "default": "make",
                    "display": display(en="Build Command", zh="构建命令"),
                },
                {
                    "name": "testCmd",
                    "schema": {"type": "string"},
                    "binding": ["unit.args.cmd", "lint.args.cmd"],
                    "default": "make test",
                    "display": display(en="Test Command", zh="测试命令"),
                },
                {
                    "name": "lint",
                    "schema": {"type": "boolean"},
                    "default": False,
                    "display": display("boolean", en="Lint", zh="代码检查"),
                },
            ],
        }
    ],
}


def manifest(kind, name, spec_yaml):
    """YAML text of a manifest with valid metadata."""
    header = textwrap.dedent(
        f"""\
        apiVersion: pipegen.io/v1alpha1
        kind: {kind}
        metadata:
          name: {name}
          annotations:
            pipegen.io/displayName.zh-CN: 测试
            pipegen.io/displayName.en: Test
            pipegen.io/version: v1.0.0
        spec:
        """
    )
    return header + textwrap.indent(textwrap.dedent(spec_yaml), "  ")


SHELL_SPEC_YAML = """\
body: |
  sh "${{ cmd }}"
arguments:
  - name: cmd
    schema:
      type: string
    required: true
    display:
      type: string
      name:
        zh-CN: 命令
        en: Command
"""

PIPELINE_SPEC_YAML = """\
stages:
  - name: build
    tasks:
      - name: build
        type: shell
arguments:
  - displayName:
      zh-CN: 基本信息
      en: Basic
    items:
      - name: buildCmd
        schema:
          type: string
        binding:
          - build.args.cmd
        default: make
        display:
          type: string
          name:
            zh-CN: 构建命令
            en: Build Command
"""


@pytest.fixture
def task_templates():
    return {
        "shell": TaskTemplateSpec.model_validate(SHELL_TEMPLATE),
        "clone": TaskTemplateSpec.model_validate(CLONE_TEMPLATE),
    }


@pytest.fixture
def pipeline_spec():
    return PipelineTemplateSpec.model_validate(PIPELINE)


@pytest.fixture
def template_repo(tmp_path):
    """A template repository on disk: definition/ holds one task and one pipeline."""
    definition = tmp_path / "definition"
    tasks = definition / "tasks"
    tasks.mkdir(parents=True)
    (tasks / "shell.yaml").write_text(
        manifest("PipelineTaskTemplate", "shell", SHELL_SPEC_YAML), encoding="utf-8"
    )
    (definition / "pipeline.yaml").write_text(
        manifest("PipelineTemplate", "build-pipeline", PIPELINE_SPEC_YAML), encoding="utf-8"
    )
    return tmp_path
