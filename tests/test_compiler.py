"""Tests for the compiler module."""

import pytest

from pipegen.ast import PipelineTemplateSpec, SCMInfo, SCMType, TaskTemplateSpec
from pipegen.compiler import Compiler
from pipegen.compiler.spec import CLEAN_WORKSPACE_SCRIPT
from pipegen.errors import (
    ErrorList,
    is_definition_error,
    is_render_error,
    is_validate_error,
)


def single_task_pipeline(task_type="shell", task_name="build", **extra):
    """One stage holding one task, constants give the shell command."""
    data = {
        "stages": [{"name": task_name, "tasks": [{"name": task_name, "type": task_type}]}],
        "values": {"tasks": {task_name: {"args": {"cmd": "make"}}}},
    }
    data.update(extra)
    return PipelineTemplateSpec.model_validate(data)


def option_arg(name, *binding, type_="int"):
    return {
        "displayName": {"zh-CN": "选项", "en": "Options"},
        "items": [
            {
                "name": name,
                "schema": {"type": type_},
                "binding": list(binding),
                "display": {"type": type_, "name": {"zh-CN": "超时", "en": "Timeout"}},
            }
        ],
    }


class TestStages:
    def test_defaults_flow_into_scripts(self, pipeline_spec, task_templates):
        pipeline = Compiler(task_templates).compile(pipeline_spec)

        assert pipeline.agent == "any"
        build, test = pipeline.stages
        assert build.name == "build"
        assert not build.is_parallel
        assert build.steps.scripts == 'sh "make"\n'

        assert test.is_parallel
        assert [child.name for child in test.stages] == ["unit"]
        assert test.stages[0].steps.scripts == 'sh "make test"\n'

    def test_values_override_defaults(self, pipeline_spec, task_templates):
        pipeline = Compiler(task_templates).compile(
            pipeline_spec, {"buildCmd": "make all", "lint": True}
        )
        build, test = pipeline.stages
        assert build.steps.scripts == 'sh "make all"\n'
        assert [child.name for child in test.stages] == ["unit", "lint"]

    def test_invisible_single_task_stage_is_skipped(self, task_templates):
        spec = PipelineTemplateSpec.model_validate(
            {
                "stages": [
                    {"name": "build", "tasks": [{"name": "build", "type": "shell"}]},
                    {
                        "name": "deploy",
                        "tasks": [
                            {
                                "name": "deploy",
                                "type": "shell",
                                "relation": [{"action": "hidden", "when": {"name": "skip", "value": True}}],
                            }
                        ],
                    },
                ],
                "values": {"tasks": {"build": {"args": {"cmd": "a"}}, "deploy": {"args": {"cmd": "b"}}}},
                "arguments": [
                    {
                        "items": [
                            {
                                "name": "skip",
                                "schema": {"type": "boolean"},
                                "display": {"type": "boolean", "name": {"zh-CN": "跳过", "en": "Skip"}},
                            }
                        ]
                    }
                ],
            }
        )
        compiler = Compiler(task_templates)
        assert [s.name for s in compiler.compile(spec, {"skip": True}).stages] == ["build"]
        assert [s.name for s in compiler.compile(spec, {"skip": False}).stages] == ["build", "deploy"]

    def test_parallel_stage_without_visible_tasks_is_omitted(self, pipeline_spec, task_templates):
        pipeline_spec.stages[1].tasks[0].relation = pipeline_spec.stages[1].tasks[1].relation
        pipeline = Compiler(task_templates).compile(pipeline_spec)
        assert [s.name for s in pipeline.stages] == ["build"]

    def test_stage_conditions_become_when(self, task_templates):
        spec = single_task_pipeline()
        spec.stages[0].tasks[0].conditions = {"all": ["params.DEPLOY"]}
        pipeline = Compiler(task_templates).compile(spec)
        assert pipeline.stages[0].when == {"all": ["params.DEPLOY"]}

    def test_agent_falls_back_to_template(self, task_templates):
        task_templates["shell"].agent = "{ label 'maven' }"
        pipeline = Compiler(task_templates).compile(single_task_pipeline(agent="none"))
        assert pipeline.agent == "none"
        assert pipeline.stages[0].agent == "{ label 'maven' }"


class TestPost:
    def test_default_cleanup(self, pipeline_spec, task_templates):
        pipeline = Compiler(task_templates).compile(pipeline_spec)
        assert len(pipeline.post) == 1
        assert pipeline.post[0].name == "always"
        assert pipeline.post[0].scripts == CLEAN_WORKSPACE_SCRIPT

    def test_post_tasks_concatenate(self, task_templates):
        spec = single_task_pipeline(
            post={
                "failure": [
                    {"name": "mail", "type": "shell"},
                    {"name": "chat", "type": "shell"},
                ]
            },
            values={
                "tasks": {
                    "build": {"args": {"cmd": "make"}},
                    "mail": {"args": {"cmd": "mail"}},
                    "chat": {"args": {"cmd": "chat"}},
                }
            },
        )
        pipeline = Compiler(task_templates).compile(spec)
        assert len(pipeline.post) == 1
        assert pipeline.post[0].name == "failure"
        assert pipeline.post[0].scripts == 'sh "mail"\nsh "chat"\n'


class TestSCM:
    def spec(self):
        return PipelineTemplateSpec.model_validate(
            {
                "withSCM": True,
                "stages": [{"name": "Clone", "tasks": [{"name": "Clone", "type": "clone"}]}],
            }
        )

    def test_scm_is_bound_to_clone(self, task_templates):
        scm = SCMInfo(type=SCMType.GIT, repository_path="https://git.example.com/app.git", branch="main")
        pipeline = Compiler(task_templates).compile(self.spec(), scm=scm)
        assert pipeline.stages[0].steps.scripts == (
            'git url: "https://git.example.com/app.git", branch: "main"\n'
        )

    def test_scm_required(self, task_templates):
        with pytest.raises(ErrorList, match="SCM is required") as exc_info:
            Compiler(task_templates).compile(self.spec())
        assert is_validate_error(exc_info.value)


class TestConstantsAndFields:
    def test_constants_win_over_bindings(self, task_templates):
        spec = single_task_pipeline(
            arguments=[option_arg("cmd", "build.args.cmd", type_="string")],
        )
        pipeline = Compiler(task_templates).compile(spec, {"cmd": "from-values"})
        assert pipeline.stages[0].steps.scripts == 'sh "make"\n'

    def test_constant_options_and_approve(self, task_templates):
        spec = single_task_pipeline(
            values={
                "tasks": {
                    "build": {
                        "args": {"cmd": "make"},
                        "options": {"timeout": 60},
                        "approve": {"timeout": 30, "message": "go?"},
                    }
                }
            }
        )
        stage = Compiler(task_templates).compile(spec).stages[0]
        assert stage.options.timeout == 60
        assert stage.approve.timeout == 30
        assert stage.approve.message == "go?"

    def test_direct_field_binding(self, task_templates):
        spec = single_task_pipeline(
            values={"tasks": {"build": {"args": {"cmd": "make"}, "options": {"timeout": 60}}}},
            arguments=[option_arg("timeout", "build.options.timeout", "build.approve.timeout")],
        )
        stage = Compiler(task_templates).compile(spec, {"timeout": 90}).stages[0]
        assert stage.options.timeout == 90
        assert stage.approve.timeout == 90

    def test_unbound_direct_field_keeps_constant(self, task_templates):
        spec = single_task_pipeline(
            values={"tasks": {"build": {"args": {"cmd": "make"}, "options": {"timeout": 60}}}},
            arguments=[option_arg("timeout", "build.options.timeout")],
        )
        stage = Compiler(task_templates).compile(spec).stages[0]
        assert stage.options.timeout == 60

    def test_timeout_must_be_int(self, task_templates):
        spec = single_task_pipeline(
            arguments=[option_arg("timeout", "build.options.timeout", type_="string")],
        )
        with pytest.raises(ErrorList, match="should be int"):
            Compiler(task_templates).compile(spec, {"timeout": "90"})

    def test_unsupported_direct_field_is_ignored(self, task_templates):
        spec = single_task_pipeline(arguments=[option_arg("x", "build.agent")])
        stage = Compiler(task_templates).compile(spec, {"x": 1}).stages[0]
        assert stage.agent is None
        assert stage.steps.scripts == 'sh "make"\n'

    def test_hidden_argument_value_is_not_bound(self, task_templates):
        """A hidden argument's value never reaches the task, even when invalid."""
        spec = single_task_pipeline(
            values={"tasks": {"build": {"args": {"cmd": "make"}, "options": {"timeout": 60}}}},
            arguments=[
                {
                    "items": [
                        {
                            "name": "useTimeout",
                            "schema": {"type": "boolean"},
                            "default": False,
                            "display": {"type": "boolean", "name": {"zh-CN": "超时开关", "en": "Use Timeout"}},
                        },
                        {
                            "name": "timeout",
                            "schema": {"type": "int"},
                            "binding": ["build.options.timeout"],
                            "display": {"type": "int", "name": {"zh-CN": "超时", "en": "Timeout"}},
                            "relation": [
                                {"action": "show", "when": {"name": "useTimeout", "value": True}}
                            ],
                        },
                    ]
                }
            ],
        )
        compiler = Compiler(task_templates)

        stage = compiler.compile(spec, {"timeout": "ten"}).stages[0]
        assert stage.options.timeout == 60

        stage = compiler.compile(spec, {"useTimeout": True, "timeout": 90}).stages[0]
        assert stage.options.timeout == 90


class TestErrors:
    def test_invalid_definition(self, task_templates):
        spec = PipelineTemplateSpec.model_validate({"stages": []})
        with pytest.raises(ErrorList) as exc_info:
            Compiler(task_templates).compile(spec)
        assert is_definition_error(exc_info.value)

    def test_invalid_value(self, pipeline_spec, task_templates):
        with pytest.raises(ErrorList, match="buildCmd should be string") as exc_info:
            Compiler(task_templates).compile(pipeline_spec, {"buildCmd": 1})
        assert is_validate_error(exc_info.value)

    def test_missing_task_templates_are_all_reported(self, pipeline_spec):
        """One error per missing template name, however many tasks use it."""
        pipeline_spec.stages[1].tasks[1].type = "linter"
        with pytest.raises(ErrorList) as exc_info:
            Compiler({}).compile(pipeline_spec)
        messages = [str(e) for e in exc_info.value.flatten()]
        assert len(messages) == 2
        assert "require definition of task template named:shell" in messages[0]
        assert "require definition of task template named:linter" in messages[1]

    def test_render_errors_are_collected(self, task_templates):
        task_templates["broken"] = TaskTemplateSpec(body="echo ${{ nope }}\n")
        spec = PipelineTemplateSpec.model_validate(
            {
                "stages": [
                    {"name": "a", "tasks": [{"name": "a", "type": "broken"}]},
                    {"name": "b", "tasks": [{"name": "b", "type": "broken"}]},
                ]
            }
        )
        with pytest.raises(ErrorList) as exc_info:
            Compiler(task_templates).compile(spec)
        assert len(exc_info.value) == 2
        assert is_render_error(exc_info.value)
