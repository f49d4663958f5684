"""Renderer - converts Pipeline IR to Jenkins declarative pipeline text."""

from typing import Any, Optional

from jinja2 import TemplateError

from pipegen.compiler.extensions import get_pipegen_jinja_env
from pipegen.compiler.spec import Pipeline, PostCondition, Stage
from pipegen.config import RenderSettings
from pipegen.errors import TemplateRenderError

PIPELINE_LAYOUT = """\
pipeline{
    {{ agent }}
{% if pipeline.environments %}
    environment{
{% for env in pipeline.environments %}
        {{ env.name }} = "{{ env.value | groovy }}"
{% endfor %}
    }
{% endif %}
    options{
{% if settings.disable_concurrent_builds %}
        disableConcurrentBuilds()
{% endif %}
        buildDiscarder(logRotator(numToKeepStr: '{{ settings.build_retention }}'))
{% if pipeline.options and pipeline.options.timeout %}
        timeout(time:{{ pipeline.options.timeout }}, unit:'SECONDS')
{% endif %}
    }
    stages{
{% for stage in stages %}
        {{ stage | block(8) }}
{% endfor %}
    }
    post{
{% for post in posts %}
        {{ post | block(8) }}
{% endfor %}
    }
}
"""

STAGE_LAYOUT = """\
stage("{{ stage.name | groovy }}"){
{% if agent %}
    {{ agent }}
{% endif %}
{% if stage.environments %}
    environment{
{% for env in stage.environments %}
        {{ env.name }} = "{{ env.value | groovy }}"
{% endfor %}
    }
{% endif %}
{% if stage.when %}
    when{
        beforeAgent true
{% for key, conditions in stage.when.items() if conditions %}
{% if key == "all" %}
        expression { {{ conditions | join(" && ") }} }
{% elif key == "any" %}
        expression { {{ conditions | join(" || ") }} }
{% endif %}
{% endfor %}
    }
{% endif %}
{% if stage.options and stage.options.timeout %}
    options{
        timeout(time:{{ stage.options.timeout }}, unit:'SECONDS')
    }
{% endif %}
{% if stage.is_parallel %}
    failFast {{ "true" if stage.fail_fast else "false" }}
    parallel{
{% for child in children %}
        {{ child | block(8) }}
{% endfor %}
    }
{% else %}
    steps{
{% if stage.approve %}
        timeout(time:{{ stage.approve.timeout }}, unit:"SECONDS"){
            input {
                message "{{ stage.approve.message | groovy }}"
            }
        }
{% endif %}
        {{ stage.steps.scripts | block(8) }}
    }
{% endif %}
}
"""

POST_LAYOUT = """\
{{ post.name }}{
    {{ post.scripts | block(4) }}
}
"""


def render_agent(agent: Any, default: str) -> str:
    """Render an agent clause.

    A string is a label expression (``any``, ``none``, ``{ label 'x' }``),
    a mapping is read for its ``label`` key. Anything empty falls back to
    ``default``.
    """
    if agent is None:
        return default
    if isinstance(agent, str):
        if agent == "":
            return default
        return f"agent {agent}"
    if isinstance(agent, dict):
        label = next((v for k, v in agent.items() if str(k).lower() == "label"), None)
        if label:
            return f'agent {{label "{label}"}}'
        return default
    raise TemplateRenderError(f"unsupported agent {agent!r}")


def render_stage_agent(agent: Any, pipeline_agent: Any) -> str:
    """Render a stage agent, empty when it renders the same as the pipeline's."""
    if render_agent(agent, "") == render_agent(pipeline_agent, ""):
        return ""
    return render_agent(agent, "")


class Renderer:
    """Renders Pipeline IR to pipeline script text."""

    def __init__(self, settings: Optional[RenderSettings] = None):
        self.settings = settings or RenderSettings()
        env = get_pipegen_jinja_env()
        self._pipeline_layout = env.from_string(PIPELINE_LAYOUT)
        self._stage_layout = env.from_string(STAGE_LAYOUT)
        self._post_layout = env.from_string(POST_LAYOUT)

    def render(self, pipeline: Pipeline) -> str:
        """Render a Pipeline to script text.

        Args:
            pipeline: The Pipeline IR to render.

        Returns:
            Unformatted pipeline script.

        Raises:
            TemplateRenderError: A layout failed to render.
        """
        stages = [self.render_stage(stage, pipeline.agent) for stage in pipeline.stages]
        posts = [self.render_post(post) for post in pipeline.post]
        return self._render(
            self._pipeline_layout,
            "pipeline",
            pipeline=pipeline,
            agent=render_agent(pipeline.agent, "agent any"),
            settings=self.settings,
            stages=stages,
            posts=posts,
        )

    def render_stage(self, stage: Stage, pipeline_agent: Any = None) -> str:
        """Render one stage, recursing into parallel children."""
        children = [self.render_stage(child, pipeline_agent) for child in stage.stages]
        return self._render(
            self._stage_layout,
            f"stage {stage.name}",
            stage=stage,
            agent=render_stage_agent(stage.agent, pipeline_agent),
            children=children,
        )

    def render_post(self, post: PostCondition) -> str:
        return self._render(self._post_layout, f"post {post.name}", post=post)

    @staticmethod
    def _render(layout, what: str, **context: Any) -> str:
        try:
            return layout.render(**context)
        except TemplateError as e:
            raise TemplateRenderError(f"render {what} failed: {e}") from e
