"""Jinja2 environment for the structural pipeline layouts."""

from typing import Any

from jinja2 import Environment, StrictUndefined

from pipegen.template import render_scalar


def block(text: Any, width: int = 4) -> str:
    """Strip surrounding blank lines and indent every line but the first.

    Used where a pre-rendered multi-line block (a stage, a script body) is
    placed on an already indented template line.
    """
    lines = str(text).strip("\n").splitlines()
    if not lines:
        return ""
    pad = " " * width
    rest = [pad + line if line.strip() else "" for line in lines[1:]]
    return "\n".join([lines[0]] + rest)


def groovy_string(value: Any) -> str:
    """Escape a value for a double quoted Groovy string."""
    return render_scalar(value).replace("\\", "\\\\").replace('"', '\\"')


def get_pipegen_jinja_env() -> Environment:
    """Create the Jinja2 Environment used to render pipeline layouts.

    Returns:
        Configured Jinja2 Environment.
    """
    env = Environment(
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
        undefined=StrictUndefined,
        autoescape=False,
    )

    env.filters["scalar"] = render_scalar
    env.filters["block"] = block
    env.filters["groovy"] = groovy_string
    return env
