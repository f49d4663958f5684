"""Script body interpolation.

Task template bodies use GitHub Actions-style ``${{ expr }}`` placeholders:

    ${{ imageTag }}
    ${{ repo.url }}
    ${{ targets | split(",") | join(" ") }}
    ${{ branch | replace("/", "-") | lower }}
    ${{ registry | default("docker.io") }}

An expression is a dotted path followed by zero or more ``| func(args)``
calls. Arguments are quoted strings or integers. No loops, no conditionals.
Everything else in the body (including Groovy ``${VAR}``) is left untouched.
"""

from __future__ import annotations

import json
import re
from typing import Any, Callable

from pipegen.errors import TemplateRenderError

PLACEHOLDER = re.compile(r"\$\{\{\s*(.+?)\s*\}\}", re.DOTALL)

_NAME = re.compile(r"[A-Za-z_][A-Za-z0-9_\-]*|\d+")
_CALL = re.compile(r"\s*([a-z]+)\s*(?:\((.*)\))?\s*$", re.DOTALL)
_ARG = re.compile(r"""\s*("(?:[^"\\]|\\.)*"|'(?:[^'\\]|\\.)*'|-?\d+)\s*(,|$)""", re.DOTALL)


class _Missing:
    def __repr__(self) -> str:
        return "<missing>"


MISSING = _Missing()


def render_scalar(value: Any) -> str:
    """Text form of a value inside a script"""
    if value is None or value is MISSING:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dict, list)):
        return json.dumps(value, ensure_ascii=False, separators=(",", ":"))
    return str(value)


def _as_text(value: Any) -> str:
    if isinstance(value, str):
        return value
    return render_scalar(value)


def _split(value: Any, sep: str | None = None) -> list[str]:
    return _as_text(value).split(sep)


def _replace(value: Any, old: str, new: str) -> str:
    return _as_text(value).replace(old, new)


def _join(value: Any, sep: str = ",") -> str:
    if not isinstance(value, (list, tuple)):
        return _as_text(value)
    return sep.join(_as_text(v) for v in value)


def _index(value: Any, i: int) -> Any:
    if not isinstance(value, (list, tuple, str)):
        raise TemplateRenderError(f"index() needs a list, got {type(value).__name__}")
    try:
        return value[i]
    except IndexError:
        raise TemplateRenderError(f"index {i} out of range for {value!r}") from None


def _default(value: Any, fallback: Any = "") -> Any:
    if value is MISSING or value is None or value == "":
        return fallback
    return value


FUNCTIONS: dict[str, Callable[..., Any]] = {
    "split": _split,
    "replace": _replace,
    "join": _join,
    "index": _index,
    "default": _default,
    "upper": lambda v: _as_text(v).upper(),
    "lower": lambda v: _as_text(v).lower(),
    "trim": lambda v: _as_text(v).strip(),
    "json": lambda v: json.dumps(v, ensure_ascii=False),
}


def _split_pipes(expr: str) -> list[str]:
    """Split on ``|`` outside quoted strings"""
    parts: list[str] = []
    current: list[str] = []
    quote = ""
    escaped = False
    for ch in expr:
        if escaped:
            current.append(ch)
            escaped = False
            continue
        if ch == "\\" and quote:
            current.append(ch)
            escaped = True
            continue
        if quote:
            if ch == quote:
                quote = ""
        elif ch in "\"'":
            quote = ch
        elif ch == "|":
            parts.append("".join(current))
            current = []
            continue
        current.append(ch)
    if quote:
        raise TemplateRenderError(f"unterminated string in expression: {expr}")
    parts.append("".join(current))
    return parts


_ESCAPES = {"n": "\n", "t": "\t", "r": "\r"}


def _unquote(text: str) -> str:
    return re.sub(r"\\(.)", lambda m: _ESCAPES.get(m.group(1), m.group(1)), text)


def _parse_args(text: str, expr: str) -> list[Any]:
    args: list[Any] = []
    text = text.strip()
    pos = 0
    while pos < len(text):
        match = _ARG.match(text, pos)
        if match is None:
            raise TemplateRenderError(f"invalid function arguments in expression: {expr}")
        token = match.group(1)
        if token[0] in "\"'":
            args.append(_unquote(token[1:-1]))
        else:
            args.append(int(token))
        pos = match.end()
    return args


def _parse_call(text: str, expr: str) -> tuple[str, list[Any]]:
    match = _CALL.match(text)
    if match is None:
        raise TemplateRenderError(f"invalid function call `{text.strip()}` in expression: {expr}")
    name, raw_args = match.group(1), match.group(2)
    if name not in FUNCTIONS:
        raise TemplateRenderError(f"unknown function `{name}` in expression: {expr}")
    args = _parse_args(raw_args, expr) if raw_args else []
    return name, args


def _resolve(path: str, context: dict[str, Any], expr: str) -> Any:
    """Resolve a dotted path, MISSING when any segment is absent"""
    segments = path.strip().split(".")
    for seg in segments:
        if not _NAME.fullmatch(seg):
            raise TemplateRenderError(f"invalid name `{seg}` in expression: {expr}")

    value: Any = context
    for seg in segments:
        if isinstance(value, dict) and seg in value:
            value = value[seg]
        elif isinstance(value, list) and seg.isdigit() and int(seg) < len(value):
            value = value[int(seg)]
        else:
            return MISSING
    return value


def evaluate(expr: str, context: dict[str, Any]) -> Any:
    """Evaluate one placeholder expression against context"""
    parts = _split_pipes(expr)
    value = _resolve(parts[0], context, expr)

    for part in parts[1:]:
        name, args = _parse_call(part, expr)
        if value is MISSING and name != "default":
            break
        try:
            value = FUNCTIONS[name](value, *args)
        except TemplateRenderError:
            raise
        except (TypeError, ValueError) as exc:
            raise TemplateRenderError(f"{name}() failed in expression `{expr}`: {exc}") from exc

    if value is MISSING:
        raise TemplateRenderError(
            f"undefined variable in template: {parts[0].strip()}", {"expression": expr}
        )
    return value


def interpolate(template: str, context: dict[str, Any]) -> str:
    """Replace every ``${{ expr }}`` placeholder in template.

    Raises:
        TemplateRenderError: a referenced name does not exist or an
            expression is malformed

    Example:
        >>> interpolate("tag=${{ tag | upper }}", {"tag": "v1"})
        'tag=V1'
    """

    def replace(match: re.Match[str]) -> str:
        return render_scalar(evaluate(match.group(1), context))

    return PLACEHOLDER.sub(replace, template)
