"""Pipegen CLI Main Entry Point

Usage:
    pipegen version
    pipegen validate definition -f a.yaml -f b.yaml
    pipegen validate definition -d ./templates
    pipegen render pipeline.yaml --tasks ./tasks --values values.yaml
    pipegen globals --scm-type GIT --image
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

import typer
from rich.table import Table

from pipegen._version import __build_date__, __version__
from pipegen.ast import SCMInfo, SCMType, load_resource, load_task_templates, load_values
from pipegen.cli.utils import console, describe_error, handle_error, setup_logging
from pipegen.compiler import render_pipeline
from pipegen.config import DEFAULT_CONFIG_NAME, RenderSettings
from pipegen.errors import PipegenError
from pipegen.formatter import format_script
from pipegen.global_vars import get_global_vars

log = logging.getLogger(__name__)

app = typer.Typer(help="Compile pipeline templates into Jenkins declarative pipelines.")
validate_app = typer.Typer(help="Validate resources.")
app.add_typer(validate_app, name="validate")


@app.callback()
def main(
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Show info logs."),
) -> None:
    setup_logging(verbose)


@app.command()
def version() -> None:
    """Print the version of pipegen."""
    typer.echo(f"pipegen version: {__version__}({__build_date__})")


def collect_definition_files(directory: Path) -> List[Path]:
    """All *.yaml files below directory, which must hold a definition/ folder."""
    if not (directory / "definition").is_dir():
        raise typer.BadParameter(
            f"{directory} should contain a `definition` directory", param_hint="--dir"
        )
    return sorted(p for p in directory.rglob("*.yaml") if p.is_file())


@validate_app.command("definition")
def validate_definition(
    files: Optional[List[Path]] = typer.Option(
        None,
        "-f",
        "--file",
        exists=True,
        dir_okay=False,
        help="Manifest file to validate, may be repeated.",
    ),
    directory: Optional[Path] = typer.Option(
        None, "-d", "--dir", help="Template repository directory to validate."
    ),
) -> None:
    """Validate resource definitions."""
    paths: List[Path] = list(files or [])
    if directory is not None:
        paths = collect_definition_files(directory)

    if not paths:
        typer.secho("Error: no file need to validate", err=True, fg=typer.colors.RED)
        raise typer.Exit(code=1)

    failed = 0
    for path in paths:
        try:
            load_resource(path).validate_definition()
        except PipegenError as exc:
            failed += 1
            typer.echo(f"×\t {path}")
            for line in describe_error(exc):
                typer.echo(f"\t {line}")
            continue
        typer.echo(f"√\t {path}")

    if failed:
        typer.secho(
            f"Error: template definition validation is not pass ({failed} of {len(paths)} failed)",
            err=True,
            fg=typer.colors.RED,
        )
        raise typer.Exit(code=1)


@app.command()
def render(
    pipeline_file: Path = typer.Argument(..., exists=True, dir_okay=False, help="PipelineTemplate manifest."),
    tasks: Path = typer.Option(
        ..., "--tasks", "-t", exists=True, file_okay=False, help="Directory of PipelineTaskTemplate manifests."
    ),
    values: Optional[Path] = typer.Option(
        None, "--values", exists=True, dir_okay=False, help="YAML/JSON file of argument values."
    ),
    scm_type: Optional[SCMType] = typer.Option(None, "--scm-type", help="Source control type."),
    scm_path: str = typer.Option("", "--scm-path", help="Repository path."),
    scm_credential: str = typer.Option("", "--scm-credential", help="Credentials id."),
    scm_branch: str = typer.Option("", "--scm-branch", help="Branch."),
    no_format: bool = typer.Option(False, "--no-format", help="Skip re-indenting the output."),
    output: Optional[Path] = typer.Option(None, "-o", "--output", help="Write the script to a file."),
    config: Path = typer.Option(Path(DEFAULT_CONFIG_NAME), "--config", "-c", help="Render settings file."),
) -> None:
    """Render a pipeline template to a Jenkinsfile."""
    try:
        settings = RenderSettings.load(config)
        spec = load_resource(pipeline_file).pipeline_spec()
        task_templates = load_task_templates(tasks)
        arg_values = load_values(values)
        scm = None
        if scm_type is not None:
            scm = SCMInfo(
                type=scm_type,
                repository_path=scm_path,
                credentials_id=scm_credential,
                branch=scm_branch,
            )

        log.info("rendering %s with %d task templates", pipeline_file, len(task_templates))
        script = render_pipeline(spec, task_templates, arg_values, scm, settings)
        if settings.format and not no_format:
            script = format_script(script, settings.indent_spaces)
    except PipegenError as exc:
        handle_error(exc)

    if output is not None:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(script, encoding="utf-8")
        typer.echo(f"Wrote pipeline to {output}")
        return
    typer.echo(script, nl=False)


@app.command("globals")
def globals_(
    scm_type: Optional[SCMType] = typer.Option(None, "--scm-type", help="Source control type."),
    image: bool = typer.Option(False, "--image", help="Pipeline is triggered by an image."),
) -> None:
    """List the global variables available to task scripts."""
    scm = SCMInfo(type=scm_type) if scm_type is not None else None
    variables = get_global_vars(scm, ["image"] if image else [])

    table = Table(title="Global variables")
    table.add_column("Name", style="cyan")
    table.add_column("Description")
    table.add_column("描述")
    for var in variables:
        table.add_row(var.name, var.description.en, var.description.zh_cn)
    console.print(table)


if __name__ == "__main__":
    app()
