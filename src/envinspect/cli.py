"""Typer-based CLI for envinspect."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.json import JSON
from rich.table import Table

from .environment import EnvironmentReport, detect_environment
from .state import build_state
from .utils import to_json

app = typer.Typer(add_completion=False)
console = Console()

ConfigOption = typer.Option(None, "--config", help="Path to config TOML")
RootOption = typer.Option(None, "--root", help="Project root (defaults to the working directory)")
JsonOption = typer.Option(False, "--json", help="Emit JSON instead of text")


def _emit_json(payload: object) -> None:
    console.print(JSON.from_data(json.loads(to_json(payload))))


def _parse_assignments(pairs: list[str]) -> dict[str, str]:
    variables: dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise typer.BadParameter(f"Expected KEY=VALUE, got {pair!r}")
        variables[key] = value
    return variables


@app.command("env")
def env_check(
    config_path: Optional[Path] = ConfigOption,
    root: Optional[Path] = RootOption,
    json_output: bool = JsonOption,
) -> None:
    """Run environment diagnostics."""

    state = build_state(config_path, root)
    report = detect_environment(state.config, state.inspector)
    if json_output:
        _emit_json(report)
    else:
        _render_env_report(report)
    if report.issues:
        raise typer.Exit(code=1)


@app.command()
def branch(
    config_path: Optional[Path] = ConfigOption,
    root: Optional[Path] = RootOption,
) -> None:
    """Print the current branch name."""

    state = build_state(config_path, root)
    name = state.inspector.get_branch_name()
    if name is None:
        console.print("[yellow]Branch could not be determined")
        raise typer.Exit(code=1)
    console.print(name)


@app.command("type")
def environment_type(
    config_path: Optional[Path] = ConfigOption,
    root: Optional[Path] = RootOption,
) -> None:
    """Print the deployment environment type."""

    state = build_state(config_path, root)
    console.print(state.inspector.get_environment_type())


@app.command()
def name(
    branch_name: Optional[str] = typer.Argument(None, help="Branch to derive the channel from"),
    config_path: Optional[Path] = ConfigOption,
    root: Optional[Path] = RootOption,
) -> None:
    """Print a preview channel name for BRANCH_NAME or the current branch."""

    state = build_state(config_path, root)
    console.print(state.inspector.generate_environment_name(branch_name))


@app.command()
def verify(
    variables: list[str] = typer.Argument(..., help="Variables that must be set"),
    load: Optional[str] = typer.Option(None, "--load", help="Env file to load into the environment first"),
    config_path: Optional[Path] = ConfigOption,
    root: Optional[Path] = RootOption,
    json_output: bool = JsonOption,
) -> None:
    """Check that VARIABLES are set and non-empty in the process environment.

    Env files are only consulted when passed explicitly with --load.
    """

    state = build_state(config_path, root)
    if load and not state.inspector.load_env_file(load):
        raise typer.Exit(code=1)
    result = state.inspector.verify_required_env_vars(variables)
    if json_output:
        _emit_json(result)
    elif result.valid:
        console.print("[green]All required environment variables are set")
    else:
        console.print(f"[red]Missing: {', '.join(result.missing)}")
    if not result.valid:
        raise typer.Exit(code=1)


@app.command()
def check(
    file_name: Optional[str] = typer.Option(None, "--file", help="Env file relative to the project root"),
    require: Optional[list[str]] = typer.Option(None, "--require", "-r", help="Required variable (repeatable)"),
    config_path: Optional[Path] = ConfigOption,
    root: Optional[Path] = RootOption,
    json_output: bool = JsonOption,
) -> None:
    """Check an env file for required variables."""

    state = build_state(config_path, root)
    settings = state.config.inspector
    target = file_name or settings.env_file
    required = require if require else settings.required_vars
    result = state.inspector.check_env_file(target, required)

    if json_output:
        _emit_json(result)
    elif not result.exists:
        console.print(f"[red]{target} not found")
    elif result.error:
        console.print(f"[red]Could not read {target}: {result.error}")
    elif result.valid:
        console.print(f"[green]{target} OK")
    else:
        console.print(f"[red]{target} is missing: {', '.join(result.missing or [])}")

    if not result.valid:
        raise typer.Exit(code=1)


@app.command()
def write(
    assignments: list[str] = typer.Argument(..., help="KEY=VALUE pairs"),
    file_name: Optional[str] = typer.Option(None, "--file", help="Output file relative to the project root"),
    config_path: Optional[Path] = ConfigOption,
    root: Optional[Path] = RootOption,
) -> None:
    """Write a temporary env file, overwriting any existing one."""

    variables = _parse_assignments(assignments)
    state = build_state(config_path, root)
    path = state.inspector.create_temp_env_file(variables, file_name or state.config.inspector.temp_env_file)
    if path is None:
        raise typer.Exit(code=1)
    console.print(str(path))


@app.command()
def init(
    assignments: Optional[list[str]] = typer.Argument(None, help="Initial KEY=VALUE pairs"),
    file_name: Optional[str] = typer.Option(None, "--file", help="Env file relative to the project root"),
    config_path: Optional[Path] = ConfigOption,
    root: Optional[Path] = RootOption,
) -> None:
    """Create an env file if it does not exist yet."""

    variables = _parse_assignments(assignments or [])
    state = build_state(config_path, root)
    target = file_name or state.config.inspector.env_file
    if state.inspector.ensure_env_file(target, variables):
        console.print(f"[green]Created {target}")
    else:
        console.print(f"[yellow]{target} left unchanged")


def _render_env_report(report: EnvironmentReport) -> None:
    console.rule("Environment Report")
    table = Table(show_header=False)
    table.add_row("Project root", str(report.project_root))
    table.add_row("CI", "[green]yes" if report.is_ci else "no")
    if report.ci_variables:
        table.add_row("CI variables", ", ".join(report.ci_variables))
    table.add_row("Environment", report.environment_type)
    table.add_row("Branch", report.branch or "-")
    table.add_row("Channel", report.channel_name)
    console.print(table)

    if report.issues:
        console.print("[red]Blocking issues detected:")
        for issue in report.issues:
            console.print(f"  • {issue}")

    if report.notes:
        console.print("[cyan]Notes:")
        for note in report.notes:
            console.print(f"  • {note}")


def run() -> None:
    app()
