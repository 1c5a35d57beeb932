"""Command-line interface for repo-pulse."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from . import __version__
from .config import (
    CONFIG_ENV_VAR,
    Config,
    RepoConfig,
    default_config_path,
    expand_tilde,
    load_config,
    save_config,
    shorten_home_path,
)
from .errors import ConfigNotFoundError, NotGitRepositoryError, RepoPulseError
from .git import is_git_repository
from .logging_utils import configure_logging
from .models import MAX_DAYS
from .orchestrator import OUTPUT_FORMATS, run

PERIODS = ("daily", "weekly", "monthly", "yearly")


def _split_csv(ctx: click.Context, param: click.Parameter, value: str | None) -> list[str] | None:
    if value is None:
        return None
    return [item.strip() for item in value.split(",") if item.strip()]


def _config_file(ctx: click.Context) -> Path:
    path = ctx.obj.get("config") if ctx.obj else None
    return path or default_config_path()


@click.group(invoke_without_command=True)
@click.option("--config", "-c", "config_path", type=click.Path(path_type=Path), envvar=CONFIG_ENV_VAR,
              help="Path to config file.")
@click.option("--repo", "-r", default=None, help="Repository path (overrides config).")
@click.option("--days", "-d", type=click.IntRange(min=0, max=MAX_DAYS), default=None,
              help="Number of days to analyze (default: 7).")
@click.option("--include-merges", is_flag=True, help="Include merge commits.")
@click.option("--output", "-o", "output_format", type=click.Choice(OUTPUT_FORMATS), default="table",
              show_default=True, help="Output format.")
@click.option("--period", "-p", type=click.Choice(PERIODS, case_sensitive=False), default=None,
              help="Aggregation period (default: daily).")
@click.option("--branch", "-b", default=None, help="Branch to analyze (default: HEAD).")
@click.option("--ext", "extensions", callback=_split_csv, default=None,
              help="File extensions to include, comma-separated (e.g. py,ts).")
@click.option("--single-metric", is_flag=True, help="Show one chart at a time in the dashboard.")
@click.option("--timezone", "timezone", default=None,
              help="Time zone for date/activity bucketing: local, utc, or IANA name (default: local).")
@click.option("--repo-name", "repo_names", callback=_split_csv, default=None,
              help="Only analyze configured repositories with these names, comma-separated.")
@click.option("--output-file", default=None, help="Save table/json/csv output to a file.")
@click.option("--verbose", "-v", count=True, help="Increase log verbosity (repeatable).")
@click.version_option(version=__version__, prog_name="repo-pulse")
@click.pass_context
def main(
    ctx: click.Context,
    config_path: Path | None,
    repo: str | None,
    days: int | None,
    include_merges: bool,
    output_format: str,
    period: str | None,
    branch: str | None,
    extensions: list[str] | None,
    single_metric: bool,
    timezone: str | None,
    repo_names: list[str] | None,
    output_file: str | None,
    verbose: int,
) -> None:
    """Analyze commit activity of local git repositories."""
    configure_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj["config"] = config_path
    if ctx.invoked_subcommand is not None:
        return

    try:
        asyncio.run(run(
            repo=repo,
            config_path=config_path,
            repo_names=repo_names,
            days=days,
            period=period,
            output_format=output_format,
            branch=branch,
            extensions=extensions,
            include_merges=True if include_merges else None,
            timezone=timezone,
            single_metric=single_metric,
            output_file=output_file,
        ))
    except RepoPulseError as exc:
        raise click.ClickException(str(exc)) from exc


@main.command()
@click.argument("path", type=click.Path(path_type=Path))
@click.option("--name", "-n", default=None, help="Display name (defaults to the directory name).")
@click.option("--branch", "-b", default=None, help="Default branch to analyze.")
@click.pass_context
def add(ctx: click.Context, path: Path, name: str | None, branch: str | None) -> None:
    """Register a repository in the config file."""
    config_file = _config_file(ctx)
    try:
        absolute = expand_tilde(path).resolve()
        if not is_git_repository(absolute):
            raise NotGitRepositoryError(absolute)
        config = load_config(config_file) if config_file.exists() else Config()
        repo_name = name or absolute.name or "repository"
        stored = shorten_home_path(absolute)
        if not config.add_repository(RepoConfig(name=repo_name, path=str(stored), branch=branch)):
            click.echo(f"Repository already exists in config: {repo_name}")
            return
        save_config(config, config_file)
    except RepoPulseError as exc:
        raise click.ClickException(str(exc)) from exc

    click.echo(f"Added repository: {repo_name}")
    click.echo(f"  Path: {stored}")
    click.echo(f"  Config: {config_file}")


@main.command()
@click.argument("identifier")
@click.pass_context
def remove(ctx: click.Context, identifier: str) -> None:
    """Unregister a repository by name or path."""
    config_file = _config_file(ctx)
    try:
        if not config_file.exists():
            raise ConfigNotFoundError(config_file)
        config = load_config(config_file)
        config.remove_repository(identifier)
        save_config(config, config_file)
    except RepoPulseError as exc:
        raise click.ClickException(str(exc)) from exc

    click.echo(f"Removed repository: {identifier}")
    click.echo(f"  Config: {config_file}")


@main.command("list")
@click.option("--json", "as_json", is_flag=True, help="Output in JSON format.")
@click.pass_context
def list_repos(ctx: click.Context, as_json: bool) -> None:
    """List registered repositories."""
    config_file = _config_file(ctx)
    try:
        config = load_config(config_file) if config_file.exists() else Config()
    except RepoPulseError as exc:
        raise click.ClickException(str(exc)) from exc

    if not config.repositories:
        if as_json:
            click.echo("[]")
        else:
            click.echo("No repositories registered.")
            click.echo("Use 'repo-pulse add <path>' to register a repository.")
        return

    rows = [(r, is_git_repository(r.expanded_path)) for r in config.repositories]
    if as_json:
        payload = [
            {"name": r.name, "path": r.path, "branch": r.branch, "exists": exists}
            for r, exists in rows
        ]
        click.echo(json.dumps(payload, indent=2))
        return

    table = Table(show_header=True, header_style="bold")
    table.add_column("Name")
    table.add_column("Path")
    table.add_column("Branch")
    table.add_column("Status", justify="center")
    for r, exists in rows:
        table.add_row(r.name, r.path, r.branch or "-", "\u2713" if exists else "\u2717")
    Console().print(table)
