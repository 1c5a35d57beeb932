"""Orchestrates repository resolution, commit collection and rendering."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path

from .aggregator import merge_stats
from .collector import collect_activity_stats, collect_stats
from .config import Config, default_config_path, expand_tilde, load_config
from .dashboard import run_dashboard
from .errors import NoRepositoriesError
from .git import CommitRecord, Repository, is_git_repository
from .models import AnalysisResult, DateRange, Days, Period
from .renderer import render_csv, render_json, render_report
from .zones import Clock, TimeZoneMode

logger = logging.getLogger(__name__)

OUTPUT_FORMATS = ("tui", "table", "json", "csv")


@dataclass(frozen=True)
class RepoTarget:
    path: Path
    name: str
    branch: str | None = None


def _dir_name(path: Path) -> str:
    return path.name or "repository"


def resolve_repositories(
    repo: str | Path | None = None,
    config: Config | None = None,
    repo_names: list[str] | None = None,
    branch: str | None = None,
    cwd: Path | None = None,
) -> list[RepoTarget]:
    """Pick repositories to analyze.

    Priority: explicit *repo* path, then the configured registry (filtered by
    *repo_names*, missing paths skipped), then the current directory.
    """
    if repo is not None:
        path = expand_tilde(repo)
        return [RepoTarget(path=path, name=_dir_name(path), branch=branch)]

    if config is not None:
        targets = []
        for r in config.select(repo_names):
            path = r.expanded_path
            if not (path.exists() and is_git_repository(path)):
                logger.warning("Skipping %s: %s is not a git repository", r.name, path)
                continue
            targets.append(RepoTarget(path=path, name=r.name, branch=branch or r.branch))
        if targets:
            return targets

    current = (cwd or Path.cwd()).resolve()
    if not (current / ".git").exists():
        raise NoRepositoriesError()
    return [RepoTarget(path=current, name=_dir_name(current), branch=branch)]


def combined_name(targets: list[RepoTarget]) -> str:
    if len(targets) == 1:
        return targets[0].name
    return f"{len(targets)} repos"


def _collect_repo(
    target: RepoTarget,
    date_range: DateRange,
    exclude_merges: bool,
    tz: TimeZoneMode,
) -> list[CommitRecord]:
    with Repository.open(target.path, target.name) as repository:
        return repository.commits_in_range(date_range, target.branch, exclude_merges, tz)


async def gather_commits(
    targets: list[RepoTarget],
    date_range: DateRange,
    exclude_merges: bool = True,
    tz: TimeZoneMode | None = None,
) -> list[list[CommitRecord]]:
    """Fetch every repository's commits concurrently, one list per target."""
    tz = tz or TimeZoneMode.utc()
    results = await asyncio.gather(
        *(asyncio.to_thread(_collect_repo, t, date_range, exclude_merges, tz) for t in targets)
    )
    return list(results)


def _load_optional_config(config_path: Path | None) -> Config | None:
    path = config_path or default_config_path()
    if not path.exists():
        logger.debug("No config at %s", path)
        return None
    return load_config(path)


async def run(
    repo: str | None = None,
    config_path: Path | None = None,
    repo_names: list[str] | None = None,
    days: int | None = None,
    period: str | None = None,
    output_format: str = "table",
    branch: str | None = None,
    extensions: list[str] | None = None,
    include_merges: bool | None = None,
    timezone: str | None = None,
    single_metric: bool = False,
    output_file: str | None = None,
    now: Clock | None = None,
) -> AnalysisResult:
    """Run a full analysis and render it in *output_format*.

    Options left as ``None`` fall back to the config file defaults.
    """
    config = None if repo is not None else _load_optional_config(config_path)
    defaults = (config or Config()).defaults

    tz = TimeZoneMode.parse(timezone if timezone is not None else defaults.timezone)
    period_value = Period.parse(period if period is not None else defaults.period)
    span = Days(days if days is not None else defaults.days)
    exclude_merges = not (include_merges if include_merges is not None else defaults.include_merges)
    exts = extensions if extensions is not None else (defaults.extensions or None)

    targets = resolve_repositories(repo, config, repo_names, branch)
    date_range = DateRange.last_n_days(span, tz, now)
    logger.info(
        "Analyzing %d repositories from %s to %s (%s)",
        len(targets), date_range.start, date_range.end, tz,
    )

    per_repo = await gather_commits(targets, date_range, exclude_merges, tz)
    commits = [c for records in per_repo for c in records]
    activity = collect_activity_stats(commits, tz, date_range)
    stats = merge_stats(*(
        collect_stats(t.name, records, date_range, period_value, exts, tz).stats
        for t, records in zip(targets, per_repo)
    ))
    result = AnalysisResult(
        repository=combined_name(targets),
        period=str(period_value),
        start=date_range.start,
        end=date_range.end,
        stats=stats,
    )

    if output_format == "json":
        render_json(result, output_file=output_file)
    elif output_format == "csv":
        render_csv(result, output_file=output_file)
    elif output_format == "tui":
        run_dashboard(result, activity, single_metric=single_metric)
    else:
        render_report(result, activity, output_file=output_file)
    return result
