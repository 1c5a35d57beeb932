"""Repository registry and default settings stored as JSON."""

from __future__ import annotations

import json
import os
from dataclasses import asdict, dataclass, field
from pathlib import Path

from .errors import ConfigInvalidError, ConfigNotFoundError, RepoNotInConfigError
from .models import MAX_DAYS, Period

CONFIG_ENV_VAR = "REPO_PULSE_CONFIG"


def expand_tilde(path: Path | str) -> Path:
    return Path(path).expanduser()


def shorten_home_path(path: Path) -> Path:
    """Replace the home directory prefix with ``~`` for storage."""
    home = Path.home()
    try:
        return Path("~") / path.relative_to(home)
    except ValueError:
        return path


def default_config_path() -> Path:
    env = os.environ.get(CONFIG_ENV_VAR, "").strip()
    if env:
        return expand_tilde(env)
    base = os.environ.get("XDG_CONFIG_HOME", "").strip()
    root = Path(base) if base else Path.home() / ".config"
    return root / "repo-pulse" / "config.json"


@dataclass
class RepoConfig:
    name: str
    path: str
    branch: str | None = None

    @property
    def expanded_path(self) -> Path:
        return expand_tilde(self.path)


@dataclass
class Defaults:
    days: int = 7
    period: str = "daily"
    timezone: str = "local"
    include_merges: bool = False
    extensions: list[str] = field(default_factory=list)


@dataclass
class Config:
    repositories: list[RepoConfig] = field(default_factory=list)
    defaults: Defaults = field(default_factory=Defaults)

    def add_repository(self, repo: RepoConfig) -> bool:
        """Append *repo* unless its path is already registered."""
        target = repo.expanded_path.resolve()
        if any(r.expanded_path.resolve() == target for r in self.repositories):
            return False
        self.repositories.append(repo)
        return True

    def remove_repository(self, identifier: str) -> RepoConfig:
        """Remove the first repository whose name or path equals *identifier*."""
        candidate = expand_tilde(identifier).resolve()
        for i, repo in enumerate(self.repositories):
            if repo.name == identifier or repo.expanded_path.resolve() == candidate:
                return self.repositories.pop(i)
        raise RepoNotInConfigError(identifier)

    def select(self, names: list[str] | None = None) -> list[RepoConfig]:
        if not names:
            return list(self.repositories)
        return [r for r in self.repositories if r.name in names]

    def to_dict(self) -> dict:
        return {
            "repositories": [
                {k: v for k, v in asdict(r).items() if v is not None} for r in self.repositories
            ],
            "defaults": asdict(self.defaults),
        }


def _parse_repo(item: object) -> RepoConfig:
    if not isinstance(item, dict):
        raise ConfigInvalidError("each repository entry must be an object")
    name = item.get("name")
    path = item.get("path")
    if not isinstance(name, str) or not name.strip():
        raise ConfigInvalidError("repository entry is missing 'name'")
    if not isinstance(path, str) or not path.strip():
        raise ConfigInvalidError(f"repository {name!r} is missing 'path'")
    branch = item.get("branch")
    if branch is not None and not isinstance(branch, str):
        raise ConfigInvalidError(f"repository {name!r} has a non-string 'branch'")
    return RepoConfig(name=name, path=path, branch=branch)


def _parse_defaults(raw: object) -> Defaults:
    if raw is None:
        return Defaults()
    if not isinstance(raw, dict):
        raise ConfigInvalidError("'defaults' must be an object")
    known = {k: raw[k] for k in ("days", "period", "timezone", "include_merges", "extensions") if k in raw}
    try:
        defaults = Defaults(**known)
    except TypeError as exc:
        raise ConfigInvalidError(str(exc)) from exc
    if not isinstance(defaults.days, int) or not 0 <= defaults.days <= MAX_DAYS:
        raise ConfigInvalidError(f"'defaults.days' must be an integer between 0 and {MAX_DAYS}")
    try:
        Period.parse(str(defaults.period))
    except ValueError as exc:
        raise ConfigInvalidError(f"unknown period {defaults.period!r}") from exc
    return defaults


def parse_config(data: object) -> Config:
    if not isinstance(data, dict):
        raise ConfigInvalidError("top level must be an object")
    repos = data.get("repositories", [])
    if not isinstance(repos, list):
        raise ConfigInvalidError("'repositories' must be a list")
    return Config(
        repositories=[_parse_repo(item) for item in repos],
        defaults=_parse_defaults(data.get("defaults")),
    )


def load_config(config_path: Path) -> Config:
    if not config_path.exists():
        raise ConfigNotFoundError(config_path)
    try:
        data = json.loads(config_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ConfigInvalidError(f"{config_path}: {exc}") from exc
    return parse_config(data)


def save_config(config: Config, config_path: Path) -> None:
    config_path.parent.mkdir(parents=True, exist_ok=True)
    config_path.write_text(json.dumps(config.to_dict(), indent=2) + "\n", encoding="utf-8")
