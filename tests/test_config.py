"""Tests for the config module."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from repo_pulse.config import (
    CONFIG_ENV_VAR,
    Config,
    Defaults,
    RepoConfig,
    default_config_path,
    load_config,
    parse_config,
    save_config,
    shorten_home_path,
)
from repo_pulse.errors import ConfigInvalidError, ConfigNotFoundError, RepoNotInConfigError


def test_load_missing_file(tmp_path):
    with pytest.raises(ConfigNotFoundError) as exc_info:
        load_config(tmp_path / "nope.json")
    assert "nope.json" in str(exc_info.value)


def test_load_invalid_json(tmp_path):
    path = tmp_path / "config.json"
    path.write_text("{not json")
    with pytest.raises(ConfigInvalidError):
        load_config(path)


def test_save_then_load(tmp_path):
    path = tmp_path / "nested" / "config.json"
    config = Config(
        repositories=[RepoConfig("api", "~/src/api", "main"), RepoConfig("web", "/srv/web")],
        defaults=Defaults(days=30, period="weekly", timezone="Asia/Tokyo", extensions=["py"]),
    )
    save_config(config, path)

    raw = json.loads(path.read_text())
    assert raw["repositories"][1] == {"name": "web", "path": "/srv/web"}
    assert path.read_text().endswith("\n")

    loaded = load_config(path)
    assert loaded == config


def test_parse_config_fills_defaults():
    config = parse_config({"repositories": [{"name": "a", "path": "/tmp/a"}]})
    assert config.defaults == Defaults()
    assert config.repositories[0].branch is None


@pytest.mark.parametrize(
    "data",
    [
        [],
        {"repositories": {}},
        {"repositories": ["/tmp/a"]},
        {"repositories": [{"path": "/tmp/a"}]},
        {"repositories": [{"name": "a"}]},
        {"repositories": [{"name": "a", "path": "/tmp/a", "branch": 3}]},
        {"defaults": []},
        {"defaults": {"days": -1}},
        {"defaults": {"days": 1000000}},
        {"defaults": {"days": "seven"}},
        {"defaults": {"period": "hourly"}},
        {"defaults": {"unknown": 1, "days": 1, "period": "fortnightly"}},
    ],
)
def test_parse_config_rejects_invalid(data):
    with pytest.raises(ConfigInvalidError):
        parse_config(data)


def test_parse_config_ignores_unknown_default_keys():
    config = parse_config({"defaults": {"days": 3, "colour": "blue"}})
    assert config.defaults.days == 3


def test_add_repository_rejects_duplicate_path(tmp_path):
    config = Config()
    assert config.add_repository(RepoConfig("one", str(tmp_path)))
    assert not config.add_repository(RepoConfig("two", str(tmp_path) + "/"))
    assert [r.name for r in config.repositories] == ["one"]


def test_remove_repository_by_name_and_path(tmp_path):
    a, b = tmp_path / "a", tmp_path / "b"
    config = Config(repositories=[RepoConfig("a", str(a)), RepoConfig("b", str(b))])

    assert config.remove_repository("a").name == "a"
    assert config.remove_repository(str(b)).name == "b"
    assert config.repositories == []


def test_remove_unknown_repository():
    config = Config(repositories=[RepoConfig("a", "/tmp/a")])
    with pytest.raises(RepoNotInConfigError):
        config.remove_repository("zzz")
    assert len(config.repositories) == 1


def test_select_by_names():
    config = Config(repositories=[RepoConfig("a", "/a"), RepoConfig("b", "/b"), RepoConfig("c", "/c")])
    assert [r.name for r in config.select(["c", "a"])] == ["a", "c"]
    assert len(config.select(None)) == 3
    assert len(config.select([])) == 3


def test_default_config_path_env_var(monkeypatch, tmp_path):
    monkeypatch.setenv(CONFIG_ENV_VAR, str(tmp_path / "custom.json"))
    assert default_config_path() == tmp_path / "custom.json"


def test_default_config_path_xdg(monkeypatch, tmp_path):
    monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
    assert default_config_path() == tmp_path / "repo-pulse" / "config.json"


def test_default_config_path_home(monkeypatch, tmp_path):
    monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)
    monkeypatch.delenv("XDG_CONFIG_HOME", raising=False)
    monkeypatch.setenv("HOME", str(tmp_path))
    assert default_config_path() == tmp_path / ".config" / "repo-pulse" / "config.json"


def test_shorten_home_path(monkeypatch, tmp_path):
    monkeypatch.setenv("HOME", str(tmp_path))
    assert shorten_home_path(tmp_path / "src" / "app") == Path("~/src/app")
    assert shorten_home_path(Path("/opt/elsewhere")) == Path("/opt/elsewhere")


def test_expanded_path(monkeypatch, tmp_path):
    monkeypatch.setenv("HOME", str(tmp_path))
    assert RepoConfig("x", "~/code").expanded_path == tmp_path / "code"
