from __future__ import annotations

from pathlib import Path

import pytest

from reviewqueue.config import load_config
from reviewqueue.contracts.exceptions import ConfigError

_REPO = {"owner": "rust-lang", "name": "rust", "bors_queue_url": "https://bors.rust-lang.org/queue/rust"}


def test_load_config_applies_defaults(write_config) -> None:
    path = write_config({"username": "alice", "repos": [_REPO]})

    config = load_config(path)

    assert config.username == "alice"
    assert config.auth == "env"
    assert config.crater_url == "https://crater.rust-lang.org/"
    assert config.rfcbot_url == "https://rfcbot.rs/api/all"
    assert config.include_subscribed is True
    assert config.max_concurrent == 100
    assert config.refresh_interval == 60.0
    assert config.cache_periods.bors == 30.0
    assert config.cache_periods.rollups == 60.0
    assert config.cache_periods.crater == 600.0
    assert config.cache_periods.fcp == 30.0
    assert config.pagination.max_attempts == 20
    assert config.pagination.delay == 0.05
    assert config.ledger_path is None
    assert [repo.full_name for repo in config.repo_refs()] == ["rust-lang/rust"]
    assert config.repo_refs()[0].bors_queue_url == _REPO["bors_queue_url"]


def test_load_config_resolves_ledger_path_against_config_dir(write_config, tmp_path: Path) -> None:
    path = write_config({"username": "alice", "repos": [_REPO], "ledger_path": "state/seen.json"})

    config = load_config(path)

    assert config.ledger_path == (tmp_path / "state" / "seen.json").resolve()


def test_load_config_keeps_absolute_ledger_path(write_config, tmp_path: Path) -> None:
    absolute = tmp_path / "elsewhere" / "seen.json"
    path = write_config({"username": "alice", "repos": [_REPO], "ledger_path": str(absolute)})

    assert load_config(path).ledger_path == absolute


def test_load_config_missing_file(tmp_path: Path) -> None:
    with pytest.raises(ConfigError, match="failed reading config file"):
        load_config(tmp_path / "missing.json")


def test_load_config_invalid_json(tmp_path: Path) -> None:
    path = tmp_path / "reviewqueue.json"
    path.write_text("{not json", encoding="utf-8")

    with pytest.raises(ConfigError, match="invalid JSON"):
        load_config(path)


@pytest.mark.parametrize(
    "payload",
    [
        {"repos": [_REPO]},
        {"username": "alice", "repos": [_REPO], "auth": "token"},
        {"username": "alice", "repos": [_REPO], "auth": "env", "token": "abc"},
        {"username": "alice", "repos": [_REPO], "auth": "gh-cli"},
        {"username": "alice", "repos": [_REPO, _REPO]},
        {"username": "alice", "repos": [_REPO], "max_concurrent": 0},
        {"username": "alice", "repos": [_REPO], "cache_periods": {"bors": 0}},
    ],
)
def test_load_config_rejects_invalid_payloads(write_config, payload: dict) -> None:
    path = write_config(payload)

    with pytest.raises(ConfigError, match="invalid config"):
        load_config(path)


def test_load_config_requires_a_repository(write_config) -> None:
    path = write_config({"username": "alice", "repos": []})

    with pytest.raises(ConfigError, match="at least one repository"):
        load_config(path)


def test_load_config_rejects_relative_urls(write_config) -> None:
    path = write_config({"username": "alice", "repos": [{**_REPO, "bors_queue_url": "/queue/rust"}]})

    with pytest.raises(ConfigError, match="bors_queue_url"):
        load_config(path)


def test_load_config_accepts_static_token(write_config) -> None:
    path = write_config({"username": "alice", "repos": [_REPO], "auth": "token", "token": "ghp_abc"})

    config = load_config(path)

    assert config.auth == "token"
    assert config.token == "ghp_abc"
