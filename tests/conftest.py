"""Shared test fixtures for reviewqueue tests."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest

from reviewqueue.contracts.config import RepoConfig, ReviewQueueConfig
from tests.fakes.github import REPO, FakeGitHub, FakeHub


@pytest.fixture
def config() -> ReviewQueueConfig:
    """A minimal valid config for the user ``alice``."""
    return ReviewQueueConfig(
        username="alice",
        repos=[RepoConfig(owner=REPO.owner, name=REPO.name, bors_queue_url=REPO.bors_queue_url)],
    )


@pytest.fixture
def fake_github() -> FakeGitHub:
    return FakeGitHub()


@pytest.fixture
def fake_hub() -> FakeHub:
    return FakeHub()


@pytest.fixture
def write_config(tmp_path: Path):
    """Write a JSON config into ``tmp_path`` and return its path."""

    def _write(payload: dict[str, Any], name: str = "reviewqueue.json") -> Path:
        path = tmp_path / name
        path.write_text(json.dumps(payload), encoding="utf-8")
        return path

    return _write
