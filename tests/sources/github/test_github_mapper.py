from __future__ import annotations

from datetime import UTC, datetime

import pytest

from reviewqueue.contracts.exceptions import ProviderError
from reviewqueue.contracts.issue import MergeableState
from reviewqueue.contracts.repo import RepoRef
from reviewqueue.sources.github.mapper import (
    author_from_payload,
    issue_from_payload,
    pull_from_payload,
    repo_from_payload,
)

REPO = RepoRef(owner="rust-lang", name="rust")


def test_author_from_payload() -> None:
    author = author_from_payload({"login": "alice", "id": 1, "html_url": "https://github.com/alice"})

    assert author.name == "alice"
    assert author.profile_url == "https://github.com/alice"
    assert author.avatar_url == ""


def test_author_from_payload_rejects_bool_id() -> None:
    with pytest.raises(ProviderError, match="'id'"):
        author_from_payload({"login": "alice", "id": True})


def test_repo_from_payload_requires_repository() -> None:
    with pytest.raises(ProviderError, match="repository"):
        repo_from_payload({"number": 1})


def test_issue_from_payload_minimal() -> None:
    issue = issue_from_payload(
        {
            "number": 4,
            "title": "Crash",
            "html_url": "https://github.com/rust-lang/rust/issues/4",
            "created_at": "2024-02-01T08:00:00Z",
            "user": {"login": "alice", "id": 1},
            "labels": [{"name": "A-diagnostics"}, "bogus"],
        },
        REPO,
    )

    assert issue.created_at == datetime(2024, 2, 1, 8, 0, tzinfo=UTC)
    assert issue.body is None
    assert issue.assignees == []
    assert issue.labels == frozenset({"A-diagnostics"})
    assert not issue.is_pull_request


def test_pull_from_payload_ignores_unknown_mergeable_state() -> None:
    pull = pull_from_payload({"number": 1, "mergeable": True, "mergeable_state": "sparkly", "draft": None})

    assert pull.mergeable_state is None
    assert pull.mergeable is True
    assert pull.draft is False


def test_pull_from_payload_reads_known_state() -> None:
    pull = pull_from_payload({"number": 1, "mergeable": False, "mergeable_state": "dirty", "draft": True})

    assert pull.mergeable_state is MergeableState.DIRTY
    assert pull.draft is True
