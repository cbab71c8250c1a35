"""Mapping functions between GitHub REST payloads and domain models."""

from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError

from reviewqueue.contracts.exceptions import ProviderError
from reviewqueue.contracts.issue import Author, IssueSnapshot, MergeableState, PullDetail
from reviewqueue.contracts.repo import RepoRef

_LOG = logging.getLogger(__name__)


def _require_dict(payload: dict[str, Any], key: str) -> dict[str, Any]:
    value = payload.get(key)
    if not isinstance(value, dict):
        raise ProviderError(f"Missing/invalid object at key '{key}'")
    return value


def _require_int(payload: dict[str, Any], key: str) -> int:
    value = payload.get(key)
    if not isinstance(value, int) or isinstance(value, bool):
        raise ProviderError(f"Missing/invalid int at key '{key}'")
    return value


def _require_str(payload: dict[str, Any], key: str) -> str:
    value = payload.get(key)
    if not isinstance(value, str):
        raise ProviderError(f"Missing/invalid string at key '{key}'")
    return value


def author_from_payload(payload: dict[str, Any]) -> Author:
    return Author(
        name=_require_str(payload, "login"),
        id=_require_int(payload, "id"),
        avatar_url=payload.get("avatar_url") or "",
        profile_url=payload.get("html_url") or "",
    )


def repo_from_payload(payload: dict[str, Any]) -> RepoRef:
    """Repository of an item returned by a cross-repository listing such as ``/issues``."""
    repository = _require_dict(payload, "repository")
    owner = _require_dict(repository, "owner")
    return RepoRef(owner=_require_str(owner, "login"), name=_require_str(repository, "name"))


def issue_from_payload(payload: dict[str, Any], repo: RepoRef) -> IssueSnapshot:
    """Convert one item of an issues listing.

    Raises:
        ProviderError: If a required field is missing or malformed.
    """
    labels = payload.get("labels") or []
    assignees = payload.get("assignees") or []
    try:
        return IssueSnapshot(
            repo=repo,
            number=_require_int(payload, "number"),
            title=_require_str(payload, "title"),
            body=payload.get("body"),
            html_url=_require_str(payload, "html_url"),
            created_at=_require_str(payload, "created_at"),
            author=author_from_payload(_require_dict(payload, "user")),
            assignees=[author_from_payload(assignee) for assignee in assignees],
            labels=frozenset(label["name"] for label in labels if isinstance(label, dict) and "name" in label),
            is_pull_request=isinstance(payload.get("pull_request"), dict),
        )
    except ValidationError as exc:
        raise ProviderError(f"Invalid issue payload for #{payload.get('number')}: {exc}") from exc


def _mergeable_state(value: Any) -> MergeableState | None:
    if value is None:
        return None
    try:
        return MergeableState(value)
    except ValueError:
        _LOG.warning("Unrecognized mergeable_state %r", value)
        return None


def pull_from_payload(payload: dict[str, Any]) -> PullDetail:
    mergeable = payload.get("mergeable")
    return PullDetail(
        number=_require_int(payload, "number"),
        draft=bool(payload.get("draft")),
        mergeable=mergeable if isinstance(mergeable, bool) else None,
        mergeable_state=_mergeable_state(payload.get("mergeable_state")),
        body=payload.get("body"),
        html_url=payload.get("html_url") or "",
    )
