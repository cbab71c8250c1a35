"""Issue and pull-request snapshots as fetched from GitHub."""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, Field

from reviewqueue.contracts.repo import RepoRef


class Author(BaseModel):
    """A GitHub identity. Identity comparisons go through :meth:`same_as`."""

    name: str
    id: int
    avatar_url: str = ""
    profile_url: str = ""

    model_config = {"frozen": True}

    def same_as(self, other: Author) -> bool:
        return self.id == other.id


class MergeableState(StrEnum):
    """GitHub's ``mergeable_state`` values for a pull request."""

    CLEAN = "clean"
    BEHIND = "behind"
    DIRTY = "dirty"
    BLOCKED = "blocked"
    DRAFT = "draft"
    UNKNOWN = "unknown"
    UNSTABLE = "unstable"
    HAS_HOOKS = "has_hooks"


class DiscoveryKind(StrEnum):
    """How an issue entered a scan."""

    AUTHORED = "authored"
    ASSIGNED = "assigned"
    SUBSCRIBED = "subscribed"


class IssueSnapshot(BaseModel):
    repo: RepoRef
    number: int
    title: str
    body: str | None = None
    html_url: str
    created_at: datetime
    author: Author
    assignees: list[Author] = Field(default_factory=list)
    labels: frozenset[str] = frozenset()
    is_pull_request: bool = False

    model_config = {"frozen": True}

    def has_label(self, name: str) -> bool:
        return name in self.labels

    def is_assigned_to(self, username: str) -> bool:
        wanted = username.casefold()
        return any(assignee.name.casefold() == wanted for assignee in self.assignees)

    def is_authored_by(self, username: str) -> bool:
        return self.author.name.casefold() == username.casefold()


class PullDetail(BaseModel):
    """Pull-request fields that only the pulls endpoint reports."""

    number: int
    draft: bool = False
    mergeable: bool | None = None
    mergeable_state: MergeableState | None = None
    body: str | None = None
    html_url: str = ""

    model_config = {"frozen": True}
