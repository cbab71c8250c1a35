"""Resolved pull request and scan result contracts."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from reviewqueue.contracts.issue import Author
from reviewqueue.contracts.repo import RepoRef
from reviewqueue.contracts.status import CiStatus, PrStatus, SortCategory, category_for


class Pr(BaseModel):
    """A pull request after correlation with every data source."""

    repo: RepoRef
    number: int
    title: str
    description: str | None = None
    link: str
    author: Author
    reviewers: tuple[Author, ...] = ()
    created: datetime
    status: PrStatus
    ci_status: CiStatus = CiStatus.UNKNOWN

    model_config = {"frozen": True}

    @property
    def key(self) -> tuple[RepoRef, int]:
        return (self.repo, self.number)

    def sort_category(self) -> SortCategory:
        return category_for(self.status)


class ScanResult(BaseModel):
    """The outcome of one completed scan for one user."""

    username: str
    prs: tuple[Pr, ...] = ()
    completed_at: datetime

    model_config = {"frozen": True}

    def open_numbers(self) -> frozenset[tuple[str, int]]:
        """Every ``(owner/name, number)`` currently open for the user."""
        return frozenset((pr.repo.full_name, pr.number) for pr in self.prs)


class BackendStatus(BaseModel):
    """What the per-user result cache is doing for one username."""

    state: str = Field(default="uninitialized", pattern="^(uninitialized|refreshing|idle)$")
    last_refresh: datetime | None = None
    last_error: str | None = None

    model_config = {"frozen": True}

    @property
    def stale(self) -> bool:
        return self.last_error is not None
