"""Resolved status values for a pull request.

``PrStatus``, ``QueueStatus`` and ``WaitReason`` are flat tagged unions
discriminated by ``kind``; each variant embeds only the payload it needs.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Annotated, Literal

from pydantic import BaseModel, Field

from reviewqueue.contracts.issue import Author
from reviewqueue.contracts.sources import CraterStatus, FcpStatus, RollupSetting


class CiStatus(StrEnum):
    CONFLICTED = "conflicted"
    GOOD = "good"
    RUNNING = "running"
    BAD = "bad"
    UNKNOWN = "unknown"
    DRAFT = "draft"


class SortCategory(StrEnum):
    """Mutually exclusive triage buckets, in display order."""

    WORK_READY = "work_ready"
    TODO_REVIEW = "todo_review"
    STALLED = "stalled"
    QUEUE = "queue"
    DRAFT = "draft"
    OTHER = "other"


# ------------------------------------------------------------------
# Queue position
# ------------------------------------------------------------------


class QueueUnknown(BaseModel):
    kind: Literal["unknown"] = "unknown"

    model_config = {"frozen": True}


class QueueRunning(BaseModel):
    kind: Literal["running"] = "running"

    model_config = {"frozen": True}


class InQueue(BaseModel):
    kind: Literal["in_queue"] = "in_queue"
    position: int

    model_config = {"frozen": True}


class _RollupMembership(BaseModel):
    pr_number: int
    """Number of the rollup PR itself."""
    pr_link: str = ""
    rollup_size: int = 0
    position: int
    """The rollup's own position in the bors queue."""

    model_config = {"frozen": True}


class InNextRollup(_RollupMembership):
    kind: Literal["in_next_rollup"] = "in_next_rollup"


class InRollup(_RollupMembership):
    kind: Literal["in_rollup"] = "in_rollup"
    nth_rollup: int


class InRunningRollup(_RollupMembership):
    kind: Literal["in_running_rollup"] = "in_running_rollup"


QueueStatus = Annotated[
    QueueUnknown | QueueRunning | InQueue | InNextRollup | InRollup | InRunningRollup,
    Field(discriminator="kind"),
]


# ------------------------------------------------------------------
# Wait reasons
# ------------------------------------------------------------------


class WaitingOnAuthor(BaseModel):
    kind: Literal["author"] = "author"

    model_config = {"frozen": True}


class Blocked(BaseModel):
    kind: Literal["blocked"] = "blocked"

    model_config = {"frozen": True}


class WaitingOnReview(BaseModel):
    kind: Literal["review"] = "review"

    model_config = {"frozen": True}


class WaitingOnFcp(BaseModel):
    kind: Literal["fcp"] = "fcp"
    fcp: FcpStatus | None = None
    """``None`` when rfcbot has no running FCP for the issue."""

    model_config = {"frozen": True}


class WaitingOnCrater(BaseModel):
    kind: Literal["crater_run"] = "crater_run"
    crater: CraterStatus

    model_config = {"frozen": True}


class UnknownWait(BaseModel):
    kind: Literal["unknown"] = "unknown"

    model_config = {"frozen": True}


WaitReason = Annotated[
    WaitingOnAuthor | Blocked | WaitingOnReview | WaitingOnFcp | WaitingOnCrater | UnknownWait,
    Field(discriminator="kind"),
]


# ------------------------------------------------------------------
# PR status
# ------------------------------------------------------------------


class SubscribedStatus(BaseModel):
    kind: Literal["subscribed"] = "subscribed"

    model_config = {"frozen": True}


class DraftStatus(BaseModel):
    kind: Literal["draft"] = "draft"

    model_config = {"frozen": True}


class ReviewStatus(BaseModel):
    """The requester is an assignee and the PR waits on review."""

    kind: Literal["review"] = "review"
    other_reviewers: tuple[Author, ...] = ()

    model_config = {"frozen": True}


class ReadyStatus(BaseModel):
    """The requester authored the PR and it waits on them."""

    kind: Literal["ready"] = "ready"

    model_config = {"frozen": True}


class QueuedStatus(BaseModel):
    kind: Literal["queued"] = "queued"
    approvers: tuple[Author, ...] = ()
    rollup_setting: RollupSetting = RollupSetting.UNSET
    queue_status: QueueStatus = Field(default_factory=QueueUnknown)

    model_config = {"frozen": True}


class WaitingStatus(BaseModel):
    kind: Literal["waiting"] = "waiting"
    wait_reason: WaitReason

    model_config = {"frozen": True}


PrStatus = Annotated[
    SubscribedStatus | DraftStatus | ReviewStatus | ReadyStatus | QueuedStatus | WaitingStatus,
    Field(discriminator="kind"),
]

_CATEGORY_BY_KIND: dict[str, SortCategory] = {
    "subscribed": SortCategory.OTHER,
    "draft": SortCategory.DRAFT,
    "review": SortCategory.TODO_REVIEW,
    "ready": SortCategory.WORK_READY,
    "queued": SortCategory.QUEUE,
    "waiting": SortCategory.STALLED,
}


def category_for(status: PrStatus) -> SortCategory:
    return _CATEGORY_BY_KIND.get(status.kind, SortCategory.OTHER)
