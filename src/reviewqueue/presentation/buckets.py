"""Triage buckets and display labels for resolved pull requests.

``bucket_prs`` groups a scan's unordered results into the dashboard's
sections, each sorted by its own key:

* most buckets: creation time, oldest first;
* ``Queued``: queue position, with every member of a rollup gathered into one
  :class:`RollupGroup` placed at the rollup's own position and ordered by
  creation time inside it; entries with no known position go last, oldest
  first.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

from reviewqueue.contracts.pr import Pr
from reviewqueue.contracts.sources import CraterGeneratingReport, CraterQueued, CraterRunning, RollupSetting
from reviewqueue.contracts.status import (
    Blocked,
    CiStatus,
    InNextRollup,
    InQueue,
    InRollup,
    InRunningRollup,
    QueuedStatus,
    QueueRunning,
    QueueStatus,
    SortCategory,
    UnknownWait,
    WaitingOnAuthor,
    WaitingOnCrater,
    WaitingOnFcp,
    WaitingOnReview,
    WaitReason,
)

BUCKET_TITLES: dict[SortCategory, str] = {
    SortCategory.WORK_READY: "Ready to work on",
    SortCategory.TODO_REVIEW: "Waiting for me to review",
    SortCategory.STALLED: "Waiting",
    SortCategory.QUEUE: "Queued",
    SortCategory.DRAFT: "Drafts",
    SortCategory.OTHER: "Subscribed",
}

CI_LABELS: dict[CiStatus, str] = {
    CiStatus.CONFLICTED: "conflicted",
    CiStatus.GOOD: "passing",
    CiStatus.RUNNING: "in progress",
    CiStatus.BAD: "failing",
    CiStatus.UNKNOWN: "unknown",
    CiStatus.DRAFT: "draft",
}


@dataclass(frozen=True)
class RollupGroup:
    """Queued pull requests that will merge together in one rollup."""

    pr_number: int
    pr_link: str
    position: int
    running: bool
    members: tuple[Pr, ...]


QueueEntry = Pr | RollupGroup


@dataclass(frozen=True)
class Bucket:
    category: SortCategory
    title: str
    entries: tuple[QueueEntry, ...]

    def __len__(self) -> int:
        return sum(len(entry.members) if isinstance(entry, RollupGroup) else 1 for entry in self.entries)


def _by_created(prs: Iterable[Pr]) -> tuple[Pr, ...]:
    return tuple(sorted(prs, key=lambda pr: (pr.created, pr.repo.full_name, pr.number)))


def _queue_position(status: QueueStatus) -> int | None:
    if isinstance(status, QueueRunning):
        return 1
    if isinstance(status, InQueue):
        return status.position
    return None


def _queued_entries(prs: list[Pr]) -> tuple[QueueEntry, ...]:
    rollups: dict[int, list[Pr]] = {}
    rollup_heads: dict[int, InNextRollup | InRollup | InRunningRollup] = {}
    keyed: list[tuple[tuple[int, int, datetime], QueueEntry]] = []

    for pr in prs:
        assert isinstance(pr.status, QueuedStatus)
        queue_status = pr.status.queue_status
        if isinstance(queue_status, InNextRollup | InRollup | InRunningRollup):
            rollups.setdefault(queue_status.pr_number, []).append(pr)
            rollup_heads.setdefault(queue_status.pr_number, queue_status)
            continue

        position = _queue_position(queue_status)
        if position is None:
            keyed.append(((1, 0, pr.created), pr))
        else:
            keyed.append(((0, position, pr.created), pr))

    for number, members in rollups.items():
        head = rollup_heads[number]
        group = RollupGroup(
            pr_number=number,
            pr_link=head.pr_link,
            position=head.position,
            running=isinstance(head, InRunningRollup),
            members=_by_created(members),
        )
        keyed.append(((0, head.position, group.members[0].created), group))

    keyed.sort(key=lambda pair: pair[0])
    return tuple(entry for _, entry in keyed)


def bucket_prs(prs: Iterable[Pr]) -> list[Bucket]:
    """Split ``prs`` into one bucket per category, in display order; empty buckets included."""
    grouped: dict[SortCategory, list[Pr]] = {category: [] for category in SortCategory}
    for pr in prs:
        grouped[pr.sort_category()].append(pr)

    buckets: list[Bucket] = []
    for category in SortCategory:
        members = grouped[category]
        if category is SortCategory.QUEUE:
            entries = _queued_entries(members)
        else:
            entries = _by_created(members)
        buckets.append(Bucket(category=category, title=BUCKET_TITLES[category], entries=entries))
    return buckets


# ------------------------------------------------------------------
# Labels
# ------------------------------------------------------------------


def ordinal(number: int) -> str:
    if 10 <= number % 100 <= 20:
        suffix = "th"
    else:
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(number % 10, "th")
    return f"{number}{suffix}"


def format_remaining(delta: timedelta) -> str:
    """Round a duration to whole hours, e.g. ``1w 2d 3h``; past durations read ``0h``."""
    hours = max(0, round(delta.total_seconds() / 3600))
    weeks, hours = divmod(hours, 24 * 7)
    days, hours = divmod(hours, 24)
    parts = [f"{value}{unit}" for value, unit in ((weeks, "w"), (days, "d"), (hours, "h")) if value]
    return " ".join(parts) or "0h"


def queue_status_label(status: QueueStatus) -> str:
    if isinstance(status, InQueue):
        return f"{ordinal(status.position)} in queue"
    if isinstance(status, QueueRunning):
        return "running"
    if isinstance(status, InRunningRollup):
        return "in running rollup"
    if isinstance(status, InNextRollup):
        return f"rollup {ordinal(status.position)} in queue"
    if isinstance(status, InRollup):
        return f"in {ordinal(status.nth_rollup + 1)} rollup"
    return ""


def rollup_setting_label(setting: RollupSetting) -> str:
    if setting in {RollupSetting.NEVER, RollupSetting.IFFY}:
        return f"rollup={setting.value}"
    return ""


def wait_reason_label(reason: WaitReason, *, now: datetime | None = None) -> str:
    now = now or datetime.now(UTC)
    if isinstance(reason, WaitingOnAuthor):
        return "Waiting for author"
    if isinstance(reason, WaitingOnReview):
        return "Waiting for review"
    if isinstance(reason, Blocked):
        return "blocked"
    if isinstance(reason, WaitingOnFcp):
        if reason.fcp is None:
            return "in FCP, start unknown"
        label = f"FCP ends in {format_remaining(reason.fcp.ends_on() - now)}"
        if reason.fcp.concerns:
            label += f" ({len(reason.fcp.concerns)} concerns)"
        return label
    if isinstance(reason, WaitingOnCrater):
        crater = reason.crater
        if isinstance(crater, CraterQueued):
            return f"in crater queue ({crater.num_before} queued before this)"
        if isinstance(crater, CraterRunning):
            return f"crater experiment done in {format_remaining(crater.expected_end - now)}"
        if isinstance(crater, CraterGeneratingReport):
            return "generating crater report"
        return "running crater, context unknown"
    assert isinstance(reason, UnknownWait)
    return ""
