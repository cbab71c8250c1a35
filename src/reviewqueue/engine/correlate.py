"""Status resolution: turns one issue plus the source snapshots into a ``Pr``.

Everything here is a pure function of its arguments. Lookup misses and
unmodeled label combinations resolve to explicit unknown variants and are
logged at error level; nothing raises.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from reviewqueue.contracts.issue import DiscoveryKind, IssueSnapshot, MergeableState, PullDetail
from reviewqueue.contracts.pr import Pr
from reviewqueue.contracts.sources import (
    BorsQueue,
    BorsRow,
    BorsStatus,
    CraterQueue,
    CraterUnknown,
    FcpSnapshot,
    RollupQueue,
    RollupSetting,
)
from reviewqueue.contracts.status import (
    Blocked,
    CiStatus,
    DraftStatus,
    InNextRollup,
    InQueue,
    InRollup,
    InRunningRollup,
    PrStatus,
    QueuedStatus,
    QueueRunning,
    QueueStatus,
    QueueUnknown,
    ReadyStatus,
    ReviewStatus,
    SubscribedStatus,
    UnknownWait,
    WaitingOnAuthor,
    WaitingOnCrater,
    WaitingOnFcp,
    WaitingOnReview,
    WaitingStatus,
    WaitReason,
)

_LOG = logging.getLogger(__name__)

LABEL_WAITING_ON_REVIEW = "S-waiting-on-review"
LABEL_WAITING_ON_AUTHOR = "S-waiting-on-author"
LABEL_WAITING_ON_BORS = "S-waiting-on-bors"
LABEL_BLOCKED = "S-blocked"
LABEL_FINAL_COMMENT_PERIOD = "S-final-comment-period"
LABEL_WAITING_ON_CONCERNS = "S-waiting-on-concerns"
LABEL_WAITING_ON_CRATER = "S-waiting-on-crater"

_QUEUED_BORS_STATUSES = frozenset({BorsStatus.APPROVED, BorsStatus.PENDING})
_LIVE_ROLLUP_STATUSES = frozenset({BorsStatus.PENDING, BorsStatus.SUCCESS, BorsStatus.APPROVED})

_CI_BY_BORS_STATUS: dict[BorsStatus, CiStatus] = {
    BorsStatus.APPROVED: CiStatus.GOOD,
    BorsStatus.SUCCESS: CiStatus.GOOD,
    BorsStatus.ERROR: CiStatus.BAD,
    BorsStatus.FAILURE: CiStatus.BAD,
    BorsStatus.PENDING: CiStatus.RUNNING,
    BorsStatus.NONE: CiStatus.UNKNOWN,
}

_CI_BY_MERGEABLE_STATE: dict[MergeableState, CiStatus] = {
    MergeableState.BEHIND: CiStatus.CONFLICTED,
    MergeableState.DIRTY: CiStatus.CONFLICTED,
    MergeableState.BLOCKED: CiStatus.UNKNOWN,
    MergeableState.CLEAN: CiStatus.GOOD,
    MergeableState.DRAFT: CiStatus.DRAFT,
    MergeableState.HAS_HOOKS: CiStatus.GOOD,
    MergeableState.UNKNOWN: CiStatus.UNKNOWN,
    MergeableState.UNSTABLE: CiStatus.GOOD,
}


@dataclass(frozen=True)
class SourceSnapshots:
    """The auxiliary snapshots one issue is correlated against."""

    bors: BorsQueue = field(default_factory=BorsQueue)
    rollups: RollupQueue = field(default_factory=RollupQueue)
    crater: CraterQueue = field(default_factory=CraterQueue)
    fcp: FcpSnapshot = field(default_factory=FcpSnapshot)


def resolve_queue_status(pr_number: int, bors: BorsQueue, rollups: RollupQueue) -> QueueStatus:
    row = bors.for_pr(pr_number)
    if row is None:
        return QueueUnknown()
    if row.running:
        return QueueRunning()

    # Indexes count every rollup in the queue, eligible or not.
    for index, rollup in enumerate(rollups.rollups):
        if rollup.status not in _LIVE_ROLLUP_STATUSES or not rollup.contains(pr_number):
            continue
        membership = {
            "pr_number": rollup.pr_number,
            "pr_link": rollup.pr_link,
            "rollup_size": len(rollup.pr_numbers),
            "position": rollup.position_in_queue,
        }
        if rollup.running:
            return InRunningRollup(**membership)
        if index == 0:
            return InNextRollup(**membership)
        return InRollup(nth_rollup=index, **membership)

    return InQueue(position=row.position_in_queue)


def resolve_wait_reason(issue: IssueSnapshot, snapshots: SourceSnapshots) -> WaitReason:
    if issue.has_label(LABEL_WAITING_ON_AUTHOR):
        return WaitingOnAuthor()
    if issue.has_label(LABEL_BLOCKED):
        return Blocked()
    if issue.has_label(LABEL_WAITING_ON_REVIEW):
        return WaitingOnReview()

    if issue.has_label(LABEL_FINAL_COMMENT_PERIOD) or issue.has_label(LABEL_WAITING_ON_CONCERNS):
        info = snapshots.fcp.for_issue(issue.number)
        status = info.status() if info is not None else None
        if status is None:
            _LOG.error(
                "%s#%d is labelled for FCP but rfcbot reports no running FCP",
                issue.repo.full_name,
                issue.number,
            )
        return WaitingOnFcp(fcp=status)

    if issue.has_label(LABEL_WAITING_ON_CRATER):
        crater = snapshots.crater.for_pr(issue.number)
        return WaitingOnCrater(crater=crater if crater is not None else CraterUnknown())

    _LOG.error(
        "%s#%d has no recognised wait label (labels: %s)",
        issue.repo.full_name,
        issue.number,
        ", ".join(sorted(issue.labels)) or "none",
    )
    return UnknownWait()


def resolve_status(
    issue: IssueSnapshot,
    pull: PullDetail | None,
    *,
    username: str,
    discovery: DiscoveryKind,
    snapshots: SourceSnapshots,
    impersonating: bool = False,
) -> PrStatus:
    """Resolve the triage status of one pull request; the first matching rule wins."""
    if discovery is DiscoveryKind.SUBSCRIBED and not impersonating:
        return SubscribedStatus()

    if pull is not None and pull.draft:
        return DraftStatus()

    if issue.is_assigned_to(username) and issue.has_label(LABEL_WAITING_ON_REVIEW):
        wanted = username.casefold()
        return ReviewStatus(
            other_reviewers=tuple(author for author in issue.assignees if author.name.casefold() != wanted)
        )

    if issue.is_authored_by(username) and issue.has_label(LABEL_WAITING_ON_AUTHOR):
        return ReadyStatus()

    row = snapshots.bors.for_pr(issue.number)
    if issue.has_label(LABEL_WAITING_ON_BORS) or (row is not None and row.status in _QUEUED_BORS_STATUSES):
        if row is None:
            _LOG.warning("%s#%d waits on bors but is not in its queue", issue.repo.full_name, issue.number)
        return QueuedStatus(
            approvers=tuple(issue.assignees),
            rollup_setting=row.rollup_setting if row is not None else RollupSetting.UNSET,
            queue_status=resolve_queue_status(issue.number, snapshots.bors, snapshots.rollups),
        )

    return WaitingStatus(wait_reason=resolve_wait_reason(issue, snapshots))


def resolve_ci_status(pull: PullDetail | None, row: BorsRow | None) -> CiStatus:
    """Merge health, independent of the triage status."""
    if pull is None:
        return CiStatus.UNKNOWN
    if pull.draft:
        return CiStatus.DRAFT
    if pull.mergeable is not None and pull.mergeable_state in {MergeableState.BEHIND, MergeableState.DIRTY}:
        return CiStatus.CONFLICTED

    if row is not None and row.status in _CI_BY_BORS_STATUS:
        return _CI_BY_BORS_STATUS[row.status]

    # GitHub computes mergeability lazily; no answer yet means still running.
    if pull.mergeable is None:
        return CiStatus.RUNNING
    if pull.mergeable_state is None:
        return CiStatus.GOOD if pull.mergeable else CiStatus.UNKNOWN
    return _CI_BY_MERGEABLE_STATE.get(pull.mergeable_state, CiStatus.UNKNOWN)


def resolve_pr(
    issue: IssueSnapshot,
    pull: PullDetail | None,
    *,
    username: str,
    discovery: DiscoveryKind,
    snapshots: SourceSnapshots,
    impersonating: bool = False,
) -> Pr:
    status = resolve_status(
        issue,
        pull,
        username=username,
        discovery=discovery,
        snapshots=snapshots,
        impersonating=impersonating,
    )
    if isinstance(status, SubscribedStatus):
        ci_status = CiStatus.UNKNOWN
    else:
        ci_status = resolve_ci_status(pull, snapshots.bors.for_pr(issue.number))

    return Pr(
        repo=issue.repo,
        number=issue.number,
        title=issue.title,
        description=issue.body,
        link=issue.html_url,
        author=issue.author,
        reviewers=tuple(issue.assignees),
        created=issue.created_at,
        status=status,
        ci_status=ci_status,
    )
