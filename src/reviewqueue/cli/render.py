"""Rich rendering of triage buckets."""

from __future__ import annotations

from datetime import UTC, datetime

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from reviewqueue.contracts.pr import BackendStatus, Pr, ScanResult
from reviewqueue.contracts.status import CiStatus, QueuedStatus, ReviewStatus, WaitingStatus
from reviewqueue.presentation import CI_LABELS, Bucket, RollupGroup, bucket_prs, ordinal, queue_status_label
from reviewqueue.presentation import rollup_setting_label, wait_reason_label

_CI_STYLES: dict[CiStatus, str] = {
    CiStatus.CONFLICTED: "red",
    CiStatus.GOOD: "green",
    CiStatus.RUNNING: "yellow",
    CiStatus.BAD: "red",
    CiStatus.UNKNOWN: "dim",
    CiStatus.DRAFT: "dim",
}


def status_detail(pr: Pr, *, now: datetime) -> str:
    status = pr.status
    if isinstance(status, WaitingStatus):
        return escape(wait_reason_label(status.wait_reason, now=now))
    if isinstance(status, QueuedStatus):
        parts = [queue_status_label(status.queue_status), rollup_setting_label(status.rollup_setting)]
        if status.approvers:
            parts.append("r=" + ",".join(approver.name for approver in status.approvers))
        return " ".join(part for part in parts if part)
    if isinstance(status, ReviewStatus) and status.other_reviewers:
        return "with " + ", ".join(reviewer.name for reviewer in status.other_reviewers)
    return ""


def _pr_row(pr: Pr, *, now: datetime, indent: str = "") -> tuple[str, str, str, str, str]:
    ci_label = CI_LABELS[pr.ci_status]
    return (
        f"{indent}[link={pr.link}]{pr.repo.full_name}#{pr.number}[/link]",
        escape(pr.title),
        escape(pr.author.name),
        f"[{_CI_STYLES[pr.ci_status]}]{ci_label}[/]",
        status_detail(pr, now=now),
    )


def bucket_table(bucket: Bucket, *, now: datetime) -> Table:
    table = Table(title=f"{bucket.title} ({len(bucket)})", title_justify="left", expand=True)
    table.add_column("PR", no_wrap=True)
    table.add_column("Title", ratio=1)
    table.add_column("Author", no_wrap=True)
    table.add_column("CI", no_wrap=True)
    table.add_column("Status")

    for entry in bucket.entries:
        if isinstance(entry, RollupGroup):
            state = "running" if entry.running else f"{ordinal(entry.position)} in queue"
            table.add_row(
                f"[link={entry.pr_link}]rollup #{entry.pr_number}[/link]",
                f"{len(entry.members)} pull requests",
                "",
                "",
                state,
                style="bold",
            )
            for member in entry.members:
                table.add_row(*_pr_row(member, now=now, indent="  "))
            continue
        table.add_row(*_pr_row(entry, now=now))
    return table


def render_result(
    console: Console,
    result: ScanResult,
    *,
    status: BackendStatus | None = None,
    now: datetime | None = None,
) -> None:
    now = now or datetime.now(UTC)
    console.print(f"reviewqueue - {result.username} ({len(result.prs)} open)")
    if status is not None and status.stale:
        console.print(f"[yellow]stale:[/] last refresh failed: {status.last_error}")
    for bucket in bucket_prs(result.prs):
        if len(bucket) == 0:
            continue
        console.print(bucket_table(bucket, now=now))


__all__ = ["bucket_table", "render_result", "status_detail"]
