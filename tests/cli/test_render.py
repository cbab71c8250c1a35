from __future__ import annotations

from datetime import UTC, datetime, timedelta

from rich.console import Console

from reviewqueue.cli.render import render_result, status_detail
from reviewqueue.contracts.issue import Author
from reviewqueue.contracts.pr import BackendStatus, Pr, ScanResult
from reviewqueue.contracts.repo import RepoRef
from reviewqueue.contracts.sources import RollupSetting
from reviewqueue.contracts.status import (
    CiStatus,
    InNextRollup,
    InQueue,
    PrStatus,
    QueuedStatus,
    ReadyStatus,
    ReviewStatus,
    WaitingOnAuthor,
    WaitingStatus,
)

REPO = RepoRef(owner="rust-lang", name="rust")
NOW = datetime(2024, 6, 1, tzinfo=UTC)


def _pr(number: int, status: PrStatus, *, title: str = "Fix", ci: CiStatus = CiStatus.GOOD) -> Pr:
    return Pr(
        repo=REPO,
        number=number,
        title=title,
        link=f"https://github.com/rust-lang/rust/pull/{number}",
        author=Author(name="alice", id=1),
        created=NOW - timedelta(days=number),
        status=status,
        ci_status=ci,
    )


def test_status_detail_for_queued_pr() -> None:
    status = QueuedStatus(
        approvers=(Author(name="bob", id=2),),
        rollup_setting=RollupSetting.NEVER,
        queue_status=InQueue(position=3),
    )

    assert status_detail(_pr(1, status), now=NOW) == "3rd in queue rollup=never r=bob"


def test_status_detail_for_review_and_wait() -> None:
    review = ReviewStatus(other_reviewers=(Author(name="carol", id=3),))

    assert status_detail(_pr(1, review), now=NOW) == "with carol"
    assert status_detail(_pr(2, WaitingStatus(wait_reason=WaitingOnAuthor())), now=NOW) == "Waiting for author"
    assert status_detail(_pr(3, ReadyStatus()), now=NOW) == ""


def test_render_result_prints_non_empty_buckets() -> None:
    membership = {"pr_number": 90, "pr_link": "https://github.com/rust-lang/rust/pull/90", "rollup_size": 2}
    result = ScanResult(
        username="alice",
        prs=(
            _pr(1, ReadyStatus(), title="Handle [brackets] in titles", ci=CiStatus.BAD),
            _pr(2, QueuedStatus(queue_status=InNextRollup(position=2, **membership))),
            _pr(3, QueuedStatus(queue_status=InNextRollup(position=2, **membership))),
        ),
        completed_at=NOW,
    )
    console = Console(record=True, width=200)

    render_result(console, result, status=BackendStatus(state="idle", last_error="github down"), now=NOW)

    output = console.export_text()
    assert "reviewqueue - alice (3 open)" in output
    assert "stale: last refresh failed: github down" in output
    assert "Ready to work on (1)" in output
    assert "Queued (2)" in output
    assert "rollup #90" in output
    assert "Handle [brackets] in titles" in output
    assert "failing" in output
    assert "Drafts" not in output
