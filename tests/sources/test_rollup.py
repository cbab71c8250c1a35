from __future__ import annotations

import pytest

from reviewqueue.contracts.exceptions import ProviderError
from reviewqueue.contracts.sources import BorsQueue, BorsRow, BorsStatus
from reviewqueue.sources.rollup import find_rollups, parse_rollup_members
from tests.fakes.github import REPO, FakeGitHub, make_pull


def test_parse_rollup_members_skips_malformed_lines() -> None:
    body = "- repo#12 foo\nnot a list item\n- repo#bad desc"

    assert parse_rollup_members(body) == (12,)


def test_parse_rollup_members_reads_a_typical_description() -> None:
    body = (
        "Successful merges:\n\n"
        " - rust-lang/rust#10 (Fix the thing)\n"
        " - #11 (Tidy up)\n"
        " - rust-lang/rust#12\n"
        "\nFailed merges:\n\n"
        "r? @ghost\n"
    )

    assert parse_rollup_members(body) == (10, 11)


def _queue() -> BorsQueue:
    return BorsQueue(
        rows=(
            BorsRow(pr_number=1, status=BorsStatus.PENDING, title="Improve docs", position_in_queue=1),
            BorsRow(pr_number=2, status=BorsStatus.APPROVED, title="Rollup of 2 pull requests", position_in_queue=2),
            BorsRow(pr_number=3, status=BorsStatus.APPROVED, title="Rollup of 3 pull requests", position_in_queue=3),
            BorsRow(pr_number=4, status=BorsStatus.APPROVED, title="Rollup of 5 pull requests", position_in_queue=4),
        )
    )


@pytest.mark.asyncio
async def test_find_rollups_in_queue_order() -> None:
    github = FakeGitHub(
        pulls={
            (REPO, 2): make_pull(2, body="- rust-lang/rust#10 a\n- rust-lang/rust#11 b"),
            (REPO, 3): make_pull(3, body="- rust-lang/rust#20 c"),
            (REPO, 4): make_pull(4, body=""),
        }
    )

    queue = await find_rollups(github, REPO, _queue())

    assert [rollup.pr_number for rollup in queue.rollups] == [2, 3]
    first = queue.rollups[0]
    assert first.pr_numbers == (10, 11)
    assert first.position_in_queue == 2
    assert first.status is BorsStatus.APPROVED
    assert first.pr_link == "https://github.com/rust-lang/rust/pull/2"
    assert github.pull_calls == [(REPO, 2), (REPO, 3), (REPO, 4)]


@pytest.mark.asyncio
async def test_find_rollups_skips_rollups_that_cannot_be_fetched() -> None:
    github = FakeGitHub(
        pulls={(REPO, 3): make_pull(3, body="- rust-lang/rust#20 c")},
        pull_errors={(REPO, 2): ProviderError("boom", status_code=502)},
    )

    queue = await find_rollups(github, REPO, _queue())

    assert [rollup.pr_number for rollup in queue.rollups] == [3]
