"""Rollup detection on top of a bors queue snapshot."""

from __future__ import annotations

import logging
from typing import Protocol

from reviewqueue.contracts.exceptions import ProviderError
from reviewqueue.contracts.issue import PullDetail
from reviewqueue.contracts.repo import RepoRef
from reviewqueue.contracts.sources import BorsQueue, Rollup, RollupQueue

_LOG = logging.getLogger(__name__)

ROLLUP_TITLE_PREFIX = "Rollup of"


class PullFetcher(Protocol):
    async def get_pull(self, repo: RepoRef, number: int) -> PullDetail: ...


def parse_rollup_members(body: str) -> tuple[int, ...]:
    """Extract member PR numbers from a rollup description.

    Only ``- <repo>#<number> <description>`` lines count; anything else is
    free text and is ignored.
    """
    members: list[int] = []
    for line in body.splitlines():
        item = line.strip()
        if not item.startswith("- "):
            continue
        _, hash_sign, rest = item[2:].partition("#")
        if not hash_sign:
            continue
        number, space, _ = rest.partition(" ")
        if not space or not (number.isascii() and number.isdigit()):
            continue
        members.append(int(number))
    return tuple(members)


async def find_rollups(github: PullFetcher, repo: RepoRef, queue: BorsQueue) -> RollupQueue:
    """Build the rollup queue for ``repo`` in bors queue order.

    A rollup whose description cannot be fetched or is empty is left out;
    the others are still reported.
    """
    rollups: list[Rollup] = []
    for row in queue.rows:
        if not row.title.startswith(ROLLUP_TITLE_PREFIX):
            continue

        try:
            pull = await github.get_pull(repo, row.pr_number)
        except ProviderError as exc:
            _LOG.error("Could not fetch rollup %s#%d: %s", repo.full_name, row.pr_number, exc)
            continue

        if not pull.body:
            _LOG.error("Rollup %s#%d has no description", repo.full_name, row.pr_number)
            continue

        rollups.append(
            Rollup(
                pr_number=row.pr_number,
                pr_link=pull.html_url or f"https://github.com/{repo.full_name}/pull/{row.pr_number}",
                status=row.status,
                position_in_queue=row.position_in_queue,
                pr_numbers=parse_rollup_members(pull.body),
            )
        )
    return RollupQueue(rollups=tuple(rollups))
