"""Crater experiment queue page client."""

from __future__ import annotations

import logging
from datetime import UTC, datetime

import httpx

from reviewqueue.contracts.sources import (
    CraterGeneratingReport,
    CraterQueue,
    CraterQueued,
    CraterRunning,
    CraterStatus,
)
from reviewqueue.sources._html import fetch_text, table_rows

_LOG = logging.getLogger(__name__)

_SOURCE = "crater"
_NAME, _STATUS = 0, 5


def parse_crater_queue(html: str, *, now: datetime | None = None) -> CraterQueue:
    """Parse the crater front page into statuses keyed by PR number.

    Queued experiments are numbered in page order, starting at 1. A running
    experiment's ``expected_end`` is the parse time; the page carries no
    estimate.
    """
    now = now or datetime.now(UTC)
    entries: dict[int, CraterStatus] = {}
    queued = 0

    for cells in table_rows(html, source=_SOURCE, table_class="list"):
        if len(cells) <= _STATUS:
            _LOG.error("crater row has %d cells, expected at least %d", len(cells), _STATUS + 1)
            continue

        name = cells[_NAME]
        if name == "Name":
            continue

        try:
            number = int(name.removeprefix("pr-"))
        except ValueError:
            _LOG.error("crater experiment %r is not named after a PR", name)
            continue

        status = cells[_STATUS]
        if status.startswith("Running"):
            entries[number] = CraterRunning(expected_end=now)
        elif status == "Generating report":
            entries[number] = CraterGeneratingReport()
        elif status == "Queued":
            queued += 1
            entries[number] = CraterQueued(num_before=queued)
        else:
            _LOG.error("crater experiment %s has unexpected status %r", name, status)

    return CraterQueue(entries=entries)


async def fetch_crater_queue(http: httpx.AsyncClient, url: str) -> CraterQueue:
    html = await fetch_text(http, url, source=_SOURCE)
    return parse_crater_queue(html)
