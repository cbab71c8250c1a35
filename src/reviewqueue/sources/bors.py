"""Bors merge-queue page client."""

from __future__ import annotations

import logging

import httpx

from reviewqueue.contracts.sources import BorsQueue, BorsRow, BorsStatus, RollupSetting
from reviewqueue.sources._html import fetch_text, table_rows

_LOG = logging.getLogger(__name__)

_SOURCE = "bors"

# Cell indexes within one queue row.
_NUMBER, _STATUS, _MERGEABLE, _TITLE, _APPROVER, _PRIORITY, _ROLLUP = 2, 3, 4, 5, 8, 9, 10

_STATUSES: dict[str, BorsStatus] = {
    "": BorsStatus.NONE,
    "approved": BorsStatus.APPROVED,
    "pending": BorsStatus.PENDING,
    "failure": BorsStatus.FAILURE,
    "error": BorsStatus.ERROR,
    "success": BorsStatus.SUCCESS,
}

_ROLLUP_SETTINGS: dict[str, RollupSetting] = {
    "": RollupSetting.UNSET,
    "never": RollupSetting.NEVER,
    "always": RollupSetting.ALWAYS,
    "iffy": RollupSetting.IFFY,
}


def _parse_row(cells: list[str], position: int) -> BorsRow | None:
    if len(cells) <= _ROLLUP:
        _LOG.error("bors row %d has %d cells, expected at least %d", position, len(cells), _ROLLUP + 1)
        return None

    try:
        number = int(cells[_NUMBER])
    except ValueError:
        _LOG.error("bors row %d: unparseable PR number %r", position, cells[_NUMBER])
        return None

    mergeable_text = cells[_MERGEABLE]
    if mergeable_text == "":
        _LOG.warning("bors row for #%d has an empty mergeable cell, assuming mergeable", number)
        mergeable = True
    elif mergeable_text in {"yes", "no"}:
        mergeable = mergeable_text == "yes"
    else:
        _LOG.error("bors row for #%d: unexpected mergeable value %r", number, mergeable_text)
        return None

    rollup_setting = _ROLLUP_SETTINGS.get(cells[_ROLLUP])
    if rollup_setting is None:
        _LOG.error("bors row for #%d: unexpected rollup value %r", number, cells[_ROLLUP])
        return None

    try:
        priority = int(cells[_PRIORITY])
    except ValueError:
        _LOG.error("bors row for #%d: unparseable priority %r", number, cells[_PRIORITY])
        return None

    status_text = cells[_STATUS]
    return BorsRow(
        pr_number=number,
        approver=cells[_APPROVER],
        status=_STATUSES.get(status_text, BorsStatus.OTHER),
        status_text=status_text,
        mergeable=mergeable,
        rollup_setting=rollup_setting,
        priority=priority,
        title=cells[_TITLE],
        position_in_queue=position,
    )


def parse_bors_queue(html: str) -> BorsQueue:
    """Parse a bors queue page.

    Positions count every body row, including rows skipped for bad data, so
    positions match what the page shows.
    """
    rows: list[BorsRow] = []
    for position, cells in enumerate(table_rows(html, source=_SOURCE, table_id="queue"), start=1):
        row = _parse_row(cells, position)
        if row is not None:
            rows.append(row)
    return BorsQueue(rows=tuple(rows))


async def fetch_bors_queue(http: httpx.AsyncClient, url: str) -> BorsQueue:
    html = await fetch_text(http, url, source=_SOURCE)
    queue = parse_bors_queue(html)
    _LOG.debug("Parsed %d bors rows from %s", len(queue), url)
    return queue
