from __future__ import annotations

from datetime import UTC, datetime

import httpx
import pytest

from reviewqueue.contracts.exceptions import SourceError
from reviewqueue.contracts.sources import CraterGeneratingReport, CraterQueued, CraterRunning
from reviewqueue.sources.crater import fetch_crater_queue, parse_crater_queue

NOW = datetime(2024, 5, 1, 12, 0, tzinfo=UTC)


def _row(name: str, status: str) -> str:
    cells = [name, "stable", "beta", "check", "top-100", status]
    return "<tr>" + "".join(f"<td>{cell}</td>" for cell in cells) + "</tr>"


def _page(*rows: str) -> str:
    header = "<tr>" + "".join(f"<th>{cell}</th>" for cell in ("Name", "Start", "End", "Mode", "Crates", "Status")) + "</tr>"
    return f"<html><body><table class='list'>{header}{''.join(rows)}</table></body></html>"


def test_parse_crater_queue_maps_statuses() -> None:
    html = _page(
        _row("pr-100", "Running (35%)"),
        _row("pr-101", "Generating report"),
        _row("pr-102", "Queued"),
        _row("pr-103", "Queued"),
    )

    queue = parse_crater_queue(html, now=NOW)

    assert queue.for_pr(100) == CraterRunning(expected_end=NOW)
    assert queue.for_pr(101) == CraterGeneratingReport()
    assert queue.for_pr(102) == CraterQueued(num_before=1)
    assert queue.for_pr(103) == CraterQueued(num_before=2)
    assert queue.for_pr(104) is None


def test_parse_crater_queue_skips_unrecognised_rows() -> None:
    html = _page(
        _row("beta-1.80", "Queued"),
        _row("pr-200", "Needs manual attention"),
        "<tr><td>pr-201</td></tr>",
        _row("pr-202", "Queued"),
    )

    queue = parse_crater_queue(html, now=NOW)

    assert set(queue.entries) == {202}
    assert queue.for_pr(202) == CraterQueued(num_before=1)


@pytest.mark.asyncio
async def test_fetch_crater_queue_maps_http_errors() -> None:
    transport = httpx.MockTransport(lambda request: httpx.Response(503))

    async with httpx.AsyncClient(transport=transport) as http:
        with pytest.raises(SourceError) as excinfo:
            await fetch_crater_queue(http, "https://crater.example/")

    assert excinfo.value.source == "crater"


@pytest.mark.asyncio
async def test_fetch_crater_queue_over_http() -> None:
    transport = httpx.MockTransport(lambda request: httpx.Response(200, text=_page(_row("pr-7", "Queued"))))

    async with httpx.AsyncClient(transport=transport) as http:
        queue = await fetch_crater_queue(http, "https://crater.example/")

    assert queue.for_pr(7) == CraterQueued(num_before=1)
