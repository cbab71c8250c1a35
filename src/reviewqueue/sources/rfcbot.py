"""rfcbot final-comment-period API client."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import Any

import httpx
from pydantic import BaseModel, ValidationError

from reviewqueue.contracts.exceptions import SourceError, SourceParseError
from reviewqueue.contracts.sources import FcpConcern, FcpInfo, FcpReview, FcpSnapshot

_LOG = logging.getLogger(__name__)

_SOURCE = "rfcbot"


class _User(BaseModel):
    id: int
    login: str


class _Proposal(BaseModel):
    disposition: str
    fcp_start: datetime | None = None
    fcp_closed: bool = False


class _Issue(BaseModel):
    number: int
    repository: str = ""


class _FcpEntry(BaseModel):
    fcp: _Proposal
    reviews: list[tuple[_User, bool]] = []
    concerns: list[tuple[str, Any, _User]] = []
    issue: _Issue


def _as_utc(value: datetime | None) -> datetime | None:
    # rfcbot reports civil times without an offset; they are UTC.
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=UTC)


def _to_info(entry: _FcpEntry) -> FcpInfo:
    return FcpInfo(
        repository=entry.issue.repository,
        disposition=entry.fcp.disposition,
        start=_as_utc(entry.fcp.fcp_start),
        closed=entry.fcp.fcp_closed,
        reviews=tuple(FcpReview(reviewer=user.login, approved=ticked) for user, ticked in entry.reviews),
        concerns=tuple(FcpConcern(name=name, raised_by=user.login) for name, _comment, user in entry.concerns),
    )


def parse_fcp_snapshot(payload: Any) -> FcpSnapshot:
    """Build a snapshot from the decoded ``/api/all`` payload, skipping malformed entries."""
    if not isinstance(payload, list):
        raise SourceParseError("rfcbot payload is not a list", source=_SOURCE)

    entries: dict[int, FcpInfo] = {}
    for index, raw in enumerate(payload):
        try:
            entry = _FcpEntry.model_validate(raw)
        except ValidationError as exc:
            _LOG.error("Skipping malformed rfcbot entry %d (%d validation errors)", index, exc.error_count())
            continue
        entries[entry.issue.number] = _to_info(entry)
    return FcpSnapshot(entries=entries)


async def fetch_fcp_snapshot(http: httpx.AsyncClient, url: str) -> FcpSnapshot:
    _LOG.debug("Requesting rfcbot %s", url)
    try:
        response = await http.get(url)
        response.raise_for_status()
        payload = response.json()
    except httpx.HTTPStatusError as exc:
        raise SourceError(f"rfcbot returned HTTP {exc.response.status_code}", source=_SOURCE) from exc
    except httpx.HTTPError as exc:
        raise SourceError(f"rfcbot request failed: {exc}", source=_SOURCE) from exc
    except ValueError as exc:
        raise SourceParseError("rfcbot returned invalid JSON", source=_SOURCE) from exc
    return parse_fcp_snapshot(payload)
