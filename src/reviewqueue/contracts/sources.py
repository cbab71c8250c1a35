"""Snapshots produced by the auxiliary data sources.

Every snapshot here is the parsed result of one fetch. Values are immutable;
a refresh builds a new snapshot instead of updating an old one.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from enum import StrEnum
from typing import Annotated, Literal

from pydantic import BaseModel, Field, PrivateAttr

FCP_DURATION = timedelta(hours=24 * 10)


class BorsStatus(StrEnum):
    NONE = "none"
    APPROVED = "approved"
    PENDING = "pending"
    FAILURE = "failure"
    ERROR = "error"
    SUCCESS = "success"
    OTHER = "other"


class RollupSetting(StrEnum):
    NEVER = "never"
    ALWAYS = "always"
    IFFY = "iffy"
    UNSET = "unset"


class BorsRow(BaseModel):
    """One row of a bors queue page."""

    pr_number: int
    approver: str = ""
    status: BorsStatus = BorsStatus.NONE
    status_text: str = ""
    """Raw status cell, kept so ``OTHER`` statuses stay inspectable."""
    mergeable: bool = True
    rollup_setting: RollupSetting = RollupSetting.UNSET
    priority: int = 0
    title: str = ""
    position_in_queue: int
    """1-based; only comparable with rows from the same fetch."""

    model_config = {"frozen": True}

    @property
    def running(self) -> bool:
        return self.position_in_queue == 1


class BorsQueue(BaseModel):
    rows: tuple[BorsRow, ...] = ()

    model_config = {"frozen": True}

    _by_number: dict[int, BorsRow] = PrivateAttr(default_factory=dict)

    def model_post_init(self, __context: object) -> None:
        index: dict[int, BorsRow] = {}
        for row in self.rows:
            index.setdefault(row.pr_number, row)
        self._by_number = index

    def for_pr(self, pr_number: int) -> BorsRow | None:
        return self._by_number.get(pr_number)

    def __len__(self) -> int:
        return len(self.rows)


class Rollup(BaseModel):
    pr_number: int
    pr_link: str = ""
    status: BorsStatus = BorsStatus.NONE
    position_in_queue: int
    pr_numbers: tuple[int, ...] = ()

    model_config = {"frozen": True}

    @property
    def running(self) -> bool:
        return self.position_in_queue == 1

    def contains(self, pr_number: int) -> bool:
        return pr_number in self.pr_numbers


class RollupQueue(BaseModel):
    """Rollups ordered by queue position; index 0 runs next."""

    rollups: tuple[Rollup, ...] = ()

    model_config = {"frozen": True}


class CraterQueued(BaseModel):
    kind: Literal["queued"] = "queued"
    num_before: int

    model_config = {"frozen": True}


class CraterRunning(BaseModel):
    kind: Literal["running"] = "running"
    expected_end: datetime

    model_config = {"frozen": True}


class CraterGeneratingReport(BaseModel):
    kind: Literal["generating_report"] = "generating_report"

    model_config = {"frozen": True}


class CraterUnknown(BaseModel):
    """The PR is labelled as waiting on crater but crater does not list it."""

    kind: Literal["unknown"] = "unknown"

    model_config = {"frozen": True}


CraterStatus = Annotated[
    CraterQueued | CraterRunning | CraterGeneratingReport | CraterUnknown,
    Field(discriminator="kind"),
]


class CraterQueue(BaseModel):
    """Crater experiments keyed by PR number. Missing means not tracked (yet)."""

    entries: dict[int, CraterStatus] = Field(default_factory=dict)

    model_config = {"frozen": True}

    def for_pr(self, pr_number: int) -> CraterStatus | None:
        return self.entries.get(pr_number)


class FcpConcern(BaseModel):
    name: str
    raised_by: str

    model_config = {"frozen": True}


class FcpReview(BaseModel):
    reviewer: str
    approved: bool

    model_config = {"frozen": True}


class FcpStatus(BaseModel):
    """A final comment period that has started."""

    start: datetime
    disposition: str = ""
    concerns: tuple[FcpConcern, ...] = ()

    model_config = {"frozen": True}

    def ends_on(self) -> datetime:
        return self.start + FCP_DURATION


class FcpInfo(BaseModel):
    repository: str = ""
    disposition: str = ""
    start: datetime | None = None
    closed: bool = False
    reviews: tuple[FcpReview, ...] = ()
    concerns: tuple[FcpConcern, ...] = ()

    model_config = {"frozen": True}

    def status(self) -> FcpStatus | None:
        """The running FCP, or ``None`` while the proposal has not entered one."""
        if self.start is None:
            return None
        return FcpStatus(start=self.start, disposition=self.disposition, concerns=self.concerns)


class FcpSnapshot(BaseModel):
    entries: dict[int, FcpInfo] = Field(default_factory=dict)

    model_config = {"frozen": True}

    def for_issue(self, number: int) -> FcpInfo | None:
        return self.entries.get(number)
