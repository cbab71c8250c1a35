"""Seen-issue ledger persistence.

For every user the ledger keeps a sequence number that grows by one per
recorded scan, and for every pull request the sequence number of the last
scan that reported it open. A pull request whose last-seen number trails the
user's sequence was closed or merged since; working that out is left to the
reader of the ledger.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, ValidationError

from reviewqueue.contracts.exceptions import LedgerError
from reviewqueue.contracts.pr import ScanResult


class UserLedger(BaseModel):
    sequence: int = 0
    last_seen: dict[str, int] = Field(default_factory=dict)
    """``owner/name#number`` -> sequence of the last scan that saw it open."""


class LedgerFile(BaseModel):
    users: dict[str, UserLedger] = Field(default_factory=dict)


def issue_key(full_name: str, number: int) -> str:
    return f"{full_name}#{number}"


class SeenLedger:
    """JSON-file backed ledger; loaded lazily, written after every record."""

    def __init__(self, path: Path) -> None:
        self._path = path
        self._data: LedgerFile | None = None

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> LedgerFile:
        if self._data is not None:
            return self._data
        if not self._path.exists():
            self._data = LedgerFile()
            return self._data
        try:
            payload: Any = json.loads(self._path.read_text(encoding="utf-8"))
            self._data = LedgerFile.model_validate(payload)
        except (OSError, json.JSONDecodeError, ValidationError) as exc:
            raise LedgerError(f"invalid seen ledger file: {self._path}") from exc
        return self._data

    def _persist(self, data: LedgerFile) -> None:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(data.model_dump_json(indent=2), encoding="utf-8")
        except OSError as exc:
            raise LedgerError(f"failed to persist seen ledger: {self._path}") from exc

    def sequence(self, username: str) -> int:
        user = self._load().users.get(username)
        return user.sequence if user is not None else 0

    def last_seen(self, username: str, full_name: str, number: int) -> int | None:
        user = self._load().users.get(username)
        if user is None:
            return None
        return user.last_seen.get(issue_key(full_name, number))

    def record(self, result: ScanResult) -> int:
        """Record one completed scan and return the user's new sequence number."""
        data = self._load()
        previous = data.users.get(result.username, UserLedger())
        sequence = previous.sequence + 1
        last_seen = dict(previous.last_seen)
        for full_name, number in result.open_numbers():
            last_seen[issue_key(full_name, number)] = sequence

        updated = data.model_copy(
            update={"users": {**data.users, result.username: UserLedger(sequence=sequence, last_seen=last_seen)}}
        )
        self._persist(updated)
        self._data = updated
        return sequence
