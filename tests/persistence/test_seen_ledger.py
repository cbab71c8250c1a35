from __future__ import annotations

import json
from datetime import UTC, datetime
from pathlib import Path

import pytest

from reviewqueue.contracts.exceptions import LedgerError
from reviewqueue.contracts.issue import DiscoveryKind
from reviewqueue.contracts.pr import ScanResult
from reviewqueue.engine.correlate import SourceSnapshots, resolve_pr
from reviewqueue.persistence.seen import SeenLedger
from tests.fakes.github import make_issue, make_pull


def _result(username: str, *numbers: int) -> ScanResult:
    prs = tuple(
        resolve_pr(
            make_issue(number),
            make_pull(number),
            username=username,
            discovery=DiscoveryKind.AUTHORED,
            snapshots=SourceSnapshots(),
        )
        for number in numbers
    )
    return ScanResult(username=username, prs=prs, completed_at=datetime(2024, 1, 1, tzinfo=UTC))


def test_record_bumps_sequence_and_last_seen(tmp_path: Path) -> None:
    ledger = SeenLedger(tmp_path / "seen.json")

    assert ledger.sequence("alice") == 0
    assert ledger.record(_result("alice", 1, 2)) == 1
    assert ledger.record(_result("alice", 2)) == 2

    assert ledger.sequence("alice") == 2
    assert ledger.last_seen("alice", "rust-lang/rust", 1) == 1
    assert ledger.last_seen("alice", "rust-lang/rust", 2) == 2
    assert ledger.last_seen("alice", "rust-lang/rust", 3) is None
    assert ledger.last_seen("bob", "rust-lang/rust", 1) is None


def test_record_persists_between_instances(tmp_path: Path) -> None:
    path = tmp_path / "state" / "seen.json"
    SeenLedger(path).record(_result("alice", 7))

    reopened = SeenLedger(path)

    assert reopened.sequence("alice") == 1
    assert reopened.last_seen("alice", "rust-lang/rust", 7) == 1
    payload = json.loads(path.read_text(encoding="utf-8"))
    assert payload["users"]["alice"]["last_seen"] == {"rust-lang/rust#7": 1}


def test_users_have_separate_sequences(tmp_path: Path) -> None:
    ledger = SeenLedger(tmp_path / "seen.json")

    ledger.record(_result("alice", 1))
    ledger.record(_result("alice", 1))
    ledger.record(_result("bob", 1))

    assert ledger.sequence("alice") == 2
    assert ledger.sequence("bob") == 1


def test_corrupt_ledger_raises(tmp_path: Path) -> None:
    path = tmp_path / "seen.json"
    path.write_text("[not valid", encoding="utf-8")

    with pytest.raises(LedgerError, match="invalid seen ledger"):
        SeenLedger(path).sequence("alice")


def test_unwritable_ledger_raises(tmp_path: Path) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("", encoding="utf-8")

    with pytest.raises(LedgerError, match="failed to persist"):
        SeenLedger(blocker / "seen.json").record(_result("alice", 1))
