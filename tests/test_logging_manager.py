"""Tests for the install attempt log."""

from datetime import datetime

from bootup_checks.logging_manager import InstallAttemptLog
from bootup_checks.models import InstallAttemptRecord


def _record(name, success=True):
    return InstallAttemptRecord(
        name=name, command=["pip", "install", name], started_at=datetime.now(), success=success
    )


def test_read_missing_log(tmp_path):
    assert InstallAttemptLog(tmp_path / "none.jsonl").read() == []


def test_record_creates_parent_dirs_and_appends(tmp_path):
    log = InstallAttemptLog(tmp_path / "nested" / "logs" / "attempts.jsonl")
    log.record(_record("a"))
    log.record(_record("b", success=False))
    entries = log.read()
    assert [e.name for e in entries] == ["a", "b"]
    assert entries[1].success is False


def test_corrupt_lines_are_skipped(tmp_path):
    path = tmp_path / "attempts.jsonl"
    log = InstallAttemptLog(path)
    log.record(_record("a"))
    with open(path, "a", encoding="utf-8") as f:
        f.write("not json\n\n")
    log.record(_record("b"))
    assert [e.name for e in log.read()] == ["a", "b"]


def test_write_failure_is_logged_not_raised(tmp_path, caplog):
    blocker = tmp_path / "file"
    blocker.write_text("x")
    log = InstallAttemptLog(blocker / "attempts.jsonl")
    log.record(_record("a"))
    assert "Failed to update install log" in caplog.text
