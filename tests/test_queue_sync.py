"""Tests for queue reconciliation through mpc."""

from __future__ import annotations

from dataclasses import dataclass, field
import subprocess
from typing import Optional

import pytest

from mpd_fzf.errors import ExternalToolFailure
from mpd_fzf.queue_sync import (
    MpcClient,
    QueueEntry,
    QueueReconciler,
    ReconcileResult,
    parse_queue,
)


@dataclass
class FakeMpc:
    """Records mpc invocations and answers ``mpc playlist`` from a fixed queue."""

    queue: list[str] = field(default_factory=list)
    fail_on: Optional[str] = None
    calls: list[tuple[list[str], Optional[str]]] = field(default_factory=list)

    def __call__(self, argv, *, input=None, capture_output, check):
        assert capture_output is True
        assert check is False
        stdin = None if input is None else input.decode("utf-8", "surrogateescape")
        self.calls.append((list(argv), stdin))
        command = argv[1]
        if command == self.fail_on:
            stderr = b"error: connection refused\n"
            return subprocess.CompletedProcess(argv, 1, b"", stderr)
        stdout = b""
        if command == "playlist":
            stdout = "".join(f"{line}\n" for line in self.queue).encode(
                "utf-8", "surrogateescape"
            )
        return subprocess.CompletedProcess(argv, 0, stdout, b"")

    def commands(self) -> list[str]:
        return [argv[1] for argv, _stdin in self.calls]

    def stdin_for(self, command: str) -> Optional[str]:
        for argv, stdin in self.calls:
            if argv[1] == command:
                return stdin
        raise AssertionError(f"{command} was not run")


def test_parse_queue_keeps_spaces_in_paths() -> None:
    output = "1 a.mp3\n2 dir with spaces/b c.mp3\n\n"
    assert parse_queue(output) == [
        QueueEntry(1, "a.mp3"),
        QueueEntry(2, "dir with spaces/b c.mp3"),
    ]


def test_parse_queue_skips_lines_without_path() -> None:
    assert parse_queue("7\n3 x.mp3\n") == [QueueEntry(3, "x.mp3")]


def test_parse_queue_rejects_bad_position() -> None:
    with pytest.raises(ExternalToolFailure, match="Unexpected queue line"):
        parse_queue("one a.mp3\n")


def test_client_queue_uses_position_format() -> None:
    fake = FakeMpc(queue=["1 a.mp3"])
    client = MpcClient(("mpc", "--host", "music"), runner=fake)
    assert client.queue() == [QueueEntry(1, "a.mp3")]
    assert fake.calls[0][0] == [
        "mpc",
        "--host",
        "music",
        "playlist",
        "-f",
        "%position% %file%",
    ]


def test_client_reports_failures_with_stderr() -> None:
    fake = FakeMpc(fail_on="insert")
    client = MpcClient(runner=fake)
    with pytest.raises(ExternalToolFailure, match="connection refused"):
        client.insert(["a.mp3"])


def test_client_missing_binary() -> None:
    def runner(argv, **_kwargs):
        raise FileNotFoundError(2, "No such file or directory", argv[0])

    with pytest.raises(ExternalToolFailure, match="Could not run mpc"):
        MpcClient(runner=runner).queue()


def test_reconcile_moves_queued_tracks() -> None:
    fake = FakeMpc(
        queue=[
            "1 intro.mp3",
            "2 other.mp3",
            "3 b.mp3",
            "4 other2.mp3",
            "5 other3.mp3",
            "6 other4.mp3",
            "7 a.mp3",
        ]
    )
    result = QueueReconciler(MpcClient(runner=fake)).reconcile(["a.mp3", "b.mp3"])
    assert fake.commands() == ["playlist", "del", "insert"]
    assert fake.stdin_for("del") == "3\n7\n"
    assert fake.stdin_for("insert") == "a.mp3\nb.mp3\n"
    assert result == ReconcileResult(removed=(3, 7), inserted=("a.mp3", "b.mp3"))


def test_reconcile_removes_every_duplicate() -> None:
    fake = FakeMpc(queue=["1 a.mp3", "2 b.mp3", "3 a.mp3"])
    QueueReconciler(MpcClient(runner=fake)).reconcile(["a.mp3"])
    assert fake.stdin_for("del") == "1\n3\n"


def test_reconcile_without_queued_matches_skips_delete() -> None:
    fake = FakeMpc(queue=["1 x.mp3"])
    result = QueueReconciler(MpcClient(runner=fake)).reconcile(["new.mp3"])
    assert fake.commands() == ["playlist", "insert"]
    assert result.removed == ()


def test_reconcile_drops_empty_paths() -> None:
    fake = FakeMpc()
    QueueReconciler(MpcClient(runner=fake)).reconcile(["", "a.mp3"])
    assert fake.stdin_for("insert") == "a.mp3\n"


def test_reconcile_stops_when_queue_query_fails() -> None:
    fake = FakeMpc(fail_on="playlist")
    with pytest.raises(ExternalToolFailure):
        QueueReconciler(MpcClient(runner=fake)).reconcile(["a.mp3"])
    assert fake.commands() == ["playlist"]


def test_reconcile_does_not_roll_back_after_failed_insert() -> None:
    fake = FakeMpc(queue=["1 a.mp3"], fail_on="insert")
    with pytest.raises(ExternalToolFailure):
        QueueReconciler(MpcClient(runner=fake)).reconcile(["a.mp3"])
    assert fake.commands() == ["playlist", "del", "insert"]


def test_undecodable_paths_match_queue_entries() -> None:
    path = "caf\udce9.mp3"
    fake = FakeMpc(queue=[f"4 {path}"])
    QueueReconciler(MpcClient(runner=fake)).reconcile([path])
    assert fake.stdin_for("del") == "4\n"
    assert fake.stdin_for("insert") == f"{path}\n"
