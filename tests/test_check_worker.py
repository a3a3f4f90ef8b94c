"""
Tests for the check worker — concurrency, isolation, limits and cancellation.
"""

import asyncio
import os
import subprocess
import sys
import threading
import time

import pytest

from conventlint.core.reporter import render_json
from conventlint.core.rule_loader import parse_rule_set
from conventlint.errors import FileReadError
from conventlint.workers import check_worker
from conventlint.workers.check_worker import CheckWorker, discover_files

GOOD_GO = "// PURPOSE: demo package\n// WHY: examples need one\npackage demo\n"
REPO_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))


@pytest.fixture
def workspace(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    return tmp_path


def _write(root, name, content=GOOD_GO):
    path = root / name
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    return path


def test_hundred_files_three_unsupported(workspace, rule_set):
    for i in range(97):
        _write(workspace, f"src/pkg{i:03d}.go")
    for i in range(3):
        _write(workspace, f"src/blob{i}.xyz", "binary-ish")

    report = asyncio.run(CheckWorker(rule_set, max_workers=4).run(["src"]))

    assert report.files_checked == 100
    assert [v.rule_id for v in report.violations] == ["UnsupportedFileType"] * 3
    assert report.ok


def test_error_among_supported_files_fails_run(workspace, rule_set):
    _write(workspace, "a.go")
    _write(workspace, "b.go", "package b\n")
    _write(workspace, "c.xyz", "?")

    report = asyncio.run(CheckWorker(rule_set).run(["."]))

    assert not report.ok
    assert report.error_count == 2
    assert report.warning_count == 1


def test_results_sorted_and_reproducible(workspace, rule_set):
    for name in ("zeta.go", "alpha.go", "mid/beta.go"):
        _write(workspace, name, "package x\n")

    first = asyncio.run(CheckWorker(rule_set, max_workers=3).run(["."]))
    second = asyncio.run(CheckWorker(rule_set, max_workers=1).run(["."]))

    assert [v.file for v in first.violations] == [
        "alpha.go", "alpha.go", "mid/beta.go", "mid/beta.go", "zeta.go", "zeta.go",
    ]
    assert render_json(first.violations) == render_json(second.violations)


def test_file_too_large(workspace, rule_set):
    _write(workspace, "big.go", GOOD_GO * 10)
    report = asyncio.run(CheckWorker(rule_set, max_file_size=20).run(["big.go"]))
    assert [v.rule_id for v in report.violations] == ["FileTooLarge"]
    assert report.violations[0].severity.value == "error"


def test_read_timeout(workspace, rule_set, monkeypatch):
    _write(workspace, "slow.go")
    _write(workspace, "fast.go")
    real_read = check_worker.read_source

    def slow_read(path, max_bytes):
        if path == "slow.go":
            time.sleep(0.5)
        return real_read(path, max_bytes)

    monkeypatch.setattr(check_worker, "read_source", slow_read)
    report = asyncio.run(CheckWorker(rule_set, read_timeout=0.05).run(["."]))

    assert [(v.file, v.rule_id) for v in report.violations] == [("slow.go", "ReadTimeout")]


def test_missing_path_is_reported(workspace, rule_set):
    _write(workspace, "ok.go")
    report = asyncio.run(CheckWorker(rule_set).run(["ok.go", "gone.go"]))
    assert [(v.file, v.rule_id) for v in report.violations] == [("gone.go", "FileReadError")]


def test_allow_unsupported_skips_silently(workspace):
    rule_set = parse_rule_set({"allowUnsupported": True})
    _write(workspace, "notes.xyz", "?")
    report = asyncio.run(CheckWorker(rule_set).run(["."]))
    assert report.violations == []


def test_unsupported_severity_configurable(workspace):
    rule_set = parse_rule_set({"unsupportedSeverity": "error"})
    _write(workspace, "notes.xyz", "?")
    report = asyncio.run(CheckWorker(rule_set).run(["."]))
    assert not report.ok


def test_internal_error_isolated_to_file(workspace, rule_set, monkeypatch):
    _write(workspace, "boom.go")
    _write(workspace, "fine.go", "package fine\n")
    worker = CheckWorker(rule_set)
    real_check = worker.engine.check_source

    def exploding(path, text, file_type=None):
        if path == "boom.go":
            raise RuntimeError("kaboom")
        return real_check(path, text, file_type)

    monkeypatch.setattr(worker.engine, "check_source", exploding)
    report = asyncio.run(worker.run(["."]))

    by_file = {}
    for v in report.violations:
        by_file.setdefault(v.file, []).append(v.rule_id)
    assert by_file["boom.go"] == ["InternalError"]
    assert by_file["fine.go"] == ["go", "go"]


def test_cancel_before_run_schedules_nothing(workspace, rule_set):
    for name in ("a.go", "b.go"):
        _write(workspace, name)
    worker = CheckWorker(rule_set)
    worker.cancel()
    report = asyncio.run(worker.run(["."]))
    assert report.cancelled
    assert report.files_checked == 0
    assert report.files_skipped == 2


def test_cancel_mid_run_keeps_in_flight_results(workspace, rule_set, monkeypatch):
    for name in ("a.go", "b.go", "c.go"):
        _write(workspace, name, "package x\n")
    worker = CheckWorker(rule_set, max_workers=1)
    real_read = check_worker.read_source

    def cancelling_read(path, max_bytes):
        worker.cancel()
        return real_read(path, max_bytes)

    monkeypatch.setattr(check_worker, "read_source", cancelling_read)
    report = asyncio.run(worker.run(["."]))

    assert report.cancelled
    assert report.files_checked == 1
    assert report.files_skipped == 2
    assert {v.file for v in report.violations} == {"a.go"}
    assert len(report.violations) == 2


def test_discover_skips_hidden_and_excluded(workspace):
    _write(workspace, ".git/hooks/pre-commit.sh")
    _write(workspace, "vendor/lib/x.go")
    _write(workspace, "cmd/main.go")
    files, missing = discover_files(["."], exclude=["vendor/**"])
    assert files == ["cmd/main.go"]
    assert missing == []


needs_fifo = pytest.mark.skipif(not hasattr(os, "mkfifo"), reason="named pipes unavailable")


@needs_fifo
def test_named_pipe_in_directory_is_rejected_not_opened(workspace, rule_set):
    _write(workspace, "src/a.go")
    os.mkfifo(workspace / "src" / "pipe.go")

    started = time.monotonic()
    report = asyncio.run(CheckWorker(rule_set, read_timeout=1).run(["src"]))

    assert time.monotonic() - started < 5
    assert [(v.file, v.rule_id) for v in report.violations] == [("src/pipe.go", "FileReadError")]
    assert "not a regular file" in report.violations[0].message


@needs_fifo
def test_explicit_named_pipe_is_not_reported_missing(workspace, rule_set):
    os.mkfifo(workspace / "pipe.go")
    files, rejected = discover_files(["pipe.go"])
    assert files == []
    assert "not a regular file" in rejected[0].violations[0].message


@needs_fifo
def test_read_source_refuses_named_pipe(workspace):
    os.mkfifo(workspace / "pipe.go")
    with pytest.raises(FileReadError):
        check_worker.read_source("pipe.go", 1000)


def test_read_that_never_returns_times_out(workspace, rule_set, monkeypatch):
    _write(workspace, "stuck.go")
    _write(workspace, "fine.go")
    release = threading.Event()
    real_read = check_worker.read_source

    def stuck_read(path, max_bytes):
        if path == "stuck.go":
            release.wait()
        return real_read(path, max_bytes)

    monkeypatch.setattr(check_worker, "read_source", stuck_read)
    started = time.monotonic()
    try:
        report = asyncio.run(CheckWorker(rule_set, read_timeout=0.1).run(["."]))
    finally:
        release.set()

    assert time.monotonic() - started < 5
    assert [(v.file, v.rule_id) for v in report.violations] == [("stuck.go", "ReadTimeout")]


@needs_fifo
def test_cli_exits_with_named_pipe_present(workspace):
    _write(workspace, "src/a.go")
    os.mkfifo(workspace / "src" / "pipe.go")
    env = {**os.environ, "CONVENTLINT_READ_TIMEOUT_SECONDS": "1"}
    env["PYTHONPATH"] = os.pathsep.join(
        filter(None, [REPO_ROOT, env.get("PYTHONPATH")])
    )

    result = subprocess.run(
        [sys.executable, "-m", "conventlint", "check-files", "src"],
        capture_output=True,
        text=True,
        env=env,
        timeout=20,
    )

    assert result.returncode == 1
    assert "src/pipe.go:0: error:" in result.stdout
