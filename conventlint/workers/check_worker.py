"""
Check Worker — Async orchestrator for the file-checking path.

Pipeline per file:
1. Resolve the file type (UnsupportedFileType is recorded, not raised)
2. Read the file in a thread, bounded by size and timeout
3. Extract documentation units and evaluate them with the rule engine

Files are checked concurrently up to `max_workers`. Cancellation stops new
files from being scheduled; files already in flight finish and are reported.
Results are sorted by path so output does not depend on completion order.
"""

from __future__ import annotations

import asyncio
import logging
import os
import stat
import threading
import time
import uuid
from pathlib import Path
from typing import Iterable

from conventlint.config import settings
from conventlint.core.rule_engine import RuleEngine, glob_matches
from conventlint.errors import (
    ErrorKind,
    FileCheckError,
    FileReadError,
    FileTooLarge,
    ReadTimeout,
    UnsupportedFileType,
)
from conventlint.models.report_models import CheckReport, FileResult, Severity, Violation
from conventlint.models.rule_models import RuleSet

logger = logging.getLogger("conventlint.worker")


def display_path(path: str | Path) -> str:
    """POSIX path relative to the working directory when possible."""
    candidate = Path(path)
    try:
        candidate = candidate.resolve().relative_to(Path.cwd().resolve())
    except (OSError, ValueError):
        pass
    return candidate.as_posix()


def discover_files(
    paths: Iterable[str | Path], exclude: Iterable[str] = ()
) -> tuple[list[str], list[FileResult]]:
    """
    Expand files and directories into a sorted, de-duplicated file list.

    Directories are walked recursively; hidden directories are skipped.
    Missing paths and anything that is not a regular file (pipes, sockets,
    devices) come back as FileReadError results and are never opened.
    """
    exclude = tuple(exclude)
    found: set[str] = set()
    rejected: dict[str, FileResult] = {}

    def reject(shown: str, message: str) -> None:
        error = FileReadError(shown, message)
        rejected[shown] = FileResult(path=shown, violations=[error.to_violation()])

    def add(path: Path) -> None:
        shown = display_path(path)
        try:
            mode = os.stat(path).st_mode
        except OSError as e:
            reject(shown, f"cannot read '{shown}': {e.strerror or e}")
            return
        if stat.S_ISREG(mode):
            found.add(shown)
        else:
            reject(shown, f"'{shown}' is not a regular file")

    for raw in paths:
        path = Path(raw)
        if path.is_dir():
            for root, dirs, files in os.walk(path):
                dirs[:] = sorted(d for d in dirs if not d.startswith("."))
                for name in files:
                    entry = Path(root) / name
                    if not any(glob_matches(p, display_path(entry)) for p in exclude):
                        add(entry)
        elif os.path.lexists(path):
            add(path)
        else:
            shown = display_path(path)
            reject(shown, f"'{shown}' does not exist")

    return sorted(found), [rejected[k] for k in sorted(rejected)]


def read_source(path: str, max_bytes: int) -> str:
    """
    Read a file as UTF-8 text.

    Raises:
        FileTooLarge: the file exceeds max_bytes.
        FileReadError: the file cannot be opened or read.
    """
    try:
        # O_NONBLOCK keeps a FIFO swapped in after discovery from blocking the open
        fd = os.open(path, os.O_RDONLY | getattr(os, "O_NONBLOCK", 0))
        with open(fd, "rb") as f:
            info = os.fstat(f.fileno())
            if not stat.S_ISREG(info.st_mode):
                raise FileReadError(path, f"'{path}' is not a regular file")
            if info.st_size > max_bytes:
                raise FileTooLarge(
                    path, f"'{path}' is {info.st_size} bytes, limit is {max_bytes}"
                )
            data = f.read(max_bytes + 1)
    except OSError as e:
        raise FileReadError(path, f"cannot read '{path}': {e.strerror or e}") from e

    # The file may have grown between stat and read
    if len(data) > max_bytes:
        raise FileTooLarge(path, f"'{path}' exceeds {max_bytes} bytes")
    return data.decode("utf-8", errors="replace")


def _settle(future: asyncio.Future, result: str | None, error: BaseException | None) -> None:
    if future.done():
        return
    if error is not None:
        future.set_exception(error)
    else:
        future.set_result(result)


async def _read_detached(path: str, max_bytes: int) -> str:
    """
    Run read_source in a daemon thread.

    A read that outlives its timeout is abandoned; the thread never blocks
    executor shutdown or interpreter exit.
    """
    loop = asyncio.get_running_loop()
    future: asyncio.Future = loop.create_future()

    def target() -> None:
        result, error = None, None
        try:
            result = read_source(path, max_bytes)
        except Exception as e:
            error = e
        try:
            loop.call_soon_threadsafe(_settle, future, result, error)
        except RuntimeError:
            logger.debug(f"Dropped late read result for {path}")

    threading.Thread(target=target, name=f"conventlint-read-{path}", daemon=True).start()
    return await future


class CheckWorker:
    """Concurrent file checker sharing one read-only rule set."""

    def __init__(
        self,
        rule_set: RuleSet,
        max_workers: int | None = None,
        max_file_size: int | None = None,
        read_timeout: float | None = None,
    ) -> None:
        self.rule_set = rule_set
        self.engine = RuleEngine(rule_set)
        self.max_workers = max_workers or settings.max_workers
        self.max_file_size = max_file_size or settings.max_file_size_bytes
        self.read_timeout = read_timeout or settings.read_timeout_seconds
        self._cancel = threading.Event()

    def cancel(self) -> None:
        """Stop scheduling new files. Safe to call from signal handlers and other threads."""
        self._cancel.set()

    @property
    def cancelled(self) -> bool:
        return self._cancel.is_set()

    async def run(self, paths: Iterable[str | Path]) -> CheckReport:
        """
        Check every file under the given paths.

        Returns:
            CheckReport with violations sorted by file path.
        """
        run_id = str(uuid.uuid4())[:8]
        start_time = time.monotonic()

        files, results = discover_files(paths, self.rule_set.exclude)
        logger.info(f"[{run_id}] Checking {len(files)} files with {self.max_workers} workers")

        semaphore = asyncio.Semaphore(self.max_workers)
        tasks: list[asyncio.Task[FileResult]] = []
        skipped = 0

        for index, path in enumerate(files):
            if self._cancel.is_set():
                skipped = len(files) - index
                break
            await semaphore.acquire()
            if self._cancel.is_set():
                semaphore.release()
                skipped = len(files) - index
                break
            tasks.append(asyncio.create_task(self._check_guarded(path, semaphore)))

        results.extend(await asyncio.gather(*tasks))
        results.sort(key=lambda r: r.path)

        report = CheckReport(
            violations=[v for result in results for v in result.violations],
            files_checked=len(tasks),
            files_skipped=skipped,
            cancelled=self._cancel.is_set(),
        )

        elapsed_ms = (time.monotonic() - start_time) * 1000
        if skipped:
            logger.warning(f"[{run_id}] Cancelled, {skipped} files not checked")
        logger.info(
            f"[{run_id}] Done in {elapsed_ms:.0f}ms: {report.files_checked} files, "
            f"{report.error_count} errors, {report.warning_count} warnings"
        )
        return report

    async def _check_guarded(self, path: str, semaphore: asyncio.Semaphore) -> FileResult:
        try:
            return await self.check_path(path)
        except Exception as e:
            # One file's failure must not abort the run
            logger.exception(f"Internal error while checking {path}")
            return FileResult(
                path=path,
                violations=[
                    Violation(
                        file=path,
                        line=0,
                        rule_id=ErrorKind.INTERNAL_ERROR.value,
                        severity=Severity.ERROR,
                        message=f"check failed: {type(e).__name__}: {e}",
                    )
                ],
            )
        finally:
            semaphore.release()

    async def check_path(self, path: str) -> FileResult:
        """Check a single file. Per-file failures become violations."""
        rule = self.engine.select_rule(path)
        try:
            file_type = self.engine.resolve_file_type(path, rule)
        except UnsupportedFileType as e:
            if self.rule_set.allow_unsupported:
                logger.debug(f"Skipping unsupported file {path}")
                return FileResult(path=path)
            logger.info(str(e))
            return FileResult(
                path=path, violations=[e.to_violation(self.rule_set.unsupported_severity)]
            )

        try:
            text = await asyncio.wait_for(
                _read_detached(path, self.max_file_size),
                timeout=self.read_timeout,
            )
        except asyncio.TimeoutError:
            error = ReadTimeout(path, f"reading '{path}' took longer than {self.read_timeout}s")
            logger.warning(str(error))
            return FileResult(path=path, violations=[error.to_violation()])
        except FileCheckError as e:
            logger.warning(str(e))
            return FileResult(path=path, violations=[e.to_violation()])

        violations = await asyncio.to_thread(self.engine.check_source, path, text, file_type)
        return FileResult(path=path, violations=violations)
