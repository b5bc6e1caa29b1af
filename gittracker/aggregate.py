"""Scan driver — walk, probe each repo on a thread pool, tally and filter."""

from __future__ import annotations

import logging
import os
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Callable, Optional

from gittracker.errors import FatalScanError
from gittracker.git import DEFAULT_TIMEOUT, ProbeErrorKind, RepoStatus, probe_repo
from gittracker.scanner import TreeWalker

logger = logging.getLogger(__name__)

SORT_ORDERS = ("discovery", "path")

ProgressCallback = Callable[[int, str], None]


@dataclass(frozen=True)
class ScanOptions:
    show_clean: bool = False
    json: bool = False              # reporter flag, passed through untouched
    jobs: int = 8
    timeout: float = DEFAULT_TIMEOUT
    untracked: bool = True
    nested: bool = False
    max_depth: Optional[int] = None
    exclude: frozenset[str] = field(default_factory=frozenset)
    sort: str = "discovery"
    git: str = "git"

    def __post_init__(self) -> None:
        if self.jobs < 1:
            raise ValueError(f"jobs must be at least 1, got {self.jobs}")
        if self.timeout <= 0:
            raise ValueError(f"timeout must be positive, got {self.timeout}")
        if self.max_depth is not None and self.max_depth < 0:
            raise ValueError(f"max_depth must be >= 0, got {self.max_depth}")
        if self.sort not in SORT_ORDERS:
            raise ValueError(f"sort must be one of {', '.join(SORT_ORDERS)}, got {self.sort!r}")


@dataclass(frozen=True)
class Summary:
    """Counts over every probed repo, including ones filtered from the report.

    ``dirty`` is "needs attention and not errored": uncommitted changes or
    commits diverging from upstream. ``uncommitted`` and ``unpushed`` break
    that down and may overlap.
    """

    total: int = 0
    dirty: int = 0
    clean: int = 0
    errored: int = 0
    uncommitted: int = 0
    unpushed: int = 0


@dataclass(frozen=True)
class ScanResult:
    root: str
    repos: tuple[RepoStatus, ...] = ()
    summary: Summary = field(default_factory=Summary)
    skipped: tuple[str, ...] = ()
    interrupted: bool = False


def summarize(statuses: list[RepoStatus]) -> Summary:
    """Tally statuses into errored / clean / dirty buckets."""
    errored = sum(1 for s in statuses if s.error is not None)
    clean = sum(1 for s in statuses if s.is_clean)
    return Summary(
        total=len(statuses),
        dirty=len(statuses) - errored - clean,
        clean=clean,
        errored=errored,
        uncommitted=sum(1 for s in statuses if s.error is None and s.is_dirty),
        unpushed=sum(1 for s in statuses if s.error is None and s.ahead > 0),
    )


def _check_root(root: str) -> str:
    path = os.path.abspath(os.path.expanduser(root))
    if not os.path.exists(path):
        raise FatalScanError(path, "no such directory")
    if not os.path.isdir(path):
        raise FatalScanError(path, "not a directory")
    return path


def _collect(path: str, future: Future) -> RepoStatus:
    try:
        return future.result()
    except Exception as exc:  # one bad repo must not sink the scan
        logger.exception("probe of %s failed", path)
        return RepoStatus.failed(path, ProbeErrorKind.OS_ERROR, f"{type(exc).__name__}: {exc}")


def scan(
    root: str,
    options: Optional[ScanOptions] = None,
    *,
    cancel: Optional[threading.Event] = None,
    progress: Optional[ProgressCallback] = None,
) -> ScanResult:
    """Find every repo under root and probe its status.

    Raises FatalScanError if root is missing or not a directory. Per-repo
    failures and unreadable directories end up as data in the returned
    ScanResult.
    """
    options = options or ScanOptions()
    root = _check_root(root)
    walker = TreeWalker(
        max_depth=options.max_depth,
        nested=options.nested,
        exclude=options.exclude,
    )

    pending: list[tuple[str, Future]] = []
    statuses: list[RepoStatus] = []
    interrupted = False

    def _cancelled() -> bool:
        return cancel is not None and cancel.is_set()

    def _drain(block: bool) -> None:
        # Collect finished futures from the front, keeping discovery order
        while pending and not _cancelled() and (block or pending[0][1].done()):
            path, future = pending[0]
            statuses.append(_collect(path, future))
            pending.pop(0)
            if progress is not None:
                progress(len(statuses), path)

    executor = ThreadPoolExecutor(max_workers=options.jobs, thread_name_prefix="gittracker-probe")
    try:
        for path in walker.walk(root):
            if _cancelled():
                break
            pending.append((path, executor.submit(
                probe_repo,
                path,
                timeout=options.timeout,
                untracked=options.untracked,
                git=options.git,
            )))
            _drain(block=False)
        _drain(block=True)
        interrupted = _cancelled()
    except KeyboardInterrupt:
        interrupted = True
    finally:
        # Queued probes never outlive the scan, even when it raises
        executor.shutdown(wait=True, cancel_futures=True)

    if interrupted:
        logger.warning("scan interrupted; keeping %d finished result(s)", len(statuses))
        # In-flight probes finished (bounded by their timeout); keep those
        for path, future in pending:
            if future.done() and not future.cancelled():
                statuses.append(_collect(path, future))
        pending.clear()

    summary = summarize(statuses)
    if options.sort == "path":
        statuses.sort(key=lambda s: s.root_path)
    reported = statuses if options.show_clean else [s for s in statuses if not s.is_clean]

    return ScanResult(
        root=root,
        repos=tuple(reported),
        summary=summary,
        skipped=tuple(walker.skipped),
        interrupted=interrupted,
    )
