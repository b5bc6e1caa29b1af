"""Git status probe — one read-only subprocess per repo, parsed into a RepoStatus."""

from __future__ import annotations

import enum
import logging
import os
import subprocess
from dataclasses import dataclass
from typing import Optional

logger = logging.getLogger(__name__)

DETACHED = "(detached)"
UNKNOWN = "(unknown)"

DEFAULT_TIMEOUT = 10.0

# git prints this for a repo with no commits on some older porcelain paths
UNBORN_MARKERS = ("does not have any commits yet", "no commits yet")


class ProbeErrorKind(enum.Enum):
    TOOL_MISSING = "tool-missing"
    TIMEOUT = "timeout"
    EXIT_STATUS = "exit-status"
    UNPARSEABLE = "unparseable"
    OS_ERROR = "os-error"


@dataclass(frozen=True)
class ProbeError:
    kind: ProbeErrorKind
    message: str

    def __str__(self) -> str:
        return f"{self.kind.value}: {self.message}"


@dataclass(frozen=True)
class RepoStatus:
    root_path: str
    branch: str = UNKNOWN
    ahead: int = 0
    behind: int = 0
    upstream: Optional[str] = None
    is_dirty: bool = False
    untracked_count: Optional[int] = None
    modified_count: Optional[int] = None
    staged_count: Optional[int] = None
    error: Optional[ProbeError] = None

    @classmethod
    def failed(cls, root_path: str, kind: ProbeErrorKind, message: str) -> RepoStatus:
        """A status that carries only an error; every counter is unavailable."""
        return cls(root_path=root_path, error=ProbeError(kind, message))

    @property
    def is_clean(self) -> bool:
        return (
            self.error is None
            and not self.is_dirty
            and self.ahead == 0
            and self.behind == 0
        )

    @property
    def needs_attention(self) -> bool:
        return not self.is_clean


@dataclass
class _Counts:
    """Mutable accumulator used while classifying status lines."""

    branch: str = UNKNOWN
    upstream: Optional[str] = None
    ahead: int = 0
    behind: int = 0
    untracked: int = 0
    modified: int = 0
    staged: int = 0
    saw_header: bool = False


def _parse_ab(value: str, counts: _Counts) -> None:
    # "+3 -1"
    for part in value.split():
        try:
            n = abs(int(part))
        except ValueError:
            continue
        if part.startswith("+"):
            counts.ahead = n
        elif part.startswith("-"):
            counts.behind = n


def _classify_line(line: str, counts: _Counts) -> None:
    if line.startswith("# branch."):
        counts.saw_header = True
        key, _, value = line[len("# branch."):].partition(" ")
        if key == "head":
            counts.branch = DETACHED if value == "(detached)" else value or UNKNOWN
        elif key == "upstream":
            counts.upstream = value or None
        elif key == "ab":
            _parse_ab(value, counts)
        return

    tag = line[:2]
    if tag in ("1 ", "2 "):
        xy = line[2:4]
        if len(xy) < 2:
            return
        if xy[0] != ".":
            counts.staged += 1
        if xy[1] != ".":
            counts.modified += 1
    elif tag == "u ":
        counts.modified += 1
    elif tag == "? ":
        counts.untracked += 1
    # Anything else ("! " ignored files, unknown headers) is not counted


def parse_status(repo_root: str, output: str) -> RepoStatus:
    """Turn `git status --porcelain=v2 --branch` output into a RepoStatus."""
    counts = _Counts()
    for line in output.splitlines():
        if line:
            _classify_line(line, counts)

    if not counts.saw_header:
        return RepoStatus.failed(
            repo_root, ProbeErrorKind.UNPARSEABLE, "no branch header in git status output",
        )

    changes = counts.untracked + counts.modified + counts.staged
    return RepoStatus(
        root_path=repo_root,
        branch=counts.branch,
        ahead=counts.ahead,
        behind=counts.behind,
        upstream=counts.upstream,
        is_dirty=changes > 0,
        untracked_count=counts.untracked,
        modified_count=counts.modified,
        staged_count=counts.staged,
    )


def _git_env(repo_root: str) -> dict[str, str]:
    env = dict(os.environ)
    env["GIT_OPTIONAL_LOCKS"] = "0"
    env["LC_ALL"] = "C"
    # Stop git from falling back to an enclosing repo when this one is broken
    env["GIT_CEILING_DIRECTORIES"] = os.path.dirname(os.path.abspath(repo_root))
    return env


def _first_line(text: str) -> str:
    for line in text.splitlines():
        if line.strip():
            return line.strip()
    return ""


def probe_repo(
    repo_root: str,
    *,
    timeout: float = DEFAULT_TIMEOUT,
    untracked: bool = True,
    git: str = "git",
) -> RepoStatus:
    """Run git status in repo_root and return its parsed status.

    Never raises for per-repo problems: a missing git binary, a timeout or a
    non-zero exit all come back as a RepoStatus with ``error`` set.
    """
    args = [
        git, "status", "--porcelain=v2", "--branch",
        f"--untracked-files={'all' if untracked else 'no'}",
    ]
    logger.debug("running %s in %s", " ".join(args), repo_root)
    try:
        result = subprocess.run(
            args,
            cwd=repo_root,
            env=_git_env(repo_root),
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
            timeout=timeout,
        )
    except FileNotFoundError as exc:
        # A missing cwd raises the same exception as a missing binary
        if not os.path.isdir(repo_root):
            return _failed(repo_root, ProbeErrorKind.OS_ERROR, f"{exc.strerror}: {repo_root}")
        return _failed(repo_root, ProbeErrorKind.TOOL_MISSING, f"{git} executable not found")
    except subprocess.TimeoutExpired:
        return _failed(repo_root, ProbeErrorKind.TIMEOUT, f"git status timed out after {timeout:g}s")
    except OSError as exc:
        return _failed(repo_root, ProbeErrorKind.OS_ERROR, str(exc))

    if result.returncode != 0:
        stderr = result.stderr or ""
        if any(marker in stderr for marker in UNBORN_MARKERS):
            return RepoStatus(
                root_path=repo_root,
                untracked_count=0,
                modified_count=0,
                staged_count=0,
            )
        reason = _first_line(stderr) or f"git exited with status {result.returncode}"
        return _failed(repo_root, ProbeErrorKind.EXIT_STATUS, reason)

    status = parse_status(repo_root, result.stdout)
    if status.error is not None:
        logger.warning("%s: %s", repo_root, status.error)
    return status


def _failed(repo_root: str, kind: ProbeErrorKind, message: str) -> RepoStatus:
    logger.warning("%s: %s: %s", repo_root, kind.value, message)
    return RepoStatus.failed(repo_root, kind, message)
