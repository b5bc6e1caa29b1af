"""Repo discovery — walk a directory tree and yield git repository roots."""

from __future__ import annotations

import enum
import logging
import os
import stat
from typing import Iterable, Iterator, Optional

logger = logging.getLogger(__name__)

GIT_DIR = ".git"


class Decision(enum.Enum):
    DESCEND = "descend"
    SKIP = "skip"
    REPO_ROOT = "repo_root"


def has_git_marker(path: str) -> bool:
    """True if path has a .git child (directory, or a gitdir file for worktrees/submodules).

    A .git symlink doesn't count, dangling or not.
    """
    try:
        mode = os.lstat(os.path.join(path, GIT_DIR)).st_mode
    except OSError:
        return False
    return stat.S_ISDIR(mode) or stat.S_ISREG(mode)


def classify(entry: os.DirEntry, exclude: frozenset[str] = frozenset()) -> Decision:
    """Decide what the walker does with one directory entry.

    Symlinks are never followed, whatever they point at. Entries whose
    metadata can't be read raise OSError, which the caller turns into a
    soft skip.
    """
    if entry.is_symlink():
        return Decision.SKIP
    if not entry.is_dir(follow_symlinks=False):
        return Decision.SKIP
    if entry.name == GIT_DIR or entry.name in exclude:
        return Decision.SKIP
    if has_git_marker(entry.path):
        return Decision.REPO_ROOT
    return Decision.DESCEND


class TreeWalker:
    """Iterative, lazy walk that yields repository roots in a stable order.

    Paths that had to be skipped because they couldn't be read are collected
    in ``skipped`` as the walk progresses.
    """

    def __init__(
        self,
        *,
        max_depth: Optional[int] = None,
        nested: bool = False,
        exclude: Iterable[str] = (),
    ) -> None:
        self.max_depth = max_depth
        self.nested = nested
        self.exclude = frozenset(exclude)
        self.skipped: list[str] = []

    def _skip(self, path: str, exc: OSError) -> None:
        logger.warning("skipping unreadable path %s: %s", path, exc.strerror or exc)
        self.skipped.append(path)

    def _entries(self, path: str) -> list[os.DirEntry]:
        try:
            with os.scandir(path) as it:
                return sorted(it, key=lambda e: e.name)
        except OSError as exc:
            self._skip(path, exc)
            return []

    def walk(self, root: str) -> Iterator[str]:
        """Yield repository roots under root (root itself included)."""
        root = os.path.abspath(os.path.expanduser(root))

        # (path, depth, is_repo): repos are yielded when popped, so output is pre-order
        stack: list[tuple[str, int, bool]] = [(root, 0, has_git_marker(root))]
        while stack:
            path, depth, is_repo = stack.pop()
            if is_repo:
                logger.debug("found repo %s", path)
                yield path
                # Don't recurse into a found repo unless asked to
                if not self.nested:
                    continue
            if self.max_depth is not None and depth >= self.max_depth:
                continue

            children: list[tuple[str, int, bool]] = []
            for entry in self._entries(path):
                try:
                    decision = classify(entry, self.exclude)
                except OSError as exc:
                    self._skip(entry.path, exc)
                    continue
                if decision is not Decision.SKIP:
                    children.append((entry.path, depth + 1, decision is Decision.REPO_ROOT))

            # Reversed so the smallest name is popped first
            stack.extend(reversed(children))
