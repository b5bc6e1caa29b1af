"""Export utilities — stable JSON document and human-readable report lines."""

from __future__ import annotations

import json
import os

from rich.style import Style
from rich.text import Text

from gittracker.aggregate import ScanResult, Summary
from gittracker.git import RepoStatus
from gittracker.theme import (
    CYAN,
    GREEN,
    MUTED,
    RED,
    YELLOW,
    ahead_behind,
    change_counts,
    state_color,
    state_of,
)


# ── JSON ──────────────────────────────────────────────────────────────

def repo_to_dict(status: RepoStatus) -> dict:
    """Serialize one status. Keys are part of the output contract."""
    return {
        "path": status.root_path,
        "branch": status.branch,
        "ahead": status.ahead,
        "behind": status.behind,
        "dirty": status.is_dirty,
        "untracked": status.untracked_count,
        "modified": status.modified_count,
        "staged": status.staged_count,
        "upstream": status.upstream,
        "error": str(status.error) if status.error is not None else None,
    }


def summary_to_dict(summary: Summary) -> dict:
    return {
        "total": summary.total,
        "dirty": summary.dirty,
        "clean": summary.clean,
        "errored": summary.errored,
        "uncommitted": summary.uncommitted,
        "unpushed": summary.unpushed,
    }


def to_dict(result: ScanResult) -> dict:
    return {
        "root": result.root,
        "repos": [repo_to_dict(s) for s in result.repos],
        "summary": summary_to_dict(result.summary),
        "skipped": list(result.skipped),
        "interrupted": result.interrupted,
    }


def to_json(result: ScanResult) -> str:
    return json.dumps(to_dict(result), indent=2)


# ── Human Report ──────────────────────────────────────────────────────

def display_path(status: RepoStatus, root: str) -> str:
    """Path relative to the scan root, or "." for the root itself."""
    rel = os.path.relpath(status.root_path, root)
    return rel if not rel.startswith("..") else status.root_path


def render_line(status: RepoStatus, root: str) -> Text:
    """One report line: state, path, branch, ahead/behind and change counts."""
    state = state_of(status)
    text = Text()
    text.append(f"{state:<8}", style=Style(color=state_color(status), bold=True))
    text.append(display_path(status, root), style=Style(color=CYAN, bold=True))

    if status.error is not None:
        text.append("  ")
        text.append(str(status.error), style=Style(color=RED))
        return text

    text.append(f"  [{status.branch}]", style=Style(color=MUTED))
    text.append("  ")
    text.append_text(ahead_behind(status))
    counts = change_counts(status)
    if counts:
        text.append("  ")
        text.append_text(counts)
    return text


def render_summary(result: ScanResult) -> Text:
    s = result.summary
    text = Text()
    text.append(f"scanned {s.total} repositories", style=Style(color=MUTED))
    text.append(" — ", style=Style(color=MUTED))
    text.append(f"{s.dirty} need attention", style=Style(color=YELLOW, bold=bool(s.dirty)))
    if s.dirty:
        text.append(f" ({s.uncommitted} uncommitted, {s.unpushed} unpushed)", style=Style(color=MUTED))
    text.append(", ", style=Style(color=MUTED))
    text.append(f"{s.clean} clean", style=Style(color=GREEN))
    if s.errored:
        text.append(", ", style=Style(color=MUTED))
        text.append(f"{s.errored} unavailable", style=Style(color=RED, bold=True))
    if result.skipped:
        text.append(f" ({len(result.skipped)} unreadable paths skipped)", style=Style(color=MUTED))
    if result.interrupted:
        text.append(" [interrupted — partial results]", style=Style(color=RED))
    return text


def render_lines(result: ScanResult) -> list[Text]:
    """Full human report: one line per reported repo, then the summary."""
    lines = [render_line(s, result.root) for s in result.repos]
    if not result.repos:
        lines.append(Text("no repositories with local changes found", style=Style(color=GREEN)))
    lines.append(render_summary(result))
    return lines
