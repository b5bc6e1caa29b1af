"""Tests for JSON and human report rendering."""

import json

from gittracker.aggregate import ScanResult, Summary
from gittracker.export import display_path, render_line, render_lines, render_summary, to_dict, to_json
from gittracker.git import ProbeErrorKind, RepoStatus
from gittracker.theme import state_of

ROOT = "/work"

CLEAN = RepoStatus(
    root_path="/work/alpha",
    branch="main",
    untracked_count=0,
    modified_count=0,
    staged_count=0,
)
DIRTY = RepoStatus(
    root_path="/work/beta",
    branch="main",
    ahead=1,
    upstream="origin/main",
    is_dirty=True,
    untracked_count=2,
    modified_count=0,
    staged_count=1,
)
BROKEN = RepoStatus.failed("/work/gamma", ProbeErrorKind.EXIT_STATUS, "fatal: not a git repository")


def _result(*repos, **kwargs):
    return ScanResult(
        root=ROOT,
        repos=tuple(repos),
        summary=kwargs.pop("summary", Summary(total=3, dirty=1, clean=1, errored=1)),
        **kwargs,
    )


def test_repo_fields_are_stable():
    data = to_dict(_result(DIRTY))
    assert list(data) == ["root", "repos", "summary", "skipped", "interrupted"]
    assert set(data["repos"][0]) == {
        "path", "branch", "ahead", "behind", "dirty",
        "untracked", "modified", "staged", "upstream", "error",
    }
    assert data["summary"] == {
        "total": 3, "dirty": 1, "clean": 1, "errored": 1, "uncommitted": 0, "unpushed": 0,
    }


def test_dirty_repo_json():
    repo = to_dict(_result(DIRTY))["repos"][0]
    assert repo == {
        "path": "/work/beta",
        "branch": "main",
        "ahead": 1,
        "behind": 0,
        "dirty": True,
        "untracked": 2,
        "modified": 0,
        "staged": 1,
        "upstream": "origin/main",
        "error": None,
    }


def test_errored_repo_json_has_null_counts():
    repo = to_dict(_result(BROKEN))["repos"][0]
    assert repo["error"] == "exit-status: fatal: not a git repository"
    assert repo["untracked"] is None
    assert repo["modified"] is None
    assert repo["staged"] is None
    assert repo["dirty"] is False


def test_to_json_round_trips():
    data = json.loads(to_json(_result(CLEAN, DIRTY, skipped=("/work/locked",), interrupted=True)))
    assert [r["path"] for r in data["repos"]] == ["/work/alpha", "/work/beta"]
    assert data["skipped"] == ["/work/locked"]
    assert data["interrupted"] is True


def test_state_of():
    assert state_of(CLEAN) == "clean"
    assert state_of(DIRTY) == "dirty"
    assert state_of(BROKEN) == "error"
    diverged = RepoStatus(root_path="/x", branch="main", behind=2, untracked_count=0,
                          modified_count=0, staged_count=0, upstream="origin/main")
    assert state_of(diverged) == "diverged"


def test_display_path():
    assert display_path(DIRTY, ROOT) == "beta"
    assert display_path(RepoStatus(root_path="/work"), ROOT) == "."
    assert display_path(RepoStatus(root_path="/elsewhere/repo"), ROOT) == "/elsewhere/repo"


def test_render_line_dirty():
    line = render_line(DIRTY, ROOT).plain
    assert line.startswith("dirty")
    assert "beta" in line
    assert "[main]" in line
    assert "↑1" in line
    assert "↓0" in line
    assert "●1" in line
    assert "…2" in line


def test_render_line_no_upstream():
    line = render_line(CLEAN, ROOT).plain
    assert line.startswith("clean")
    assert "no upstream" in line


def test_render_line_error():
    line = render_line(BROKEN, ROOT).plain
    assert line.startswith("error")
    assert "gamma" in line
    assert "fatal: not a git repository" in line


def test_render_summary():
    text = render_summary(_result(DIRTY, skipped=("/work/locked",))).plain
    assert "scanned 3 repositories" in text
    assert "1 need attention" in text
    assert "1 clean" in text
    assert "1 unavailable" in text
    assert "1 unreadable paths skipped" in text


def test_render_lines_nothing_to_report():
    result = _result(summary=Summary(total=2, clean=2))
    lines = [t.plain for t in render_lines(result)]
    assert lines[0] == "no repositories with local changes found"
    assert lines[-1].startswith("scanned 2 repositories")


def test_render_lines_empty_scan_says_nothing_found():
    result = _result(summary=Summary())
    lines = [t.plain for t in render_lines(result)]
    assert lines == [
        "no repositories with local changes found",
        "scanned 0 repositories — 0 need attention, 0 clean",
    ]


def test_render_summary_breaks_down_attention():
    summary = Summary(total=3, dirty=2, clean=1, uncommitted=1, unpushed=2)
    text = render_summary(_result(summary=summary)).plain
    assert "2 need attention (1 uncommitted, 2 unpushed)" in text


def test_render_lines_one_per_repo():
    lines = render_lines(_result(DIRTY, BROKEN))
    assert len(lines) == 3
