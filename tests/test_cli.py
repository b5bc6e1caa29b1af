"""Tests for the command-line entry point."""

import json
import os
import tempfile

import pytest

from gittracker import aggregate, cli
from gittracker.git import RepoStatus


def _fake_probe(path, **kwargs):
    if os.path.basename(path).startswith("dirty"):
        return RepoStatus(root_path=path, branch="main", is_dirty=True,
                          untracked_count=3, modified_count=0, staged_count=0)
    return RepoStatus(root_path=path, branch="main",
                      untracked_count=0, modified_count=0, staged_count=0)


@pytest.fixture
def workspace(monkeypatch):
    monkeypatch.setattr(aggregate, "probe_repo", _fake_probe)
    with tempfile.TemporaryDirectory() as tmp:
        os.makedirs(os.path.join(tmp, "clean-repo", ".git"))
        os.makedirs(os.path.join(tmp, "dirty-repo", ".git"))
        yield tmp


def test_json_output(workspace, capsys):
    assert cli.main([workspace, "--json"]) == cli.EXIT_OK
    data = json.loads(capsys.readouterr().out)
    assert [os.path.basename(r["path"]) for r in data["repos"]] == ["dirty-repo"]
    assert data["repos"][0]["untracked"] == 3
    assert data["summary"] == {
        "total": 2, "dirty": 1, "clean": 1, "errored": 0, "uncommitted": 1, "unpushed": 0,
    }


def test_json_show_clean(workspace, capsys):
    assert cli.main([workspace, "--json", "--show-clean"]) == cli.EXIT_OK
    data = json.loads(capsys.readouterr().out)
    assert len(data["repos"]) == 2


def test_human_output(workspace, capsys):
    assert cli.main([workspace]) == cli.EXIT_OK
    out = capsys.readouterr().out
    assert "dirty-repo" in out
    assert "clean-repo" not in out
    assert "scanned 2 repositories" in out


def test_human_output_show_clean(workspace, capsys):
    assert cli.main([workspace, "--show-clean"]) == cli.EXIT_OK
    out = capsys.readouterr().out
    assert "clean-repo" in out


def test_exit_zero_when_dirty_found(workspace):
    assert cli.main([workspace, "--json"]) == 0


def test_missing_root_exits_nonzero(capsys):
    assert cli.main(["/nonexistent/path/for/gittracker"]) == cli.EXIT_FATAL
    assert "no such directory" in capsys.readouterr().err


def test_invalid_jobs_is_usage_error():
    with pytest.raises(SystemExit) as exc:
        cli.main([".", "--jobs", "0"])
    assert exc.value.code == 2


def test_options_from_args():
    args = cli.build_parser().parse_args([
        "ws", "--json", "--show-clean", "-j", "3", "--timeout", "2.5",
        "--no-untracked", "--nested", "--max-depth", "4",
        "--exclude", "node_modules", "--exclude", "vendor", "--sort", "path",
    ])
    options = cli.options_from_args(args)
    assert options.json is True
    assert options.show_clean is True
    assert options.jobs == 3
    assert options.timeout == 2.5
    assert options.untracked is False
    assert options.nested is True
    assert options.max_depth == 4
    assert options.exclude == frozenset({"node_modules", "vendor"})
    assert options.sort == "path"


def test_default_options_match_engine_defaults():
    options = cli.options_from_args(cli.build_parser().parse_args([]))
    assert options == aggregate.ScanOptions()
