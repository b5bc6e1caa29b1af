"""Tests for the Textual dashboard."""

import asyncio
import os
import tempfile

from gittracker import aggregate
from gittracker.aggregate import ScanOptions
from gittracker.git import RepoStatus
from gittracker.tui import GittrackerApp, RepoTable


def _fake_probe(path, **kwargs):
    dirty = os.path.basename(path).startswith("dirty")
    return RepoStatus(root_path=path, branch="main", is_dirty=dirty,
                      untracked_count=1 if dirty else 0, modified_count=0, staged_count=0)


async def _settle(app, pilot):
    await app.workers.wait_for_complete()
    await pilot.pause()


def test_tui_lists_repos_and_toggles_clean(monkeypatch):
    monkeypatch.setattr(aggregate, "probe_repo", _fake_probe)

    async def run(tmp):
        app = GittrackerApp(tmp, ScanOptions())
        async with app.run_test() as pilot:
            await _settle(app, pilot)
            table = app.query_one(RepoTable)
            assert table.row_count == 1
            assert app.result.summary.total == 2

            await pilot.press("c")
            await _settle(app, pilot)
            assert app.options.show_clean is True
            assert app.query_one(RepoTable).row_count == 2

    with tempfile.TemporaryDirectory() as tmp:
        os.makedirs(os.path.join(tmp, "clean-repo", ".git"))
        os.makedirs(os.path.join(tmp, "dirty-repo", ".git"))
        asyncio.run(run(tmp))


def test_tui_missing_root_does_not_crash():
    async def run():
        app = GittrackerApp("/nonexistent/path/for/gittracker")
        async with app.run_test() as pilot:
            await _settle(app, pilot)
            assert app.result is None

    asyncio.run(run())
