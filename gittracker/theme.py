"""Shared visual constants and helpers for gittracker."""

from __future__ import annotations

from rich.style import Style
from rich.text import Text

from gittracker.git import RepoStatus

# ── Color Palette (GitHub Dark + Neon Accents) ──────────────────────────

MUTED = "#8b949e"

CYAN = "#58a6ff"
GREEN = "#39d353"
PURPLE = "#bc8cff"
YELLOW = "#e3b341"
RED = "#f85149"
ORANGE = "#f0883e"

# Per-state accents
STATE_COLORS = {
    "clean": GREEN,
    "dirty": YELLOW,
    "diverged": PURPLE,
    "error": RED,
}

# ── Status Icons ────────────────────────────────────────────────────────

ICON_AHEAD = "↑"
ICON_BEHIND = "↓"
ICON_STAGED = "●"
ICON_MODIFIED = "✚"
ICON_UNTRACKED = "…"

TAGLINE = "which checkouts need attention"


def state_of(status: RepoStatus) -> str:
    """One-word state: error, dirty, diverged or clean."""
    if status.error is not None:
        return "error"
    if status.is_dirty:
        return "dirty"
    if status.ahead or status.behind:
        return "diverged"
    return "clean"


def state_color(status: RepoStatus) -> str:
    return STATE_COLORS[state_of(status)]


def ahead_behind(status: RepoStatus) -> Text:
    """Render ↑ahead ↓behind, or a muted marker when there's no upstream."""
    text = Text()
    if status.error is not None:
        return text
    if status.upstream is None and not (status.ahead or status.behind):
        text.append("no upstream", style=Style(color=MUTED, italic=True))
        return text
    text.append(f"{ICON_AHEAD}{status.ahead}", style=Style(color=CYAN if status.ahead else MUTED))
    text.append(" ")
    text.append(f"{ICON_BEHIND}{status.behind}", style=Style(color=ORANGE if status.behind else MUTED))
    return text


def change_counts(status: RepoStatus) -> Text:
    """Render staged / modified / untracked counts; zero counts are left out."""
    text = Text()
    parts = [
        (ICON_STAGED, status.staged_count, GREEN),
        (ICON_MODIFIED, status.modified_count, YELLOW),
        (ICON_UNTRACKED, status.untracked_count, MUTED),
    ]
    for icon, count, color in parts:
        if not count:
            continue
        if text:
            text.append(" ")
        text.append(f"{icon}{count}", style=Style(color=color, bold=True))
    return text
