"""Exceptions raised by the scan engine."""

from __future__ import annotations


class GittrackerError(Exception):
    """Base class for gittracker errors."""


class FatalScanError(GittrackerError):
    """The scan root is unusable; nothing was scanned."""

    def __init__(self, root: str, reason: str) -> None:
        super().__init__(f"{root}: {reason}")
        self.root = root
        self.reason = reason
