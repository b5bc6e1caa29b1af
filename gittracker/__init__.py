"""gittracker — find git checkouts under a directory and report which need attention."""

__version__ = "0.3.0"
