"""GitHub Release Monitor.

Polls a GitHub repository for releases matching a version prefix,
downloads the assets of the newest one, and keeps the last N versions
on disk.
"""

__version__ = "1.0.0"
