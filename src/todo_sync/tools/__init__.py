"""Git and diff helpers used by the sync runtime."""

from .diff import DiffLine, FileDiff, parse_unified_diff
from .vcs import GitError, GitRepository, parse_remote_slug

__all__ = [
    "DiffLine",
    "FileDiff",
    "GitError",
    "GitRepository",
    "parse_remote_slug",
    "parse_unified_diff",
]
