"""Issue-tracker client base class shared by all tracker integrations."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple

__all__ = [
    "Issue",
    "IssueTracker",
    "TrackerError",
    "TrackerResponseError",
    "TrackerTransportError",
]


class TrackerError(RuntimeError):
    """Base error raised for issue-tracker failures."""


class TrackerTransportError(TrackerError):
    """Raised when the underlying transport fails to return a response."""


class TrackerResponseError(TrackerError):
    """Raised when the tracker answers with a payload we cannot interpret."""


@dataclass(slots=True, frozen=True)
class Issue:
    """Tracker issue as seen by the reconciliation engine."""

    number: int
    title: str
    labels: Tuple[str, ...] = ()
    url: Optional[str] = None


class IssueTracker:
    """Operations a sync run needs from an issue tracker.

    Subclasses talk to a concrete service. Every operation is a single attempt;
    failures raise :class:`TrackerError` and are never retried here.
    """

    name = "tracker"

    def find_issue_by_title(self, repo: str, title: str) -> Optional[Issue]:
        """Return the issue whose title matches ``title`` or ``None``."""
        raise NotImplementedError("Subclasses must implement find_issue_by_title().")

    def create_issue(self, repo: str, title: str, body: str, labels: Sequence[str]) -> Issue:
        """Open a new issue and return it."""
        raise NotImplementedError("Subclasses must implement create_issue().")

    def comment_issue(self, repo: str, number: int, body: str) -> Dict[str, Any]:
        """Add a comment to issue ``number`` and return the tracker's record of it."""
        raise NotImplementedError("Subclasses must implement comment_issue().")

    def tag_issue(self, repo: str, number: int, label: str) -> List[str]:
        """Add ``label`` to issue ``number`` and return the resulting label names."""
        raise NotImplementedError("Subclasses must implement tag_issue().")

    def get_file_url(self, repo: str, file: str, sha: str, line: int) -> str:
        """Return a browsable URL pointing at ``file:line`` in commit ``sha``."""
        raise NotImplementedError("Subclasses must implement get_file_url().")
