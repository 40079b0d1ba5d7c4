"""Issue-tracker integrations selectable through the ``service`` option."""

from __future__ import annotations

from typing import Any, Callable, Dict

from .base import Issue, IssueTracker, TrackerError, TrackerResponseError, TrackerTransportError
from .github import GitHubTracker

__all__ = [
    "GitHubTracker",
    "Issue",
    "IssueTracker",
    "TRACKERS",
    "TrackerError",
    "TrackerResponseError",
    "TrackerTransportError",
    "build_tracker",
]


def _build_github(config: Any, **kwargs: Any) -> IssueTracker:
    return GitHubTracker(token=config.github_token, host=config.github_host, **kwargs)


TRACKERS: Dict[str, Callable[..., IssueTracker]] = {
    "github": _build_github,
}


def build_tracker(config: Any, **kwargs: Any) -> IssueTracker:
    """Instantiate the tracker named by ``config.service``."""
    factory = TRACKERS.get(config.service)
    if factory is None:
        known = ", ".join(sorted(TRACKERS))
        raise TrackerError(f"Unknown issue service '{config.service}' (known: {known}).")
    return factory(config, **kwargs)
