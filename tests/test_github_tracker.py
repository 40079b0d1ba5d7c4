from __future__ import annotations

import json
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import parse_qs, urlparse

import pytest

from todo_sync.config import load_config
from todo_sync.trackers import GitHubTracker, TrackerError, build_tracker
from todo_sync.trackers.base import TrackerResponseError


class _Recorder:
    def __init__(self, *responses: Any) -> None:
        self.responses = list(responses)
        self.requests: List[Tuple[str, str, Optional[Dict[str, Any]]]] = []

    def __call__(self, method: str, url: str, payload: Optional[Dict[str, Any]]) -> str:
        self.requests.append((method, url, payload))
        return json.dumps(self.responses.pop(0))


def test_find_issue_by_title_matches_exact_title_only() -> None:
    transport = _Recorder(
        {
            "items": [
                {"number": 3, "title": "fix the bug later", "labels": []},
                {"number": 4, "title": "Fix the bug", "labels": [], "pull_request": {}},
                {"number": 5, "title": "Fix the bug", "labels": [{"name": "todo"}], "html_url": "https://x/5"},
            ]
        }
    )
    tracker = GitHubTracker(transport=transport)

    issue = tracker.find_issue_by_title("acme/widgets", "fix the bug")

    assert issue is not None
    assert (issue.number, issue.labels, issue.url) == (5, ("todo",), "https://x/5")
    method, url, payload = transport.requests[0]
    assert method == "GET"
    assert payload is None
    query = parse_qs(urlparse(url).query)["q"][0]
    assert query == '"fix the bug" repo:acme/widgets type:issue in:title'


def test_find_issue_by_title_returns_none_without_match() -> None:
    tracker = GitHubTracker(transport=_Recorder({"items": []}))
    assert tracker.find_issue_by_title("acme/widgets", "fix the bug") is None


def test_create_comment_and_tag_payloads() -> None:
    transport = _Recorder(
        {"number": 9, "title": "fix the bug", "labels": [{"name": "bug"}]},
        {"id": 100, "body": "hello"},
        [{"name": "bug"}, {"name": "todo"}],
    )
    tracker = GitHubTracker(transport=transport, api_url="https://api.example.test")

    issue = tracker.create_issue("acme/widgets", "fix the bug", "body", ["bug"])
    comment = tracker.comment_issue("acme/widgets", 9, "hello")
    labels = tracker.tag_issue("acme/widgets", 9, "todo")

    assert issue.number == 9
    assert comment["id"] == 100
    assert labels == ["bug", "todo"]
    assert transport.requests == [
        ("POST", "https://api.example.test/repos/acme/widgets/issues", {"title": "fix the bug", "body": "body", "labels": ["bug"]}),
        ("POST", "https://api.example.test/repos/acme/widgets/issues/9/comments", {"body": "hello"}),
        ("POST", "https://api.example.test/repos/acme/widgets/issues/9/labels", {"labels": ["todo"]}),
    ]


def test_file_url_points_at_commit_and_line() -> None:
    tracker = GitHubTracker(transport=_Recorder(), host="git.example.com")
    assert (
        tracker.get_file_url("acme/widgets", "src/my app.py", "abc123", 7)
        == "https://git.example.com/acme/widgets/blob/abc123/src/my%20app.py#L7"
    )


def test_malformed_issue_payload_raises() -> None:
    tracker = GitHubTracker(transport=_Recorder({"message": "nope"}))
    with pytest.raises(TrackerResponseError):
        tracker.create_issue("acme/widgets", "t", "b", [])


def test_default_transport_requires_token(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("GITHUB_TOKEN", raising=False)
    with pytest.raises(TrackerError):
        GitHubTracker()


def test_build_tracker_selects_service(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("GITHUB_TOKEN", "secret")
    assert isinstance(build_tracker(load_config(None)), GitHubTracker)

    with pytest.raises(TrackerError, match="Unknown issue service"):
        build_tracker(load_config(None, {"service": "gitlab"}))
