"""GitHub issue tracker client speaking the REST v3 API."""

from __future__ import annotations

import json
import logging
import os
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence
from urllib.parse import quote, urlencode

from .base import Issue, IssueTracker, TrackerError, TrackerResponseError, TrackerTransportError

__all__ = ["GitHubTracker"]

LOGGER = logging.getLogger(__name__)

# (method, url, JSON body or None) -> raw response text
Transport = Callable[[str, str, Optional[Dict[str, Any]]], str]


class GitHubTracker(IssueTracker):
    """Thin adapter around the GitHub issues API."""

    name = "github"

    def __init__(
        self,
        *,
        token: Optional[str] = None,
        host: str = "github.com",
        api_url: Optional[str] = None,
        transport: Optional[Transport] = None,
        timeout: float = 30.0,
    ) -> None:
        self._token = token or os.getenv("GITHUB_TOKEN")
        self._host = host.strip().rstrip("/") or "github.com"
        if api_url is None:
            api_url = "https://api.github.com" if self._host == "github.com" else f"https://{self._host}/api/v3"
        self._api_url = api_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport or self._http_transport

        if transport is None and not self._token:
            raise TrackerError("A GitHub token is required; set GITHUB_TOKEN or github.token.")

    # ------------------------------------------------------------ operations
    def find_issue_by_title(self, repo: str, title: str) -> Optional[Issue]:
        wanted = title.strip().lower()
        phrase = title.replace('"', " ").strip()
        query = f'"{phrase}" repo:{repo} type:issue in:title'
        data = self._request("GET", f"/search/issues?{urlencode({'q': query, 'per_page': 100})}")
        items = data.get("items") if isinstance(data, Mapping) else None
        if not isinstance(items, list):
            raise TrackerResponseError("GitHub search response did not contain an item list.")

        for item in items:
            if not isinstance(item, Mapping) or "pull_request" in item:
                continue
            candidate = str(item.get("title") or "").strip().lower()
            if candidate == wanted:
                issue = self._issue_from_payload(item)
                LOGGER.debug("Found issue #%d for title %r", issue.number, title)
                return issue
        return None

    def create_issue(self, repo: str, title: str, body: str, labels: Sequence[str]) -> Issue:
        payload = {"title": title, "body": body, "labels": list(labels)}
        data = self._request("POST", f"/repos/{repo}/issues", payload)
        issue = self._issue_from_payload(data)
        LOGGER.info("Created issue #%d %r in %s", issue.number, title, repo)
        return issue

    def comment_issue(self, repo: str, number: int, body: str) -> Dict[str, Any]:
        data = self._request("POST", f"/repos/{repo}/issues/{number}/comments", {"body": body})
        if not isinstance(data, dict):
            raise TrackerResponseError("GitHub comment response was not an object.")
        LOGGER.info("Commented on issue #%d in %s", number, repo)
        return data

    def tag_issue(self, repo: str, number: int, label: str) -> List[str]:
        data = self._request("POST", f"/repos/{repo}/issues/{number}/labels", {"labels": [label]})
        if not isinstance(data, list):
            raise TrackerResponseError("GitHub label response was not a list.")
        return [str(entry.get("name")) for entry in data if isinstance(entry, Mapping)]

    def get_file_url(self, repo: str, file: str, sha: str, line: int) -> str:
        return f"https://{self._host}/{repo}/blob/{sha}/{quote(file)}#L{line}"

    # -------------------------------------------------------------- plumbing
    def _request(self, method: str, path: str, payload: Optional[Dict[str, Any]] = None) -> Any:
        url = f"{self._api_url}{path}"
        try:
            raw = self._transport(method, url, payload)
        except TrackerError:
            raise
        except Exception as error:  # pragma: no cover - defensive path
            raise TrackerTransportError(f"Transport rejected the request: {error}") from error

        if not raw:
            return {}
        try:
            return json.loads(raw)
        except json.JSONDecodeError as error:
            raise TrackerResponseError(f"GitHub returned invalid JSON: {raw[:200]}") from error

    @staticmethod
    def _issue_from_payload(data: Any) -> Issue:
        if not isinstance(data, Mapping) or not isinstance(data.get("number"), int):
            raise TrackerResponseError("GitHub issue payload is missing a number.")
        labels = tuple(
            str(entry.get("name") if isinstance(entry, Mapping) else entry)
            for entry in data.get("labels") or []
        )
        return Issue(
            number=data["number"],
            title=str(data.get("title") or ""),
            labels=labels,
            url=data.get("html_url"),
        )

    def _http_transport(self, method: str, url: str, payload: Optional[Dict[str, Any]]) -> str:
        """Default HTTP transport built on ``urllib``."""
        import urllib.error
        import urllib.request

        data = json.dumps(payload).encode("utf-8") if payload is not None else None
        request = urllib.request.Request(
            url,
            data=data,
            headers={
                "Accept": "application/vnd.github+json",
                "Authorization": f"Bearer {self._token}",
                "Content-Type": "application/json",
                "User-Agent": "todo-sync/0.1",
                "X-GitHub-Api-Version": "2022-11-28",
            },
            method=method,
        )
        LOGGER.debug("%s %s", method, url)

        try:
            with urllib.request.urlopen(request, timeout=self._timeout) as response:
                raw = response.read()
        except TimeoutError as error:  # pragma: no cover - network-dependent
            raise TrackerTransportError(f"GitHub request timed out: {method} {url}") from error
        except urllib.error.HTTPError as error:  # pragma: no cover - network-dependent
            message = error.read().decode("utf-8", errors="ignore")
            raise TrackerTransportError(f"HTTP {error.code}: {message}") from error
        except urllib.error.URLError as error:  # pragma: no cover - network-dependent
            raise TrackerTransportError(f"Failed to reach GitHub: {error.reason}") from error

        return raw.decode("utf-8")
