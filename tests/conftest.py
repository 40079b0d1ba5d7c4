from __future__ import annotations

import subprocess
import sys
import threading
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"

if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from todo_sync.config import SyncConfig, load_config  # noqa: E402
from todo_sync.tools.vcs import GitRepository  # noqa: E402
from todo_sync.trackers.base import Issue, IssueTracker, TrackerTransportError  # noqa: E402


class FakeTracker(IssueTracker):
    """In-memory tracker recording every mutating or lookup call."""

    name = "fake"

    def __init__(self, issues: Iterable[Issue] = ()) -> None:
        self.issues: List[Issue] = list(issues)
        self.calls: List[Tuple[Any, ...]] = []
        self.fail_on: set[str] = set()
        self._lock = threading.Lock()

    def _record(self, *call: Any) -> None:
        with self._lock:
            self.calls.append(call)
        if call[0] in self.fail_on:
            raise TrackerTransportError(f"{call[0]} failed")

    @property
    def call_names(self) -> List[str]:
        return [call[0] for call in self.calls]

    def find_issue_by_title(self, repo: str, title: str) -> Optional[Issue]:
        self._record("find", repo, title)
        return next((issue for issue in self.issues if issue.title == title), None)

    def create_issue(self, repo: str, title: str, body: str, labels: Sequence[str]) -> Issue:
        self._record("create", repo, title, body, list(labels))
        issue = Issue(number=len(self.issues) + 1, title=title, labels=tuple(labels))
        self.issues.append(issue)
        return issue

    def comment_issue(self, repo: str, number: int, body: str) -> Dict[str, Any]:
        self._record("comment", repo, number, body)
        return {"issue": number, "body": body}

    def tag_issue(self, repo: str, number: int, label: str) -> List[str]:
        self._record("tag", repo, number, label)
        return [label]

    def get_file_url(self, repo: str, file: str, sha: str, line: int) -> str:
        return f"https://example.test/{repo}/blob/{sha}/{file}#L{line}"


@pytest.fixture()
def tracker() -> FakeTracker:
    return FakeTracker()


@pytest.fixture()
def workspace(tmp_path: Path) -> GitRepository:
    """Working tree that passes as a repository without invoking git."""

    (tmp_path / ".git").mkdir()
    return GitRepository(tmp_path)


@pytest.fixture()
def make_config() -> Callable[..., SyncConfig]:
    """Build configs from file-style keys, non-interactive, without excerpts or signature by default."""

    def _make(**values: Any) -> SyncConfig:
        data: Dict[str, Any] = {"confirm-create": False, "context": 0, "signature": None}
        data.update({key.replace("_", "-"): value for key, value in values.items()})
        return load_config(None, data)

    return _make


@pytest.fixture()
def git_repo(tmp_path: Path) -> GitRepository:
    """Create a tiny git repository with one commit and an origin remote."""

    repo_root = tmp_path / "tiny-repo"
    repo_root.mkdir()

    def run_git(*cmd: str) -> None:
        subprocess.run(
            ["git", *cmd],
            cwd=repo_root,
            check=True,
            capture_output=True,
            text=True,
        )

    run_git("init")
    run_git("config", "user.email", "dev@example.com")
    run_git("config", "user.name", "Todo Sync")
    run_git("remote", "add", "origin", "git@github.com:acme/widgets.git")

    (repo_root / "app.py").write_text("def main():\n    return 1\n", encoding="utf-8")
    run_git("add", ".")
    run_git("commit", "-m", "Initial commit")

    return GitRepository(repo_root)
