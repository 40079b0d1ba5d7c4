"""Per-todo reconciliation against the issue tracker.

For each todo the engine decides between four actions:

* the todo references ``#N`` explicitly: comment on issue ``N``;
* the title is on the skip list: do nothing;
* an issue with the same title exists: comment on it and add the todo's label
  when missing (both calls run side by side and must both succeed);
* otherwise: create a new issue, optionally after asking the operator.
"""

from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from enum import Enum
from typing import Any, List, Optional

from .comments import build_comment_text
from .config import SyncConfig
from .confirm import ConfirmChoice, Confirmer, TerminalConfirmer
from .extraction import Todo
from .skiplist import SkipList, SkipListError
from .tools.vcs import GitRepository
from .trackers.base import Issue, IssueTracker

__all__ = ["ReconcileOutcome", "ReconcileResult", "Reconciler", "UserAbortError"]

LOGGER = logging.getLogger(__name__)


class UserAbortError(RuntimeError):
    """Raised when the operator aborts the run from the confirmation prompt."""

    def __init__(self, message: str = "User aborted") -> None:
        super().__init__(message)


class ReconcileOutcome(str, Enum):
    """What happened to a todo."""

    COMMENTED = "commented"
    CREATED = "created"
    SKIPPED = "skipped"
    IGNORED = "ignored"
    REMEMBERED = "remembered"


@dataclass(slots=True)
class ReconcileResult:
    """Outcome of one todo plus the tracker response, when there was one."""

    outcome: ReconcileOutcome
    response: Any = None
    issue: Optional[int] = None


class Reconciler:
    """Decide and perform the tracker action for each todo."""

    def __init__(
        self,
        repo: str,
        config: SyncConfig,
        *,
        tracker: IssueTracker,
        accessor: GitRepository,
        skip_list: Optional[SkipList] = None,
        confirmer: Optional[Confirmer] = None,
    ) -> None:
        self.repo = repo
        self.config = config
        self.tracker = tracker
        self.accessor = accessor
        self.skip_list = skip_list or SkipList(accessor)
        if confirmer is None and config.confirm_create:
            confirmer = TerminalConfirmer()
        self.confirmer = confirmer

    def reconcile(self, todo: Todo) -> ReconcileResult:
        if todo.issue:
            return self._comment(todo)

        if self.skip_list.contains(todo.title, case_sensitive=self.config.case_sensitive):
            LOGGER.debug("Skipping %r: listed in %s", todo.title, self.skip_list.path.name)
            return ReconcileResult(ReconcileOutcome.IGNORED)

        issue = self.tracker.find_issue_by_title(self.repo, todo.title)
        if issue is not None:
            todo.issue = issue.number
            return self._comment_and_tag(todo, issue)

        return self._create(todo)

    # --------------------------------------------------------------- actions
    def _body(self, todo: Todo) -> str:
        return build_comment_text(self.repo, todo, self.config, tracker=self.tracker, accessor=self.accessor)

    def _comment(self, todo: Todo) -> ReconcileResult:
        response = self.tracker.comment_issue(self.repo, todo.issue, self._body(todo))
        return ReconcileResult(ReconcileOutcome.COMMENTED, response, todo.issue)

    def _comment_and_tag(self, todo: Todo, issue: Issue) -> ReconcileResult:
        futures: List[Future[Any]] = []
        with ThreadPoolExecutor(max_workers=2, thread_name_prefix="todo-sync") as pool:
            futures.append(pool.submit(self._comment, todo))
            if todo.label not in issue.labels:
                LOGGER.debug("Tagging issue #%d with %r", issue.number, todo.label)
                futures.append(pool.submit(self.tracker.tag_issue, self.repo, issue.number, todo.label))
        # Leaving the pool waits for both calls; the first failure wins.
        results = [future.result() for future in futures]
        return results[0]

    def _create(self, todo: Todo) -> ReconcileResult:
        if self.config.confirm_create and self.confirmer is not None:
            choice = self.confirmer.confirm_create(todo.title, todo.file, todo.line)
            if choice is ConfirmChoice.ABORT:
                raise UserAbortError()
            if choice is ConfirmChoice.SKIP:
                return ReconcileResult(ReconcileOutcome.SKIPPED)
            if choice is ConfirmChoice.SKIP_AND_REMEMBER:
                try:
                    self.skip_list.remember(todo.title, case_sensitive=self.config.case_sensitive)
                except SkipListError as error:
                    LOGGER.warning("Failed adding %r to %s: %s", todo.title, self.skip_list.path.name, error)
                    return ReconcileResult(ReconcileOutcome.SKIPPED)
                return ReconcileResult(ReconcileOutcome.REMEMBERED)

        issue = self.tracker.create_issue(self.repo, todo.title, self._body(todo), [todo.label])
        return ReconcileResult(ReconcileOutcome.CREATED, issue, issue.number)
