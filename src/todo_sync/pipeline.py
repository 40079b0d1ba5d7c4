"""Diff-to-issues pipeline: extract todos from a diff and reconcile them in order."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Iterable, List, Optional

from .config import SyncConfig
from .confirm import Confirmer
from .extraction import Todo, TriggerTable, extract_todo
from .reconcile import Reconciler, ReconcileResult
from .skiplist import SkipList
from .tools.diff import FileDiff
from .tools.vcs import GitRepository
from .trackers.base import IssueTracker

__all__ = ["PipelineResult", "ProgressCallback", "collect_todos", "from_diff"]

LOGGER = logging.getLogger(__name__)

ProgressCallback = Callable[[Optional[BaseException], Optional[ReconcileResult], Todo], None]


def _noop_progress(error: Optional[BaseException], result: Optional[ReconcileResult], todo: Todo) -> None:
    return None


@dataclass(slots=True)
class PipelineResult:
    """Per-todo results, in the same order as ``todos``."""

    results: List[ReconcileResult] = field(default_factory=list)
    todos: List[Todo] = field(default_factory=list)


def collect_todos(diff: Iterable[FileDiff], sha: str, table: TriggerTable) -> List[Todo]:
    """Flatten the added lines of ``diff`` into todos, file order then line order."""
    todos: List[Todo] = []
    for file_diff in diff:
        for line in file_diff.lines:
            if not line.add:
                continue
            match = extract_todo(line.content, table)
            if match is None or not match.title:
                continue
            todos.append(
                Todo(
                    file=file_diff.to,
                    sha=sha,
                    line=line.ln,
                    title=match.title,
                    label=match.label,
                    issue=match.issue,
                )
            )
    return todos


def from_diff(
    repo: str,
    diff: Iterable[FileDiff],
    sha: str,
    config: SyncConfig,
    *,
    tracker: IssueTracker,
    accessor: GitRepository,
    confirmer: Optional[Confirmer] = None,
    skip_list: Optional[SkipList] = None,
    on_progress: Optional[ProgressCallback] = None,
) -> PipelineResult:
    """Reconcile every todo found in ``diff`` against the tracker.

    Todos are handled one after another so that skip-list updates made for an
    earlier todo are visible to later ones. ``on_progress`` is called after
    each todo, with the error when it failed; the first error stops the run and
    is re-raised.
    """
    progress = on_progress or _noop_progress
    todos = collect_todos(diff, sha, TriggerTable.from_config(config))
    LOGGER.debug("Extracted %d todo(s) from diff at %s", len(todos), sha)

    reconciler = Reconciler(
        repo,
        config,
        tracker=tracker,
        accessor=accessor,
        skip_list=skip_list,
        confirmer=confirmer,
    )

    outcome = PipelineResult(todos=todos)
    for todo in todos:
        try:
            result = reconciler.reconcile(todo)
        except Exception as error:
            progress(error, None, todo)
            raise
        progress(None, result, todo)
        outcome.results.append(result)
    return outcome
