"""Turn TODO comments added in a git diff into issue-tracker issues."""

from .config import SyncConfig, load_config
from .extraction import Todo, TriggerTable, extract_todo, is_code
from .pipeline import PipelineResult, collect_todos, from_diff
from .reconcile import ReconcileOutcome, ReconcileResult, Reconciler, UserAbortError
from .skiplist import SkipList, SkipListError

__all__ = [
    "PipelineResult",
    "ReconcileOutcome",
    "ReconcileResult",
    "Reconciler",
    "SkipList",
    "SkipListError",
    "SyncConfig",
    "Todo",
    "TriggerTable",
    "UserAbortError",
    "collect_todos",
    "extract_todo",
    "from_diff",
    "is_code",
    "load_config",
]
