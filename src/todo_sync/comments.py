"""Issue and comment bodies for todos."""

from __future__ import annotations

import re
from typing import List

from .config import SyncConfig
from .extraction import Todo
from .tools.vcs import GitRepository
from .trackers.base import IssueTracker

__all__ = ["ELLIPSIS", "SourceReadError", "build_comment_text", "extract_context", "split_source_lines"]

ELLIPSIS = "…"
_LINE_BREAK = re.compile(r"\r\n|\r|\n")


class SourceReadError(RuntimeError):
    """Raised when the file a todo points at cannot be read."""


def split_source_lines(content: str) -> List[str]:
    """Split ``content`` on any line ending, dropping blank leading/trailing lines."""
    lines = _LINE_BREAK.split(content)
    while lines and lines[-1] == "":
        lines.pop()
    while lines and lines[0] == "":
        lines.pop(0)
    return lines


def extract_context(lines: List[str], line: int, context: int) -> str:
    """Return lines ``line`` .. ``line + context`` (1-based, inclusive).

    An ellipsis line marks an excerpt that stops before the end of the file.
    """
    extract = "\n".join(lines[line - 1 : line + context])
    if line + context < len(lines):
        extract += f"\n{ELLIPSIS}"
    return extract


def build_comment_text(
    repo: str,
    todo: Todo,
    config: SyncConfig,
    *,
    tracker: IssueTracker,
    accessor: GitRepository,
) -> str:
    """Assemble the body used both for new issues and for comments."""
    url = tracker.get_file_url(repo, todo.file, todo.sha, todo.line)
    text = f"Ref. [{todo.file}:{todo.line}]({url})"

    if config.context > 0:
        try:
            content = accessor.read_text(todo.file)
        except (OSError, UnicodeDecodeError) as error:
            raise SourceReadError(f"Failed to read {todo.file}: {error}") from error
        extract = extract_context(split_source_lines(content), todo.line, config.context)
        text += f"\n\n```\n{extract}\n```\n"

    if config.signature:
        text += f"\n{config.signature}"

    return text
