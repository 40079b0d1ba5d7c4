"""Marker extraction: added diff lines -> todo records.

A line yields a todo when one of the configured triggers occurs in it and the
text following the trigger reads like a human title rather than code.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any, Iterator, List, Mapping, Optional, Pattern, Tuple

__all__ = [
    "CODE_SYMBOL_RATIO",
    "Todo",
    "TodoMatch",
    "TriggerTable",
    "extract_todo",
    "is_code",
]

LOGGER = logging.getLogger(__name__)

# Above this share of symbol characters a title is treated as code.
CODE_SYMBOL_RATIO = 0.20

# Not whitespace, not ASCII alphanumeric, not an accented latin letter.
_SYMBOL_PATTERN: Pattern[str] = re.compile(r"[^\sa-z0-9à-ü]", re.IGNORECASE)
_ISSUE_REF_PATTERN: Pattern[str] = re.compile(r"^\s*#(?P<number>\d+)\s+")


@dataclass(slots=True)
class Todo:
    """Candidate tracker action extracted from one added diff line."""

    file: str
    sha: str
    line: int
    title: str
    label: str
    issue: Optional[int] = None


@dataclass(slots=True, frozen=True)
class TodoMatch:
    """Title, label and optional issue reference found on a single line."""

    title: str
    label: str
    issue: Optional[int] = None


class TriggerTable:
    """Ordered trigger -> label table; the first trigger found on a line wins."""

    def __init__(self, triggers: Mapping[str, str], *, case_sensitive: bool = False) -> None:
        flags = 0 if case_sensitive else re.IGNORECASE
        self.case_sensitive = case_sensitive
        self._entries: List[Tuple[str, str, Pattern[str]]] = [
            (trigger, label, re.compile(re.escape(trigger), flags))
            for trigger, label in triggers.items()
            if trigger and label
        ]

    @classmethod
    def from_config(cls, config: Any) -> "TriggerTable":
        """Build the table from a :class:`~todo_sync.config.SyncConfig`."""
        return cls(config.trigger_table(), case_sensitive=config.case_sensitive)

    def __iter__(self) -> Iterator[Tuple[str, str]]:
        for trigger, label, _ in self._entries:
            yield trigger, label

    def __len__(self) -> int:
        return len(self._entries)

    def search(self, content: str) -> Optional[Tuple[str, str]]:
        """Return ``(label, text after trigger)`` for the first matching trigger."""
        for _, label, pattern in self._entries:
            match = pattern.search(content)
            if match:
                return label, content[match.end():]
        return None


def is_code(text: str) -> bool:
    """Return ``True`` when ``text`` looks more like code than a sentence."""
    if not text:
        return False
    symbols = sum(1 for character in text if _SYMBOL_PATTERN.match(character))
    return symbols / len(text) > CODE_SYMBOL_RATIO


def extract_todo(content: Any, table: TriggerTable) -> Optional[TodoMatch]:
    """Extract a todo from a single line of content.

    Returns ``None`` when no trigger occurs, when the remaining text is empty or
    looks like code, or when ``content`` is not a string.
    """
    if not isinstance(content, str):
        return None

    found = table.search(content)
    if found is None:
        return None

    label, remainder = found
    title = remainder.strip()
    if not title or is_code(title):
        LOGGER.debug("Discarding marker without a usable title: %r", content)
        return None

    issue: Optional[int] = None
    reference = _ISSUE_REF_PATTERN.match(title)
    if reference:
        issue = int(reference.group("number")) or None
        title = title[reference.end():].strip()
        if not title:
            return None

    return TodoMatch(title=title, label=label, issue=issue)
