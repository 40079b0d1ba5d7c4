"""Persistent list of todo titles the operator never wants turned into issues."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List

from .tools.vcs import GitRepository

__all__ = ["SKIP_FILE_NAME", "SkipList", "SkipListError"]

LOGGER = logging.getLogger(__name__)

SKIP_FILE_NAME = ".github-todos-ignore"


class SkipListError(RuntimeError):
    """Raised when the skip-list file cannot be read or written."""


def _fold(value: str, case_sensitive: bool) -> str:
    value = value.strip()
    return value if case_sensitive else value.casefold()


class SkipList:
    """Newline-separated ignore file kept at the repository root.

    Lookups and writes share one folding policy: titles are compared
    case-insensitively unless ``case_sensitive`` is requested.
    """

    def __init__(self, accessor: GitRepository, *, file_name: str = SKIP_FILE_NAME) -> None:
        self._accessor = accessor
        self._file_name = file_name

    @property
    def path(self) -> Path:
        return self._accessor.resolve_path(self._file_name)

    def read(self) -> List[str]:
        """Return the stored titles; a missing file means an empty list."""
        try:
            content = self._accessor.read_text(self._file_name)
        except FileNotFoundError:
            return []
        except (OSError, UnicodeDecodeError) as error:
            raise SkipListError(f"Failed to read {self.path}: {error}") from error
        return [entry.strip() for entry in content.split("\n") if entry.strip()]

    def contains(self, title: str, *, case_sensitive: bool = False) -> bool:
        wanted = _fold(str(title or ""), case_sensitive)
        return any(_fold(entry, case_sensitive) == wanted for entry in self.read())

    def remember(self, title: str, *, case_sensitive: bool = False) -> bool:
        """Append ``title`` unless already present. Returns ``True`` when written."""
        title = title.strip()
        entries = self.read()
        wanted = _fold(title, case_sensitive)
        if not title or any(_fold(entry, case_sensitive) == wanted for entry in entries):
            return False

        entries.append(title)
        try:
            self._accessor.write_text(self._file_name, "\n".join(entries) + "\n")
        except (OSError, UnicodeEncodeError) as error:
            raise SkipListError(f"Failed to write {self.path}: {error}") from error
        LOGGER.debug("Remembered %r in %s", title, self.path)
        return True
