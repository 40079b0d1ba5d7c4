"""Unified diff reader producing the per-file line records a sync run consumes."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import List

__all__ = ["DiffLine", "FileDiff", "parse_unified_diff"]


@dataclass(slots=True)
class DiffLine:
    """Single line of a hunk.

    ``ln`` is the line number in the new file for added and context lines and
    in the old file for removed lines.
    """

    ln: int
    content: str
    add: bool = False
    delete: bool = False


@dataclass(slots=True)
class FileDiff:
    """Lines of one file in a diff, ``to`` being its path after the change."""

    to: str
    lines: List[DiffLine] = field(default_factory=list)

    @property
    def added_lines(self) -> List[DiffLine]:
        return [line for line in self.lines if line.add]


_HUNK_HEADER = re.compile(
    r"^@@ -(?P<old_start>\d+)(?:,(?P<old_count>\d+))? "
    r"\+(?P<new_start>\d+)(?:,(?P<new_count>\d+))? @@"
)


def _default_count(value: str | None) -> int:
    """Return the number of lines represented in a hunk header."""
    return int(value) if value is not None else 1


_C_ESCAPES = {"a": 7, "b": 8, "t": 9, "n": 10, "v": 11, "f": 12, "r": 13, '"': 34, "\\": 92}
_OCTAL_ESCAPE = re.compile(r"[0-7]{3}")


def _unquote_path(entry: str) -> str:
    """Undo git's C-style quoting of unusual paths (``core.quotepath``).

    Octal escapes are raw bytes of the UTF-8 encoded name.
    """
    if len(entry) < 2 or not (entry.startswith('"') and entry.endswith('"')):
        return entry
    body = entry[1:-1]
    raw = bytearray()
    index = 0
    while index < len(body):
        char = body[index]
        if char == "\\" and index + 1 < len(body):
            octal = _OCTAL_ESCAPE.match(body, index + 1)
            if octal:
                raw.append(int(octal.group(), 8) & 0xFF)
                index = octal.end()
                continue
            escaped = body[index + 1]
            if escaped in _C_ESCAPES:
                raw.append(_C_ESCAPES[escaped])
                index += 2
                continue
        raw.extend(char.encode("utf-8"))
        index += 1
    return raw.decode("utf-8", errors="replace")


def _normalise_diff_path(entry: str) -> str | None:
    """Translate a ``+++`` header operand into a repository-relative path."""
    entry = _unquote_path(entry.split("\t", 1)[0].strip())
    if entry == "/dev/null" or not entry:
        return None
    if entry.startswith("b/") or entry.startswith("a/"):
        entry = entry[2:]
    return entry or None


def parse_unified_diff(text: str) -> List[FileDiff]:
    """Parse ``git diff`` output into :class:`FileDiff` records.

    Files removed by the diff (``+++ /dev/null``) are left out since they have
    no new version to point at. Binary sections carry no hunks and produce
    files without lines.
    """

    files: List[FileDiff] = []
    current: FileDiff | None = None
    old_ln = new_ln = 0
    old_left = new_left = 0

    for raw in text.split("\n"):
        line = raw[:-1] if raw.endswith("\r") else raw
        if current is not None and (old_left > 0 or new_left > 0):
            if line.startswith("\\"):
                continue
            marker, content = line[:1], line[1:]
            if marker == "+":
                current.lines.append(DiffLine(ln=new_ln, content=content, add=True))
                new_ln += 1
                new_left -= 1
            elif marker == "-":
                current.lines.append(DiffLine(ln=old_ln, content=content, delete=True))
                old_ln += 1
                old_left -= 1
            else:
                current.lines.append(DiffLine(ln=new_ln, content=content))
                old_ln += 1
                new_ln += 1
                old_left -= 1
                new_left -= 1
            continue

        if line.startswith("diff --git "):
            current = None
            continue
        if line.startswith("+++ "):
            path = _normalise_diff_path(line[4:])
            current = FileDiff(to=path or "/dev/null")
            if path is not None:
                files.append(current)
            continue

        match = _HUNK_HEADER.match(line)
        if match and current is not None:
            old_ln = int(match.group("old_start"))
            new_ln = int(match.group("new_start"))
            old_left = _default_count(match.group("old_count"))
            new_left = _default_count(match.group("new_count"))

    return files
