"""Minimal git helpers
The helpers below provide just enough structure to locate the repository,
resolve and read working-tree files, and produce the diff and commit sha a
sync run works from.
"""

from __future__ import annotations

import re
import subprocess
from pathlib import Path
from typing import List, Sequence

__all__ = ["GitError", "GitRepository", "parse_remote_slug"]


class GitError(RuntimeError):
    """Raised when a git command fails or the repository cannot be used."""


_REMOTE_PATTERNS = (
    # git@github.com:owner/name.git, ssh://git@github.com/owner/name.git
    re.compile(r"^(?:ssh://)?[^@/]+@(?P<host>[^:/]+)[:/](?P<slug>[^/]+/[^/]+?)(?:\.git)?/?$"),
    # https://github.com/owner/name(.git)
    re.compile(r"^(?:https?|git)://(?:[^@/]+@)?(?P<host>[^/]+)/(?P<slug>[^/]+/[^/]+?)(?:\.git)?/?$"),
)


def parse_remote_slug(url: str) -> str | None:
    """Return the ``owner/name`` slug encoded in a remote URL, if any."""

    candidate = url.strip()
    for pattern in _REMOTE_PATTERNS:
        match = pattern.match(candidate)
        if match:
            return match.group("slug")
    return None


class GitRepository:
    """Lightweight wrapper around ``git`` commands."""

    def __init__(self, root: Path | str) -> None:
        self.root = Path(root).resolve()
        if not (self.root / ".git").exists():
            raise GitError(f"Not a git repository: {self.root}")

    @classmethod
    def discover(cls, start: Path | str | None = None) -> "GitRepository":
        """Locate the nearest git repository starting from ``start``."""

        path = Path(start or Path.cwd()).resolve()
        for candidate in (path, *path.parents):
            if (candidate / ".git").exists():
                return cls(candidate)
        raise GitError(f"Unable to locate a git repository from {path}")

    # ------------------------------------------------------------------ git IO
    def _run_git(self, args: Sequence[str], *, check: bool = True) -> subprocess.CompletedProcess[str]:
        command = ["git", *args]
        try:
            process = subprocess.run(
                command,
                cwd=self.root,
                capture_output=True,
                text=False,
                check=False,
            )
        except OSError as error:
            raise GitError(f"Unable to run git: {error}") from error
        stdout = process.stdout.decode("utf-8", errors="replace") if process.stdout else ""
        stderr = process.stderr.decode("utf-8", errors="replace") if process.stderr else ""
        result = subprocess.CompletedProcess(process.args, process.returncode, stdout, stderr)
        if check and result.returncode != 0:
            message = result.stderr.strip() or result.stdout.strip() or "unknown git error"
            raise GitError(f"git {' '.join(args)} failed: {message}")
        return result

    def git(self, *args: str, check: bool = True) -> subprocess.CompletedProcess[str]:
        """Execute ``git`` with ``args`` relative to the repository root."""

        return self._run_git(list(args), check=check)

    # ------------------------------------------------------------ file access
    def resolve_path(self, relative: Path | str) -> Path:
        """Return the absolute path of ``relative`` inside the working tree."""

        return self.root / Path(relative)

    def read_text(self, relative: Path | str) -> str:
        """Read a working-tree file as UTF-8 text.

        ``OSError`` (including ``FileNotFoundError``) propagates to the caller.
        """

        return self.resolve_path(relative).read_text(encoding="utf-8")

    def write_text(self, relative: Path | str, content: str) -> None:
        """Write ``content`` to a working-tree file, creating parent folders."""

        target = self.resolve_path(relative)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8")

    # ----------------------------------------------------------- revisions
    def rev_parse(self, revision: str = "HEAD") -> str:
        """Return the full sha ``revision`` points to."""

        result = self._run_git(["rev-parse", "--verify", f"{revision}^{{commit}}"], check=True)
        return result.stdout.strip()

    # ----------------------------------------------------------- diff helpers
    def diff(self, base: str, head: str | None = None, *paths: str) -> str:
        """Return the unified diff between ``base`` and ``head``.

        Without ``head`` the diff is taken against the working tree.
        """

        args: List[str] = ["-c", "core.quotepath=off", "diff", "--no-color", "--no-ext-diff", base]
        if head:
            args.append(head)
        if paths:
            args.extend(["--", *paths])
        result = self._run_git(args, check=True)
        return result.stdout

    # -------------------------------------------------------------- remotes
    def remote_url(self, remote: str = "origin") -> str | None:
        """Return the fetch URL configured for ``remote``."""

        result = self._run_git(["remote", "get-url", remote], check=False)
        if result.returncode != 0:
            return None
        url = result.stdout.strip()
        return url or None

    def remote_slug(self, remote: str = "origin") -> str | None:
        """Return the ``owner/name`` slug of ``remote`` when it can be parsed."""

        url = self.remote_url(remote)
        if url is None:
            return None
        return parse_remote_slug(url)
