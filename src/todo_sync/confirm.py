"""Operator confirmation before a new issue is opened."""

from __future__ import annotations

from enum import Enum
from typing import Iterable, List, Tuple

import typer

__all__ = ["ConfirmChoice", "Confirmer", "ScriptedConfirmer", "TerminalConfirmer"]


class ConfirmChoice(str, Enum):
    """Answers accepted by the create-issue gate."""

    CREATE = "create"
    SKIP = "skip"
    SKIP_AND_REMEMBER = "skip_and_remember"
    ABORT = "abort"


class Confirmer:
    """Capability consulted before creating an issue."""

    def confirm_create(self, title: str, file: str, line: int) -> ConfirmChoice:
        raise NotImplementedError("Subclasses must implement confirm_create().")


_KEYS = {
    "y": (ConfirmChoice.CREATE, "Create issue"),
    "n": (ConfirmChoice.SKIP, "Do not create issue"),
    "r": (ConfirmChoice.SKIP_AND_REMEMBER, "Do not create issue and remember for next times"),
    "q": (ConfirmChoice.ABORT, "Abort"),
}


class TerminalConfirmer(Confirmer):
    """Ask on the terminal with single-letter answers (``y/n/r/q``)."""

    def __init__(self, default: str = "y") -> None:
        self._default = default

    def confirm_create(self, title: str, file: str, line: int) -> ConfirmChoice:
        message = f'Create new issue "{title}" ({file}:{line}) [y,n,r,q,h]'
        while True:
            answer = str(typer.prompt(message, default=self._default)).strip().lower()
            if answer in _KEYS:
                return _KEYS[answer][0]
            for key, (_, help_text) in _KEYS.items():
                typer.echo(f"  {key}) {help_text}")


class ScriptedConfirmer(Confirmer):
    """Replay a fixed sequence of answers; ``fallback`` once they run out."""

    def __init__(
        self,
        answers: Iterable[ConfirmChoice | str] = (),
        *,
        fallback: ConfirmChoice = ConfirmChoice.SKIP,
    ) -> None:
        self._answers: List[ConfirmChoice] = [ConfirmChoice(answer) for answer in answers]
        self._fallback = fallback
        self.calls: List[Tuple[str, str, int]] = []

    def confirm_create(self, title: str, file: str, line: int) -> ConfirmChoice:
        self.calls.append((title, file, line))
        if self._answers:
            return self._answers.pop(0)
        return self._fallback
