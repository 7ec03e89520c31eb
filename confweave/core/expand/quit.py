from __future__ import annotations

import itertools
from dataclasses import dataclass
from typing import Any

from confweave.core.model import Tree


CATCH = "catch"
THROW = "throw"


@dataclass
class ExpansionState:
    """Shared by every nested expansion of one top-level invocation."""

    quit_token: str
    need_guard: bool = False
    rules_applied: int = 0

    def request_quit(self, value: Any = None) -> Tree:
        self.need_guard = True
        return [THROW, self.quit_token, value]

    def guard(self, forms: list[Tree]) -> list[Tree]:
        return [CATCH, self.quit_token, *forms]


class QuitTokens:
    """Deterministic token factory; one token per top-level invocation."""

    def __init__(self) -> None:
        self._counter = itertools.count(1)

    def next(self, name: str) -> str:
        return f"{name}--quit-{next(self._counter)}"
