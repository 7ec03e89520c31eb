from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Callable, Optional, Union


# A tree is either an atom or a form: a non-empty list headed by a str.
Tree = Any

CONTEXT_KEYS: frozenset[str] = frozenset({"feature", "mode", "map", "hook", "quit"})

RULE_NAME_RE = re.compile(r"^:[A-Za-z][A-Za-z0-9_-]*$")

QUOTE = "quote"
PROGN = "progn"


@dataclass(frozen=True)
class RuleOptions:
    indent: Optional[int] = None
    after_loaded: bool = False
    repeatable: Union[bool, int] = False
    signature: Optional[str] = None
    documentation: Optional[str] = None
    shorthand: Optional[Callable[[list[Any]], str]] = None
    debug: Optional[Any] = None


@dataclass(frozen=True)
class RuleDefinition:
    name: str
    expander: Callable[..., Tree]  # installed function, wrappers applied
    base: Callable[..., Tree]
    options: RuleOptions
    arity: Optional[int] = None

    @property
    def deferred(self) -> bool:
        return self.options.after_loaded

    @property
    def repeatable(self) -> bool:
        return bool(self.options.repeatable)

    @property
    def shorthand(self) -> Optional[Callable[[list[Any]], str]]:
        return self.options.shorthand


def is_form(tree: Tree) -> bool:
    return isinstance(tree, list) and len(tree) > 0 and isinstance(tree[0], str)


def is_rule_name(name: Any) -> bool:
    return isinstance(name, str) and RULE_NAME_RE.match(name) is not None


def progn(forms: list[Tree]) -> Tree:
    """Join forms into one sequential form; a single form stands for itself."""
    if len(forms) == 1:
        return forms[0]
    return [PROGN, *forms]
