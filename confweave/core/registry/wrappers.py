from __future__ import annotations

import inspect
from typing import Any, Callable

from confweave.core.errors import ExpansionError
from confweave.core.model import Tree, progn


RuleFn = Callable[..., Tree]

AFTER_LOAD = "after-load"


def positional_arity(fn: RuleFn) -> int:
    """Number of positional parameters after the leading context argument."""
    params = list(inspect.signature(fn).parameters.values())
    positional = [
        p
        for p in params
        if p.kind in (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)
    ]
    return max(len(positional) - 1, 0)


def chunk_arguments(args: list[Any], arity: int, *, rule: str | None = None) -> list[list[Any]]:
    if len(args) % arity != 0:
        raise ExpansionError(
            code="E_ILLEGAL_ARGUMENTS",
            message="illegal arguments",
            path=rule,
        )
    return [list(args[i : i + arity]) for i in range(0, len(args), arity)]


def repeatable(fn: RuleFn, arity: int, *, rule: str | None = None) -> RuleFn:
    """Apply fn to each consecutive group of `arity` arguments, in order."""

    def expand(ctx: Any, *args: Any) -> Tree:
        chunks = chunk_arguments(list(args), arity, rule=rule)
        return progn([fn(ctx, *chunk) for chunk in chunks])

    expand.__wrapped__ = fn  # type: ignore[attr-defined]
    return expand


def deferred(fn: RuleFn) -> RuleFn:
    """Run fn's output once the context feature has been loaded."""

    def expand(ctx: Any, *args: Any) -> Tree:
        return [AFTER_LOAD, ctx.get("feature"), fn(ctx, *args)]

    expand.__wrapped__ = fn  # type: ignore[attr-defined]
    return expand
