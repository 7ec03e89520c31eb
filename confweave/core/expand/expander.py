"""Fixed-point expander.

Every form whose head names a registered rule is replaced by that rule's
expansion, and the replacement is expanded again until no registered rule
remains reachable. Host forms keep their head and shape; only their children
are visited. Quoted forms are left alone.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Any, Iterable

from confweave.core.config.settings import DEFAULT_SETTINGS, EngineSettings
from confweave.core.context.context_stack import Binding, ContextFrame
from confweave.core.errors import ExpansionError
from confweave.core.expand.quit import ExpansionState
from confweave.core.model import QUOTE, Tree, is_form, progn
from confweave.core.registry.rule_registry import RuleRegistry


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExpansionContext:
    """What a rule sees while it expands: registry, frame and shared state."""

    registry: RuleRegistry
    frame: ContextFrame
    state: ExpansionState
    settings: EngineSettings = DEFAULT_SETTINGS
    depth: int = 0

    def get(self, key: str) -> Any:
        return self.frame.get(key)

    def within(self, bindings: Iterable[Binding]) -> "ExpansionContext":
        return replace(self, frame=self.frame.push(bindings))

    def quit(self, value: Any = None) -> Tree:
        return self.state.request_quit(value)

    def expand_body(self, body: Iterable[Tree]) -> Tree:
        return progn([expand(form, self) for form in body])


def expand(tree: Tree, ctx: ExpansionContext) -> Tree:
    if not is_form(tree):
        if isinstance(tree, list):
            return [expand(item, ctx) for item in tree]
        return tree

    head = tree[0]
    if head == QUOTE:
        return tree

    rule = ctx.registry.lookup(head)
    if rule is None:
        return [head, *[expand(child, ctx) for child in tree[1:]]]

    depth = ctx.depth + 1
    if depth > ctx.settings.max_depth:
        raise ExpansionError(
            code="E_EXPANSION_DEPTH",
            message=f"expansion exceeded max_depth={ctx.settings.max_depth}; does {head} reintroduce itself?",
            path=head,
        )

    inner = replace(ctx, depth=depth)
    ctx.state.rules_applied += 1
    logger.debug("expanding %s (depth=%d)", head, depth, extra={"rule": head})
    replacement = rule.expander(inner, *tree[1:])
    return expand(replacement, inner)


def expand_all(forms: Iterable[Tree], ctx: ExpansionContext) -> list[Tree]:
    return [expand(form, ctx) for form in forms]
