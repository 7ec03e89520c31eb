"""Scope rules: push context bindings and expand a body underneath them."""
from __future__ import annotations

from typing import Any, Callable

from confweave.core.config.settings import EngineSettings
from confweave.core.context.context_stack import (
    Binding,
    feature_bindings,
    hook_bindings,
    map_bindings,
    mode_bindings,
)
from confweave.core.errors import ExpansionError
from confweave.core.expand.expander import ExpansionContext
from confweave.core.model import Tree, progn
from confweave.core.registry.rule_registry import RuleRegistry


Derive = Callable[[str, EngineSettings], list[Binding]]


def scope_rule(rule: str, derive: Derive) -> Callable[..., Tree]:
    def expand(ctx: ExpansionContext, targets: Any, *body: Tree) -> Tree:
        values = targets if isinstance(targets, list) else [targets]
        out: list[Tree] = []
        for value in values:
            if not isinstance(value, str) or not value:
                raise ExpansionError(
                    code="E_ILLEGAL_ARGUMENTS",
                    message=f"illegal arguments: {rule} target must be a non-empty string, got {value!r}",
                    path=rule,
                )
            out.append(ctx.within(derive(value, ctx.settings)).expand_body(body))
        return progn(out)

    return expand


def register_scope_rules(registry: RuleRegistry) -> None:
    registry.define(
        ":with-feature",
        scope_rule(":with-feature", feature_bindings),
        indent=1,
        signature="(FEATURE-OR-LIST &rest BODY)",
        documentation="Expand BODY with feature, mode, map and hook taken from FEATURE.",
    )
    registry.define(
        ":with-mode",
        scope_rule(":with-mode", mode_bindings),
        indent=1,
        signature="(MODE-OR-LIST &rest BODY)",
        documentation="Expand BODY with mode, map and hook taken from MODE.",
    )
    registry.define(
        ":with-map",
        scope_rule(":with-map", map_bindings),
        indent=1,
        signature="(MAP-OR-LIST &rest BODY)",
        documentation="Expand BODY with MAP as the keymap.",
    )
    registry.define(
        ":with-hook",
        scope_rule(":with-hook", hook_bindings),
        indent=1,
        signature="(HOOK-OR-LIST &rest BODY)",
        documentation="Expand BODY with HOOK as the hook.",
    )
