from __future__ import annotations

import logging
from typing import Any, Optional

from confweave.core.config.settings import DEFAULT_SETTINGS, EngineSettings
from confweave.core.context.context_stack import ContextFrame
from confweave.core.errors import ExpansionError
from confweave.core.expand.expander import ExpansionContext, expand_all
from confweave.core.expand.quit import ExpansionState, QuitTokens
from confweave.core.model import Tree, is_form, progn
from confweave.core.registry.rule_registry import RuleRegistry


logger = logging.getLogger(__name__)

# Used when the caller brings no factory, so tokens stay unique per process.
_DEFAULT_TOKENS = QuitTokens()


def expand_toplevel(
    registry: RuleRegistry,
    name: Any,
    body: list[Tree],
    *,
    settings: EngineSettings = DEFAULT_SETTINGS,
    tokens: Optional[QuitTokens] = None,
    lexical_binding: bool = True,
) -> Tree:
    """Expand one top-level invocation `(name, *body)` into host code.

    - If `name` is itself a form, it becomes the first body form and the
      name is derived from it through its rule's shorthand.
    - If the root rule (settings.root_rule) is registered, the body is
      wrapped in it, so `name` scopes everything below.
    - If any nested rule requested an early exit, the result is wrapped in
      one catch guard keyed to this invocation's token.
    """

    if not lexical_binding:
        raise ExpansionError(
            code="E_LEXICAL_BINDING",
            message="top-level setup requires lexical binding in the host",
            path=_describe(name),
        )

    forms = list(body)
    if is_form(name):
        forms = [name, *forms]
        name = derive_name(registry, name)

    if not isinstance(name, str) or not name:
        raise ExpansionError(
            code="E_INVALID_SETUP",
            message=f"setup name must be a non-empty string or a form, got {name!r}",
            path="name",
        )

    if settings.root_rule in registry:
        forms = [[settings.root_rule, name, *forms]]

    token = (tokens if tokens is not None else _DEFAULT_TOKENS).next(name)
    state = ExpansionState(quit_token=token)
    ctx = ExpansionContext(
        registry=registry,
        frame=ContextFrame().push([("quit", token)]),
        state=state,
        settings=settings,
    )

    expanded = expand_all(forms, ctx)
    logger.debug(
        "expanded setup %s (rules_applied=%d, guarded=%s)",
        name,
        state.rules_applied,
        state.need_guard,
        extra={"setup": name},
    )
    if state.need_guard:
        return state.guard(expanded)
    return progn(expanded)


def derive_name(registry: RuleRegistry, form: list[Any]) -> str:
    rule = registry.lookup(form[0])
    if rule is None or rule.shorthand is None:
        raise ExpansionError(
            code="E_NO_SHORTHAND",
            message=f"cannot derive a setup name from {form[0]}: rule has no shorthand",
            path=str(form[0]),
        )
    return rule.shorthand(form)


def _describe(name: Any) -> str:
    if is_form(name):
        return str(name[0])
    return str(name)
