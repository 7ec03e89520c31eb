from __future__ import annotations

from confweave.core.registry.rule_registry import RuleRegistry
from confweave.core.rules.builtin import register_builtin_rules
from confweave.core.rules.scopes import register_scope_rules


def register_default_rules(registry: RuleRegistry) -> RuleRegistry:
    register_scope_rules(registry)
    register_builtin_rules(registry)
    return registry


__all__ = ["register_builtin_rules", "register_default_rules", "register_scope_rules"]
