"""Rule registry: named rules plus the wrappers installed around them."""
from __future__ import annotations

from confweave.core.registry.rule_registry import RuleRegistry

__all__ = ["RuleRegistry"]
