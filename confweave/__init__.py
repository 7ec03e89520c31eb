"""confweave: compile declarative setup trees into host operations."""
from __future__ import annotations

from confweave.core.engine import Engine
from confweave.core.errors import ConfigLoadError, ExpansionError, RuleDefinitionError
from confweave.core.registry.rule_registry import RuleRegistry

__all__ = [
    "ConfigLoadError",
    "Engine",
    "ExpansionError",
    "RuleDefinitionError",
    "RuleRegistry",
]
