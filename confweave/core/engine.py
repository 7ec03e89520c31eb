from __future__ import annotations

from typing import Any, Optional

from confweave.core.config.settings import DEFAULT_SETTINGS, EngineSettings
from confweave.core.context.context_stack import ContextFrame
from confweave.core.expand.expander import ExpansionContext, expand
from confweave.core.expand.quit import ExpansionState, QuitTokens
from confweave.core.expand.toplevel import expand_toplevel
from confweave.core.model import Tree
from confweave.core.registry.rule_registry import RuleRegistry
from confweave.core.rules import register_default_rules


class Engine:
    """A registry, its settings and the quit-token factory, owned together.

    Engine.default() comes with the built-in rules installed; Engine() starts
    from an empty registry.
    """

    def __init__(
        self,
        registry: Optional[RuleRegistry] = None,
        settings: EngineSettings = DEFAULT_SETTINGS,
    ) -> None:
        self.settings = settings
        if registry is None:
            registry = RuleRegistry(warn_on_redefine=settings.warn_on_redefine)
        self.registry = registry
        self.tokens = QuitTokens()

    @classmethod
    def default(cls, settings: EngineSettings = DEFAULT_SETTINGS) -> "Engine":
        engine = cls(settings=settings)
        register_default_rules(engine.registry)
        return engine

    def define(self, name: str, fn: Any, **options: Any) -> None:
        self.registry.define(name, fn, **options)

    def setup(self, name: Any, *body: Tree, lexical_binding: bool = True) -> Tree:
        return expand_toplevel(
            self.registry,
            name,
            list(body),
            settings=self.settings,
            tokens=self.tokens,
            lexical_binding=lexical_binding,
        )

    def expand(self, tree: Tree, frame: Optional[ContextFrame] = None) -> Tree:
        """Expand a single tree outside any top-level invocation.

        Early-exit requests made here are not guarded; use setup() for that.
        """
        ctx = ExpansionContext(
            registry=self.registry,
            frame=frame if frame is not None else ContextFrame(),
            state=ExpansionState(quit_token="expand--quit"),
            settings=self.settings,
        )
        return expand(tree, ctx)
