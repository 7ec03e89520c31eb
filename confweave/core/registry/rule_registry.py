from __future__ import annotations

import inspect
import logging
from typing import Any, Callable, Iterator, Optional, Union

from confweave.core.errors import RuleDefinitionError
from confweave.core.model import RuleDefinition, RuleOptions, is_rule_name
from confweave.core.registry.wrappers import RuleFn, deferred, positional_arity
from confweave.core.registry.wrappers import repeatable as chunked


logger = logging.getLogger(__name__)


class RuleRegistry:
    """Mapping of rule name -> RuleDefinition.

    Entries are only ever added or replaced, never removed. Redefining a name
    replaces the previous entry as a whole.
    """

    def __init__(self, *, warn_on_redefine: bool = False) -> None:
        self._rules: dict[str, RuleDefinition] = {}
        self.warn_on_redefine = warn_on_redefine

    def define(
        self,
        name: str,
        fn: RuleFn,
        *,
        indent: Optional[int] = None,
        after_loaded: bool = False,
        repeatable: Union[bool, int] = False,
        signature: Optional[str] = None,
        documentation: Optional[str] = None,
        shorthand: Optional[Callable[[list[Any]], str]] = None,
        debug: Optional[Any] = None,
    ) -> RuleDefinition:
        if not is_rule_name(name):
            raise RuleDefinitionError(
                code="E_RULE_NAME",
                message=f"rule name must be a keyword like ':name', got {name!r}",
                path=str(name),
            )

        options = RuleOptions(
            indent=indent,
            after_loaded=after_loaded,
            repeatable=repeatable,
            signature=signature,
            documentation=documentation if documentation is not None else _first_doc(fn),
            shorthand=shorthand,
            debug=debug,
        )

        installed = fn
        arity: Optional[int] = None
        if repeatable:
            arity = positional_arity(fn) if repeatable is True else int(repeatable)
            if arity < 1:
                raise RuleDefinitionError(
                    code="E_RULE_ARITY",
                    message=f"repeatable rule needs at least one argument, got arity={arity}",
                    path=name,
                )
            installed = chunked(installed, arity, rule=name)
        if after_loaded:
            installed = deferred(installed)

        definition = RuleDefinition(name=name, expander=installed, base=fn, options=options, arity=arity)
        if name in self._rules:
            if self.warn_on_redefine:
                logger.warning("redefining rule %s", name)
            else:
                logger.debug("redefining rule %s", name)
        self._rules[name] = definition
        return definition

    def rule(self, name: str, **options: Any) -> Callable[[RuleFn], RuleFn]:
        """Decorator form of define(); returns the undecorated function."""

        def decorate(fn: RuleFn) -> RuleFn:
            self.define(name, fn, **options)
            return fn

        return decorate

    def lookup(self, name: Any) -> Optional[RuleDefinition]:
        if not isinstance(name, str):
            return None
        return self._rules.get(name)

    def names(self) -> list[str]:
        return sorted(self._rules.keys())

    def __contains__(self, name: object) -> bool:
        return name in self._rules

    def __iter__(self) -> Iterator[RuleDefinition]:
        for name in self.names():
            yield self._rules[name]

    def __len__(self) -> int:
        return len(self._rules)


def _first_doc(fn: RuleFn) -> Optional[str]:
    doc = getattr(fn, "__doc__", None)
    if not doc:
        return None
    return inspect.cleandoc(doc)
