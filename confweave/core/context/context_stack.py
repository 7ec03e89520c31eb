from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable

from confweave.core.config.settings import EngineSettings
from confweave.core.errors import ExpansionError
from confweave.core.model import CONTEXT_KEYS


Binding = tuple[str, Any]


@dataclass(frozen=True)
class ContextFrame:
    """Immutable binding list; the innermost binding comes first."""

    bindings: tuple[Binding, ...] = ()

    def push(self, bindings: Iterable[Binding]) -> "ContextFrame":
        new = tuple(bindings)
        for key, _ in new:
            if key not in CONTEXT_KEYS:
                raise ExpansionError(
                    code="E_CONTEXT_KEY",
                    message=f"unknown context key: {key} (choose one of: {', '.join(sorted(CONTEXT_KEYS))})",
                    path=key,
                )
        return ContextFrame(new + self.bindings)

    def lookup(self, key: str) -> tuple[bool, Any]:
        for k, v in self.bindings:
            if k == key:
                return True, v
        return False, None

    def get(self, key: str) -> Any:
        found, value = self.lookup(key)
        if not found:
            raise ExpansionError(
                code="E_CONTEXT",
                message=f"cannot deduce {key} from context",
                path=key,
            )
        return value

    def __contains__(self, key: object) -> bool:
        return any(k == key for k, _ in self.bindings)


def mode_bindings(mode: str, settings: EngineSettings) -> list[Binding]:
    return [
        ("mode", mode),
        ("hook", f"{mode}{settings.hook_suffix}"),
        ("map", f"{mode}{settings.map_suffix}"),
    ]


def feature_bindings(feature: str, settings: EngineSettings) -> list[Binding]:
    if feature.endswith(settings.mode_suffix):
        mode = feature
    else:
        mode = f"{feature}{settings.mode_suffix}"
    return [("feature", feature), *mode_bindings(mode, settings)]


def map_bindings(keymap: str, settings: EngineSettings) -> list[Binding]:
    return [("map", keymap)]


def hook_bindings(hook: str, settings: EngineSettings) -> list[Binding]:
    return [("hook", hook)]
