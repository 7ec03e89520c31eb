"""Engine settings.

Defaults live in DEFAULT_SETTINGS. A YAML file may override any subset:

  max_depth: 200
  mode_suffix: "-mode"
  warn_on_redefine: true
"""
from __future__ import annotations

from dataclasses import asdict, dataclass, replace
from pathlib import Path
from typing import Any

import yaml


@dataclass(frozen=True)
class EngineSettings:
    max_depth: int = 100
    root_rule: str = ":with-feature"
    mode_suffix: str = "-mode"
    map_suffix: str = "-map"
    hook_suffix: str = "-hook"
    warn_on_redefine: bool = False


DEFAULT_SETTINGS = EngineSettings()


class SettingsError(ValueError):
    pass


_STR_FIELDS = ("root_rule", "mode_suffix", "map_suffix", "hook_suffix")


def load_settings_file(path: str | Path) -> dict[str, Any]:
    """Load and validate a settings override file. Returns only the keys present."""
    p = Path(path)
    try:
        raw = yaml.safe_load(p.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise SettingsError(f"settings file is not valid YAML: {e}") from e
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise SettingsError("settings file must be a mapping")

    known = set(asdict(DEFAULT_SETTINGS).keys())
    out: dict[str, Any] = {}
    for k, v in raw.items():
        if k not in known:
            raise SettingsError(f"unknown setting: {k}")
        if k == "max_depth":
            if isinstance(v, bool) or not isinstance(v, int) or v < 1:
                raise SettingsError("max_depth must be a positive integer")
        elif k == "warn_on_redefine":
            if not isinstance(v, bool):
                raise SettingsError("warn_on_redefine must be a boolean")
        elif k in _STR_FIELDS:
            if not isinstance(v, str) or not v.strip():
                raise SettingsError(f"{k} must be a non-empty string")
        out[k] = v
    return out


def merged_settings(overrides: dict[str, Any] | None = None) -> EngineSettings:
    if not overrides:
        return DEFAULT_SETTINGS
    return replace(DEFAULT_SETTINGS, **overrides)


def load_and_merge(settings_file: str | None) -> EngineSettings:
    if not settings_file:
        return merged_settings()
    return merged_settings(load_settings_file(settings_file))
