from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import yaml

from confweave.core.errors import ConfigLoadError


def load_config(path: str) -> dict[str, Any]:
    """Load a YAML/JSON setup document.

    Returns a dict with keys: schema_version, lexical_binding, setups.
    Each setup is checked for shape only; rules are resolved at expansion.
    """

    p = Path(path)
    if not p.exists():
        raise ConfigLoadError(
            code="E_FILE_NOT_FOUND",
            message="file does not exist",
            file=str(p),
        )

    suffix = p.suffix.lower()
    try:
        raw_text = p.read_text(encoding="utf-8")
    except Exception as e:  # pragma: no cover
        raise ConfigLoadError(code="E_FILE_READ", message=str(e), file=str(p)) from e

    try:
        if suffix in {".yaml", ".yml"}:
            data = yaml.safe_load(raw_text)
        elif suffix == ".json":
            data = json.loads(raw_text)
        else:
            raise ConfigLoadError(
                code="E_UNSUPPORTED_FORMAT",
                message="supported formats are .yaml/.yml and .json",
                file=str(p),
            )
    except ConfigLoadError:
        raise
    except Exception as e:
        code = "E_YAML_PARSE" if suffix in {".yaml", ".yml"} else "E_JSON_PARSE"
        raise ConfigLoadError(code=code, message=str(e), file=str(p)) from e

    if not isinstance(data, dict):
        raise ConfigLoadError(
            code="E_INVALID_TOP_LEVEL",
            message="top-level document must be a mapping/object",
            file=str(p),
        )

    return normalize_document(data, file=str(p))


def normalize_document(data: dict[str, Any], *, file: str | None = None) -> dict[str, Any]:
    lexical = data.get("lexical_binding", True)
    if not isinstance(lexical, bool):
        raise ConfigLoadError(
            code="E_INVALID_TOP_LEVEL",
            message="lexical_binding must be a boolean",
            file=file,
            path="lexical_binding",
        )

    setups = data.get("setups")
    if not isinstance(setups, list):
        raise ConfigLoadError(
            code="E_INVALID_TOP_LEVEL",
            message="setups is required and must be an array",
            file=file,
            path="setups",
        )

    normalized: list[dict[str, Any]] = []
    for i, raw in enumerate(setups):
        normalized.append(_normalize_setup(raw, file=file, path=f"setups[{i}]"))

    return {
        "schema_version": data.get("schema_version"),
        "lexical_binding": lexical,
        "setups": normalized,
        "__file__": file,
    }


def _normalize_setup(raw: Any, *, file: str | None, path: str) -> dict[str, Any]:
    if not isinstance(raw, dict):
        raise ConfigLoadError(code="E_INVALID_SETUP", message="setup must be an object", file=file, path=path)

    body = raw.get("body", [])
    if not isinstance(body, list):
        raise ConfigLoadError(
            code="E_INVALID_SETUP",
            message="body must be an array of forms",
            file=file,
            path=f"{path}.body",
        )

    name = raw.get("name")
    if name is None:
        # The name comes from the first form's shorthand.
        if not body or not _is_form(body[0]):
            raise ConfigLoadError(
                code="E_INVALID_SETUP",
                message="setup without a name must start with a form",
                file=file,
                path=f"{path}.name",
            )
        return {"name": body[0], "body": body[1:]}

    if not isinstance(name, str) or not name.strip():
        raise ConfigLoadError(
            code="E_INVALID_SETUP",
            message="name must be a non-empty string",
            file=file,
            path=f"{path}.name",
        )
    return {"name": name.strip(), "body": body}


def _is_form(v: Any) -> bool:
    return isinstance(v, list) and len(v) > 0 and isinstance(v[0], str)
