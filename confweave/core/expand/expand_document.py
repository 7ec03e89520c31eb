from __future__ import annotations

from typing import Any

import yaml

from confweave.core.engine import Engine


def expand_document(doc: dict[str, Any], engine: Engine) -> dict[str, Any]:
    """Return a new document with every setup expanded, in input order."""
    forms = [
        engine.setup(s["name"], *s["body"], lexical_binding=doc.get("lexical_binding", True))
        for s in doc.get("setups", [])
    ]
    return {"schema_version": doc.get("schema_version"), "forms": forms}


def dump_document_yaml(doc: dict[str, Any], path: str) -> None:
    with open(path, "w", encoding="utf-8") as f:
        yaml.safe_dump(doc, f, sort_keys=False, default_flow_style=None, allow_unicode=True)
