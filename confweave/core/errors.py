from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class ConfweaveError(Exception):
    """Base error envelope. The CLI prints these; library callers catch them."""

    code: str
    message: str
    file: Optional[str] = None
    path: Optional[str] = None

    def __str__(self) -> str:
        parts: list[str] = []
        if self.file:
            parts.append(self.file)
        if self.path:
            parts.append(self.path)
        loc = ":".join(parts) if parts else "<setup>"
        return f"{loc}: {self.code}: {self.message}"


class ConfigLoadError(ConfweaveError):
    pass


class RuleDefinitionError(ConfweaveError):
    pass


class ExpansionError(ConfweaveError):
    pass
