"""Deterministic expansion engine.

Everything here is a pure tree transformation. Nothing is executed; the
produced host forms are handed back to the caller.
"""
from __future__ import annotations

from confweave.core.expand.expander import ExpansionContext, expand
from confweave.core.expand.setter import make_setter
from confweave.core.expand.toplevel import expand_toplevel

__all__ = ["ExpansionContext", "expand", "expand_toplevel", "make_setter"]
