from __future__ import annotations

from typing import Any, Callable

from confweave.core.errors import ExpansionError
from confweave.core.model import Tree


Reader = Callable[[str], Tree]
Writer = Callable[[str, Tree], Tree]

MODIFIERS = ("append", "prepend", "remove")

# Name of the let-bound variable holding the current value.
OLD = "old"


def make_setter(target: Any, value: Tree, reader: Reader, writer: Writer) -> Tree:
    """Build a read-modify-write expression for `target`.

    target is either a key (str) or a [modifier, key] pair:

    - append:  add value at the end unless already a member
    - prepend: add value at the front unless already a member
    - remove:  drop every element equal to value

    Membership and removal use the host's `member`/`remove`, which compare
    with structural equality, so duplicates are judged by value.
    """

    if isinstance(target, str):
        return writer(target, value)

    if (
        isinstance(target, list)
        and len(target) == 2
        and target[0] in MODIFIERS
        and isinstance(target[1], str)
    ):
        modifier, key = target
        if modifier == "remove":
            return writer(key, ["remove", value, reader(key)])

        old = ["var", OLD]
        if modifier == "append":
            extended = ["append", old, ["list", value]]
        else:
            extended = ["cons", value, old]
        return writer(
            key,
            ["let", [[OLD, reader(key)]], ["if", ["member", value, old], old, extended]],
        )

    raise ExpansionError(
        code="E_INVALID_OPTION",
        message=f"invalid option: {target!r}",
        path="target",
    )
