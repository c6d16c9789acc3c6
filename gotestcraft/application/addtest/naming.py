"""Identifier naming for generated receivers and test-case fields."""

from __future__ import annotations

from ...domain.models import ScaffoldField

# Loop variables used by the rendered test harness.
RESERVED_NAMES = frozenset({"t", "tt"})

COLLISION_PREFIXES = ("", "c", "c_", "i", "i_")

DEFAULT_RECEIVER_NAME = "r"


def receiver_var_name(recv_name: str, type_name: str) -> str:
    """
    Pick the local variable name for a method's receiver.

    Candidates, in order of preference: the declared receiver name, its first
    character, the first one and two characters of the type name and the
    type name's capitalized initials. The first candidate that is non-empty
    and not reserved once lower-cased wins; "r" otherwise.
    """
    candidates: list[str] = []
    if recv_name:
        candidates.extend([recv_name, recv_name[0]])
    if type_name:
        candidates.append(type_name[0])
        if len(type_name) >= 2:
            candidates.append(type_name[:2])
        candidates.append(
            "".join(ch for i, ch in enumerate(type_name) if i == 0 or ch.isupper())
        )

    for name in candidates:
        name = name.lower()
        if name and name not in RESERVED_NAMES:
            return name
    return DEFAULT_RECEIVER_NAME


def resolve_constructor_collisions(
    func_args: list[ScaffoldField], ctor_args: list[ScaffoldField]
) -> list[ScaffoldField]:
    """
    Prefix constructor argument names so none collides with a function argument.

    One prefix is applied to every named constructor argument at once. The
    prefixes "", "c", "c_", "i" and "i_" are tried in turn; when all of them
    collide, numbered prefixes "c2_", "c3_", ... are tried until one is free.
    """
    seen = {f.name for f in func_args if f.name}
    names = [f.name for f in ctor_args if f.name]

    prefix = _first_free_prefix(COLLISION_PREFIXES, names, seen)
    if prefix is None:
        n = 2
        while (prefix := _first_free_prefix((f"c{n}_",), names, seen)) is None:
            n += 1

    if not prefix:
        return list(ctor_args)
    return [
        f.model_copy(update={"name": prefix + f.name}) if f.name else f
        for f in ctor_args
    ]


def _first_free_prefix(
    prefixes: tuple[str, ...], names: list[str], seen: set[str]
) -> str | None:
    for prefix in prefixes:
        if not any(prefix + name in seen for name in names):
            return prefix
    return None
