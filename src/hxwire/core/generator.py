"""Deterministic identifier generation."""

import re
from typing import Any, Dict

_NON_IDENTIFIER = re.compile(r"[^0-9a-zA-Z_]+")

# Group used for generated element ids.
ELEMENT_GROUP = "hxwire"


def function_group(fn: Any) -> str:
    """Normalize a callable's qualified name into an id group.

    ``make.<locals>.<lambda>`` becomes ``make_lambda``.
    """
    name = getattr(fn, "__qualname__", None) or type(fn).__name__
    parts = []
    for part in name.split("."):
        if part == "<locals>":
            continue
        part = _NON_IDENTIFIER.sub("_", part).strip("_")
        if part:
            parts.append(part)
    group = "_".join(parts) or "func"
    if group[0].isdigit():
        group = "func_" + group
    return group


class Generator:
    """Per-group counters producing ``{group}_{n}`` names.

    Counters are shared by element ids and template function names, so the
    names a build produces depend on compile order.
    """

    def __init__(self) -> None:
        self.counters: Dict[str, int] = {}

    def new_id(self, group: str) -> str:
        n = self.counters.get(group, 0)
        self.counters[group] = n + 1
        return f"{group}_{n}"

    def new_element_id(self) -> str:
        return self.new_id(ELEMENT_GROUP)

    def new_function_id(self, fn: Any) -> str:
        return self.new_id(function_group(fn))
