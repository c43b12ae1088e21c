"""HTML attribute sets."""

from typing import TYPE_CHECKING, Callable, Dict, Iterable, List, Optional, TextIO
from io import StringIO

if TYPE_CHECKING:
    from hxwire.runtime.page import Page


class Attributes:
    """Attribute name to value tokens.

    An empty token list renders as a bare attribute (``disabled``).
    Keys are always written in sorted order so identical components produce
    identical template text. Values are written as given: escaping is the
    caller's job.
    """

    def __init__(self, values: Optional[Dict[str, List[str]]] = None):
        self.values: Dict[str, List[str]] = {}
        if values:
            for name, tokens in values.items():
                self.values[name] = list(tokens)

    def get(self, name: str) -> Optional[str]:
        """Return the value of ``name`` if exactly one token is stored."""
        tokens = self.values.get(name)
        if tokens is None or len(tokens) != 1:
            return None
        return tokens[0]

    def set(self, name: str, value: str) -> "Attributes":
        """Append ``value`` to ``name``. Empty values are ignored."""
        if value:
            self.values.setdefault(name, []).append(value)
        return self

    def set_all(self, name: str, *values: str) -> "Attributes":
        if values:
            self.values.setdefault(name, []).extend(values)
        return self

    def extend(self, name: str, values: Iterable[str]) -> "Attributes":
        return self.set_all(name, *values)

    def flag(self, name: str, active: bool = True) -> "Attributes":
        """Make ``name`` a bare attribute when ``active``."""
        if active:
            self.values[name] = []
        return self

    def conditional(
        self,
        page: "Page",
        predicate: Callable[..., bool],
        attrs: "Attributes",
    ) -> "Attributes":
        """Include ``attrs`` only when ``predicate(request)`` is true.

        The predicate is registered in the page's template namespace and the
        check is written into the template, so it runs per request.
        """
        if attrs.is_empty():
            return self
        name = page.template.register(predicate)
        block = "{% if " + name + "(r) %}" + attrs.render() + "{% endif %}"
        self.values[block] = []
        return self

    def delete(self, name: str) -> "Attributes":
        self.values.pop(name, None)
        return self

    def copy(self) -> "Attributes":
        return Attributes(self.values)

    def is_empty(self) -> bool:
        return not self.values

    def __contains__(self, name: str) -> bool:
        return name in self.values

    def write(self, w: TextIO) -> None:
        for i, name in enumerate(sorted(self.values)):
            if i > 0:
                w.write(" ")
            w.write(name)
            tokens = self.values[name]
            if tokens:
                w.write('="')
                w.write(" ".join(tokens))
                w.write('"')

    def render(self) -> str:
        out = StringIO()
        self.write(out)
        return out.getvalue()

    def __str__(self) -> str:
        return self.render()

    def __repr__(self) -> str:
        return f"Attributes({self.values!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Attributes):
            return NotImplemented
        return self.values == other.values
