"""Template control-flow components.

Each component wraps compiled children in Jinja2 syntax. Functions are
registered in the page's template namespace and called with the request
(``fn(r)``) when the template executes.
"""

import re
from typing import TYPE_CHECKING, Any, Callable, List, Optional

from markupsafe import Markup

from hxwire.core import element
from hxwire.core.component import Component
from hxwire.core.errors import ComponentError, Validator

if TYPE_CHECKING:
    from hxwire.runtime.page import Page

Predicate = Callable[[Any], Any]

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


class Expression(Component):
    """Output a raw template expression: ``{{ text }}``."""

    def __init__(self, text: str):
        self.text = text

    def compile(self, page: "Page") -> Optional[element.Element]:
        if not self.text:
            raise ComponentError("empty expression")
        return element.Raw("{{ " + self.text + " }}")


class Value(Component):
    """Output a field of the current data value, autoescaped."""

    def __init__(self, *field: str):
        self.field = field

    def compile(self, page: "Page") -> Optional[element.Element]:
        return element.Raw("{{ " + page.data(*self.field) + " }}")


class Block(Component):
    """Wrap ``content`` in literal template tags."""

    def __init__(self, start: str, content: Optional[Component] = None, end: str = ""):
        self.start = start
        self.content = content
        self.end = end

    def compile(self, page: "Page") -> Optional[element.Element]:
        return element.Block(self.start, page.compile(self.content), self.end)


class Condition(Component):
    """Render ``content`` when ``predicate(request)`` is true.

    A ``None`` predicate renders ``content`` unconditionally; inside
    :class:`Conditions` it marks the else branch.
    """

    def __init__(self, predicate: Optional[Predicate], content: Optional[Component]):
        self.predicate = predicate
        self.content = content

    def compile(self, page: "Page") -> Optional[element.Element]:
        content = page.compile(self.content)
        if self.predicate is None:
            return content
        name = page.template.register(self.predicate)
        return element.Block("{% if " + name + "(r) %}", content, "{% endif %}")


class Conditions(Component):
    """If / elif / else chain.

    Every condition without a predicate is merged into one trailing else
    branch, in order. Conditions without content are skipped.
    """

    def __init__(self, *conditions: Condition):
        self.conditions = list(conditions)

    def compile(self, page: "Page") -> Optional[element.Element]:
        branches: List[element.Element] = []
        otherwise: List[Optional[element.Element]] = []
        for condition in self.conditions:
            if condition is None or condition.content is None:
                continue
            content = page.compile(condition.content)
            if condition.predicate is None:
                otherwise.append(content)
                continue
            name = page.template.register(condition.predicate)
            keyword = "if" if not branches else "elif"
            branches.append(
                element.Block("{% " + keyword + " " + name + "(r) %}", content)
            )

        if not branches:
            return element.Fragment(otherwise)
        if otherwise:
            branches.append(element.Block("{% else %}", element.Fragment(otherwise)))
        branches.append(element.Raw("{% endif %}"))
        return element.Fragment(branches)


class With(Component):
    """Bind ``data`` to ``fn(request)`` for the duration of ``content``.

    Inside the block field lookups (:class:`Value`, :class:`Range`) start
    from the loaded value.
    """

    def __init__(self, fn: Predicate, content: Optional[Component]):
        self.fn = fn
        self.content = content

    def compile(self, page: "Page") -> Optional[element.Element]:
        Validator("with").require_function(self.fn).check()
        name = page.template.register(self.fn)
        inner = page.rebase_data()
        return element.Block(
            "{% with " + inner.data_prefix + " = " + name + "(r) %}",
            inner.compile(self.content),
            "{% endwith %}",
        )


class Range(Component):
    """Render ``content`` for each item of a data field, or ``empty``."""

    def __init__(
        self,
        field: str,
        content: Optional[Component],
        empty: Optional[Component] = None,
    ):
        self.field = field
        self.content = content
        self.empty = empty

    def compile(self, page: "Page") -> Optional[element.Element]:
        inner = page.rebase_data()
        source = page.data(self.field)
        parts = [
            element.Block(
                "{% for " + inner.data_prefix + " in " + source + " %}",
                inner.compile(self.content),
            )
        ]
        if self.empty is not None:
            parts.append(element.Block("{% else %}", page.compile(self.empty)))
        parts.append(element.Raw("{% endfor %}"))
        return element.Fragment(parts)


class Variable(Component):
    """Assign ``fn(request)`` to a template variable."""

    def __init__(self, name: str, fn: Predicate):
        self.name = name
        self.fn = fn

    def compile(self, page: "Page") -> Optional[element.Element]:
        if not _IDENTIFIER.match(self.name or ""):
            raise ComponentError(f"invalid variable name {self.name!r}")
        if self.name in ("r", "request", "data"):
            raise ComponentError(f"variable name {self.name!r} is reserved")
        Validator("variable").require_function(self.fn).check()
        fn_name = page.template.register(self.fn)
        return element.Raw("{% set " + self.name + " = " + fn_name + "(r) %}")


class Dynamic(Component):
    """Insert HTML computed per request by ``fn(request)``.

    The returned text is inserted unescaped.
    """

    def __init__(self, fn: Callable[[Any], Any]):
        self.fn = fn

    def compile(self, page: "Page") -> Optional[element.Element]:
        Validator("dynamic").require_function(self.fn).check()
        fn = self.fn

        def render(r: Any) -> Markup:
            return Markup(fn(r))

        name = page.template.register(render, origin=fn)
        return element.Raw("{{ " + name + "(r) }}")
