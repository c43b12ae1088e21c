"""Components that change how their content is compiled."""

from typing import TYPE_CHECKING, Optional, Tuple

from hxwire.core import element
from hxwire.core.component import Component

if TYPE_CHECKING:
    from hxwire.runtime.page import Page


class AtPath(Component):
    """Compile ``content`` with the path prefix extended by ``segments``."""

    def __init__(self, content: Optional[Component], *segments: str):
        self.content = content
        self.segments: Tuple[str, ...] = segments

    def compile(self, page: "Page") -> Optional[element.Element]:
        return page.at_path(*self.segments).compile(self.content)


class AtData(Component):
    """Compile ``content`` with the data prefix extended by ``segments``."""

    def __init__(self, content: Optional[Component], *segments: str):
        self.content = content
        self.segments: Tuple[str, ...] = segments

    def compile(self, page: "Page") -> Optional[element.Element]:
        return page.at_data(*self.segments).compile(self.content)


class Mono(Component):
    """Compile ``content`` once and reuse the result wherever it is placed.

    Interactions inside the content are registered a single time; every
    placement renders the same element.
    """

    def __init__(self, content: Optional[Component]):
        self.content = content
        self.compiled = False
        self.element: Optional[element.Element] = None

    def compile(self, page: "Page") -> Optional[element.Element]:
        if not self.compiled:
            self.element = page.compile(self.content)
            self.compiled = True
        return self.element


class Compiled(Component):
    """A component wrapping an element that is already compiled."""

    def __init__(self, el: Optional[element.Element]):
        self.element = el

    def compile(self, page: "Page") -> Optional[element.Element]:
        return self.element
