"""Forward references to components compiled elsewhere in the tree."""

from typing import TYPE_CHECKING, Callable, List, Optional, TextIO

from hxwire.core import element
from hxwire.core.component import Component
from hxwire.core.errors import HxWireError, NotCompiledError, join_errors

if TYPE_CHECKING:
    from hxwire.runtime.page import Page

Callback = Callable[["Reference"], None]


class Reference(Component, element.Element):
    """A mutable box around a component.

    The first ``compile`` caches the element and the page it was compiled
    against; later compiles return the same reference. ``on_validate`` runs
    once, during the first validation, and is then dropped.
    """

    def __init__(self, target: Optional[Component], on_validate: Optional[Callback] = None):
        self.target = target
        self.on_validate = on_validate
        self.element: Optional[element.Element] = None
        self.page: Optional["Page"] = None
        self.compiled = False

    def compile(self, page: "Page") -> Optional[element.Element]:
        if not self.compiled:
            self.compiled = True
            self.page = page
            self.element = page.compile(self.target)
        return self

    def render(self, w: TextIO) -> None:
        if not self.compiled:
            w.write(str(NotCompiledError("reference rendered before compile")))
            return
        if self.element is not None:
            self.element.render(w)

    def validate(self) -> Optional[Exception]:
        if not self.compiled:
            return NotCompiledError("reference validated before compile")
        errors: List[Optional[Exception]] = []
        callback, self.on_validate = self.on_validate, None
        if callback is not None:
            try:
                callback(self)
            except HxWireError as err:
                errors.append(err)
        if self.element is not None:
            errors.append(self.element.validate())
        return join_errors(errors)

    def get_tags(self) -> List[element.Tag]:
        if self.element is None:
            return []
        return self.element.get_tags()

    def find_tag(self) -> element.Tag:
        if not self.compiled:
            raise NotCompiledError("reference inspected before compile")
        return super().find_tag()

    def id(self) -> str:
        """Return the tag's id, generating one if it has none."""
        tag = self.find_tag()
        current = tag.attrs.get("id")
        if current:
            return current
        assert self.page is not None
        new_id = self.page.generator.new_element_id()
        tag.attrs.delete("id").set("id", new_id)
        return new_id

    def __repr__(self) -> str:
        return f"Reference({self.target!r}, compiled={self.compiled})"
