"""Compiled, render-only element tree."""

from io import StringIO
from typing import List, Optional, Sequence, TextIO

from hxwire.core.attributes import Attributes
from hxwire.core.errors import (
    ElementError,
    enclose_path,
    join_errors,
    prepend_path,
)


class Element:
    """A resolved node that writes template source text.

    Rendering never mutates state, so an element may be rendered any number
    of times with the same result.
    """

    def render(self, w: TextIO) -> None:
        raise NotImplementedError

    def validate(self) -> Optional[Exception]:
        return None

    def get_tags(self) -> List["Tag"]:
        return []

    def find_tag(self) -> "Tag":
        """Return the single tag of this subtree."""
        tags = self.get_tags()
        if not tags:
            raise ElementError("no tag found")
        if len(tags) > 1:
            raise ElementError(f"expected one tag, found {len(tags)}")
        return tags[0]


def render_to_string(element: Optional[Element]) -> str:
    out = StringIO()
    if element is not None:
        element.render(out)
    return out.getvalue()


class Raw(Element):
    def __init__(self, text: str):
        self.text = text

    def render(self, w: TextIO) -> None:
        w.write(self.text)

    def __repr__(self) -> str:
        return f"Raw({self.text!r})"


class Error(Element):
    """Carries a compile failure through the tree until validation."""

    def __init__(self, error: Exception):
        self.error = error

    def render(self, w: TextIO) -> None:
        w.write(str(self.error))

    def validate(self) -> Optional[Exception]:
        return self.error

    def __repr__(self) -> str:
        return f"Error({self.error!r})"


class Tag(Element):
    def __init__(
        self,
        name: str,
        attrs: Optional[Attributes] = None,
        content: Optional[Element] = None,
    ):
        self.name = name
        self.attrs = attrs if attrs is not None else Attributes()
        self.content = content

    def render(self, w: TextIO) -> None:
        w.write("<")
        w.write(self.name)
        if not self.attrs.is_empty():
            w.write(" ")
            self.attrs.write(w)
        w.write(">")
        if self.content is not None:
            self.content.render(w)
        w.write("</")
        w.write(self.name)
        w.write(">")

    def validate(self) -> Optional[Exception]:
        errors = []
        if not self.name:
            errors.append(ElementError("missing tag name"))
        if self.content is not None:
            errors.append(prepend_path(self.content.validate(), self.name or "tag"))
        return join_errors(errors)

    def get_tags(self) -> List["Tag"]:
        return [self]

    def __repr__(self) -> str:
        return f"Tag({self.name!r}, {self.attrs!r}, {self.content!r})"


class Fragment(Element):
    def __init__(self, children: Sequence[Optional[Element]] = ()):
        self.children = [child for child in children if child is not None]

    def render(self, w: TextIO) -> None:
        for child in self.children:
            child.render(w)

    def validate(self) -> Optional[Exception]:
        return join_errors(child.validate() for child in self.children)

    def get_tags(self) -> List[Tag]:
        tags: List[Tag] = []
        for child in self.children:
            tags.extend(child.get_tags())
        return tags

    def __repr__(self) -> str:
        return f"Fragment({self.children!r})"


class Block(Element):
    """Template block around an element, e.g. ``{% if ... %}...{% endif %}``."""

    def __init__(self, start: str, content: Optional[Element], end: str = ""):
        self.start = start
        self.content = content
        self.end = end

    def render(self, w: TextIO) -> None:
        w.write(self.start)
        if self.content is not None:
            self.content.render(w)
        w.write(self.end)

    def validate(self) -> Optional[Exception]:
        if self.content is None:
            return None
        return self.content.validate()

    def get_tags(self) -> List[Tag]:
        if self.content is None:
            return []
        return self.content.get_tags()


class Labeled(Element):
    """Renders its content unchanged and names it in validation errors."""

    def __init__(self, label: str, content: Optional[Element], enclose: bool = False):
        self.label = label
        self.content = content
        self.enclose = enclose

    def render(self, w: TextIO) -> None:
        if self.content is not None:
            self.content.render(w)

    def validate(self) -> Optional[Exception]:
        if self.content is None:
            return None
        err = self.content.validate()
        if self.enclose:
            return enclose_path(err, self.label)
        return prepend_path(err, self.label)

    def get_tags(self) -> List[Tag]:
        if self.content is None:
            return []
        return self.content.get_tags()
