"""Declarative components and HTML shorthands."""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, ClassVar, List, Optional, Sequence

from hxwire.core import element
from hxwire.core.attributes import Attributes
from hxwire.core.errors import ComponentError, prepend_path

if TYPE_CHECKING:
    from hxwire.runtime.page import Page


class Component:
    """A node of the user-authored tree.

    ``compile`` turns the component into an :class:`~hxwire.core.element.Element`
    and may register side effects (routes, middleware, template functions)
    on the page it is compiled against. Structural problems are raised as
    :class:`~hxwire.core.errors.HxWireError`; ``Page.compile`` turns them
    into error elements.
    """

    def compile(self, page: "Page") -> Optional[element.Element]:
        raise NotImplementedError


class Raw(Component):
    """Literal template text."""

    def __init__(self, text: str):
        self.text = text

    def compile(self, page: "Page") -> Optional[element.Element]:
        return element.Raw(self.text)

    def __repr__(self) -> str:
        return f"Raw({self.text!r})"


class Fragment(Component):
    """Children compiled in order. ``None`` children are skipped."""

    def __init__(self, *children: Optional[Component]):
        self.children = list(children)

    def compile(self, page: "Page") -> Optional[element.Element]:
        compiled = []
        for i, child in enumerate(self.children):
            if child is None:
                continue
            el = page.compile(child)
            if isinstance(el, element.Error):
                el = element.Error(prepend_path(el.error, f"[{i}]"))
            compiled.append(el)
        return element.Fragment(compiled)


class Tag(Component):
    """A generic HTML tag."""

    def __init__(
        self,
        name: str,
        attrs: Optional[Attributes] = None,
        content: Optional[Component] = None,
    ):
        self.name = name
        self.attrs = attrs
        self.content = content

    def compile(self, page: "Page") -> Optional[element.Element]:
        attrs = self.attrs.copy() if self.attrs is not None else Attributes()
        return element.Tag(self.name, attrs, page.compile(self.content))


@dataclass
class HTMLElement(Component):
    """Base for the shorthand tags. Subclasses set ``tag_name``."""

    content: Optional[Component] = None
    id: str = ""
    classes: List[str] = field(default_factory=list)
    attrs: Optional[Attributes] = None
    hidden: bool = False

    tag_name: ClassVar[str] = ""

    def build_attrs(self, page: "Page") -> Attributes:
        attrs = self.attrs.copy() if self.attrs is not None else Attributes()
        attrs.set("id", self.id)
        attrs.set_all("class", *self.classes)
        attrs.flag("hidden", self.hidden)
        return attrs

    def compile_content(self, page: "Page") -> Optional[element.Element]:
        return page.compile(self.content)

    def compile(self, page: "Page") -> Optional[element.Element]:
        return element.Tag(
            self.tag_name, self.build_attrs(page), self.compile_content(page)
        )


@dataclass
class Div(HTMLElement):
    tag_name: ClassVar[str] = "div"


@dataclass
class Span(HTMLElement):
    tag_name: ClassVar[str] = "span"


@dataclass
class P(HTMLElement):
    tag_name: ClassVar[str] = "p"


@dataclass
class Header(HTMLElement):
    tag_name: ClassVar[str] = "header"


@dataclass
class Footer(HTMLElement):
    tag_name: ClassVar[str] = "footer"


@dataclass
class Main(HTMLElement):
    tag_name: ClassVar[str] = "main"


@dataclass
class Section(HTMLElement):
    tag_name: ClassVar[str] = "section"


@dataclass
class Nav(HTMLElement):
    tag_name: ClassVar[str] = "nav"


@dataclass
class LI(HTMLElement):
    tag_name: ClassVar[str] = "li"


@dataclass
class Label(HTMLElement):
    for_: str = ""

    tag_name: ClassVar[str] = "label"

    def build_attrs(self, page: "Page") -> Attributes:
        return super().build_attrs(page).set("for", self.for_)


@dataclass
class Button(HTMLElement):
    """A ``type="button"`` button, so it never submits an enclosing form."""

    disabled: bool = False

    tag_name: ClassVar[str] = "button"

    def build_attrs(self, page: "Page") -> Attributes:
        attrs = super().build_attrs(page)
        attrs.delete("type").set("type", "button")
        return attrs.flag("disabled", self.disabled)


@dataclass
class A(HTMLElement):
    href: str = ""

    tag_name: ClassVar[str] = "a"

    def build_attrs(self, page: "Page") -> Attributes:
        return super().build_attrs(page).set("href", self.href)


@dataclass
class Img(HTMLElement):
    src: str = ""
    alt: str = ""

    tag_name: ClassVar[str] = "img"

    def build_attrs(self, page: "Page") -> Attributes:
        return super().build_attrs(page).set("src", self.src).set("alt", self.alt)


@dataclass
class Input(HTMLElement):
    type: str = "text"
    name: str = ""
    value: str = ""
    placeholder: str = ""
    disabled: bool = False

    tag_name: ClassVar[str] = "input"

    def build_attrs(self, page: "Page") -> Attributes:
        attrs = super().build_attrs(page)
        attrs.set("type", self.type).set("name", self.name).set("value", self.value)
        attrs.set("placeholder", self.placeholder)
        return attrs.flag("disabled", self.disabled)


@dataclass
class H(HTMLElement):
    """Heading ``h1`` to ``h6``."""

    level: int = 1

    def compile(self, page: "Page") -> Optional[element.Element]:
        if not 1 <= self.level <= 6:
            raise ComponentError(f"invalid heading level {self.level}")
        return element.Tag(
            f"h{self.level}", self.build_attrs(page), self.compile_content(page)
        )


@dataclass
class UL(HTMLElement):
    """Unordered list. ``items`` are compiled after ``content``."""

    items: Sequence[Component] = ()

    tag_name: ClassVar[str] = "ul"

    def compile_content(self, page: "Page") -> Optional[element.Element]:
        return page.compile(Fragment(self.content, *self.items))


@dataclass
class OL(UL):
    tag_name: ClassVar[str] = "ol"


class Document(Component):
    """A full HTML document."""

    def __init__(
        self,
        body: Optional[Component] = None,
        header: Optional[Component] = None,
        lang: str = "",
    ):
        self.body = body
        self.header = header
        self.lang = lang

    def compile(self, page: "Page") -> Optional[element.Element]:
        return element.Fragment(
            [
                element.Raw("<!DOCTYPE html>"),
                element.Tag(
                    "html",
                    Attributes().set("lang", self.lang),
                    element.Fragment(
                        [
                            element.Tag("head", None, page.compile(self.header)),
                            element.Tag("body", None, page.compile(self.body)),
                        ]
                    ),
                ),
            ]
        )
