"""Sub-path switching and tabs."""

from dataclasses import dataclass
from typing import Dict, List, Optional

from markupsafe import escape

from hxwire.core import element
from hxwire.core.attributes import Attributes
from hxwire.core.component import LI, UL, A, Component, Div, Fragment, Nav, Raw
from hxwire.core.errors import ComponentError, MissingContentError, Validator
from hxwire.core.meta import Mono
from hxwire.core.template import Condition, Conditions
from hxwire.runtime.handler import is_request_at_path, set_header
from hxwire.runtime.page import Page


class Paths(Component):
    """Show one of several contents depending on the request path.

    Each key of ``paths`` is a sub-path of the current page. A full page
    load at ``/<key>`` renders that content inside the container; an htmx
    request to the same path returns just the content. With ``default``,
    a request matching no key loads the default sub-path on page load.
    """

    def __init__(
        self,
        id: str,
        paths: Dict[str, Component],
        default: str = "",
        replace_url: bool = True,
        classes: Optional[List[str]] = None,
        attrs: Optional[Attributes] = None,
    ):
        self.id = id
        self.paths = paths
        self.default = default
        self.replace_url = replace_url
        self.classes = classes or []
        self.attrs = attrs

    def compile(self, page: Page) -> Optional[element.Element]:
        Validator("paths").require_id(self.id).require(
            self.paths, MissingContentError("no paths")
        ).require(
            not self.default or self.default in self.paths,
            ComponentError(f"unknown default path {self.default!r}"),
        ).check()

        conditions = []
        for key in sorted(self.paths):
            sub = page.at_path(key)
            content = Mono(self.paths[key])
            # Registered first so the shared content compiles below ``sub``.
            if self.replace_url:
                sub.use(set_header("HX-Replace-Url", sub.path()))
            sub.add_interaction(content)
            conditions.append(Condition(is_request_at_path(sub.path()), content))

        if self.default:
            loader = Attributes()
            loader.set("hx-get", page.path(self.default))
            loader.set("hx-target", "#" + self.id).set("hx-trigger", "load")
            loader.set("hx-swap", "innerHTML")
            conditions.append(Condition(None, Div(attrs=loader)))

        attrs = self.attrs.copy() if self.attrs is not None else Attributes()
        attrs.set("id", self.id).set_all("class", *self.classes)
        return element.Labeled(
            "Paths",
            element.Tag("div", attrs, page.compile(Conditions(*conditions))),
            enclose=True,
        )


@dataclass
class Tab:
    path: str
    label: str
    content: Component


class Tabs(Component):
    """Navigation links above a :class:`Paths` container.

    The link of the current path gets ``aria-current="page"``.
    """

    def __init__(
        self,
        id: str,
        tabs: List[Tab],
        default: str = "",
        classes: Optional[List[str]] = None,
    ):
        self.id = id
        self.tabs = tabs
        self.default = default
        self.classes = classes or []

    def compile(self, page: Page) -> Optional[element.Element]:
        items = []
        for tab in self.tabs:
            path = page.path(tab.path)
            attrs = Attributes()
            attrs.set("hx-get", path).set("hx-target", "#" + self.id)
            attrs.set("hx-push-url", "true")
            attrs.conditional(
                page, is_request_at_path(path), Attributes().set("aria-current", "page")
            )
            items.append(LI(A(Raw(str(escape(tab.label))), href=path, attrs=attrs)))

        return page.compile(
            Fragment(
                Nav(UL(items=items), classes=self.classes),
                Paths(
                    self.id,
                    {tab.path: tab.content for tab in self.tabs},
                    default=self.default,
                ),
            )
        )

