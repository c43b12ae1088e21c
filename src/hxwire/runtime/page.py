"""Compilation context: path and data prefixes, shared build state, routing index."""

import json
import logging
from typing import Any, Callable, Dict, List, Optional

from jinja2 import TemplateError

from hxwire.core.element import Element, Error, render_to_string
from hxwire.core.errors import (
    BuildError,
    DuplicateInteractionError,
    HxWireError,
    join_errors,
)
from hxwire.core.generator import Generator
from hxwire.runtime.handler import (
    Endpoint,
    Middleware,
    TemplateHandler,
    chain,
    handle,
)
from hxwire.runtime.template import TemplateBuilder

logger = logging.getLogger(__name__)

# Every path template starts by binding the request to ``r``; template
# functions are always called as ``fn(r)``.
TEMPLATE_PREAMBLE = "{% set r = request %}"

DATA_ROOT = "data"


class PathEntry:
    """Everything registered at one path."""

    def __init__(self) -> None:
        self.elements: List[Element] = []
        self.interaction: Optional[Element] = None
        self.has_interaction = False
        self.out_of_band: List[Element] = []
        self.middleware: List[Middleware] = []
        self.handler: Optional[Endpoint] = None

    def all_elements(self) -> List[Element]:
        elements = list(self.elements)
        if self.interaction is not None:
            elements.append(self.interaction)
        elements.extend(self.out_of_band)
        return elements

    def render(self) -> str:
        return TEMPLATE_PREAMBLE + "".join(
            render_to_string(el) for el in self.all_elements()
        )


Index = Dict[str, PathEntry]


class Page:
    """Context a component tree is compiled against.

    A page carries the current path prefix (where routes registered now are
    mounted) and data prefix (where template lookups read request data).
    ``at_path``/``at_data`` fork the page; forks share the generator, the
    template builder and the routing index, so ids and routes stay unique
    across the whole tree.
    """

    def __init__(
        self,
        path_prefix: str = "/",
        data_prefix: str = DATA_ROOT,
        generator: Optional[Generator] = None,
        template: Optional[TemplateBuilder] = None,
        index: Optional[Index] = None,
    ):
        self.path_prefix = path_prefix
        self.data_prefix = data_prefix
        self.generator = generator if generator is not None else Generator()
        self.template = (
            template if template is not None else TemplateBuilder(self.generator)
        )
        self.index: Index = index if index is not None else {}

    def __repr__(self) -> str:
        return f"Page(path_prefix={self.path_prefix!r}, data_prefix={self.data_prefix!r})"

    # Prefixes

    def path(self, *segments: str) -> str:
        """Absolute path of ``segments`` below the current prefix."""
        parts = [s.strip("/") for s in segments if s.strip("/")]
        if not parts:
            return self.path_prefix
        return self.path_prefix.rstrip("/") + "/" + "/".join(parts)

    def data(self, *segments: str) -> str:
        """Template expression for ``segments`` below the current data prefix.

        Keys are emitted as subscripts (``data["items"]``) so that Jinja
        looks them up before attributes such as ``dict.items``. Dotted
        segments are split into one subscript per key.
        """
        keys = [key for segment in segments for key in segment.split(".") if key]
        return self.data_prefix + "".join("[" + json.dumps(key) + "]" for key in keys)

    def _fork(self, path_prefix: str, data_prefix: str) -> "Page":
        return Page(
            path_prefix=path_prefix,
            data_prefix=data_prefix,
            generator=self.generator,
            template=self.template,
            index=self.index,
        )

    def at_path(self, *segments: str) -> "Page":
        return self._fork(self.path(*segments), self.data_prefix)

    def at_data(self, *segments: str) -> "Page":
        return self._fork(self.path_prefix, self.data(*segments))

    def rebase_data(self, prefix: str = DATA_ROOT) -> "Page":
        """Fork with the data prefix replaced, e.g. inside ``with``/``for``."""
        return self._fork(self.path_prefix, prefix)

    # Compilation

    def compile(self, component: Any) -> Optional[Element]:
        """Compile ``component`` against this page.

        Structural errors become :class:`~hxwire.core.element.Error`
        elements so the rest of the tree still compiles.
        """
        if component is None:
            return None
        try:
            return component.compile(self)
        except HxWireError as err:
            logger.debug("compile error at %s: %s", self.path_prefix, err)
            return Error(err)

    def entry(self) -> PathEntry:
        """Index entry of the current path, created on first use."""
        entry = self.index.get(self.path_prefix)
        if entry is None:
            entry = PathEntry()
            self.index[self.path_prefix] = entry
        return entry

    def add(self, component: Any) -> Optional[Element]:
        el = self.compile(component)
        if el is not None:
            self.entry().elements.append(el)
        return el

    def add_interaction(self, component: Any) -> Optional[Element]:
        """Register the single interaction served at the current path."""
        entry = self.entry()
        if entry.has_interaction or entry.handler is not None:
            raise DuplicateInteractionError(
                f"interaction already registered at {self.path_prefix}"
            )
        entry.has_interaction = True
        entry.interaction = self.compile(component)
        return entry.interaction

    def add_out_of_band(self, component: Any) -> Optional[Element]:
        el = self.compile(component)
        if el is not None:
            self.entry().out_of_band.append(el)
        return el

    def add_handler(self, endpoint: Endpoint) -> None:
        """Mount a raw endpoint at the current path instead of a template."""
        entry = self.entry()
        if entry.has_interaction or entry.handler is not None:
            raise DuplicateInteractionError(
                f"interaction already registered at {self.path_prefix}"
            )
        entry.handler = endpoint

    def use(self, *middleware: Middleware) -> "Page":
        self.entry().middleware.extend(middleware)
        return self

    def handle(self, fn: Callable[..., Any]) -> "Page":
        return self.use(handle(fn))

    # Build

    def validate(self) -> Optional[Dict[str, Exception]]:
        """Validate every registered path.

        Validation runs deferred reference callbacks, which may register new
        paths or elements; the walk repeats until nothing new shows up.
        """
        errors: Dict[str, List[Exception]] = {}
        seen: Dict[str, set] = {}
        changed = True
        while changed:
            changed = False
            for path in sorted(self.index):
                done = seen.setdefault(path, set())
                for el in self.index[path].all_elements():
                    if id(el) in done:
                        continue
                    done.add(id(el))
                    changed = True
                    err = el.validate()
                    if err is not None:
                        errors.setdefault(path, []).append(err)
        if not errors:
            return None
        return {path: join_errors(errs) for path, errs in errors.items()}

    def render(self) -> Dict[str, str]:
        """Template source of every path that renders a template."""
        return {
            path: self.index[path].render()
            for path in sorted(self.index)
            if self.index[path].handler is None
        }

    def build(self, debug: bool = False) -> Dict[str, Endpoint]:
        """Validate, parse and wrap every path. Returns ``{path: endpoint}``."""
        errors = self.validate()
        if errors:
            lines = [f"{path}: {err}" for path, err in sorted(errors.items())]
            raise BuildError("invalid component tree\n" + "\n".join(lines), errors)

        endpoints: Dict[str, Endpoint] = {}
        for path in sorted(self.index):
            entry = self.index[path]
            if entry.handler is not None:
                endpoint = entry.handler
            else:
                name = self.generator.new_id("template")
                try:
                    template = self.template.add(name, entry.render())
                except TemplateError as err:
                    raise BuildError(f"{path}: failed to parse template: {err}") from err
                endpoint = TemplateHandler(template, name, debug=debug)
            endpoints[path] = chain(endpoint, entry.middleware)
            logger.debug(
                "mounted %s (%d middleware)", path, len(entry.middleware)
            )
        return endpoints
