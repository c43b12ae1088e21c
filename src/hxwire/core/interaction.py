"""Interactions: triggers that swap server-rendered content into targets.

An :class:`Interaction` is built before the tree is compiled::

    inc = Interaction("inc")
    page = Fragment(
        inc.swap(Div(Raw("0"))),
        inc.trigger(Button(Raw("+"))),
    )

Compiling places the swap target and the trigger wherever they appear.
Wiring happens when the tree is validated: the target gets an id, the
interaction route (``<target path>/inc``) is registered with the swap
content, and each trigger is pointed at that route.
"""

import json
from enum import Enum
from typing import (
    TYPE_CHECKING,
    Any,
    Callable,
    Dict,
    List,
    Optional,
    TextIO,
    Union,
)

from markupsafe import escape

from hxwire.core import element
from hxwire.core.component import Component
from hxwire.core.errors import (
    DuplicateError,
    HxWireError,
    MissingContentError,
    MissingTargetError,
    NotCompiledError,
    join_errors,
    prepend_path,
)
from hxwire.core.meta import Compiled
from hxwire.core.reference import Reference
from hxwire.runtime.handler import set_header

if TYPE_CHECKING:
    from hxwire.runtime.page import Page


class SwapMethod(str, Enum):
    """htmx swap strategies."""

    INNER_HTML = "innerHTML"
    OUTER_HTML = "outerHTML"
    AFTER_BEGIN = "afterbegin"
    BEFORE_BEGIN = "beforebegin"
    AFTER_END = "afterend"
    BEFORE_END = "beforeend"
    DELETE = "delete"
    NONE = "none"

    # Aliases
    PREPEND = "afterbegin"
    APPEND = "beforeend"


HTTP_METHODS = ("get", "post", "put", "patch", "delete")


class Interaction:
    """A named group of triggers and swaps.

    Only the last swap is answered in-band; earlier swaps are sent as
    out-of-band updates in the same response.
    """

    def __init__(
        self,
        name: str,
        method: str = "post",
        push_url: Optional[str] = None,
    ):
        if method.lower() not in HTTP_METHODS:
            raise ValueError(f"unsupported method {method!r}")
        self.name = name
        self.method = method.lower()
        self.push_url = push_url
        self.triggers: List["Trigger"] = []
        self.swaps: List["Swap"] = []
        self.page: Optional["Page"] = None

    def __repr__(self) -> str:
        return f"Interaction({self.name!r})"

    def trigger(
        self,
        component: Component,
        event: str = "",
        include: str = "",
        vals: Optional[Dict[str, Any]] = None,
    ) -> "Trigger":
        """Wrap the component whose event fires this interaction."""
        trigger = Trigger(self, component, event=event, include=include, vals=vals)
        self.triggers.append(trigger)
        return trigger

    def swap(
        self,
        target: Optional[Component] = None,
        content: Optional[Component] = None,
        method: Union[SwapMethod, str] = SwapMethod.OUTER_HTML,
        out_of_band: bool = False,
    ) -> "Swap":
        """Replace ``target`` with ``content``.

        Without ``content`` the target is re-rendered in place.
        """
        swap = Swap(self, method=method, out_of_band=out_of_band)
        self.swaps.append(swap)
        if target is not None and content is None:
            swap.update(target)
        else:
            if target is not None:
                swap.target(target)
            if content is not None:
                swap.content(content)
        return swap

    def action(
        self,
        handler: Callable[..., Any],
        target: Optional[Component] = None,
        content: Optional[Component] = None,
        method: Union[SwapMethod, str] = SwapMethod.OUTER_HTML,
        out_of_band: bool = False,
    ) -> "Swap":
        """A swap that runs ``handler(request)`` before rendering.

        A dict returned by the handler is merged into the request data.
        """
        swap = self.swap(target, content, method=method, out_of_band=out_of_band)
        swap.handler = handler
        return swap

    def route(self, target_page: "Page") -> "Page":
        """Page of the interaction route, opened on first use."""
        if self.page is None:
            self.page = target_page.at_path(self.name)
        return self.page

    def check_swaps(self, trigger: "Trigger") -> None:
        errors: List[Optional[Exception]] = []
        if not self.swaps:
            errors.append(MissingTargetError("no swap registered"))
        for i, swap in enumerate(self.swaps):
            if swap.target_ref is not None and not swap.target_ref.compiled:
                errors.append(
                    NotCompiledError(f"target of swap {i} was never compiled")
                )
        err = prepend_path(join_errors(errors), self.name)
        if err is not None:
            raise err


class Trigger(Reference):
    """The element that fires an interaction (``hx-post`` and friends)."""

    def __init__(
        self,
        interaction: Interaction,
        component: Component,
        event: str = "",
        include: str = "",
        vals: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(component, on_validate=interaction.check_swaps)
        self.event = event
        self.include = include
        self.vals = vals or {}

    def wire(self, method: str, path: str, target_id: str, swap: "SwapMethod") -> None:
        if not self.compiled:
            raise NotCompiledError("trigger was never compiled")
        attrs = self.find_tag().attrs
        for name in HTTP_METHODS:
            attrs.delete(f"hx-{name}")
        attrs.set(f"hx-{method}", path)
        attrs.delete("hx-target").set("hx-target", "#" + target_id)
        attrs.delete("hx-swap").set("hx-swap", swap.value)
        if self.event:
            attrs.delete("hx-trigger").set("hx-trigger", self.event)
        if self.include:
            attrs.delete("hx-include").set("hx-include", self.include)
        if self.vals:
            attrs.delete("hx-vals").set("hx-vals", str(escape(json.dumps(self.vals))))


class Swap(Component):
    """Target/content pair of an interaction.

    Compiling a swap compiles its target in place. Content is compiled at
    the interaction route when the target is validated, unless it was
    compiled elsewhere already.
    """

    def __init__(
        self,
        interaction: Interaction,
        method: Union[SwapMethod, str] = SwapMethod.OUTER_HTML,
        out_of_band: bool = False,
    ):
        self.interaction = interaction
        self.method = SwapMethod(method)
        self.force_out_of_band = out_of_band
        self.handler: Optional[Callable[..., Any]] = None
        self.target_ref: Optional[Reference] = None
        self.content_ref: Optional[Reference] = None
        self.errors: List[Exception] = []

    @property
    def out_of_band(self) -> bool:
        return self.force_out_of_band or self is not self.interaction.swaps[-1]

    def target(self, component: Component) -> "Swap":
        if self.target_ref is not None:
            self.errors.append(DuplicateError("swap target set twice"))
            return self
        self.target_ref = Reference(component, on_validate=self.resolve)
        return self

    def content(self, component: Component) -> "Swap":
        if self.content_ref is not None:
            self.errors.append(DuplicateError("swap content set twice"))
            return self
        self.content_ref = Reference(component)
        return self

    def update(self, component: Component) -> "Swap":
        """Use ``component`` as both target and content."""
        self.content(component)
        return self.target(self.content_ref)

    def compile(self, page: "Page") -> Optional[element.Element]:
        children: List[Optional[element.Element]] = [
            element.Error(prepend_path(err, self.interaction.name))
            for err in self.errors
        ]
        if self.target_ref is None:
            children.append(
                element.Error(
                    prepend_path(MissingTargetError("missing target"), self.interaction.name)
                )
            )
        else:
            children.append(page.compile(self.target_ref))
        return element.Fragment(children)

    def resolve(self, target: Reference) -> None:
        """Wire the swap once the whole tree has been compiled.

        Out-of-band content goes to the interaction route next to the
        in-band response, since htmx only reads ``hx-swap-oob`` elements
        from the response to the triggering request. When every swap is
        out-of-band the last one still points the triggers at the route,
        with ``hx-swap="none"``.
        """
        interaction = self.interaction
        if self.content_ref is None:
            raise prepend_path(MissingContentError("missing content"), interaction.name)
        target_id = target.id()
        assert target.page is not None
        route = interaction.route(target.page)

        if self.handler is not None:
            route.handle(self.handler)

        if self.out_of_band:
            route.compile(self.content_ref)
            self.content_ref.find_tag()
            route.add_out_of_band(Compiled(Mirror(self.content_ref, target_id, self.method)))
            if self is interaction.swaps[-1]:
                self.wire_triggers(route, target_id, SwapMethod.NONE)
            return

        route.add_interaction(self.content_ref)
        self.wire_triggers(route, target_id, self.method)

    def wire_triggers(self, route: "Page", target_id: str, method: SwapMethod) -> None:
        interaction = self.interaction
        if interaction.push_url is not None:
            route.use(set_header("HX-Push-Url", interaction.push_url))
        errors: List[Optional[Exception]] = []
        for trigger in interaction.triggers:
            try:
                trigger.wire(interaction.method, route.path(), target_id, method)
            except HxWireError as err:
                errors.append(err)
        err = prepend_path(join_errors(errors), interaction.name)
        if err is not None:
            raise err


class Mirror(element.Element):
    """Out-of-band copy of a swap's content tag, addressed to the target.

    The copy is taken when rendering, so attributes wired onto the content
    tag after the swap resolved still show up.
    """

    def __init__(self, content: Reference, target_id: str, method: SwapMethod):
        self.content = content
        self.target_id = target_id
        self.method = method

    def build(self) -> element.Tag:
        tag = self.content.find_tag()
        attrs = tag.attrs.copy()
        attrs.delete("id").set("id", self.target_id)
        attrs.delete("hx-swap-oob").set("hx-swap-oob", self.method.value)
        return element.Tag(tag.name, attrs, tag.content)

    def render(self, w: TextIO) -> None:
        self.build().render(w)

    def validate(self) -> Optional[Exception]:
        try:
            return self.build().validate()
        except HxWireError as err:
            return err

    def get_tags(self) -> List[element.Tag]:
        return [self.build()]
