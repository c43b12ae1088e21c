"""Forms validated on the server."""

from dataclasses import dataclass
from typing import Any, Callable, List, Optional

from starlette.requests import Request

from hxwire.core import element
from hxwire.core.attributes import Attributes
from hxwire.core.component import Component, Input
from hxwire.core.errors import Validator
from hxwire.core.template import Condition, Conditions
from hxwire.runtime.handler import call_handler
from hxwire.runtime.page import Page

Action = Callable[[Request], Any]


def form_failed(r: Request) -> bool:
    return getattr(r.state, "form_error", None) is not None


class Form(Component):
    """A form posting to its own route.

    ``action(request)`` runs for every submission. It may return a dict,
    merged into the request data for ``success``. Raising ``ValueError``
    renders ``error`` instead, with the message available as
    ``Value("error")``. The outcome replaces the ``<id>-results`` element.
    """

    def __init__(
        self,
        id: str,
        action: Optional[Action],
        success: Optional[Component],
        error: Optional[Component],
        content: Optional[Component] = None,
        classes: Optional[List[str]] = None,
        attrs: Optional[Attributes] = None,
    ):
        self.id = id
        self.action = action
        self.success = success
        self.error = error
        self.content = content
        self.classes = classes or []
        self.attrs = attrs

    @property
    def results_id(self) -> str:
        return f"{self.id}-results"

    async def run_action(self, request: Request) -> Any:
        try:
            return await call_handler(self.action, request)
        except ValueError as err:
            request.state.form_error = str(err)
            return {"error": str(err)}

    def compile(self, page: Page) -> Optional[element.Element]:
        Validator("form").require_id(self.id).require_function(
            self.action, "action"
        ).require_content(self.success, "success").require_content(
            self.error, "error"
        ).check()

        route = page.at_path(self.id)
        route.handle(self.run_action)
        route.add_interaction(
            Conditions(Condition(form_failed, self.error), Condition(None, self.success))
        )

        attrs = self.attrs.copy() if self.attrs is not None else Attributes()
        attrs.set("id", self.id).set_all("class", *self.classes)
        attrs.set("hx-post", route.path()).set("hx-target", "#" + self.results_id)
        results = element.Tag("div", Attributes().set("id", self.results_id))
        return element.Labeled(
            "Form",
            element.Tag(
                "form", attrs, element.Fragment([page.compile(self.content), results])
            ),
            enclose=True,
        )


@dataclass
class InputText(Input):
    type: str = "text"


@dataclass
class InputHidden(Input):
    type: str = "hidden"


@dataclass
class InputSubmit(Input):
    type: str = "submit"
    value: str = "Submit"
