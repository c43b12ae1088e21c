"""Server-sent event streams."""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import AsyncIterator, ClassVar, List, Optional, Union

from starlette.requests import Request
from starlette.responses import Response, StreamingResponse

from hxwire.core import element
from hxwire.core.attributes import Attributes
from hxwire.core.component import Component, HTMLElement
from hxwire.core.errors import ComponentError, HxWireError, Validator
from hxwire.core.interaction import SwapMethod
from hxwire.runtime.handler import Data
from hxwire.runtime.multiplexer import EventGenerator, Subscription
from hxwire.runtime.page import TEMPLATE_PREAMBLE, Page

logger = logging.getLogger(__name__)

DEFAULT_EVENT = "message"


class SSEEvent:
    """One server-sent event.

    ``data`` is either literal text or a component rendered for the stream's
    request when the event is written.
    """

    def __init__(self, data: Union[Component, str, None] = None, event: str = ""):
        self.data = data
        self.event = event

    def __repr__(self) -> str:
        return f"SSEEvent({self.data!r}, event={self.event!r})"

    def text(self, page: Page, request: Optional[Request] = None) -> str:
        if self.data is None:
            return ""
        if isinstance(self.data, str):
            return self.data
        # Events compile against a private page: they cannot register routes
        # on an application that is already built.
        slim = Page(path_prefix=page.path_prefix, data_prefix=page.data_prefix)
        el = slim.compile(self.data)
        if el is None:
            return ""
        err = el.validate()
        if err is not None:
            raise ComponentError(f"invalid event data: {err}")
        template = slim.template.env.from_string(
            TEMPLATE_PREAMBLE + element.render_to_string(el)
        )
        return template.render(request=request, data=Data())

    def encode(self, page: Page, request: Optional[Request] = None) -> str:
        lines = [f"event: {self.event or DEFAULT_EVENT}"]
        for line in self.text(page, request).split("\n"):
            lines.append(f"data: {line}")
        return "\n".join(lines) + "\n\n"


class SSEHandler:
    """Endpoint running an event generator for each connected client.

    The generator receives a :class:`Subscription` to send events into;
    the stream ends when the generator returns or the client disconnects.
    """

    def __init__(self, generator: EventGenerator, page: Page):
        self.generator = generator
        self.page = page

    async def __call__(self, request: Request) -> Response:
        return StreamingResponse(
            self.events(request, Subscription()),
            media_type="text/event-stream",
            headers={"Cache-Control": "no-cache", "Connection": "keep-alive"},
        )

    async def events(
        self, request: Request, stream: Subscription
    ) -> AsyncIterator[str]:
        task = asyncio.ensure_future(self.generator(stream))

        def finished(task: "asyncio.Future[None]") -> None:
            stream.cancel()
            if not task.cancelled() and task.exception() is not None:
                logger.error(
                    "event generator for %s failed",
                    request.url.path,
                    exc_info=task.exception(),
                )

        task.add_done_callback(finished)
        logger.debug("event stream opened: %s", request.url.path)
        try:
            while True:
                event = await stream.receive()
                if event is None:
                    break
                try:
                    yield event.encode(self.page, request)
                except HxWireError:
                    logger.exception("Error encoding event for %s", request.url.path)
        finally:
            stream.cancel()
            task.cancel()
            logger.debug("event stream closed: %s", request.url.path)


class Stream(Component):
    """A ``div`` connected to an event stream served below the page.

    Place :class:`StreamTarget` components inside to receive events.
    """

    def __init__(
        self,
        id: str,
        generator: EventGenerator,
        content: Optional[Component] = None,
        classes: Optional[List[str]] = None,
        attrs: Optional[Attributes] = None,
    ):
        self.id = id
        self.generator = generator
        self.content = content
        self.classes = classes or []
        self.attrs = attrs

    def compile(self, page: Page) -> Optional[element.Element]:
        Validator("stream").require_id(self.id).require_function(
            self.generator, "generator"
        ).check()
        stream_page = page.at_path("sse", self.id)
        stream_page.add_handler(SSEHandler(self.generator, page))

        attrs = self.attrs.copy() if self.attrs is not None else Attributes()
        attrs.set("id", self.id).set_all("class", *self.classes)
        attrs.set("hx-ext", "sse").set("sse-connect", stream_page.path())
        return element.Tag("div", attrs, page.compile(self.content))


@dataclass
class StreamTarget(HTMLElement):
    """Element swapped by events of an enclosing :class:`Stream`."""

    events: List[str] = field(default_factory=list)
    method: Union[SwapMethod, str] = SwapMethod.INNER_HTML

    tag_name: ClassVar[str] = "div"

    def build_attrs(self, page: Page) -> Attributes:
        attrs = super().build_attrs(page)
        attrs.set("sse-swap", ",".join(self.events or [DEFAULT_EVENT]))
        return attrs.set("hx-swap", SwapMethod(self.method).value)
