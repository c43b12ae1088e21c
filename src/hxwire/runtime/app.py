"""Main ASGI application."""

import logging
from typing import Any, Dict, List, Optional

from starlette.requests import Request
from starlette.responses import Response
from starlette.routing import Route, Router
from starlette.types import Receive, Scope, Send

from hxwire.runtime.handler import Endpoint, is_partial
from hxwire.runtime.page import Page

logger = logging.getLogger(__name__)

ROUTE_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE"]


def _function_endpoint(endpoint: Endpoint) -> Endpoint:
    # Route only treats plain functions as request/response endpoints.
    async def call(request: Request) -> Response:
        return await endpoint(request)

    return call


class HxWire:
    """ASGI application serving a compiled component tree.

    ``/`` renders the full document for regular browser requests. Partial
    requests (``HX-Request: true``) and event streams are dispatched to the
    interaction routes registered while compiling. The tree is compiled and
    built in the constructor, so structural errors raise
    :class:`~hxwire.core.errors.BuildError` at startup.
    """

    def __init__(
        self,
        root: Any,
        debug: bool = False,
        partial_header: str = "HX-Request",
        page: Optional[Page] = None,
    ) -> None:
        self.root = root
        self.debug = debug
        self.partial_header = partial_header
        self.page = page if page is not None else Page()
        self.page.add(root)

        endpoints = self.page.build(debug=debug)
        self.document: Optional[Endpoint] = endpoints.pop("/", None)
        self.endpoints: Dict[str, Endpoint] = endpoints
        self.router = Router(
            routes=[
                Route(path, _function_endpoint(endpoint), methods=ROUTE_METHODS)
                for path, endpoint in endpoints.items()
            ]
        )
        logger.info(
            "hxwire app built: %d interaction route(s)%s",
            len(endpoints),
            ", document at /" if self.document is not None else "",
        )

    @property
    def paths(self) -> List[str]:
        paths = sorted(self.endpoints)
        if self.document is not None:
            paths.insert(0, "/")
        return paths

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] == "http" and self.document is not None:
            request = Request(scope, receive)
            if not is_partial(request, self.partial_header):
                response = await self.document(request)
                await response(scope, receive, send)
                return
        await self.router(scope, receive, send)
