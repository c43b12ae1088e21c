"""Request handlers, middleware and request data helpers."""

import inspect
import logging
from typing import Any, Awaitable, Callable, Dict, Optional

from jinja2 import Template
from starlette.requests import Request
from starlette.responses import HTMLResponse, PlainTextResponse, Response

logger = logging.getLogger(__name__)

Endpoint = Callable[[Request], Awaitable[Response]]
Middleware = Callable[[Endpoint], Endpoint]


class Data(dict):
    """Request data. Allows dot-access to keys."""

    def __getattr__(self, name: str) -> Any:
        try:
            return self[name]
        except KeyError:
            raise AttributeError(name) from None

    def __setattr__(self, name: str, value: Any) -> None:
        self[name] = value


def request_data(request: Request) -> Data:
    """Return the mutable data dict attached to this request."""
    data = getattr(request.state, "data", None)
    if data is None:
        data = Data()
        request.state.data = data
    return data


def request_value(request: Request, key: str, default: str = "") -> str:
    """Read ``key`` from the query string (GET) or the parsed form.

    The form is parsed by :class:`TemplateHandler` (or :func:`parse_form`)
    before any template function runs.
    """
    if request.method == "GET":
        return request.query_params.get(key, default)
    form = getattr(request.state, "form", None)
    if form is None:
        return request.query_params.get(key, default)
    value = form.get(key, default)
    return value if isinstance(value, str) else default


async def parse_form(request: Request) -> None:
    if request.method != "GET" and getattr(request.state, "form", None) is None:
        request.state.form = await request.form()


def is_partial(request: Request, header: str = "HX-Request") -> bool:
    """True for htmx requests and event streams."""
    if request.headers.get(header, "").lower() == "true":
        return True
    return request.headers.get("accept", "").startswith("text/event-stream")


def is_request_at_path(path: str) -> Callable[[Request], bool]:
    """Predicate matching requests at ``path`` or below it."""
    prefix = path.rstrip("/")

    def at_path(r: Request) -> bool:
        current = r.url.path
        if not prefix:
            return True
        return current == prefix or current.startswith(prefix + "/")

    return at_path


async def call_handler(fn: Callable[..., Any], *args: Any) -> Any:
    result = fn(*args)
    if inspect.isawaitable(result):
        result = await result
    return result


def handle(fn: Callable[[Request], Any]) -> Middleware:
    """Run ``fn(request)`` before the endpoint.

    ``fn`` may be sync or async. A returned dict is merged into the request
    data; a returned :class:`Response` short-circuits the endpoint.
    """

    def middleware(endpoint: Endpoint) -> Endpoint:
        async def wrapped(request: Request) -> Response:
            await parse_form(request)
            result = await call_handler(fn, request)
            if isinstance(result, Response):
                return result
            if isinstance(result, dict):
                request_data(request).update(result)
            return await endpoint(request)

        return wrapped

    return middleware


def load_data(fn: Callable[[Request], Any], key: Optional[str] = None) -> Middleware:
    """Load request data before rendering, optionally under ``key``."""

    def loader(request: Request) -> Any:
        result = fn(request)
        if key is None:
            return result
        if inspect.isawaitable(result):

            async def keyed() -> Dict[str, Any]:
                return {key: await result}

            return keyed()
        return {key: result}

    return handle(loader)


def set_header(name: str, value: str) -> Middleware:
    """Set a response header, e.g. ``HX-Push-Url``."""

    def middleware(endpoint: Endpoint) -> Endpoint:
        async def wrapped(request: Request) -> Response:
            response = await endpoint(request)
            response.headers[name] = value
            return response

        return wrapped

    return middleware


def chain(endpoint: Endpoint, middleware: list) -> Endpoint:
    """Wrap ``endpoint`` so the first middleware runs outermost."""
    for m in reversed(middleware):
        endpoint = m(endpoint)
    return endpoint


class TemplateHandler:
    """Renders one built template per request."""

    def __init__(self, template: Template, name: str, debug: bool = False):
        self.template = template
        self.name = name
        self.debug = debug

    async def __call__(self, request: Request) -> Response:
        await parse_form(request)
        try:
            body = self.template.render(request=request, data=request_data(request))
        except Exception as exc:
            logger.exception(
                "Error rendering template %s for %s", self.name, request.url.path
            )
            message = "error rendering template"
            if self.debug:
                message = f"{message}: {exc}"
            return PlainTextResponse(message, status_code=500)
        return HTMLResponse(body)
