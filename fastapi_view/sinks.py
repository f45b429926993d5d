"""Response sinks: where a render call delivers its result.

The render pipeline never returns or raises across its await points; it
delivers exactly one value, an HTML string or an exception, to a sink.
"""

import asyncio
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any, Protocol

from fastapi import Request
from fastapi.responses import HTMLResponse, Response
from starlette.datastructures import MutableHeaders

from fastapi_view.error_handlers import build_error_response
from fastapi_view.logging_config import get_logger, log_with_context

if TYPE_CHECKING:
    from fastapi_view.renderer import RenderCallOptions, ViewRenderer


logger = get_logger(__name__)

RenderResult = str | BaseException


class ResponseSink(Protocol):
    """Capability set a render call needs from its destination."""

    locals: dict[str, Any]
    requested_path: str | None

    def get_header(self, name: str) -> str | None: ...

    def header(self, name: str, value: str) -> None: ...

    async def send(self, result: RenderResult) -> None: ...


class Reply:
    """Per-request sink that turns the render result into a Starlette response.

    Upstream dependencies may fill ``locals``; they are merged into every
    render context of this request.
    """

    def __init__(self, renderer: "ViewRenderer", request: Request | None = None, status_code: int = 200):
        self.renderer = renderer
        self.request = request
        self.status_code = status_code
        self.headers = MutableHeaders()
        self.locals: dict[str, Any] = {}
        self.response: Response | None = None

    @property
    def requested_path(self) -> str | None:
        """Path of the matched route, or the raw URL path before routing."""
        if self.request is None:
            return None
        route = self.request.scope.get("route")
        path = getattr(route, "path", None)
        return path or self.request.url.path

    @property
    def sent(self) -> bool:
        return self.response is not None

    def get_header(self, name: str) -> str | None:
        return self.headers.get(name)

    def header(self, name: str, value: str) -> "Reply":
        self.headers[name] = value
        return self

    async def send(self, result: RenderResult) -> None:
        if self.sent:
            log_with_context(
                logger,
                "warning",
                "Render result delivered twice, ignoring",
                path=self.requested_path,
                event_type="render_duplicate_send",
            )
            return

        if isinstance(result, BaseException):
            self.response = build_error_response(result, self.request)
            return

        self.response = HTMLResponse(content=result, status_code=self.status_code, headers=dict(self.headers))

    async def render(
        self,
        page: str | None = None,
        data: dict[str, Any] | None = None,
        options: "RenderCallOptions | None" = None,
    ) -> Response:
        """Render ``page`` into this reply and return the delivered response."""
        await self.renderer.render(self, page, data, options)
        if self.response is None:
            raise RuntimeError("render finished without delivering a response")
        return self.response


class LayoutCaptureSink:
    """Captures the inner page render and hands it to the layout step.

    Headers are ignored; the real sink receives them from the layout render.
    """

    def __init__(self, target: ResponseSink, on_body: Callable[[str], Awaitable[None]]):
        self.target = target
        self.on_body = on_body

    @property
    def locals(self) -> dict[str, Any]:
        return self.target.locals

    @property
    def requested_path(self) -> str | None:
        return self.target.requested_path

    def get_header(self, name: str) -> str | None:
        return None

    def header(self, name: str, value: str) -> None:
        pass

    async def send(self, result: RenderResult) -> None:
        if isinstance(result, BaseException):
            await self.target.send(result)
            return
        await self.on_body(result)


class FutureSink:
    """Settles an asyncio future with the render result."""

    def __init__(self) -> None:
        self.locals: dict[str, Any] = {}
        self.requested_path: str | None = None
        self.future: asyncio.Future[str] = asyncio.get_running_loop().create_future()

    def get_header(self, name: str) -> str | None:
        return None

    def header(self, name: str, value: str) -> None:
        pass

    async def send(self, result: RenderResult) -> None:
        if self.future.done():
            return
        if isinstance(result, BaseException):
            self.future.set_exception(result)
        else:
            self.future.set_result(result)
