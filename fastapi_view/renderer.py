"""Render orchestration: loader -> partials -> engine -> sink.

A render call moves through
``Start -> ValidatingLayout -> LoadingTemplate -> ResolvingPartials ->
Executing -> Delivered|Failed`` and delivers exactly one result to its sink.
Nothing is retried.
"""

from collections.abc import Callable, Mapping
from typing import Any, TypedDict

from fastapi_view.config import ViewSettings
from fastapi_view.engine import TemplateEngine
from fastapi_view.exceptions import ConfigError, ErrorCode, TemplateAccessError
from fastapi_view.layout import merge_context, with_layout
from fastapi_view.loader import TemplateLoader, get_page
from fastapi_view.logging_config import get_logger, log_with_context
from fastapi_view.partials import PartialResolver
from fastapi_view.sinks import FutureSink, ResponseSink

logger = get_logger(__name__)

DoneCallback = Callable[[BaseException | None, str | None], None]


class RenderCallOptions(TypedDict, total=False):
    """Per-call render options."""

    layout: str


class ViewRenderer:
    """Renders templates below the configured root into response sinks.

    Constructing a renderer registers the global helpers on the shared engine
    and validates the global layout.

    Raises:
        TemplateAccessError: If the global layout template is not accessible
    """

    def __init__(self, settings: ViewSettings, engine: TemplateEngine | None = None):
        self.settings = settings
        self.options = settings.options
        self.default_context = settings.default_context
        self.loader = TemplateLoader(settings.templates_dir, settings.charset, settings.options)
        self.partial_resolver = PartialResolver(self.loader)
        self.engine = engine or TemplateEngine()

        for name, helper in self.options.helpers.items():
            self.engine.register_helper(name, helper)

        if settings.layout:
            self.loader.layout_is_valid(settings.layout)

        self._render = with_layout(self._render_page, settings.layout, self.default_context)

    async def render(
        self,
        sink: ResponseSink,
        page: str | None,
        data: Mapping[str, Any] | None = None,
        options: RenderCallOptions | None = None,
    ) -> None:
        """Render ``page`` and deliver the HTML or the failure to ``sink``."""
        await self._render(sink, page, data, options)

    async def __call__(
        self,
        page: str | None,
        data: Mapping[str, Any] | None = None,
        options: RenderCallOptions | None = None,
        done: DoneCallback | None = None,
    ) -> str | None:
        """Render ``page`` outside of a request.

        Returns the HTML, or raises the render error. If ``done`` is given it
        is called as ``done(None, html)`` or ``done(error, None)`` instead and
        None is returned.
        """
        sink = FutureSink()
        await self.render(sink, page, data, options)

        try:
            html = await sink.future
        except Exception as e:
            if done is None:
                raise
            done(e, None)
            return None

        if done is None:
            return html
        done(None, html)
        return None

    async def _render_page(
        self,
        sink: ResponseSink,
        page: str | None,
        data: Mapping[str, Any] | None = None,
        options: RenderCallOptions | None = None,
    ) -> None:
        layout = options.get("layout") if options else None
        if layout:
            try:
                self.loader.layout_is_valid(layout)
            except TemplateAccessError as e:
                await sink.send(e)
                return
            await with_layout(self._render_page, layout, self.default_context)(sink, page, data)
            return

        if not page:
            await sink.send(ConfigError("Missing page", code=ErrorCode.MISSING_PAGE))
            return

        context = merge_context(self.default_context, sink.locals, data)
        page_file = page
        requested_path = sink.requested_path

        try:
            page_file = get_page(page)
            source = await self.loader.load(page, requested_path)
            partials = await self.partial_resolver.resolve_all(self.options.partials, requested_path)

            for name, partial_source in partials.items():
                self.engine.register_partial(name, self.engine.compile_partial(name, partial_source))

            if not sink.get_header("content-type"):
                sink.header("Content-Type", self.settings.content_type)

            html = await self.engine.execute(self.engine.compile(source), context)
        except Exception as e:
            log_with_context(
                logger,
                "warning",
                "Render failed",
                page=page_file,
                path=requested_path,
                error=str(e),
                error_type=type(e).__name__,
                event_type="render_failed",
            )
            await sink.send(e)
            return

        log_with_context(
            logger,
            "debug",
            "Render delivered",
            page=page_file,
            path=requested_path,
            event_type="render_delivered",
        )
        await sink.send(html)
