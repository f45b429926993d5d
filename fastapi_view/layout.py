"""Layout composition: render a page, then render a layout around it as ``body``."""

from collections.abc import Awaitable, Callable, Mapping
from typing import TYPE_CHECKING, Any

from markupsafe import Markup

from fastapi_view.exceptions import ConfigError, ErrorCode
from fastapi_view.sinks import LayoutCaptureSink, ResponseSink

if TYPE_CHECKING:
    from fastapi_view.renderer import RenderCallOptions

RenderFn = Callable[
    [ResponseSink, str | None, Mapping[str, Any] | None, "RenderCallOptions | None"],
    Awaitable[None],
]


def merge_context(
    default_context: Mapping[str, Any],
    locals_: Mapping[str, Any] | None,
    data: Mapping[str, Any] | None,
) -> dict[str, Any]:
    """Shallow merge of the render context sources, later sources win."""
    return {**default_context, **(locals_ or {}), **(data or {})}


def with_layout(render: RenderFn, layout: str | None, default_context: Mapping[str, Any]) -> RenderFn:
    """Wrap ``render`` so its output is rendered again inside ``layout``.

    The page is rendered into a capture sink; its HTML becomes ``body`` in the
    layout context and the layout is rendered into the real sink. A failed
    page render is delivered as is and the layout is never rendered.
    A falsy ``layout`` returns ``render`` unchanged.
    """
    if not layout:
        return render

    async def render_with_layout(
        sink: ResponseSink,
        page: str | None,
        data: Mapping[str, Any] | None = None,
        options: "RenderCallOptions | None" = None,
    ) -> None:
        if options and options.get("layout"):
            await sink.send(
                ConfigError(
                    "A layout can either be set globally or on render, not both.",
                    code=ErrorCode.LAYOUT_CONFLICT,
                    details={"layout": layout, "render_layout": options["layout"]},
                )
            )
            return

        context = merge_context(default_context, sink.locals, data)

        async def render_layout(body: str) -> None:
            context["body"] = Markup(body)
            await render(sink, layout, context, options)

        await render(LayoutCaptureSink(sink, render_layout), page, context, options)

    return render_with_layout
