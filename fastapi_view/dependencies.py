"""FastAPI dependencies for dependency injection."""

from fastapi import Request

from fastapi_view.renderer import ViewRenderer
from fastapi_view.sinks import Reply


def _property_name(request: Request) -> str:
    return getattr(request.app.state, "view_property_name", "view")


async def get_view_renderer(request: Request) -> ViewRenderer:
    """
    Get the view renderer registered by ``setup_views``.

    Args:
        request: The FastAPI request object.

    Returns:
        The shared ViewRenderer instance.

    Raises:
        RuntimeError: If views were not set up on the application.
    """
    renderer: ViewRenderer | None = getattr(request.app.state, _property_name(request), None)

    if renderer is None:
        raise RuntimeError("View renderer not initialized. Call setup_views(app) first.")

    return renderer


async def get_reply(request: Request) -> Reply:
    """
    Get the per-request reply, creating it on first use.

    The reply is cached on ``request.state`` so a dependency that fills
    ``reply.locals`` and the route handler share the same instance.

    Args:
        request: The FastAPI request object.

    Returns:
        The Reply bound to this request.
    """
    name = _property_name(request)
    reply: Reply | None = getattr(request.state, name, None)

    if reply is None:
        reply = Reply(await get_view_renderer(request), request)
        setattr(request.state, name, reply)

    return reply
