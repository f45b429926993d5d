"""Registration of view rendering on a FastAPI application."""

from fastapi import FastAPI

from fastapi_view.config import ViewSettings, get_settings
from fastapi_view.error_handlers import register_error_handlers
from fastapi_view.exceptions import ConfigError
from fastapi_view.logging_config import get_logger, log_with_context
from fastapi_view.renderer import ViewRenderer

logger = get_logger(__name__)

PLUGIN_NAME = "fastapi-view"


def setup_views(app: FastAPI, settings: ViewSettings | None = None) -> ViewRenderer:
    """Create the view renderer and expose it on ``app.state``.

    The renderer is stored as ``app.state.<property_name>``; routes get a
    per-request ``Reply`` through the ``get_reply`` dependency.

    Args:
        app: FastAPI application instance
        settings: View settings, defaults to the environment-driven singleton

    Returns:
        The registered ViewRenderer

    Raises:
        ConfigError: If something is already registered under the property name
        TemplateAccessError: If the global layout template is not accessible
    """
    settings = settings or get_settings()
    property_name = settings.property_name

    if getattr(app.state, property_name, None) is not None:
        raise ConfigError(f'"{property_name}" is already registered on this application')

    try:
        renderer = ViewRenderer(settings)
    except Exception as e:
        log_with_context(
            logger,
            "error",
            "View setup failed",
            error=str(e),
            error_type=type(e).__name__,
            event_type="view_setup_error",
        )
        raise

    setattr(app.state, property_name, renderer)
    app.state.view_property_name = property_name
    registered = getattr(app.state, "registered_plugins", [])
    app.state.registered_plugins = [*registered, PLUGIN_NAME]

    register_error_handlers(app)

    log_with_context(
        logger,
        "info",
        "View rendering configured",
        property_name=property_name,
        templates_dir=str(settings.templates_dir),
        layout=settings.layout,
        event_type="view_setup",
    )
    return renderer
