"""Server-side HTML views for FastAPI with Jinja2 templates and layouts."""

from importlib.metadata import PackageNotFoundError, version

from fastapi_view.config import RenderOptions, ViewSettings
from fastapi_view.dependencies import get_reply, get_view_renderer
from fastapi_view.exceptions import (
    CompileOrExecuteError,
    ConfigError,
    ReadError,
    TemplateAccessError,
    ViewException,
)
from fastapi_view.plugin import setup_views
from fastapi_view.renderer import RenderCallOptions, ViewRenderer
from fastapi_view.sinks import Reply

try:
    __version__ = version("fastapi-view")
except PackageNotFoundError:
    __version__ = "dev"

__all__ = [
    "CompileOrExecuteError",
    "ConfigError",
    "ReadError",
    "RenderCallOptions",
    "RenderOptions",
    "Reply",
    "TemplateAccessError",
    "ViewException",
    "ViewRenderer",
    "ViewSettings",
    "get_reply",
    "get_view_renderer",
    "setup_views",
]
