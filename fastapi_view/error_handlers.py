"""Error responses for failed renders and the matching exception handlers."""

from typing import Any

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from fastapi_view.exceptions import ErrorCode, ViewException
from fastapi_view.logging_config import get_logger, log_with_context

logger = get_logger(__name__)


def _request_fields(request: Request | None) -> dict[str, Any]:
    if request is None:
        return {}
    return {"method": request.method, "url": str(request.url)}


def build_error_response(exc: BaseException, request: Request | None = None) -> JSONResponse:
    """Turn a render failure into a structured JSON error response.

    View exceptions expose their code, message and details; anything else
    is reported as an opaque internal error.
    """
    if isinstance(exc, ViewException):
        log_with_context(
            logger,
            "warning",
            "View error",
            error_code=exc.code.value,
            error_message=exc.message,
            status_code=exc.status_code,
            event_type="view_error",
            **_request_fields(request),
        )
        error_content: dict[str, Any] = {"code": exc.code.value, "message": exc.message, "details": exc.details}
        return JSONResponse(status_code=exc.status_code, content={"error": error_content})

    log_with_context(
        logger,
        "error",
        "Unhandled render exception",
        error=str(exc),
        error_type=type(exc).__name__,
        event_type="unhandled_error",
        **_request_fields(request),
    )
    logger.error("Exception traceback:", exc_info=exc)

    # Don't expose internal error details to clients
    return JSONResponse(
        status_code=500,
        content={"error": {"code": ErrorCode.INTERNAL_ERROR.value, "message": "Internal server error"}},
    )


async def view_exception_handler(request: Request, exc: ViewException) -> JSONResponse:
    """Handle view exceptions raised outside a render call (e.g. in dependencies)."""
    return build_error_response(exc, request)


def register_error_handlers(app: FastAPI) -> None:
    """Register view exception handlers with the application.

    Args:
        app: FastAPI application instance
    """
    app.add_exception_handler(ViewException, view_exception_handler)
