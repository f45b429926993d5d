"""Custom exceptions for view rendering with HTTP status codes."""

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Error codes for structured error responses."""

    # Generic errors
    VIEW_ERROR = "VIEW_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"

    # Configuration errors
    CONFIG_ERROR = "CONFIG_ERROR"
    MISSING_PAGE = "MISSING_PAGE"
    LAYOUT_CONFLICT = "LAYOUT_CONFLICT"

    # Template errors
    TEMPLATE_ACCESS_ERROR = "TEMPLATE_ACCESS_ERROR"
    TEMPLATE_READ_ERROR = "TEMPLATE_READ_ERROR"
    TEMPLATE_RENDER_ERROR = "TEMPLATE_RENDER_ERROR"


class ViewException(Exception):
    """Base exception for view errors with HTTP status code support.

    Every error raised inside the render pipeline inherits from this class so
    it can be delivered to a response sink and turned into an error response.
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.VIEW_ERROR,
        status_code: int = 500,
        details: dict[str, Any] | None = None,
    ):
        """Initialize view exception.

        Args:
            message: Human-readable error message
            code: Error code from ErrorCode enum
            status_code: HTTP status code (default 500)
            details: Additional error context/details
        """
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)


class ConfigError(ViewException):
    """Invalid render configuration (missing page, conflicting layouts, duplicate setup)."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.CONFIG_ERROR,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, code=code, status_code=500, details=details)


class TemplateAccessError(ViewException):
    """Layout or template file is not reachable on the filesystem."""

    def __init__(self, template: str, details: dict[str, Any] | None = None):
        self.template = template
        super().__init__(
            f'unable to access template "{template}"',
            code=ErrorCode.TEMPLATE_ACCESS_ERROR,
            status_code=500,
            details=details,
        )


class ReadError(ViewException):
    """Template or partial text could not be read."""

    def __init__(self, path: str, reason: str, details: dict[str, Any] | None = None):
        self.path = path
        super().__init__(
            f'unable to read template "{path}": {reason}',
            code=ErrorCode.TEMPLATE_READ_ERROR,
            status_code=500,
            details=details,
        )


class CompileOrExecuteError(ViewException):
    """Template compilation or execution (including a helper) failed."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(
            message,
            code=ErrorCode.TEMPLATE_RENDER_ERROR,
            status_code=500,
            details=details,
        )
