"""Template source loading from the template root directory."""

import asyncio
import os
from pathlib import Path, PurePosixPath

from fastapi_view.config import RenderOptions
from fastapi_view.exceptions import ReadError, TemplateAccessError
from fastapi_view.logging_config import get_logger, log_with_context

logger = get_logger(__name__)

TEMPLATE_EXTENSION = ".html"


def get_page(page: str) -> str:
    """Normalize a logical page name to its template file name.

    The extension, if any, is replaced by ``TEMPLATE_EXTENSION`` and the
    directory component is kept: ``"pages/about.hbs"`` -> ``"pages/about.html"``.
    """
    path = PurePosixPath(page)
    stem = path.stem
    # "index." has an empty extension
    if stem.endswith(".") and stem.strip("."):
        stem = stem[:-1]
    return str(path.with_name(stem + TEMPLATE_EXTENSION))


class TemplateLoader:
    """Reads template text below ``root`` and optionally minifies it."""

    def __init__(self, root: Path, charset: str = "utf-8", options: RenderOptions | None = None):
        self.root = root
        self.charset = charset
        self.options = options or RenderOptions()

    def use_html_minification(self, requested_path: str | None) -> bool:
        """Whether loaded text for ``requested_path`` goes through the minifier."""
        if self.options.use_html_minifier is None:
            return False
        return requested_path not in self.options.paths_to_exclude_html_minifier

    def resolve(self, file_name: str) -> Path:
        """Join ``file_name`` below the root; absolute names stay under it too."""
        return self.root.joinpath(file_name.lstrip("/"))

    def has_access(self, name: str) -> bool:
        """Check that the normalized template file exists and is readable."""
        try:
            path = self.resolve(get_page(name))
        except ValueError:
            return False
        return path.is_file() and os.access(path, os.R_OK)

    def layout_is_valid(self, layout: str) -> None:
        """Raise TemplateAccessError unless the layout template is reachable."""
        if not self.has_access(layout):
            log_with_context(
                logger,
                "warning",
                "Layout template is not accessible",
                layout=layout,
                root=str(self.root),
                event_type="layout_invalid",
            )
            raise TemplateAccessError(layout, details={"root": str(self.root)})

    async def read(self, file_name: str, requested_path: str | None = None) -> str:
        """Read ``root/file_name`` as text, minified when enabled.

        Raises:
            ReadError: If the file cannot be read or decoded
        """
        path = self.resolve(file_name)
        try:
            content = await asyncio.to_thread(path.read_text, encoding=self.charset)
        except (OSError, UnicodeDecodeError) as e:
            raise ReadError(file_name, str(e), details={"path": str(path)}) from e

        if self.use_html_minification(requested_path):
            minify = self.options.use_html_minifier
            content = minify(content, **self.options.html_minifier_options)

        log_with_context(
            logger,
            "debug",
            "Template loaded",
            template=file_name,
            minified=self.use_html_minification(requested_path),
            event_type="template_loaded",
        )
        return content

    async def load(self, page: str, requested_path: str | None = None) -> str:
        """Load the template for a logical page name (extension normalized)."""
        return await self.read(get_page(page), requested_path)
